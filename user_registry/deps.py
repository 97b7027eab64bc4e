from __future__ import annotations

from fastapi import Request

from user_registry.settings import Settings
from user_registry.user_store import InMemoryUserStore


def get_settings_dep(request: Request) -> Settings:
    """FastAPI dependency for the settings the app was built with.

    Tests swap these through ``app.dependency_overrides[get_settings_dep]``.
    """
    return request.app.state.settings


def get_user_store(request: Request) -> InMemoryUserStore:
    # Built once by create_app() and held on app.state for the process lifetime.
    return request.app.state.user_store
