from __future__ import annotations

import logging
from typing import Any, Dict, List

from user_registry.user_store import InMemoryUserStore, User

logger = logging.getLogger(__name__)

SAMPLE_USERS: List[Dict[str, Any]] = [
    {"name": "John Doe", "email": "john@example.com", "age": 30},
    {"name": "Jane Smith", "email": "jane@example.com", "age": 25},
]


def load_sample_users(store: InMemoryUserStore) -> List[User]:
    users = store.load(SAMPLE_USERS)
    logger.info("Loaded %d sample users", len(users))
    return users
