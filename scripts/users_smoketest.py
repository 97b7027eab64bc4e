from __future__ import annotations

import sys
from pathlib import Path

# Allow running as: python scripts/users_smoketest.py
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from fastapi.testclient import TestClient

from user_registry.main import create_app
from user_registry.settings import Settings


def main() -> int:
    c = TestClient(create_app(Settings(load_sample_users=True)))

    r = c.get("/api/v1/users")
    print("/users(seeded)", r.status_code, r.json())

    r = c.post("/api/v1/users", json={"name": "Eve", "email": "eve@x.com", "age": 22})
    print("POST /users", r.status_code, r.json())
    if r.status_code != 201:
        return 1

    r = c.post("/api/v1/users", json={"name": "Bob", "email": "eve@x.com", "age": 40})
    print("POST /users(duplicate)", r.status_code, r.json())
    if r.status_code != 409:
        return 1

    r = c.delete("/api/v1/users/1")
    print("DELETE /users/1", r.status_code, r.json())

    r = c.get("/api/v1/users/count")
    print("/users/count", r.status_code, r.json())

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
