from __future__ import annotations

import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

from user_registry.errors import ConflictError
from user_registry.user_store import InMemoryUserStore


def test_concurrent_creates_with_same_email_commit_once() -> None:
    store = InMemoryUserStore()
    start = threading.Barrier(32)

    def attempt(i: int) -> str:
        start.wait()
        try:
            store.create(name=f"User {i}", email="same@x.com", age=20)
            return "ok"
        except ConflictError:
            return "conflict"

    with ThreadPoolExecutor(max_workers=32) as pool:
        outcomes = Counter(pool.map(attempt, range(32)))

    assert outcomes == Counter({"ok": 1, "conflict": 31})
    assert store.count() == 1


def test_concurrent_creates_get_unique_increasing_ids() -> None:
    store = InMemoryUserStore()

    def create(i: int) -> int:
        return store.create(name=f"U{i}", email=f"u{i}@x.com", age=1 + i % 90).id

    with ThreadPoolExecutor(max_workers=16) as pool:
        ids = list(pool.map(create, range(400)))

    assert sorted(ids) == list(range(1, 401))
    # Insertion order follows id issue order.
    assert [u.id for u in store.list_all()] == sorted(ids)
    assert store.count() == 400


def test_update_and_create_racing_for_one_email_never_duplicate() -> None:
    for round_no in range(25):
        store = InMemoryUserStore()
        owner = store.create(name="Owner", email="owner@x.com", age=30)
        target = f"taken-{round_no}@x.com"
        start = threading.Barrier(2)
        results: list[str] = []

        def do_update() -> None:
            start.wait()
            try:
                store.update(owner.id, name="Owner", email=target, age=30)
                results.append("update")
            except ConflictError:
                results.append("update-conflict")

        def do_create() -> None:
            start.wait()
            try:
                store.create(name="Newcomer", email=target, age=30)
                results.append("create")
            except ConflictError:
                results.append("create-conflict")

        threads = [threading.Thread(target=do_update), threading.Thread(target=do_create)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        emails = [u.email for u in store.list_all()]
        assert emails.count(target) == 1
        assert len(set(emails)) == len(emails)
        assert sorted(results) in (["create", "update-conflict"], ["create-conflict", "update"])


def test_readers_see_count_consistent_with_list_during_writes() -> None:
    store = InMemoryUserStore()
    mismatches: list[tuple[int, int]] = []

    def writer() -> None:
        for i in range(600):
            user = store.create(name=f"W{i}", email=f"w{i}@x.com", age=20)
            if i % 3 == 0:
                store.delete(user.id)

    def reader() -> None:
        for _ in range(300):
            users = store.list_all()
            ids = [u.id for u in users]
            if ids != sorted(ids) or len(set(ids)) != len(ids):
                mismatches.append((len(ids), len(set(ids))))

    w = threading.Thread(target=writer)
    w.start()
    readers = [threading.Thread(target=reader) for _ in range(4)]
    for r in readers:
        r.start()
    for r in readers:
        r.join(timeout=10)
    w.join(timeout=10)

    assert mismatches == []
    assert store.count() == len(store.list_all())


def test_clear_while_creating_leaves_consistent_state() -> None:
    store = InMemoryUserStore()

    def create(i: int) -> None:
        try:
            store.create(name=f"U{i}", email=f"u{i}@x.com", age=20)
        except ConflictError:
            pass
        if i % 50 == 0:
            store.clear()

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(create, range(300)))

    users = store.list_all()
    assert len({u.email for u in users}) == len(users)
    assert len({u.id for u in users}) == len(users)
    assert store.count() == len(users)
