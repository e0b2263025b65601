"""Tests for the per-user conversation context store."""

import threading

import pytest

from matchengine.assistant.context_store import InMemoryContextStore


class TestInMemoryContextStore:
    def test_unknown_user_is_empty(self) -> None:
        store = InMemoryContextStore()
        assert store.get(1) == []
        assert store.turn_count(1) == 0

    def test_append_and_get_in_order(self) -> None:
        store = InMemoryContextStore()
        store.append(1, "user", "hello")
        store.append(1, "assistant", "hi there")

        turns = store.get(1)
        assert [(t.role, t.text) for t in turns] == [("user", "hello"), ("assistant", "hi there")]

    def test_fifteen_appends_keep_last_ten(self) -> None:
        store = InMemoryContextStore(max_turns=10)
        for i in range(15):
            store.append(1, "user", f"msg {i}")

        turns = store.get(1)
        assert len(turns) == 10
        assert [t.text for t in turns] == [f"msg {i}" for i in range(5, 15)]

    def test_eleventh_turn_evicts_oldest(self) -> None:
        store = InMemoryContextStore()
        for i in range(11):
            store.append(1, "user", str(i))
        assert store.get(1)[0].text == "1"

    def test_users_are_isolated(self) -> None:
        store = InMemoryContextStore()
        store.append(1, "user", "from one")
        store.append(2, "user", "from two")
        assert [t.text for t in store.get(1)] == ["from one"]
        assert [t.text for t in store.get(2)] == ["from two"]

    def test_get_returns_snapshot(self) -> None:
        store = InMemoryContextStore()
        store.append(1, "user", "a")
        snapshot = store.get(1)
        store.append(1, "user", "b")
        assert len(snapshot) == 1

    def test_max_turns_validated(self) -> None:
        with pytest.raises(ValueError, match="at least 1"):
            InMemoryContextStore(max_turns=0)

    def test_concurrent_exchanges_stay_paired(self) -> None:
        store = InMemoryContextStore(max_turns=1000)
        barrier = threading.Barrier(8)

        def worker(n: int) -> None:
            barrier.wait()
            for i in range(50):
                store.append_exchange(
                    1, [("user", f"q{n}-{i}"), ("assistant", f"a{n}-{i}")],
                )

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        turns = store.get(1)
        assert len(turns) == 800
        for question, answer in zip(turns[::2], turns[1::2], strict=True):
            assert question.role == "user"
            assert answer.role == "assistant"
            assert answer.text == "a" + question.text[1:]

    def test_concurrent_users_do_not_lose_updates(self) -> None:
        store = InMemoryContextStore(max_turns=100)

        def worker(user_id: int) -> None:
            for i in range(100):
                store.append(user_id, "user", str(i))

        threads = [threading.Thread(target=worker, args=(u,)) for u in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for user_id in range(10):
            assert [t.text for t in store.get(user_id)] == [str(i) for i in range(100)]
