import threading

import pytest

from src.attendance_ledger.attendance_ledger.common.locks import KeyedLocks
from src.attendance_ledger.attendance_ledger.common.retry import retry_on_conflict
from src.attendance_ledger.attendance_ledger.core.exceptions import ConcurrentModification


def test_lock_registry_shrinks_when_released():
    locks = KeyedLocks()

    with locks.hold("emp"):
        with locks.hold("emp"):
            assert len(locks) == 1
        with locks.hold("emp2"):
            assert len(locks) == 2
        assert len(locks) == 1

    assert len(locks) == 0


def test_writers_on_one_key_are_serialized():
    locks = KeyedLocks()
    order = []
    entered = threading.Event()

    def second():
        entered.set()
        with locks.hold("emp"):
            order.append("second")

    with locks.hold("emp"):
        worker = threading.Thread(target=second)
        worker.start()
        entered.wait(1)
        order.append("first")
    worker.join(2)

    assert order == ["first", "second"]
    assert len(locks) == 0


def test_retry_returns_after_transient_conflicts():
    calls = []

    def operation():
        calls.append(1)
        if len(calls) < 3:
            raise ConcurrentModification("lost race")
        return "done"

    assert retry_on_conflict(operation, attempts=3, label="test") == "done"
    assert len(calls) == 3


def test_retry_gives_up_with_the_last_conflict():
    calls = []

    def operation():
        calls.append(1)
        raise ConcurrentModification(f"conflict {len(calls)}")

    with pytest.raises(ConcurrentModification, match="conflict 3"):
        retry_on_conflict(operation, attempts=3, label="test")
    assert len(calls) == 3


def test_retry_runs_once_when_attempts_is_not_positive():
    calls = []

    def operation():
        calls.append(1)
        raise ConcurrentModification("conflict")

    with pytest.raises(ConcurrentModification):
        retry_on_conflict(operation, attempts=0, label="test")
    assert calls == [1]
