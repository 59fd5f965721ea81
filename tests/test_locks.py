import threading
import time

from src.core.locks import KeyedLock
from src.services.storage import InMemoryApprovalLedger


def test_lock_is_dropped_after_release():
    locks = KeyedLock()

    with locks.hold("pr-001"):
        assert len(locks) == 1

    assert len(locks) == 0


def test_lock_survives_while_another_caller_waits():
    locks = KeyedLock()
    order = []
    started = threading.Event()

    def waiter():
        started.set()
        with locks.hold("pr-001"):
            order.append("waiter")

    with locks.hold("pr-001"):
        thread = threading.Thread(target=waiter)
        thread.start()
        started.wait()
        time.sleep(0.05)
        order.append("holder")
        assert len(locks) == 1

    thread.join()
    assert order == ["holder", "waiter"]
    assert len(locks) == 0


def test_ledger_does_not_accumulate_locks():
    ledger = InMemoryApprovalLedger()

    for i in range(50):
        ledger.append(f"pr-{i:03d}", 1, "approved", "user-001")
        ledger.decisions_for(f"pr-{i:03d}")

    assert len(ledger._locks) == 0
