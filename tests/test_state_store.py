# tests/test_state_store.py

from __future__ import annotations

import threading

from scratchpad.core.state_store import NOTES_KEY, TASKS_KEY, ScratchpadStore, badge_for
from scratchpad.storage.kv_store import MemoryKeyValueStore
from scratchpad.tasks.task_models import Priority, Task


def test_fresh_store_defaults(store: ScratchpadStore) -> None:
    assert store.get_notes() == ""
    assert store.get_tasks() == []
    assert store.badge() is None


def test_notes_roundtrip_verbatim(store: ScratchpadStore) -> None:
    text = "  # Title\n\n*keep* trailing spaces  "
    store.set_notes(text)
    assert store.get_notes() == text


def test_set_tasks_drops_invalid_and_keeps_order(store: ScratchpadStore) -> None:
    stored = store.set_tasks(
        [
            Task("a", priority=Priority.HIGH),
            Task("   "),
            Task("b", done=True),
            Task(""),
            Task("c", priority=Priority.LOW),
        ]
    )
    assert [t.text for t in stored] == ["a", "b", "c"]
    assert store.get_tasks() == stored


def test_stored_priority_is_omitted_when_absent(kv: MemoryKeyValueStore, store: ScratchpadStore) -> None:
    store.set_tasks([Task("x"), Task("y", priority=Priority.MEDIUM)])
    assert kv.get(TASKS_KEY) == [
        {"text": "x", "done": False},
        {"text": "y", "done": False, "priority": "medium"},
    ]


def test_corrupt_stored_values_read_as_defaults() -> None:
    kv = MemoryKeyValueStore(
        {
            NOTES_KEY: 42,
            TASKS_KEY: [{"text": "ok"}, "junk", {"text": "  "}, {"done": True}, {"text": "p", "priority": "urgent"}],
        }
    )
    store = ScratchpadStore(kv)
    assert store.get_notes() == ""
    assert store.get_tasks() == [Task("ok"), Task("p", priority=None)]


def test_clear_all_resets_both_values(store: ScratchpadStore) -> None:
    store.set_notes("hello")
    store.set_tasks([Task("a")])
    store.clear_all()
    assert store.snapshot() == ("", [])
    assert store.badge() is None


def test_replace_all_sets_both(store: ScratchpadStore) -> None:
    store.replace_all("new", [Task("t1"), Task(" ")])
    notes, tasks = store.snapshot()
    assert notes == "new"
    assert tasks == [Task("t1")]


def test_pending_count_and_badge(store: ScratchpadStore) -> None:
    store.set_tasks([Task("a"), Task("b", done=True), Task("c")])
    assert store.pending_count() == 2

    badge = store.badge()
    assert badge is not None
    assert badge.value == 2
    assert badge.tooltip == "2 pending task(s)"


def test_badge_is_cleared_when_nothing_pending() -> None:
    assert badge_for([]) is None
    assert badge_for([Task("done", done=True)]) is None


def test_reads_return_copies(store: ScratchpadStore) -> None:
    store.set_tasks([Task("a")])
    tasks = store.get_tasks()
    tasks.append(Task("b"))
    assert store.get_tasks() == [Task("a")]


def test_blank_task_is_dropped_before_counting(store: ScratchpadStore) -> None:
    stored = store.set_tasks([Task("  "), Task("Buy milk", priority=Priority.HIGH)])
    assert stored == [Task("Buy milk", priority=Priority.HIGH)]
    assert store.get_tasks() == stored
    assert store.pending_count() == 1


def test_concurrent_reader_never_sees_half_applied_writes(store: ScratchpadStore) -> None:
    full = ("x", [Task("a")])
    empty = ("", [])
    store.replace_all(*full)

    stop = threading.Event()
    errors: list[BaseException] = []

    def writer() -> None:
        try:
            while not stop.is_set():
                store.replace_all("x", [Task("a")])
                store.clear_all()
        except BaseException as e:
            errors.append(e)

    t = threading.Thread(target=writer, name="store-writer", daemon=True)
    t.start()
    seen: list[tuple[str, list[Task]]] = []
    try:
        for _ in range(2000):
            seen.append(store.snapshot())
    finally:
        stop.set()
        t.join(timeout=5.0)

    assert errors == []
    bad = [pair for pair in seen if pair not in (full, empty)]
    assert bad == []
