# tests/test_views.py

from __future__ import annotations

import random
from datetime import UTC, datetime

from taskflow.tasks.task_models import DueClass, Tab, Task, TaskStats
from taskflow.tasks.views import build_view, classify, compute_stats, filter_by_tab, sort_for_display

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC).timestamp()
MIN = 60.0
HOUR = 3600.0


def _task(tid: str, due: float | None = None, completed: bool = False) -> Task:
    return Task(id=tid, title=f"task {tid}", created_at=NOW - HOUR, due_at=due, completed=completed)


def test_classify_examples() -> None:
    assert classify(_task("1", NOW + 10 * MIN), NOW) == DueClass.DUE_SOON
    assert classify(_task("2", NOW - 5 * MIN), NOW) == DueClass.OVERDUE
    assert classify(_task("3", NOW + 2 * HOUR), NOW) == DueClass.SCHEDULED
    assert classify(_task("4", None), NOW) == DueClass.NONE


def test_classify_boundaries_and_threshold() -> None:
    assert classify(_task("a", NOW), NOW) == DueClass.DUE_SOON
    assert classify(_task("b", NOW + 15 * MIN), NOW) == DueClass.DUE_SOON
    assert classify(_task("c", NOW + 15 * MIN + 1), NOW) == DueClass.SCHEDULED
    assert classify(_task("d", NOW + 20 * MIN), NOW, threshold_minutes=30) == DueClass.DUE_SOON


def test_classify_completed_task_with_due_is_scheduled() -> None:
    assert classify(_task("p", NOW - HOUR, completed=True), NOW) == DueClass.SCHEDULED
    assert classify(_task("s", NOW + MIN, completed=True), NOW) == DueClass.SCHEDULED
    assert classify(_task("n", None, completed=True), NOW) == DueClass.NONE


def test_sort_example_incomplete_dated_undated_completed() -> None:
    a = _task("A", NOW + HOUR)
    b = _task("B", NOW - HOUR, completed=True)
    c = _task("C", None)
    assert [t.id for t in sort_for_display([a, b, c])] == ["A", "C", "B"]


def test_sort_orders_by_due_and_is_stable_for_equal_keys() -> None:
    late = _task("late", NOW + 2 * HOUR)
    early = _task("early", NOW + HOUR)
    same1 = _task("same1", NOW + HOUR)
    none1 = _task("none1")
    none2 = _task("none2")
    done1 = _task("done1", completed=True)
    done2 = _task("done2", completed=True)

    out = sort_for_display([none1, done1, late, early, none2, same1, done2])
    assert [t.id for t in out] == ["early", "same1", "late", "none1", "none2", "done1", "done2"]


def test_sort_is_idempotent_and_completed_last() -> None:
    rng = random.Random(7)
    tasks = [
        _task(
            str(i),
            due=rng.choice([None, NOW - HOUR, NOW, NOW + HOUR, NOW + rng.randint(1, 10) * HOUR]),
            completed=rng.random() < 0.4,
        )
        for i in range(40)
    ]
    once = sort_for_display(tasks)
    assert sort_for_display(once) == once

    flags = [t.completed for t in once]
    assert flags == sorted(flags)


def test_filter_all_is_identity() -> None:
    tasks = [_task("1", NOW + HOUR), _task("2"), _task("3", completed=True)]
    assert filter_by_tab(tasks, Tab.ALL, NOW) == tasks


def test_filter_overdue_only_incomplete_past_due() -> None:
    tasks = [
        _task("late", NOW - MIN),
        _task("late-done", NOW - MIN, completed=True),
        _task("soon", NOW + MIN),
        _task("none"),
    ]
    out = filter_by_tab(tasks, "overdue", NOW)
    assert [t.id for t in out] == ["late"]
    assert all(not t.completed and t.due_at is not None and t.due_at < NOW for t in out)


def test_filter_today_uses_calendar_date() -> None:
    start_of_day = datetime(2026, 10, 18, 0, 30, tzinfo=UTC).timestamp()
    end_of_day = datetime(2026, 10, 18, 23, 59, tzinfo=UTC).timestamp()
    yesterday = datetime(2026, 10, 17, 23, 59, tzinfo=UTC).timestamp()
    tomorrow = datetime(2026, 10, 19, 0, 0, tzinfo=UTC).timestamp()
    tasks = [
        _task("morning", start_of_day, completed=True),
        _task("night", end_of_day),
        _task("yesterday", yesterday),
        _task("tomorrow", tomorrow),
        _task("none"),
    ]
    out = filter_by_tab(tasks, Tab.TODAY, NOW, tz=UTC)
    assert [t.id for t in out] == ["morning", "night"]


def test_filter_upcoming_is_strictly_after_now() -> None:
    tasks = [
        _task("now", NOW),
        _task("future", NOW + MIN),
        _task("future-done", NOW + HOUR, completed=True),
        _task("past", NOW - MIN),
        _task("none"),
    ]
    out = filter_by_tab(tasks, Tab.UPCOMING, NOW)
    assert [t.id for t in out] == ["future", "future-done"]


def test_compute_stats() -> None:
    tasks = [_task("1"), _task("2", NOW + HOUR), _task("3", completed=True)]
    assert compute_stats(tasks) == TaskStats(pending=2, done=1)
    assert compute_stats([]) == TaskStats(pending=0, done=0)


def test_build_view_sorts_then_filters_and_counts_everything() -> None:
    tasks = [
        _task("undated"),
        _task("late2", NOW - MIN),
        _task("late1", NOW - HOUR),
        _task("done", NOW - HOUR, completed=True),
    ]
    view = build_view(tasks, Tab.OVERDUE, NOW, tz=UTC)
    assert view.tab == Tab.OVERDUE
    assert [t.id for t in view.tasks] == ["late1", "late2"]
    assert view.stats == TaskStats(pending=3, done=1)
