from __future__ import annotations

import pytest

from mcq_trainer.trainer.cursor import AnswerEvent
from mcq_trainer.trainer.progress import (
    ProgressTracker,
    completion_percent,
    rounded_percent,
)
from mcq_trainer.trainer.records import Slot


def test_record_counts_and_ids() -> None:
    tracker = ProgressTracker()

    tracker.record(AnswerEvent("q1", Slot.A, Slot.A))
    tracker.record(AnswerEvent("q2", Slot.B, Slot.A))

    assert tracker.answered_count == 2
    assert tracker.correct_count == 1
    assert tracker.answered_ids == frozenset({"q1", "q2"})
    assert tracker.accuracy == 50
    assert tracker.has_answered("q1")


def test_same_id_in_later_session_counts_but_is_stored_once() -> None:
    tracker = ProgressTracker()

    tracker.record_answer("q1", True)
    tracker.record_answer("q1", False)

    assert tracker.answered_count == 2
    assert tracker.correct_count == 1
    assert tracker.answered_ids == frozenset({"q1"})


def test_accuracy_is_zero_without_answers() -> None:
    assert ProgressTracker().accuracy == 0


def test_accuracy_rounds() -> None:
    tracker = ProgressTracker()
    for was_correct in (True, True, False):
        tracker.record_answer(f"id-{was_correct}", was_correct)

    assert tracker.accuracy == 67


def test_reset_clears_everything() -> None:
    tracker = ProgressTracker()
    tracker.record_answer("q1", True)

    tracker.reset()

    assert tracker.answered_count == 0
    assert tracker.correct_count == 0
    assert tracker.answered_ids == frozenset()
    assert tracker.accuracy == 0


def test_answered_ids_view_is_a_copy() -> None:
    tracker = ProgressTracker()
    tracker.record_answer("q1", True)
    view = tracker.answered_ids

    tracker.reset()

    assert view == frozenset({"q1"})


@pytest.mark.parametrize(
    ("position", "revealed", "length", "expected"),
    [
        (0, False, 4, 0),
        (0, True, 4, 25),
        (3, True, 4, 100),
        (1, False, 3, 33),
        (1, True, 3, 67),
        (0, True, 8, 13),
        (None, False, 0, 0),
        (0, True, 0, 0),
    ],
)
def test_completion_percent(position, revealed, length, expected) -> None:
    assert completion_percent(position, revealed, length) == expected


def test_rounded_percent_handles_zero_denominator() -> None:
    assert rounded_percent(3, 0) == 0
    assert rounded_percent(1, 2) == 50
