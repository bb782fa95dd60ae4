"""Answer bookkeeping that survives session rebuilds."""

from __future__ import annotations

import math

from .cursor import AnswerEvent


def rounded_percent(numerator: float, denominator: float) -> int:
    """Percentage rounded half up; 0 when ``denominator`` is 0."""

    if denominator <= 0:
        return 0
    return int(math.floor(numerator / denominator * 100 + 0.5))


def completion_percent(
    position: int | None, revealed: bool, length: int
) -> int:
    if not length or position is None:
        return 0
    return rounded_percent(position + (1 if revealed else 0), length)


class ProgressTracker:
    """Counts answers and remembers which question ids were answered."""

    def __init__(self) -> None:
        self._answered = 0
        self._correct = 0
        self._answered_ids: set[str] = set()

    @property
    def answered_count(self) -> int:
        return self._answered

    @property
    def correct_count(self) -> int:
        return self._correct

    @property
    def answered_ids(self) -> frozenset[str]:
        return frozenset(self._answered_ids)

    @property
    def accuracy(self) -> int:
        return rounded_percent(self._correct, self._answered)

    def has_answered(self, question_id: str) -> bool:
        return question_id in self._answered_ids

    def record(self, event: AnswerEvent) -> None:
        self.record_answer(event.question_id, event.was_correct)

    def record_answer(self, question_id: str, was_correct: bool) -> None:
        self._answered += 1
        if was_correct:
            self._correct += 1
        self._answered_ids.add(question_id)

    def reset(self) -> None:
        """Clear everything; the caller is responsible for rebuilding."""

        self._answered = 0
        self._correct = 0
        self._answered_ids.clear()
