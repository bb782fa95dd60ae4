"""Session cursor: position, reveal state and per-question option order."""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Optional

from .builder import Session, fisher_yates
from .records import SLOTS, QuestionRecord, Slot

DISPLAY_LABELS: tuple[str, ...] = ("A", "B", "C", "D")


@dataclass(frozen=True)
class AnswerEvent:
    """Emitted once per question appearance when an option is chosen."""

    question_id: str
    selected_slot: Slot
    correct_slot: Slot

    @property
    def was_correct(self) -> bool:
        return self.selected_slot is self.correct_slot


@dataclass(frozen=True)
class DisplayOption:
    """One option in display order, as shown to the user."""

    label: str
    slot: Slot
    text: str
    selected: bool = False
    correct: bool = False
    wrong: bool = False


AnswerListener = Callable[[AnswerEvent], None]


class SessionCursor:
    """Walks one session, wrapping around at both ends."""

    def __init__(
        self,
        session: Sequence[QuestionRecord] = (),
        *,
        rng: Optional[random.Random] = None,
        on_answer: Optional[AnswerListener] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._listeners: list[AnswerListener] = []
        if on_answer is not None:
            self._listeners.append(on_answer)
        self._session: Session = ()
        self._position = 0
        self._selected: Optional[Slot] = None
        self._revealed = False
        self._option_order: tuple[Slot, ...] = SLOTS
        self.rebuild(session)

    def subscribe(self, listener: AnswerListener) -> None:
        self._listeners.append(listener)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def length(self) -> int:
        return len(self._session)

    @property
    def is_empty(self) -> bool:
        return not self._session

    @property
    def position(self) -> Optional[int]:
        return None if self.is_empty else self._position

    @property
    def current(self) -> Optional[QuestionRecord]:
        if self.is_empty:
            return None
        return self._session[self._position]

    @property
    def selected_slot(self) -> Optional[Slot]:
        return self._selected

    @property
    def revealed(self) -> bool:
        return self._revealed

    @property
    def option_order(self) -> tuple[Slot, ...]:
        return self._option_order

    def rebuild(self, session: Sequence[QuestionRecord]) -> None:
        self._session = tuple(session)
        self._position = 0
        self._enter_question()

    def advance(self) -> None:
        if self.is_empty:
            return
        self._position = (self._position + 1) % self.length
        self._enter_question()

    def retreat(self) -> None:
        if self.is_empty:
            return
        self._position = (self._position - 1 + self.length) % self.length
        self._enter_question()

    def select_option(self, slot: object) -> Optional[AnswerEvent]:
        """Answer the current question; ignored once it has been revealed."""

        question = self.current
        chosen = Slot.from_value(slot)
        if question is None or self._revealed or chosen is None:
            return None
        self._selected = chosen
        self._revealed = True
        event = AnswerEvent(
            question_id=question.id,
            selected_slot=chosen,
            correct_slot=question.correct_slot,
        )
        for listener in list(self._listeners):
            listener(event)
        return event

    def select_display(self, label: str) -> Optional[AnswerEvent]:
        """Answer by display label (``A``-``D`` in the shuffled order)."""

        slot = self.slot_for_label(label)
        if slot is None:
            return None
        return self.select_option(slot)

    def slot_for_label(self, label: str) -> Optional[Slot]:
        normalized = str(label or "").strip().upper()[:1]
        if normalized not in DISPLAY_LABELS:
            return None
        return self._option_order[DISPLAY_LABELS.index(normalized)]

    def display_options(self) -> tuple[DisplayOption, ...]:
        question = self.current
        if question is None:
            return ()
        options = []
        for label, slot in zip(DISPLAY_LABELS, self._option_order):
            selected = slot is self._selected
            correct = self._revealed and slot is question.correct_slot
            options.append(
                DisplayOption(
                    label=label,
                    slot=slot,
                    text=question.option_text(slot),
                    selected=selected,
                    correct=correct,
                    wrong=self._revealed and selected and not correct,
                )
            )
        return tuple(options)

    def _enter_question(self) -> None:
        self._selected = None
        self._revealed = False
        self._option_order = tuple(fisher_yates(SLOTS, self._rng))
