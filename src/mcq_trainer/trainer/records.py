"""Question records and the validator that turns raw rows into them.

Rows come from any tabular source as a mapping of column name to value. A
row either becomes one immutable :class:`QuestionRecord` or is dropped; a
dropped row is routine data cleaning, so it is logged at DEBUG level and
never raised.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Optional

DEFAULT_EXPLANATION = "No explanation provided."
DEFAULT_TOPIC = "General"
DEFAULT_DIFFICULTY = "Medium"

LOGGER = logging.getLogger(__name__)


class Slot(str, Enum):
    """One of the four fixed answer-option identifiers."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"

    @property
    def column(self) -> str:
        return f"option_{self.value.lower()}"

    @classmethod
    def from_value(cls, value: object) -> Optional["Slot"]:
        if isinstance(value, Slot):
            return value
        text = _clean(value)
        if not text:
            return None
        try:
            return cls(text.upper())
        except ValueError:
            return None


SLOTS: tuple[Slot, ...] = tuple(Slot)


@dataclass(frozen=True)
class QuestionRecord:
    """Immutable representation of one validated quiz item."""

    id: str
    prompt: str
    options: Mapping[Slot, str] = field(hash=False)
    correct_slot: Slot
    explanation: str = DEFAULT_EXPLANATION
    topic: str = DEFAULT_TOPIC
    difficulty: str = DEFAULT_DIFFICULTY
    source: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "options", MappingProxyType(dict(self.options))
        )

    def option_text(self, slot: Slot) -> str:
        return self.options[slot]

    def is_correct(self, slot: object) -> bool:
        return Slot.from_value(slot) is self.correct_slot

    @property
    def correct_text(self) -> str:
        return self.options[self.correct_slot]


def build_question_record(
    row: Mapping[str, object],
    *,
    source_label: str,
    row_number: int,
) -> QuestionRecord | None:
    """Validate ``row`` and return a record, or ``None`` to reject it.

    ``row_number`` is the 1-based position of the row inside its source and
    is used to synthesize an id when the row does not carry one. Option text
    that is missing or blank after trimming rejects the row.
    """

    prompt = _clean(row.get("question"))
    if not prompt:
        return _reject(source_label, row_number, "missing question")

    raw_correct = _clean(row.get("correct_option"))
    if not raw_correct:
        return _reject(source_label, row_number, "missing correct_option")
    correct = Slot.from_value(raw_correct)
    if correct is None:
        return _reject(
            source_label,
            row_number,
            f"correct_option '{raw_correct}' is not one of A-D",
        )

    options: dict[Slot, str] = {}
    for slot in SLOTS:
        text = _clean(row.get(slot.column))
        if not text:
            return _reject(source_label, row_number, f"missing {slot.column}")
        options[slot] = text

    return QuestionRecord(
        id=_clean(row.get("id")) or f"{source_label}-{row_number}",
        prompt=prompt,
        options=options,
        correct_slot=correct,
        explanation=_clean(row.get("explanation")) or DEFAULT_EXPLANATION,
        topic=_clean(row.get("topic")) or DEFAULT_TOPIC,
        difficulty=_clean(row.get("difficulty")) or DEFAULT_DIFFICULTY,
        source=source_label,
    )


def iter_question_records(
    rows: Iterable[Mapping[str, object]], *, source_label: str
) -> Iterator[QuestionRecord]:
    """Yield the accepted records of one source, in row order."""

    for row_number, row in enumerate(rows, start=1):
        record = build_question_record(
            row, source_label=source_label, row_number=row_number
        )
        if record is not None:
            yield record


def _clean(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def _reject(source_label: str, row_number: int, reason: str) -> None:
    LOGGER.debug(
        "Dropped invalid question row",
        extra={"source": source_label, "row": row_number, "reason": reason},
    )
    return None
