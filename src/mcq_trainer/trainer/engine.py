"""State container wiring the builder, cursor and progress tracker.

Presentation adapters only talk to :class:`TrainerEngine`: they send
commands (filter changes, answers, navigation) and read an immutable
:class:`TrainerSnapshot` back. Every command runs to completion before the
next one; commands that change a builder input rebuild the session.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from .builder import (
    ALL,
    Session,
    SessionConfig,
    build_session,
    coerce_pool_size,
)
from .cursor import AnswerEvent, DisplayOption, SessionCursor
from .loader import CorpusLoadResult
from .progress import ProgressTracker, completion_percent
from .records import QuestionRecord, Slot


@dataclass(frozen=True)
class LoadTicket:
    """Identifies one corpus load so late results can be recognised."""

    number: int


@dataclass(frozen=True)
class TrainerSnapshot:
    """Read-only view of engine state for presentation adapters."""

    question: Optional[QuestionRecord]
    options: tuple[DisplayOption, ...]
    selected_slot: Optional[Slot]
    revealed: bool
    position: Optional[int]
    session_length: int
    accuracy: int
    completion: int
    answered_count: int
    correct_count: int
    unanswered_count: int
    corpus_size: int
    topics: tuple[str, ...]
    difficulties: tuple[str, ...]
    difficulty_counts: dict[str, int] = field(default_factory=dict)
    config: SessionConfig = field(default_factory=SessionConfig)
    load_errors: tuple[str, ...] = ()
    loading: bool = False

    @property
    def is_empty(self) -> bool:
        return self.session_length == 0


class TrainerEngine:
    """In-memory trainer state with a fixed set of transitions."""

    def __init__(
        self,
        corpus: Iterable[QuestionRecord] = (),
        config: Optional[SessionConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._logger = logger or logging.getLogger(__name__)
        self._corpus: tuple[QuestionRecord, ...] = tuple(corpus)
        self._config = config or SessionConfig()
        self._progress = ProgressTracker()
        self._cursor = SessionCursor(rng=self._rng, on_answer=self._on_answer)
        self._load_errors: tuple[str, ...] = ()
        self._ticket = 0
        self._pending: Optional[LoadTicket] = None
        self._closed = False
        self._rebuild()

    @property
    def corpus(self) -> tuple[QuestionRecord, ...]:
        return self._corpus

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def session(self) -> Session:
        return self._cursor.session

    @property
    def cursor(self) -> SessionCursor:
        return self._cursor

    @property
    def progress(self) -> ProgressTracker:
        return self._progress

    @property
    def closed(self) -> bool:
        return self._closed

    # Configuration commands -------------------------------------------------

    def set_search_text(self, text: str) -> None:
        self._reconfigure(search_text=str(text or ""))

    def set_topic_filter(self, topic: str) -> None:
        self._reconfigure(topic_filter=_filter_value(topic))

    def set_difficulty_filter(self, difficulty: str) -> None:
        self._reconfigure(difficulty_filter=_filter_value(difficulty))

    def set_pool_size(self, size: object) -> None:
        self._reconfigure(pool_size=coerce_pool_size(size))

    def set_shuffle(self, enabled: bool) -> None:
        self._reconfigure(shuffle=bool(enabled))

    def set_exclude_answered(self, enabled: bool) -> None:
        self._reconfigure(exclude_answered=bool(enabled))

    def configure(self, config: SessionConfig) -> None:
        """Replace the whole configuration and rebuild."""

        self._config = config.with_changes(
            pool_size=coerce_pool_size(config.pool_size)
        )
        self._rebuild()

    # Session commands ------------------------------------------------------

    def select_option(self, slot: object) -> Optional[AnswerEvent]:
        return self._cursor.select_option(slot)

    def select_display(self, label: str) -> Optional[AnswerEvent]:
        return self._cursor.select_display(label)

    def advance(self) -> None:
        self._cursor.advance()

    def retreat(self) -> None:
        self._cursor.retreat()

    def restart_session(self) -> None:
        self._rebuild()

    def reset_progress(self) -> None:
        self._progress.reset()
        self._logger.info("Progress reset")
        self._rebuild()

    def load_corpus(self, records: Iterable[QuestionRecord]) -> None:
        self._corpus = tuple(records)
        self._rebuild()

    # Loading ---------------------------------------------------------------

    def begin_load(self) -> LoadTicket:
        """Start a corpus load; only the newest ticket may apply results."""

        self._ticket += 1
        self._pending = LoadTicket(self._ticket)
        return self._pending

    def apply_load(self, ticket: LoadTicket, result: CorpusLoadResult) -> bool:
        """Install ``result`` unless it is stale, cancelled or too late."""

        if self._closed or result.cancelled or ticket != self._pending:
            self._logger.debug(
                "Ignored stale corpus load",
                extra={"ticket": ticket.number, "closed": self._closed},
            )
            return False
        self._pending = None
        self._load_errors = result.error_messages
        self.load_corpus(result.records)
        return True

    def close(self) -> None:
        """Tear down; any load still in flight is discarded on arrival."""

        self._closed = True
        self._pending = None

    # Observation -----------------------------------------------------------

    def snapshot(self) -> TrainerSnapshot:
        cursor = self._cursor
        difficulty_counts = Counter(
            record.difficulty for record in self._corpus
        )
        answered_ids = self._progress.answered_ids
        return TrainerSnapshot(
            question=cursor.current,
            options=cursor.display_options(),
            selected_slot=cursor.selected_slot,
            revealed=cursor.revealed,
            position=cursor.position,
            session_length=cursor.length,
            accuracy=self._progress.accuracy,
            completion=completion_percent(
                cursor.position, cursor.revealed, cursor.length
            ),
            answered_count=self._progress.answered_count,
            correct_count=self._progress.correct_count,
            unanswered_count=sum(
                1 for record in self._corpus if record.id not in answered_ids
            ),
            corpus_size=len(self._corpus),
            topics=tuple(sorted({record.topic for record in self._corpus})),
            difficulties=tuple(sorted(difficulty_counts)),
            difficulty_counts=dict(difficulty_counts),
            config=self._config,
            load_errors=self._load_errors,
            loading=self._pending is not None,
        )

    # Internals -------------------------------------------------------------

    def _reconfigure(self, **changes: object) -> None:
        updated = self._config.with_changes(**changes)
        if updated == self._config:
            return
        self._config = updated
        self._rebuild()

    def _rebuild(self) -> None:
        session = build_session(
            self._corpus,
            self._config,
            self._progress.answered_ids,
            rng=self._rng,
        )
        self._cursor.rebuild(session)
        self._logger.debug(
            "Rebuilt session",
            extra={
                "session_length": len(session),
                "corpus_size": len(self._corpus),
                "topic": self._config.topic_filter,
                "difficulty": self._config.difficulty_filter,
            },
        )

    def _on_answer(self, event: AnswerEvent) -> None:
        self._progress.record(event)
        self._logger.debug(
            "Recorded answer",
            extra={
                "question_id": event.question_id,
                "correct": event.was_correct,
            },
        )


def _filter_value(value: object) -> str:
    text = str(value or "").strip()
    return text or ALL
