"""Session configuration and the pure session builder."""

from __future__ import annotations

import random
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Optional, TypeVar

from .records import QuestionRecord

ALL = "all"
DEFAULT_POOL_SIZE = 20

T = TypeVar("T")

Session = tuple[QuestionRecord, ...]


@dataclass(frozen=True)
class SessionConfig:
    """Filters and selection options used to build a session."""

    search_text: str = ""
    topic_filter: str = ALL
    difficulty_filter: str = ALL
    pool_size: int = DEFAULT_POOL_SIZE
    shuffle: bool = True
    exclude_answered: bool = True

    def with_changes(self, **changes: object) -> "SessionConfig":
        return replace(self, **changes)  # type: ignore[arg-type]


def coerce_pool_size(value: object) -> int:
    """Return a pool size of at least 1; unusable input becomes 1."""

    if isinstance(value, bool):
        return 1
    try:
        size = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError, OverflowError):
        try:
            size = int(float(str(value).strip()))
        except (TypeError, ValueError, OverflowError):
            return 1
    return size if size > 0 else 1


def fisher_yates(items: Iterable[T], rng: random.Random) -> list[T]:
    """Return a uniformly shuffled copy of ``items``."""

    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def matches(
    record: QuestionRecord,
    config: SessionConfig,
    answered_ids: Collection[str] = (),
) -> bool:
    if config.topic_filter != ALL and record.topic != config.topic_filter:
        return False
    if (
        config.difficulty_filter != ALL
        and record.difficulty != config.difficulty_filter
    ):
        return False
    needle = config.search_text.strip().lower()
    if needle and not (
        needle in record.prompt.lower()
        or needle in record.explanation.lower()
    ):
        return False
    if config.exclude_answered and record.id in answered_ids:
        return False
    return True


def filter_corpus(
    corpus: Sequence[QuestionRecord],
    config: SessionConfig,
    answered_ids: Collection[str] = (),
) -> list[QuestionRecord]:
    """Return the records passing every filter, in corpus order."""

    return [
        record for record in corpus if matches(record, config, answered_ids)
    ]


def build_session(
    corpus: Sequence[QuestionRecord],
    config: SessionConfig,
    answered_ids: Collection[str] = (),
    *,
    rng: Optional[random.Random] = None,
) -> Session:
    """Build an ordered session from ``corpus``.

    The session holds ``min(pool_size, filtered)`` records, shuffled first
    when ``config.shuffle`` is set. An empty tuple means no record matched.
    """

    filtered = filter_corpus(corpus, config, answered_ids)
    if not filtered:
        return ()
    pool_size = min(coerce_pool_size(config.pool_size), len(filtered))
    if config.shuffle:
        filtered = fisher_yates(filtered, rng or random.Random())
    return tuple(filtered[:pool_size])
