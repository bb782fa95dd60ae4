"""CSV corpus loader.

Each source is parsed independently (concurrently on a thread pool) and the
accepted records are merged in the configured source order once every
source has finished. A source that cannot be read yields a
:class:`SourceLoadError` in the result instead of aborting the others.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from .records import QuestionRecord, iter_question_records

REQUIRED_COLUMNS: tuple[str, ...] = (
    "question",
    "option_a",
    "option_b",
    "option_c",
    "option_d",
    "correct_option",
)
OPTIONAL_COLUMNS: tuple[str, ...] = ("id", "explanation", "topic", "difficulty")


class SourceLoadError(RuntimeError):
    """Raised when a corpus source cannot be fetched or parsed."""

    def __init__(self, source: "CorpusSource", reason: str) -> None:
        super().__init__(f"{source.path}: {reason}")
        self.source = source
        self.reason = reason


@dataclass(frozen=True)
class CorpusSource:
    """A tabular question source and the label used for synthesized ids."""

    path: Path
    label: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        if not self.label:
            object.__setattr__(self, "label", self.path.stem)


@dataclass(frozen=True)
class CorpusLoadResult:
    """Outcome of loading every configured source."""

    records: tuple[QuestionRecord, ...] = ()
    errors: tuple[SourceLoadError, ...] = ()
    cancelled: bool = False
    per_source: dict[str, int] = field(default_factory=dict)

    @property
    def error_messages(self) -> tuple[str, ...]:
        return tuple(str(error) for error in self.errors)


def read_source_rows(source: CorpusSource) -> list[dict[str, str]]:
    """Read ``source`` into a list of string-valued row mappings."""

    try:
        frame = pd.read_csv(
            source.path,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except FileNotFoundError as exc:
        raise SourceLoadError(source, "file not found") from exc
    except pd.errors.EmptyDataError as exc:
        raise SourceLoadError(source, "file is empty") from exc
    except (ValueError, OSError) as exc:
        raise SourceLoadError(source, f"unable to parse CSV ({exc})") from exc

    frame.columns = [str(column).strip().lower() for column in frame.columns]
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        raise SourceLoadError(
            source, "missing required column(s): " + ", ".join(missing)
        )
    return frame.to_dict(orient="records")


def load_source(source: CorpusSource) -> tuple[QuestionRecord, ...]:
    """Read and validate one source."""

    rows = read_source_rows(source)
    return tuple(iter_question_records(rows, source_label=source.label))


def load_corpus(
    sources: Sequence[CorpusSource],
    *,
    max_workers: int = 4,
    cancel_event: Optional[threading.Event] = None,
    logger: Optional[logging.Logger] = None,
) -> CorpusLoadResult:
    """Load ``sources`` concurrently and merge them in source order.

    When ``cancel_event`` is set by the time every source has completed the
    result is returned empty and flagged ``cancelled`` so no partial corpus
    escapes.
    """

    log = logger or logging.getLogger(__name__)
    ordered = tuple(sources)
    if not ordered:
        return CorpusLoadResult()

    log.info(
        "Loading question sources",
        extra={"source_count": len(ordered), "max_workers": max_workers},
    )

    workers = max(1, min(max_workers, len(ordered)))
    with ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix="mcq-loader"
    ) as pool:
        futures = [pool.submit(load_source, source) for source in ordered]
        outcomes = []
        for source, future in zip(ordered, futures):
            try:
                outcomes.append((source, future.result(), None))
            except SourceLoadError as exc:
                outcomes.append((source, (), exc))

    if cancel_event is not None and cancel_event.is_set():
        log.info("Discarded question sources after cancellation")
        return CorpusLoadResult(cancelled=True)

    records: list[QuestionRecord] = []
    errors: list[SourceLoadError] = []
    per_source: dict[str, int] = {}
    seen_ids: set[str] = set()
    for source, loaded, error in outcomes:
        if error is not None:
            errors.append(error)
            log.error(
                "Failed to load question source",
                extra={"source": str(source.path), "reason": error.reason},
            )
            continue
        accepted = 0
        for record in loaded:
            if record.id in seen_ids:
                log.debug(
                    "Dropped duplicate question id",
                    extra={"source": source.label, "question_id": record.id},
                )
                continue
            seen_ids.add(record.id)
            records.append(record)
            accepted += 1
        per_source[source.label] = accepted
        log.info(
            "Loaded question source",
            extra={"source": str(source.path), "accepted": accepted},
        )

    return CorpusLoadResult(
        records=tuple(records),
        errors=tuple(errors),
        per_source=per_source,
    )
