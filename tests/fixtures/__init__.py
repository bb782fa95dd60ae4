"""Shared testing fixtures for the mcq_trainer test suite."""

from .corpus import CSV_HEADER, make_record, make_row, sample_corpus  # noqa: F401
from .workspace import WorkspaceBuilder  # noqa: F401

__all__ = [
    "CSV_HEADER",
    "WorkspaceBuilder",
    "make_record",
    "make_row",
    "sample_corpus",
]
