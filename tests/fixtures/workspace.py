"""Filesystem helpers shared by tests."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

from .corpus import CSV_HEADER


@dataclass
class WorkspaceBuilder:
    """Helper bound to a tmp directory for concise file creation."""

    root: Path

    def write(
        self, relative: Union[str, Path], content: Union[str, bytes]
    ) -> Path:
        path = self.root / Path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def write_csv(
        self,
        relative: Union[str, Path],
        rows: Sequence[Mapping[str, Optional[str]]],
        *,
        header: Sequence[str] = CSV_HEADER,
    ) -> Path:
        path = self.root / Path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(
                handle, fieldnames=list(header), extrasaction="ignore"
            )
            writer.writeheader()
            for row in rows:
                writer.writerow(
                    {key: ("" if value is None else value)
                     for key, value in row.items()}
                )
        return path
