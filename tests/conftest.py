from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable when the package is not installed
ROOT = TESTS_DIR.parent
for extra in (ROOT / "src",):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import WorkspaceBuilder, sample_corpus  # noqa: E402


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def corpus():
    """Five records across the SQL and UML topics."""

    return sample_corpus()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "MCQ_TRAINER_DATA_HOME",
        "MCQ_TRAINER_CONFIG",
        "MCQ_TRAINER_SOURCES",
        "MCQ_TRAINER_SEARCH",
        "MCQ_TRAINER_TOPIC",
        "MCQ_TRAINER_DIFFICULTY",
        "MCQ_TRAINER_POOL_SIZE",
        "MCQ_TRAINER_SHUFFLE",
        "MCQ_TRAINER_EXCLUDE_ANSWERED",
        "MCQ_TRAINER_MAX_WORKERS",
        "MCQ_TRAINER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MCQ_TRAINER_DATA_HOME", str(tmp_path / "data-home"))
