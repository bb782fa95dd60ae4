from __future__ import annotations

import random
from collections import Counter

import pytest

from fixtures import make_record

from mcq_trainer.trainer.builder import (
    ALL,
    SessionConfig,
    build_session,
    coerce_pool_size,
    filter_corpus,
    fisher_yates,
)


def _ids(session) -> list[str]:
    return [record.id for record in session]


def _config(**kwargs) -> SessionConfig:
    kwargs.setdefault("shuffle", False)
    kwargs.setdefault("exclude_answered", False)
    return SessionConfig(**kwargs)


def test_topic_filter_scenario(corpus) -> None:
    config = _config(topic_filter="SQL", pool_size=3)

    session = build_session(corpus, config, set())

    assert _ids(session) == ["sql-1", "sql-2"]


def test_pool_size_truncates_in_corpus_order(corpus) -> None:
    session = build_session(corpus, _config(pool_size=2))

    assert _ids(session) == ["uml-1", "sql-1"]


@pytest.mark.parametrize("pool_size", [0, -5, "abc", None, 1])
def test_invalid_pool_size_clamps_to_one(corpus, pool_size) -> None:
    session = build_session(corpus, _config(pool_size=pool_size))

    assert len(session) == 1


def test_difficulty_filter(corpus) -> None:
    session = build_session(corpus, _config(difficulty_filter="Hard"))

    assert _ids(session) == ["uml-2", "sql-2"]


def test_search_matches_prompt_or_explanation_case_insensitively(corpus) -> None:
    by_prompt = build_session(corpus, _config(search_text="  select "))
    by_explanation = build_session(corpus, _config(search_text="join"))

    assert _ids(by_prompt) == ["sql-1"]
    assert _ids(by_explanation) == ["sql-2"]


def test_filters_combine(corpus) -> None:
    config = _config(topic_filter="UML", difficulty_filter="Easy")

    assert _ids(build_session(corpus, config)) == ["uml-1"]


def test_exclude_answered_drops_answered_ids(corpus) -> None:
    answered = {"uml-1", "sql-2"}

    excluded = build_session(
        corpus, _config(exclude_answered=True), answered
    )
    included = build_session(
        corpus, _config(exclude_answered=False), answered
    )

    assert _ids(excluded) == ["sql-1", "uml-2", "uml-3"]
    assert len(included) == 5


def test_no_match_returns_empty_session(corpus) -> None:
    assert build_session(corpus, _config(topic_filter="Java")) == ()
    assert build_session((), _config()) == ()


def test_unshuffled_builds_are_identical(corpus) -> None:
    config = _config(pool_size=4)

    assert build_session(corpus, config) == build_session(corpus, config)


def test_shuffled_builds_vary_but_keep_membership() -> None:
    corpus = tuple(make_record(f"q{i}") for i in range(6))
    config = SessionConfig(pool_size=6, shuffle=True, exclude_answered=False)
    rng = random.Random(99)

    orders = {
        tuple(_ids(build_session(corpus, config, rng=rng)))
        for _ in range(50)
    }

    assert len(orders) > 1
    assert all(sorted(order) == sorted(r.id for r in corpus) for order in orders)


def test_shuffle_happens_before_truncation() -> None:
    corpus = tuple(make_record(f"q{i}") for i in range(10))
    config = SessionConfig(pool_size=2, shuffle=True, exclude_answered=False)
    rng = random.Random(5)

    seen = set()
    for _ in range(200):
        seen.update(_ids(build_session(corpus, config, rng=rng)))

    assert seen == {record.id for record in corpus}


def test_builder_does_not_mutate_corpus(corpus) -> None:
    original = list(corpus)
    as_list = list(corpus)

    build_session(as_list, SessionConfig(shuffle=True), rng=random.Random(3))

    assert as_list == original


def test_fisher_yates_is_roughly_uniform() -> None:
    rng = random.Random(2024)
    counts = Counter(tuple(fisher_yates("abc", rng)) for _ in range(6000))

    assert len(counts) == 6
    assert all(800 < count < 1200 for count in counts.values())


def test_fisher_yates_handles_small_inputs() -> None:
    rng = random.Random(0)

    assert fisher_yates([], rng) == []
    assert fisher_yates(["x"], rng) == ["x"]


def test_filter_corpus_keeps_order(corpus) -> None:
    result = filter_corpus(corpus, _config(topic_filter=ALL))

    assert result == list(corpus)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(5, 5), ("7", 7), (" 3 ", 3), ("2.9", 2), (0, 1), (-1, 1),
     ("", 1), ("abc", 1), (None, 1), (True, 1), (float("nan"), 1)],
)
def test_coerce_pool_size(value, expected) -> None:
    assert coerce_pool_size(value) == expected


def test_session_config_with_changes() -> None:
    config = SessionConfig()

    changed = config.with_changes(topic_filter="SQL")

    assert changed.topic_filter == "SQL"
    assert config.topic_filter == ALL
