"""Builders for raw rows and validated question records."""

from __future__ import annotations

from typing import Optional

from mcq_trainer.trainer.records import QuestionRecord, Slot

CSV_HEADER = (
    "id",
    "question",
    "option_a",
    "option_b",
    "option_c",
    "option_d",
    "correct_option",
    "explanation",
    "topic",
    "difficulty",
)


def make_row(**overrides: Optional[str]) -> dict[str, Optional[str]]:
    row: dict[str, Optional[str]] = {
        "id": "q1",
        "question": "Which clause filters grouped rows?",
        "option_a": "WHERE",
        "option_b": "HAVING",
        "option_c": "ORDER BY",
        "option_d": "LIMIT",
        "correct_option": "B",
        "explanation": "HAVING applies after GROUP BY.",
        "topic": "SQL",
        "difficulty": "Easy",
    }
    row.update(overrides)
    return row


def make_record(
    qid: str,
    *,
    topic: str = "SQL",
    difficulty: str = "Medium",
    prompt: Optional[str] = None,
    explanation: str = "Because.",
    correct: Slot = Slot.A,
) -> QuestionRecord:
    return QuestionRecord(
        id=qid,
        prompt=prompt or f"Question {qid}?",
        options={slot: f"{qid} option {slot.value}" for slot in Slot},
        correct_slot=correct,
        explanation=explanation,
        topic=topic,
        difficulty=difficulty,
        source="test",
    )


def sample_corpus() -> tuple[QuestionRecord, ...]:
    return (
        make_record("uml-1", topic="UML", difficulty="Easy"),
        make_record(
            "sql-1",
            topic="SQL",
            difficulty="Easy",
            prompt="What does SELECT return?",
            explanation="A result set of rows.",
        ),
        make_record("uml-2", topic="UML", difficulty="Hard"),
        make_record(
            "sql-2",
            topic="SQL",
            difficulty="Hard",
            prompt="When is an index used?",
            explanation="The optimizer picks indexes for JOIN keys.",
            correct=Slot.C,
        ),
        make_record("uml-3", topic="UML", difficulty="Medium"),
    )
