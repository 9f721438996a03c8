"""Question bank — loads the check-in questions from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CATEGORIES: tuple[str, ...] = (
    "emotional",
    "social",
    "physical",
    "cognitive",
    "sleep",
    "daily-living",
    "anxiety",
    "self-esteem",
)

DEFAULT_QUESTION_BANK = (
    Path(__file__).resolve().parent.parent / "questions" / "question_bank.yaml"
)


@dataclass(frozen=True)
class Question:
    """A single check-in question."""

    id: str
    text: str
    category: str
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "questionText": self.text, "category": self.category}


class QuestionBank:
    """Ordered collection of questions; order is insertion order of the source file."""

    def __init__(self, questions: list[Question]) -> None:
        ids = [q.id for q in questions]
        if len(ids) != len(set(ids)):
            raise ValueError("Question ids must be unique")
        self._questions = list(questions)

    def __len__(self) -> int:
        return len(self._questions)

    def active(self) -> list[Question]:
        """Active questions in insertion order."""
        return [q for q in self._questions if q.is_active]

    def active_by_category(self) -> list[Question]:
        """Active questions sorted by category (stable within a category)."""
        return sorted(self.active(), key=lambda q: q.category)


def _parse_question(raw: dict[str, Any], index: int) -> Question:
    text = str(raw.get("text") or "").strip()
    if not text:
        raise ValueError(f"Question #{index} has no text")
    category = raw.get("category")
    if category not in CATEGORIES:
        raise ValueError(f"Question #{index} has invalid category: {category!r}")
    return Question(
        id=str(raw.get("id") or f"q{index:03d}"),
        text=text,
        category=category,
        is_active=bool(raw.get("is_active", True)),
    )


def load_question_bank(path: str | Path | None = None) -> QuestionBank:
    """Parse a question bank YAML file (defaults to the packaged seed file)."""
    path = Path(path).expanduser() if path else DEFAULT_QUESTION_BANK
    with open(path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    raw_questions = data.get("questions") or []
    questions = [_parse_question(raw, i) for i, raw in enumerate(raw_questions, start=1)]
    logger.info("Loaded %d questions from %s", len(questions), path)
    return QuestionBank(questions)
