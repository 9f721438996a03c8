"""Mood classification prompt.

The closing instruction fixes the output contract that
``extract_json_object`` and ``validate_classification`` rely on: a single
JSON object with the keys ``mood``, ``confidence``, ``emotionsDetected`` and
``reason``. Keep those keys if the wording changes.
"""

from __future__ import annotations

from typing import Sequence

from carewatch.domains.mood.domain_logic.mood_models import QuestionAnswer

_PREAMBLE = (
    "You are a clinical psychologist analyzing an elderly person's emotional "
    "wellbeing. Be sensitive to subtle signs of distress - elderly people often "
    "understate their problems."
)

_INSTRUCTIONS = """ANALYSIS INSTRUCTIONS:
- Look carefully for ANY signs of loneliness, sadness, anxiety, stress, pain, sleep issues, or loss of appetite
- Even mild negative signals should shift the mood away from "Normal"
- If the person mentions feeling alone, not sleeping, not eating, pain, or worry, this is NOT "Normal"
- Classify the mood as one of: "Normal", "Stressed", "Depressed", "Highly Depressed"

MOOD GUIDE:
- "Normal" = ONLY if responses are clearly positive or genuinely neutral with no concerning signs
- "Stressed" = any signs of worry, mild anxiety, tension, minor sleep or appetite issues
- "Depressed" = sadness, hopelessness, withdrawal, loneliness, significant sleep/appetite problems
- "Highly Depressed" = severe depression indicators, expressions of worthlessness, giving up, extreme isolation"""

_OUTPUT_CONTRACT = """Respond with ONLY this JSON, nothing else:
{"mood":"Normal or Stressed or Depressed or Highly Depressed","confidence":"low or medium or high","emotionsDetected":["emotion1","emotion2"],"reason":"brief explanation"}"""


def format_answers(question_answers: Sequence[QuestionAnswer]) -> str:
    """Render Q/A pairs as numbered blocks: ``Q1 (category): ...`` / ``A1: ...``."""
    return "\n\n".join(
        f"Q{i} ({qa.category or 'general'}): {qa.question}\nA{i}: {qa.answer}"
        for i, qa in enumerate(question_answers, start=1)
    )


def build_mood_prompt(question_answers: Sequence[QuestionAnswer]) -> str:
    """Build the full classification prompt for a check-in."""
    return (
        f"{_PREAMBLE}\n\n"
        f"Here are their daily check-in responses:\n\n"
        f"{format_answers(question_answers)}\n\n"
        f"{_INSTRUCTIONS}\n\n"
        f"{_OUTPUT_CONTRACT}"
    )
