"""Rule-based mood classifier used when the model output is unusable.

Keywords are matched as lowercase substrings of each answer, and every
matching keyword counts once per answer. Precedence: any severe keyword
wins outright; three or more negative hits escalate to Depressed; a lone
negative signal still reads as Stressed unless positives clearly outweigh it.
"""

from __future__ import annotations

from typing import Sequence

from carewatch.domains.mood.domain_logic.mood_models import (
    MAX_EMOTIONS,
    ClassificationResult,
    QuestionAnswer,
)

NEGATIVE_KEYWORDS: tuple[str, ...] = (
    "sad", "lonely", "alone", "tired", "pain", "hurt", "worried", "anxious",
    "scared", "afraid", "hopeless", "helpless", "depressed", "terrible",
    "awful", "miserable", "crying", "tears", "can't sleep", "no appetite",
    "don't want", "give up", "worthless", "useless", "nobody cares",
    "isolated", "empty", "numb", "exhausted", "overwhelmed", "bad",
    "not good", "not well", "not great", "not happy", "unhappy", "upset",
    "struggling", "difficult", "hard", "stress", "stressed", "nervous",
    "restless", "sleepless", "insomnia", "nightmare", "no energy",
    "low", "down", "blue", "gloomy", "bored", "dull", "sick", "weak",
    "uncomfortable", "suffering", "ache", "sore", "irritated", "angry",
    "frustrated", "annoyed", "neglected", "ignored", "abandoned",
    "no", "not really", "hardly", "barely", "poorly", "worse",
)

SEVERE_KEYWORDS: tuple[str, ...] = (
    "hopeless", "worthless", "give up", "don't want to live", "no point",
    "end it", "can't go on", "nobody cares", "all alone", "nothing matters",
    "useless", "burden", "die", "death", "suicide", "kill", "no reason",
    "no purpose", "want to disappear", "cant take it", "miserable",
)

POSITIVE_KEYWORDS: tuple[str, ...] = (
    "good", "great", "happy", "fine", "well", "wonderful", "blessed",
    "thankful", "grateful", "enjoyed", "fun", "relaxed", "peaceful",
    "calm", "comfortable", "loved", "supported", "better", "excellent",
    "amazing", "fantastic", "joyful", "cheerful", "content", "satisfied",
    "slept well", "ate well", "feeling okay", "pretty good", "not bad",
)


def score_answers(
    question_answers: Sequence[QuestionAnswer],
) -> tuple[int, int, int, list[str]]:
    """Count keyword hits across all answers.

    Returns:
        ``(negative, severe, positive, emotions)`` where ``emotions`` lists the
        matched negative keywords in first-seen order without repeats.
    """
    negative = severe = positive = 0
    emotions: dict[str, None] = {}

    for qa in question_answers:
        answer = (qa.answer or "").lower()

        for keyword in NEGATIVE_KEYWORDS:
            if keyword in answer:
                negative += 1
                emotions.setdefault(keyword, None)

        severe += sum(1 for keyword in SEVERE_KEYWORDS if keyword in answer)
        positive += sum(1 for keyword in POSITIVE_KEYWORDS if keyword in answer)

    return negative, severe, positive, list(emotions)


def classify_by_keywords(question_answers: Sequence[QuestionAnswer]) -> ClassificationResult:
    """Classify a check-in offline from keyword counts."""
    negative, severe, positive, emotions = score_answers(question_answers)

    if severe >= 1:
        mood = "Highly Depressed"
        reason = "Severe distress indicators detected in responses"
    elif negative >= 3:
        mood = "Depressed"
        reason = "Significant negative emotional indicators found across multiple responses"
    elif negative >= 1 and negative > positive:
        mood = "Stressed"
        reason = "Stress and worry indicators detected in responses"
    elif negative >= 1 and positive <= 1:
        mood = "Stressed"
        reason = "Some negative indicators detected without strong positive signals"
    else:
        mood = "Normal"
        reason = "Responses indicate a generally stable emotional state"

    return ClassificationResult(
        mood=mood,
        confidence="medium",
        emotions_detected=emotions[:MAX_EMOTIONS],
        reason=reason,
        analysis_source="fallback",
    )
