"""
Scoring and Transcription Oracles

Interfaces for the external judges the evaluator delegates to, plus a
deterministic offline scorer used when no language model is configured.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Sequence

from pydantic import BaseModel, ConfigDict, Field

from englishtutor.common.logger import app_logger

logger = app_logger.getChild("ai.oracle")


class OracleScore(BaseModel):
    """Judgement returned by a scoring oracle, on the skill's scale."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    overall_score: float = Field(0.0, alias="overallScore")
    criteria_scores: Dict[str, float] = Field(default_factory=dict, alias="criteriaScores")
    feedback: str = ""
    suggestions: str = ""


@dataclass(frozen=True)
class Rubric:
    """What the oracle scores against."""
    text: str
    criteria: Sequence[str]
    max_score: float
    min_words: int = 0


class ScoringOracle(ABC):
    """Scores free-text answers against a rubric."""

    name = "oracle"

    @abstractmethod
    async def score(self, prompt: str, answer_text: str, rubric: Rubric) -> OracleScore:
        """
        Score an answer.

        Args:
            prompt: Full evaluation prompt including the question and answer
            answer_text: The candidate's answer (or transcription)
            rubric: Criteria and scale to score against

        Returns:
            Overall and per-criterion scores with optional feedback

        Raises:
            OracleError: If the backend fails or returns an unusable response
        """
        pass

    async def close(self) -> None:
        """Release any network resources."""


class TranscriptionOracle(ABC):
    """Turns a recorded answer into text."""

    name = "transcriber"

    @abstractmethod
    async def transcribe(self, audio_ref: str) -> str:
        """
        Transcribe audio.

        Args:
            audio_ref: Reference to the recording (URI or base64 content)

        Returns:
            The transcription

        Raises:
            OracleError: If transcription fails or yields no text
        """
        pass

    async def close(self) -> None:
        """Release any network resources."""


_WORD_RE = re.compile(r"[A-Za-z']+")
_SENTENCE_RE = re.compile(r"[.!?]+")

LINKING_WORDS = frozenset({
    "although", "because", "besides", "consequently", "finally", "firstly", "furthermore",
    "however", "moreover", "nevertheless", "overall", "secondly", "similarly", "since",
    "therefore", "thus", "whereas", "while",
})

# Criterion name fragment -> text feature it is judged on.
_CRITERION_FEATURES = (
    ("task", "length"),
    ("development", "length"),
    ("topic", "length"),
    ("coherence", "linking"),
    ("organization", "linking"),
    ("fluency", "linking"),
    ("delivery", "linking"),
    ("lexical", "variety"),
    ("language", "variety"),
    ("grammatical", "structure"),
    ("pronunciation", "structure"),
)


def text_features(text: str, min_words: int) -> Dict[str, float]:
    """Surface features of ``text``, each in [0, 1]."""
    words = [word.lower() for word in _WORD_RE.findall(text)]
    if not words:
        return {"length": 0.0, "variety": 0.0, "structure": 0.0, "linking": 0.0}

    sentences = max(1, len([part for part in _SENTENCE_RE.split(text) if part.strip()]))
    mean_sentence = len(words) / sentences
    links = sum(1 for word in words if word in LINKING_WORDS)

    return {
        "length": min(1.0, len(words) / max(min_words, 50)),
        "variety": min(1.0, len(set(words)) / len(words) / 0.6),
        "structure": max(0.0, 1.0 - abs(mean_sentence - 18) / 18),
        "linking": min(1.0, 0.4 + links / sentences),
    }


class RubricScoringOracle(ScoringOracle):
    """
    Offline heuristic scorer.

    Scores each criterion from surface features of the text (length
    against the word minimum, lexical variety, sentence structure and
    use of linking words). The same text always yields the same score.
    """

    name = "rubric"

    async def score(self, prompt: str, answer_text: str, rubric: Rubric) -> OracleScore:
        features = text_features(answer_text, rubric.min_words)
        fallback = sum(features.values()) / len(features)

        criteria_scores = {}
        for criterion in rubric.criteria:
            key = criterion.lower()
            feature = next((name for fragment, name in _CRITERION_FEATURES if fragment in key), None)
            fraction = features[feature] if feature else fallback
            criteria_scores[criterion] = round(fraction * rubric.max_score, 2)

        overall = sum(criteria_scores.values()) / len(criteria_scores) if criteria_scores else fallback * rubric.max_score
        logger.debug(f"Rubric scores {criteria_scores} for {len(answer_text.split())} words")
        return OracleScore(overall_score=round(overall, 2), criteria_scores=criteria_scores)
