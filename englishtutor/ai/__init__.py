"""
External judges for written and spoken answers.
"""

from .oracle import OracleScore, Rubric, RubricScoringOracle, ScoringOracle, TranscriptionOracle
from .openai_client import OpenAIScoringOracle
from .speech_client import GoogleSpeechTranscriber
from .prompts import build_prompt

__all__ = [
    "OracleScore",
    "Rubric",
    "RubricScoringOracle",
    "ScoringOracle",
    "TranscriptionOracle",
    "OpenAIScoringOracle",
    "GoogleSpeechTranscriber",
    "build_prompt",
]
