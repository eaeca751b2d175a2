"""
Exam Service Registry

Builds the selector, evaluator, converter and aggregator of every
supported exam once, and hands them out by exam code.
"""

import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from englishtutor.ai.oracle import ScoringOracle, TranscriptionOracle
from englishtutor.common.exceptions import ConfigurationError
from englishtutor.common.logger import app_logger
from englishtutor.config import Settings, settings as app_settings
from englishtutor.domain.model import ExamType
from englishtutor.domain.repository import PracticeStore
from .evaluation import AnswerEvaluator
from .ielts import IELTS_PROFILE
from .profiles import ExamProfile
from .progress import ProgressAggregator
from .scoring import ScoreConverter
from .selection import QuestionSelector
from .toefl import TOEFL_PROFILE
from .yds import YDS_PROFILE

logger = app_logger.getChild("exams.registry")

DEFAULT_PROFILES = (IELTS_PROFILE, TOEFL_PROFILE, YDS_PROFILE)


@dataclass
class ExamServiceBundle:
    """The engine components serving one exam type."""
    profile: ExamProfile
    converter: ScoreConverter
    selector: QuestionSelector
    evaluator: AnswerEvaluator
    aggregator: ProgressAggregator

    @property
    def code(self) -> str:
        return self.profile.code


class ExamServiceRegistry:
    """Exam code -> service bundle."""

    def __init__(
        self,
        store: PracticeStore,
        scoring_oracle: Optional[ScoringOracle] = None,
        transcriber: Optional[TranscriptionOracle] = None,
        config: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        profiles: Iterable[ExamProfile] = DEFAULT_PROFILES
    ):
        """
        Initialize the registry.

        Args:
            store: Practice store shared by every exam
            scoring_oracle: Judge for written and spoken answers
            transcriber: Speech-to-text for recorded answers
            config: Settings for windows and timeouts (the application settings by default)
            rng: Random source shared by the selectors
            profiles: Exam profiles to serve
        """
        config = config or app_settings
        self.store = store
        self._bundles: Dict[str, ExamServiceBundle] = {}

        for profile in profiles:
            converter = ScoreConverter(profile)
            self._bundles[profile.code] = ExamServiceBundle(
                profile=profile,
                converter=converter,
                selector=QuestionSelector(
                    profile,
                    store,
                    rng=rng,
                    recent_window=config.RECENT_EXCLUSION_WINDOW,
                    adaptive_window=config.ADAPTIVE_WINDOW,
                    min_attempts=config.ADAPTIVE_MIN_ATTEMPTS,
                ),
                evaluator=AnswerEvaluator(
                    profile,
                    converter,
                    scoring_oracle=scoring_oracle,
                    transcriber=transcriber,
                    timeout=config.AI_TIMEOUT_SECONDS,
                ),
                aggregator=ProgressAggregator(profile, converter, store),
            )

        logger.info(f"Registered exam services: {', '.join(self._bundles)}")

    def get(self, code: str) -> ExamServiceBundle:
        """
        Get the services of an exam type.

        Raises:
            ConfigurationError: If the exam type is not supported
        """
        bundle = self._bundles.get((code or "").strip().lower())
        if bundle is None:
            raise ConfigurationError(f"Unsupported exam type '{code}'", config_key=code)
        return bundle

    def supported_exam_types(self) -> List[str]:
        return list(self._bundles)

    def is_valid_exam_type(self, code: str) -> bool:
        return (code or "").strip().lower() in self._bundles

    async def seed_catalog(self) -> List[ExamType]:
        """Write every profile's exam type and skills to the store."""
        saved = []
        for bundle in self._bundles.values():
            saved.append(await self.store.save_exam_type(bundle.profile.to_exam_type()))
        logger.info(f"Seeded catalog for {len(saved)} exam types")
        return saved
