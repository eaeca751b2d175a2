"""
Score conversion tests for the three exam profiles.
"""

import pytest

from englishtutor.exams import IELTS_PROFILE, TOEFL_PROFILE, YDS_PROFILE, ScoreConverter
from englishtutor.exams.scoring import round_half_up


@pytest.fixture
def ielts():
    return ScoreConverter(IELTS_PROFILE)


@pytest.fixture
def toefl():
    return ScoreConverter(TOEFL_PROFILE)


@pytest.fixture
def yds():
    return ScoreConverter(YDS_PROFILE)


class TestRoundHalfUp:
    def test_half_band_ties_round_up(self):
        assert round_half_up(6.25, 0.5) == 6.5
        assert round_half_up(6.75, 0.5) == 7.0
        assert round_half_up(6.2, 0.5) == 6.0

    def test_whole_number_ties_round_up(self):
        assert round_half_up(68.5, 1) == 69.0
        assert round_half_up(2.5, 1) == 3.0


class TestToScale:
    @pytest.mark.parametrize("correct,total,expected", [
        (9, 10, 9.0),
        (8, 10, 8.0),
        (7, 10, 7.0),
        (5, 10, 5.0),
        (3, 10, 3.0),
        (0, 10, 3.0),
    ])
    def test_ielts_band_table(self, ielts, correct, total, expected):
        assert ielts.to_scale("reading", correct, total) == expected

    @pytest.mark.parametrize("correct,total,expected", [
        (10, 10, 30),
        (8, 10, 28),
        (2, 10, 5),
        (1, 4, 8),
    ])
    def test_toefl_section_table(self, toefl, correct, total, expected):
        assert toefl.to_scale("listening", correct, total) == expected

    def test_yds_is_proportional(self, yds):
        assert yds.to_scale("grammar", 7, 10) == 70
        assert yds.to_scale("vocabulary", 2, 3) == 67

    def test_empty_total_gives_scale_minimum(self, ielts, yds):
        assert ielts.to_scale("reading", 0, 0) == 0
        assert yds.to_scale("reading", 0, 0) == 0

    def test_correct_count_is_capped_at_total(self, yds):
        assert yds.to_scale("reading", 12, 10) == 100

    def test_unknown_skill_is_rejected(self, ielts):
        from englishtutor.common.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            ielts.to_scale("grammar", 1, 2)


class TestOverall:
    def test_ielts_mean_rounds_to_half_band(self, ielts):
        assert ielts.overall({"reading": 7.0, "listening": 6.5, "writing": 6.0, "speaking": 6.0}) == 6.5
        assert ielts.overall({"reading": 7.0, "listening": 7.5}) == 7.5

    def test_toefl_sums_sections(self, toefl):
        assert toefl.overall({"reading": 28, "listening": 25, "writing": 22, "speaking": 20}) == 95

    def test_toefl_sections_are_capped(self, toefl):
        assert toefl.overall({"reading": 45, "listening": 30, "writing": 30, "speaking": 30}) == 120

    def test_yds_weighted_mean(self, yds):
        scores = {"reading": 80, "listening": 60, "grammar": 70, "vocabulary": 50}
        assert yds.overall(scores) == 69

    def test_yds_weights_only_skills_present(self, yds):
        assert yds.overall({"reading": 80, "grammar": 60}) == 72

    def test_no_scores_gives_minimum(self, ielts, yds):
        assert ielts.overall({}) == 0
        assert yds.overall({"reading": None}) == 0


class TestDescriptors:
    def test_ielts_descriptor(self, ielts):
        assert ielts.describe(7.0) == "Competent user"
        assert ielts.describe(8.5) == "Very good user"
        assert ielts.describe(2.0) == "Extremely limited user"

    def test_passing(self, toefl, yds):
        assert toefl.is_passing(80)
        assert not toefl.is_passing(79)
        assert yds.is_passing(60)
        assert yds.describe(69) == "Geçer"
