"""Smoke tests for Pydantic models."""

from datetime import date

import pytest
from pydantic import ValidationError

from stutter_coach.models.challenge import ChallengeStatus, TickResult
from stutter_coach.models.coaching import CoachSuggestion, HeuristicResult
from stutter_coach.models.user_profile import UserProfile, UserStats, level_for_xp


class TestUserProfile:
    def test_defaults(self):
        profile = UserProfile(username="alice")
        assert profile.xp == 0
        assert profile.level == 1
        assert profile.streak == 0
        assert profile.last_active_date is None
        assert profile.badges == []
        assert profile.stats == UserStats()

    def test_level_follows_xp(self):
        profile = UserProfile(username="alice", xp=99)
        assert profile.level == 1
        profile.xp = 100
        assert profile.level == 2

    @pytest.mark.parametrize("xp,level", [(0, 1), (99, 1), (100, 2), (250, 3), (1000, 11)])
    def test_level_for_xp(self, xp, level):
        assert level_for_xp(xp) == level

    def test_camel_case_dump(self):
        profile = UserProfile(username="alice", xp=150, last_active_date=date(2026, 3, 1))
        data = profile.model_dump(mode="json", by_alias=True)
        assert data["lastActiveDate"] == "2026-03-01"
        assert data["level"] == 2
        assert data["stats"] == {"totalSessions": 0, "totalSeconds": 0, "dailyMinutes": 0.0}

    def test_negative_xp_rejected(self):
        with pytest.raises(ValidationError):
            UserProfile(username="alice", xp=-1)


class TestCoachSuggestion:
    def test_fallback(self):
        suggestion = CoachSuggestion.fallback("I I am", 90)
        assert suggestion.fluent_sentence == "I I am"
        assert suggestion.confidence_score == 90
        assert suggestion.tips == "Keep going!"

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            CoachSuggestion(fluent_sentence="x", confidence_score=150)


class TestHeuristicResult:
    def test_frozen(self):
        result = HeuristicResult()
        with pytest.raises(ValidationError):
            result.score = 50


class TestTickResult:
    def test_ok(self):
        result = TickResult.ok()
        assert result.status == ChallengeStatus.OK
        assert not result.failed

    def test_fail(self):
        result = TickResult.fail("Silence detected (> 3s)")
        assert result.failed
        assert result.model_dump(mode="json") == {
            "status": "fail",
            "reason": "Silence detected (> 3s)",
        }
