"""XP, levels, daily streaks and badges derived from completed sessions."""

from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from enum import StrEnum

import structlog

from stutter_coach.models.coaching import GamificationResult
from stutter_coach.models.user_profile import UserProfile

logger = structlog.get_logger()

BASE_XP = 10
SECONDS_PER_BONUS_XP = 10
FLUENCY_BONUS_XP = 20
FLUENCY_BONUS_THRESHOLD = 80


class Badge(StrEnum):
    FIRST_STEP = "First Step"
    DEDICATED_SPEAKER = "Dedicated Speaker"
    CONSISTENCY_CHAMPION = "Consistency Champion"
    SMOOTH_SPEAKER = "Smooth Speaker"
    XP_HUNTER = "XP Hunter"


# (badge, predicate(profile, fluency_score)) evaluated in order after each session
BADGE_RULES: list[tuple[Badge, Callable[[UserProfile, float], bool]]] = [
    (Badge.FIRST_STEP, lambda p, _: p.stats.total_sessions >= 1),
    (Badge.DEDICATED_SPEAKER, lambda p, _: p.stats.total_sessions >= 10),
    (Badge.CONSISTENCY_CHAMPION, lambda p, _: p.streak >= 3),
    (Badge.SMOOTH_SPEAKER, lambda _, score: score >= 90),
    (Badge.XP_HUNTER, lambda p, _: p.xp >= 500),
]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def compute_earned_xp(duration_seconds: float, fluency_score: float) -> int:
    """10 base + 1 per full 10 seconds spoken, +20 for a fluency score of 80 or more."""
    earned = BASE_XP + int(duration_seconds // SECONDS_PER_BONUS_XP)
    if fluency_score >= FLUENCY_BONUS_THRESHOLD:
        earned += FLUENCY_BONUS_XP
    return earned


def award_badge(profile: UserProfile, badge: str, new_badges: list[str]) -> None:
    if badge in profile.badges:
        return
    profile.badges.append(badge)
    new_badges.append(badge)


def _update_activity(profile: UserProfile, duration_seconds: float, today: date) -> None:
    """Daily minutes and streak bookkeeping. Same-day sessions keep the streak as is."""
    is_new_day = profile.last_active_date != today
    if is_new_day:
        profile.stats.daily_minutes = 0.0
    profile.stats.daily_minutes += duration_seconds / 60

    if is_new_day:
        if profile.last_active_date == today - timedelta(days=1):
            profile.streak += 1
        else:
            profile.streak = 1
        profile.last_active_date = today


def apply_result(
    profile: UserProfile,
    duration_seconds: float,
    fluency_score: float,
    today: date | None = None,
) -> GamificationResult:
    """Apply a completed session to a profile in place.

    Args:
        profile: Profile to mutate.
        duration_seconds: Length of the session; negative values count as 0.
        fluency_score: Heuristic fluency score of the session.
        today: Calendar date of the session (UTC today when omitted).

    Returns:
        GamificationResult with the xp earned and the badges awarded for the
        first time by this session.
    """
    today = today or utc_today()
    duration_seconds = max(0.0, duration_seconds)

    profile.stats.total_sessions += 1
    profile.stats.total_seconds += duration_seconds
    _update_activity(profile, duration_seconds, today)

    earned_xp = compute_earned_xp(duration_seconds, fluency_score)
    profile.xp += earned_xp

    new_badges: list[str] = []
    for badge, earned in BADGE_RULES:
        if earned(profile, fluency_score):
            award_badge(profile, badge.value, new_badges)

    logger.info(
        "progression_applied",
        username=profile.username,
        earned_xp=earned_xp,
        xp=profile.xp,
        level=profile.level,
        streak=profile.streak,
        new_badges=new_badges,
    )
    return GamificationResult(earned_xp=earned_xp, new_badges=new_badges)
