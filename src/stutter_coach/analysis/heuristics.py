"""Rule-based fluency heuristics for a finished utterance."""

import structlog

from stutter_coach.models.coaching import HeuristicResult

logger = structlog.get_logger()

# Disfluency markers counted against the fluency score
FILLER_WORDS = frozenset({"um", "uh", "erm", "hmm", "like"})

MAX_SCORE = 100
MIN_SCORE = 30
REPEAT_PENALTY = 10
FILLER_PENALTY = 5


def tokenize(text: str) -> list[str]:
    """Case-fold and split on whitespace, dropping empty tokens."""
    return text.lower().split()


def count_repeats(words: list[str]) -> int:
    """Count adjacent identical tokens ("I I am" has one repeat)."""
    return sum(1 for prev, word in zip(words, words[1:]) if word == prev)


def count_fillers(words: list[str]) -> int:
    return sum(1 for word in words if word in FILLER_WORDS)


def analyze(text: str) -> HeuristicResult:
    """Score a transcript for fluency.

    Starts at 100, loses 10 per repeat and 5 per filler, never below 30.

    Args:
        text: Transcript of a finished utterance.

    Returns:
        HeuristicResult with score, repeats and fillers.
    """
    words = tokenize(text)
    repeats = count_repeats(words)
    fillers = count_fillers(words)
    score = max(MIN_SCORE, MAX_SCORE - repeats * REPEAT_PENALTY - fillers * FILLER_PENALTY)

    logger.debug("heuristics_computed", score=score, repeats=repeats, fillers=fillers)
    return HeuristicResult(score=score, repeats=repeats, fillers=fillers)
