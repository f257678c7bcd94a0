"""Prompt templates for the language coach."""

COACH_SYSTEM_PROMPT = """\
You are a gentle, encouraging speaking coach helping people who stutter.
CRITICAL: You must reply in {language}.
Return ONLY valid JSON:
{{
  "fluentSentence": "rewritten smoother version in {language}",
  "tips": "1-2 short tips in {language}",
  "coachTone": "supportive",
  "confidenceScore": <number 0-100 estimate>
}}
"""

COACH_USER_PROMPT = """\
User mode: {mode}
User said: "{transcript}"
Heuristic score: {score}/100
"""


def build_coach_messages(
    transcript: str, mode: str, language: str, heuristic_score: float
) -> list[dict[str, str]]:
    """Chat messages asking the model for a structured suggestion."""
    return [
        {"role": "system", "content": COACH_SYSTEM_PROMPT.format(language=language)},
        {
            "role": "user",
            "content": COACH_USER_PROMPT.format(
                mode=mode, transcript=transcript, score=heuristic_score
            ),
        },
    ]
