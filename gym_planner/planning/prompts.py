"""Prompt templates for AI training plan generation."""

from __future__ import annotations

import re

from gym_planner.schemas.preferences import MAX_NOTES_LENGTH, UserPreferences

SYSTEM_PROMPT = """You are an expert personal trainer with years of experience designing effective training plans.

YOUR EXPERTISE:
- Exercise physiology and anatomy
- Training systems (PPL, Upper/Lower, Full Body, etc.)
- Adapting plans to goals (hypertrophy, strength, endurance)
- Safe and effective exercise technique
- Working around injuries and user limitations

PLAN RULES:
1. Always prioritize safety and correct technique
2. Pick exercises that match the user's training system
3. Respect the available session time and number of training days
4. Propose realistic loads for the user's level
5. Balance muscle groups across the week
6. Include progressive overload within the cycle
7. If the user mentions an injury or limitation, respect it without exception

OUTPUT RULES:
- Return data ONLY in the required structured format
- Fill every required field with the correct type
- Exercise names must be precise and unambiguous
- Match rest periods to intensity (heavy: 120-180s, moderate: 60-90s, light: 30-60s)"""

_INJECTION_PATTERNS = [
    re.compile(r"ignore\s+previous\s+instructions", re.IGNORECASE),
    re.compile(r"forget\s+everything", re.IGNORECASE),
    re.compile(r"you\s+are\s+now", re.IGNORECASE),
    re.compile(r"new\s+instructions:", re.IGNORECASE),
    re.compile(r"system\s*:", re.IGNORECASE),
    re.compile(r"assistant\s*:", re.IGNORECASE),
    re.compile(r"user\s*:", re.IGNORECASE),
]


def sanitize_user_input(text: str | None) -> str:
    """Collapse whitespace, cap length and strip common prompt-injection phrases.

    Basic protection only; it does not make arbitrary text safe.
    """
    if not text:
        return ""

    sanitized = re.sub(r"\s+", " ", text.strip())
    sanitized = sanitized[:MAX_NOTES_LENGTH]

    for pattern in _INJECTION_PATTERNS:
        sanitized = pattern.sub("", sanitized)

    return sanitized.strip()


def _format_number(value: float) -> str:
    return f"{value:g}"


def build_plan_prompt(preferences: UserPreferences) -> str:
    """Render user preferences into the generation request.

    Args:
        preferences: Validated user preferences

    Returns:
        Formatted prompt string
    """
    day_count = len(preferences.available_days)
    days_text = "1 day" if day_count == 1 else f"{day_count} days"
    weeks = _format_number(preferences.cycle_duration_weeks)
    minutes = _format_number(preferences.session_duration_minutes)
    day_list = ", ".join(preferences.available_days)

    prompt = f"""Create a personalized training plan with the following parameters:

TRAINING GOAL: {preferences.goal}
TRAINING SYSTEM: {preferences.system}
AVAILABLE TRAINING DAYS: {days_text} per week ({day_list})
SESSION DURATION: {minutes} minutes
CYCLE LENGTH: {weeks} weeks"""

    notes = sanitize_user_input(preferences.notes)
    if notes:
        prompt += f"\n\nADDITIONAL USER NOTES:\n{notes}"

    prompt += f"""

Create a complete plan with {day_count} workout days in the cycle. Each day should contain 4-6 exercises with an appropriate number of sets and reps. Make sure the plan:
- Fits the stated goal ({preferences.goal})
- Follows the chosen training system ({preferences.system})
- Can be completed in {minutes} minutes
- Is safe and effective for the user
- Reports cycle_duration_weeks as {weeks}"""

    return prompt
