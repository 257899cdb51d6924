"""Situational and behavioral assessments reported next to a moral analysis."""

from __future__ import annotations

from typing import Dict, Iterable, List, Literal, Mapping, Sequence, Tuple, Union

from pydantic import Field

from moral_engine.analysis import (
    InvalidInputError,
    SituationalContext,
    TimeContext,
    _coerce_model,
    _Record,
)

TIME_OF_DAY_RISK: Dict[str, float] = {
    "night": 0.3,
    "evening": 0.2,
    "afternoon": 0.1,
    "morning": 0.1,
}
DEFAULT_TIME_RISK = 0.1
RISK_WEIGHTS: Dict[str, float] = {
    "location": 0.4,
    "social_pressure": 0.4,
    "time": 0.2,
}
PUBLIC_LOCATION_FACTOR = 0.7
PRIVATE_LOCATION_FACTOR = 0.5

LOCATION_RISK_THRESHOLD = 0.6
SOCIAL_PRESSURE_THRESHOLD = 0.7
ENVIRONMENT_SCORE_THRESHOLD = 0.4
RECOMMEND_CHANGE_SETTING = "Consider changing location or timing"
RECOMMEND_EVALUATE_PRESSURE = "Evaluate social pressure impact"
RECOMMEND_ASSESS_CONSTRAINTS = "Assess environmental constraints"

TREND_THRESHOLD = 0.1
LOW_CONSISTENCY_THRESHOLD = 0.5
IMPULSIVITY_THRESHOLD = 0.7
NEGATIVE_BEHAVIORS = frozenset({"aggressive", "impulsive", "avoidant"})
# Behavior types missing here are appropriate in any context.
APPROPRIATE_CONTEXTS: Dict[str, Tuple[str, ...]] = {
    "aggressive": ("competitive", "sports"),
    "passive": ("formal", "professional"),
    "social": ("public", "social"),
}
RECOMMEND_CONSISTENCY = "Work on developing consistent behavioral patterns"
RECOMMEND_NEGATIVE_TRENDS = "Address increasing negative behavioral patterns"
RECOMMEND_IMPULSE_CONTROL = "Practice impulse control techniques"

Trend = Literal["increasing", "decreasing", "stable"]


class ContextAssessment(_Record):
    risk_level: float
    social_complexity: float
    environmental_score: float
    recommendations: List[str] = Field(default_factory=list)


class BehavioralPattern(_Record):
    type: str
    frequency: float = Field(..., ge=0.0, le=1.0)
    intensity: float = Field(..., ge=0.0, le=1.0)
    context: List[str] = Field(default_factory=list)


class BehavioralTrend(_Record):
    type: str
    trend: Trend


class ContextMismatch(_Record):
    type: str
    context: str


class BehavioralAssessment(_Record):
    consistency: float
    trends: List[BehavioralTrend] = Field(default_factory=list)
    impulsivity: float
    inconsistency: float
    contextual_mismatches: List[ContextMismatch] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


def time_based_risk(time_context: TimeContext) -> float:
    return TIME_OF_DAY_RISK.get(time_context.time_of_day, DEFAULT_TIME_RISK)


def overall_risk(context: SituationalContext) -> float:
    risk = 0.0
    risk = risk + context.location.risk_level * RISK_WEIGHTS["location"]
    risk = risk + context.social_context.social_pressure * RISK_WEIGHTS["social_pressure"]
    risk = risk + time_based_risk(context.time_context) * RISK_WEIGHTS["time"]
    return risk


def social_complexity(context: SituationalContext) -> float:
    social = context.social_context
    return min(1.0, social.number_of_people * 0.2 + len(social.relationship_types) * 0.1)


def location_environment_score(context: SituationalContext) -> float:
    location_factor = (
        PUBLIC_LOCATION_FACTOR if context.location.type == "public" else PRIVATE_LOCATION_FACTOR
    )
    risk_adjustment = 1 - context.location.risk_level * 0.5
    return (location_factor + risk_adjustment) / 2


def assess_context(
    context: Union[SituationalContext, Mapping[str, object]]
) -> ContextAssessment:
    """Summarize how risky and socially involved a situation is.

    ``risk_level`` weighs location risk, social pressure and a time-of-day
    risk. Recommendations look at the raw location risk and social pressure,
    not at the weighted total.
    """

    context = _coerce_model(SituationalContext, context, "situational context")
    environment = location_environment_score(context)

    recommendations: List[str] = []
    if context.location.risk_level > LOCATION_RISK_THRESHOLD:
        recommendations.append(RECOMMEND_CHANGE_SETTING)
    if context.social_context.social_pressure > SOCIAL_PRESSURE_THRESHOLD:
        recommendations.append(RECOMMEND_EVALUATE_PRESSURE)
    if environment < ENVIRONMENT_SCORE_THRESHOLD:
        recommendations.append(RECOMMEND_ASSESS_CONSTRAINTS)

    return ContextAssessment(
        risk_level=overall_risk(context),
        social_complexity=social_complexity(context),
        environmental_score=environment,
        recommendations=recommendations,
    )


def _coerce_patterns(
    patterns: Iterable[Union[BehavioralPattern, Mapping[str, object]]]
) -> List[BehavioralPattern]:
    if isinstance(patterns, (str, bytes, Mapping)):
        raise InvalidInputError("Behavioral patterns must be a list of pattern records.")
    return [
        _coerce_model(BehavioralPattern, pattern, "behavioral pattern") for pattern in patterns
    ]


def _group_by_type(patterns: Sequence[BehavioralPattern]) -> Dict[str, List[BehavioralPattern]]:
    groups: Dict[str, List[BehavioralPattern]] = {}
    for pattern in patterns:
        groups.setdefault(pattern.type, []).append(pattern)
    return groups


def pattern_consistency(patterns: Sequence[BehavioralPattern]) -> float:
    if not patterns:
        return 1.0
    largest = max(len(group) for group in _group_by_type(patterns).values())
    return largest / len(patterns)


def pattern_trend(patterns: Sequence[BehavioralPattern]) -> Trend:
    if len(patterns) < 2:
        return "stable"
    total = 0.0
    for previous, current in zip(patterns, patterns[1:]):
        total = total + (current.intensity - previous.intensity)
    slope = total / (len(patterns) - 1)
    if slope > TREND_THRESHOLD:
        return "increasing"
    if slope < -TREND_THRESHOLD:
        return "decreasing"
    return "stable"


def behavioral_trends(patterns: Sequence[BehavioralPattern]) -> List[BehavioralTrend]:
    return [
        BehavioralTrend(type=behavior, trend=pattern_trend(group))
        for behavior, group in _group_by_type(patterns).items()
    ]


def impulsivity_risk(patterns: Sequence[BehavioralPattern]) -> float:
    total = 0.0
    for pattern in patterns:
        total = total + (pattern.intensity * 0.7 + pattern.frequency * 0.3)
    return total / (len(patterns) or 1)


def is_context_appropriate(behavior: str, context: str) -> bool:
    allowed = APPROPRIATE_CONTEXTS.get(behavior)
    return allowed is None or context in allowed


def contextual_mismatches(patterns: Sequence[BehavioralPattern]) -> List[ContextMismatch]:
    return [
        ContextMismatch(type=pattern.type, context=context)
        for pattern in patterns
        for context in pattern.context
        if not is_context_appropriate(pattern.type, context)
    ]


def assess_behavioral_patterns(
    patterns: Iterable[Union[BehavioralPattern, Mapping[str, object]]] = ()
) -> BehavioralAssessment:
    """Summarize a history of behavior patterns.

    Patterns are read in the order given, oldest first. An empty history is
    perfectly consistent and carries no risk.
    """

    history = _coerce_patterns(patterns)
    consistency = pattern_consistency(history)
    trends = behavioral_trends(history)
    impulsivity = impulsivity_risk(history)

    recommendations: List[str] = []
    if consistency < LOW_CONSISTENCY_THRESHOLD:
        recommendations.append(RECOMMEND_CONSISTENCY)
    if any(t.trend == "increasing" and t.type in NEGATIVE_BEHAVIORS for t in trends):
        recommendations.append(RECOMMEND_NEGATIVE_TRENDS)
    if impulsivity > IMPULSIVITY_THRESHOLD:
        recommendations.append(RECOMMEND_IMPULSE_CONTROL)

    return BehavioralAssessment(
        consistency=consistency,
        trends=trends,
        impulsivity=impulsivity,
        inconsistency=1 - consistency,
        contextual_mismatches=contextual_mismatches(history),
        recommendations=recommendations,
    )
