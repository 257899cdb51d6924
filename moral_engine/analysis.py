"""Deterministic situational moral analysis.

``analyze_moral_context`` combines an emotional state, a situational context,
a behavioral signal and environmental tags into a :class:`MoralAnalysis`:
an ethical-alignment score, value conflicts, predicted consequences,
recommended actions and the relevance of every catalog principle.

Everything here is a pure function of its inputs. The only shared state is
the read-only principle catalog in :mod:`moral_engine.catalog`.
"""

from __future__ import annotations

import logging
import math
from typing import (
    Callable,
    Dict,
    Iterable,
    List,
    Literal,
    Mapping,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from moral_engine.catalog import (
    ALIGN_ACTION_PREFIX,
    ALIGN_ACTION_SUFFIX,
    DEVELOPMENT_SUFFIX,
    ETHICAL_PRINCIPLES,
    PrincipleId,
    describe_action,
    describe_conflict,
    describe_consequence,
    describe_tags,
    humanize_tag,
)

LOGGER = logging.getLogger("moral_engine.analysis")


class InvalidInputError(ValueError):
    """Raised when the pipeline receives malformed or out-of-range input."""


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)


class EmotionalState(_Record):
    joy: float = Field(..., ge=0.0, le=1.0)
    sadness: float = Field(..., ge=0.0, le=1.0)
    anger: float = Field(..., ge=0.0, le=1.0)
    fear: float = Field(..., ge=0.0, le=1.0)
    surprise: float = Field(..., ge=0.0, le=1.0)
    neutral: float = Field(..., ge=0.0, le=1.0)


class Location(_Record):
    type: str
    description: str
    risk_level: float = Field(..., ge=0.0, le=1.0)


class TimeContext(_Record):
    time_of_day: str
    day_type: Literal["weekday", "weekend"]
    season: str


class SocialContext(_Record):
    number_of_people: int = Field(..., ge=0)
    relationship_types: List[str]
    social_pressure: float = Field(..., ge=0.0, le=1.0)


class SituationalContext(_Record):
    location: Location
    time_context: TimeContext
    social_context: SocialContext


class PrincipleRelevance(_Record):
    principle: PrincipleId
    relevance: float = Field(..., ge=0.0, le=1.0)


class PotentialConsequences(_Record):
    short_term: List[str] = Field(default_factory=list)
    long_term: List[str] = Field(default_factory=list)


class MoralAnalysis(_Record):
    ethical_alignment: float
    conflicting_values: List[str] = Field(default_factory=list)
    potential_consequences: PotentialConsequences
    recommended_actions: List[str] = Field(default_factory=list)
    moral_principles: List[PrincipleRelevance]


class EmotionalProfile(_Record):
    dominant_emotion: str
    dominant_intensity: float
    balance: float
    stability: float
    recommendations: List[str] = Field(default_factory=list)


class AnalysisDescriptions(_Record):
    conflicts: Dict[str, str] = Field(default_factory=dict)
    consequences: Dict[str, str] = Field(default_factory=dict)
    actions: Dict[str, str] = Field(default_factory=dict)


EMOTION_ORDER: Tuple[str, ...] = ("joy", "sadness", "anger", "fear", "surprise", "neutral")
EMOTION_WEIGHTS: Dict[str, float] = {
    "joy": 0.2,
    "sadness": -0.1,
    "anger": -0.2,
    "fear": -0.1,
    "surprise": 0.1,
    "neutral": 0.1,
}
EMOTIONAL_BASELINE = 0.5
POSITIVE_ENVIRONMENT_FACTORS = frozenset({"well-lit", "open-space", "professional-setting"})
NEGATIVE_ENVIRONMENT_FACTORS = frozenset({"crowded", "noisy", "high-stress"})
POSITIVE_ENVIRONMENT_BONUS = 0.2
NEGATIVE_ENVIRONMENT_PENALTY = 0.1
ENVIRONMENTAL_BASELINE = 0.5

SCORE_WEIGHTS: Dict[str, float] = {
    "emotional": 0.3,
    "behavioral": 0.3,
    "context": 0.2,
    "environmental": 0.2,
}

HIGH_RELEVANCE_THRESHOLD = 0.7
LOW_ALIGNMENT_THRESHOLD = 0.6
CONFLICT_SOCIAL_PRESSURE_THRESHOLD = 0.6
CONFLICT_EMOTION_THRESHOLD = 0.5
RECOMMENDATION_EMOTION_THRESHOLD = 0.4
RECOMMENDATION_SOCIAL_PRESSURE_THRESHOLD = 0.6
CONSEQUENCE_RISK_THRESHOLD = 0.5
CONSEQUENCE_SOCIAL_PRESSURE_THRESHOLD = 0.5

AUTONOMY_VS_HARMONY = "individual_autonomy_vs_social_harmony"
EMOTION_VS_JUDGMENT = "emotional_reaction_vs_rational_judgment"

RECOMMEND_REASSESS = "Reassess decision considering ethical principles"
RECOMMEND_PROCESS_EMOTIONS = "Take time to process emotions before acting"
RECOMMEND_EXTERNAL_PERSPECTIVE = "Consider seeking external perspective"
RECOMMEND_LONG_TERM = "Consider long-term impact on relationships and reputation"

EMOTION_ANGER_THRESHOLD = 0.6
EMOTION_FEAR_THRESHOLD = 0.5
EMOTION_STABILITY_THRESHOLD = 0.4
RECOMMEND_CALM_DOWN = "Take time to calm down before making decisions"
RECOMMEND_ADDRESS_CONCERNS = "Address underlying concerns and anxieties"
RECOMMEND_REGULATION = "Consider emotional regulation techniques"

ContextualFactor = Callable[[SituationalContext], float]
EmotionalFactor = Callable[[EmotionalState], float]

# Unlisted principles use the multiplicative identity.
CONTEXTUAL_FACTORS: Dict[str, ContextualFactor] = {
    "autonomy": lambda context: 1 - context.social_context.social_pressure * 0.5,
    "justice": lambda context: 1.2 if context.social_context.number_of_people > 1 else 0.8,
    "care": lambda context: 1.3 if context.location.risk_level > 0.5 else 1.0,
    "utility": lambda context: 1.4 if context.social_context.number_of_people > 2 else 1.0,
}
EMOTIONAL_FACTORS: Dict[str, EmotionalFactor] = {
    "care": lambda emotion: 1 + emotion.joy * 0.3,
    "justice": lambda emotion: 1 + emotion.anger * 0.2,
    "beneficence": lambda emotion: 1 + emotion.sadness * 0.2,
    "non_maleficence": lambda emotion: 1 - emotion.fear * 0.3,
}
DEFAULT_FACTOR = 1.0

ModelT = TypeVar("ModelT", bound=BaseModel)


def _clamp(value: float, min_value: float = 0.0, max_value: float = 1.0) -> float:
    return max(min_value, min(max_value, value))


def _coerce_model(
    model: Type[ModelT], value: Union[ModelT, Mapping[str, object]], label: str
) -> ModelT:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid {label}: {exc}") from exc


def _coerce_behavioral_signal(signal: Iterable[float]) -> List[float]:
    if isinstance(signal, (str, bytes)):
        raise InvalidInputError("Behavioral signal must be a sequence of numbers.")
    values: List[float] = []
    for value in signal:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInputError(f"Behavioral signal holds a non-numeric value: {value!r}")
        try:
            number = float(value)
        except OverflowError as exc:
            raise InvalidInputError(
                "Behavioral signal holds an integer too large for a float."
            ) from exc
        if not math.isfinite(number):
            raise InvalidInputError(f"Behavioral signal holds a non-finite value: {value!r}")
        values.append(number)
    if not values:
        raise InvalidInputError("Behavioral signal must not be empty.")
    return values


def _coerce_environmental_factors(factors: Iterable[str]) -> List[str]:
    if isinstance(factors, (str, bytes)):
        raise InvalidInputError(
            "Environmental factors must be a list of tags, not a single string."
        )
    tags = list(factors)
    for tag in tags:
        if not isinstance(tag, str):
            raise InvalidInputError(f"Environmental factor must be a string: {tag!r}")
    return tags


def emotional_score(emotion: EmotionalState) -> float:
    """Weighted emotional sub-score.

    Not clamped. For intensities inside [0, 1] the result stays within
    [0.1, 0.9]: all-negative emotions at 1 give 0.1, joy, surprise and
    neutral at 1 give 0.9.
    """

    score = EMOTIONAL_BASELINE
    for name in EMOTION_ORDER:
        score = score + getattr(emotion, name) * EMOTION_WEIGHTS[name]
    return score


def behavioral_score(signal: Sequence[float]) -> float:
    if not signal:
        raise InvalidInputError("Behavioral signal must not be empty.")
    # Plain left-to-right accumulation.
    total = 0.0
    for value in signal:
        total = total + value
    mean = total / len(signal)
    if not math.isfinite(mean):
        raise InvalidInputError("Behavioral signal mean overflows a float.")
    return mean


def context_score(context: SituationalContext) -> float:
    social_pressure_impact = 1 - context.social_context.social_pressure * 0.5
    risk_adjustment = 1 - context.location.risk_level * 0.3
    return (social_pressure_impact + risk_adjustment) / 2


def environmental_score(factors: Iterable[str]) -> float:
    score = ENVIRONMENTAL_BASELINE
    for factor in factors:
        if factor in POSITIVE_ENVIRONMENT_FACTORS:
            score = score + POSITIVE_ENVIRONMENT_BONUS
        elif factor in NEGATIVE_ENVIRONMENT_FACTORS:
            score = score - NEGATIVE_ENVIRONMENT_PENALTY
    return _clamp(score)


def calculate_ethical_score(
    emotion: EmotionalState,
    behavioral_signal: Sequence[float],
    context: SituationalContext,
    environmental_factors: Iterable[str],
) -> float:
    score = (
        emotional_score(emotion) * SCORE_WEIGHTS["emotional"]
        + behavioral_score(behavioral_signal) * SCORE_WEIGHTS["behavioral"]
        + context_score(context) * SCORE_WEIGHTS["context"]
        + environmental_score(environmental_factors) * SCORE_WEIGHTS["environmental"]
    )
    if not 0.0 <= score <= 1.0:
        LOGGER.warning("ethical_alignment_out_of_range score=%.4f", score)
    return score


def contextual_factor(principle: str, context: SituationalContext) -> float:
    factor = CONTEXTUAL_FACTORS.get(principle)
    return factor(context) if factor else DEFAULT_FACTOR


def emotional_factor(principle: str, emotion: EmotionalState) -> float:
    factor = EMOTIONAL_FACTORS.get(principle)
    return factor(emotion) if factor else DEFAULT_FACTOR


def calculate_principle_relevance(
    principle: str,
    context: SituationalContext,
    emotion: EmotionalState,
    base_weight: float,
) -> float:
    return min(
        1.0,
        base_weight * contextual_factor(principle, context) * emotional_factor(principle, emotion),
    )


def analyze_ethical_principles(
    context: SituationalContext, emotion: EmotionalState
) -> List[PrincipleRelevance]:
    return [
        PrincipleRelevance(
            principle=principle.id,
            relevance=calculate_principle_relevance(
                principle.id, context, emotion, principle.weight
            ),
        )
        for principle in ETHICAL_PRINCIPLES
    ]


def _high_relevance(principles: Sequence[PrincipleRelevance]) -> List[PrincipleRelevance]:
    return [p for p in principles if p.relevance > HIGH_RELEVANCE_THRESHOLD]


def identify_conflicts(
    context: SituationalContext,
    principles: Sequence[PrincipleRelevance],
    emotion: EmotionalState,
) -> List[str]:
    conflicts: List[str] = []
    if context.social_context.social_pressure > CONFLICT_SOCIAL_PRESSURE_THRESHOLD:
        conflicts.append(AUTONOMY_VS_HARMONY)
    if emotion.anger > CONFLICT_EMOTION_THRESHOLD or emotion.fear > CONFLICT_EMOTION_THRESHOLD:
        conflicts.append(EMOTION_VS_JUDGMENT)
    # sorted() is stable, so equal relevances keep catalog order.
    ranked = sorted(_high_relevance(principles), key=lambda p: p.relevance, reverse=True)
    if len(ranked) >= 2:
        conflicts.append(f"{ranked[0].principle}_vs_{ranked[1].principle}")
    return conflicts


def short_term_consequences(context: SituationalContext, ethical_alignment: float) -> List[str]:
    consequences: List[str] = []
    if context.social_context.number_of_people > 1:
        consequences.append("immediate_social_dynamics")
    if ethical_alignment < LOW_ALIGNMENT_THRESHOLD:
        consequences.append("potential_trust_erosion")
    if context.location.risk_level > CONSEQUENCE_RISK_THRESHOLD:
        consequences.append("immediate_safety_concerns")
    return consequences


def long_term_consequences(
    context: SituationalContext, principles: Sequence[PrincipleRelevance]
) -> List[str]:
    consequences: List[str] = []
    if principles:
        # max() keeps the first maximal entry, i.e. the earliest in catalog order.
        top = max(principles, key=lambda p: p.relevance)
        consequences.append(f"{top.principle}{DEVELOPMENT_SUFFIX}")
    if context.social_context.social_pressure > CONSEQUENCE_SOCIAL_PRESSURE_THRESHOLD:
        consequences.append("relationship_pattern_formation")
    if context.location.type == "workplace":
        consequences.append("professional_reputation_impact")
    return consequences


def predict_consequences(
    context: SituationalContext,
    ethical_alignment: float,
    principles: Sequence[PrincipleRelevance],
) -> PotentialConsequences:
    return PotentialConsequences(
        short_term=short_term_consequences(context, ethical_alignment),
        long_term=long_term_consequences(context, principles),
    )


def generate_recommendations(
    ethical_alignment: float,
    principles: Sequence[PrincipleRelevance],
    consequences: PotentialConsequences,
    context: SituationalContext,
    emotion: EmotionalState,
) -> List[str]:
    recommendations: List[str] = []
    if ethical_alignment < LOW_ALIGNMENT_THRESHOLD:
        recommendations.append(RECOMMEND_REASSESS)
    if (
        emotion.anger > RECOMMENDATION_EMOTION_THRESHOLD
        or emotion.fear > RECOMMENDATION_EMOTION_THRESHOLD
    ):
        recommendations.append(RECOMMEND_PROCESS_EMOTIONS)
    if context.social_context.social_pressure > RECOMMENDATION_SOCIAL_PRESSURE_THRESHOLD:
        recommendations.append(RECOMMEND_EXTERNAL_PERSPECTIVE)
    for principle in _high_relevance(principles):
        recommendations.append(
            f"{ALIGN_ACTION_PREFIX}{humanize_tag(principle.principle)}{ALIGN_ACTION_SUFFIX}"
        )
    if consequences.long_term:
        recommendations.append(RECOMMEND_LONG_TERM)
    return recommendations


def analyze_moral_context(
    context: Union[SituationalContext, Mapping[str, object]],
    emotional_state: Union[EmotionalState, Mapping[str, object]],
    behavioral_signal: Iterable[float],
    environmental_factors: Iterable[str] = (),
) -> MoralAnalysis:
    try:
        context = _coerce_model(SituationalContext, context, "situational context")
        emotional_state = _coerce_model(EmotionalState, emotional_state, "emotional state")
        signal = _coerce_behavioral_signal(behavioral_signal)
        factors = _coerce_environmental_factors(environmental_factors)
        ethical_alignment = calculate_ethical_score(emotional_state, signal, context, factors)
    except InvalidInputError as exc:
        LOGGER.warning("moral_analysis_rejected reason=%s", exc)
        raise

    principles = analyze_ethical_principles(context, emotional_state)
    conflicts = identify_conflicts(context, principles, emotional_state)
    consequences = predict_consequences(context, ethical_alignment, principles)
    recommendations = generate_recommendations(
        ethical_alignment, principles, consequences, context, emotional_state
    )
    LOGGER.debug(
        "moral_analysis alignment=%.4f conflicts=%s short_term=%s long_term=%s actions=%s",
        ethical_alignment,
        len(conflicts),
        len(consequences.short_term),
        len(consequences.long_term),
        len(recommendations),
    )
    return MoralAnalysis(
        ethical_alignment=ethical_alignment,
        conflicting_values=conflicts,
        potential_consequences=consequences,
        recommended_actions=recommendations,
        moral_principles=principles,
    )


async def analyze_moral_context_async(
    context: Union[SituationalContext, Mapping[str, object]],
    emotional_state: Union[EmotionalState, Mapping[str, object]],
    behavioral_signal: Iterable[float],
    environmental_factors: Iterable[str] = (),
) -> MoralAnalysis:
    return analyze_moral_context(
        context, emotional_state, behavioral_signal, environmental_factors
    )


def summarize_emotional_state(
    emotional_state: Union[EmotionalState, Mapping[str, object]]
) -> EmotionalProfile:
    emotion = _coerce_model(EmotionalState, emotional_state, "emotional state")
    values = [getattr(emotion, name) for name in EMOTION_ORDER]

    dominant, intensity = "neutral", -1.0
    for name, value in zip(EMOTION_ORDER, values):
        if value > intensity:
            dominant, intensity = name, value

    positive = emotion.joy + emotion.surprise
    negative = emotion.sadness + emotion.anger + emotion.fear
    balance = (positive - negative + 1) / 2

    mean = sum(values) / len(values)
    variance = sum((value - mean) ** 2 for value in values) / len(values)
    stability = emotion.neutral * 0.4 + (1 - min(1.0, variance * 4)) * 0.6

    recommendations: List[str] = []
    if emotion.anger > EMOTION_ANGER_THRESHOLD:
        recommendations.append(RECOMMEND_CALM_DOWN)
    if emotion.fear > EMOTION_FEAR_THRESHOLD:
        recommendations.append(RECOMMEND_ADDRESS_CONCERNS)
    if stability < EMOTION_STABILITY_THRESHOLD:
        recommendations.append(RECOMMEND_REGULATION)

    return EmotionalProfile(
        dominant_emotion=dominant,
        dominant_intensity=intensity,
        balance=balance,
        stability=stability,
        recommendations=recommendations,
    )


def describe_analysis(analysis: MoralAnalysis) -> AnalysisDescriptions:
    consequences = analysis.potential_consequences
    return AnalysisDescriptions(
        conflicts=describe_tags(analysis.conflicting_values, describe_conflict),
        consequences=describe_tags(
            [*consequences.short_term, *consequences.long_term], describe_consequence
        ),
        actions=describe_tags(analysis.recommended_actions, describe_action),
    )
