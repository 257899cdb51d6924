from __future__ import annotations

from typing import Callable, Dict, Iterable, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

PrincipleId = Literal[
    "autonomy",
    "beneficence",
    "non_maleficence",
    "justice",
    "fidelity",
    "utility",
    "care",
    "virtue",
]


class EthicalPrinciple(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: PrincipleId
    weight: float = Field(..., ge=0.0, le=1.0)
    description: str
    indicators: Tuple[str, ...] = ()


ETHICAL_PRINCIPLES: Tuple[EthicalPrinciple, ...] = (
    EthicalPrinciple(
        id="autonomy",
        weight=0.9,
        description="Respect for individual choice and self-determination",
        indicators=("personal_freedom", "independence", "self_governance"),
    ),
    EthicalPrinciple(
        id="beneficence",
        weight=0.85,
        description="Active promotion of well-being and benefit",
        indicators=("helping_others", "positive_impact", "welfare_promotion"),
    ),
    EthicalPrinciple(
        id="non_maleficence",
        weight=0.8,
        description="Avoiding harm to others",
        indicators=("harm_prevention", "safety", "protection"),
    ),
    EthicalPrinciple(
        id="justice",
        weight=0.9,
        description="Fair and equitable treatment",
        indicators=("fairness", "equality", "impartiality"),
    ),
    EthicalPrinciple(
        id="fidelity",
        weight=0.75,
        description="Maintaining trust and keeping commitments",
        indicators=("loyalty", "trustworthiness", "reliability"),
    ),
    EthicalPrinciple(
        id="utility",
        weight=0.8,
        description="Maximizing overall benefit for all involved",
        indicators=("efficiency", "effectiveness", "optimization"),
    ),
    EthicalPrinciple(
        id="care",
        weight=0.85,
        description="Showing concern and compassion for others",
        indicators=("empathy", "compassion", "support"),
    ),
    EthicalPrinciple(
        id="virtue",
        weight=0.7,
        description="Embodying moral excellence and character",
        indicators=("integrity", "honesty", "wisdom"),
    ),
)

PRINCIPLES_BY_ID: Dict[str, EthicalPrinciple] = {
    principle.id: principle for principle in ETHICAL_PRINCIPLES
}

CONFLICT_DESCRIPTIONS: Dict[str, str] = {
    "individual_autonomy_vs_social_harmony": "Balancing personal freedom with group cohesion",
    "emotional_reaction_vs_rational_judgment": (
        "Managing emotional responses while maintaining objectivity"
    ),
    "immediate_vs_long_term_consequences": (
        "Weighing short-term benefits against long-term impacts"
    ),
}

CONSEQUENCE_DESCRIPTIONS: Dict[str, str] = {
    "immediate_social_dynamics": "Direct impact on current relationships and social interactions",
    "potential_trust_erosion": "Possible decrease in trust and credibility",
    "immediate_safety_concerns": "Immediate risks to well-being and security",
    "relationship_pattern_formation": "Development of lasting behavioral patterns",
    "professional_reputation_impact": "Long-term effects on professional standing",
}

ACTION_DESCRIPTIONS: Dict[str, str] = {
    "Reassess decision considering ethical principles": (
        "Take time to evaluate the decision against core moral values"
    ),
    "Take time to process emotions before acting": (
        "Allow emotional responses to settle before making decisions"
    ),
    "Consider seeking external perspective": (
        "Gain insights from uninvolved parties for better objectivity"
    ),
    "Consider long-term impact on relationships and reputation": (
        "Think past the immediate outcome to how trust and standing will hold up"
    ),
}

DEVELOPMENT_SUFFIX = "_development"
ALIGN_ACTION_PREFIX = "Align action with "
ALIGN_ACTION_SUFFIX = " principle"


def humanize_tag(tag: str) -> str:
    return tag.replace("_", " ")


def _principle_from_name(name: str) -> Optional[EthicalPrinciple]:
    return PRINCIPLES_BY_ID.get(name.replace(" ", "_"))


def describe_conflict(tag: str) -> str:
    if tag in CONFLICT_DESCRIPTIONS:
        return CONFLICT_DESCRIPTIONS[tag]
    first, sep, second = tag.partition("_vs_")
    if sep and first in PRINCIPLES_BY_ID and second in PRINCIPLES_BY_ID:
        return (
            f"Tension between {humanize_tag(first)} "
            f"({PRINCIPLES_BY_ID[first].description.lower()}) and "
            f"{humanize_tag(second)} "
            f"({PRINCIPLES_BY_ID[second].description.lower()})"
        )
    return humanize_tag(tag)


def describe_consequence(tag: str) -> str:
    if tag in CONSEQUENCE_DESCRIPTIONS:
        return CONSEQUENCE_DESCRIPTIONS[tag]
    if tag.endswith(DEVELOPMENT_SUFFIX):
        principle = PRINCIPLES_BY_ID.get(tag[: -len(DEVELOPMENT_SUFFIX)])
        if principle is not None:
            return (
                f"Strengthening {humanize_tag(principle.id)} as a habit: "
                f"{principle.description.lower()}"
            )
    return humanize_tag(tag)


def describe_action(action: str) -> str:
    if action in ACTION_DESCRIPTIONS:
        return ACTION_DESCRIPTIONS[action]
    if action.startswith(ALIGN_ACTION_PREFIX) and action.endswith(ALIGN_ACTION_SUFFIX):
        name = action[len(ALIGN_ACTION_PREFIX) : -len(ALIGN_ACTION_SUFFIX)]
        principle = _principle_from_name(name)
        if principle is not None:
            return f"Let the choice reflect {principle.description.lower()}"
    return action


def describe_tags(tags: Iterable[str], describe: Callable[[str], str]) -> Dict[str, str]:
    return {tag: describe(tag) for tag in tags}
