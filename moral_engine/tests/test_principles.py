import pytest

from moral_engine.analysis import (
    PotentialConsequences,
    PrincipleRelevance,
    analyze_ethical_principles,
    contextual_factor,
    emotional_factor,
    generate_recommendations,
    identify_conflicts,
    long_term_consequences,
    short_term_consequences,
)
from moral_engine.catalog import ETHICAL_PRINCIPLES


def _relevance_map(principles) -> dict:
    return {p.principle: p.relevance for p in principles}


def test_catalog_order_and_weights() -> None:
    assert [(p.id, p.weight) for p in ETHICAL_PRINCIPLES] == [
        ("autonomy", 0.9),
        ("beneficence", 0.85),
        ("non_maleficence", 0.8),
        ("justice", 0.9),
        ("fidelity", 0.75),
        ("utility", 0.8),
        ("care", 0.85),
        ("virtue", 0.7),
    ]


def test_unlisted_principles_use_identity_factor(make_context, make_emotion) -> None:
    context = make_context(number_of_people=5, risk_level=0.9, social_pressure=0.9)
    emotion = make_emotion(joy=1, sadness=1, anger=1, fear=1)
    for principle in ("fidelity", "virtue"):
        assert contextual_factor(principle, context) == 1.0
        assert emotional_factor(principle, emotion) == 1.0


def test_contextual_factors(make_context) -> None:
    assert contextual_factor("autonomy", make_context(social_pressure=0.6)) == pytest.approx(0.7)
    assert contextual_factor("justice", make_context(number_of_people=1)) == 0.8
    assert contextual_factor("justice", make_context(number_of_people=2)) == 1.2
    assert contextual_factor("care", make_context(risk_level=0.5)) == 1.0
    assert contextual_factor("care", make_context(risk_level=0.51)) == 1.3
    assert contextual_factor("utility", make_context(number_of_people=2)) == 1.0
    assert contextual_factor("utility", make_context(number_of_people=3)) == 1.4


def test_emotional_factors(make_emotion) -> None:
    emotion = make_emotion(joy=0.5, anger=0.5, sadness=0.5, fear=1.0)
    assert emotional_factor("care", emotion) == pytest.approx(1.15)
    assert emotional_factor("justice", emotion) == pytest.approx(1.1)
    assert emotional_factor("beneficence", emotion) == pytest.approx(1.1)
    assert emotional_factor("non_maleficence", emotion) == pytest.approx(0.7)


def test_relevance_for_quiet_solo_context(make_context, make_emotion) -> None:
    principles = analyze_ethical_principles(make_context(), make_emotion(neutral=1.0))
    assert [p.principle for p in principles] == [p.id for p in ETHICAL_PRINCIPLES]
    assert _relevance_map(principles) == pytest.approx(
        {
            "autonomy": 0.9,
            "beneficence": 0.85,
            "non_maleficence": 0.8,
            "justice": 0.72,
            "fidelity": 0.75,
            "utility": 0.8,
            "care": 0.85,
            "virtue": 0.7,
        }
    )


def test_relevance_is_capped_at_one(workplace_context, make_emotion) -> None:
    principles = analyze_ethical_principles(workplace_context, make_emotion(joy=1.0, anger=1.0))
    relevance = _relevance_map(principles)
    assert len(principles) == 8
    assert all(0.0 <= p.relevance <= 1.0 for p in principles)
    assert relevance["justice"] == 1.0
    assert relevance["utility"] == 1.0
    assert relevance["care"] == 1.0
    assert relevance["autonomy"] == pytest.approx(0.585)


def test_fear_lowers_non_maleficence(make_context, make_emotion) -> None:
    relevance = _relevance_map(analyze_ethical_principles(make_context(), make_emotion(fear=1.0)))
    assert relevance["non_maleficence"] == pytest.approx(0.56)


def test_conflicts_fire_in_rule_order(workplace_context, make_emotion) -> None:
    emotion = make_emotion(anger=0.6)
    principles = analyze_ethical_principles(workplace_context, emotion)
    assert identify_conflicts(workplace_context, principles, emotion) == [
        "individual_autonomy_vs_social_harmony",
        "emotional_reaction_vs_rational_judgment",
        "justice_vs_utility",
    ]


def test_conflict_thresholds_are_strict(make_context, make_emotion) -> None:
    context = make_context(social_pressure=0.6)
    emotion = make_emotion(anger=0.5, fear=0.5)
    principles = [PrincipleRelevance(principle="autonomy", relevance=0.9)]
    assert identify_conflicts(context, principles, emotion) == []


def test_conflict_tie_break_prefers_catalog_order(make_context, make_emotion) -> None:
    context = make_context()
    principles = [
        PrincipleRelevance(principle="utility", relevance=0.8),
        PrincipleRelevance(principle="care", relevance=0.9),
        PrincipleRelevance(principle="justice", relevance=0.9),
    ]
    assert identify_conflicts(context, principles, make_emotion()) == ["care_vs_justice"]


def test_conflict_ranks_by_relevance(make_context, make_emotion) -> None:
    principles = analyze_ethical_principles(make_context(), make_emotion(neutral=1.0))
    assert identify_conflicts(make_context(), principles, make_emotion(neutral=1.0)) == [
        "autonomy_vs_beneficence"
    ]


def test_short_term_consequences(workplace_context, make_context) -> None:
    assert short_term_consequences(workplace_context, 0.5) == [
        "immediate_social_dynamics",
        "potential_trust_erosion",
        "immediate_safety_concerns",
    ]
    assert short_term_consequences(make_context(risk_level=0.5), 0.6) == []


def test_long_term_consequences(workplace_context, make_emotion) -> None:
    principles = analyze_ethical_principles(workplace_context, make_emotion(neutral=1.0))
    assert long_term_consequences(workplace_context, principles) == [
        "justice_development",
        "relationship_pattern_formation",
        "professional_reputation_impact",
    ]


def test_long_term_tie_break_prefers_first_principle(make_context) -> None:
    principles = [
        PrincipleRelevance(principle="fidelity", relevance=0.75),
        PrincipleRelevance(principle="care", relevance=0.75),
    ]
    assert long_term_consequences(make_context(), principles) == ["fidelity_development"]


def test_recommendations_for_low_alignment(make_context, make_emotion) -> None:
    principles = [PrincipleRelevance(principle="virtue", relevance=0.7)]
    recommendations = generate_recommendations(
        0.5, principles, PotentialConsequences(), make_context(), make_emotion()
    )
    assert recommendations == ["Reassess decision considering ethical principles"]


def test_recommendations_follow_rule_order(workplace_context, make_emotion) -> None:
    emotion = make_emotion(fear=0.45)
    principles = [
        PrincipleRelevance(principle="autonomy", relevance=0.6),
        PrincipleRelevance(principle="non_maleficence", relevance=0.8),
        PrincipleRelevance(principle="care", relevance=1.0),
    ]
    consequences = PotentialConsequences(long_term=["care_development"])
    assert generate_recommendations(
        0.7, principles, consequences, workplace_context, emotion
    ) == [
        "Take time to process emotions before acting",
        "Consider seeking external perspective",
        "Align action with non maleficence principle",
        "Align action with care principle",
        "Consider long-term impact on relationships and reputation",
    ]


def test_recommendations_empty_when_nothing_fires(make_context, make_emotion) -> None:
    principles = [PrincipleRelevance(principle="virtue", relevance=0.7)]
    assert (
        generate_recommendations(
            0.6, principles, PotentialConsequences(), make_context(), make_emotion(anger=0.4)
        )
        == []
    )
