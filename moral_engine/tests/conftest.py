from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient

from moral_engine.analysis import EmotionalState, SituationalContext
from moral_engine.main import RATE_LIMITER, app


@pytest.fixture(autouse=True)
def reset_state() -> None:
    RATE_LIMITER.hits.clear()


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def _context_payload(
    location_type: str = "home",
    risk_level: float = 0.0,
    number_of_people: int = 1,
    social_pressure: float = 0.0,
) -> Dict[str, object]:
    return {
        "location": {
            "type": location_type,
            "description": f"a {location_type}",
            "risk_level": risk_level,
        },
        "time_context": {
            "time_of_day": "morning",
            "day_type": "weekday",
            "season": "spring",
        },
        "social_context": {
            "number_of_people": number_of_people,
            "relationship_types": ["colleague"] if number_of_people > 1 else [],
            "social_pressure": social_pressure,
        },
    }


def _emotion_payload(**overrides: float) -> Dict[str, float]:
    payload = {
        "joy": 0.0,
        "sadness": 0.0,
        "anger": 0.0,
        "fear": 0.0,
        "surprise": 0.0,
        "neutral": 0.0,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def make_context() -> Callable[..., SituationalContext]:
    def factory(**kwargs: object) -> SituationalContext:
        return SituationalContext.model_validate(_context_payload(**kwargs))

    return factory


@pytest.fixture()
def make_emotion() -> Callable[..., EmotionalState]:
    def factory(**overrides: float) -> EmotionalState:
        return EmotionalState(**_emotion_payload(**overrides))

    return factory


@pytest.fixture()
def workplace_context(make_context: Callable[..., SituationalContext]) -> SituationalContext:
    return make_context(
        location_type="workplace",
        risk_level=0.6,
        number_of_people=3,
        social_pressure=0.7,
    )


@pytest.fixture()
def context_payload() -> Callable[..., Dict[str, object]]:
    return _context_payload


@pytest.fixture()
def emotion_payload() -> Callable[..., Dict[str, float]]:
    return _emotion_payload
