from __future__ import annotations

import logging
import os
import time
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from moral_engine.analysis import (
    AnalysisDescriptions,
    EmotionalProfile,
    EmotionalState,
    InvalidInputError,
    MoralAnalysis,
    SituationalContext,
    analyze_moral_context_async,
    describe_analysis,
    summarize_emotional_state,
)
from moral_engine.assessments import (
    BehavioralAssessment,
    BehavioralPattern,
    ContextAssessment,
    assess_behavioral_patterns,
    assess_context,
)
from moral_engine.catalog import ETHICAL_PRINCIPLES, EthicalPrinciple

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
ANALYSIS_RATE_LIMIT = int(os.getenv("ANALYSIS_RATE_LIMIT", "120"))
ANALYSIS_RATE_WINDOW_SECONDS = int(os.getenv("ANALYSIS_RATE_WINDOW_SECONDS", "60"))

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
LOGGER = logging.getLogger("moral_engine")

app = FastAPI(title="Moral Engine", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AnalyzeRequest(BaseModel):
    context: SituationalContext
    emotional_state: EmotionalState
    behavioral_signal: List[float]
    environmental_factors: List[str] = Field(default_factory=list)
    behavioral_patterns: List[BehavioralPattern] = Field(default_factory=list)
    include_descriptions: bool = False


class AnalyzeResponse(BaseModel):
    analysis: MoralAnalysis
    emotional_profile: EmotionalProfile
    context_assessment: ContextAssessment
    behavioral_assessment: BehavioralAssessment
    descriptions: Optional[AnalysisDescriptions] = None


class PrincipleListResponse(BaseModel):
    principles: List[EthicalPrinciple]


class RateLimiter:
    def __init__(self) -> None:
        self.hits: Dict[str, List[float]] = {}

    def check(self, key: str, limit: int, window_seconds: int) -> None:
        now = time.time()
        window_start = now - window_seconds
        timestamps = [ts for ts in self.hits.get(key, []) if ts > window_start]
        if len(timestamps) >= limit:
            raise HTTPException(
                status_code=429,
                detail="Rate limit exceeded. Please slow down and try again.",
            )
        timestamps.append(now)
        self.hits[key] = timestamps


RATE_LIMITER = RateLimiter()


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "anonymous"


def _rate_limit(scope: str, limit: int, window_seconds: int):
    def dependency(request: Request) -> None:
        RATE_LIMITER.check(f"{scope}:{_client_key(request)}", limit, window_seconds)

    return dependency


def _log_analysis(payload: AnalyzeRequest, analysis: MoralAnalysis) -> None:
    LOGGER.info(
        "moral_analysis location=%s people=%s alignment=%.3f conflicts=%s short_term=%s long_term=%s",
        payload.context.location.type,
        payload.context.social_context.number_of_people,
        analysis.ethical_alignment,
        ",".join(analysis.conflicting_values) or "-",
        ",".join(analysis.potential_consequences.short_term) or "-",
        ",".join(analysis.potential_consequences.long_term) or "-",
    )


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/principles", response_model=PrincipleListResponse)
def principles_list() -> PrincipleListResponse:
    return PrincipleListResponse(principles=list(ETHICAL_PRINCIPLES))


@app.post("/moral/analyze", response_model=AnalyzeResponse)
async def moral_analyze(
    payload: AnalyzeRequest,
    _: None = Depends(
        _rate_limit(
            "analysis",
            limit=ANALYSIS_RATE_LIMIT,
            window_seconds=ANALYSIS_RATE_WINDOW_SECONDS,
        )
    ),
) -> AnalyzeResponse:
    try:
        analysis = await analyze_moral_context_async(
            payload.context,
            payload.emotional_state,
            payload.behavioral_signal,
            payload.environmental_factors,
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    _log_analysis(payload, analysis)
    return AnalyzeResponse(
        analysis=analysis,
        emotional_profile=summarize_emotional_state(payload.emotional_state),
        context_assessment=assess_context(payload.context),
        behavioral_assessment=assess_behavioral_patterns(payload.behavioral_patterns),
        descriptions=describe_analysis(analysis) if payload.include_descriptions else None,
    )


@app.post("/moral/emotions", response_model=EmotionalProfile)
def moral_emotions(payload: EmotionalState) -> EmotionalProfile:
    return summarize_emotional_state(payload)
