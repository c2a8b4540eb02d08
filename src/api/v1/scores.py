"""Human scoring endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from dependencies.services import Scores, SettingsDep
from schemas.benchmarks import Score, ScoreIn, ScoringCriterion
from services.score_store import load_criteria


logger = logging.getLogger(__name__)

router = APIRouter(tags=["scores"])


@router.get("/scores", response_model=list[Score])
def get_scores(scores: Scores) -> list[Score]:
    return scores.load()


@router.post("/scores", response_model=Score)
def post_score(score_in: ScoreIn, scores: Scores) -> Score:
    """Create a score, replacing any earlier one by the same scorer."""
    score = scores.upsert(score_in)
    logger.info(
        "Scored %s/%s by %s", score.benchmark_id, score.model_id, score.scored_by
    )
    return score


@router.get("/scoring-criteria", response_model=list[ScoringCriterion])
def get_scoring_criteria(settings: SettingsDep) -> list[ScoringCriterion]:
    return load_criteria(settings.scoring_config_path)
