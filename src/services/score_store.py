"""Human scores stored in ``scores.json`` and scoring criteria from config."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from schemas.benchmarks import Score, ScoreIn, ScoringCriterion


logger = logging.getLogger(__name__)

DEFAULT_SCORER = "manual"

_scores_adapter = TypeAdapter(list[Score])
_criteria_adapter = TypeAdapter(list[ScoringCriterion])


class ScoreStore:
    """Read-modify-write access to the scoreboard file.

    Runs on a single event loop; writes are whole-file replacements.
    """

    def __init__(self, scores_path: Path) -> None:
        self.scores_path = scores_path

    def load(self) -> list[Score]:
        if not self.scores_path.is_file():
            return []
        try:
            return _scores_adapter.validate_json(
                self.scores_path.read_bytes() or b"[]"
            )
        except ValidationError as e:
            logger.warning(
                "Ignoring unreadable scores file %s: %s", self.scores_path, e
            )
            return []

    def save(self, scores: list[Score]) -> None:
        self.scores_path.parent.mkdir(parents=True, exist_ok=True)
        payload = [s.model_dump() for s in scores]
        self.scores_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def upsert(self, score_in: ScoreIn) -> Score:
        """Replace the score from the same scorer for this pairing, or add it."""
        scored_by = score_in.scored_by or DEFAULT_SCORER
        new_score = Score(
            benchmark_id=score_in.benchmark_id,
            model_id=score_in.model_id,
            scores=score_in.scores,
            notes=score_in.notes or "",
            scored_by=scored_by,
            timestamp=int(time.time() * 1000),
        )

        scores = self.load()
        for i, existing in enumerate(scores):
            if (
                existing.benchmark_id == new_score.benchmark_id
                and existing.model_id == new_score.model_id
                and existing.scored_by == scored_by
            ):
                scores[i] = new_score
                break
        else:
            scores.append(new_score)

        self.save(scores)
        return new_score

    def for_benchmark(self, benchmark_id: str) -> list[Score]:
        return [s for s in self.load() if s.benchmark_id == benchmark_id]


def load_criteria(path: Path) -> list[ScoringCriterion]:
    """Scoring criteria from ``scoring.json``; a missing or bad file yields []."""
    if not path.is_file():
        return []
    try:
        return _criteria_adapter.validate_json(path.read_bytes())
    except ValidationError as e:
        logger.warning("Ignoring unreadable scoring criteria %s: %s", path, e)
        return []
