"""Stored result listing and showcase export endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import HTMLResponse, PlainTextResponse

from dependencies.services import Results, Scores, SettingsDep
from services.score_store import load_criteria
from services.showcase import ShowcaseCard, build_showcase_html


router = APIRouter(tags=["results"])


@router.get("/results", response_model=dict[str, list[str]])
def get_results(results: Results) -> dict[str, list[str]]:
    """Map each benchmark id to the model ids that have a stored artifact."""
    return results.list_results()


@router.get("/results/{benchmark_id}/raw", response_class=PlainTextResponse)
def get_raw_response(benchmark_id: str, model_id: str, results: Results) -> str:
    try:
        return results.read_raw_response(benchmark_id, model_id)
    except ValueError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.get("/export-html", response_class=HTMLResponse)
def export_html(
    settings: SettingsDep,
    results: Results,
    scores: Scores,
    benchmark_id: str | None = None,
    download: str | None = None,
) -> HTMLResponse:
    """Render every artifact of one benchmark into a standalone showcase page.

    Args:
        benchmark_id: Benchmark whose stored artifacts are exported.
        download: ``"1"`` serves the page as an attachment.
    """
    if not benchmark_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="benchmark_id required"
        )
    if not (results.results_dir / benchmark_id).is_dir():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Benchmark not found"
        )

    benchmark_scores = scores.for_benchmark(benchmark_id)
    cards: list[ShowcaseCard] = []
    for model_id in results.models_for_benchmark(benchmark_id):
        score = next((s for s in benchmark_scores if s.model_id == model_id), None)
        cards.append(
            ShowcaseCard(
                model_id=model_id,
                html=results.read_html(benchmark_id, model_id),
                scores=score.scores if score else None,
                notes=score.notes if score else "",
            )
        )

    page = build_showcase_html(
        benchmark_id,
        cards,
        load_criteria(settings.scoring_config_path),
        exported_on=date.today(),
    )
    headers: dict[str, str] = {}
    if download == "1":
        headers["Content-Disposition"] = (
            f'attachment; filename="{benchmark_id}-showcase.html"'
        )
    return HTMLResponse(page, headers=headers)
