"""Standalone HTML showcase of every stored artifact for one benchmark.

Each model's artifact is embedded in a sandboxed ``<iframe srcdoc>`` so the
exported page can be opened anywhere without the API.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from jinja2 import Environment

from schemas.benchmarks import ScoringCriterion
from services.benchmarks import benchmark_name


@dataclass(frozen=True)
class ShowcaseCard:
    model_id: str
    html: str
    scores: dict[str, float] | None
    notes: str = ""

    @property
    def average(self) -> float | None:
        if not self.scores:
            return None
        return sum(self.scores.values()) / len(self.scores)


def score_color(value: float) -> str:
    if value >= 7:
        return "#4ade80"
    if value >= 4:
        return "#facc15"
    return "#f87171"


def grid_columns(card_count: int) -> int:
    if card_count <= 2:
        return max(card_count, 1)
    if card_count <= 4:
        return 2
    return 3


def sort_cards(cards: list[ShowcaseCard]) -> list[ShowcaseCard]:
    """Scored cards by descending average, then unscored ones alphabetically."""
    return sorted(
        cards,
        key=lambda c: (-(c.average if c.average is not None else -1), c.model_id),
    )


_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
_env.filters["score_color"] = score_color

_TEMPLATE = _env.from_string(
    """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ title }} - Eval Studio Showcase</title>
  <style>
    *, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }
    body { background: #09090b; color: #e4e4e7; min-height: 100vh;
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; }
    .header { text-align: center; padding: 48px 24px 32px; }
    .header h1 { font-size: 2.5rem; font-weight: 700; margin-bottom: 8px;
      background: linear-gradient(135deg, #3b82f6, #a855f7);
      -webkit-background-clip: text; -webkit-text-fill-color: transparent;
      background-clip: text; }
    .header .subtitle { font-size: 0.95rem; color: #71717a; }
    .header .meta { margin-top: 12px; font-size: 0.8rem; color: #52525b; }
    .grid { display: grid; grid-template-columns: repeat({{ cols }}, 1fr); gap: 20px;
      padding: 0 32px 48px; max-width: 1800px; margin: 0 auto; }
    .card { border: 1px solid #27272a; border-radius: 12px; overflow: hidden;
      background: #18181b; display: flex; flex-direction: column; }
    .card-header { display: flex; align-items: center; justify-content: space-between;
      padding: 12px 16px; background: #1c1c1f; border-bottom: 1px solid #27272a; }
    .model-name { font-size: 0.85rem; font-weight: 600; color: #d4d4d8;
      overflow: hidden; text-overflow: ellipsis; white-space: nowrap; }
    .avg-badge { font-size: 0.75rem; font-weight: 700; padding: 2px 8px;
      border-radius: 6px; flex-shrink: 0; }
    .card-iframe-wrapper { position: relative; width: 100%; aspect-ratio: 4 / 3;
      background: #000; }
    .card-iframe-wrapper iframe { position: absolute; inset: 0; width: 100%;
      height: 100%; border: none; }
    .scores { padding: 10px 16px 12px; display: flex; flex-direction: column; gap: 5px;
      border-top: 1px solid #27272a; }
    .scores.no-scores { color: #52525b; font-size: 0.75rem; text-align: center;
      padding: 8px 16px; }
    .score-item { display: flex; align-items: center; gap: 8px; }
    .score-label { font-size: 0.7rem; color: #71717a; width: 80px; flex-shrink: 0; }
    .score-bar-bg { flex: 1; height: 4px; background: #27272a; border-radius: 2px;
      overflow: hidden; }
    .score-bar { height: 100%; border-radius: 2px; }
    .score-val { font-size: 0.75rem; font-weight: 700; width: 24px; text-align: right;
      flex-shrink: 0; }
    .score-avg { text-align: right; font-size: 0.7rem; color: #71717a; font-weight: 600;
      margin-top: 2px; padding-top: 4px; border-top: 1px solid #27272a; }
    .footer { text-align: center; padding: 24px; font-size: 0.75rem; color: #3f3f46; }
    @media (max-width: 1200px) { .grid { grid-template-columns: repeat(2, 1fr); } }
    @media (max-width: 700px) {
      .grid { grid-template-columns: 1fr; padding: 0 16px 32px; }
      .header h1 { font-size: 1.8rem; }
    }
  </style>
</head>
<body>
  <div class="header">
    <h1>{{ title }}</h1>
    <div class="subtitle">Eval Studio - LLM Frontend Benchmark Showcase</div>
    <div class="meta">{{ cards|length }} model{{ "s" if cards|length != 1 }} &middot; Exported {{ exported_on }}</div>
  </div>
  <div class="grid">
  {% for card in cards %}
    <div class="card">
      <div class="card-header">
        <span class="model-name">{{ card.model_id }}</span>
        {% if card.average is not none %}
        <span class="avg-badge" style="background:{{ card.average|score_color }}20;color:{{ card.average|score_color }}">{{ "%.1f"|format(card.average) }}</span>
        {% endif %}
      </div>
      <div class="card-iframe-wrapper">
        <iframe srcdoc="{{ card.html }}" sandbox="allow-scripts" loading="lazy"></iframe>
      </div>
      {% if card.scores %}
      <div class="scores">
        {% for criterion in criteria if criterion.id in card.scores %}
        {% set val = card.scores[criterion.id] %}
        <div class="score-item">
          <span class="score-label">{{ criterion.name }}</span>
          <div class="score-bar-bg"><div class="score-bar" style="width:{{ val * 10 }}%;background:{{ val|score_color }}"></div></div>
          <span class="score-val" style="color:{{ val|score_color }}">{{ val|round(1) }}</span>
        </div>
        {% endfor %}
        <div class="score-avg">AVG <span style="color:{{ card.average|score_color }}">{{ "%.1f"|format(card.average) }}</span></div>
      </div>
      {% else %}
      <div class="scores no-scores">Not scored</div>
      {% endif %}
    </div>
  {% endfor %}
  </div>
  <div class="footer">Generated by Eval Studio</div>
</body>
</html>
"""
)


def build_showcase_html(
    benchmark_id: str,
    cards: list[ShowcaseCard],
    criteria: list[ScoringCriterion],
    exported_on: date,
) -> str:
    ordered = sort_cards(cards)
    return _TEMPLATE.render(
        title=benchmark_name(benchmark_id),
        cards=ordered,
        criteria=criteria,
        cols=grid_columns(len(ordered)),
        exported_on=f"{exported_on:%B} {exported_on.day}, {exported_on.year}",
    )
