"""Turn a chat completion into a single HTML artifact.

Both entry points are pure functions of their input. ``extract_code`` runs
once on a finished response; ``extract_code_partial`` is cheap enough to call
on every throttled tick of a growing stream buffer and never surfaces the
model's reasoning tokens.
"""

from __future__ import annotations

from services.extraction.answer_block import extract_answer_block
from services.extraction.fence_scanner import extract_from_text
from services.extraction.think_filter import strip_think_blocks, truncate_unclosed_think


def _extract_filtered(filtered: str) -> str:
    answer = extract_answer_block(filtered)
    if answer is not None:
        return extract_from_text(answer)
    return extract_from_text(filtered)


def extract_code(raw: str) -> str:
    """Extract the final artifact from a complete model response.

    Reasoning blocks are removed first (including a trailing opener that was
    never closed). When the model wrapped its output in ``<answer>`` tags only
    that block is scanned.
    """
    return _extract_filtered(truncate_unclosed_think(strip_think_blocks(raw)))


def extract_code_partial(raw: str) -> str:
    """Best-effort artifact for an in-flight response buffer.

    Returns an empty string while the buffer holds nothing but reasoning.
    Once the buffer is the full transcript the result equals
    ``extract_code`` on it.
    """
    cleaned = strip_think_blocks(truncate_unclosed_think(raw))
    if not cleaned:
        return ""
    # Stripping is not idempotent when several orphan closers are present,
    # so the cleaned buffer goes straight to scanning.
    return _extract_filtered(cleaned)
