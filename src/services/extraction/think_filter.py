"""Removal of ``<think>...</think>`` reasoning segments from model output."""

from __future__ import annotations

import re


_THINK_BLOCK_RE = re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL)
_THINK_OPEN_RE = re.compile(r"<think>", re.IGNORECASE)
_THINK_CLOSE_RE = re.compile(r"</think>", re.IGNORECASE)


def strip_think_blocks(text: str) -> str:
    """Remove reasoning blocks and return the trimmed remainder.

    Balanced ``<think>...</think>`` spans are removed wherever they occur. Some
    providers strip the opening tag and send only the closer; in that case the
    text up to and including the first remaining ``</think>`` is treated as
    orphaned reasoning and dropped.
    """
    if not text:
        return ""
    cleaned = _THINK_BLOCK_RE.sub("", text)
    orphan = _THINK_CLOSE_RE.search(cleaned)
    if orphan is not None:
        cleaned = cleaned[orphan.end() :]
    return cleaned.strip()


def truncate_unclosed_think(text: str) -> str:
    """Drop everything from a trailing ``<think>`` opener that was never closed.

    Only the last opener matters: earlier openers either have a closer after
    them or are followed by the last one, which has none.
    """
    openers = list(_THINK_OPEN_RE.finditer(text))
    if not openers:
        return text
    last_open = openers[-1]
    if _THINK_CLOSE_RE.search(text, last_open.end()) is not None:
        return text
    return text[: last_open.start()]
