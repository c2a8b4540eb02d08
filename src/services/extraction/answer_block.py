"""Selection of an explicit ``<answer>...</answer>`` envelope."""

from __future__ import annotations

import re


_ANSWER_RE = re.compile(r"<answer>(.*?)</answer>", re.IGNORECASE | re.DOTALL)


def extract_answer_block(text: str) -> str | None:
    """Return the trimmed content of the first answer block, or ``None``."""
    match = _ANSWER_RE.search(text)
    if match is None:
        return None
    return match.group(1).strip()
