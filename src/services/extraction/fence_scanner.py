"""Locate fenced code regions in free-form model output.

Models wrap their answer in markdown fences and surround it with prose. The
scanner prefers ```` ```html ```` fences, tolerates a fence that was cut off by
the token budget, and falls back to other languages, bare fences and finally
to raw inline HTML.
"""

from __future__ import annotations

import re


# Closing fences may sit mid-line (``</html>```"), so bodies end at the next
# three backticks rather than at a fence line.
_HTML_FENCE_RE = re.compile(r"```html\s*\n(.*?)```", re.IGNORECASE | re.DOTALL)
_HTML_FENCE_OPEN_RE = re.compile(r"```html\s*\n", re.IGNORECASE)
_ANY_FENCE_RE = re.compile(r"```\w*\s*\n(.*?)```", re.DOTALL)
# A closing fence still arriving: one or two backticks alone on the last line
_PARTIAL_CLOSER_RE = re.compile(r"(?:^|\n)[ \t]*`{1,2}\s*\Z")

# Priority-ordered fallbacks; first pattern with a non-empty match wins.
FENCE_PATTERNS: tuple[re.Pattern[str], ...] = (
    _HTML_FENCE_RE,
    re.compile(r"```htm\s*\n(.*?)```", re.IGNORECASE | re.DOTALL),
    re.compile(r"```(?:javascript|js)\s*\n(.*?)```", re.IGNORECASE | re.DOTALL),
    re.compile(r"```css\s*\n(.*?)```", re.IGNORECASE | re.DOTALL),
    re.compile(r"```\s*\n(.*?)```", re.DOTALL),
)

# Inline HTML shorter than this is more likely a stray tag in prose
MIN_INLINE_HTML_LENGTH = 50


def looks_like_full_html(text: str) -> bool:
    """Detect whether text looks like a complete HTML document."""
    lower = text.strip().lower()
    return (
        lower.startswith("<!doctype")
        or lower.startswith("<html")
        or ("<head" in lower and "<body" in lower)
    )


def find_last_html_fence(text: str) -> str | None:
    """Return the best closed ```` ```html ```` block, or ``None``.

    Scanning from the end, the first block that looks like a full document
    wins; when none does, the last block is used.
    """
    blocks = [m.group(1).strip() for m in _HTML_FENCE_RE.finditer(text)]
    blocks = [b for b in blocks if b]
    if not blocks:
        return None
    for block in reversed(blocks):
        if looks_like_full_html(block):
            return block
    return blocks[-1]


def find_unclosed_html_fence(text: str) -> str | None:
    """Return the content of a trailing ```` ```html ```` fence with no closer.

    This is what a response truncated by ``max_tokens`` looks like, and what
    an in-flight stream looks like before the closing fence arrives.
    """
    openers = list(_HTML_FENCE_OPEN_RE.finditer(text))
    if not openers:
        return None
    body = text[openers[-1].end() :]
    if "```" in body:
        return None
    body = _PARTIAL_CLOSER_RE.sub("", body).strip()
    return body or None


def collect_fenced_blocks(text: str) -> list[str]:
    """Return every fenced block, with or without a language tag, trimmed."""
    return [m.group(1).strip() for m in _ANY_FENCE_RE.finditer(text)]


def _first_pattern_match(text: str) -> str | None:
    for pattern in FENCE_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None


def _inline_html(text: str) -> str | None:
    first_tag = text.find("<")
    last_tag = text.rfind(">")
    if first_tag == -1 or last_tag <= first_tag:
        return None
    candidate = text[first_tag : last_tag + 1].strip()
    if len(candidate) > MIN_INLINE_HTML_LENGTH and looks_like_full_html(candidate):
        return candidate
    return None


def extract_from_text(text: str) -> str:
    """Extract the most plausible HTML artifact from already-filtered text.

    Order: best closed html fence, unclosed trailing html fence, first fence
    by language priority, the whole text when it is a document, an inline
    ``<...>`` slice that is a document, and finally the trimmed text itself.
    Never raises.
    """
    trimmed = text.strip()

    found = find_last_html_fence(trimmed)
    if found is not None:
        return found

    found = find_unclosed_html_fence(trimmed)
    if found is not None:
        return found

    found = _first_pattern_match(trimmed)
    if found is not None:
        return found

    if looks_like_full_html(trimmed):
        return trimmed

    found = _inline_html(trimmed)
    if found is not None:
        return found

    return trimmed
