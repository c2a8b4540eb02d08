"""Merge multiple fenced blocks into one HTML document.

Some models split their answer into separate HTML, CSS and JS fences instead
of one ```` ```html ```` block. This is a heuristic best-effort merge, not a
parser: each block is classified by how it starts.
"""

from __future__ import annotations

from services.extraction.code_extractor import extract_code
from services.extraction.fence_scanner import (
    collect_fenced_blocks,
    looks_like_full_html,
)
from services.extraction.think_filter import strip_think_blocks


CSS_PREFIXES: tuple[str, ...] = ("body", ".", "#", "*")
JS_PREFIXES: tuple[str, ...] = ("function", "const ", "let ", "var ", "document.")

_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
{style}
</head>
<body>
{body}
{script}
</body>
</html>"""


def classify_block(block: str) -> str:
    """Return ``"css"``, ``"js"`` or ``"html"`` for a fenced block."""
    lower = block.strip().lower()
    if lower.startswith(CSS_PREFIXES):
        return "css"
    if lower.startswith(JS_PREFIXES):
        return "js"
    return "html"


def merge_blocks(raw: str) -> str:
    """Combine every fenced block of a response into a single document."""
    blocks = collect_fenced_blocks(strip_think_blocks(raw))

    if not blocks:
        return extract_code(raw)
    if len(blocks) == 1:
        return blocks[0]

    for block in blocks:
        if looks_like_full_html(block):
            return block

    buckets: dict[str, str] = {"css": "", "js": "", "html": ""}
    for block in blocks:
        buckets[classify_block(block)] += block + "\n"

    return _DOCUMENT_TEMPLATE.format(
        style=f"<style>\n{buckets['css']}</style>" if buckets["css"] else "",
        body=buckets["html"],
        script=f"<script>\n{buckets['js']}</script>" if buckets["js"] else "",
    )
