"""Code extraction from free-form model output."""

from .answer_block import extract_answer_block
from .code_extractor import extract_code, extract_code_partial
from .fence_scanner import (
    collect_fenced_blocks,
    extract_from_text,
    find_last_html_fence,
    find_unclosed_html_fence,
    looks_like_full_html,
)
from .merger import merge_blocks
from .think_filter import strip_think_blocks, truncate_unclosed_think


__all__ = [
    "collect_fenced_blocks",
    "extract_answer_block",
    "extract_code",
    "extract_code_partial",
    "extract_from_text",
    "find_last_html_fence",
    "find_unclosed_html_fence",
    "looks_like_full_html",
    "merge_blocks",
    "strip_think_blocks",
    "truncate_unclosed_think",
]
