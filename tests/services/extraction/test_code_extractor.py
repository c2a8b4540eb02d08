"""Behavioral tests for final and in-flight artifact extraction."""

import pytest

from services.extraction import extract_answer_block, extract_code, extract_code_partial


DOC = "<!DOCTYPE html><html><body>Hi</body></html>"

TRANSCRIPTS = [
    f"<think>plan</think>\n```html\n{DOC}\n```\nExplanation text",
    f"Intro text\n```html\n<p>snippet</p>\n```\nthen\n```html\n{DOC}\n```",
    "reasoning leaked</think>\n```html\n<div>after orphan</div>\n```",
    f"<think>a</think>ok<think>b</think><answer>\n```html\n{DOC}\n```\n</answer>",
    "Sure, here you go:\n```html\n<div>partial",
    "<think>never finished reasoning about the layout",
    "plain prose with no code at all",
]


class TestExtractCode:
    def test_closed_fence_interior(self):
        text = "Here it is:\n```html\n  <main>content</main>  \n```\nBye"
        assert extract_code(text) == "<main>content</main>"

    def test_think_block_before_fence_is_ignored(self):
        text = "<think>I will use a <canvas> element</think>```html\n<p>x</p>\n```"
        assert extract_code(text) == "<p>x</p>"

    def test_unclosed_think_never_leaks_reasoning(self):
        assert "reasoning" not in extract_code("<think>reasoning")

    def test_unclosed_think_keeps_text_before_it(self):
        assert extract_code("<p>done</p>\n<think>second thoughts") == "<p>done</p>"

    def test_second_fence_wins_when_only_it_is_a_document(self):
        text = f"```html\n<p>first</p>\n```\n```html\n{DOC}\n```"
        assert extract_code(text) == DOC

    def test_truncated_fence(self):
        text = f"Working on it\n```html\n{DOC}\n<script>let x"
        assert extract_code(text) == f"{DOC}\n<script>let x"

    def test_scenario_think_then_fence_then_prose(self):
        assert extract_code(TRANSCRIPTS[0]) == DOC

    def test_scenario_bare_document(self):
        text = "<!DOCTYPE html><html><head></head><body></body></html>"
        assert extract_code(f"  {text}\n") == text

    def test_scenario_unclosed_fence_without_doctype(self):
        assert extract_code("Sure, here you go:\n```html\n<div>partial") == (
            "<div>partial"
        )

    def test_answer_block_is_scanned_alone(self):
        text = (
            "```html\n<p>draft outside the answer</p>\n```\n"
            "<answer>```html\n<p>final</p>\n```</answer>"
        )
        assert extract_code(text) == "<p>final</p>"

    @pytest.mark.parametrize(
        "clean", [DOC, "<div>fragment</div>", "just words", "  padded  "]
    )
    def test_idempotent_on_clean_input(self, clean):
        once = extract_code(clean)
        assert extract_code(once) == once == clean.strip()

    def test_empty_input(self):
        assert extract_code("") == ""


class TestExtractCodePartial:
    def test_reasoning_only_buffer_is_empty(self):
        assert extract_code_partial("<think>thinking about colours") == ""

    def test_whitespace_buffer_is_empty(self):
        assert extract_code_partial("   \n") == ""

    def test_open_fence_while_streaming(self):
        buffer = "<think>ok</think>\n```html\n<!DOCTYPE html>\n<html><bo"
        assert extract_code_partial(buffer) == "<!DOCTYPE html>\n<html><bo"

    def test_partial_closer_is_not_shown(self):
        assert extract_code_partial("```html\n<p>x</p>\n`") == "<p>x</p>"

    @pytest.mark.parametrize("transcript", TRANSCRIPTS)
    def test_growing_prefixes_converge_on_full_extraction(self, transcript):
        for end in range(len(transcript) + 1):
            assert isinstance(extract_code_partial(transcript[:end]), str)
        assert extract_code_partial(transcript) == extract_code(transcript)

    def test_prefixes_never_show_unclosed_reasoning(self):
        transcript = "<think>secret plan</think>\n```html\n<p>shown</p>\n```"
        closer_end = transcript.index("</think>") + len("</think>")
        for end in range(closer_end):
            assert "secret" not in extract_code_partial(transcript[:end])


def test_answer_block_selector():
    assert extract_answer_block("pre <ANSWER> body </answer> post") == "body"
    assert extract_answer_block("<answer>one</answer><answer>two</answer>") == "one"
    assert extract_answer_block("no tags") is None


def test_truncated_template_literal_keeps_its_backtick():
    assert extract_code("```html\n<script>const s = `") == "<script>const s = `"
