"""Tests for review and reply prompt construction."""

from reviewbuddy_core.models import ChatContext, HistoryEntry, RecommendationRecord, ReviewContext
from reviewbuddy_core.prompts import (
    CHAT_SCHEMA,
    REVIEW_SCHEMA,
    build_chat_prompt,
    build_review_prompt,
    render_history,
    tone_instructions,
)

DIFF = "diff --git a/app.py b/app.py\n+print('hi')"


def review_ctx(**overrides):
    fields = dict(
        diff_text=DIFF,
        pr_title="fix bug",
        pr_author="alice",
        tone="professional",
        language="english",
        needs_description_update=True,
    )
    fields.update(overrides)
    return ReviewContext(**fields)


def chat_ctx(**overrides):
    fields = dict(
        diff_text=DIFF,
        pr_title="fix bug",
        pr_author="alice",
        comment_body="/buddy why is this bad?",
        comment_author="bob",
        tone="roast",
        language="hinglish",
    )
    fields.update(overrides)
    return ChatContext(**fields)


class TestToneInstructions:
    def test_hinglish_roast_is_specific(self):
        assert "Hindi" in tone_instructions("roast", "hinglish")

    def test_roast_in_other_language(self):
        assert "Hindi" not in tone_instructions("roast", "english")

    def test_unknown_tone_falls_back_to_professional(self):
        assert tone_instructions("sarcastic", "english") == tone_instructions("professional", "english")

    def test_case_insensitive(self):
        assert tone_instructions("ROAST", "Hinglish") == tone_instructions("roast", "hinglish")


class TestReviewPrompt:
    def test_contains_context_schema_and_diff(self):
        prompt = build_review_prompt(review_ctx())
        assert "PR Title: fix bug" in prompt
        assert "@alice" in prompt
        assert "Needs Description Update: true" in prompt
        assert REVIEW_SCHEMA in prompt
        assert prompt.endswith(DIFF)

    def test_description_flag_false(self):
        assert "Needs Description Update: false" in build_review_prompt(review_ctx(needs_description_update=False))

    def test_deterministic(self):
        assert build_review_prompt(review_ctx()) == build_review_prompt(review_ctx())


class TestChatPrompt:
    def test_without_verdict_or_history(self):
        prompt = build_chat_prompt(chat_ctx())
        assert "Current Review Buddy Verdict" not in prompt
        assert "Previous Conversation" not in prompt
        assert "current verdict (N/A)" in prompt
        assert CHAT_SCHEMA in prompt
        assert "/buddy why is this bad?" in prompt

    def test_with_verdict_and_history(self):
        verdict = RecommendationRecord(comment_id=5, status="REQUEST CHANGES", reasoning="- Missing tests")
        history = (HistoryEntry("alice", "first"), HistoryEntry("bob", "second"))
        prompt = build_chat_prompt(chat_ctx(current_verdict=verdict, conversation_history=history))
        assert "Current Review Buddy Verdict: REQUEST CHANGES" in prompt
        assert "- Missing tests" in prompt
        assert "@alice: first\n\n@bob: second" in prompt
        assert "current verdict (REQUEST CHANGES)" in prompt

    def test_render_history_empty(self):
        assert render_history(()) == ""
