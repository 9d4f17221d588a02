"""Tests for the offline page assistant."""
import random

from FloatDesk.core.assistant import AssistantSettings, LocalAssistant

PAGE = (
    "Overlay windows float above the page. "
    "Windows can be dragged and resized freely. "
    "The weather today is mild. "
    "Premium windows have no limits on windows or panes. "
    "Lunch was pasta."
)


def test_word_count_uses_thousands_separator():
    assistant = LocalAssistant()
    text = " ".join(["word"] * 1234)
    assert assistant("How many words are here?", text) == "This page contains approximately 1,234 words."


def test_summary_prefers_keyword_sentences():
    summary = LocalAssistant()("Please summarize this page", PAGE)

    assert summary.startswith("Summary: ")
    assert "Premium windows have no limits" in summary
    assert "Lunch was pasta." not in summary


def test_summary_of_empty_page():
    assert LocalAssistant.summarize("") == "This page appears to have minimal text content."


def test_key_points_from_heading_lines():
    page = "Getting Started\nInstall the package first.\nConfiguration\nUsage Notes\n"
    answer = LocalAssistant()("list the key points", page)
    assert answer == "Key points:\n1. Getting Started\n2. Configuration\n3. Usage Notes"


def test_key_points_without_headings():
    assert LocalAssistant.key_points("Only sentences here.") == "No clear headings found on this page."


def test_generic_fallback_mentions_question():
    assistant = LocalAssistant(rng=random.Random(3))
    answers = {assistant("what is this?", PAGE) for _ in range(30)}

    assert answers <= {r.format(message="what is this?") for r in LocalAssistant.GENERIC_RESPONSES}
    assert len(answers) > 1


def test_disabled_assistant():
    assistant = LocalAssistant(AssistantSettings(enabled=False))
    assert assistant("summarize", PAGE) == "AI Assistant is disabled. Enable it in settings."


def test_settings_from_stored_dict():
    settings = AssistantSettings.from_dict({'enabled': True, 'promptStyle': 'detailed'})
    assert settings.prompt_style == "detailed"
    assert AssistantSettings.from_dict("garbage") == AssistantSettings()
