import random
import re
from collections import Counter
from dataclasses import dataclass
from typing import Optional


@dataclass
class AssistantSettings:
    enabled: bool = True
    prompt_style: str = "concise"

    @classmethod
    def from_dict(cls, data) -> "AssistantSettings":
        if not isinstance(data, dict):
            return cls()
        return cls(
            enabled=bool(data.get('enabled', True)),
            prompt_style=str(data.get('promptStyle', 'concise')),
        )


class LocalAssistant:
    """
    Answers questions about the page text without any network access.

    Callable as `(message, page_text) -> str`, which is the contract the
    overlay expects from any AI handler.
    """

    GENERIC_RESPONSES = (
        'I analyzed your question about "{message}". For more advanced answers, upgrade to Premium '
        'and connect an AI provider in settings.',
        'I can help with basic page analysis locally. For detailed answers, enable an AI provider in settings.',
        'Based on this page\'s content, I\'d need more context. Try asking me to "summarize this page" '
        'or "extract key points".',
    )

    def __init__(self, settings: Optional[AssistantSettings] = None, rng: Optional[random.Random] = None):
        self.settings = settings or AssistantSettings()
        self._rng = rng or random.Random()

    def __call__(self, message: str, page_text: str) -> str:
        return self.process(message, page_text)

    def process(self, message: str, page_text: str) -> str:
        if not self.settings.enabled:
            return 'AI Assistant is disabled. Enable it in settings.'

        lower = message.lower()
        if 'summarize' in lower or 'summary' in lower:
            return self.summarize(page_text)
        if 'key points' in lower or 'main points' in lower:
            return self.key_points(page_text)
        if 'word count' in lower or 'how many words' in lower:
            count = len(page_text.split())
            return f"This page contains approximately {count:,} words."
        return self._rng.choice(self.GENERIC_RESPONSES).format(message=message)

    @staticmethod
    def summarize(page_text: str) -> str:
        """Picks the three sentences that mention the most top-five keywords."""
        words = [w for w in page_text.lower().split() if len(w) > 4]
        keywords = [word for word, _ in Counter(words).most_common(5)]
        sentences = [s.strip() for s in re.findall(r'[^.!?]+[.!?]+', page_text)]
        if not sentences:
            return 'This page appears to have minimal text content.'

        scored = sorted(
            sentences,
            key=lambda s: sum(1 for keyword in keywords if keyword in s.lower()),
            reverse=True,
        )
        return 'Summary: ' + ' '.join(scored[:3])

    @staticmethod
    def key_points(page_text: str) -> str:
        # Without a DOM, heading-like lines are short lines that do not end a sentence.
        headings = []
        for line in page_text.splitlines():
            line = line.strip()
            if line and len(line) <= 80 and not line.endswith(('.', '!', '?', ',')):
                headings.append(line)
            if len(headings) == 5:
                break
        if not headings:
            return 'No clear headings found on this page.'
        return 'Key points:\n' + '\n'.join(f"{i + 1}. {h}" for i, h in enumerate(headings))
