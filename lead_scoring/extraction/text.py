"""
Text feature collaborator.

Message understanding is delegated to an external analyzer (an NLP or LLM
service). Text features are informational only: they are never weighted,
so scoring works the same whether or not an analyzer is configured.
"""

import logging
import re
from typing import Optional, Protocol, runtime_checkable

from ..features import Intent, Sentiment, TextFeatures, UrgencyLevel

logger = logging.getLogger(__name__)


@runtime_checkable
class TextAnalyzer(Protocol):
    """Anything that turns a free-text lead message into TextFeatures."""

    def analyze(self, message: str) -> TextFeatures:
        ...


def extract_text_features(
    message: Optional[str], analyzer: Optional[TextAnalyzer]
) -> TextFeatures:
    """
    Run the analyzer if one is configured.

    Without an analyzer, or when the analyzer fails, only message presence
    and length are filled in; the failure is logged and scoring carries on.
    """
    if analyzer is None or not message or not message.strip():
        return TextFeatures.empty(message)
    try:
        return analyzer.analyze(message)
    except Exception:
        logger.warning(
            "Text analyzer %s failed, using empty text features",
            type(analyzer).__name__,
            exc_info=True,
        )
        return TextFeatures.empty(message)


class KeywordTextAnalyzer:
    """
    Keyword heuristics for sentiment, intent and urgency.

    A fallback for deployments without an NLP service. Topic tags are left
    empty; they need a real language model.
    """

    SENTIMENT_RULES = [
        (Sentiment.POSITIVE, re.compile(r"excited|interested|love|great|amazing|thank", re.I)),
        (Sentiment.NEGATIVE, re.compile(r"issue|problem|frustrated|disappointed|cancel", re.I)),
    ]
    INTENT_RULES = [
        (Intent.DEMO_REQUEST, re.compile(r"demo|demonstration|see it in action", re.I)),
        (Intent.PRICING, re.compile(r"price|pricing|cost|quote|budget", re.I)),
        (Intent.SUPPORT, re.compile(r"help|support|issue|problem|bug", re.I)),
        (Intent.PARTNERSHIP, re.compile(r"partner|integrate|collaboration", re.I)),
    ]
    URGENCY_RULES = [
        (UrgencyLevel.HIGH, re.compile(r"urgent|asap|immediately|right away|today", re.I)),
        (UrgencyLevel.MEDIUM, re.compile(r"soon|this week|next week", re.I)),
    ]

    @staticmethod
    def _first_match(rules, message, default):
        for label, pattern in rules:
            if pattern.search(message):
                return label
        return default

    def analyze(self, message: str) -> TextFeatures:
        text = message.strip()
        return TextFeatures(
            sentiment=self._first_match(self.SENTIMENT_RULES, text, Sentiment.NEUTRAL),
            intent=self._first_match(self.INTENT_RULES, text, Intent.INQUIRY),
            urgency_level=self._first_match(self.URGENCY_RULES, text, UrgencyLevel.LOW),
            topic_tags=(),
            has_message=True,
            message_length=len(text),
        )
