"""
Triage Engine

Turns raw ticket text into {category, priority, sentiment}:

- sentiment: arithmetic mean of the text's embedding vector. This is a cheap
  heuristic proxy, not a calibrated sentiment model.
- category: keyword hit counts per category; the strictly highest count
  wins, so ties go to the category listed first. No hits -> "general".
- priority: urgent keyword -> high, else sentiment < -0.3 -> high,
  else sentiment < 0 -> medium, else low.

Without an embedding model, or if embedding fails, the fixed default
{general, medium, 0} is returned.
"""
import random
from typing import Callable, Dict, List, Sequence, Tuple

from supportdesk.models.schemas import AIAnalysis, Category, Priority
from supportdesk.services.embedding_cache import (
    EmbeddingAvailable,
    EmbeddingProvider,
    EmbeddingUnavailable,
)
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

# Order matters: ties resolve to the earlier category
CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (Category.BILLING, ("payment", "invoice", "charge", "refund", "price")),
    (Category.TECHNICAL, ("error", "bug", "crash", "not working", "failed")),
    (Category.SERVICE, ("delivery", "support", "help", "assistance", "customer service")),
)

URGENT_KEYWORDS: Tuple[str, ...] = ("urgent", "emergency", "critical", "immediately")

HIGH_PRIORITY_SENTIMENT = -0.3


def default_analysis() -> AIAnalysis:
    return AIAnalysis(category=Category.GENERAL, priority=Priority.MEDIUM, sentiment=0.0)


def match_category(text: str) -> str:
    """Category with the strictly greatest keyword hit count"""
    lowered = text.lower()
    category = Category.GENERAL
    max_matches = 0

    for name, words in CATEGORY_KEYWORDS:
        matches = sum(1 for word in words if word in lowered)
        if matches > max_matches:
            max_matches = matches
            category = name

    return category


def has_urgent_keyword(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in URGENT_KEYWORDS)


def derive_priority(text: str, sentiment: float) -> Priority:
    """Urgent keywords short-circuit the sentiment thresholds"""
    if has_urgent_keyword(text):
        return Priority.HIGH
    if sentiment < HIGH_PRIORITY_SENTIMENT:
        return Priority.HIGH
    if sentiment < 0:
        return Priority.MEDIUM
    return Priority.LOW


def mean(values: Sequence[float]) -> float:
    values = list(values)
    if not values:
        raise ValueError("empty embedding vector")
    return sum(values) / len(values)


class TriageEngine:
    """Heuristic ticket classifier backed by an optional embedding model"""

    def __init__(self, provider: EmbeddingProvider = EmbeddingUnavailable()):
        self.provider = provider

    @property
    def model_loaded(self) -> bool:
        return isinstance(self.provider, EmbeddingAvailable)

    async def analyze(self, text: str) -> AIAnalysis:
        """
        Classify ticket text.

        Args:
            text: Ticket text (callers avoid passing empty strings)

        Returns:
            AIAnalysis with category, priority and sentiment
        """
        provider = self.provider
        if isinstance(provider, EmbeddingUnavailable):
            return default_analysis()

        try:
            vector = await provider.embed(text)
            sentiment = float(mean(vector))
        except Exception as e:
            logger.error(f"Failed to analyze ticket: {e}")
            return default_analysis()

        return AIAnalysis(
            category=match_category(text),
            priority=derive_priority(text, sentiment),
            sentiment=sentiment
        )


# ============================================================================
# Assistant replies
# ============================================================================

CATEGORY_RESPONSES: Dict[str, List[str]] = {
    Category.BILLING: [
        "I understand you have a billing concern. Let me help you with that.",
        "I'll create a ticket for our billing team to assist you.",
        "Our billing specialists will review your case promptly.",
    ],
    Category.TECHNICAL: [
        "I see you're experiencing technical difficulties. Let's get that sorted out.",
        "I'll create a ticket for our technical team to investigate.",
        "Our technical experts will look into this right away.",
    ],
    Category.SERVICE: [
        "Thank you for reaching out about our service.",
        "I'll make sure our service team addresses your concern.",
        "We'll have our service team review your request.",
    ],
    Category.GENERAL: [
        "I understand your concern. Let me help you with that.",
        "I'll make sure the right team assists you with this.",
        "We'll look into this matter for you.",
    ],
}

PRIORITY_MESSAGES: Dict[Priority, str] = {
    Priority.HIGH: "I've marked this as high priority and our team will address it urgently.",
    Priority.MEDIUM: "I've created a ticket with medium priority for our team to assist you.",
    Priority.LOW: "I've logged this request and our team will help you soon.",
}


def suggest_response(
    analysis: AIAnalysis,
    choice: Callable[[List[str]], str] = random.choice
) -> str:
    """Assistant reply for an analyzed message (unknown categories use general)"""
    responses = CATEGORY_RESPONSES.get(analysis.category, CATEGORY_RESPONSES[Category.GENERAL])
    return f"{choice(responses)} {PRIORITY_MESSAGES[Priority(analysis.priority)]}"
