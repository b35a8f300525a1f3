"""
Singleton Embedding Model Cache

Loads the sentence-embedding model once and exposes it to the triage engine
as an explicit optional capability: either EmbeddingAvailable (with an async
embed function) or EmbeddingUnavailable (model disabled or failed to load).
"""
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence, Union

from sentence_transformers import SentenceTransformer

from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

EmbedFn = Callable[[str], Awaitable[Sequence[float]]]


@dataclass(frozen=True)
class EmbeddingUnavailable:
    """No model; triage falls back to fixed defaults"""
    reason: str = "embedding model not loaded"


@dataclass(frozen=True)
class EmbeddingAvailable:
    """Loaded model wrapped as text -> vector"""
    embed: EmbedFn
    model_name: str = ""


EmbeddingProvider = Union[EmbeddingUnavailable, EmbeddingAvailable]


class EmbeddingModelCache:
    """Singleton cache for embedding model to avoid reloading"""

    _instance: Optional['EmbeddingModelCache'] = None
    _model: Optional[SentenceTransformer] = None
    _model_name: Optional[str] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def get_model(self, model_name: str) -> SentenceTransformer:
        """
        Get cached embedding model or load it if not cached

        Args:
            model_name: Name of the embedding model

        Returns:
            Loaded SentenceTransformer model
        """
        if self._model is not None and self._model_name == model_name:
            logger.debug(f"Using cached embedding model: {model_name}")
            return self._model

        logger.info(f"Loading embedding model: {model_name}")
        self._model = SentenceTransformer(model_name)
        self._model_name = model_name
        logger.info(f"Embedding model loaded successfully: {model_name}")

        return self._model


# Global singleton instance
_embedding_cache = EmbeddingModelCache()


def get_embedding_model(model_name: str) -> SentenceTransformer:
    """Get the embedding model (cached singleton)"""
    return _embedding_cache.get_model(model_name)


def wrap_model(model: SentenceTransformer, model_name: str = "") -> EmbeddingAvailable:
    """Adapt a SentenceTransformer to the async embed contract"""

    async def embed(text: str) -> Sequence[float]:
        vector = await asyncio.to_thread(
            model.encode, text, show_progress_bar=False
        )
        return vector.tolist()

    return EmbeddingAvailable(embed=embed, model_name=model_name)


async def load_embedding_provider(model_name: str, enabled: bool = True) -> EmbeddingProvider:
    """
    Load the embedding model in a worker thread.

    Load failures are not retried: the provider stays unavailable and
    triage uses its fixed defaults.
    """
    if not enabled:
        logger.info("Embedding model disabled by configuration")
        return EmbeddingUnavailable(reason="disabled")

    try:
        model = await asyncio.to_thread(get_embedding_model, model_name)
    except Exception as e:
        logger.warning(f"AI model failed to load: {e}")
        return EmbeddingUnavailable(reason=str(e))

    return wrap_model(model, model_name)
