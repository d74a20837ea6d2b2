"""
Embedding Service Module

Wraps the OpenAI embeddings API (via langchain_openai) behind a single
embed_query() call. The client is created lazily so the application can start
without an API key; the key is only required once an embedding is requested.
"""

import logging
from typing import List, Optional
from langchain_openai import OpenAIEmbeddings
from vector_ai.config.settings import settings

logger = logging.getLogger("vector_ai")


class EmbeddingService:
    """
    Service class for generating text embeddings with OpenAI.
    """

    def __init__(self, model_name: Optional[str] = None):
        self.model_name = model_name or settings.EMBEDDING_MODEL
        self._embeddings: Optional[OpenAIEmbeddings] = None
        logger.info(f"Embedding service using model: {self.model_name}")

    def is_configured(self) -> bool:
        return bool(settings.openai_api_key)

    def _get_client(self) -> OpenAIEmbeddings:
        """
        Create the OpenAI embeddings client on first use.

        Raises:
            ValueError: If no OpenAI API key is configured
        """
        if self._embeddings is None:
            api_key = settings.openai_api_key
            if not api_key:
                raise ValueError("OPENAI_API_KEY environment variable is required")

            kwargs = {"model": self.model_name, "openai_api_key": api_key}
            if settings.OPENAI_BASE_URL:
                kwargs["openai_api_base"] = settings.OPENAI_BASE_URL
            self._embeddings = OpenAIEmbeddings(**kwargs)
        return self._embeddings

    def embed_query(self, text: str) -> List[float]:
        """
        Generate embedding vector for a text.

        Args:
            text: Text to embed

        Returns:
            List of floats representing the embedding vector
        """
        return self._get_client().embed_query(text)
