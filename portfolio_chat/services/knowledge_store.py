"""
In-memory knowledge store with cosine-similarity retrieval.
"""

import uuid
from datetime import datetime
from typing import Callable, List, Tuple

import numpy as np

from ..models.core import Document
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class KnowledgeStoreError(Exception):
    """Custom exception for knowledge store errors."""
    pass


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """dot(a, b) / (|a| |b|), 0.0 when either vector has zero length."""
    norm = np.linalg.norm(a) * np.linalg.norm(b)
    if norm == 0:
        return 0.0
    return float(np.dot(a, b) / norm)


class KnowledgeStore:
    """Fixed set of embedded documents searched by nearest neighbour."""

    def __init__(self, embed_fn: Callable[[str], List[float]]):
        """
        Initialize the store.

        Args:
            embed_fn: Function returning the embedding vector of a text
        """
        self.embed_fn = embed_fn
        self.documents: List[Document] = []
        self._vectors: List[np.ndarray] = []

    @property
    def document_count(self) -> int:
        return len(self.documents)

    def add_document(self, content: str, title: str, type: str) -> str:
        """
        Embed and store a document.

        Args:
            content: Document text
            title: Human readable title, shown to the model next to the content
            type: Category tag

        Returns:
            Id of the new document

        Raises:
            KnowledgeStoreError: If the embedding could not be computed
        """
        try:
            embedding = list(self.embed_fn(content))
        except Exception as e:
            logger.error(f"Error adding document '{title}': {e}")
            raise KnowledgeStoreError(f"Failed to embed document '{title}': {e}") from e

        document = Document(id=str(uuid.uuid4()),
                            content=content,
                            title=title,
                            type=type,
                            embedding=embedding,
                            created_at=datetime.now())
        self.documents.append(document)
        self._vectors.append(np.asarray(embedding, dtype=float))

        logger.debug(f"Added document '{title}' ({type})")
        return document.id

    def score(self, query: str, k: int) -> List[Tuple[Document, float]]:
        """
        Rank documents against a query.

        Args:
            query: Query text
            k: Maximum number of results

        Returns:
            Up to k (document, similarity) pairs, highest similarity first. Equal scores keep
            insertion order. Empty when the store is empty or the query cannot be embedded.
        """
        if not self.documents or k <= 0:
            return []

        try:
            query_vector = np.asarray(self.embed_fn(query), dtype=float)
        except Exception as e:
            logger.error(f'Error retrieving documents: {e}')
            return []

        scored = [(document, cosine_similarity(query_vector, vector))
                  for document, vector in zip(self.documents, self._vectors)]
        # sorted() is stable, so ties stay in insertion order
        scored = sorted(scored, key=lambda pair: pair[1], reverse=True)
        return scored[:k]

    def retrieve_top_k(self, query: str, k: int) -> List[Document]:
        """Return the k documents most similar to the query."""
        return [document for document, _ in self.score(query, k)]
