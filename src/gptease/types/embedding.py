from __future__ import annotations

from typing import Iterable


class Embedding(tuple[float, ...]):
    """A vector embedding of a piece of text."""

    def __new__(cls, values: Iterable[float]) -> "Embedding":
        return super().__new__(cls, (float(v) for v in values))

    def dot(self, other: "Embedding") -> float:
        """
        Dot product of two embeddings.

        For normalized vectors, which is what the API returns, this is the
        cosine similarity. Normalization is not checked.

        Raises:
            ValueError: The embeddings differ in length.
        """
        return sum(x * y for x, y in zip(self, other, strict=True))
