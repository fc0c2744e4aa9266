from __future__ import annotations

from typing import Optional

from gptease.client import DEFAULT_EMBEDDING_MODEL, BaseLLM, default_llm
from gptease.types.embedding import Embedding


def embed(
    text: str,
    *,
    llm: Optional[BaseLLM] = None,
    model: str = DEFAULT_EMBEDDING_MODEL,
) -> tuple[Embedding, int]:
    """
    Compute a vector embedding of a text string.

    Aside from the embedding, returns the number of tokens found in the text,
    which tells how large the text is in the eyes of the model, for example
    when chunking documents for retrieval.
    """
    return (llm or default_llm()).embed(text, model=model)
