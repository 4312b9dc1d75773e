# src/provider/chunking.py - v1
"""Split text into provider-sized chunks.

Chunks never exceed the limit and concatenate back to the exact input:
sentence segments keep their trailing punctuation and whitespace.
"""

from __future__ import annotations

import re

# A sentence runs up to `.!?` followed by whitespace, a Japanese full stop
# (with any trailing whitespace), or the end of the text.
_SENTENCE = re.compile(r".+?(?:[.!?]+\s+|[。！？]+\s*|\Z)", re.S)


def split_sentences(text: str) -> list[str]:
    return _SENTENCE.findall(text)


def split_text(text: str, limit: int) -> list[str]:
    """Split `text` into chunks of at most `limit` characters.

    Sentences are packed greedily; a sentence longer than `limit` is sliced.
    """
    if limit <= 0:
        raise ValueError("limit must be > 0")
    if len(text) <= limit:
        return [text]

    chunks: list[str] = []
    current = ""
    for sentence in split_sentences(text):
        if len(current) + len(sentence) <= limit:
            current += sentence
            continue
        if current:
            chunks.append(current)
            current = ""
        while len(sentence) > limit:
            chunks.append(sentence[:limit])
            sentence = sentence[limit:]
        current = sentence
    if current:
        chunks.append(current)
    return chunks
