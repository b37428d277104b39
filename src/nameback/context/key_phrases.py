"""Lightweight key-phrase extraction for long passages of text."""

from __future__ import annotations

from typing import Dict, List

STOP_WORDS = frozenset(
    """
    the a an and or but in on at to for of with by from as is was are were been be have has
    had do does did will would could should may might must can this that these those i you
    he she it we they what which who when where why how
    """.split()
)


def extract_key_phrases(text: str, max_phrases: int = 3) -> List[str]:
    """Return up to `max_phrases` phrases ranked by position and length.

    Stop words are removed, then every 1-, 2- and 3-gram of the remaining words is
    scored `1 / (1 + 0.05 * index) + 0.3 * word_count`, where `index` is the
    n-gram's position in generation order. Repeated n-grams sum their scores.
    Equal scores keep first-seen order.

    Args:
        text: Source text.
        max_phrases: Maximum number of phrases to return.

    Returns:
        List[str]: Phrases, best first.
    """
    words = [word for word in text.split() if word.lower() not in STOP_WORDS]
    if not words:
        return []

    ngrams: List[str] = []
    for i in range(len(words)):
        ngrams.append(words[i])
        if i + 1 < len(words):
            ngrams.append(f"{words[i]} {words[i + 1]}")
        if i + 2 < len(words):
            ngrams.append(f"{words[i]} {words[i + 1]} {words[i + 2]}")

    scores: Dict[str, float] = {}
    for index, ngram in enumerate(ngrams):
        value = 1.0 / (1.0 + index * 0.05) + 0.3 * len(ngram.split())
        scores[ngram] = scores.get(ngram, 0.0) + value

    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    return [phrase for phrase, _ in ranked[:max_phrases]]


def top_key_phrase(text: str) -> str | None:
    """Return the single best phrase of `text`, if any."""
    phrases = extract_key_phrases(text, 1)
    return phrases[0] if phrases else None


__all__ = ["STOP_WORDS", "extract_key_phrases", "top_key_phrase"]
