"""Term-overlap relevance scoring.

The score is the fraction of query words that appear verbatim among the
words of the target text. It ignores term frequency, field weighting,
stemming and partial matches; callers concatenate every field they want
considered into one text blob.
"""

import html
import re

_MARKUP_RE = re.compile(r"<[^>]*>")


def tokenize(text: str) -> list[str]:
    """Split text on whitespace into lowercase terms."""
    return text.lower().split()


def score_relevance(query: str, text: str) -> float:
    """Score how many query terms occur in ``text``.

    Args:
        query: Free-text query.
        text: Plain text of the item being scored.

    Returns:
        matched query terms / total query terms, in [0, 1]. A query with no
        terms scores 0.0.
    """
    query_terms = tokenize(query)
    if not query_terms:
        return 0.0

    text_terms = set(tokenize(text))
    matched = sum(1 for term in query_terms if term in text_terms)
    return matched / len(query_terms)


def html_to_text(content: str) -> str:
    """Reduce editor HTML to plain text for scoring.

    Tags become spaces so adjacent block elements do not glue words
    together, then entities are unescaped.
    """
    return html.unescape(_MARKUP_RE.sub(" ", content))
