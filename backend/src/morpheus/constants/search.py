"""Search and context ranking constants.

Relevance is a plain term-overlap fraction computed per request over the
whole corpus. These values are the defaults used when configuration is not
available; the same numbers seed CONFIG_SCHEMA.
"""

# =============================================================================
# Result Limits
# =============================================================================
# Default number of notes (and, separately, links) returned by a search.

DEFAULT_SEARCH_LIMIT = 10

# =============================================================================
# Context Retrieval
# =============================================================================
# The context entry point derives up to CONTEXT_TAG_LIMIT tag names from the
# query, searches with a wider CONTEXT_SEARCH_LIMIT, re-ranks by tag matches
# and then keeps only CONTEXT_MAX_RESULTS items per list.

CONTEXT_TAG_LIMIT = 5
CONTEXT_SEARCH_LIMIT = 20
CONTEXT_MAX_RESULTS = 4
