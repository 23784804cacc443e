"""Configuration constants.

Re-exports all constants for convenient importing:
    from morpheus.constants import DEFAULT_SEARCH_LIMIT, CONTEXT_MAX_RESULTS
"""

from morpheus.constants.search import *  # noqa: F403
from morpheus.constants.llm import *  # noqa: F403
from morpheus.constants.tagging import *  # noqa: F403
