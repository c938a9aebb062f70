"""
System Constants and Enumerations

Key format tokens, sentinels and stage identifiers used across the engine.
The key tokens are part of the on-Redis format and must not change without
bumping GLOBAL_KEY_VERSION.
"""

from enum import Enum

# ============================================================================
# Defaults
# ============================================================================

DEFAULT_KEY_PREFIX = "pantry"
DEFAULT_KEY_TTL_S = 60 * 60 * 24 * 7 * 2  # two weeks

# ============================================================================
# Key Format
# ============================================================================

KEY_SEPARATOR = ":"
VERSION_MARKER = "v"
PRIMARY_KEY_MARKER = "#"
INDEX_SEGMENT = "index"

# Stands in for a None attribute value so it never collides with ""
NIL_VALUE_TOKEN = "__pantry_nil__"

# Member written to an index set populated with no matches (Redis drops empty sets)
EMPTY_INDEX_MEMBER = "__pantry_empty__"

# The all-records index reuses the index key format
ALL_INDEX_ATTRIBUTE = "id"
ALL_INDEX_VALUE = "all"


# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Engine stages attached to log entries as stage=...

    Format: {AREA}.{STEP}_{DESCRIPTIVE_NAME}
    """

    PRIMARY_FETCH = "P.1_PRIMARY_FETCH"
    PRIMARY_STORE = "P.2_PRIMARY_STORE"
    PRIMARY_DELETE = "P.3_PRIMARY_DELETE"

    INDEX_READ = "I.1_INDEX_READ"
    INDEX_POPULATE = "I.2_INDEX_POPULATE"
    INDEX_INVALIDATE = "I.3_INDEX_INVALIDATE"

    ALL_INDEX_READ = "A.1_ALL_INDEX_READ"
    ALL_INDEX_PRUNE = "A.2_ALL_INDEX_PRUNE"

    STORE_QUERY = "S.1_STORE_QUERY"
    RESTOCK = "R.1_RESTOCK"
    INVALIDATE = "V.1_INVALIDATE"

    REDIS = "REDIS"
