"""Global constants for Cipher.

Centralizes the capacities and fixed values used throughout the brain,
making them discoverable and consistent.
"""

# =============================================================================
# Bounded collection capacities
# =============================================================================

ANALYSIS_CACHE_CAPACITY = 100
"""Recent analysis entries kept by the pattern store (FIFO)."""

SESSION_HISTORY_CAPACITY = 50
"""Learning sessions retained, most recent first to survive."""

DECISION_CACHE_CAPACITY = 500
"""Routing decisions kept by the orchestrator (FIFO)."""

PATTERN_STORE_CAPACITY = 1000
"""Learned patterns retained by the pattern store (FIFO)."""

# =============================================================================
# Routing
# =============================================================================

ANCHOR_HANDLERS: tuple[str, ...] = (
    "smart_file_rebuilder",
    "auto_fix_current_file",
    "analyze_current_file",
)
"""General-purpose handlers that are always registered, in fallback order."""

MAX_BACKUP_HANDLERS = 3
"""Backup handlers attached to an orchestration result."""

MAX_FALLBACK_HANDLERS = 2
"""Anchor fallbacks attached to each individual recommendation."""

DISABLED_ORCHESTRATION_CONFIDENCE = 0.6
"""Confidence reported when orchestration is switched off."""

SAFE_RESULT_CONFIDENCE = 0.5
"""Confidence reported when ranking fails and anchors are returned."""

# =============================================================================
# Learning
# =============================================================================

SUGGESTION_CANDIDATES = 5
"""Patterns considered when producing suggestions."""

SUGGESTIONS_RETURNED = 3
"""Suggestions rendered for a caller."""

TRUNCATE_STATE_CHARS = 200
"""Maximum characters of before/after state kept in a derived pattern."""

# =============================================================================
# Persistence keys
# =============================================================================

KEY_LEARNING_PATTERNS = "learning_patterns"
KEY_LEARNING_STATE = "learning_state"
KEY_ORCHESTRATION_DATA = "orchestration_data"
