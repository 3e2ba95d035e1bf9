"""
Project-wide constants for the Target response extraction layer
"""  # noqa: D200, D212, D415

# ==============================================================================
# Response Document Keys
# ==============================================================================

# Top-level containers
EXECUTE = "execute"
PREFETCH = "prefetch"
ID = "id"
ID_TNT_ID = "tntId"
EDGE_HOST = "edgeHost"
MESSAGE = "message"

# Container members
MBOXES = "mboxes"
VIEWS = "views"

# ==============================================================================
# Mbox Entry Keys
# ==============================================================================

MBOX_NAME = "name"
MBOX_STATE = "state"
OPTIONS = "options"
METRICS = "metrics"
ANALYTICS_PARAMETERS = "analytics"
ANALYTICS_PAYLOAD = "payload"

# Option fields
OPTION_TYPE = "type"
OPTION_CONTENT = "content"
OPTION_RESPONSE_TOKENS = "responseTokens"

# Option content types
HTML = "html"
JSON = "json"

# Metric fields
METRIC_TYPE = "type"
METRIC_EVENT_TOKEN = "eventToken"
METRIC_TYPE_CLICK = "click"

# ==============================================================================
# Prefetch Caching
# ==============================================================================

# Fields a prefetched mbox may keep once handed to the on-device cache
CACHED_MBOX_ACCEPTED_KEYS = (
    MBOX_NAME,
    MBOX_STATE,
    OPTIONS,
    METRICS,
    ANALYTICS_PARAMETERS,
)

# ==============================================================================
# Analytics for Target (A4T)
# ==============================================================================

A4T_KEY_PREFIX = "&&"
A4T_SESSION_ID = "a.target.sessionId"
