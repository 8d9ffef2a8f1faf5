"""Semantic event name constants for the SDK's own structured logs.

Every log line emitted by watchpost uses one of these names as its event,
so diagnostics can be filtered without parsing free-form text.
"""

# Configuration events
CONFIG_LOADING = "config_loading"
CONFIG_LOADED = "config_loaded"
CONFIG_LOAD_FAILED = "config_load_failed"
ENV_FILES_LOADED = "env_files_loaded"

# Capture pipeline events
EVENT_CAPTURED = "event_captured"
EVENT_FILTERED = "event_filtered"
EVENT_DROPPED_BY_CALLBACK = "event_dropped_by_callback"
CAPTURE_DISABLED = "capture_disabled"
REQUEST_IGNORED = "request_ignored"

# Enrichment events
ENRICHER_FAILED = "enricher_failed"
ENRICHMENT_APPLIED = "enrichment_applied"

# Scrubbing events
SCRUB_PATTERN_TIMEOUT = "scrub_pattern_timeout"

# Breadcrumb / scope events
BREADCRUMB_DROPPED = "breadcrumb_dropped"
USER_SET = "user_set"
USER_CLEARED = "user_cleared"
SCOPE_PUSHED = "scope_pushed"
SCOPE_POPPED = "scope_popped"

# Tracing events
TRANSACTION_STARTED = "transaction_started"
TRANSACTION_FINISHED = "transaction_finished"
TRANSACTION_NOT_SAMPLED = "transaction_not_sampled"
TRANSACTION_IGNORED = "transaction_ignored"
SPAN_STARTED = "span_started"
SPAN_FINISHED = "span_finished"
SPAN_NO_PARENT = "span_no_parent"

# Cron monitoring events
CHECK_IN_STARTED = "check_in_started"
CHECK_IN_OK = "check_in_ok"
CHECK_IN_ERROR = "check_in_error"
CHECK_IN_FAILED_ON_EXIT = "check_in_failed_on_exit"
CHECK_IN_FALLBACK_ERROR = "check_in_fallback_error"

# Delivery events
FLUSH_STARTED = "flush_started"
FLUSH_CANCELLED = "flush_cancelled"
FLUSH_COMPLETED = "flush_completed"
FEEDBACK_CAPTURED = "feedback_captured"
DELIVERY_FAILED = "delivery_failed"
EVENT_DELIVERED = "event_delivered"
SPAN_DELIVERED = "span_delivered"
CHECK_IN_DELIVERED = "check_in_delivered"
FEEDBACK_DELIVERED = "feedback_delivered"
