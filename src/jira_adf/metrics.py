"""
Prometheus metrics definitions for the Jira ADF converter.

Counts degraded conversions (unknown node/mark kinds, depth-limited
subtrees) and Jira REST requests so silent fallbacks stay observable.

Project naming conventions: snake_case, jira_adf_ prefix
"""

from prometheus_client import Counter

# ==============================================================================
# CONVERSION COUNTERS
# ==============================================================================

unknown_nodes_total = Counter(
    "jira_adf_unknown_nodes_total",
    "Nodes with an unrecognized type rendered through the children fallback",
    ["node_type"],
)

unknown_marks_total = Counter(
    "jira_adf_unknown_marks_total",
    "Marks with an unrecognized type skipped during rendering",
    ["mark_type"],
)

depth_limit_total = Counter(
    "jira_adf_depth_limit_total",
    "Subtrees flattened to plain text because they exceeded the depth limit",
    ["stage"],
    # stage: parse, render
)

# ==============================================================================
# JIRA REST COUNTERS
# ==============================================================================

jira_requests_total = Counter(
    "jira_adf_jira_requests_total",
    "Jira REST API requests",
    ["operation", "status"],
    # status: success, timeout, not_found, failed
)
