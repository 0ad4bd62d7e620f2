"""Prometheus metric definitions for registry writes."""

from prometheus_client import Counter

# --- Person mutation metrics ---

PERSON_MUTATIONS = Counter(
    "person_registry_mutations_total",
    "Person write operations by outcome",
    ["operation", "outcome"],
)

# --- History ledger metrics ---

HISTORY_APPENDS = Counter(
    "person_registry_history_appends_total",
    "History records appended",
    ["kind"],
)
