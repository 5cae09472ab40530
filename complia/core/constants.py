"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000

# HTTP headers carrying upstream identity
CORRELATION_ID_HEADER = "X-Correlation-ID"
TENANT_ID_HEADER = "X-Tenant-ID"
USER_ID_HEADER = "X-User-ID"

# Due-date rule defaults
DEFAULT_DUE_DAY = 15
DEFAULT_DUE_MONTH = 4  # April
DEFAULT_DAY_OF_WEEK = 1  # Monday, 0=Sunday convention

# Audit actions
AUDIT_ACTION_TASKS_GENERATED = "TASKS_GENERATED"
AUDIT_ACTION_COMPLIANCES_ASSIGNED = "COMPLIANCES_ASSIGNED"
