"""API-related constants."""

API_PREFIX = "/api/v1"

# HTTP Status Codes
HTTP_500_INTERNAL_SERVER_ERROR = 500

# Request logging
REQUEST_BODY_METHODS = {"POST", "PUT", "PATCH"}
