"""Security configuration constants for the Eval Studio API.

This module centralizes security-related configuration including:
- Sensitive keys that should be sanitized from logs
- Error handling security settings
"""

# Keys redacted from structured log entries. Provider API keys are the main
# concern here; they travel in model configs and Authorization headers.
SENSITIVE_KEYS: set[str] = {
    "api_key",
    "apikey",
    "x_api_key",
    "authorization",
    "proxy_authorization",
    "bearer",
    "token",
    "access_token",
    "refresh_token",
    "secret",
    "client_secret",
    "password",
    "key",
    "cookie",
    "set_cookie",
}

# Production-only error response fields
# In production, error responses should only contain these fields to
# prevent information leakage
PRODUCTION_ERROR_FIELDS: set[str] = {
    "correlation_id",
    "type",
}

# Development error response fields (additional fields allowed in development)
DEVELOPMENT_ERROR_FIELDS: set[str] = PRODUCTION_ERROR_FIELDS | {
    "details",
    "traceback",
    "exception_type",
    "validation_errors",
}


def get_allowed_error_fields(environment: str) -> set[str]:
    """Get allowed error response fields based on environment.

    Args:
        environment: The application environment (production, development, etc.)

    Returns:
        Set of allowed field names for error responses
    """
    if environment == "production":
        return PRODUCTION_ERROR_FIELDS.copy()
    return DEVELOPMENT_ERROR_FIELDS.copy()


def is_sensitive_key(key: str) -> bool:
    """Check if a key should be considered sensitive and redacted."""
    normalized = key.lower().replace("-", "_")
    return normalized in SENSITIVE_KEYS
