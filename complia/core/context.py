"""Request-scoped context stored in contextvars.

The correlation ID is set by the request context middleware; the tenant and
acting user are set by the tenant dependency once the identity headers have
been read. The audit sink falls back to the acting user recorded here, and
engine error logs carry the tenant.
"""

import uuid
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_tenant_id_var: ContextVar[int | None] = ContextVar("tenant_id", default=None)
_user_id_var: ContextVar[int | None] = ContextVar("user_id", default=None)


class RequestContext:
    """Async-safe accessors for request-scoped identifiers."""

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Set the correlation ID for the current context."""
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context."""
        return _correlation_id_var.get()

    @staticmethod
    def set_identity(tenant_id: int, user_id: int | None) -> None:
        """Record the tenant and acting user of the current request.

        Args:
            tenant_id: Tenant the request operates on.
            user_id: Acting user, if the caller supplied one.
        """
        _tenant_id_var.set(tenant_id)
        _user_id_var.set(user_id)

    @staticmethod
    def get_tenant_id() -> int | None:
        """Get the tenant ID from the current context."""
        return _tenant_id_var.get()

    @staticmethod
    def get_user_id() -> int | None:
        """Get the acting user ID from the current context."""
        return _user_id_var.get()

    @staticmethod
    def clear() -> None:
        """Reset every context variable."""
        _correlation_id_var.set(None)
        _tenant_id_var.set(None)
        _user_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a UUID4 correlation ID."""
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID in the form ``req-<uuid4>``."""
    return f"req-{uuid.uuid4()}"
