"""Response helpers."""

from complia.api.utils.responses import ORJSONResponse

__all__ = ["ORJSONResponse"]
