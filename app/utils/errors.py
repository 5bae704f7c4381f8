"""Error kinds raised by the problem pipeline and the stores.

Each kind is an ``HTTPException`` so routers can let it propagate and the
application-level handler renders it as a structured response.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for all service errors."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "internal_error"

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.http_status, detail=message, headers=headers)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for an API response."""
        return {"error": self.error_code, "detail": self.message}


class ConfigurationError(AppError):
    """A required credential or setting is missing."""

    error_code = "configuration_error"


class UnauthorizedError(AppError):
    """No caller identity could be resolved."""

    http_status = status.HTTP_401_UNAUTHORIZED
    error_code = "unauthorized"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    """Caller lacks the required role or ownership."""

    http_status = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"


class NotFoundError(AppError):
    """Referenced record does not exist."""

    http_status = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class UpstreamError(AppError):
    """The completion endpoint returned a non-success response."""

    http_status = status.HTTP_502_BAD_GATEWAY
    error_code = "upstream_error"

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        upstream_body: str = "",
    ):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body


class MalformedResponseError(AppError):
    """The completion reply is not parseable as JSON."""

    http_status = status.HTTP_502_BAD_GATEWAY
    error_code = "malformed_response"


class SchemaViolationError(AppError):
    """The completion reply is JSON but misses required fields."""

    http_status = status.HTTP_502_BAD_GATEWAY
    error_code = "schema_violation"

    def __init__(self, fields: List[str], message: Optional[str] = None):
        super().__init__(
            message
            or "Generated problem is missing or has invalid field(s): "
            + ", ".join(fields)
        )
        self.fields = fields

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["fields"] = self.fields
        return data


class DatabaseUnavailableError(AppError):
    """The document store has not been connected."""

    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "database_unavailable"
