from shared.schemas.base import ErrorResponse, HealthResponse

__all__ = ["ErrorResponse", "HealthResponse"]
