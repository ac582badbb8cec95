# Workflow error taxonomy
# Subclasses HTTPException (like auth.decorators.AuthError) so routers can let
# them propagate straight to the client with the unmet condition intact.

from typing import Optional
from fastapi import HTTPException, status


class WorkflowError(HTTPException):
    """Base class for every per-request workflow failure."""

    code = "workflow_error"
    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        super().__init__(
            status_code=status_code or self.status_code_default,
            detail={"error": self.code, "message": message},
        )

    def __str__(self):
        return f"{self.code}: {self.message}"


class PreconditionFailed(WorkflowError):
    """A business-rule guard is not met, e.g. script submitted before the deal is final."""
    code = "precondition_failed"
    status_code_default = status.HTTP_409_CONFLICT


class StaleState(WorkflowError):
    """Another actor moved the record first. Re-fetch and decide whether to retry."""
    code = "stale_state"
    status_code_default = status.HTTP_409_CONFLICT


class NotFound(WorkflowError):
    code = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND


class Forbidden(WorkflowError):
    """Caller is outside the lane that owns the field being written."""
    code = "forbidden"
    status_code_default = status.HTTP_403_FORBIDDEN


class ValidationError(WorkflowError):
    code = "validation_error"
    status_code_default = status.HTTP_422_UNPROCESSABLE_ENTITY
