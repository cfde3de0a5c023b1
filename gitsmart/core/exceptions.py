from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    correlation_id: Optional[str] = None


class BaseAPIException(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_error_response(self, correlation_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details,
            correlation_id=correlation_id
        )


class InternalServerError(BaseAPIException):
    def __init__(self, message: str = "Internal server error", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="GSH-500",
            message=message,
            status_code=500,
            details=details
        )


class UnrecognizedService(BaseAPIException):
    """The client asked for a service other than upload-pack or receive-pack."""

    def __init__(self, token: Optional[str]):
        self.token = token
        super().__init__(
            code="GSH-403",
            message=f"unrecognized service: {token}",
            status_code=403,
            details={"service": token}
        )


class ProcessStartFailed(InternalServerError):
    """The git executable could not be launched at all."""

    def __init__(self, executable: str, reason: str):
        self.executable = executable
        self.reason = reason
        super().__init__(
            message=f"could not start {executable}",
            details={"executable": executable, "stderr": reason}
        )


class GitProcessFailed(InternalServerError):
    """A git child process exited non-zero or its streams broke."""

    label = "git process"

    def __init__(self, operation: str, stderr: str, exit_code: Optional[int] = None):
        self.operation = operation
        self.stderr = stderr
        self.exit_code = exit_code
        super().__init__(
            message=f"{self.label} failed: {stderr.strip() or 'no diagnostic output'}",
            details={
                "operation": operation,
                "exit_code": exit_code,
                "stderr": stderr,
            }
        )


class AdvertisementFailed(GitProcessFailed):
    label = "ref advertisement"


class ExchangeFailed(GitProcessFailed):
    label = "service exchange"

