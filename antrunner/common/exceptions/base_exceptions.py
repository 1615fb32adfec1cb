from enum import Enum
from typing import Any, Dict, Optional

from antrunner.common.utils.time_utils import utc_now


class ErrorCode(str, Enum):
    UNKNOWN = "E0000"

    # step configuration, detected before anything is launched
    CONFIGURATION_ERROR = "E1000"
    INSTALLATION_NOT_FOUND = "E1001"
    EXECUTABLE_NOT_FOUND = "E1002"
    BUILD_FILE_NOT_FOUND = "E1003"
    WORKSPACE_UNAVAILABLE = "E1004"
    NODE_OFFLINE = "E1005"

    LAUNCH_FAILED = "E2000"

    INSTALLER_ERROR = "E3000"
    DOWNLOAD_FAILED = "E3001"
    UNPACK_FAILED = "E3002"

    STORAGE_ERROR = "E4000"

    VALIDATION_ERROR = "E7000"


class AntRunnerException(Exception):
    """Root of every error antrunner raises on purpose.

    ``details`` carries machine-readable context (paths, names, the masked
    command) for operator logs; ``message`` is what the build log shows.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details: Dict[str, Any] = dict(details or {})
        self.cause = cause
        self.raised_at = utc_now()

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error_code.value}, {self.message!r}, details={self.details!r})"

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "exception_type": type(self).__name__,
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
            "raised_at": self.raised_at.isoformat(),
        }
        if self.cause is not None:
            payload["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return payload

    def with_context(self, **context: Any) -> "AntRunnerException":
        """Add context without overwriting keys the raiser already set."""
        for key, value in context.items():
            self.details.setdefault(key, value)
        return self


class NonRetryableException(AntRunnerException):
    """Running the step again unchanged would fail the same way."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        requires_manual_intervention: bool = False,
    ):
        super().__init__(message, error_code, details, cause)
        self.requires_manual_intervention = requires_manual_intervention


class ValidationException(NonRetryableException):
    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            {**(details or {}), **({"field": field_name} if field_name else {})},
            cause,
        )
        self.field_name = field_name
        self.field_value = field_value


class StorageException(NonRetryableException):
    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            ErrorCode.STORAGE_ERROR,
            {**(details or {}), **({"path": path} if path else {})},
            cause,
        )
        self.path = path
