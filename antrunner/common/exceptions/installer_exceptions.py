from typing import Any, Dict, Optional

from antrunner.common.exceptions.base_exceptions import ErrorCode, NonRetryableException


class InstallerError(NonRetryableException):
    """An automatic tool installation did not produce a usable home."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INSTALLER_ERROR,
        installation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        details = dict(details or {})
        if installation:
            details["installation"] = installation
        super().__init__(message, error_code, details, cause)
        self.installation = installation


class DownloadError(InstallerError):
    def __init__(
        self,
        url: str,
        status_code: Optional[int] = None,
        installation: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        suffix = f" (HTTP {status_code})" if status_code else ""
        super().__init__(
            f"Failed to download {url}{suffix}",
            ErrorCode.DOWNLOAD_FAILED,
            installation,
            {"url": url, "status_code": status_code},
            cause,
        )
        self.url = url
        self.status_code = status_code


class UnpackError(InstallerError):
    def __init__(
        self,
        archive: str,
        installation: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            f"Failed to unpack {archive}",
            ErrorCode.UNPACK_FAILED,
            installation,
            {"archive": archive},
            cause,
        )
        self.archive = archive
