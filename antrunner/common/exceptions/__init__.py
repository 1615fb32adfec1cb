from antrunner.common.exceptions.base_exceptions import (
    AntRunnerException,
    ErrorCode,
    NonRetryableException,
    ValidationException,
    StorageException,
)
from antrunner.common.exceptions.build_exceptions import (
    ConfigurationError,
    InstallationNotFoundError,
    ExecutableNotFoundError,
    BuildFileNotFoundError,
    WorkspaceUnavailableError,
    NodeOfflineError,
    LaunchFailure,
)
from antrunner.common.exceptions.installer_exceptions import (
    InstallerError,
    DownloadError,
    UnpackError,
)

__all__ = [
    "AntRunnerException",
    "ErrorCode",
    "NonRetryableException",
    "ValidationException",
    "StorageException",
    "ConfigurationError",
    "InstallationNotFoundError",
    "ExecutableNotFoundError",
    "BuildFileNotFoundError",
    "WorkspaceUnavailableError",
    "NodeOfflineError",
    "LaunchFailure",
    "InstallerError",
    "DownloadError",
    "UnpackError",
]
