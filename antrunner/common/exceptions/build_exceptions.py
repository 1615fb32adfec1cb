from typing import Any, Dict, List, Optional

from antrunner.common.exceptions.base_exceptions import ErrorCode, NonRetryableException


def _compact(**fields: Any) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


class ConfigurationError(NonRetryableException):
    """The step cannot run as configured; nothing has been launched yet."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        step_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            error_code,
            {**(details or {}), **_compact(step_id=step_id)},
            cause,
            requires_manual_intervention=True,
        )
        self.step_id = step_id


class InstallationNotFoundError(ConfigurationError):
    def __init__(self, name: str, available: Optional[List[str]] = None):
        super().__init__(
            f"No Ant installation named '{name}' is configured",
            ErrorCode.INSTALLATION_NOT_FOUND,
            details=_compact(installation=name, available=available),
        )
        self.name = name
        self.available = list(available or [])


class ExecutableNotFoundError(ConfigurationError):
    def __init__(
        self,
        installation: str,
        home: Optional[str] = None,
        node_name: Optional[str] = None,
    ):
        super().__init__(
            f'Cannot find executable from the chosen Ant installation "{installation}"',
            ErrorCode.EXECUTABLE_NOT_FOUND,
            details=_compact(installation=installation, home=home or None, node=node_name),
        )
        self.installation = installation
        self.home = home


class BuildFileNotFoundError(ConfigurationError):
    def __init__(self, path: str):
        super().__init__(
            f"Unable to find build script at {path}",
            ErrorCode.BUILD_FILE_NOT_FOUND,
            details={"build_file": path},
        )
        self.path = path


class WorkspaceUnavailableError(ConfigurationError):
    def __init__(self):
        super().__init__(
            "Workspace is not available. Agent may be disconnected.",
            ErrorCode.WORKSPACE_UNAVAILABLE,
        )


class NodeOfflineError(ConfigurationError):
    def __init__(self, node_name: Optional[str] = None):
        super().__init__(
            "Cannot get installation for node, since it is not online",
            ErrorCode.NODE_OFFLINE,
            details=_compact(node=node_name),
        )
        self.node_name = node_name


class LaunchFailure(NonRetryableException):
    """Ant could not be started at all. A non-zero exit is not a launch failure."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            ErrorCode.LAUNCH_FAILED,
            _compact(command=command),
            cause,
        )
        self.command = command
