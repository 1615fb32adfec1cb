from antrunner.common.config.settings import Settings, get_settings
from antrunner.common.config.logging_config import (
    StepLoggerAdapter,
    setup_logging,
    get_logger,
    get_step_logger,
    get_installer_logger,
)
from antrunner.common.config.constants import NoteKind

__all__ = [
    "Settings",
    "get_settings",
    "StepLoggerAdapter",
    "setup_logging",
    "get_logger",
    "get_step_logger",
    "get_installer_logger",
    "NoteKind",
]
