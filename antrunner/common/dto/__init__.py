from antrunner.common.dto.environment import EnvVars
from antrunner.common.dto.installation import (
    AntInstallation,
    AntInstallerSpec,
    InstallSourceProperty,
    launder_home,
)
from antrunner.common.dto.build import AntBuildStep, StepExecutionContext

__all__ = [
    "EnvVars",
    "AntInstallation",
    "AntInstallerSpec",
    "InstallSourceProperty",
    "launder_home",
    "AntBuildStep",
    "StepExecutionContext",
]
