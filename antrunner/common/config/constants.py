from enum import Enum
from typing import Final, Tuple


class NoteKind(str, Enum):
    TARGET = "target"
    TASK = "task"
    OUTCOME = "outcome"


ANT_TOOL_TYPE: Final[str] = "ant"

ANT_EXECUTABLE_UNIX: Final[str] = "ant"
ANT_EXECUTABLE_WINDOWS: Final[str] = "ant.bat"

ANT_HOME_VAR: Final[str] = "ANT_HOME"
ANT_OPTS_VAR: Final[str] = "ANT_OPTS"

DEFAULT_BUILD_FILE: Final[str] = "build.xml"
BUILD_FILE_FLAGS: Final[tuple] = ("-f", "-file", "-buildfile")

PROPERTY_PREFIX: Final[str] = "-D"

WINDOWS_SHELL: Final[str] = "cmd.exe"
WINDOWS_SHELL_SWITCH: Final[str] = "/C"
WINDOWS_EXIT_SUFFIX: Final[str] = "&& exit %%ERRORLEVEL%%"
WINDOWS_COMMAND_PREFIX: Final[Tuple[str, ...]] = (WINDOWS_SHELL, WINDOWS_SHELL_SWITCH)
DEFAULT_WINDOWS_PREFIX_LENGTH: Final[int] = len(WINDOWS_COMMAND_PREFIX)

MASK_PLACEHOLDER: Final[str] = "******"

INSTALLED_FROM_MARKER: Final[str] = ".installedFrom"
ANT_JAR_RELATIVE_PATH: Final[str] = "lib/ant.jar"

QUICK_LAUNCH_FAILURE_SECONDS: Final[float] = 1.0
