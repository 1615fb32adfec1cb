from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from antrunner.common.config.constants import ANT_JAR_RELATIVE_PATH


class ValidationKind(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ValidationResult:
    kind: ValidationKind
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind != ValidationKind.ERROR

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(ValidationKind.OK)

    @classmethod
    def error(cls, message: str) -> "ValidationResult":
        return cls(ValidationKind.ERROR, message)


def check_home(value: Optional[Union[str, Path]], allowed: bool = True) -> ValidationResult:
    """Check that ``value`` looks like an ANT_HOME.

    ``allowed`` is false when the caller may not look at the controller's
    filesystem; the check is then skipped.
    """
    if not allowed or value is None or str(value) == "":
        return ValidationResult.success()

    home = Path(value)
    if not home.is_dir():
        return ValidationResult.error(f"{home} is not a directory")

    if not (home / ANT_JAR_RELATIVE_PATH).exists():
        return ValidationResult.error(f"{home} doesn't look like an Ant directory")

    return ValidationResult.success()


def check_name(value: Optional[str]) -> ValidationResult:
    if value is None or not value.strip():
        return ValidationResult.error("Required")
    return ValidationResult.success()
