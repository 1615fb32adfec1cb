from antrunner.tools.installer import AntInstaller, extract_archive, pull_up_directory
from antrunner.tools.node import Node, LocalNode
from antrunner.tools.validation import (
    ValidationKind,
    ValidationResult,
    check_home,
    check_name,
)

__all__ = [
    "AntInstaller",
    "extract_archive",
    "pull_up_directory",
    "Node",
    "LocalNode",
    "ValidationKind",
    "ValidationResult",
    "check_home",
    "check_name",
]
