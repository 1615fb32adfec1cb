from antrunner.common import config
from antrunner.common import dto
from antrunner.common import exceptions
from antrunner.common import utils
from antrunner import builder
from antrunner import storage
from antrunner import tools

__version__ = "1.0.0"
__all__ = [
    "config",
    "dto",
    "exceptions",
    "utils",
    "builder",
    "storage",
    "tools",
]
