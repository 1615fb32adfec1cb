from antrunner.common import config
from antrunner.common import dto
from antrunner.common import exceptions
from antrunner.common import utils

__all__ = ["config", "dto", "exceptions", "utils"]
