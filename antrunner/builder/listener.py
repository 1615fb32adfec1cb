import sys
import traceback
from typing import BinaryIO, Optional


class BuildListener:
    """The user-facing build log of one step execution."""

    def __init__(self, stream: Optional[BinaryIO] = None, charset: str = "utf-8"):
        self.stream: BinaryIO = stream if stream is not None else sys.stdout.buffer
        self.charset = charset

    def _println(self, text: str) -> None:
        self.stream.write((text + "\n").encode(self.charset, errors="replace"))
        self.stream.flush()

    def info(self, message: str) -> None:
        self._println(message)

    def error(self, message: str) -> None:
        self._println(f"ERROR: {message}")

    def fatal_error(self, message: str) -> None:
        self._println(f"FATAL: {message}")

    def display_io_exception(self, exc: BaseException) -> None:
        self._println("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip())
