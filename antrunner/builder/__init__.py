from antrunner.builder.argument_builder import ArgumentListBuilder
from antrunner.builder.windows_command import (
    WindowsCommandStyle,
    escape_windows_command,
)
from antrunner.builder.build_file_resolver import BuildFileResolver
from antrunner.builder.console_annotator import AntConsoleAnnotator, AntNote
from antrunner.builder.listener import BuildListener
from antrunner.builder.launcher import Launcher, LocalLauncher
from antrunner.builder.ant_invoker import AntInvoker

__all__ = [
    "ArgumentListBuilder",
    "WindowsCommandStyle",
    "escape_windows_command",
    "BuildFileResolver",
    "AntConsoleAnnotator",
    "AntNote",
    "BuildListener",
    "Launcher",
    "LocalLauncher",
    "AntInvoker",
]
