from antrunner.common.utils.text_utils import (
    fix_empty_and_trim,
    expand_variables,
    flatten_line_breaks,
    tokenize,
    parse_properties,
)
from antrunner.common.utils.file_utils import (
    safe_read_file,
    atomic_write_file,
    ensure_directory,
    cleanup_directory,
    make_executable,
)
from antrunner.common.utils.time_utils import (
    utc_now,
    format_duration,
    Timer,
)

__all__ = [
    "fix_empty_and_trim",
    "expand_variables",
    "flatten_line_breaks",
    "tokenize",
    "parse_properties",
    "safe_read_file",
    "atomic_write_file",
    "ensure_directory",
    "cleanup_directory",
    "make_executable",
    "utc_now",
    "format_duration",
    "Timer",
]
