from pathlib import Path
from typing import Optional, Union
import os
import shutil
import stat
import sys
import tempfile

from antrunner.common.config.logging_config import get_logger


logger = get_logger(__name__)

PathLike = Union[str, Path]


def safe_read_file(path: PathLike, encoding: str = "utf-8") -> Optional[str]:
    """Contents of ``path``, or ``None`` when there is no regular file there."""
    path = Path(path)
    if not path.is_file():
        logger.debug(f"Nothing to read at {path}")
        return None
    with open(path, "r", encoding=encoding) as f:
        return f.read()


def atomic_write_file(path: PathLike, content: str, encoding: str = "utf-8") -> None:
    """Replace ``path`` in one rename so readers never see a partial file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, staging = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(content)
        os.replace(staging, path)
    except OSError:
        if os.path.exists(staging):
            os.unlink(staging)
        raise


def ensure_directory(directory: PathLike) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def _clear_readonly(func, path, _exc) -> None:
    # read-only files block rmtree on Windows
    os.chmod(path, stat.S_IWRITE)
    func(path)


def cleanup_directory(directory: PathLike, ignore_errors: bool = True) -> bool:
    directory = Path(directory)
    if not directory.exists():
        return True
    try:
        if sys.version_info >= (3, 12):
            shutil.rmtree(directory, onexc=_clear_readonly)
        else:
            shutil.rmtree(directory, onerror=_clear_readonly)
    except OSError as e:
        if not ignore_errors:
            raise
        logger.warning(f"Could not fully remove {directory}: {e}")
        return False
    logger.debug(f"Removed {directory}")
    return True


def make_executable(path: PathLike) -> None:
    path = Path(path)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
