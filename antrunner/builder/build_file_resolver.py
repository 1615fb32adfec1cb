from pathlib import Path
from typing import Callable, Optional

from antrunner.common.config.constants import BUILD_FILE_FLAGS, DEFAULT_BUILD_FILE
from antrunner.common.exceptions.build_exceptions import WorkspaceUnavailableError
from antrunner.common.utils.text_utils import tokenize


class BuildFileResolver:
    """Works out where the Ant build script lives."""

    def resolve(
        self,
        base: Path,
        build_file: Optional[str],
        targets: Optional[str],
    ) -> Path:
        if build_file is not None:
            return Path(base) / build_file

        # -f given in the targets field instead of the build file field
        tokens = tokenize(targets)
        for i in range(len(tokens) - 1):
            if tokens[i] in BUILD_FILE_FLAGS:
                return Path(base) / tokens[i + 1]

        return Path(base) / DEFAULT_BUILD_FILE

    def choose(
        self,
        module_root: Optional[Path],
        workspace: Optional[Path],
        build_file: Optional[str],
        targets: Optional[str],
        exists: Callable[[Path], bool],
    ) -> Path:
        """Module root, then workspace root, then the raw build file path.

        Commits to the first candidate that exists. When none does, the last
        candidate is returned and the caller reports it as missing.
        """
        if workspace is None:
            raise WorkspaceUnavailableError()

        candidate = self.resolve(module_root or workspace, build_file, targets)
        if exists(candidate):
            return candidate

        candidate = self.resolve(workspace, build_file, targets)
        if exists(candidate):
            return candidate

        if build_file is not None:
            return Path(build_file)
        return candidate
