from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, Iterable, Mapping, Optional, TypeVar, TYPE_CHECKING
import asyncio
import os

from antrunner.common.config.settings import get_settings
from antrunner.common.config.logging_config import get_logger
from antrunner.tools.installer import AntInstaller

if TYPE_CHECKING:
    from antrunner.builder.listener import BuildListener
    from antrunner.common.dto.installation import AntInstallation


logger = get_logger(__name__)

T = TypeVar("T")


class Node(ABC):
    """A machine that build steps execute on.

    File checks and tool lookups for a step must happen here, not on the
    controller. ``call`` is the single entry point for work on the node.
    """

    def __init__(
        self,
        name: str,
        labels: Iterable[str] = (),
        tool_locations: Optional[Mapping[str, str]] = None,
    ):
        self.name = name
        self.labels = frozenset(labels)
        self.tool_locations: Dict[str, str] = dict(tool_locations or {})

    @property
    @abstractmethod
    def is_online(self) -> bool:
        raise NotImplementedError

    @property
    @abstractmethod
    def is_unix(self) -> bool:
        raise NotImplementedError

    @property
    @abstractmethod
    def environment(self) -> Mapping[str, str]:
        raise NotImplementedError

    @property
    @abstractmethod
    def tools_root(self) -> Path:
        raise NotImplementedError

    @abstractmethod
    async def call(self, fn: Callable[[], T]) -> T:
        raise NotImplementedError

    @abstractmethod
    def path_exists(self, path) -> bool:
        raise NotImplementedError

    async def translate_tool_home(
        self,
        installation: "AntInstallation",
        listener: Optional["BuildListener"] = None,
    ) -> str:
        override = self.tool_locations.get(installation.name)
        if override:
            logger.debug(f"Using node-specific location {override} for {installation.name} on {self.name}")
            return override

        for spec in installation.installers:
            if spec.applies_to(self):
                installed = await AntInstaller(spec).perform_installation(installation, self, listener)
                return str(installed)

        return installation.home


class LocalNode(Node):
    """The controller itself, or any node whose filesystem is this process's."""

    def __init__(
        self,
        name: str = "built-in",
        labels: Iterable[str] = (),
        tool_locations: Optional[Mapping[str, str]] = None,
        tools_root: Optional[Path] = None,
        environment: Optional[Mapping[str, str]] = None,
        unix: Optional[bool] = None,
        online: bool = True,
    ):
        super().__init__(name, labels, tool_locations)
        self._tools_root = Path(tools_root or os.path.expanduser(get_settings().tools_dir))
        self._environment = dict(environment if environment is not None else os.environ)
        self._unix = (os.name != "nt") if unix is None else unix
        self._online = online

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def is_unix(self) -> bool:
        return self._unix

    @property
    def environment(self) -> Mapping[str, str]:
        return self._environment

    @property
    def tools_root(self) -> Path:
        return self._tools_root

    def set_online(self, online: bool) -> None:
        self._online = online

    async def call(self, fn: Callable[[], T]) -> T:
        return await asyncio.get_running_loop().run_in_executor(None, fn)

    def path_exists(self, path) -> bool:
        return os.path.exists(path)
