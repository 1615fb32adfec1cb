from typing import Any, Dict, List, Literal, Optional, Tuple, TYPE_CHECKING
from pathlib import PureWindowsPath, PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, field_validator

from antrunner.common.config.constants import (
    ANT_EXECUTABLE_UNIX,
    ANT_EXECUTABLE_WINDOWS,
    ANT_HOME_VAR,
)
from antrunner.common.dto.environment import EnvVars
from antrunner.common.utils.text_utils import expand_variables

if TYPE_CHECKING:
    from antrunner.tools.node import Node
    from antrunner.builder.listener import BuildListener


class AntInstallerSpec(BaseModel):
    """Persisted configuration of the download-from-apache.org installer."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["ant-download"] = "ant-download"
    id: str = Field(description="Ant version to download, e.g. 1.10.14")
    label: Optional[str] = Field(
        default=None,
        description="Restrict the installer to nodes carrying this label"
    )

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Installer id (Ant version) is required")
        return v

    def applies_to(self, node: "Node") -> bool:
        return self.label is None or self.label in node.labels


class InstallSourceProperty(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["install-source"] = "install-source"
    installers: Tuple[AntInstallerSpec, ...] = ()


def launder_home(home: str) -> str:
    # Ant does not accept ANT_HOME with a trailing separator, especially on Windows
    if home.endswith("/") or home.endswith("\\"):
        return home[:-1]
    return home


class AntInstallation(BaseModel):
    """A named Ant installation.

    Instances are immutable. ``for_node`` and ``for_environment`` produce
    specialized copies for one step execution and leave the configured record
    untouched.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    home: str = ""
    properties: Tuple[InstallSourceProperty, ...] = ()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Installation name is required")
        return v

    @field_validator("home", mode="before")
    @classmethod
    def normalize_home(cls, v: Optional[str]) -> str:
        return launder_home(v or "")

    @property
    def installers(self) -> List[AntInstallerSpec]:
        return [i for prop in self.properties for i in prop.installers]

    def with_home(self, home: str) -> "AntInstallation":
        return AntInstallation(name=self.name, home=home, properties=self.properties)

    def for_environment(self, environment: EnvVars) -> "AntInstallation":
        return self.with_home(environment.expand(self.home))

    async def for_node(
        self,
        node: "Node",
        listener: Optional["BuildListener"] = None,
    ) -> "AntInstallation":
        return self.with_home(await node.translate_tool_home(self, listener))

    def build_env_vars(self, env: EnvVars) -> None:
        env.put(ANT_HOME_VAR, self.home)

    def get_exe_file(self, windows: bool, node_env: Optional[Dict[str, str]] = None) -> str:
        home = expand_variables(self.home, node_env or {})
        if windows:
            return str(PureWindowsPath(home, "bin", ANT_EXECUTABLE_WINDOWS))
        return str(PurePosixPath(home, "bin", ANT_EXECUTABLE_UNIX))

    async def get_executable(self, node: "Node") -> Optional[str]:
        """Locate ``bin/ant`` on the execution node, or ``None`` if it is missing."""
        exe = self.get_exe_file(not node.is_unix, node.environment)
        return await node.call(lambda: exe if node.path_exists(exe) else None)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
