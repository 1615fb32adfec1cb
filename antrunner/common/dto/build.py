from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Set, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from antrunner.common.utils.text_utils import fix_empty_and_trim

if TYPE_CHECKING:
    from antrunner.builder.console_annotator import AntNote
    from antrunner.builder.launcher import Launcher
    from antrunner.builder.listener import BuildListener
    from antrunner.tools.node import Node


class AntBuildStep(BaseModel):
    """Persisted configuration of one Ant build step."""

    model_config = ConfigDict(frozen=True)

    targets: str = Field(default="", description="Targets, properties and other Ant options")
    ant_name: Optional[str] = Field(default=None, description="Name of the Ant installation to use")
    ant_opts: Optional[str] = Field(default=None, description="ANT_OPTS for the Ant JVM")
    build_file: Optional[str] = Field(default=None, description="Build script path, used for -file")
    properties: Optional[str] = Field(default=None, description="Properties in java.util.Properties syntax")

    @field_validator("targets", mode="before")
    @classmethod
    def default_targets(cls, v: Optional[str]) -> str:
        return v or ""

    @field_validator("ant_opts", "build_file", "properties")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        return fix_empty_and_trim(v)


@dataclass
class StepExecutionContext:
    """Everything the host hands to a build step for one execution."""

    step_id: str
    listener: "BuildListener"
    launcher: "Launcher"
    node: Optional["Node"]
    workspace: Optional[Path]
    module_root: Optional[Path] = None
    environment: Dict[str, str] = field(default_factory=dict)
    build_variables: Dict[str, str] = field(default_factory=dict)
    sensitive_variables: Set[str] = field(default_factory=set)
    on_note: Optional[Callable[["AntNote"], None]] = None

    def get_module_root(self) -> Optional[Path]:
        return self.module_root or self.workspace
