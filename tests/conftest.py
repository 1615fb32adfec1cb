import io
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from antrunner.builder.launcher import Launcher
from antrunner.builder.listener import BuildListener
from antrunner.common.config.settings import get_settings
from antrunner.common.dto.build import StepExecutionContext
from antrunner.storage.installation_registry import InstallationRegistry
from antrunner.tools.node import LocalNode


@dataclass
class LaunchCall:
    cmds: List[str]
    env: Dict[str, str]
    masks: List[bool]
    pwd: Path


class RecordingLauncher(Launcher):
    """Stands in for the process launch; records what it was asked to run."""

    def __init__(self, exit_code: int = 0, output: bytes = b"", error: Optional[BaseException] = None):
        self.exit_code = exit_code
        self.output = output
        self.error = error
        self.calls: List[LaunchCall] = []

    async def launch(self, cmds, env, masks, pwd, stdout) -> int:
        self.calls.append(LaunchCall(list(cmds), dict(env), list(masks), Path(pwd)))
        if self.error is not None:
            raise self.error
        if self.output:
            stdout.write(self.output)
        return self.exit_code


class FakeNode(LocalNode):
    """Local node that also reports some made-up paths as existing."""

    def __init__(self, existing: Iterable[str] = (), **kwargs):
        super().__init__(**kwargs)
        self.existing = {str(p) for p in existing}

    def path_exists(self, path) -> bool:
        return str(path) in self.existing or os.path.exists(path)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def log_stream():
    return io.BytesIO()


@pytest.fixture
def listener(log_stream):
    return BuildListener(log_stream)


@pytest.fixture
def workspace(tmp_path):
    ws = tmp_path / "workspace"
    ws.mkdir()
    (ws / "build.xml").write_text("<project default='all'/>")
    return ws


@pytest.fixture
def registry():
    return InstallationRegistry()


@pytest.fixture
def make_context(listener, workspace, tmp_path):
    def _make(launcher, node=None, **overrides):
        if node is None:
            node = FakeNode(tools_root=tmp_path / "tools", unix=True)
        values = dict(
            step_id="step-1",
            listener=listener,
            launcher=launcher,
            node=node,
            workspace=workspace,
            environment={"PATH": "/usr/bin:/bin"},
        )
        values.update(overrides)
        return StepExecutionContext(**values)

    return _make
