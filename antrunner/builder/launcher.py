from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol
import asyncio
import os
import signal
import subprocess
import sys

from antrunner.builder.listener import BuildListener
from antrunner.common.config.constants import MASK_PLACEHOLDER
from antrunner.common.config.logging_config import get_logger


logger = get_logger(__name__)

READ_CHUNK_SIZE = 8192


class OutputSink(Protocol):
    def write(self, data: bytes) -> None: ...

    def flush(self) -> None: ...


def _process_group_options() -> Dict[str, Any]:
    if sys.platform == "win32":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


async def kill_process_tree(pid: int) -> None:
    """Kill ``pid`` together with everything it spawned.

    The process must have been started in its own group, see
    ``_process_group_options``.
    """
    if sys.platform == "win32":
        killer = await asyncio.create_subprocess_exec(
            "taskkill", "/T", "/F", "/PID", str(pid),
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        await killer.wait()
        return
    try:
        os.killpg(pid, signal.SIGKILL)
    except ProcessLookupError:
        logger.debug(f"Process group {pid} already gone")


def mask_command(cmds: List[str], masks: Optional[List[bool]] = None) -> str:
    masks = masks or [False] * len(cmds)
    return " ".join(MASK_PLACEHOLDER if m else c for c, m in zip(cmds, masks))


class Launcher(ABC):
    @abstractmethod
    async def launch(
        self,
        cmds: List[str],
        env: Mapping[str, str],
        masks: List[bool],
        pwd: Path,
        stdout: OutputSink,
    ) -> int:
        """Run ``cmds`` to completion and return its exit code.

        Raises ``OSError`` if the process cannot be started.
        """
        raise NotImplementedError("Subclasses must implement launch method")


class LocalLauncher(Launcher):
    """Runs the process on this machine with asyncio."""

    def __init__(self, listener: Optional[BuildListener] = None):
        self._listener = listener

    async def launch(
        self,
        cmds: List[str],
        env: Mapping[str, str],
        masks: List[bool],
        pwd: Path,
        stdout: OutputSink,
    ) -> int:
        printable = mask_command(cmds, masks)
        if self._listener:
            self._listener.info(f"[{pwd}] $ {printable}")
        logger.debug(f"Running command: {printable}")

        process = await asyncio.create_subprocess_exec(
            *cmds,
            cwd=str(pwd),
            env=dict(env),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            **_process_group_options(),
        )

        try:
            while True:
                chunk = await process.stdout.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                stdout.write(chunk)
            return await process.wait()
        except asyncio.CancelledError:
            logger.info(f"Cancelled, killing process tree {process.pid}")
            await kill_process_tree(process.pid)
            await process.wait()
            raise
