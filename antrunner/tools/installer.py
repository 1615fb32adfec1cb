from pathlib import Path
from typing import Optional, TYPE_CHECKING
import re
import shutil
import tarfile
import tempfile
import zipfile

import aiohttp

from antrunner.common.config.constants import ANT_TOOL_TYPE, INSTALLED_FROM_MARKER
from antrunner.common.config.settings import get_settings
from antrunner.common.config.logging_config import get_installer_logger
from antrunner.common.dto.installation import AntInstallation, AntInstallerSpec
from antrunner.common.exceptions.installer_exceptions import DownloadError, UnpackError
from antrunner.common.utils.file_utils import cleanup_directory, ensure_directory

if TYPE_CHECKING:
    from antrunner.builder.listener import BuildListener
    from antrunner.tools.node import Node


DOWNLOAD_CHUNK_SIZE = 65536

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def _check_member(target: Path, member_name: str) -> None:
    resolved = (target / member_name).resolve()
    if resolved != target.resolve() and target.resolve() not in resolved.parents:
        raise ValueError(f"Archive member escapes install directory: {member_name}")


def extract_archive(archive: Path, target: Path) -> None:
    ensure_directory(target)
    name = archive.name.lower()

    if name.endswith(".zip"):
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                _check_member(target, info.filename)
                extracted = Path(zf.extract(info, target))
                mode = info.external_attr >> 16
                if mode and not info.is_dir():
                    extracted.chmod(mode & 0o777)
    elif name.endswith((".tar.gz", ".tgz", ".tar")):
        with tarfile.open(archive) as tf:
            for member in tf.getmembers():
                _check_member(target, member.name)
            tf.extractall(target)
    else:
        raise ValueError(f"Unsupported archive type: {archive.name}")


def pull_up_directory(target: Path) -> None:
    """If ``target`` holds exactly one directory and nothing else, move its contents up."""
    children = [c for c in target.iterdir() if c.name != INSTALLED_FROM_MARKER]
    if len(children) != 1 or not children[0].is_dir():
        return
    nested = children[0]
    staging = target / f".pullup-{nested.name}"
    nested.rename(staging)
    for child in staging.iterdir():
        shutil.move(str(child), str(target / child.name))
    staging.rmdir()


class AntInstaller:
    """Downloads an Ant distribution and unpacks it on a node."""

    def __init__(
        self,
        spec: AntInstallerSpec,
        url_template: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
    ):
        settings = get_settings()
        self._spec = spec
        self._url_template = url_template or settings.ant_download_url_template
        self._timeout = timeout_seconds or settings.download_timeout_seconds

    @property
    def url(self) -> str:
        return self._url_template.format(version=self._spec.id)

    def preferred_location(self, tool: AntInstallation, node: "Node") -> Path:
        return node.tools_root / ANT_TOOL_TYPE / _UNSAFE_NAME_CHARS.sub("_", tool.name)

    @staticmethod
    def is_up_to_date(expected: Path, url: str) -> bool:
        marker = expected / INSTALLED_FROM_MARKER
        return marker.is_file() and marker.read_text(encoding="utf-8").strip() == url

    async def perform_installation(
        self,
        tool: AntInstallation,
        node: "Node",
        listener: Optional["BuildListener"] = None,
    ) -> Path:
        log = get_installer_logger(tool.name, node.name)
        expected = self.preferred_location(tool, node)
        url = self.url

        if await node.call(lambda: self.is_up_to_date(expected, url)):
            log.debug(f"{tool.name} already installed at {expected}")
            return expected

        if listener:
            listener.info(f"Unpacking {url} to {expected} on {node.name}")
        log.info(f"Installing {tool.name} from {url} into {expected}")

        with tempfile.TemporaryDirectory(prefix="antrunner_dl_") as tmp:
            archive = Path(tmp) / url.rsplit("/", 1)[-1]
            await self._download(url, archive, tool.name)
            try:
                await node.call(lambda: self._install(archive, expected, url))
            except (OSError, ValueError, zipfile.BadZipFile, tarfile.TarError) as e:
                raise UnpackError(str(archive), installation=tool.name, cause=e) from e

        return expected

    async def _download(self, url: str, destination: Path, tool_name: str) -> None:
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise DownloadError(url, status_code=response.status, installation=tool_name)
                    with open(destination, "wb") as f:
                        async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                            f.write(chunk)
        except aiohttp.ClientError as e:
            raise DownloadError(url, installation=tool_name, cause=e) from e

    @staticmethod
    def _install(archive: Path, expected: Path, url: str) -> None:
        cleanup_directory(expected, ignore_errors=False)
        extract_archive(archive, expected)
        pull_up_directory(expected)
        (expected / INSTALLED_FROM_MARKER).write_text(url, encoding="utf-8")
