from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union
import json
import os
import threading

from pydantic import TypeAdapter, ValidationError

from antrunner.common.config.logging_config import get_logger
from antrunner.common.dto.installation import AntInstallation
from antrunner.common.exceptions.base_exceptions import StorageException, ValidationException
from antrunner.common.exceptions.build_exceptions import InstallationNotFoundError
from antrunner.common.utils.file_utils import atomic_write_file, safe_read_file


logger = get_logger(__name__)

_INSTALLATIONS_ADAPTER = TypeAdapter(Tuple[AntInstallation, ...])


class InstallationStore(ABC):
    @abstractmethod
    def load(self) -> Tuple[AntInstallation, ...]:
        raise NotImplementedError("Subclasses must implement load method")

    @abstractmethod
    def save(self, installations: Tuple[AntInstallation, ...]) -> None:
        raise NotImplementedError("Subclasses must implement save method")


class InMemoryInstallationStore(InstallationStore):
    def __init__(self, installations: Iterable[AntInstallation] = ()):
        self._installations = tuple(installations)

    def load(self) -> Tuple[AntInstallation, ...]:
        return self._installations

    def save(self, installations: Tuple[AntInstallation, ...]) -> None:
        self._installations = installations


class JsonInstallationStore(InstallationStore):
    """Installations as a JSON array on disk, replaced atomically on save."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(os.path.expanduser(str(path)))

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Tuple[AntInstallation, ...]:
        try:
            content = safe_read_file(self._path)
        except OSError as e:
            raise StorageException(
                f"Failed to read installations from {self._path}",
                path=str(self._path),
                cause=e,
            ) from e
        if content is None:
            logger.debug(f"No installation file at {self._path}, starting empty")
            return ()
        try:
            return _INSTALLATIONS_ADAPTER.validate_json(content)
        except ValidationError as e:
            raise ValidationException(
                f"Invalid installation records in {self._path}",
                details={"errors": e.errors()},
                cause=e,
            ) from e

    def save(self, installations: Tuple[AntInstallation, ...]) -> None:
        payload = json.dumps([i.to_record() for i in installations], indent=2)
        try:
            atomic_write_file(self._path, payload + "\n")
        except OSError as e:
            raise StorageException(
                f"Failed to save installations to {self._path}",
                path=str(self._path),
                cause=e,
            ) from e


class InstallationRegistry:
    """Process-wide list of configured Ant installations.

    Readers always get an immutable snapshot. Writers replace the whole tuple
    under a lock, so a reader never sees a half-applied update.
    """

    def __init__(self, store: Optional[InstallationStore] = None):
        self._store = store or InMemoryInstallationStore()
        self._lock = threading.Lock()
        self._installations: Tuple[AntInstallation, ...] = ()

    @classmethod
    def from_store(cls, store: InstallationStore) -> "InstallationRegistry":
        registry = cls(store)
        registry.load()
        return registry

    def load(self) -> None:
        installations = self._store.load()
        self._check_unique(installations)
        with self._lock:
            self._installations = installations
        logger.info(f"Loaded {len(installations)} Ant installation(s)")

    @property
    def installations(self) -> Tuple[AntInstallation, ...]:
        return self._installations

    def names(self) -> List[str]:
        return [i.name for i in self._installations]

    def set_installations(self, *installations: AntInstallation) -> None:
        snapshot = tuple(installations)
        self._check_unique(snapshot)
        with self._lock:
            self._store.save(snapshot)
            self._installations = snapshot
        logger.info(f"Configured Ant installations: {', '.join(i.name for i in snapshot) or '(none)'}")

    def add(self, installation: AntInstallation) -> None:
        with self._lock:
            current = self._installations
            replaced = False
            updated = []
            for existing in current:
                if existing.name == installation.name:
                    updated.append(installation)
                    replaced = True
                else:
                    updated.append(existing)
            if not replaced:
                updated.append(installation)
            snapshot = tuple(updated)
            self._store.save(snapshot)
            self._installations = snapshot

    def remove(self, name: str) -> bool:
        with self._lock:
            current = self._installations
            snapshot = tuple(i for i in current if i.name != name)
            if len(snapshot) == len(current):
                return False
            self._store.save(snapshot)
            self._installations = snapshot
            return True

    def find(self, name: Optional[str]) -> Optional[AntInstallation]:
        if name is None:
            return None
        for installation in self._installations:
            if installation.name == name:
                return installation
        return None

    def get(self, name: str) -> AntInstallation:
        installation = self.find(name)
        if installation is None:
            raise InstallationNotFoundError(name, available=self.names())
        return installation

    @staticmethod
    def _check_unique(installations: Tuple[AntInstallation, ...]) -> None:
        seen = set()
        for installation in installations:
            if installation.name in seen:
                raise ValidationException(
                    f"Duplicate Ant installation name: {installation.name}",
                    field_name="name",
                    field_value=installation.name,
                )
            seen.add(installation.name)
