from antrunner.storage.installation_registry import (
    InstallationRegistry,
    InstallationStore,
    InMemoryInstallationStore,
    JsonInstallationStore,
)

__all__ = [
    "InstallationRegistry",
    "InstallationStore",
    "InMemoryInstallationStore",
    "JsonInstallationStore",
]
