from typing import Dict, Iterable, Mapping, Optional, Set

from antrunner.common.config.constants import MASK_PLACEHOLDER
from antrunner.common.utils.text_utils import expand_variables


class EnvVars(Dict[str, str]):
    """Environment for a single step execution.

    Starts from the host-provided base environment and accepts build-scoped
    overrides. Keys listed in ``sensitive_keys`` are masked whenever the
    environment is rendered for a log.
    """

    def __init__(
        self,
        base: Optional[Mapping[str, str]] = None,
        sensitive_keys: Optional[Iterable[str]] = None,
    ):
        super().__init__(base or {})
        self.sensitive_keys: Set[str] = set(sensitive_keys or ())

    def override(self, key: str, value: Optional[str]) -> None:
        if value is None or value == "":
            self.pop(key, None)
            return
        self[key] = value

    def override_all(self, overrides: Mapping[str, Optional[str]]) -> None:
        for key, value in overrides.items():
            self.override(key, value)

    def put(self, key: str, value: str) -> None:
        if value is None:
            raise ValueError(f"Null value not allowed as an environment variable: {key}")
        self[key] = value

    def expand(self, text: Optional[str]) -> Optional[str]:
        return expand_variables(text, self)

    def masked(self) -> Dict[str, str]:
        return {
            key: (MASK_PLACEHOLDER if key in self.sensitive_keys else value)
            for key, value in self.items()
        }

    def copy(self) -> "EnvVars":
        return EnvVars(self, self.sensitive_keys)
