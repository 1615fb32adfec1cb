from typing import Iterable, List, Mapping, Optional

from antrunner.common.config.constants import (
    MASK_PLACEHOLDER,
    WINDOWS_COMMAND_PREFIX,
    WINDOWS_EXIT_SUFFIX,
)
from antrunner.common.utils.text_utils import (
    Resolver,
    expand_variables,
    parse_properties,
    tokenize,
)


_WINDOWS_QUOTE_TRIGGERS = frozenset(" *?,;^&<>|\"")


def _quote_for_cmd(arg: str) -> str:
    """Quote one token for ``cmd.exe`` if it carries a shell-significant character."""
    if not any(c in _WINDOWS_QUOTE_TRIGGERS for c in arg):
        return arg
    return '"' + arg.replace('"', '""') + '"'


class ArgumentListBuilder:
    """Ordered command-line tokens, each with its own sensitivity flag."""

    def __init__(
        self,
        tokens: Optional[Iterable[str]] = None,
        masks: Optional[Iterable[bool]] = None,
    ):
        self._args: List[str] = []
        self._mask: List[bool] = []
        tokens = list(tokens or ())
        masks = list(masks) if masks is not None else [False] * len(tokens)
        if len(masks) != len(tokens):
            raise ValueError("Token and mask sequences must have the same length")
        for token, sensitive in zip(tokens, masks):
            self.add(token, sensitive)

    def add(self, token: str, sensitive: bool = False) -> "ArgumentListBuilder":
        if token is None:
            return self
        self._args.append(str(token))
        self._mask.append(bool(sensitive))
        return self

    def add_masked(self, token: str) -> "ArgumentListBuilder":
        return self.add(token, sensitive=True)

    def add_all(self, *tokens: str) -> "ArgumentListBuilder":
        for token in tokens:
            self.add(token)
        return self

    def add_key_value_pair(
        self,
        prefix: str,
        key: str,
        value: Optional[str],
        sensitive: bool = False,
    ) -> "ArgumentListBuilder":
        if key is None:
            return self
        return self.add(f"{prefix}{key}={value if value is not None else ''}", sensitive)

    def add_key_value_pairs(
        self,
        prefix: str,
        pairs: Mapping[str, Optional[str]],
        sensitive_keys: Optional[Iterable[str]] = None,
    ) -> "ArgumentListBuilder":
        sensitive = set(sensitive_keys or ())
        for key, value in pairs.items():
            self.add_key_value_pair(prefix, key, value, key in sensitive)
        return self

    def add_key_value_pairs_from_property_string(
        self,
        prefix: str,
        properties: Optional[str],
        resolver: Resolver,
        sensitive_keys: Optional[Iterable[str]] = None,
    ) -> "ArgumentListBuilder":
        if properties is None:
            return self
        sensitive = set(sensitive_keys or ())
        for key, value in parse_properties(properties).items():
            self.add_key_value_pair(prefix, key, expand_variables(value, resolver), key in sensitive)
        return self

    def add_tokenized(self, raw: Optional[str]) -> "ArgumentListBuilder":
        for token in tokenize(raw):
            self.add(token)
        return self

    def to_list(self) -> List[str]:
        return list(self._args)

    def to_mask_array(self) -> List[bool]:
        return list(self._mask)

    def to_masked_list(self) -> List[str]:
        return [MASK_PLACEHOLDER if m else a for a, m in zip(self._args, self._mask)]

    def to_string_with_masks(self) -> str:
        return " ".join(
            MASK_PLACEHOLDER if m else (f'"{a}"' if (" " in a or not a) else a)
            for a, m in zip(self._args, self._mask)
        )

    def has_masked_arguments(self) -> bool:
        return any(self._mask)

    def to_windows_command(self, joined: bool = False) -> "ArgumentListBuilder":
        """Wrap the command for ``cmd.exe /C``.

        The default shape keeps one token per argument:
        ``cmd.exe /C "ant.bat -Dx=1 all && exit %%ERRORLEVEL%%"`` split on the
        original boundaries. With ``joined=True`` the whole command after ``/C``
        becomes a single token, the shape older hosts produced.
        """
        quoted = [_quote_for_cmd(a) for a in self._args]

        if joined:
            command = '"' + " ".join(quoted + [WINDOWS_EXIT_SUFFIX]) + '"'
            return ArgumentListBuilder(
                [*WINDOWS_COMMAND_PREFIX, command],
                [False] * len(WINDOWS_COMMAND_PREFIX) + [self.has_masked_arguments()],
            )

        result = ArgumentListBuilder().add_all(*WINDOWS_COMMAND_PREFIX)
        for i, (arg, sensitive) in enumerate(zip(quoted, self._mask)):
            result.add('"' + arg if i == 0 else arg, sensitive)
        *suffix, last = WINDOWS_EXIT_SUFFIX.split()
        return result.add_all(*suffix, last + '"')

    def clone(self) -> "ArgumentListBuilder":
        return ArgumentListBuilder(self._args, self._mask)

    def __len__(self) -> int:
        return len(self._args)

    def __iter__(self):
        return iter(self._args)

    def __repr__(self) -> str:
        return f"ArgumentListBuilder({self.to_string_with_masks()!r})"
