"""Re-escaping of ``cmd.exe`` command lines.

``cmd.exe`` silently drops a property assignment with an empty value, so
``-Dfoo=`` must reach it as ``-Dfoo=""``. Two command shapes exist:

* ``SPLIT``: a shell prefix of ``prefix_length`` tokens followed by one token
  per argument. Every argument token is checked.
* ``LEGACY_JOINED``: the shell prefix followed by one token holding the whole
  command. Only that final token is rewritten, in place.
"""
import re
from enum import Enum
from typing import Optional

from antrunner.builder.argument_builder import ArgumentListBuilder
from antrunner.common.config.constants import DEFAULT_WINDOWS_PREFIX_LENGTH


EMPTY_PROPERTY_PATTERN = re.compile(r'^(-D[^" ]+)=$')
LEGACY_EMPTY_PROPERTY_PATTERN = re.compile(r'(?<= )(-D[^" ]+)= ')


class WindowsCommandStyle(str, Enum):
    SPLIT = "split"
    LEGACY_JOINED = "legacy_joined"

    @classmethod
    def detect(
        cls,
        token_count: int,
        prefix_length: int = DEFAULT_WINDOWS_PREFIX_LENGTH,
    ) -> "WindowsCommandStyle":
        if token_count > prefix_length + 1:
            return cls.SPLIT
        return cls.LEGACY_JOINED


def quote_empty_property(token: str) -> str:
    return EMPTY_PROPERTY_PATTERN.sub(r'\g<0>""', token)


def quote_empty_properties_inline(command: str) -> str:
    return LEGACY_EMPTY_PROPERTY_PATTERN.sub(r'\1="" ', command)


def escape_windows_command(
    args: ArgumentListBuilder,
    style: Optional[WindowsCommandStyle] = None,
    prefix_length: int = DEFAULT_WINDOWS_PREFIX_LENGTH,
) -> ArgumentListBuilder:
    tokens = args.to_list()
    masks = args.to_mask_array()
    if not tokens:
        return ArgumentListBuilder()

    if style is None:
        style = WindowsCommandStyle.detect(len(tokens), prefix_length)

    if style == WindowsCommandStyle.SPLIT:
        result = ArgumentListBuilder()
        for token in tokens[:prefix_length]:
            result.add(token)
        for token, sensitive in zip(tokens[prefix_length:], masks[prefix_length:]):
            result.add(quote_empty_property(token), sensitive)
        return result

    escaped = tokens[:-1] + [quote_empty_properties_inline(tokens[-1])]
    return ArgumentListBuilder(escaped, masks)
