"""String helpers shared by the argument builder and the build step.

Variable references use the shell-ish ``$NAME`` / ``${NAME}`` syntax. References
that cannot be resolved are left untouched so that a later expansion pass (or
the tool itself) still sees them.
"""
import re
from typing import Callable, Dict, List, Mapping, Optional, Union


VARIABLE_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_.]*)")

LINE_BREAKS_PATTERN = re.compile(r"[\t\r\n]+")

QUOTE_CHARS = "\"'"

_PROPERTY_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}

Resolver = Union[Mapping[str, str], Callable[[str], Optional[str]]]


def fix_empty_and_trim(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _lookup(resolver: Resolver, name: str) -> Optional[str]:
    if callable(resolver):
        return resolver(name)
    return resolver.get(name)


def expand_variables(text: Optional[str], resolver: Resolver) -> Optional[str]:
    if text is None or "$" not in text:
        return text

    def _replace(match: "re.Match") -> str:
        name = match.group(1) or match.group(2)
        value = _lookup(resolver, name)
        return match.group(0) if value is None else value

    return VARIABLE_PATTERN.sub(_replace, text)


def flatten_line_breaks(text: str) -> str:
    return LINE_BREAKS_PATTERN.sub(" ", text)


def tokenize(text: Optional[str]) -> List[str]:
    """Split on whitespace, honoring single and double quotes.

    Backslashes are kept literally so Windows paths survive. An unterminated
    quote runs to the end of the text, so ``-Dmsg=don't`` is one token.
    """
    tokens: List[str] = []
    if not text:
        return tokens

    current: List[str] = []
    in_token = False
    quote: Optional[str] = None
    for ch in text:
        if quote is not None:
            if ch == quote:
                quote = None
            else:
                current.append(ch)
        elif ch in QUOTE_CHARS:
            quote = ch
            in_token = True
        elif ch.isspace():
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
        else:
            current.append(ch)
            in_token = True

    if in_token:
        tokens.append("".join(current))
    return tokens


def _logical_lines(text: str) -> List[str]:
    lines: List[str] = []
    pending: Optional[str] = None
    for raw in text.splitlines():
        line = raw.lstrip() if pending is not None else raw
        if pending is None and line.lstrip()[:1] in ("#", "!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending = (pending or "") + line[:-1]
            continue
        lines.append((pending or "") + line)
        pending = None
    if pending is not None:
        lines.append(pending)
    return lines


def _unescape(text: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            if nxt == "u" and re.fullmatch(r"[0-9a-fA-F]{4}", text[i + 2:i + 6]):
                out.append(chr(int(text[i + 2:i + 6], 16)))
                i += 6
                continue
            out.append(_PROPERTY_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def parse_properties(text: Optional[str]) -> Dict[str, str]:
    """Parse ``java.util.Properties`` text, keeping declaration order."""
    result: Dict[str, str] = {}
    if not text:
        return result

    for line in _logical_lines(text):
        line = line.lstrip()
        if not line:
            continue

        key_end = len(line)
        i = 0
        while i < len(line):
            ch = line[i]
            if ch == "\\":
                i += 2
                continue
            if ch in "=:" or ch.isspace():
                key_end = i
                break
            i += 1

        key = line[:key_end]
        rest = line[key_end:].lstrip()
        if rest[:1] in ("=", ":"):
            rest = rest[1:].lstrip()

        result[_unescape(key)] = _unescape(rest)

    return result
