import re
from dataclasses import dataclass
from typing import BinaryIO, Callable, List, Optional

from antrunner.common.config.constants import NoteKind


TASK_PATTERN = re.compile(r"^\s+\[([\w.:-]+)\]\s")
OUTCOME_LINES = frozenset({"BUILD SUCCESSFUL", "BUILD FAILED"})


@dataclass(frozen=True)
class AntNote:
    kind: NoteKind
    line_number: int
    text: str
    name: Optional[str] = None


class AntConsoleAnnotator:
    """Passes Ant's output through to the build log and marks its structure.

    Bytes reach ``out`` unchanged and in order. Target headers, task output
    and the final outcome line are reported as ``AntNote`` values for log
    folding; they never alter the stream.
    """

    def __init__(
        self,
        out: BinaryIO,
        charset: str = "utf-8",
        on_note: Optional[Callable[[AntNote], None]] = None,
    ):
        self._out = out
        self._charset = charset
        self._on_note = on_note
        self._buffer = bytearray()
        self._seen_empty_line = False
        self._line_number = 0
        self.notes: List[AntNote] = []

    def write(self, data: bytes) -> None:
        self._buffer.extend(data)
        while True:
            eol = self._buffer.find(b"\n")
            if eol < 0:
                break
            line = bytes(self._buffer[:eol + 1])
            del self._buffer[:eol + 1]
            self._eol(line)

    def flush(self) -> None:
        self._out.flush()

    def force_eol(self) -> None:
        if self._buffer:
            line = bytes(self._buffer)
            self._buffer.clear()
            self._eol(line)
        self.flush()

    def close(self) -> None:
        self.force_eol()

    def _eol(self, raw: bytes) -> None:
        self._line_number += 1
        line = raw.decode(self._charset, errors="replace").rstrip("\r\n")

        if self._seen_empty_line and line.endswith(":") and " " not in line:
            self._note(NoteKind.TARGET, line, line[:-1])
        else:
            task = TASK_PATTERN.match(line)
            if task:
                self._note(NoteKind.TASK, line, task.group(1))

        if line in OUTCOME_LINES:
            self._note(NoteKind.OUTCOME, line, line.split(" ", 1)[1])

        self._seen_empty_line = len(line) == 0
        self._out.write(raw)

    def _note(self, kind: NoteKind, text: str, name: Optional[str]) -> None:
        note = AntNote(kind=kind, line_number=self._line_number, text=text, name=name)
        self.notes.append(note)
        if self._on_note:
            self._on_note(note)

    @property
    def targets(self) -> List[str]:
        return [n.name for n in self.notes if n.kind == NoteKind.TARGET]

    @property
    def outcome(self) -> Optional[str]:
        outcomes = [n.name for n in self.notes if n.kind == NoteKind.OUTCOME]
        return outcomes[-1] if outcomes else None
