"""
Markers and result types shared by both converters.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, TextIO

# Commented-source markers, longest first.
NAME_MARKER = "//@@@"
META_MARKER = "//@@"
PROSE_MARKER = "//@ "
BARE_MARKER = "//@"

FENCE = "```"


@dataclass
class EncodingMismatch:
    """A named link whose URL doesn't encode the block it follows."""
    name: str
    expected: str
    actual: str
    line_number: int

    def __str__(self) -> str:
        return (
            f"line {self.line_number}: link [{self.name}] does not match its block\n"
            f"  expected: {self.expected}\n"
            f"  actual:   {self.actual}"
        )


@dataclass
class ConversionResult:
    """Outcome of converting one file."""
    lines_read: int = 0
    lines_written: int = 0
    warnings: List[EncodingMismatch] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings


def iter_lines(source: Iterable[str]) -> Iterator[str]:
    """Yield lines without their terminator (`\\n` or `\\r\\n`)."""
    for raw in source:
        if raw.endswith("\n"):
            raw = raw[:-1]
        if raw.endswith("\r"):
            raw = raw[:-1]
        yield raw


class LineWriter:
    """Writes lines to a stream, optionally holding them back for a while."""

    def __init__(self, target: TextIO):
        self.target = target
        self.written = 0
        self.held: Optional[List[str]] = None

    def write(self, line: str) -> None:
        if self.held is not None:
            self.held.append(line)
        else:
            self.target.write(line + "\n")
            self.written += 1

    def hold(self) -> None:
        if self.held is not None:
            self.release()
        self.held = []

    def release(self, prefix: Optional[str] = None) -> None:
        """Write held lines, preceded by `prefix` when given."""
        held, self.held = self.held, None
        if held is None:
            return
        if prefix is not None:
            self.write(prefix)
        for line in held:
            self.write(line)
