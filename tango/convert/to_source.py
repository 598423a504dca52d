"""
Literate markdown -> commented source.

The inverse of tango.convert.to_literate. Fenced code blocks become
bare code lines, prose becomes `//@ ` lines, fence attributes become a
`//@@` line. A link definition right after a closing fence,

    [name]: https://play.rust-lang.org/?code=...

is not copied through: it becomes a `//@@@ name` line placed just before
the block it follows. Output for a block is therefore held back until the
line after its closing fence has been seen.

The link URL is recomputed from the block and compared with the one in
the file. A stale link is reported as an EncodingMismatch warning in the
ConversionResult; conversion carries on regardless.
"""

import logging
import re
from enum import Enum
from typing import Iterable, List, Optional, TextIO

from tango.config import TangoConfig
from tango.convert.common import (
    BARE_MARKER,
    FENCE,
    META_MARKER,
    NAME_MARKER,
    PROSE_MARKER,
    ConversionResult,
    EncodingMismatch,
    LineWriter,
    iter_lines,
)
from tango.convert.encoding import encode_to_url
from tango.errors import InvalidTransition

logger = logging.getLogger(__name__)

NAMED_LINK = re.compile(r"^\[(?P<name>[^\]]+)\]:\s*<?(?P<url>[^<>\s]+)>?\s*$")


class State(Enum):
    BLANK = "blank"  # after a code block, before any prose
    TEXT = "text"
    META = "meta"    # writing fence attributes
    CODE = "code"


# (prefix for pending blank lines, prefix for the line itself)
PREFIXES = {
    State.BLANK: ("", PROSE_MARKER),
    State.TEXT: (BARE_MARKER, PROSE_MARKER),
    State.META: (BARE_MARKER, META_MARKER),
    State.CODE: ("", ""),
}


class ToSource:
    """One-shot converter; create a fresh instance per file."""

    def __init__(self, config: Optional[TangoConfig] = None):
        self.config = config or TangoConfig()
        self.state = State.BLANK
        self.blank_line_count = 0
        self.code_lines: List[str] = []
        self.last_block: Optional[List[str]] = None
        self.awaiting_link = False
        self.line_number = 0
        self.warnings: List[EncodingMismatch] = []
        self._out: Optional[LineWriter] = None

    def convert(self, source: Iterable[str], target: TextIO) -> ConversionResult:
        self._out = LineWriter(target)
        for line in iter_lines(source):
            self.handle(line)
        self.finalize()
        return ConversionResult(
            lines_read=self.line_number,
            lines_written=self._out.written,
            warnings=list(self.warnings),
        )

    def handle(self, line: str) -> None:
        self.line_number += 1

        if self.awaiting_link:
            self.awaiting_link = False
            match = NAMED_LINK.match(line)
            if match:
                self._attach_block_name(match.group("name").strip(), match.group("url"))
                return
            self._out.release()

        fence_open = self.config.fence_open
        if self.state in (State.BLANK, State.TEXT) and line.startswith(fence_open):
            attributes = line[len(fence_open):]
            if attributes:
                self._transition(State.META)
                self._nonblank_line(attributes)
            self._transition(State.CODE)
        elif self.state == State.CODE and line == FENCE:
            self._transition(State.BLANK)
            self.awaiting_link = True
        elif not line:
            self._blank_line()
        else:
            self._nonblank_line(line)

    def finalize(self) -> None:
        if self.state == State.CODE:
            logger.warning(f"unterminated {self.config.fence_open} block at end of input")
        blank_prefix, _ = PREFIXES[self.state]
        self._flush_blank_lines(blank_prefix)
        self._out.release()

    def _attach_block_name(self, name: str, url: str) -> None:
        expected = encode_to_url("\n".join(self.last_block or []), self.config.playground_url)
        if url != expected:
            mismatch = EncodingMismatch(
                name=name, expected=expected, actual=url, line_number=self.line_number,
            )
            logger.warning(str(mismatch))
            self.warnings.append(mismatch)
        self._out.release(prefix=f"{NAME_MARKER} {name}")

    def _blank_line(self) -> None:
        self.blank_line_count += 1
        if self.state == State.CODE:
            self.code_lines.append("")

    def _nonblank_line(self, line: str) -> None:
        blank_prefix, line_prefix = PREFIXES[self.state]
        self._flush_blank_lines(blank_prefix)

        if self.state == State.BLANK:
            self._transition(State.TEXT)
        elif self.state == State.CODE:
            self.code_lines.append(line)

        self._out.write(line_prefix + line)

    def _flush_blank_lines(self, prefix: str = "") -> None:
        for _ in range(self.blank_line_count):
            self._out.write(prefix)
        self.blank_line_count = 0

    def _begin_block(self) -> None:
        self._out.hold()
        self.code_lines = []

    def _transition(self, new_state: State) -> None:
        if new_state == State.META:
            if self.state not in (State.BLANK, State.TEXT):
                raise InvalidTransition(self.state, new_state, self.line_number)
            self._flush_blank_lines()
            self._begin_block()
        elif new_state == State.CODE:
            if self.state == State.CODE:
                raise InvalidTransition(self.state, new_state, self.line_number)
            if self.state != State.META:
                self._flush_blank_lines()
                self._begin_block()
        elif new_state == State.TEXT:
            if self.state != State.BLANK:
                raise InvalidTransition(self.state, new_state, self.line_number)
        elif new_state == State.BLANK:
            if self.state != State.CODE:
                raise InvalidTransition(self.state, new_state, self.line_number)
            self._flush_blank_lines()
            self.last_block = self.code_lines
            self.code_lines = []
        self.state = new_state
