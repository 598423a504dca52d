"""
Commented source -> literate markdown.

Prose arrives as `//@ ` comment lines and leaves as plain markdown text;
every other line is code and ends up inside a fenced block. Two side
channels ride along in the source:

    //@@ { .class }     fence attributes for the next code block
    //@@@ name          name the next code block; a link definition
                        `[name]: <permalink>` follows its closing fence

Blank lines are counted rather than written: whether they belong before
or after a fence is only known once the next non-blank line arrives.
"""

import logging
from enum import Enum
from typing import Iterable, Optional, TextIO

from tango.config import TangoConfig
from tango.convert.common import (
    BARE_MARKER,
    FENCE,
    META_MARKER,
    NAME_MARKER,
    PROSE_MARKER,
    ConversionResult,
    LineWriter,
    iter_lines,
)
from tango.convert.encoding import encode_to_url
from tango.errors import InvalidTransition

logger = logging.getLogger(__name__)


class State(Enum):
    PROSE_START = "prose_start"  # nothing written since the last code block
    PROSE = "prose"
    CODE = "code"


class ToLiterate:
    """One-shot converter; create a fresh instance per file."""

    def __init__(self, config: Optional[TangoConfig] = None):
        self.config = config or TangoConfig()
        self.state = State.PROSE_START
        self.blank_line_count = 0
        self.block_name: Optional[str] = None
        self.meta_note: Optional[str] = None
        self.buffered_code = ""
        self.line_number = 0
        self._out: Optional[LineWriter] = None

    def convert(self, source: Iterable[str], target: TextIO) -> ConversionResult:
        self._out = LineWriter(target)
        for line in iter_lines(source):
            self.handle(line)
        self.finalize()
        return ConversionResult(lines_read=self.line_number, lines_written=self._out.written)

    def handle(self, line: str) -> None:
        self.line_number += 1
        stripped = line.lstrip()

        if not stripped:
            self._blank_line()
        elif stripped.startswith(PROSE_MARKER):
            self._prose_line(stripped[len(PROSE_MARKER):])
        elif stripped.startswith(NAME_MARKER):
            name = stripped[len(NAME_MARKER):].strip()
            if name:
                self._set_block_name(name)
        elif stripped.startswith(META_MARKER):
            note = stripped[len(META_MARKER):].strip()
            if note:
                self._set_meta_note(note)
        elif stripped.startswith(BARE_MARKER):
            self._prose_line(stripped[len(BARE_MARKER):])
        else:
            if self.state != State.CODE:
                self._transition(State.CODE)
            self._nonblank_line(line)

    def finalize(self) -> None:
        if self.state == State.CODE:
            self._transition(State.PROSE_START)
        self._flush_blank_lines()

        if self.block_name is not None:
            logger.warning(f"block name {self.block_name} names no code block; dropped")
        if self.meta_note is not None:
            logger.warning(f"meta note {self.meta_note} precedes no code block; dropped")

    def _prose_line(self, text: str) -> None:
        if self.state == State.CODE:
            self._transition(State.PROSE_START)
        elif self.state == State.PROSE_START:
            self._transition(State.PROSE)

        if text.strip():
            self._nonblank_line(text)
        else:
            self._blank_line()

    def _set_block_name(self, name: str) -> None:
        if self.block_name is not None:
            logger.warning(
                f"line {self.line_number}: keeping block name {self.block_name}, "
                f"discarding {name}"
            )
            return
        self.block_name = name

    def _set_meta_note(self, note: str) -> None:
        if self.meta_note is not None:
            logger.warning(
                f"line {self.line_number}: keeping meta note {self.meta_note}, "
                f"discarding {note}"
            )
            return
        self.meta_note = note

    def _blank_line(self) -> None:
        self.blank_line_count += 1
        self.buffered_code += "\n"

    def _nonblank_line(self, line: str) -> None:
        self._flush_blank_lines()
        self.buffered_code += "\n" + line
        self._out.write(line)

    def _flush_blank_lines(self) -> None:
        for _ in range(self.blank_line_count):
            self._out.write("")
        self.blank_line_count = 0

    def _start_code_block(self) -> None:
        if self.meta_note is not None:
            self._out.write(f"{self.config.fence_open} {self.meta_note}")
        else:
            self._out.write(self.config.fence_open)
        self.meta_note = None
        self.buffered_code = ""

    def _finish_code_block(self) -> None:
        self._out.write(FENCE)
        if self.block_name is not None:
            url = encode_to_url(self.buffered_code, self.config.playground_url)
            self._out.write(f"[{self.block_name}]: {url}")
        self.block_name = None
        self.buffered_code = ""

    def _transition(self, new_state: State) -> None:
        if new_state == State.PROSE_START:
            if self.state != State.CODE:
                raise InvalidTransition(self.state, new_state, self.line_number)
            self._finish_code_block()
            self._flush_blank_lines()
        elif new_state == State.PROSE:
            if self.state != State.PROSE_START:
                raise InvalidTransition(self.state, new_state, self.line_number)
        elif new_state == State.CODE:
            if self.state == State.CODE:
                raise InvalidTransition(self.state, new_state, self.line_number)
            self._flush_blank_lines()
            self._start_code_block()
        self.state = new_state
