"""
Error types raised by tango.

Everything tango raises derives from TangoError so the CLI can report
failures uniformly. Encoding mismatches are not errors; see
tango.convert.EncodingMismatch.
"""

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from tango.reconcile import Transform
    from tango.timestamp import Timestamp


class TangoError(Exception):
    """Base class for tango failures."""


class TangoIOError(TangoError):
    """A file could not be read, decoded as UTF-8, written or stat'ed."""
    def __init__(self, path: Path, cause: Union[OSError, UnicodeDecodeError]):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"I/O error on {self.path}: {cause}")


class ConflictKind(Enum):
    NO_STAMP_EXISTS = "no_stamp_exists"
    STAMP_OLDER_THAN_TARGET = "stamp_older_than_target"


class CheckInputError(TangoError):
    """Source and target both changed; tango cannot tell which side wins."""
    def __init__(self, kind: ConflictKind, transform: "Transform"):
        self.kind = kind
        self.transform = transform
        super().__init__(self._message())

    def _message(self) -> str:
        t = self.transform
        if self.kind == ConflictKind.NO_STAMP_EXISTS:
            return (
                f"both source {t.original} and target {t.generate} exist "
                f"but no stamp is present"
            )
        return f"stamp is older than target {t.generate}"


class ConcurrentUpdateError(TangoError):
    """An input file changed while tango was running."""
    def __init__(self, path: Path, old_time: "Timestamp", new_time: "Timestamp"):
        self.path = Path(path)
        self.old_time = old_time
        self.new_time = new_time
        super().__init__(
            f"concurrent update to source file {self.path} "
            f"(was {old_time.describe()}, now {new_time.describe()})"
        )


class MalformedPathError(TangoError, ValueError):
    """A path has the wrong extension or lives outside its root directory."""
    def __init__(self, kind: str, path: Path, reason: str):
        self.kind = kind
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{kind} {reason}; path: {self.path}")


class InvalidTransition(TangoError):
    """A converter state machine was driven into an illegal transition."""
    def __init__(self, current: Enum, requested: Enum, line_number: Optional[int] = None):
        self.current = current
        self.requested = requested
        self.line_number = line_number
        where = f" at line {line_number}" if line_number is not None else ""
        super().__init__(
            f"invalid transition {current.name} -> {requested.name}{where}"
        )


class ConfigError(TangoError):
    """tango.yaml could not be parsed or holds an invalid value."""
