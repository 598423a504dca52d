"""
tango - keep commented source and literate markdown in sync.

Source files carry prose as `//@ ` comment lines; literate files carry
code as fenced blocks. Whichever side changed most recently (judged by
modification times and the `tango.stamp` watermark) regenerates the other.

Usage:
    from tango import Context, TangoConfig

    Context(TangoConfig(), root=".").run()
"""

__version__ = "0.1.0"

from tango.config import TangoConfig, load_config
from tango.context import Context, RunReport
from tango.errors import (
    TangoError,
    TangoIOError,
    CheckInputError,
    ConcurrentUpdateError,
    ConfigError,
    InvalidTransition,
    MalformedPathError,
)
from tango.timestamp import Timestamp

__all__ = [
    "Context",
    "RunReport",
    "TangoConfig",
    "load_config",
    "Timestamp",
    "TangoError",
    "TangoIOError",
    "CheckInputError",
    "ConcurrentUpdateError",
    "ConfigError",
    "InvalidTransition",
    "MalformedPathError",
]
