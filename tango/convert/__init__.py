"""
tango converters - commented source <-> literate markdown.

Usage:
    from tango.convert import to_literate, to_source

    with open("src/lib.rs") as src, open("src/lib.md", "w") as out:
        result = to_literate(src, out)

    # Strings in, strings out:
    markdown, result = to_literate_text(source_text)
    source, result = to_source_text(markdown)
    for warning in result.warnings:
        print(warning)
"""

import io
from typing import Iterable, Optional, TextIO, Tuple

from tango.config import TangoConfig
from tango.convert.common import ConversionResult, EncodingMismatch
from tango.convert.encoding import decode_from_url, encode_to_url
from tango.convert.to_literate import ToLiterate
from tango.convert.to_source import ToSource


def to_literate(
    source: Iterable[str],
    target: TextIO,
    config: Optional[TangoConfig] = None,
) -> ConversionResult:
    """Convert commented source lines into literate markdown."""
    return ToLiterate(config).convert(source, target)


def to_source(
    source: Iterable[str],
    target: TextIO,
    config: Optional[TangoConfig] = None,
) -> ConversionResult:
    """Convert literate markdown lines into commented source."""
    return ToSource(config).convert(source, target)


def to_literate_text(
    text: str, config: Optional[TangoConfig] = None
) -> Tuple[str, ConversionResult]:
    out = io.StringIO()
    result = to_literate(io.StringIO(text), out, config)
    return out.getvalue(), result


def to_source_text(
    text: str, config: Optional[TangoConfig] = None
) -> Tuple[str, ConversionResult]:
    out = io.StringIO()
    result = to_source(io.StringIO(text), out, config)
    return out.getvalue(), result


__all__ = [
    "ConversionResult",
    "EncodingMismatch",
    "ToLiterate",
    "ToSource",
    "to_literate",
    "to_source",
    "to_literate_text",
    "to_source_text",
    "encode_to_url",
    "decode_from_url",
]
