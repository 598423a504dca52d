"""
Reversible encoding of a code block into a playground permalink.

Named blocks get a markdown link definition whose URL embeds the block's
code, so a reader can open the snippet in an online playground. The
encoding must be deterministic: the literate -> source converter
recomputes it to detect links that no longer match their block.
"""

import re
from typing import Optional
from urllib.parse import quote, unquote

from tango.config import DEFAULT_PLAYGROUND_URL


def encode_code(code: str) -> str:
    """Percent-encode trimmed code; only unreserved characters survive."""
    return quote(code.strip(), safe="")


def encode_to_url(code: str, template: str = DEFAULT_PLAYGROUND_URL) -> str:
    return template.replace("{code}", encode_code(code), 1)


def decode_from_url(url: str, template: str = DEFAULT_PLAYGROUND_URL) -> Optional[str]:
    """Recover the trimmed code from a permalink, or None if it doesn't fit the template."""
    prefix, _, suffix = template.partition("{code}")
    pattern = re.escape(prefix) + r"(?P<code>[^&#\s]*)" + re.escape(suffix) + r"$"
    match = re.match(pattern, url)
    if not match:
        return None
    return unquote(match.group("code"))
