"""
Decide whether a target file must be regenerated from its source.

Three clocks are involved: the source mtime, the target mtime and the
mtime of the stamp file written at the end of the previous run. The
stamp says "everything up to here has been synchronized", so a target
older than its source may only be overwritten if the stamp is at least
as new as the target; otherwise the target was edited behind tango's
back and both sides may hold changes.

Times equal at millisecond precision count as equal. Some filesystems
keep whole seconds or milliseconds only, so sub-millisecond differences
are treated as noise. This can skip a genuine sub-millisecond change;
that limitation is accepted.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from tango.errors import CheckInputError, ConflictKind
from tango.timestamp import Timestamp

logger = logging.getLogger(__name__)


class Direction(Enum):
    TO_LITERATE = "to_literate"
    TO_SOURCE = "to_source"


class Need(Enum):
    NEEDED = "needed"
    UNNEEDED = "unneeded"


@dataclass
class Transform:
    """A scheduled regeneration of `generate` from `original`."""
    original: Path
    generate: Path
    direction: Direction
    source_time: Timestamp
    target_time: Optional[Timestamp] = None  # None: target missing

    @property
    def target_exists(self) -> bool:
        return self.target_time is not None

    def describe(self) -> str:
        return f"{self.original} -> {self.generate}"


def needs_regeneration(
    transform: Transform,
    stamp_time: Optional[Timestamp],
) -> Need:
    """Apply the reconciliation policy to one transform.

    Args:
        transform: Candidate transform with the times seen at gather time
        stamp_time: Modification time of the stamp file, None if absent

    Returns:
        Need.NEEDED or Need.UNNEEDED

    Raises:
        CheckInputError: If the target may hold changes the source lacks
    """
    target_time = transform.target_time
    source_time = transform.source_time

    if target_time is None:
        return Need.NEEDED

    if target_time >= source_time:
        return Need.UNNEEDED

    if target_time.same_millisecond(source_time):
        logger.warning(
            f"{transform.original} is newer than {transform.generate} only below "
            f"millisecond precision ({source_time} vs {target_time}); treating as in sync"
        )
        return Need.UNNEEDED

    # Target is older than source.
    if stamp_time is None:
        raise CheckInputError(ConflictKind.NO_STAMP_EXISTS, transform)

    if stamp_time.older_at_ms(target_time):
        raise CheckInputError(ConflictKind.STAMP_OLDER_THAN_TARGET, transform)

    if stamp_time < target_time:
        logger.warning(
            f"stamp ({stamp_time}) is older than {transform.generate} ({target_time}) "
            f"only below millisecond precision; regenerating"
        )

    return Need.NEEDED
