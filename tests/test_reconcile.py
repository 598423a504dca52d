"""
Tests for the reconciliation policy.

Times are written as milliseconds; `_ns` variants sit inside the same
millisecond as their base time but differ at nanosecond precision.
"""

import itertools
import logging
from pathlib import Path

import pytest

from tango.errors import CheckInputError, ConflictKind
from tango.reconcile import Direction, Need, Transform, needs_regeneration
from tango.timestamp import Timestamp

T1 = Timestamp.from_ms(1_000_000)
T2 = Timestamp.from_ms(2_000_000)
T3 = Timestamp.from_ms(3_000_000)
T2_NS = Timestamp(T2.seconds, 400_000)  # 0.4ms after T2
T2_NS2 = Timestamp(T2.seconds, 800_000)  # 0.8ms after T2

NEEDED = Need.NEEDED
UNNEEDED = Need.UNNEEDED
NO_STAMP = ConflictKind.NO_STAMP_EXISTS
STAMP_OLDER = ConflictKind.STAMP_OLDER_THAN_TARGET


def make(source_time, target_time):
    return Transform(
        original=Path("src/foo.rs"),
        generate=Path("src/foo.md"),
        direction=Direction.TO_LITERATE,
        source_time=source_time,
        target_time=target_time,
    )


def decide(source_time, target_time, stamp_time):
    try:
        return needs_regeneration(make(source_time, target_time), stamp_time)
    except CheckInputError as e:
        return e.kind


# (source, target, stamp, expected)
POLICY = [
    # target missing
    (T2, None, None, NEEDED),
    (T2, None, T1, NEEDED),
    (T2, None, T3, NEEDED),
    # target newer than source
    (T1, T2, None, UNNEEDED),
    (T1, T2, T1, UNNEEDED),
    (T1, T3, T2, UNNEEDED),
    # in sync
    (T2, T2, None, UNNEEDED),
    (T2, T2, T1, UNNEEDED),
    # equal at millisecond precision only
    (T2, T2_NS, None, UNNEEDED),
    (T2_NS, T2, None, UNNEEDED),
    (T2_NS2, T2_NS, T1, UNNEEDED),
    # target older, no stamp
    (T2, T1, None, NO_STAMP),
    (T3, T2_NS, None, NO_STAMP),
    # target older, stamp older than target
    (T3, T2, T1, STAMP_OLDER),
    (T3, T2_NS, T1, STAMP_OLDER),
    # target older, stamp covers target
    (T3, T2, T2, NEEDED),
    (T3, T1, T2, NEEDED),
    (T3, T2, T3, NEEDED),
    # stamp older than target below millisecond precision only
    (T3, T2_NS, T2, NEEDED),
]


class TestPolicyTable:

    @pytest.mark.parametrize("source,target,stamp,expected", POLICY)
    def test_decision(self, source, target, stamp, expected):
        assert decide(source, target, stamp) == expected

    def test_all_orderings_are_covered_consistently(self):
        """Every combination of three instants obeys the same rules."""
        times = [T1, T2, T3]
        for source, target, stamp in itertools.product(times, [None] + times, [None] + times):
            result = decide(source, target, stamp)
            if target is None or target >= source:
                assert result in (NEEDED, UNNEEDED)
                assert (result == NEEDED) == (target is None)
            elif stamp is None:
                assert result == NO_STAMP
            elif stamp < target:
                assert result == STAMP_OLDER
            else:
                assert result == NEEDED


class TestDiagnostics:

    def test_sub_millisecond_newer_target_is_quiet(self, caplog):
        """source 2000.000s, target 2000.0004s, no stamp: the target is newer, skip."""
        source = Timestamp(2000, 0)
        target = Timestamp(2000, 400_000)
        with caplog.at_level(logging.WARNING, logger="tango.reconcile"):
            assert decide(source, target, None) == UNNEEDED
        assert caplog.text == ""

    def test_sub_millisecond_newer_source_logs(self, caplog):
        """source 2000.0004s, target 2000.000s, no stamp: skip with a diagnostic."""
        source = Timestamp(2000, 400_000)
        target = Timestamp(2000, 0)
        with caplog.at_level(logging.WARNING, logger="tango.reconcile"):
            assert decide(source, target, None) == UNNEEDED
        assert "millisecond" in caplog.text

    def test_exact_match_is_quiet(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tango.reconcile"):
            assert decide(T2, T2, None) == UNNEEDED
        assert caplog.text == ""

    def test_sub_millisecond_stamp_logs(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tango.reconcile"):
            assert decide(T3, T2_NS, T2) == NEEDED
        assert "stamp" in caplog.text


class TestConflictError:

    def test_carries_transform(self):
        with pytest.raises(CheckInputError) as excinfo:
            needs_regeneration(make(T2, T1), None)
        err = excinfo.value
        assert err.kind == NO_STAMP
        assert err.transform.generate == Path("src/foo.md")
        assert "no stamp" in str(err)

    def test_stamp_older_message(self):
        with pytest.raises(CheckInputError) as excinfo:
            needs_regeneration(make(T3, T2), T1)
        assert "older than target" in str(excinfo.value)
