"""
One tango synchronization pass over a project.

    ctx = Context(load_config(root), root)
    report = ctx.run()

A pass has four phases:
1. gather   - pair every source file with its literate counterpart (and
              vice versa) and keep the pairs that need regenerating
2. generate - run the matching converter, then backdate the target's
              mtime to the source's so the pair reads as in sync
3. verify   - re-read every input's mtime; a change means someone wrote
              to it during the pass (ConcurrentUpdateError)
4. stamp    - create the stamp file if needed and set its mtime to the
              newest input time seen

Any conflict aborts the whole pass before anything is written. A
concurrent update is detected after writing; outputs already written
stay, and re-running tango is the recovery.
"""

import io
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from tango.config import TangoConfig
from tango.convert import ConversionResult, EncodingMismatch, ToLiterate, ToSource
from tango.errors import CheckInputError, ConcurrentUpdateError, TangoIOError
from tango.paths import PathMapper
from tango.reconcile import Direction, Need, Transform, needs_regeneration
from tango.timestamp import Timestamp

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """What a pass did (or, for a dry run, would do)."""
    root: str
    generated: List[Transform] = field(default_factory=list)
    warnings: List[Tuple[Path, EncodingMismatch]] = field(default_factory=list)
    conflicts: List[CheckInputError] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    stamp_created: bool = False
    stamp_time: Optional[Timestamp] = None
    dry_run: bool = False

    @property
    def in_sync(self) -> bool:
        return not self.generated and not self.conflicts

    def summary(self) -> str:
        """Generate summary string."""
        verb = "Pending" if self.dry_run else "Generated"
        lines = [f"{verb}: {len(self.generated)} file(s)"]
        for t in self.generated:
            lines.append(f"  {t.describe()}")

        if self.conflicts:
            lines.append(f"Conflicts: {len(self.conflicts)}")
            for c in self.conflicts:
                lines.append(f"  {c}")

        if self.warnings:
            lines.append(f"Warnings: {len(self.warnings)}")
            for path, w in self.warnings:
                lines.append(f"  {path}: {w}")

        if self.stamp_created:
            lines.append("Created stamp")
        if self.stamp_time is not None:
            lines.append(f"Stamp at {self.stamp_time.describe()}")
        if self.in_sync:
            lines.append("Everything is in sync.")
        return "\n".join(lines)

    def to_dict(self) -> Dict:
        return {
            "root": self.root,
            "generated": [
                {"from": str(t.original), "to": str(t.generate), "direction": t.direction.value}
                for t in self.generated
            ],
            "warnings": [
                {"path": str(p), "name": w.name, "expected": w.expected,
                 "actual": w.actual, "line": w.line_number}
                for p, w in self.warnings
            ],
            "conflicts": [str(c) for c in self.conflicts],
            "stamp_created": self.stamp_created,
            "stamp_time": str(self.stamp_time) if self.stamp_time else None,
            "dry_run": self.dry_run,
        }


def read_mtime(path: Path) -> Optional[Timestamp]:
    """Modification time of `path`, or None when it does not exist."""
    try:
        return Timestamp.of(path)
    except FileNotFoundError:
        return None
    except OSError as e:
        raise TangoIOError(path, e) from e


class Context:
    """State of one synchronization pass."""

    def __init__(self, config: TangoConfig, root: Union[str, Path] = "."):
        self.config = config
        self.paths = PathMapper(config, Path(root))
        self.stamp_time: Optional[Timestamp] = None
        self.src_inputs: List[Transform] = []
        self.lit_inputs: List[Transform] = []
        self.newest_time: Optional[Timestamp] = None
        self.report = RunReport(root=str(self.paths.root))

    @property
    def transforms(self) -> List[Transform]:
        return self.src_inputs + self.lit_inputs

    def run(self) -> RunReport:
        stamp_existed = self.load_stamp()
        self.gather_inputs()
        self.generate_content()
        self.check_input_timestamps()
        if not stamp_existed:
            self.create_stamp()
        self.adjust_stamp_timestamp()
        return self.report

    def plan(self) -> RunReport:
        """Gather only: report pending transforms and conflicts, write nothing."""
        self.report.dry_run = True
        self.load_stamp()
        self.gather_inputs(collect_conflicts=True)
        self.report.generated = self.transforms
        return self.report

    def load_stamp(self) -> bool:
        self.stamp_time = read_mtime(self.paths.stamp_path)
        if self.stamp_time is None:
            logger.debug(f"no stamp at {self.paths.stamp_path}")
            return False
        logger.debug(f"stamp at {self.stamp_time.describe()}")
        return True

    # ------------------------------------------------------------------
    # gather
    # ------------------------------------------------------------------

    def gather_inputs(self, collect_conflicts: bool = False) -> None:
        for path in self._walk(self.paths.src_root, self.paths.is_source):
            self._gather(path, self.paths.to_literate(path), Direction.TO_LITERATE,
                         self.src_inputs, collect_conflicts)
        for path in self._walk(self.paths.lit_root, self.paths.is_literate):
            self._gather(path, self.paths.to_source(path), Direction.TO_SOURCE,
                         self.lit_inputs, collect_conflicts)

    def _walk(self, root: Path, accept: Callable[[Path], bool]) -> Iterator[Path]:
        if not root.is_dir():
            logger.debug(f"{root} is not a directory; nothing to gather")
            return

        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if filename.startswith("."):
                    logger.debug(f"skipping {path}; file name has leading period")
                    self.report.skipped.append(path)
                    continue
                if accept(path):
                    yield path

    def _gather(
        self,
        original: Path,
        generate: Path,
        direction: Direction,
        inputs: List[Transform],
        collect_conflicts: bool,
    ) -> None:
        source_time = read_mtime(original)
        if source_time is None:
            # e.g. editor lock files: dangling symlinks named like sources
            logger.warning(f"skipping non-existent source {original}")
            self.report.skipped.append(original)
            return

        transform = Transform(
            original=original,
            generate=generate,
            direction=direction,
            source_time=source_time,
            target_time=read_mtime(generate),
        )
        try:
            need = needs_regeneration(transform, self.stamp_time)
        except CheckInputError as e:
            if not collect_conflicts:
                logger.error(f"gather_inputs: {e}")
                raise
            self.report.conflicts.append(e)
            return

        if need == Need.NEEDED:
            logger.debug(f"needed: {transform.describe()}")
            inputs.append(transform)
            self._update_newest_time(source_time)

    def _update_newest_time(self, new_time: Timestamp) -> None:
        if self.newest_time is None or new_time > self.newest_time:
            self.newest_time = new_time

    # ------------------------------------------------------------------
    # generate
    # ------------------------------------------------------------------

    def generate_content(self) -> None:
        for transform in self.transforms:
            result = self._generate(transform)
            self.report.generated.append(transform)
            for warning in result.warnings:
                self.report.warnings.append((transform.original, warning))

    def _generate(self, transform: Transform) -> ConversionResult:
        if transform.direction == Direction.TO_LITERATE:
            converter = ToLiterate(self.config)
        else:
            converter = ToSource(self.config)

        # The target is only opened once the whole source has converted.
        buffer = io.StringIO()
        try:
            with open(transform.original, encoding="utf-8") as source:
                result = converter.convert(source, buffer)
        except (OSError, UnicodeDecodeError) as e:
            raise TangoIOError(transform.original, e) from e

        try:
            transform.generate.parent.mkdir(parents=True, exist_ok=True)
            with open(transform.generate, "w", encoding="utf-8") as target:
                target.write(buffer.getvalue())
            transform.source_time.set_file_times(transform.generate)
        except OSError as e:
            raise TangoIOError(transform.generate, e) from e

        logger.info(f"generated {transform.describe()}")
        return result

    # ------------------------------------------------------------------
    # verify and stamp
    # ------------------------------------------------------------------

    def check_input_timestamps(self) -> None:
        for transform in self.transforms:
            new_time = read_mtime(transform.original)
            if new_time is None:
                raise TangoIOError(
                    transform.original,
                    FileNotFoundError(f"{transform.original} disappeared during the run"),
                )
            if new_time != transform.source_time:
                raise ConcurrentUpdateError(transform.original, transform.source_time, new_time)

    def create_stamp(self) -> None:
        try:
            self.paths.stamp_path.touch()
        except OSError as e:
            raise TangoIOError(self.paths.stamp_path, e) from e
        self.report.stamp_created = True
        logger.debug(f"created {self.paths.stamp_path}")

    def adjust_stamp_timestamp(self) -> None:
        if self.newest_time is None:
            return
        try:
            self.newest_time.set_file_times(self.paths.stamp_path)
        except OSError as e:
            raise TangoIOError(self.paths.stamp_path, e) from e
        self.report.stamp_time = self.newest_time
