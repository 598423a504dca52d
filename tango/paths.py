"""
Mapping between commented-source paths and literate paths.

    <root>/<src_dir>/a/b.<source_ext>  <->  <root>/<lit_dir>/a/b.<literate_ext>

Handing the mapper a path with the wrong extension or outside its tree
is a programming error and raises MalformedPathError immediately.
"""

from dataclasses import dataclass
from pathlib import Path

from tango.config import TangoConfig
from tango.errors import MalformedPathError


def check_path(kind: str, path: Path, ext: str, root: Path) -> Path:
    """Return `path` relative to `root`, after checking its extension."""
    if path.suffix != f".{ext}":
        raise MalformedPathError(kind, path, f"requires `.{ext}` extension")
    try:
        return path.relative_to(root)
    except ValueError:
        raise MalformedPathError(kind, path, f"must be rooted at `{root}`") from None


@dataclass
class PathMapper:
    config: TangoConfig
    root: Path

    def __post_init__(self):
        self.root = Path(self.root)

    @property
    def src_root(self) -> Path:
        return self.root / self.config.src_dir

    @property
    def lit_root(self) -> Path:
        return self.root / self.config.lit_dir

    @property
    def stamp_path(self) -> Path:
        return self.root / self.config.stamp

    def is_source(self, path: Path) -> bool:
        return path.suffix == f".{self.config.source_ext}"

    def is_literate(self, path: Path) -> bool:
        return path.suffix == f".{self.config.literate_ext}"

    def to_literate(self, source_path: Path) -> Path:
        rel = check_path("source path", Path(source_path), self.config.source_ext, self.src_root)
        return (self.lit_root / rel).with_suffix(f".{self.config.literate_ext}")

    def to_source(self, literate_path: Path) -> Path:
        rel = check_path("literate path", Path(literate_path), self.config.literate_ext, self.lit_root)
        return (self.src_root / rel).with_suffix(f".{self.config.source_ext}")
