"""
tango project configuration.

Settings live in tango.yaml at the project root. Every key is optional;
a missing file means all defaults, which match the layout tango was
first written for (Rust sources and markdown sharing `src/`).

Example tango.yaml:
    src_dir: src
    lit_dir: doc
    source_ext: rs
    literate_ext: md
    lang: rust
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from tango.errors import ConfigError

CONFIG_FILE = "tango.yaml"

DEFAULT_PLAYGROUND_URL = "https://play.rust-lang.org/?code={code}&version=nightly"


@dataclass
class TangoConfig:
    """Directory layout, file extensions and markdown details."""
    src_dir: str = "src"
    lit_dir: str = "src"
    source_ext: str = "rs"
    literate_ext: str = "md"
    stamp: str = "tango.stamp"
    lang: str = "rust"
    playground_url: str = DEFAULT_PLAYGROUND_URL
    strict: bool = False  # encoding warnings fail the run

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type is bool or f.type == "bool":
                if not isinstance(value, bool):
                    raise ConfigError(f"{f.name} must be true or false, got {value!r}")
            elif not isinstance(value, str) or not value.strip():
                raise ConfigError(f"{f.name} must be a non-empty string, got {value!r}")

        for name in ("source_ext", "literate_ext"):
            if getattr(self, name).startswith("."):
                raise ConfigError(f"{name} is given without a leading dot")
        if self.source_ext == self.literate_ext:
            raise ConfigError("source_ext and literate_ext must differ")
        if "{code}" not in self.playground_url:
            raise ConfigError("playground_url must contain a {code} placeholder")
        if any(c.isspace() for c in self.lang):
            raise ConfigError(f"lang must be a single word, got {self.lang!r}")

    @property
    def fence_open(self) -> str:
        return "```" + self.lang

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TangoConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def get_config_path(project_path: Union[str, Path]) -> Path:
    """Get the config file path for a project."""
    return Path(project_path) / CONFIG_FILE


def load_config(project_path: Union[str, Path]) -> TangoConfig:
    """Load project configuration. Returns defaults if not found."""
    config_file = get_config_path(project_path)

    if not config_file.exists():
        return TangoConfig()

    try:
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_file} must contain a mapping")
    return TangoConfig.from_dict(data)


def save_config(project_path: Union[str, Path], config: TangoConfig) -> Path:
    """Save project configuration."""
    config_file = get_config_path(project_path)
    config_file.parent.mkdir(parents=True, exist_ok=True)

    with open(config_file, "w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    return config_file
