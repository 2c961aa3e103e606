import os
import tomllib
from pathlib import Path
from typing import Any, Dict

import dacite
from utils.config import Config

CONFIG_FILE = Path(__file__).parent.parent / "config.toml"


def config_path() -> Path:
    """Location of config.toml; ``ACTION_TOOLS_CONFIG`` overrides the default."""
    return Path(os.getenv("ACTION_TOOLS_CONFIG") or CONFIG_FILE)


def read_config_dict(path: str | Path | None = None) -> Dict[str, Any]:
    p = Path(path) if path else config_path()
    if not p.is_file():
        return {}
    with open(p, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {p}: {e}") from e


def load_config(path: str | Path | None = None) -> Config:
    """Load config.toml into typed dataclasses; missing sections keep their defaults."""
    return dacite.from_dict(
        Config,
        read_config_dict(path),
        config=dacite.Config(strict=True, cast=[float]),
    )
