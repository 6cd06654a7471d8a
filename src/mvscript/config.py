"""TOML config loading for mvscript.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from mvscript.parser import ENTRY_POINTS

CONFIG_FILENAME = "mvscript.toml"


@dataclass
class PackageConfig:
    name: str = "untitled"
    version: str = "0.0.0"


@dataclass
class ParseConfig:
    entry: str = "program"
    sources: str = "src"


@dataclass
class DiagnosticsConfig:
    color: bool = True


@dataclass
class MvscriptConfig:
    package: PackageConfig = field(default_factory=PackageConfig)
    parse: ParseConfig = field(default_factory=ParseConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find mvscript.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_FILENAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> MvscriptConfig:
    """Parse an mvscript.toml file into an MvscriptConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = MvscriptConfig()

    if "package" in data:
        pkg = data["package"]
        config.package = PackageConfig(
            name=pkg.get("name", "untitled"),
            version=pkg.get("version", "0.0.0"),
        )

    if "parse" in data:
        prs = data["parse"]
        entry = prs.get("entry", "program")
        if entry not in ENTRY_POINTS:
            raise ValueError(
                f"{path}: parse.entry must be one of {', '.join(ENTRY_POINTS)}, got {entry!r}"
            )
        config.parse = ParseConfig(entry=entry, sources=prs.get("sources", "src"))

    if "diagnostics" in data:
        config.diagnostics = DiagnosticsConfig(
            color=data["diagnostics"].get("color", True),
        )

    return config
