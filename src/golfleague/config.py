"""League configuration loaded from TOML using msgspec."""

from __future__ import annotations

from pathlib import Path

import msgspec

DEFAULT_CONFIG_FILE = Path("golfleague.toml")


class LeagueConfig(msgspec.Struct):
    """
    TOML-backed settings.

    database: DuckDB file holding the league (":memory:" for a throwaway run)
    log_level: root logging level name
    """

    database: str = "golfleague.duckdb"
    log_level: str = "INFO"

    @classmethod
    def from_toml(cls, path: str | Path) -> LeagueConfig:
        """Load configuration from a TOML file path."""
        with Path(path).open("rb") as f:
            return msgspec.toml.decode(f.read(), type=cls)

    @classmethod
    def load(cls, path: Path | None = None) -> LeagueConfig:
        """Explicit path, else ./golfleague.toml when present, else defaults."""
        if path is not None:
            return cls.from_toml(path)
        if DEFAULT_CONFIG_FILE.exists():
            return cls.from_toml(DEFAULT_CONFIG_FILE)
        return cls()
