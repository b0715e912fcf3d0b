"""
Configuration for the loradb.store module.

Defines StoreSettings, a frozen dataclass carrying runtime configuration for the
store and the maintenance passes built on it. Defaults are sourced from
loradb.core.constants (the single source of truth).

Source of truth
- loradb.core.constants.RETENTION_LIMIT, READY_TIMEOUT_S, READY_POLL_INTERVAL_S,
  COMPRESSION, DEFAULT_NODE

Notes
- Precedence: env (LORADB_*) > TOML (loradb.toml or [tool.loradb.store]) > defaults.
- admin_user/admin_pass seed the users table once, when it is first created.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

from loradb.core.constants import COMPRESSION as CORE_COMPRESSION
from loradb.core.constants import DEFAULT_NODE
from loradb.core.constants import READY_POLL_INTERVAL_S as CORE_READY_POLL_INTERVAL_S
from loradb.core.constants import READY_TIMEOUT_S as CORE_READY_TIMEOUT_S
from loradb.core.constants import RETENTION_LIMIT as CORE_RETENTION_LIMIT

from .errors import StoreConfigError

Compression = Literal["zstd", "lz4", "snappy"]

_COMPRESSIONS = ("zstd", "lz4", "snappy")


@dataclass(frozen=True)
class StoreSettings:
    """
    Runtime settings for loradb.store and loradb.db.

    Attributes:
        root_dir (str): Directory holding the schema marker and table directories.
        compression (Literal["zstd","lz4","snappy"]): Parquet codec for table parts.
        ready_timeout_s (float): Bounded wait for tables to report ready.
        ready_poll_interval_s (float): Poll interval while waiting.
        retention_limit (int): Most recent rxframes kept per device by a trim pass.
        admin_user (str): Login seeded into a newly created users table.
        admin_pass (str): Password for admin_user.
        node (str): Name of the local node recorded against table copies.

    Examples:
        >>> from loradb.store import StoreSettings
        >>> StoreSettings(root_dir="db", retention_limit=10)  # doctest: +ELLIPSIS
        StoreSettings(...)
    """

    root_dir: str = "db"
    compression: Compression = CORE_COMPRESSION  # type: ignore[assignment]
    ready_timeout_s: float = CORE_READY_TIMEOUT_S
    ready_poll_interval_s: float = CORE_READY_POLL_INTERVAL_S
    retention_limit: int = CORE_RETENTION_LIMIT
    admin_user: str = "admin"
    admin_pass: str = "admin"
    node: str = DEFAULT_NODE

    def __post_init__(self) -> None:
        if self.compression not in _COMPRESSIONS:
            raise StoreConfigError(f"unsupported compression {self.compression!r}")
        if self.retention_limit < 0:
            raise StoreConfigError("retention_limit must be >= 0")
        if self.ready_timeout_s <= 0 or self.ready_poll_interval_s <= 0:
            raise StoreConfigError("ready_timeout_s and ready_poll_interval_s must be > 0")

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: StoreSettings, cfg: dict[str, Any] | None) -> StoreSettings:
        """Apply a loose config mapping onto StoreSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        for key in ("root_dir", "admin_user", "admin_pass", "node"):
            if key in cfg and isinstance(cfg[key], str):
                s = replace(s, **{key: cfg[key]})

        if "compression" in cfg and isinstance(cfg["compression"], str):
            comp = cfg["compression"].strip().lower()
            if comp not in _COMPRESSIONS:
                raise StoreConfigError(f"unsupported compression {comp!r}")
            s = replace(s, compression=comp)  # type: ignore[arg-type]

        for key in ("ready_timeout_s", "ready_poll_interval_s"):
            if key in cfg:
                try:
                    s = replace(s, **{key: float(cfg[key])})
                except (TypeError, ValueError) as exc:
                    raise StoreConfigError(f"{key} must be a number (got: {cfg[key]!r})") from exc

        if "retention_limit" in cfg:
            try:
                s = replace(s, retention_limit=int(cfg["retention_limit"]))
            except (TypeError, ValueError) as exc:
                raise StoreConfigError(
                    f"retention_limit must be an integer (got: {cfg['retention_limit']!r})"
                ) from exc

        return s

    @classmethod
    def from_env(cls, base: StoreSettings | None = None, prefix: str = "LORADB_") -> StoreSettings:
        """
        Build StoreSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - LORADB_ROOT_DIR
            - LORADB_COMPRESSION ("zstd" | "lz4" | "snappy")
            - LORADB_READY_TIMEOUT_S
            - LORADB_READY_POLL_INTERVAL_S
            - LORADB_RETENTION_LIMIT
            - LORADB_ADMIN_USER
            - LORADB_ADMIN_PASS
            - LORADB_NODE
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in (
            "root_dir",
            "compression",
            "ready_timeout_s",
            "ready_poll_interval_s",
            "retention_limit",
            "admin_user",
            "admin_pass",
            "node",
        ):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> StoreSettings:
        """
        Build StoreSettings from a TOML file.

        Search order when `path` is None:
            1) ./loradb.toml (with either top-level [store] or direct keys)
            2) ./pyproject.toml under [tool.loradb.store]

        Returns defaults if no file is present.

        Raises:
            StoreConfigError: If an explicit `path` does not exist or does not parse.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            if not Path(path).exists():
                raise StoreConfigError(f"config file not found: {path}")
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "loradb.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                raise StoreConfigError(f"invalid TOML in {p}: {exc}") from exc
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("loradb", {}).get("store", {}) if isinstance(tool, dict) else None
            elif "store" in data and isinstance(data["store"], dict):
                cfg = data["store"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> StoreSettings:
        """
        Load StoreSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (loradb.toml, pyproject.toml).

        Returns:
            StoreSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
