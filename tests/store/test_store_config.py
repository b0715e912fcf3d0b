from __future__ import annotations

from pathlib import Path

import pytest

from loradb.store.config import StoreSettings
from loradb.store.errors import StoreConfigError

_ENV_KEYS = [
    "LORADB_ROOT_DIR",
    "LORADB_COMPRESSION",
    "LORADB_READY_TIMEOUT_S",
    "LORADB_READY_POLL_INTERVAL_S",
    "LORADB_RETENTION_LIMIT",
    "LORADB_ADMIN_USER",
    "LORADB_ADMIN_PASS",
    "LORADB_NODE",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write_loradb_toml(tmp: Path, content: str) -> Path:
    p = tmp / "loradb.toml"
    p.write_text(content)
    return p


def test_store_settings_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    _write_loradb_toml(
        tmp_path,
        """
        [store]
        root_dir = "db_toml"
        retention_limit = 20
        compression = "lz4"
        admin_user = "root"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LORADB_ROOT_DIR", "db_env")
    monkeypatch.setenv("LORADB_RETENTION_LIMIT", "30")

    s = StoreSettings.load()

    assert s.root_dir == "db_env"
    assert s.retention_limit == 30
    assert s.compression == "lz4"  # TOML, no env override
    assert s.admin_user == "root"


def test_store_settings_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
        [tool.loradb.store]
        ready_timeout_s = 5
        node = "ns1@host"
        """.strip()
    )
    monkeypatch.chdir(tmp_path)

    s = StoreSettings.load()

    assert s.ready_timeout_s == 5.0
    assert s.node == "ns1@host"


def test_store_settings_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    s = StoreSettings.load()

    assert s == StoreSettings()
    assert s.retention_limit == 50
    assert (s.admin_user, s.admin_pass) == ("admin", "admin")


def test_store_settings_explicit_path(tmp_path: Path) -> None:
    cfg = _write_loradb_toml(tmp_path, 'root_dir = "elsewhere"\n')
    assert StoreSettings.load(cfg).root_dir == "elsewhere"

    with pytest.raises(StoreConfigError):
        StoreSettings.load(tmp_path / "missing.toml")


@pytest.mark.parametrize(
    "content",
    [
        'compression = "gzip"\n',
        "retention_limit = -1\n",
        'ready_timeout_s = "soon"\n',
        "root_dir = [\n",
    ],
)
def test_store_settings_rejects_bad_values(tmp_path: Path, content: str) -> None:
    cfg = _write_loradb_toml(tmp_path, content)
    with pytest.raises(StoreConfigError):
        StoreSettings.load(cfg)
