"""Config loading for keygate.

Reads ``.keygate/config.yaml`` (or ``~/.keygate/config.yaml``).
Raises SystemExit on parse errors or a missing/unsupported ``version`` field.
If no config file is found, returns default values (safe to run without config).

Config search order:
  1. ``config_path`` argument (explicit override, used by tests)
  2. KEYGATE_CONFIG environment variable
  3. ``.keygate/config.yaml`` (working directory)
  4. ``~/.keygate/config.yaml`` (home directory)

Environment variable overrides (applied after the file, win over it):
  KEYGATE_PORT   : overrides server.port
  KEYGATE_DB_PATH: overrides store.path

Example::

    version: 1
    server:
      host: 127.0.0.1
      port: 3001
    store:
      path: ~/.keygate/keygate.db
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import NoReturn, Optional

import yaml

from keygate.utils.logger import get_logger

logger = get_logger(__name__)

CONFIG_VERSION = 1

DEFAULT_DB_PATH = "~/.keygate/keygate.db"

DEFAULT_CONFIG_PATHS = [
    ".keygate/config.yaml",
    os.path.expanduser("~/.keygate/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class ServerConfig:
    """HTTP binding for uvicorn."""

    host: str = "127.0.0.1"
    port: int = 3001


@dataclass
class StoreConfig:
    """SQLite database holding api_keys and system_settings."""

    path: str = DEFAULT_DB_PATH

    @property
    def resolved_path(self) -> str:
        return os.path.expanduser(self.path)


@dataclass
class Config:
    """Root configuration object. Every field has a safe default."""

    version: int = CONFIG_VERSION
    server: ServerConfig = field(default_factory=ServerConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    path: Optional[str] = None  # file the config was loaded from, if any

    @classmethod
    def defaults(cls) -> "Config":
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Merge a parsed YAML mapping onto the defaults. Unknown keys are ignored."""
        server_raw = raw.get("server") or {}
        server = ServerConfig(
            host=server_raw.get("host", "127.0.0.1"),
            port=server_raw.get("port", 3001),
        )

        store_raw = raw.get("store") or {}
        store = StoreConfig(path=store_raw.get("path", DEFAULT_DB_PATH))

        return cls(
            version=raw.get("version", CONFIG_VERSION),
            server=server,
            store=store,
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def _fail(msg: str) -> NoReturn:
    print(msg, file=sys.stderr)
    raise SystemExit(1)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate keygate configuration.

    Returns:
        Config with file values merged onto defaults, env overrides applied.

    Raises:
        SystemExit(1): On YAML parse error, unreadable file, non-mapping YAML,
                       missing or unsupported ``version``, or invalid
                       ``KEYGATE_PORT``.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("KEYGATE_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    if found_path is None:
        logger.info("No config file found, using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "keygate refuses to start with an invalid config."
        )
    except OSError as exc:
        _fail(f"CONFIG ERROR: Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _fail(
            f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    version = raw.get("version")
    if version is None:
        _fail(
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version != CONFIG_VERSION:
        _fail(
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported version: {CONFIG_VERSION}."
        )

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    if config.server.host == "0.0.0.0":
        logger.warning(
            "SECURITY WARNING: keygate is configured to bind on 0.0.0.0 (all interfaces)",
            host=config.server.host,
        )

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        store_path=config.store.path,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply KEYGATE_PORT and KEYGATE_DB_PATH to ``config`` in place."""
    env_port = os.environ.get("KEYGATE_PORT")
    if env_port is not None:
        try:
            config.server.port = int(env_port)
        except ValueError:
            _fail(
                "CONFIG ERROR: KEYGATE_PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )

    env_db = os.environ.get("KEYGATE_DB_PATH")
    if env_db:
        config.store.path = env_db
