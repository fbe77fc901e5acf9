"""
Configuration for ledgerline.

Settings are read once at startup from a ``.env`` file (python-dotenv) and
the process environment, then passed explicitly to every component that
needs them.  Values may contain ``<KEY>`` placeholders which are resolved
against the same settings, e.g. ``https://sepolia.infura.io/v3/<API_KEY>``.

Keys:
  API_KEY                 Node provider API key (used by RPC_URL / WS_URL templates)
  PRIVATE_KEY             Hex private key used for signing (never logged)
  RPC_URL                 HTTP JSON-RPC endpoint template
  WS_URL                  WebSocket JSON-RPC endpoint template
  PROXY_URL               Optional forward proxy, e.g. socks5://127.0.0.1:7897
  CONFIRM_MAX_ATTEMPTS    Confirmation poll budget (default 10)
  CONFIRM_POLL_INTERVAL   Seconds between confirmation polls (default 5)
  CONTRACT_ADDRESS_FILE   Where the deployed counter address is kept
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values

from .errors import ConfigError
from .node.transport import TransportConfig

logger = logging.getLogger(__name__)

ENV_FILE_NAME = ".env"
ENV_TEMPLATE_NAME = ".env.template"
MAX_SEARCH_LEVELS = 5

DEFAULTS: dict[str, str] = {
    "RPC_URL": "https://sepolia.infura.io/v3/<API_KEY>",
    "WS_URL": "wss://ethereum-sepolia-rpc.publicnode.com",
    "CONFIRM_MAX_ATTEMPTS": "10",
    "CONFIRM_POLL_INTERVAL": "5",
    "CONTRACT_ADDRESS_FILE": "~/.ledgerline_contract_address",
}

ENV_TEMPLATE = """\
# ledgerline configuration
# Placeholders like <API_KEY> are replaced with the value of that key.

# Node provider API key (Infura, Alchemy, ...)
API_KEY=
# Hex private key of the sending account
PRIVATE_KEY=

RPC_URL=https://sepolia.infura.io/v3/<API_KEY>
WS_URL=wss://ethereum-sepolia-rpc.publicnode.com

# Optional forward proxy (http://, socks5://)
# PROXY_URL=socks5://127.0.0.1:7897

CONFIRM_MAX_ATTEMPTS=10
CONFIRM_POLL_INTERVAL=5
CONTRACT_ADDRESS_FILE=~/.ledgerline_contract_address
"""

_PLACEHOLDER = re.compile(r"<([A-Za-z_][A-Za-z0-9_]*)>")


def find_env_file(
    start: Optional[Path] = None,
    max_levels: int = MAX_SEARCH_LEVELS,
    name: str = ENV_FILE_NAME,
) -> Optional[Path]:
    """
    Locate the nearest ``.env`` file.

    Searches ``start`` (default: cwd) and up to ``max_levels`` parents.
    ``max_levels=0`` searches all the way to the filesystem root.

    Returns:
        Path to the file, or None if not found
    """
    current = (start or Path.cwd()).resolve()
    level = 0
    while True:
        candidate = current / name
        if candidate.is_file():
            return candidate
        if max_levels and level >= max_levels:
            logger.debug("No %s within %d levels of %s", name, max_levels, start)
            return None
        if current.parent == current:
            return None
        current = current.parent
        level += 1


def validate_env_file(path: Path) -> None:
    """
    Check that an explicitly supplied env file exists and is readable.

    Raises:
        ConfigError: If the path is missing, a directory, or unreadable
    """
    if not path.exists():
        raise ConfigError(f"Env file not found: {path}")
    if path.is_dir():
        raise ConfigError(f"Env file path is a directory: {path}")
    try:
        with path.open("r", encoding="utf-8"):
            pass
    except OSError as exc:
        raise ConfigError(f"Env file not readable: {path}: {exc}") from exc


def write_env_template(path: Optional[Path] = None) -> Path:
    """
    Write the bundled ``.env.template``.

    Raises:
        ConfigError: If the file already exists
    """
    path = path or Path(ENV_TEMPLATE_NAME)
    if path.exists():
        raise ConfigError(f"Env template already exists: {path}")
    try:
        path.write_text(ENV_TEMPLATE, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot write env template {path}: {exc}") from exc
    return path


class Settings:
    """Explicit configuration object, constructed once per invocation."""

    def __init__(
        self,
        values: Optional[dict[str, str]] = None,
        env_file: Optional[Path] = None,
        use_environ: bool = True,
    ):
        self.env_file = env_file
        self.use_environ = use_environ
        self._file_values: dict[str, str] = dict(values or {})
        self._mtime: Optional[float] = None
        if env_file is not None:
            self.reload()

    @classmethod
    def load(cls, env_file: Optional[Path] = None) -> Settings:
        """
        Load settings from an explicit file or the nearest ``.env``.

        A missing default ``.env`` is not an error: the process environment
        may carry everything.  A missing explicit file is.
        """
        if env_file is not None:
            env_file = Path(env_file).expanduser()
            validate_env_file(env_file)
            logger.info("Using env file: %s", env_file)
            return cls(env_file=env_file)

        found = find_env_file()
        if found is None:
            logger.debug("No %s found, using process environment only", ENV_FILE_NAME)
        return cls(env_file=found)

    # ------------------------------------------------------------------
    # Reloading
    # ------------------------------------------------------------------
    def reload(self) -> None:
        """Re-read the env file."""
        if self.env_file is None:
            return
        try:
            raw = dotenv_values(self.env_file)
            mtime = self.env_file.stat().st_mtime
        except OSError as exc:
            raise ConfigError(f"Cannot reload env file {self.env_file}: {exc}") from exc
        self._file_values = {k: v for k, v in raw.items() if v is not None}
        self._mtime = mtime

    def reload_if_changed(self) -> bool:
        """Reload when the env file's mtime moved.  Returns True if reloaded."""
        if self.env_file is None:
            return False
        try:
            mtime = self.env_file.stat().st_mtime
        except OSError:
            return False
        if self._mtime is not None and mtime == self._mtime:
            return False
        logger.info("Env file changed, reloading: %s", self.env_file)
        self.reload()
        return True

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        if self.use_environ and os.environ.get(key):
            return os.environ[key]
        value = self._file_values.get(key)
        if value:
            return value
        if default is not None:
            return default
        return DEFAULTS.get(key)

    def require(self, key: str) -> str:
        value = self.get(key)
        if not value:
            where = self.env_file or ENV_FILE_NAME
            raise ConfigError(f"{key} not set. Set it in {where} or the environment.")
        return value

    def resolve(self, template: str) -> str:
        """Replace every ``<KEY>`` placeholder with that key's value."""
        return _PLACEHOLDER.sub(lambda m: self.get(m.group(1)) or "", template)

    def get_int(self, key: str) -> int:
        value = self.require(key)
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigError(f"{key} must be an integer, got {value!r}") from exc

    def get_float(self, key: str) -> float:
        value = self.require(key)
        try:
            return float(value)
        except ValueError as exc:
            raise ConfigError(f"{key} must be a number, got {value!r}") from exc

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------
    @property
    def private_key(self) -> str:
        key = self.require("PRIVATE_KEY").strip()
        if not key.startswith("0x"):
            key = "0x" + key
        return key

    @property
    def proxy_url(self) -> Optional[str]:
        proxy = self.get("PROXY_URL")
        return self.resolve(proxy) if proxy else None

    @property
    def confirm_max_attempts(self) -> int:
        return self.get_int("CONFIRM_MAX_ATTEMPTS")

    @property
    def confirm_poll_interval(self) -> float:
        return self.get_float("CONFIRM_POLL_INTERVAL")

    @property
    def contract_address_file(self) -> Path:
        return Path(self.require("CONTRACT_ADDRESS_FILE")).expanduser()

    def node_url(self, kind: str = "http") -> str:
        key = "WS_URL" if kind == "ws" else "RPC_URL"
        return self.resolve(self.require(key))

    def transport_config(self, kind: str = "http") -> TransportConfig:
        return TransportConfig(url=self.node_url(kind), proxy=self.proxy_url)

    def __repr__(self) -> str:
        return f"Settings(env_file={str(self.env_file)!r})"
