"""Per-invocation state shared by CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from ..config import Settings
from ..node.client import NodeClient


@dataclass
class AppContext:
    env_file: Optional[Path] = None
    transport: str = "http"
    _settings: Optional[Settings] = None

    @property
    def settings(self) -> Settings:
        # Loaded lazily so that env-template works without a .env file.
        if self._settings is None:
            self._settings = Settings.load(self.env_file)
        return self._settings

    def open_client(self) -> NodeClient:
        return NodeClient.connect(self.settings.transport_config(self.transport))


pass_app = click.make_pass_decorator(AppContext, ensure=True)
