from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TokenPaintConfig:
    state_db_path: str = "tokenpaint-state.db"
    user_settings_path: str = "settings.json"
    workspace_dir: str | None = None
    extensions_dir: str | None = None
    debounce_ms: int = 150
    rule_name_prefix: str = "tokenpaint"
    default_language: str = "csharp"
    host: str = "127.0.0.1"
    port: int = 5151

    @property
    def has_workspace(self) -> bool:
        return bool(self.workspace_dir)

    @property
    def workspace_settings_path(self) -> Path | None:
        """Workspace-layer settings file, or None when no workspace is open."""
        if not self.workspace_dir:
            return None
        return Path(self.workspace_dir) / ".vscode" / "settings.json"

    @property
    def debounce_seconds(self) -> float:
        return max(0, self.debounce_ms) / 1000.0

    @classmethod
    def from_env(cls, **overrides: object) -> TokenPaintConfig:
        """Build a config from TOKENPAINT_* environment variables plus explicit overrides."""
        values: dict[str, object] = {}
        state_db = os.environ.get("TOKENPAINT_STATE_DB")
        if state_db:
            values["state_db_path"] = state_db
        user_settings = os.environ.get("TOKENPAINT_USER_SETTINGS")
        if user_settings:
            values["user_settings_path"] = user_settings
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]
