"""Relay settings — env-driven via pydantic-settings.

Reads CONNECTRELAY_* environment variables and an optional ``.env`` file.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from connectrelay.projection.batching import BATCH, PASSTHROUGH


class RelaySettings(BaseSettings):
    """Runtime settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export CONNECTRELAY_ROOMS=ops,mobile-team
        export CONNECTRELAY_OUTPUT_STAGE=batch
        export CONNECTRELAY_STORE_PATH=/data/relay.db
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CONNECTRELAY_",
        env_file_encoding="utf-8",
    )

    log_level: str = "INFO"

    # Comma-separated broadcast destinations
    rooms: str = "general"

    # Persistence
    store_path: Path = Path(".connectrelay/brain.db")
    store_namespace: str = "uaconnect"
    persist_retries: int = 3

    # Output stage between record projection and broadcast
    output_stage: str = PASSTHROUGH
    batch_window_ms: int = 1000

    @field_validator("output_stage")
    @classmethod
    def _known_stage(cls, value: str) -> str:
        if value not in (PASSTHROUGH, BATCH):
            raise ValueError(f"output_stage must be {PASSTHROUGH!r} or {BATCH!r}")
        return value

    @property
    def destinations(self) -> list[str]:
        """Configured rooms, trimmed, empties dropped."""
        return [r.strip() for r in self.rooms.split(",") if r.strip()]

    @property
    def state_key(self) -> str:
        return f"{self.store_namespace}:lastState"

    @property
    def output_key(self) -> str:
        return f"{self.store_namespace}:lastOutput"


# Module-level singleton: import as `from connectrelay.config import settings`
settings = RelaySettings()
