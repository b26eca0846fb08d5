"""Runtime configuration: env-driven.

Centralized config using pydantic-settings for environment variable
support. Reads from .env file and DAGPROOF_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class DagProofConfig(BaseSettings):
    """Library and CLI configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export DAGPROOF_LOG_LEVEL=DEBUG
        export DAGPROOF_STORE_PATH=/data/blocks
        export DAGPROOF_DEFAULT_HASH_ALGORITHM=blake3

    Or via .env file::

        DAGPROOF_MAX_VISITS=100000
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DAGPROOF_",
        env_file_encoding="utf-8",
    )

    # Logging
    log_level: str = "INFO"

    # Block store
    store_path: Path = Path(".dagproof/blocks")
    verify_on_read: bool = True

    # Encoding defaults for newly written blocks
    default_codec: str = "dag-json"
    default_hash_algorithm: str = "sha256"

    # Traversal budget; None means unbounded
    max_visits: int | None = None


# Module-level singleton: import as `from dagproof.config import config`
config = DagProofConfig()
