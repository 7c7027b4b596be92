"""
Central configuration for the FinOps idle enforcer service.
All values can be overridden via environment variables or a local config.json.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Config:
    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8780

    # Policies seeded into the store at startup (JSON list of manifests)
    policy_file: Path = field(default_factory=lambda: _ROOT / "policies.json")

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self):
        self.policy_file = Path(self.policy_file)

    @classmethod
    def load(cls, config_file: Path = _CONFIG_FILE, environ=None) -> "Config":
        environ = os.environ if environ is None else environ
        cfg = cls()
        if config_file.exists():
            overrides = json.loads(config_file.read_text())
            for k, v in overrides.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, _coerce(getattr(cfg, k), v))
        # environment variable overrides (FOE_*)
        for k in cfg.__dataclass_fields__:  # type: ignore[attr-defined]
            env_key = f"FOE_{k.upper()}"
            if env_key in environ:
                setattr(cfg, k, _coerce(getattr(cfg, k), environ[env_key]))
        return cfg


def _coerce(current, raw):
    """Convert *raw* to the type of the current value."""
    if isinstance(current, bool):
        if isinstance(raw, str):
            return raw.strip().lower() in _TRUTHY
        return bool(raw)
    if isinstance(current, Path):
        return Path(raw)
    return type(current)(raw)


# Module-level singleton
config = Config.load()
