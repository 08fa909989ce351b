"""Tracker configuration management."""

import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path

from .persistence import ConfigurationError, JsonBinAdapter, LocalStorageAdapter, PersistenceAdapter

CONFIG_PATH = Path.home() / ".process_tracker" / "config.json"

API_KEY_ENV = "PROCESS_TRACKER_API_KEY"
PASSWORD_ENV = "PROCESS_TRACKER_PASSWORD"

BACKENDS = ("local", "remote")


@dataclass
class TrackerConfig:
    backend: str = "local"
    storage_dir: str | None = None
    bin_id: str = ""
    api_key: str = ""
    base_url: str = JsonBinAdapter.BASE_URL
    timeout: float = JsonBinAdapter.TIMEOUT
    password: str = ""
    log_level: str = "INFO"

    @classmethod
    def load(cls, config_path: Path | None = None) -> "TrackerConfig":
        """Read the JSON config file (defaults when absent), then apply env secrets."""
        config_path = Path(config_path) if config_path else CONFIG_PATH
        if config_path.exists():
            data = json.loads(config_path.read_text(encoding="utf-8"))
            config = cls._from_dict(data)
        else:
            config = cls()
        config.api_key = os.environ.get(API_KEY_ENV) or config.api_key
        config.password = os.environ.get(PASSWORD_ENV) or config.password
        return config

    @classmethod
    def _from_dict(cls, data: dict) -> "TrackerConfig":
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in data.items() if k in known})

    def save(self, config_path: Path | None = None) -> None:
        config_path = Path(config_path) if config_path else CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")

    def build_adapter(self) -> PersistenceAdapter:
        if self.backend == "local":
            return LocalStorageAdapter(Path(self.storage_dir) if self.storage_dir else None)
        if self.backend == "remote":
            return JsonBinAdapter(
                bin_id=self.bin_id,
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
            )
        raise ConfigurationError(f"Unknown backend '{self.backend}'. Valid backends: {', '.join(BACKENDS)}")
