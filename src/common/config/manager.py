from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import OmegaConfBaseException
from pathlib import Path
from typing import Optional

from .models import SignalsConfig
from ..exceptions import ConfigurationError

PERSISTENCE_TYPES = ("json", "sql", "memory")

class ConfigManager:
    """Centralizes loading and validation of the signals configuration"""

    required_keys = ['schedule', 'durations', 'persistence']

    def __init__(self, config_dir: Path = Path("conf")):
        self.config_dir = config_dir

    def load_signals_config(self, profile: str = "default", overrides: Optional[list] = None) -> DictConfig:
        """Loads conf/signals/<profile>.yaml over the structured defaults"""
        config_path = self.config_dir / "signals" / f"{profile}.yaml"

        if not config_path.exists():
            raise ConfigurationError(f"Config not found: {config_path}")

        raw = OmegaConf.load(config_path)
        for key in self.required_keys:
            if key not in raw:
                raise ConfigurationError(f"Missing required config key: {key}")

        cli_cfg = OmegaConf.from_dotlist(overrides or [])
        return self.merge(raw, cli_cfg)

    def merge(self, *configs) -> DictConfig:
        """Merges raw configs over the structured defaults and validates the result"""
        try:
            cfg = OmegaConf.merge(OmegaConf.structured(SignalsConfig), *configs)
        except OmegaConfBaseException as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
        self.validate(cfg)
        return cfg

    def validate(self, cfg: DictConfig):
        if cfg.schedule.window_minutes < 0:
            raise ConfigurationError("schedule.window_minutes must be non-negative")
        if cfg.schedule.tick_seconds <= 0 or cfg.recorder.refresh_seconds <= 0 or cfg.recorder.idle_timeout_seconds <= 0:
            raise ConfigurationError("tick intervals must be positive")
        for color in ("green", "yellow", "red"):
            if cfg.durations[color] < 1:
                raise ConfigurationError(f"durations.{color} must be at least 1 second")
        if cfg.persistence.type not in PERSISTENCE_TYPES:
            raise ConfigurationError(
                f"Unknown persistence type: {cfg.persistence.type} (expected one of {PERSISTENCE_TYPES})"
            )
