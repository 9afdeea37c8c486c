import pytest
from omegaconf import OmegaConf
from src.common.config.manager import ConfigManager
from src.common.exceptions import ConfigurationError
from src.signals.application.builder import SignalApplicationBuilder
from src.signals.infrastructure.persistence import (
    InMemoryIntersectionStore, JsonFileIntersectionStore, SqlIntersectionStore
)

def build_config(**persistence):
    return ConfigManager().merge(OmegaConf.create({
        "persistence": persistence,
        "durations": {"green": 20, "yellow": 4, "red": 25},
    }))

def test_builder_wires_all_components():
    """Components share one broadcaster and the configured defaults."""
    builder = SignalApplicationBuilder(build_config(type="memory")).build_all()

    components = builder.get_components()
    assert all(component is not None for component in components.values())
    assert isinstance(builder.store, InMemoryIntersectionStore)
    assert builder.scheduler_manager.broadcaster is builder.broadcaster
    assert builder.recorder_service.broadcaster is builder.broadcaster
    assert builder.registry.defaults.to_dict() == {"green": 20, "yellow": 4, "red": 25}
    assert builder.recorder_service.idle_timeout_seconds == 300.0

def test_builder_accepts_nested_signals_config():
    cfg = OmegaConf.create({"signals": build_config(type="memory")})
    builder = SignalApplicationBuilder(cfg).build_registry()
    assert isinstance(builder.store, InMemoryIntersectionStore)

def test_json_store(tmp_path):
    builder = SignalApplicationBuilder(build_config(type="json", path=str(tmp_path / "lights.json")))
    builder.build_registry()
    assert isinstance(builder.store, JsonFileIntersectionStore)

    builder.registry.create("Main St", "08:00:00")
    assert (tmp_path / "lights.json").exists()

def test_sql_store():
    builder = SignalApplicationBuilder(build_config(type="sql", database_url="sqlite://"))
    builder.build_store()
    assert isinstance(builder.store, SqlIntersectionStore)
    assert builder.store.load() == []

def test_unknown_store_type():
    cfg = build_config(type="memory")
    cfg.persistence.type = "redis"
    with pytest.raises(ConfigurationError):
        SignalApplicationBuilder(cfg).build_store()
