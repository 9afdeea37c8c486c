from omegaconf import DictConfig
from typing import Optional

from ..domain import Durations, IntersectionStore, PositionOptions
from ..infrastructure.persistence import JsonFileIntersectionStore, SqlIntersectionStore, InMemoryIntersectionStore
from ..infrastructure.broadcast.phase_broadcaster import PhaseBroadcaster
from ..infrastructure.geolocation import ReverseGeocoder, LocationResolver
from .registry import IntersectionRegistry
from .scheduler import SchedulerManager
from .recorder_service import RecorderService
from ...common.database import build_engine, create_session_factory, init_db
from ...common.exceptions import ConfigurationError
from ...common.logging import setup_logger

logger = setup_logger(__name__)

class SignalApplicationBuilder:
    """
    Builder pattern for constructing the signal scheduler application.
    Centralizes component instantiation and wiring.
    """

    def __init__(self, config: DictConfig):
        self.config = config
        self.signals_cfg = config.signals if "signals" in config else config

        # Components
        self.store: Optional[IntersectionStore] = None
        self.registry: Optional[IntersectionRegistry] = None
        self.broadcaster: Optional[PhaseBroadcaster] = None
        self.scheduler_manager: Optional[SchedulerManager] = None
        self.recorder_service: Optional[RecorderService] = None
        self.location_resolver: Optional[LocationResolver] = None

    def build_store(self) -> 'SignalApplicationBuilder':
        persistence_cfg = self.signals_cfg.persistence
        store_type = persistence_cfg.type
        logger.info(f"Opening {store_type} store (key: {persistence_cfg.key})")

        if store_type == "json":
            self.store = JsonFileIntersectionStore(persistence_cfg.path, key=persistence_cfg.key)
        elif store_type == "sql":
            engine = build_engine(persistence_cfg.database_url)
            init_db(engine)
            self.store = SqlIntersectionStore(create_session_factory(engine), key=persistence_cfg.key)
        elif store_type == "memory":
            self.store = InMemoryIntersectionStore()
        else:
            raise ConfigurationError(f"Unknown persistence type: {store_type}")
        return self

    def build_registry(self) -> 'SignalApplicationBuilder':
        if self.store is None:
            self.build_store()
        durations_cfg = self.signals_cfg.durations
        defaults = Durations(
            green=durations_cfg.green,
            yellow=durations_cfg.yellow,
            red=durations_cfg.red,
        )
        self.registry = IntersectionRegistry(self.store, defaults=defaults)
        return self

    def build_broadcaster(self) -> 'SignalApplicationBuilder':
        self.broadcaster = PhaseBroadcaster()
        return self

    def build_scheduler(self) -> 'SignalApplicationBuilder':
        if self.broadcaster is None:
            self.build_broadcaster()
        schedule_cfg = self.signals_cfg.schedule
        self.scheduler_manager = SchedulerManager(
            self.broadcaster,
            tick_seconds=schedule_cfg.tick_seconds,
            window_minutes=schedule_cfg.window_minutes,
        )
        return self

    def build_recorder(self) -> 'SignalApplicationBuilder':
        if self.broadcaster is None:
            self.build_broadcaster()
        self.recorder_service = RecorderService(
            self.broadcaster,
            refresh_seconds=self.signals_cfg.recorder.refresh_seconds,
            idle_timeout_seconds=self.signals_cfg.recorder.idle_timeout_seconds,
        )
        return self

    def build_locator(self) -> 'SignalApplicationBuilder':
        geo_cfg = self.signals_cfg.geolocation
        geocoder = ReverseGeocoder(
            url=geo_cfg.reverse_url,
            zoom=geo_cfg.zoom,
            language=geo_cfg.language,
            timeout_seconds=geo_cfg.lookup_timeout_seconds,
            user_agent=geo_cfg.user_agent,
        )
        self.location_resolver = LocationResolver(
            geocoder,
            PositionOptions(timeout_seconds=geo_cfg.position_timeout_seconds),
        )
        return self

    def build_all(self) -> 'SignalApplicationBuilder':
        return (
            self
            .build_store()
            .build_registry()
            .build_broadcaster()
            .build_scheduler()
            .build_recorder()
            .build_locator()
        )

    def get_components(self) -> dict:
        return {
            'store': self.store,
            'registry': self.registry,
            'broadcaster': self.broadcaster,
            'scheduler_manager': self.scheduler_manager,
            'recorder_service': self.recorder_service,
            'location_resolver': self.location_resolver,
        }
