from dataclasses import dataclass, field

@dataclass
class ScheduleConfig:
    window_minutes: int = 30
    tick_seconds: float = 1.0

@dataclass
class RecorderConfig:
    refresh_seconds: float = 0.1
    idle_timeout_seconds: float = 300.0

@dataclass
class DurationsConfig:
    green: int = 15
    yellow: int = 3
    red: int = 15

@dataclass
class PersistenceConfig:
    type: str = "json"  # json, sql, memory
    path: str = "data/traffic_lights.json"
    key: str = "trafficLightsData"
    database_url: str = "sqlite:///data/signals.db"

@dataclass
class GeolocationConfig:
    reverse_url: str = "https://nominatim.openstreetmap.org/reverse"
    zoom: int = 18
    language: str = "zh-TW"
    lookup_timeout_seconds: float = 5.0
    position_timeout_seconds: float = 10.0
    user_agent: str = "traffic-light-scheduler"

@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000

@dataclass
class SignalsConfig:
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    recorder: RecorderConfig = field(default_factory=RecorderConfig)
    durations: DurationsConfig = field(default_factory=DurationsConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    geolocation: GeolocationConfig = field(default_factory=GeolocationConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = "INFO"
