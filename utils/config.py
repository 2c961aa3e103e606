from __future__ import annotations
import dataclasses
from typing import Dict, List, Optional


@dataclasses.dataclass
class LoggingConsole:
    enabled: bool = True
    renderer: str = "pretty"

@dataclasses.dataclass
class LoggingFile:
    enabled: bool = False
    level: str = "DEBUG"
    path: str = "logs/app.log"
    file_rotation: bool = True
    max_bytes: int = 10_000_000
    backup_count: int = 5

@dataclasses.dataclass
class Logging:
    level: str = "INFO"
    console: LoggingConsole = dataclasses.field(default_factory=LoggingConsole)
    file: LoggingFile = dataclasses.field(default_factory=LoggingFile)
    libraries: Dict[str, str] = dataclasses.field(
        default_factory=lambda: {"urllib3": "WARNING", "requests": "WARNING"}
    )

@dataclasses.dataclass
class Http:
    timeout: float = 30.0

@dataclasses.dataclass
class WordPress:
    base_url: Optional[str] = None

@dataclasses.dataclass
class Flux:
    base_url: str = "https://api.bfl.ml"
    poll_interval: float = 2.0
    max_wait: float = 300.0
    output_dir: str = ""

@dataclasses.dataclass
class OpenWeather:
    base_url: str = "https://api.openweathermap.org/data/3.0"

@dataclasses.dataclass
class Portdox:
    base_url: str = "https://login.portdox.com/api"

@dataclasses.dataclass
class Tools:
    enabled: List[str] = dataclasses.field(
        default_factory=lambda: ["wordpress", "flux", "openweather", "portdox"]
    )

@dataclasses.dataclass
class Config:
    logging: Logging = dataclasses.field(default_factory=Logging)
    http: Http = dataclasses.field(default_factory=Http)
    tools: Tools = dataclasses.field(default_factory=Tools)
    wordpress: WordPress = dataclasses.field(default_factory=WordPress)
    flux: Flux = dataclasses.field(default_factory=Flux)
    openweather: OpenWeather = dataclasses.field(default_factory=OpenWeather)
    portdox: Portdox = dataclasses.field(default_factory=Portdox)
