import socket
from dataclasses import dataclass
from enum import Enum

from core import config


class ConfigError(ValueError):
    pass


class TcpMode(str, Enum):
    SERVER = "server"
    CLIENT = "client"


def parse_port(value) -> int:
    """Accept a port number or a tcp service name such as ``http``."""
    if isinstance(value, int):
        return value
    if value.isdigit():
        return int(value)
    try:
        return socket.getservbyname(value, "tcp")
    except OSError:
        raise ConfigError(f"unknown tcp service: {value!r}") from None


def join_host_port(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


@dataclass(frozen=True)
class RunConfig:
    host: str = config.TCP_HOST
    port: int = config.TCP_PORT
    shost: str = config.SOURCE_HOST
    sport: int = config.SOURCE_PORT
    listen: bool = False
    size: int = config.PACKET_SIZE
    nconn: int = config.NCONN
    # accepted for compatibility, no behaviour attached
    reqres: bool = config.REQRES
    nflight: int = config.NFLIGHT
    profile: str = config.PROFILE_PREFIX
    stats_interval: float = config.STATS_INTERVAL

    def __post_init__(self):
        if self.size <= 0:
            raise ConfigError(f"size must be a positive number of bytes, got {self.size}")
        if self.nconn < 1:
            raise ConfigError(f"nconn must be at least 1, got {self.nconn}")
        for name in ("port", "sport"):
            value = getattr(self, name)
            if not 0 <= value <= 65535:
                raise ConfigError(f"{name} out of range: {value}")
        if self.stats_interval <= 0:
            raise ConfigError(f"stats interval must be positive, got {self.stats_interval}")

    @property
    def mode(self) -> TcpMode:
        return TcpMode.SERVER if self.listen else TcpMode.CLIENT

    @property
    def addr(self) -> tuple[str, int]:
        return self.host, self.port

    @property
    def saddr(self) -> tuple[str, int]:
        return self.shost, self.sport

    @property
    def addr_text(self) -> str:
        return join_host_port(self.host, self.port)

    @property
    def saddr_text(self) -> str:
        return join_host_port(self.shost, self.sport)
