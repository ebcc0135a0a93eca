from functools import lru_cache
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from .models import City


load_dotenv()

DEFAULT_PEER_PORTS = {"MTL": 5000, "TOR": 5001, "VAN": 5002}
HTTP_PORT_BASE = 6000


def parse_port_table(raw: str) -> dict[str, int]:
    """Parse ``MTL=5000,TOR=5001,VAN=5002`` into a city to port table."""
    table: dict[str, int] = {}
    for entry in raw.split(","):
        if not entry.strip():
            continue
        city, sep, port = entry.partition("=")
        if not sep:
            raise ValueError(f"expected CITY=PORT, got {entry!r}")
        table[city.strip().upper()] = int(port)
    return table


class Settings(BaseModel):
    city: City = Field(default=City.TOR)
    peer_host: str = Field(default="localhost")
    peer_ports: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_PEER_PORTS))
    peer_timeout: float = Field(default=2.0, gt=0)
    peer_retries: int = Field(default=2, ge=0)
    peer_backoff: float = Field(default=0.2, ge=0)
    audit_log_dir: str = Field(default=".")
    seed_sample_data: bool = Field(default=True)
    http_port: int | None = Field(default=None)
    log_level: str = Field(default="INFO")

    @field_validator("peer_ports")
    @classmethod
    def _one_port_per_city(cls, value: dict[str, int]) -> dict[str, int]:
        if set(value) != {c.value for c in City}:
            raise ValueError("peer_ports must name exactly MTL, TOR and VAN")
        if len(set(value.values())) != len(value):
            raise ValueError("peer_ports must be distinct")
        return value

    @model_validator(mode="after")
    def _default_http_port(self) -> "Settings":
        if self.http_port is None:
            self.http_port = HTTP_PORT_BASE + sorted(City).index(self.city)
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings(
        city=os.getenv("NODE_CITY", Settings.model_fields["city"].default),
        peer_host=os.getenv("PEER_HOST", Settings.model_fields["peer_host"].default),
        peer_ports=parse_port_table(os.getenv("PEER_PORTS", "")) or dict(DEFAULT_PEER_PORTS),
        peer_timeout=float(os.getenv("PEER_TIMEOUT", "2.0")),
        peer_retries=int(os.getenv("PEER_RETRIES", "2")),
        peer_backoff=float(os.getenv("PEER_BACKOFF", "0.2")),
        audit_log_dir=os.getenv("AUDIT_LOG_DIR", Settings.model_fields["audit_log_dir"].default),
        seed_sample_data=bool(int(os.getenv("SEED_SAMPLE_DATA", "1"))),
        http_port=int(os.environ["HTTP_PORT"]) if os.getenv("HTTP_PORT") else None,
        log_level=os.getenv("LOG_LEVEL", Settings.model_fields["log_level"].default),
    )
