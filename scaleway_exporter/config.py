"""Configuration management using Pydantic settings.

Two-layer configuration system:
1. Environment: Loads raw values from environment variables (UPPER_CASE)
2. Settings: Clean exporter settings with lowercase fields and derived values
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from scaleway_exporter.exceptions import ConfigurationError

ALL_REGIONS: tuple[str, ...] = ("fr-par", "nl-ams", "pl-waw")

ALL_ZONES: tuple[str, ...] = (
    "fr-par-1",
    "fr-par-2",
    "fr-par-3",
    "nl-ams-1",
    "nl-ams-2",
    "nl-ams-3",
    "pl-waw-1",
    "pl-waw-2",
    "pl-waw-3",
)


class Environment(BaseSettings):
    """Raw environment variable loading."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Scaleway ───────────────────────────────────────────────────────

    SCALEWAY_ACCESS_KEY: str = Field(default="")
    SCALEWAY_SECRET_KEY: str = Field(default="")
    SCALEWAY_REGION: str = Field(default="")
    SCALEWAY_ORGANIZATION_ID: str = Field(default="")
    SCALEWAY_API_URL: str = Field(default="https://api.scaleway.com")

    # ── Exposition ─────────────────────────────────────────────────────

    DEBUG: bool = Field(default=False)
    HTTP_TIMEOUT: int = Field(default=5000)
    WEB_ADDR: str = Field(default=":9503")
    WEB_PATH: str = Field(default="/metrics")
    WAITRESS_THREADS: int = Field(default=4)
    GRACEFUL_SHUTDOWN_TIMEOUT: int = Field(default=10)

    # ── Collectors ─────────────────────────────────────────────────────

    DISABLE_DATABASE_COLLECTOR: bool = Field(default=False)
    DISABLE_BUCKET_COLLECTOR: bool = Field(default=False)
    DISABLE_LOADBALANCER_COLLECTOR: bool = Field(default=False)
    DISABLE_REDIS_COLLECTOR: bool = Field(default=False)
    DISABLE_BILLING_COLLECTOR: bool = Field(default=False)

    # ── Build info ─────────────────────────────────────────────────────

    VERSION: str = Field(default="dev")
    REVISION: str = Field(default="")
    BUILD_DATE: str = Field(default="")


class Settings(BaseModel):
    """Exporter settings with lowercase fields and derived values."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    scaleway_access_key: str = ""
    scaleway_secret_key: str = ""
    scaleway_organization_id: str = ""
    scaleway_api_url: str = "https://api.scaleway.com"
    regions: tuple[str, ...] = ALL_REGIONS
    zones: tuple[str, ...] = ALL_ZONES

    debug: bool = False
    http_timeout: float = 5.0
    web_host: str = "0.0.0.0"
    web_port: int = 9503
    web_path: str = "/metrics"
    waitress_threads: int = 4
    graceful_shutdown_timeout: int = 10

    database_collector_enabled: bool = True
    bucket_collector_enabled: bool = True
    loadbalancer_collector_enabled: bool = True
    redis_collector_enabled: bool = True
    billing_collector_enabled: bool = True

    version: str = "dev"
    revision: str = ""
    build_date: str = ""

    def validate_config(self) -> None:
        errors: list[str] = []

        if not self.scaleway_access_key:
            errors.append("SCALEWAY_ACCESS_KEY is required")
        if not self.scaleway_secret_key:
            errors.append("SCALEWAY_SECRET_KEY is required")
        if self.http_timeout <= 0:
            errors.append("HTTP_TIMEOUT must be a positive number of milliseconds")
        if not self.web_path.startswith("/"):
            errors.append("WEB_PATH must start with '/'")

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    @classmethod
    def load(cls, env: "Environment | None" = None) -> "Settings":
        if env is None:
            env = Environment()

        if env.SCALEWAY_REGION:
            region = env.SCALEWAY_REGION
            if region not in ALL_REGIONS:
                raise ConfigurationError(
                    f"SCALEWAY_REGION must be one of {', '.join(ALL_REGIONS)}, "
                    f"got {region!r}"
                )
            regions: tuple[str, ...] = (region,)
            zones = tuple(zone for zone in ALL_ZONES if zone.startswith(f"{region}-"))
        else:
            regions = ALL_REGIONS
            zones = ALL_ZONES

        web_host, web_port = parse_web_addr(env.WEB_ADDR)

        return cls(
            # Scaleway
            scaleway_access_key=env.SCALEWAY_ACCESS_KEY,
            scaleway_secret_key=env.SCALEWAY_SECRET_KEY,
            scaleway_organization_id=env.SCALEWAY_ORGANIZATION_ID,
            scaleway_api_url=env.SCALEWAY_API_URL.rstrip("/"),
            regions=regions,
            zones=zones,

            # Exposition
            debug=env.DEBUG,
            http_timeout=env.HTTP_TIMEOUT / 1000.0,
            web_host=web_host,
            web_port=web_port,
            web_path=env.WEB_PATH,
            waitress_threads=env.WAITRESS_THREADS,
            graceful_shutdown_timeout=env.GRACEFUL_SHUTDOWN_TIMEOUT,

            # Collectors; billing also needs an organization to report on
            database_collector_enabled=not env.DISABLE_DATABASE_COLLECTOR,
            bucket_collector_enabled=not env.DISABLE_BUCKET_COLLECTOR,
            loadbalancer_collector_enabled=not env.DISABLE_LOADBALANCER_COLLECTOR,
            redis_collector_enabled=not env.DISABLE_REDIS_COLLECTOR,
            billing_collector_enabled=(
                not env.DISABLE_BILLING_COLLECTOR
                and bool(env.SCALEWAY_ORGANIZATION_ID)
            ),

            # Build info
            version=env.VERSION,
            revision=env.REVISION,
            build_date=env.BUILD_DATE,
        )


def parse_web_addr(addr: str) -> tuple[str, int]:
    """Split a Go-style listen address (``":9503"``, ``"127.0.0.1:80"``)."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigurationError(f"WEB_ADDR must look like 'host:port', got {addr!r}")
    return host or "0.0.0.0", int(port)
