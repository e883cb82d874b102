"""Client settings, read from the environment.

The session server publishes its address in ``NSM_URL`` when it launches a
client, e.g. ``osc.udp://studio.local:15762/``. The timeouts may be tuned with
``NSM_CONNECT_TIMEOUT``, ``NSM_POLL_INTERVAL`` and ``NSM_ANNOUNCE_TIMEOUT``.
"""

from typing import Literal
from urllib.parse import urlsplit

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from nsm.shared.exceptions import ConfigurationError


class NsmSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NSM_",
        extra="ignore",
    )

    url: str | None = None
    """Address of the session server, taken from ``NSM_URL``."""

    connect_timeout: float = Field(default=10.0, gt=0)
    """Seconds to wait for the transport to become ready."""

    poll_interval: float = Field(default=0.1, gt=0)
    """Seconds between two transport readiness checks."""

    announce_timeout: float = Field(default=10.0, gt=0)
    """Seconds to wait for the server to answer the announce message."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    def server_address(self) -> tuple[str, int]:
        if not self.url:
            raise ConfigurationError("NSM_URL not defined")
        return parse_server_url(self.url)


def parse_server_url(url: str) -> tuple[str, int]:
    """Split a ``scheme://host:port/`` server address into host and port."""
    parts = urlsplit(url)
    try:
        port = parts.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid port in NSM_URL {url!r}") from e
    if not parts.hostname:
        raise ConfigurationError(f"No host in NSM_URL {url!r}")
    if port is None:
        raise ConfigurationError(f"No port in NSM_URL {url!r}")
    return parts.hostname, port
