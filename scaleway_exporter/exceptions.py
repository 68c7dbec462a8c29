"""Exporter exceptions."""


class ConfigurationError(Exception):
    """Raised when exporter configuration is invalid."""

    pass


class ScalewayClientError(Exception):
    """Base exception for Scaleway API failures (transport or protocol)."""

    pass


class ScalewayResponseError(ScalewayClientError):
    """Raised when the Scaleway API answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str, path: str = "") -> None:
        self.status_code = status_code
        self.path = path
        super().__init__(f"{status_code} {message}" + (f" ({path})" if path else ""))

    @property
    def is_not_implemented(self) -> bool:
        """Whether the API reported the product as unavailable in this locality."""
        return self.status_code == 501
