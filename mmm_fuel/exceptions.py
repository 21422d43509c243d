from __future__ import annotations


class FuelError(Exception):
    """Base error for the fuel price pipeline."""


class ConfigError(FuelError, ValueError):
    """Configuration is unusable (unknown provider, bad types, ...)."""


class ProviderRequestError(FuelError, RuntimeError):
    """Upstream request failed at transport level or with a non-2xx status."""

    def __init__(self, status: int | None, text: str = "") -> None:
        self.status = status
        self.text = text
        super().__init__(f"{status} {text}".strip() if status is not None else text)


class UpstreamFormatError(FuelError, ValueError):
    """Upstream answered, but not with anything we can use."""


class UpdateFailed(FuelError):
    """A poll cycle failed; the previous price list stays current."""


class CoordinateError(FuelError, RuntimeError):
    """Stateful coordinate helper used before an origin was set."""
