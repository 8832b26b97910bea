"""Exceptions raised across the bridge."""


class BridgeError(Exception):
    """Base class for every error raised by the bridge."""


class BusError(BridgeError):
    """A single session bus call failed."""


class BusUnavailableError(BusError):
    """The session bus itself could not be reached."""


class ConfigError(BridgeError):
    """The configuration cannot be used, even after correction."""
