"""Runtime layer - driving machines against input providers."""

from pullflow.kernel import Machine

from .config import DriveConfig
from .driver import adrive, drive
from .provider import AsyncIterableProvider, AsyncProvider, IterableProvider, Provider, starved

Machine.register_op("run", drive)

__all__ = [
    "DriveConfig",
    "drive",
    "adrive",
    "Provider",
    "AsyncProvider",
    "IterableProvider",
    "AsyncIterableProvider",
    "starved",
]
