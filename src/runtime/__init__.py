"""Runtime engine exports."""

from .controller import CycleController, ExpirationNotice, PhaseOptions
from .loop import RuntimeBootstrap, RuntimeEngine

__all__ = [
    "CycleController",
    "ExpirationNotice",
    "PhaseOptions",
    "RuntimeBootstrap",
    "RuntimeEngine",
]
