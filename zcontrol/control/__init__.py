from .pid import (  # noqa: F401
    PidParams,
    BackpropConfig,
    PidSignals,
    LoopDiagnostics,
    PidController,
    saturate,
)

__all__ = [
    "PidParams",
    "BackpropConfig",
    "PidSignals",
    "LoopDiagnostics",
    "PidController",
    "saturate",
]
