"""
Discrete-time blocks.

Each block is a scalar first-order system stepped at a fixed sample time
with a selectable discretization scheme.
"""

from .base import BlockKind, StepMethod, DiscreteBlock  # noqa: F401
from .discrete import (  # noqa: F401
    Integrator,
    FilteredDerivative,
    FirstOrderLag,
    create_block,
)

__all__ = [
    "BlockKind",
    "StepMethod",
    "DiscreteBlock",
    "Integrator",
    "FilteredDerivative",
    "FirstOrderLag",
    "create_block",
]
