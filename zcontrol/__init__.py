"""
Top-level namespace for the discrete-time control toolkit.

Subpackages:
- zcontrol.blocks: discrete-time linear elements (integrator, filtered
  derivative, first-order lag) advanced one sample at a time.
- zcontrol.control: PID controller with back-calculation anti-windup.
- zcontrol.solver: fixed-step closed-loop driver used by the examples.
"""

from . import blocks  # noqa: F401
from . import control  # noqa: F401
from . import solver  # noqa: F401

__all__ = ["blocks", "control", "solver"]
