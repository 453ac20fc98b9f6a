from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Callable, Sequence, Tuple

import numpy as np

from ..blocks.base import DiscreteBlock
from ..control.pid import PidController

logger = logging.getLogger(__name__)

Array = np.ndarray


@dataclass
class LoopResult:
    """
    Time histories of a closed-loop run, one sample per tick.

    Attributes:
        t: Time of each tick (tick index times dt).
        target: Reference fed to the controller.
        control: Controller output sent to the plant.
        output: Plant output after the tick.
    """
    t: Array
    target: Array
    control: Array
    output: Array

    SERIES = ("target", "control", "output")

    def series(self, name: str) -> tuple[Array, Array]:
        """
        Return (t, values) for one of the recorded signals.
        """
        if name not in self.SERIES:
            raise KeyError(f"Series '{name}' not found.")
        return self.t, getattr(self, name)


def step_reference(steps: Sequence[Tuple[int, float]],
                   initial: float = 0.0) -> Callable[[int], float]:
    """
    Build a piecewise-constant reference.

    Args:
        steps: (tick, value) pairs. From `tick` onwards the reference takes
            `value`, until a later step overrides it.
        initial: Value before the first step.

    Returns:
        Function mapping a tick index to the reference value.
    """
    ordered = sorted(steps)

    def reference(k: int) -> float:
        value = initial
        for tick, v in ordered:
            if k >= tick:
                value = v
        return value

    return reference


def run_closed_loop(controller: PidController, plant: DiscreteBlock,
                    reference: Callable[[int], float], n_ticks: int,
                    dt: float, y0: float = 0.0) -> LoopResult:
    """
    Run a fixed-step closed loop of a controller and a plant block.

    Ticks are numbered 1..n_ticks. At each tick the reference is sampled,
    the controller is updated with the last plant output, and the plant is
    stepped with the control signal. `dt` must match the sample time both
    the controller and the plant were built with; it is only used to build
    the time vector.

    Args:
        controller: Controller to drive.
        plant: Plant model, any discrete block.
        reference: Function of the tick index returning the target.
        n_ticks: Number of ticks to run.
        dt: Sample time in seconds.
        y0: Plant output fed back on the first tick.

    Returns:
        LoopResult with the per-tick histories.
    """
    ticks = np.arange(1, n_ticks + 1)
    t = ticks * dt
    target = np.zeros(n_ticks)
    control = np.zeros(n_ticks)
    output = np.zeros(n_ticks)

    logger.info("Closed loop started: %d ticks, dt=%g s", n_ticks, dt)
    y = y0
    for idx, k in enumerate(ticks):
        r = reference(int(k))
        u = controller.update(r, y)
        y = plant.forward_step(u)
        target[idx] = r
        control[idx] = u
        output[idx] = y
    logger.info("Closed loop finished at t=%g s (y=%.6f)", t[-1] if n_ticks else 0.0, y)

    return LoopResult(t=t, target=target, control=control, output=output)
