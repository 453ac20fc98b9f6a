from __future__ import annotations
from abc import ABC, abstractmethod
from enum import Enum
from typing import Tuple


class BlockKind(Enum):
    """Dynamic element implemented by a block."""
    INTEGRATOR = "integrator"
    DERIVATIVE = "derivative"
    FIRST_ORDER = "first_order"


class StepMethod(Enum):
    """
    Discretization scheme used to advance a block.

    STANDARD: ideal (unfiltered) form, meaningful for derivative blocks only.
    FORWARD_EULER: best for small sample times; large ones can go unstable.
    BACKWARD_EULER: stable whenever the continuous-time system is stable.
    TRAPEZOIDAL: closest frequency-domain match to the continuous-time system,
        stable whenever the continuous-time system is stable.
    """
    STANDARD = "standard"
    FORWARD_EULER = "forward_euler"
    BACKWARD_EULER = "backward_euler"
    TRAPEZOIDAL = "trapezoidal"


class DiscreteBlock(ABC):
    """
    Abstract base class for scalar discrete-time blocks.

    A block owns the time-step state of a first-order discrete system and
    advances it one sample per call to `forward_step`. The only value that
    carries over between calls is `x_next`, the state predicted for the next
    tick; `forward_step` commits it into `x_k` before evaluating the step
    formula, and `back_step` discards it so that the same tick can be
    replayed with a different input.

    Subclasses must implement:
        - kind: the BlockKind tag
        - gain: the block parameter (K, N or tau depending on the kind)
        - _step: the pure step formula (u_k, x_k) -> (y_k, x_next)

    Subclasses are expected to call `_init_state()` once their parameters
    are set.
    """
    x0: float
    Ts: float
    method: StepMethod

    @property
    @abstractmethod
    def kind(self) -> BlockKind: ...

    @property
    @abstractmethod
    def gain(self) -> float: ...

    @abstractmethod
    def _step(self, u_k: float, x_k: float) -> Tuple[float, float]: ...

    def _init_state(self) -> None:
        self._u_k = 0.0
        self._y_k = 0.0
        self._x_k = 0.0
        self._x_next = self.x0
        self._released = False

    # ---- lifecycle ----
    def forward_step(self, u_k: float) -> float:
        """
        Step the block forward in time.

        Args:
            u_k: Input at the current tick k.

        Returns:
            Output at the current tick k.
        """
        self._check_alive()
        self._u_k = u_k
        self._x_k = self._x_next
        self._y_k, self._x_next = self._step(u_k, self._x_k)
        return self._y_k

    def back_step(self) -> None:
        """
        Discard the last state prediction so the current tick can be replayed.

        Only `x_next` is rewound; `x_k`, `u_k` and `y_k` keep the values of
        the last forward step.
        """
        self._check_alive()
        self._x_next = self._x_k

    def destroy(self) -> None:
        """Release the block. No further calls are valid afterwards."""
        self._check_alive()
        self._released = True

    def _check_alive(self) -> None:
        if self._released:
            raise RuntimeError(f"{type(self).__name__} has been destroyed.")

    # ---- inspection ----
    @property
    def sample_time(self) -> float:
        return self.Ts

    @property
    def released(self) -> bool:
        return self._released

    @property
    def u_k(self) -> float:
        return self._u_k

    @property
    def y_k(self) -> float:
        return self._y_k

    @property
    def x_k(self) -> float:
        return self._x_k

    @property
    def x_next(self) -> float:
        return self._x_next
