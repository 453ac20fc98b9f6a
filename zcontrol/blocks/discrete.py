from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from .base import BlockKind, StepMethod, DiscreteBlock


@dataclass(eq=False)
class Integrator(DiscreteBlock):
    """
    Discrete integrator y = K/s.

    Attributes:
        K: Multiplier on the integrated input.
        Ts: Sample time in seconds.
        x0: Initial state.
        method: FORWARD_EULER, BACKWARD_EULER or TRAPEZOIDAL. Any other method
            passes the input straight through and holds the state.
    """
    K: float
    Ts: float
    x0: float = 0.0
    method: StepMethod = StepMethod.TRAPEZOIDAL

    def __post_init__(self) -> None:
        self._init_state()

    @property
    def kind(self) -> BlockKind:
        return BlockKind.INTEGRATOR

    @property
    def gain(self) -> float:
        return self.K

    def _step(self, u_k: float, x_k: float) -> Tuple[float, float]:
        K, Ts = self.K, self.Ts
        if self.method is StepMethod.FORWARD_EULER:
            y_k = x_k
            return y_k, x_k + K * Ts * u_k
        if self.method is StepMethod.BACKWARD_EULER:
            y_k = x_k + K * Ts * u_k
            return y_k, y_k
        if self.method is StepMethod.TRAPEZOIDAL:
            y_k = x_k + K * Ts / 2.0 * u_k
            return y_k, y_k + K * Ts / 2.0 * u_k
        return u_k, x_k


@dataclass(eq=False)
class FilteredDerivative(DiscreteBlock):
    """
    Discrete derivative with first-order filtering, y = N*s/(s + N).

    As N grows the response approaches the ideal unfiltered derivative.
    STANDARD ignores N and implements the ideal backward difference
    (u_k - u_{k-1}) / Ts.

    Attributes:
        N: Filter bandwidth in rad/s.
        Ts: Sample time in seconds.
        x0: Initial state.
        method: STANDARD, FORWARD_EULER, BACKWARD_EULER or TRAPEZOIDAL.
    """
    N: float
    Ts: float
    x0: float = 0.0
    method: StepMethod = StepMethod.TRAPEZOIDAL

    def __post_init__(self) -> None:
        self._init_state()

    @property
    def kind(self) -> BlockKind:
        return BlockKind.DERIVATIVE

    @property
    def gain(self) -> float:
        return self.N

    def _step(self, u_k: float, x_k: float) -> Tuple[float, float]:
        N, Ts = self.N, self.Ts
        if self.method is StepMethod.STANDARD:
            y_k = (1.0 / Ts) * u_k + x_k
            return y_k, (-1.0 / Ts) * u_k
        if self.method is StepMethod.FORWARD_EULER:
            y_k = x_k + N * u_k
            return y_k, (1.0 - N * Ts) * y_k - N * u_k
        if self.method is StepMethod.BACKWARD_EULER:
            y_k = N / (1.0 + N * Ts) * u_k + x_k
            return y_k, (y_k - N * u_k) / (1.0 + N * Ts)
        if self.method is StepMethod.TRAPEZOIDAL:
            y_k = 2.0 * N / (2.0 + N * Ts) * u_k + x_k
            return y_k, ((1.0 - N * Ts / 2.0) * y_k - N * u_k) / (1.0 + N * Ts / 2.0)
        return 0.0, x_k


@dataclass(eq=False)
class FirstOrderLag(DiscreteBlock):
    """
    First-order lag y = 1/(tau*s + 1), discretized with backward Euler.

    `method` is stored for reference but never consulted: the lag always
    uses the same formula.

    Attributes:
        tau: Time constant in seconds.
        Ts: Sample time in seconds.
        x0: Initial state.
        method: Ignored.
    """
    tau: float
    Ts: float
    x0: float = 0.0
    method: StepMethod = StepMethod.STANDARD

    def __post_init__(self) -> None:
        self._init_state()

    @property
    def kind(self) -> BlockKind:
        return BlockKind.FIRST_ORDER

    @property
    def gain(self) -> float:
        return self.tau

    def _step(self, u_k: float, x_k: float) -> Tuple[float, float]:
        tau, Ts = self.tau, self.Ts
        y_k = Ts / (tau + Ts) * u_k + x_k
        return y_k, tau / (tau + Ts) * y_k


def create_block(x0: float, Ts: float, gain: float, kind: BlockKind,
                 method: StepMethod = StepMethod.STANDARD) -> DiscreteBlock:
    """
    Build a block from the flat (x0, Ts, gain, kind, method) description.

    `gain` is read according to `kind`:
        - INTEGRATOR: multiplier K on the output
        - DERIVATIVE: filter bandwidth N
        - FIRST_ORDER: time constant tau in seconds

    Args:
        x0: Initial condition for the internal state.
        Ts: Sample time in seconds. Not validated.
        gain: Kind-dependent parameter (see above).
        kind: Which dynamic element to build.
        method: Discretization scheme (ignored for FIRST_ORDER).

    Returns:
        A fresh block whose first forward step starts from x0.
    """
    if kind is BlockKind.INTEGRATOR:
        return Integrator(K=gain, Ts=Ts, x0=x0, method=method)
    if kind is BlockKind.DERIVATIVE:
        return FilteredDerivative(N=gain, Ts=Ts, x0=x0, method=method)
    if kind is BlockKind.FIRST_ORDER:
        return FirstOrderLag(tau=gain, Ts=Ts, x0=x0, method=method)
    raise ValueError(f"Unknown block kind: {kind!r}")
