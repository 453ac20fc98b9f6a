from __future__ import annotations
from dataclasses import dataclass
import logging

from ..blocks.base import StepMethod
from ..blocks.discrete import Integrator, FilteredDerivative

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PidParams:
    """
    Tunable PID controller parameters.

    Treated as a value: it is copied into the controller on creation and
    replaced wholesale by `PidController.set_params`. Use
    `dataclasses.replace` to derive a modified set.

    Attributes:
        Kp: Proportional gain.
        Ki: Integral gain.
        Kd: Derivative gain.
        Kb: Back-propagation gain (integral anti-windup).
        N: Derivative filter bandwidth.
        output_min: Lower saturation limit.
        output_max: Upper saturation limit.
        Ts: Sample time in seconds.
        integral_init: Initial state of the integrator block.
        derivative_init: Initial state of the derivative block.
        integral_method: Discretization scheme of the integrator block.
        derivative_method: Discretization scheme of the derivative block.
    """
    Kp: float = 1.0
    Ki: float = 0.0
    Kd: float = 0.0
    Kb: float = 0.0
    N: float = 100.0
    output_min: float = float("-inf")
    output_max: float = float("inf")
    Ts: float = 1e-3
    integral_init: float = 0.0
    derivative_init: float = 0.0
    integral_method: StepMethod = StepMethod.TRAPEZOIDAL
    derivative_method: StepMethod = StepMethod.TRAPEZOIDAL


@dataclass
class BackpropConfig:
    """
    Settings of the fixed-point loop that resolves the anti-windup algebraic loop.

    Attributes:
        tol: Stop once the back-propagation term changes by at most this much
            between two passes (default: 1e-3).
        max_iter: Hard cap on passes per tick (default: 1000). Hitting the cap
            is not an error; the last computed output is returned.
    """
    tol: float = 1e-3
    max_iter: int = 1000


@dataclass
class PidSignals:
    """Signals of the most recent tick."""
    target: float = 0.0
    measured: float = 0.0
    error: float = 0.0
    P_out: float = 0.0
    I_out: float = 0.0
    D_out: float = 0.0
    B_out: float = 0.0
    int_out: float = 0.0
    deriv_out: float = 0.0
    sat_in: float = 0.0
    sum_sat: float = 0.0
    output: float = 0.0


@dataclass(frozen=True)
class LoopDiagnostics:
    """
    Outcome of the anti-windup loop for one tick.

    Attributes:
        iterations: Number of integrator passes performed.
        delta: |B_k - B_{k-1}| on the last pass.
        converged: False when the loop stopped at the iteration cap.
    """
    iterations: int
    delta: float
    converged: bool


def saturate(u: float, output_min: float, output_max: float) -> float:
    """Clamp u to [output_min, output_max]."""
    if u > output_max:
        return output_max
    if u < output_min:
        return output_min
    return u


class PidController:
    """
    Discrete PID controller with filtered derivative, output saturation and
    back-calculation anti-windup.

    The control law for one tick is:
        e = target - measured
        u = sat(Kp*e + I(Ki*e + B) + D(Kd*e))
        B = Kb * (u - (Kp*e + I(...) + D(...)))

    where I is an integrator block and D a filtered derivative block. B
    depends on the saturated output, which depends on the integrator output,
    which depends on B in the same tick. The loop is closed by fixed-point
    iteration: the integrator is stepped, the output saturated, B recomputed,
    then the integrator is stepped back and replayed with the new B until B
    stops changing (see BackpropConfig).

    B is kept between ticks, so each tick starts its iteration from the
    back-propagation term of the previous one.
    """

    def __init__(self, params: PidParams, loop_cfg: BackpropConfig | None = None) -> None:
        """
        Create the controller and its integrator/derivative blocks.

        Args:
            params: Controller parameters. Ts, N, the initial conditions and
                the methods are only read here, when the blocks are built.
            loop_cfg: Anti-windup loop settings (optional).
                If None, uses default BackpropConfig.
        """
        if loop_cfg is None:
            loop_cfg = BackpropConfig()
        self._params = params
        self.loop_cfg = loop_cfg
        self._signals = PidSignals()
        self._ticks = 0
        self._last_loop = LoopDiagnostics(iterations=0, delta=0.0, converged=True)
        self._integrator = Integrator(K=1.0, Ts=params.Ts, x0=params.integral_init,
                                      method=params.integral_method)
        self._derivative = FilteredDerivative(N=params.N, Ts=params.Ts,
                                              x0=params.derivative_init,
                                              method=params.derivative_method)
        self._released = False

    # ---- configuration ----
    def get_params(self) -> PidParams:
        return self._params

    def set_params(self, params: PidParams) -> None:
        """
        Replace the controller parameters.

        The internal blocks are not rebuilt: their state, sample time, filter
        bandwidth and methods carry on from construction. Gains, Kb and the
        saturation limits take effect from the next `update`.
        """
        self._params = params

    params = property(get_params, set_params)

    # ---- inspection ----
    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def signals(self) -> PidSignals:
        """Copy of the signals computed by the last `update`."""
        return PidSignals(**vars(self._signals))

    @property
    def last_loop(self) -> LoopDiagnostics:
        return self._last_loop

    # ---- update ----
    def update(self, target: float, measured: float) -> float:
        """
        Step the controller forward by one tick.

        Args:
            target: Reference value.
            measured: Actual value, typically from feedback.

        Returns:
            Saturated controller output, typically sent to an actuator.
        """
        if self._released:
            raise RuntimeError("PidController has been destroyed.")
        p = self._params
        s = self._signals

        s.target = target
        s.measured = measured
        s.error = target - measured

        s.P_out = p.Kp * s.error
        s.I_out = p.Ki * s.error
        s.D_out = p.Kd * s.error

        s.deriv_out = self._derivative.forward_step(s.D_out)

        # integral with back-propagation
        n_iter = 0
        while True:
            B_last = s.B_out

            if n_iter > 0:
                self._integrator.back_step()

            s.int_out = self._integrator.forward_step(s.I_out + B_last)
            s.sat_in = s.P_out + s.int_out + s.deriv_out

            s.output = saturate(s.sat_in, p.output_min, p.output_max)
            s.sum_sat = s.output - s.sat_in
            s.B_out = p.Kb * s.sum_sat

            n_iter += 1
            delta = abs(s.B_out - B_last)
            if not delta > self.loop_cfg.tol or n_iter >= self.loop_cfg.max_iter:
                break

        converged = not delta > self.loop_cfg.tol
        if not converged:
            logger.debug("Anti-windup loop hit %d iterations at tick %d (delta=%.3g)",
                         n_iter, self._ticks, delta)
        self._last_loop = LoopDiagnostics(iterations=n_iter, delta=delta, converged=converged)

        self._ticks += 1
        return s.output

    def destroy(self) -> None:
        """Release the internal blocks. The controller cannot be updated afterwards."""
        if self._released:
            raise RuntimeError("PidController has been destroyed.")
        self._integrator.destroy()
        self._derivative.destroy()
        self._released = True
