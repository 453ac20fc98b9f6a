"""Closed-loop tests: step reference, driver and the PID step-response scenario."""

import numpy as np
import pytest

from zcontrol.blocks import FirstOrderLag, StepMethod
from zcontrol.control import PidController, PidParams
from zcontrol.solver import LoopResult, run_closed_loop, step_reference

Ts = 0.001


@pytest.fixture(scope="module")
def step_response():
    params = PidParams(
        Kp=1.0, Ki=5.0, Kd=1.0, Kb=0.1, N=100.0,
        output_min=0.0, output_max=100.0, Ts=Ts,
        integral_method=StepMethod.TRAPEZOIDAL,
        derivative_method=StepMethod.TRAPEZOIDAL,
    )
    controller = PidController(params)
    plant = FirstOrderLag(tau=0.1, Ts=Ts)
    reference = step_reference([(100, 100.0), (2000, 0.0)])
    return run_closed_loop(controller, plant, reference, n_ticks=5001, dt=Ts)


class TestStepReference:
    def test_holds_initial_until_first_step(self):
        r = step_reference([(100, 100.0), (2000, 0.0)], initial=-1.0)
        assert r(1) == -1.0
        assert r(99) == -1.0

    def test_switches_at_step_ticks(self):
        r = step_reference([(2000, 0.0), (100, 100.0)])
        assert r(100) == 100.0
        assert r(1999) == 100.0
        assert r(2000) == 0.0
        assert r(5001) == 0.0


class TestRunClosedLoop:
    def test_trace_shapes(self):
        pid = PidController(PidParams(Kp=1.0, Ts=0.01))
        plant = FirstOrderLag(tau=0.1, Ts=0.01)
        result = run_closed_loop(pid, plant, lambda k: 1.0, n_ticks=50, dt=0.01)
        assert isinstance(result, LoopResult)
        for arr in (result.t, result.target, result.control, result.output):
            assert arr.shape == (50,)
        assert result.t[0] == pytest.approx(0.01)
        assert result.t[-1] == pytest.approx(0.5)
        assert pid.ticks == 50

    def test_proportional_loop_settles_with_offset(self):
        pid = PidController(PidParams(Kp=1.0, Ts=0.01))
        plant = FirstOrderLag(tau=0.1, Ts=0.01)
        result = run_closed_loop(pid, plant, lambda k: 1.0, n_ticks=500, dt=0.01)
        assert result.output[-1] == pytest.approx(0.5, rel=1e-6)

    def test_series(self):
        pid = PidController(PidParams(Ts=0.01))
        plant = FirstOrderLag(tau=0.1, Ts=0.01)
        result = run_closed_loop(pid, plant, lambda k: 2.0, n_ticks=5, dt=0.01)
        t, target = result.series("target")
        assert t is result.t
        np.testing.assert_array_equal(target, np.full(5, 2.0))
        with pytest.raises(KeyError):
            result.series("error")


class TestStepResponseScenario:
    def test_idle_before_step(self, step_response):
        assert np.all(step_response.control[:98] == 0.0)
        assert np.all(step_response.output[:98] == 0.0)

    def test_control_within_limits(self, step_response):
        assert step_response.control.min() >= 0.0
        assert step_response.control.max() <= 100.0
        assert step_response.control[99] == 100.0

    def test_plant_output_within_limits(self, step_response):
        assert step_response.output.min() >= 0.0
        assert step_response.output.max() <= 100.0

    def test_rises_after_first_step(self, step_response):
        y = step_response.output
        assert np.all(np.diff(y[99:150]) > 0.0)
        assert y[1998] > 50.0
        assert y[1998] > y[300]

    def test_decays_after_second_step(self, step_response):
        y = step_response.output
        assert y[2100] < y[1998]
        assert y[-1] < 0.2 * y[1998]

    def test_reproducible(self, step_response):
        params = PidParams(
            Kp=1.0, Ki=5.0, Kd=1.0, Kb=0.1, N=100.0,
            output_min=0.0, output_max=100.0, Ts=Ts,
        )
        rerun = run_closed_loop(PidController(params), FirstOrderLag(tau=0.1, Ts=Ts),
                                step_reference([(100, 100.0), (2000, 0.0)]),
                                n_ticks=5001, dt=Ts)
        np.testing.assert_array_equal(rerun.output, step_response.output)
