"""
PID step response on a first-order plant.

A PID controller with back-calculation anti-windup drives a first-order lag
(tau = 0.1 s). The target steps from 0 to 100 at t = 0.1 s and back to 0 at
t = 2.0 s; the run lasts 5 s at a 1 ms sample time.

Expected behaviour:
    - The controller saturates at 100 right after the first step and the
      plant output rises towards the target without integrator windup.
    - After the second step the output decays back towards zero while the
      controller sits on its lower limit.

Run with `python -m zcontrol.examples.step_response`. The plant output is
printed one value per tick.
"""

import logging

from zcontrol.blocks import FirstOrderLag, StepMethod
from zcontrol.control import PidController, PidParams
from zcontrol.solver import run_closed_loop, step_reference


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    Ts = 0.001
    T_sim = 5.0
    y_step = 100.0
    T_step_1 = 0.1
    T_step_2 = 2.0

    params = PidParams(
        Kp=1.0,
        Ki=5.0,
        Kd=1.0,
        Kb=0.1,
        N=100.0,
        output_min=0.0,
        output_max=100.0,
        Ts=Ts,
        integral_init=0.0,
        derivative_init=0.0,
        integral_method=StepMethod.TRAPEZOIDAL,
        derivative_method=StepMethod.TRAPEZOIDAL,
    )
    controller = PidController(params)
    plant = FirstOrderLag(tau=0.1, Ts=Ts)

    reference = step_reference([
        (int(round(T_step_1 / Ts)), y_step),
        (int(round(T_step_2 / Ts)), 0.0),
    ])
    n_ticks = int(round(T_sim / Ts)) + 1
    result = run_closed_loop(controller, plant, reference, n_ticks, dt=Ts)

    for y in result.output:
        print(f"{y:2.6f}")

    controller.destroy()
    plant.destroy()

    try:
        import matplotlib.pyplot as plt

        fig, (ax_y, ax_u) = plt.subplots(2, 1, sharex=True, figsize=(7, 5))
        ax_y.plot(result.t, result.target, "--", label="target")
        ax_y.plot(result.t, result.output, label="plant output")
        ax_y.set_ylabel("y")
        ax_y.grid(True)
        ax_y.legend()
        ax_u.plot(result.t, result.control, label="control")
        ax_u.set_xlabel("Time [s]")
        ax_u.set_ylabel("u")
        ax_u.grid(True)
        ax_u.legend()
        fig.suptitle("PID Step Response")
        plt.tight_layout()
        plt.show()
    except ImportError:
        pass


if __name__ == "__main__":
    main()
