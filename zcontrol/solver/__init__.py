from .loop import LoopResult, step_reference, run_closed_loop  # noqa: F401

__all__ = ["LoopResult", "step_reference", "run_closed_loop"]
