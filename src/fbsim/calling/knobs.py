from __future__ import annotations
from fbsim.outcomes.distributions import clamp01

def shift_run(p_run: float, shift: float) -> float:
    """Increase/decrease run-vs-pass bias by adding an offset to the run probability."""
    return clamp01(p_run + shift)

def scale_fourth_down(p_go_for_it: float, scale: float) -> float:
    """On 4th down, scale the go-for-it probability (scale>1 favors 'go'; scale<1 favors kicking)."""
    return clamp01(p_go_for_it * max(scale, 1e-6))
