from __future__ import annotations
import numpy as np
from scipy import stats


def _check_scale(name: str, scale: float) -> None:
    if not np.isfinite(scale) or scale <= 0:
        raise ValueError(f"{name} scale must be positive and finite: {scale}")


def clamp01(p: float) -> float:
    return min(1.0, max(0.0, p))


def bernoulli(rng: np.random.Generator, p: float) -> bool:
    """True with probability p, clamped into [0, 1]."""
    return bool(rng.random() < clamp01(p))


def normal(rng: np.random.Generator, mean: float, std: float) -> float:
    _check_scale("Normal", std)
    return float(rng.normal(mean, std))


def skew_normal(rng: np.random.Generator, loc: float, scale: float, shape: float) -> float:
    """Skew-normal draw parameterized by location, scale and shape (alpha)."""
    _check_scale("Skew-normal", scale)
    return float(stats.skewnorm.rvs(shape, loc=loc, scale=scale, random_state=rng))


def exponential(rng: np.random.Generator, rate: float = 1.0) -> float:
    _check_scale("Exponential", rate)
    return float(rng.exponential(1.0 / rate))


def rounded(x: float) -> int:
    """Round half away from zero."""
    return int(np.sign(x) * np.floor(abs(x) + 0.5))
