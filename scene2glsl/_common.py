"""Shared numpy helpers for the atom library and the expression evaluator.

This module provides:

* **Type alias**: :data:`_F`
* **Vector constructor**: :func:`vec2`
* **Math helpers**: :func:`length`, :func:`dot`, :func:`dot2`, :func:`clamp`,
  :func:`safe_div`
* **Reference combinators** mirroring what the compiler emits:
  :func:`opUnion`, :func:`opSubtraction`, :func:`opIntersection`,
  :func:`opSmoothUnion`, :func:`opSmoothSubtraction`,
  :func:`opSmoothIntersection`, :func:`opOnion`, :func:`opScale`

Not meant to be imported directly by end users.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------
_F = npt.NDArray[np.floating]

__all__ = [
    "_F",
    "vec2",
    "length", "dot", "dot2", "clamp", "safe_div",
    "opUnion", "opSubtraction", "opIntersection",
    "opSmoothUnion", "opSmoothSubtraction", "opSmoothIntersection",
    "opOnion", "opScale",
]


# ===========================================================================
# Vector constructor
# ===========================================================================

def vec2(x: _F, y: _F) -> _F:
    """Stack *x* and *y* into a ``(..., 2)`` array."""
    x, y = np.broadcast_arrays(x, y)
    return np.stack([x, y], axis=-1)


# ===========================================================================
# Math helpers
# ===========================================================================

def length(v: _F) -> _F:
    """Euclidean length along the last axis."""
    return np.linalg.norm(v, axis=-1)


def dot(a: _F, b: _F) -> _F:
    """Dot product along the last axis."""
    return np.sum(a * b, axis=-1)


def dot2(a: _F) -> _F:
    """Squared length: ``dot(a, a)``."""
    return dot(a, a)


def clamp(x: _F, lo: float | _F, hi: float | _F) -> _F:
    """Clamp *x* element-wise to ``[lo, hi]``."""
    return np.minimum(np.maximum(x, lo), hi)


def safe_div(n: _F, d: _F, eps: float = 1e-12) -> _F:
    """Division that avoids exact zero in the denominator."""
    return n / np.where(np.abs(d) < eps, np.sign(d) * eps + eps, d)


# ===========================================================================
# Reference combinators
# ===========================================================================

def opUnion(d1: _F, d2: _F) -> _F:
    """Union of two SDFs: ``min(d1, d2)``."""
    return np.minimum(d1, d2)


def opSubtraction(d1: _F, d2: _F) -> _F:
    """Subtract *d1* from *d2*: ``max(-d1, d2)``."""
    return np.maximum(-d1, d2)


def opIntersection(d1: _F, d2: _F) -> _F:
    """Intersection of two SDFs: ``max(d1, d2)``."""
    return np.maximum(d1, d2)


def opSmoothUnion(d1: _F, d2: _F, k: float) -> _F:
    """Polynomial smooth minimum with blend radius *k*."""
    h = np.maximum(k - np.abs(d1 - d2), 0.0)
    return np.minimum(d1, d2) - h * h * 0.25 / k


def opSmoothSubtraction(d1: _F, d2: _F, k: float) -> _F:
    """Smooth subtraction: ``max(-d1, d2)`` minus the blend over ``d1 + d2``."""
    h = np.maximum(k - np.abs(d1 + d2), 0.0)
    return np.maximum(-d1, d2) - h * h * 0.25 / k


def opSmoothIntersection(d1: _F, d2: _F, k: float) -> _F:
    """Smooth intersection: ``max(d1, d2)`` minus the blend over ``d2 - d1``."""
    h = np.maximum(k - np.abs(d2 - d1), 0.0)
    return np.maximum(d1, d2) - h * h * 0.25 / k


def opOnion(sdf_val: _F, thickness: float) -> _F:
    """Turn a solid into a shell of *thickness*."""
    return np.abs(sdf_val) - thickness


def opScale(p: _F, s: float, primitive) -> _F:
    """Uniformly scale a primitive by factor *s*."""
    return primitive(p / s) * s
