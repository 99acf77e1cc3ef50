"""Grid sampling utilities for compiled scenes."""

from __future__ import annotations

import logging
import os
from typing import Tuple

import numpy as np
import numpy.typing as npt

from .compiler import CompiledExpression

logger = logging.getLogger(__name__)

_Array = npt.NDArray[np.floating]
_Bounds2D = Tuple[Tuple[float, float], Tuple[float, float]]
_Resolution2D = Tuple[int, int]


def cell_centres(bounds: _Bounds2D, resolution: _Resolution2D) -> _Array:
    """``(ny, nx, 2)`` array of cell-centre coordinates, row-major (y first)."""
    (x0, x1), (y0, y1) = bounds
    nx, ny = resolution
    if nx <= 0 or ny <= 0:
        raise ValueError(f"resolution must be positive, got {resolution!r}")

    xs = np.linspace(x0, x1, nx, endpoint=False) + (x1 - x0) / (2.0 * nx)
    ys = np.linspace(y0, y1, ny, endpoint=False) + (y1 - y0) / (2.0 * ny)

    Y, X = np.meshgrid(ys, xs, indexing="ij")
    return np.stack([X, Y], axis=-1)


def sample_levelset_2d(
    compiled: CompiledExpression,
    bounds: _Bounds2D,
    resolution: _Resolution2D,
) -> _Array:
    """Sample *compiled* on a uniform 2-D cell-centred grid.

    Parameters
    ----------
    compiled:
        Result of :func:`~scene2glsl.compiler.compile_scene`.
    bounds:
        ``((x0, x1), (y0, y1))`` physical extents of the domain.
    resolution:
        ``(nx, ny)`` number of cells along each axis.

    Returns
    -------
    numpy.ndarray
        Shape ``(ny, nx)`` array of signed distances, row-major (y first).
    """
    p = cell_centres(bounds, resolution)
    logger.debug("sampling %dx%d grid over %s", resolution[0], resolution[1], bounds)
    phi = compiled.evaluate(p)
    return np.broadcast_to(phi, p.shape[:-1]).astype(float)


def save_npy(path: str, phi: _Array) -> None:
    """Save *phi* array to *path* (creates parent directories if needed)."""
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    np.save(path, phi)
