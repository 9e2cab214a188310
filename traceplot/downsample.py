from __future__ import annotations

from typing import Tuple

import numpy as np
import numpy.typing as npt

from traceplot.series import XYs, XYSource, xy_arrays


def bucket_size(length: int, n: int) -> int:
  """Indices per bucket when `length` samples are squeezed into `n` columns."""
  if length <= 0:
    raise ValueError("source must not be empty")
  if n <= 0:
    raise ValueError("bucket count must be positive")
  return -(-length // n)


def bucket_starts(length: int, n: int) -> npt.NDArray[np.int64]:
  return np.arange(0, length, bucket_size(length, n), dtype=np.int64)


def aggregate(source: XYSource, n: int) -> Tuple[XYs, XYs]:
  """
  Reduce a source into min/max pairs, one per run of ceil(len/n) indices.
  Each pair takes the x of the first index in its run. Assumes x is
  non-decreasing and roughly evenly spaced in index space.
  Returns (mins, maxes).
  """
  length = len(source)
  starts = bucket_starts(length, n)
  xs, ys = xy_arrays(source)
  ys = np.asarray(ys, dtype=np.float64)

  # reduceat over the run starts; the last run may be shorter.
  # fmin/fmax skip NaN samples; a run of only NaN stays NaN.
  y_min = np.fmin.reduceat(ys, starts)
  y_max = np.fmax.reduceat(ys, starts)
  x = np.asarray(xs, dtype=np.float64)[starts]

  return XYs.from_arrays(x, y_min), XYs.from_arrays(x, y_max)
