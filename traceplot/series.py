from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Iterable, Protocol, Sequence, Tuple, Union, runtime_checkable

import numpy as np
import numpy.typing as npt

logger = logging.getLogger(__name__)

BIG_ENDIAN_F64 = np.dtype(">f8")


class SampleFileError(OSError):
  pass


@runtime_checkable
class XYSource(Protocol):
  """Anything with a length and an indexed (x, y) accessor."""

  def __len__(self) -> int: ...

  def xy(self, i: int) -> Tuple[float, float]: ...


def xy_arrays(source: XYSource) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
  """Return (xs, ys) float64 arrays for any XYSource."""
  fast = getattr(source, "xy_arrays", None)
  if callable(fast):
    return fast()
  n = len(source)
  xs = np.empty((n,), dtype=np.float64)
  ys = np.empty((n,), dtype=np.float64)
  for i in range(n):
    xs[i], ys[i] = source.xy(i)
  return xs, ys


class XYs:
  """Raw polyline: an ordered list of (x, y) points backed by an (N, 2) array."""

  def __init__(self, points: Union[npt.ArrayLike, Iterable[Sequence[float]]]):
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
      arr = arr.reshape((0, 2))
    if arr.ndim != 2 or arr.shape[1] != 2:
      raise ValueError(f"points must have shape (N, 2), got {arr.shape}")
    arr.setflags(write=False)
    self._pts = arr

  @classmethod
  def from_arrays(cls, xs: npt.ArrayLike, ys: npt.ArrayLike) -> "XYs":
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    if x.shape != y.shape or x.ndim != 1:
      raise ValueError("xs and ys must be 1-D arrays of equal length")
    return cls(np.column_stack((x, y)))

  def __len__(self) -> int:
    return int(self._pts.shape[0])

  def xy(self, i: int) -> Tuple[float, float]:
    x, y = self._pts[i]
    return float(x), float(y)

  def xy_arrays(self) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    return self._pts[:, 0], self._pts[:, 1]

  @property
  def points(self) -> npt.NDArray[np.float64]:
    return self._pts

  def reversed(self) -> "XYs":
    return XYs(self._pts[::-1])

  def __iter__(self):
    for x, y in self._pts:
      yield float(x), float(y)

  def __repr__(self) -> str:
    return f"XYs(len={len(self)})"


class SampleBuffer:
  """
  Time-series trace from an instrument with a fixed sample rate.
  x for sample i is i / sample_rate seconds, starting at 0.
  """

  def __init__(self, samples: npt.ArrayLike, sample_rate: float):
    if not math.isfinite(sample_rate) or sample_rate <= 0:
      raise ValueError("sample_rate must be a positive number")
    arr = np.array(samples, dtype=np.float64).reshape(-1)
    arr.setflags(write=False)
    self._samples = arr
    self._rate = float(sample_rate)

  @property
  def samples(self) -> npt.NDArray[np.float64]:
    return self._samples

  @property
  def sample_rate(self) -> float:
    return self._rate

  @property
  def duration(self) -> float:
    return len(self) / self._rate

  def __len__(self) -> int:
    return int(self._samples.shape[0])

  def xy(self, i: int) -> Tuple[float, float]:
    return float(i) / self._rate, float(self._samples[i])

  def xy_arrays(self) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    xs = np.arange(len(self), dtype=np.float64) / self._rate
    return xs, self._samples

  def __repr__(self) -> str:
    return f"SampleBuffer(len={len(self)}, sample_rate={self._rate:g})"


def load_sample_buffer(path: Union[str, Path], size: int, sample_rate: float) -> SampleBuffer:
  """
  Load `size` big-endian float64 values from a binary file.
  Raises FileNotFoundError for a missing file and SampleFileError on short reads.
  """
  if size < 0:
    raise ValueError("size must be non-negative")
  p = Path(path)
  with p.open("rb") as f:
    data = np.fromfile(f, dtype=BIG_ENDIAN_F64, count=size)
  if data.shape[0] < size:
    raise SampleFileError(f"{p}: expected {size} samples, got {data.shape[0]}")
  logger.info("Loaded %d samples from %s at %g Hz", size, p, sample_rate)
  return SampleBuffer(data.astype(np.float64), sample_rate)


def save_sample_buffer(path: Union[str, Path], samples: npt.ArrayLike) -> int:
  arr = np.asarray(samples, dtype=BIG_ENDIAN_F64).reshape(-1)
  Path(path).write_bytes(arr.tobytes())
  return int(arr.shape[0])
