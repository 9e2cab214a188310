from __future__ import annotations

import dataclasses
import logging
import math
from typing import List, Optional

from traceplot.config import TICK_DEFAULT_WIDTH
from traceplot.utils import format_si

logger = logging.getLogger(__name__)

# Widths are in points; 72 points per inch.
INCH = 72.0
TARGET_TICK_PITCH = INCH / 5
TARGET_LABEL_PITCH = INCH

MAJOR_INTERVALS = (2, 5, 10)


@dataclasses.dataclass(frozen=True)
class Tick:
  value: float
  label: str = ""

  @property
  def is_major(self) -> bool:
    return self.label != ""


@dataclasses.dataclass(frozen=True)
class TickPlan:
  spacing: float
  major_interval: int
  ticks: List[Tick]

  @property
  def major(self) -> List[Tick]:
    return [t for t in self.ticks if t.is_major]

  @property
  def values(self) -> List[float]:
    return [t.value for t in self.ticks]


def _round_half_away(v: float) -> float:
  return math.copysign(math.floor(abs(v) + 0.5), v)


def _pow10(exp: int) -> float:
  if exp >= 0:
    return 10.0 ** exp
  if exp < -308:
    # 10 ** -exp would overflow; go through the subnormal range
    return 10.0 ** exp
  return 1.0 / 10.0 ** -exp


def _scaled_span(vmin: float, vmax: float, unit: float) -> float:
  """(vmax - vmin) / unit, scaling first when the difference overflows."""
  span = vmax - vmin
  if math.isfinite(span):
    return span / unit
  return vmax / unit - vmin / unit


def select_major_interval(target: float) -> int:
  if target > 5:
    return 10
  if target > 2:
    return 5
  return 2


def plan_ticks(vmin: float, vmax: float, width: Optional[float] = None) -> TickPlan:
  """
  Pick a power-of-ten minor spacing for [vmin, vmax] drawn across `width`
  points, aiming at a minor tick every fifth of an inch and a label every
  inch. Labels land every 2, 5 or 10 minor ticks.

  Tick values are index * spacing, so the outer ticks cover the range only
  up to the floating-point rounding of that product.
  """
  if not (math.isfinite(vmin) and math.isfinite(vmax)):
    raise ValueError("tick range must be finite")
  if vmax < vmin:
    raise ValueError(f"tick range is not ascending: {vmin} > {vmax}")
  if width is not None and (not math.isfinite(width) or width < 0):
    raise ValueError("width must be a non-negative number")

  if vmin == vmax:
    return TickPlan(spacing=0.0, major_interval=MAJOR_INTERVALS[-1], ticks=[Tick(vmin, format_si(vmin))])

  dim = float(width) if width else float(TICK_DEFAULT_WIDTH)
  target_tick_count = dim / TARGET_TICK_PITCH
  target_spacing = _scaled_span(vmin, vmax, target_tick_count)
  if not math.isfinite(target_spacing):
    raise ValueError(f"tick range [{vmin:g}, {vmax:g}] is too wide for width {dim:g}")
  exponent = int(_round_half_away(math.log10(target_spacing)))
  spacing = _pow10(exponent)
  minor_count = _scaled_span(vmin, vmax, spacing)

  target_major_count = dim / TARGET_LABEL_PITCH
  interval = select_major_interval(_round_half_away(minor_count / target_major_count))

  lo = int(math.floor(vmin / spacing))
  hi = int(math.ceil(vmax / spacing))

  out: List[Tick] = []
  for i in range(lo, hi + 1):
    value = float(i) * spacing
    label = format_si(value) if i % interval == 0 else ""
    out.append(Tick(value, label))

  logger.debug("ticks [%g, %g] dim=%g: spacing=%g interval=%d count=%d", vmin, vmax, dim, spacing, interval, len(out))
  return TickPlan(spacing=spacing, major_interval=interval, ticks=out)


def ticks(vmin: float, vmax: float, width: Optional[float] = None) -> List[Tick]:
  return plan_ticks(vmin, vmax, width).ticks


@dataclasses.dataclass(frozen=True)
class AutoTicker:
  """Axis ticker bound to the drawing length of its axis (0 means default)."""
  dim: float = 0.0

  def ticks(self, vmin: float, vmax: float) -> List[Tick]:
    return plan_ticks(vmin, vmax, self.dim).ticks

  def plan(self, vmin: float, vmax: float) -> TickPlan:
    return plan_ticks(vmin, vmax, self.dim)
