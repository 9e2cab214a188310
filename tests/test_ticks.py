from __future__ import annotations

import math
import unittest
from typing import List

from traceplot.ticks import AutoTicker, Tick, plan_ticks, select_major_interval, ticks
from traceplot.utils import format_si


def expected_ticks(vmin: float, vmax: float, spacing: float, interval: int) -> List[Tick]:
  if spacing == 0:
    return [Tick(vmin, format_si(vmin))]
  out: List[Tick] = []
  lo = int(math.copysign(math.floor(abs(vmin / spacing) + 0.5), vmin / spacing))
  hi = int(math.copysign(math.floor(abs(vmax / spacing) + 0.5), vmax / spacing))
  for i in range(lo, hi + 1):
    value = float(i) * spacing
    out.append(Tick(value, format_si(value) if i % interval == 0 else ""))
  return out


# (width, min, max, tick_min, tick_max, spacing, major_interval)
FIXTURES = [
  (0, 0, 0, 0, 0, 0, 0),
  (0, 0, 1, 0, 1, 0.01, 10),
  (0, -1, 1, -1, 1, 0.1, 2),
  (100, 0, 0.9, 0, 0.9, 0.1, 10),
  (123, 0, 1.5, 0, 1.5, 0.1, 10),
  (80, -1, 1, -1, 1, 1, 10),
  (105, 0.5, 10, 0, 10, 1, 10),
  (305, -1, 0, -1, 0, 0.1, 2),
  (928, -10, 0, -10, 0, 0.1, 10),
  (1294, -12.6, -5, -12.6, -5, 0.1, 5),
]


class TickPlannerTests(unittest.TestCase):
  def test_fixture_table(self) -> None:
    for width, vmin, vmax, tmin, tmax, spacing, interval in FIXTURES:
      with self.subTest(width=width, vmin=vmin, vmax=vmax):
        got = AutoTicker(width).ticks(vmin, vmax)
        self.assertEqual(got, expected_ticks(tmin, tmax, spacing, interval))

  def test_degenerate_range_returns_single_labeled_tick(self) -> None:
    self.assertEqual(ticks(5, 5, 100), [Tick(5, "5")])
    plan = plan_ticks(5, 5, 100)
    self.assertEqual(plan.spacing, 0.0)
    self.assertEqual(len(plan.major), 1)

  def test_symmetric_unit_range_at_80(self) -> None:
    plan = plan_ticks(-1, 1, 80)
    self.assertEqual(plan.spacing, 1.0)
    self.assertEqual(plan.values, [-1.0, 0.0, 1.0])
    self.assertEqual([t.label for t in plan.ticks], ["", "0", ""])

  def test_default_width_unit_range(self) -> None:
    plan = plan_ticks(0, 1, 0)
    self.assertEqual(plan.spacing, 0.01)
    self.assertEqual(plan.major_interval, 10)
    self.assertEqual(len(plan.ticks), 101)
    self.assertEqual(plan.major[1].label, "100 m")
    self.assertEqual(plan.major[-1].label, "1")

  def test_none_width_matches_zero_width(self) -> None:
    self.assertEqual(plan_ticks(0, 1, None), plan_ticks(0, 1, 0))

  def test_spacing_is_power_of_ten_and_covers_range(self) -> None:
    cases = [
      (0.0, 1e-6, 50), (3.0, 7.0, 640), (-1e9, 2e9, 1200), (0.001, 0.0013, 300),
      (-42.0, 17.5, 90), (12345.0, 12399.0, 800), (-0.5, 0.5, 10),
    ]
    for vmin, vmax, width in cases:
      with self.subTest(vmin=vmin, vmax=vmax, width=width):
        plan = plan_ticks(vmin, vmax, width)
        k = math.log10(plan.spacing)
        self.assertAlmostEqual(k, round(k), places=9)
        tol = plan.spacing * 1e-9
        self.assertLessEqual(plan.ticks[0].value, vmin + tol)
        self.assertGreaterEqual(plan.ticks[-1].value, vmax - tol)
        self.assertIn(plan.major_interval, (2, 5, 10))

  def test_ticks_ascend_with_constant_index_step(self) -> None:
    plan = plan_ticks(-3.3, 8.1, 500)
    steps = [round((b.value - a.value) / plan.spacing) for a, b in zip(plan.ticks, plan.ticks[1:])]
    self.assertTrue(all(s == 1 for s in steps))

  def test_major_ticks_fall_on_interval_multiples(self) -> None:
    plan = plan_ticks(0, 1, 0)
    for t in plan.ticks:
      index = round(t.value / plan.spacing)
      self.assertEqual(t.is_major, index % plan.major_interval == 0)

  def test_major_interval_thresholds(self) -> None:
    self.assertEqual(select_major_interval(0), 2)
    self.assertEqual(select_major_interval(2), 2)
    self.assertEqual(select_major_interval(3), 5)
    self.assertEqual(select_major_interval(5), 5)
    self.assertEqual(select_major_interval(6), 10)
    self.assertEqual(select_major_interval(40), 10)

  def test_rejects_descending_range(self) -> None:
    with self.assertRaises(ValueError):
      plan_ticks(2, 1, 100)

  def test_rejects_non_finite_range(self) -> None:
    with self.assertRaises(ValueError):
      plan_ticks(0, math.inf, 100)
    with self.assertRaises(ValueError):
      plan_ticks(math.nan, 1, 100)

  def test_full_float_range_does_not_overflow(self) -> None:
    plan = plan_ticks(-1e308, 1e308, 100)
    self.assertEqual(plan.spacing, 1e307)
    self.assertEqual(plan.major_interval, 10)
    self.assertTrue(all(math.isfinite(v) for v in plan.values))
    tol = plan.spacing * 1e-9
    self.assertLessEqual(plan.ticks[0].value, -1e308 + tol)
    self.assertGreaterEqual(plan.ticks[-1].value, 1e308 - tol)

  def test_rejects_range_too_wide_for_width(self) -> None:
    with self.assertRaises(ValueError):
      plan_ticks(-1e308, 1e308, 1)

  def test_subnormal_range(self) -> None:
    plan = plan_ticks(0.0, 1e-320, 800)
    self.assertGreater(plan.spacing, 0.0)
    self.assertLessEqual(plan.ticks[0].value, 0.0)
    self.assertGreaterEqual(plan.ticks[-1].value, 1e-320)

  def test_coverage_holds_up_to_rounding(self) -> None:
    plan = plan_ticks(-2.0, -1.4, 0)
    self.assertEqual(plan.spacing, 0.01)
    self.assertAlmostEqual(plan.ticks[0].value, -2.0, places=12)
    self.assertAlmostEqual(plan.ticks[-1].value, -1.4, places=12)
    self.assertEqual(len(plan.ticks), 61)

  def test_rejects_negative_width(self) -> None:
    with self.assertRaises(ValueError):
      plan_ticks(0, 1, -10)


if __name__ == "__main__":
  unittest.main()
