from __future__ import annotations

import argparse
import json

from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(), override=False)

from traceplot.ticks import TickPlan, plan_ticks


def _plan_to_dict(plan: TickPlan) -> dict:
  return {
    "spacing": plan.spacing,
    "major_interval": plan.major_interval,
    "ticks": [{"value": t.value, "label": t.label} for t in plan.ticks],
  }


def main(argv=None) -> int:
  p = argparse.ArgumentParser(description="Print the axis tick plan for a numeric range")
  p.add_argument("min", type=float)
  p.add_argument("max", type=float)
  p.add_argument("--width", type=float, default=0.0, help="Axis length in points (0 = default)")
  p.add_argument("--json", action="store_true", help="Emit JSON")
  args = p.parse_args(argv)

  try:
    plan = plan_ticks(args.min, args.max, args.width)
  except ValueError as e:
    p.error(str(e))

  if args.json:
    print(json.dumps(_plan_to_dict(plan), ensure_ascii=False, indent=2))
    return 0

  print(f"spacing={plan.spacing:g} major_interval={plan.major_interval} count={len(plan.ticks)}")
  for t in plan.ticks:
    mark = "*" if t.is_major else " "
    print(f"{mark} {t.value:.12g}\t{t.label}")
  return 0


if __name__ == "__main__":
  raise SystemExit(main())
