from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path

import numpy as np
from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(), override=False)

from traceplot.config import DEFAULT_LINE_COLOR, DEFAULT_SAMPLE_RATE, IMG_HEIGHT, IMG_WIDTH, LOG_LEVEL
from traceplot.downsample import bucket_size
from traceplot.logging_conf import setup_logging
from traceplot.render import TraceRenderer, line_for
from traceplot.series import SampleBuffer, load_sample_buffer

logger = logging.getLogger(__name__)


def _print_debug_trace(buf: SampleBuffer, width: int, plot_width: int):
  n = len(buf)
  finite = np.isfinite(buf.samples)
  nfin = int(finite.sum())
  print(f"DEBUG: samples={n} rate={buf.sample_rate:g}Hz duration={buf.duration:g}s finite={nfin}/{n}")
  if nfin:
    ysel = buf.samples[finite]
    print(f"  y[min={float(ysel.min()):.6g}, max={float(ysel.max()):.6g}]")
  if n > 2 * plot_width:
    per = bucket_size(n, plot_width)
    print(f"  image_width={width} plot_width={plot_width}: envelope, {per} samples per bucket")
  else:
    print(f"  image_width={width} plot_width={plot_width}: raw line")
  print("DEBUG END")


def main(argv=None) -> int:
  p = argparse.ArgumentParser(description="Render a binary float64 (big-endian) trace to PNG")
  p.add_argument("path", type=Path, help="Trace file with big-endian float64 samples")
  p.add_argument("--size", type=int, required=True, help="Number of samples to read")
  p.add_argument("--rate", type=float, default=DEFAULT_SAMPLE_RATE, help="Sample rate, samples per second")
  p.add_argument("--width", type=int, default=IMG_WIDTH, help="Image width")
  p.add_argument("--height", type=int, default=IMG_HEIGHT, help="Image height")
  p.add_argument("--color", default=DEFAULT_LINE_COLOR, help="Line color as RRGGBB hex")
  p.add_argument("--line-width", type=float, default=1.0)
  p.add_argument("--out", type=Path, default=Path("trace.png"))
  p.add_argument("--debug", action="store_true", help="Print trace and bucketing details")
  args = p.parse_args(argv)

  setup_logging("DEBUG" if args.debug else LOG_LEVEL)

  t0 = time.time()
  try:
    buf = load_sample_buffer(args.path, args.size, args.rate)
  except OSError as e:
    logger.error("Failed to load %s: %s", args.path, e)
    return 1
  t_load = time.time()

  renderer = TraceRenderer()
  if args.debug:
    plot_width = args.width - renderer.theme.padding_left - renderer.theme.padding_right
    _print_debug_trace(buf, args.width, plot_width)

  image = renderer.render_png([line_for(buf, args.color, args.line_width)], args.width, args.height)
  t_render = time.time()

  args.out.write_bytes(image)

  t1 = time.time()
  print(
    "load={:.1f}ms render+encode={:.1f}ms total={:.1f}ms size={:.1f}KB".format(
      1000 * (t_load - t0),
      1000 * (t_render - t_load),
      1000 * (t1 - t0),
      len(image) / 1024.0,
    )
  )
  print(f"Wrote {args.out}")
  return 0


if __name__ == "__main__":
  raise SystemExit(main())
