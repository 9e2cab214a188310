import math
from typing import Tuple

import skia

RGBA = Tuple[int, int, int, int]

SI_PREFIXES = {
  -30: "q", -27: "r", -24: "y", -21: "z", -18: "a", -15: "f", -12: "p", -9: "n", -6: "µ", -3: "m",
  0: "",
  3: "k", 6: "M", 9: "G", 12: "T", 15: "P", 18: "E", 21: "Z", 24: "Y", 27: "R", 30: "Q",
}


def compute_si(value: float) -> Tuple[float, str]:
  """Scale value by a power of 1000 and return (scaled, prefix)."""
  if value == 0:
    return 0.0, ""
  mag = abs(value)
  exponent = math.floor(math.log10(mag))
  exponent = int(math.floor(exponent / 3) * 3)
  exponent = max(-30, min(30, exponent))
  scaled = mag / 10.0 ** exponent
  # 1000 k reads as 1 M
  if scaled == 1000.0 and exponent < 30:
    exponent += 3
    scaled = mag / 10.0 ** exponent
  return math.copysign(scaled, value), SI_PREFIXES[exponent]


def ftoa(value: float, decimals: int = 6) -> str:
  out = f"{value:.{decimals}f}"
  if "." in out:
    out = out.rstrip("0").rstrip(".")
  if out == "-0":
    out = "0"
  return out


def format_si(value: float, unit: str = "") -> str:
  if not math.isfinite(value):
    return str(value)
  scaled, prefix = compute_si(value)
  suffix = prefix + unit
  if not suffix:
    return ftoa(scaled)
  return f"{ftoa(scaled)} {suffix}"


def parse_hex_color(color_hex: str, alpha: int = 255) -> RGBA:
  s = color_hex.strip().lstrip("#")
  if len(s) not in (6, 8):
    raise ValueError(f"Invalid color: {color_hex!r}")
  r = int(s[0:2], 16)
  g = int(s[2:4], 16)
  b = int(s[4:6], 16)
  a = int(s[6:8], 16) if len(s) == 8 else alpha
  return r, g, b, a


def half_alpha(color: RGBA) -> RGBA:
  r, g, b, a = color
  return r, g, b, a // 2


def to_skia_color(color: RGBA) -> int:
  r, g, b, a = color
  return skia.ColorSetARGB(a, r, g, b)
