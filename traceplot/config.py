import os


def _int(val: str, default: int) -> int:
  try:
    return int(val)
  except (TypeError, ValueError):
    return default


def _float(val: str, default: float) -> float:
  try:
    return float(val)
  except (TypeError, ValueError):
    return default


# Axis length (points) assumed by the ticker when none is given
TICK_DEFAULT_WIDTH = _float(os.getenv("TRACEPLOT_TICK_DEFAULT_WIDTH", "800"), 800.0)

# Image defaults
IMG_WIDTH = _int(os.getenv("IMG_WIDTH", "800"), 800)
IMG_HEIGHT = _int(os.getenv("IMG_HEIGHT", "400"), 400)

# Trace defaults
DEFAULT_SAMPLE_RATE = _float(os.getenv("TRACEPLOT_SAMPLE_RATE", "1.0"), 1.0)
DEFAULT_LINE_COLOR = os.getenv("TRACEPLOT_LINE_COLOR", "1f77b4")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
