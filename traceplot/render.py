from __future__ import annotations

import dataclasses
import logging
import math
from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np
import skia

from traceplot.downsample import aggregate
from traceplot.series import XYs, XYSource, xy_arrays
from traceplot.ticks import AutoTicker, Tick
from traceplot.utils import RGBA, half_alpha, parse_hex_color, to_skia_color

logger = logging.getLogger(__name__)

TRANSPARENT: RGBA = (0, 0, 0, 0)


class DrawingError(RuntimeError):
  pass


@dataclasses.dataclass(frozen=True)
class LineStyle:
  color: RGBA = (31, 119, 180, 255)
  width: float = 1.0


class DrawSurface(Protocol):
  """Drawing target; points are data coordinates, the surface maps them to pixels."""

  @property
  def width(self) -> float: ...

  @property
  def height(self) -> float: ...

  def draw_polyline(self, points: XYs, style: LineStyle) -> None: ...

  def fill_polygon(self, points: XYs, fill: RGBA, outline: Optional[LineStyle] = None) -> None: ...


def as_xys(source: XYSource) -> XYs:
  if isinstance(source, XYs):
    return source
  return XYs.from_arrays(*xy_arrays(source))


@dataclasses.dataclass
class QuantizedLine:
  """
  Line that collapses to a min/max envelope when it has more than two points
  per pixel of surface width. The envelope is filled with the line color at
  half opacity and bounded by the min and max lines at full opacity.
  Assumes the points are roughly evenly spread along x.
  """
  xys: XYSource
  style: LineStyle = dataclasses.field(default_factory=LineStyle)

  def plot(self, surface: DrawSurface) -> None:
    dx = int(surface.width)
    n = len(self.xys)

    if n <= dx * 2:
      logger.debug("plot raw: %d points over %d px", n, dx)
      surface.draw_polyline(as_xys(self.xys), self.style)
      return

    mins, maxes = aggregate(self.xys, dx)
    logger.debug("plot envelope: %d points into %d buckets over %d px", n, len(maxes), dx)

    # runs holding only NaN have no extent; the fill bridges over them
    keep = np.isfinite(mins.points).all(axis=1) & np.isfinite(maxes.points).all(axis=1)
    if np.count_nonzero(keep) >= 2:
      verts = XYs(np.concatenate((maxes.points[keep], mins.points[keep][::-1])))
      outline = LineStyle(color=TRANSPARENT, width=self.style.width)
      surface.fill_polygon(verts, half_alpha(self.style.color), outline)
    else:
      logger.debug("envelope fill skipped: %d finite buckets", int(np.count_nonzero(keep)))

    surface.draw_polyline(maxes, self.style)
    surface.draw_polyline(mins, self.style)


class SkiaSurface:
  """Maps data ranges onto a pixel rect of a skia canvas."""

  def __init__(self, canvas: skia.Canvas, rect: skia.Rect, x_range: Tuple[float, float],
               y_range: Tuple[float, float], antialias: bool = True):
    self.canvas = canvas
    self.rect = rect
    self.x_range = x_range
    self.y_range = y_range
    self.antialias = antialias

  @property
  def width(self) -> float:
    return float(self.rect.width())

  @property
  def height(self) -> float:
    return float(self.rect.height())

  def value_to_x(self, val: float) -> float:
    xmin, xmax = self.x_range
    if xmax <= xmin:
      return float(self.rect.left())
    return float(self.rect.left() + (val - xmin) / (xmax - xmin) * self.rect.width())

  def value_to_y(self, val: float) -> float:
    ymin, ymax = self.y_range
    if ymax <= ymin:
      return float(self.rect.bottom() - 1)
    return float(self.rect.bottom() - (val - ymin) / (ymax - ymin) * self.rect.height())

  def _path(self, points: XYs) -> skia.Path:
    path = skia.Path()
    first = True
    for x, y in points:
      px = self.value_to_x(x)
      py = self.value_to_y(y)
      if not (math.isfinite(px) and math.isfinite(py)):
        # NaN samples break the line
        first = True
        continue
      if first:
        path.moveTo(px, py)
        first = False
      else:
        path.lineTo(px, py)
    return path

  def draw_polyline(self, points: XYs, style: LineStyle) -> None:
    if len(points) == 0:
      return
    paint = skia.Paint(
      Style=skia.Paint.kStroke_Style,
      Color=to_skia_color(style.color),
      StrokeWidth=float(style.width),
      AntiAlias=self.antialias,
    )
    self.canvas.drawPath(self._path(points), paint)

  def fill_polygon(self, points: XYs, fill: RGBA, outline: Optional[LineStyle] = None) -> None:
    if len(points) < 3:
      raise DrawingError(f"polygon needs at least 3 vertices, got {len(points)}")
    if not np.all(np.isfinite(points.points)):
      raise DrawingError("polygon has non-finite vertices")

    path = skia.Path()
    x0, y0 = points.xy(0)
    path.moveTo(self.value_to_x(x0), self.value_to_y(y0))
    for i in range(1, len(points)):
      x, y = points.xy(i)
      path.lineTo(self.value_to_x(x), self.value_to_y(y))
    path.close()

    fill_paint = skia.Paint(Style=skia.Paint.kFill_Style, Color=to_skia_color(fill), AntiAlias=False)
    self.canvas.drawPath(path, fill_paint)

    if outline is not None and outline.color[3] > 0 and outline.width > 0:
      stroke_paint = skia.Paint(
        Style=skia.Paint.kStroke_Style,
        Color=to_skia_color(outline.color),
        StrokeWidth=float(outline.width),
        AntiAlias=self.antialias,
      )
      self.canvas.drawPath(path, stroke_paint)


@dataclasses.dataclass(frozen=True)
class RenderTheme:
  # Colors
  bg_color: RGBA = (255, 255, 255, 255)
  plot_bg_color: RGBA = (255, 255, 255, 255)
  major_grid_color: RGBA = (200, 200, 200, 255)
  minor_grid_color: RGBA = (235, 235, 235, 255)
  axis_color: RGBA = (130, 130, 130, 255)
  text_color: RGBA = (0, 0, 0, 255)

  # Fonts
  font_family: str = "DejaVu Sans Mono"
  font_size: float = 10.0

  # Grid
  grid_width: float = 1.0

  # Layout paddings
  padding_left: int = 48
  padding_right: int = 8
  padding_top: int = 8
  padding_bottom: int = 22

  # Axis ticks/labels
  tick_length: float = 4.0
  x_label_offset_dy: float = 10.0
  y_label_pad_left: float = 3.0
  y_label_baseline_dy: float = 4.0


@dataclasses.dataclass(frozen=True)
class Layout:
  width: int
  height: int
  padding_left: int
  padding_right: int
  padding_top: int
  padding_bottom: int

  @property
  def plot_rect(self) -> skia.Rect:
    l = self.padding_left
    t = self.padding_top
    r = self.width - self.padding_right
    b = self.height - self.padding_bottom
    return skia.Rect.MakeLTRB(float(l), float(t), float(r), float(b))


def data_limits(lines: Sequence[QuantizedLine]) -> Tuple[float, float, float, float]:
  xmin = ymin = math.inf
  xmax = ymax = -math.inf
  for line in lines:
    if len(line.xys) == 0:
      continue
    xs, ys = xy_arrays(line.xys)
    fx = xs[np.isfinite(xs)]
    fy = ys[np.isfinite(ys)]
    if fx.size:
      xmin = min(xmin, float(fx.min()))
      xmax = max(xmax, float(fx.max()))
    if fy.size:
      ymin = min(ymin, float(fy.min()))
      ymax = max(ymax, float(fy.max()))
  if not (math.isfinite(xmin) and math.isfinite(xmax)):
    xmin, xmax = 0.0, 1.0
  if not (math.isfinite(ymin) and math.isfinite(ymax)):
    ymin, ymax = 0.0, 1.0
  if xmax == xmin:
    xmin -= 1.0
    xmax += 1.0
  if ymax == ymin:
    ymin -= 1.0
    ymax += 1.0
  return xmin, xmax, ymin, ymax


def visible_ticks(tick_list: List[Tick], vmin: float, vmax: float) -> List[Tick]:
  eps = (vmax - vmin) * 1e-9
  return [t for t in tick_list if vmin - eps <= t.value <= vmax + eps]


class TraceRenderer:
  def __init__(self, theme: Optional[RenderTheme] = None):
    self.theme = theme or RenderTheme()

  def _make_layout(self, width: int, height: int) -> Layout:
    t = self.theme
    if width <= t.padding_left + t.padding_right or height <= t.padding_top + t.padding_bottom:
      raise ValueError(f"image too small for plot layout: {width}x{height}")
    return Layout(
      width=width,
      height=height,
      padding_left=t.padding_left,
      padding_right=t.padding_right,
      padding_top=t.padding_top,
      padding_bottom=t.padding_bottom,
    )

  def _grid_paint(self, major: bool) -> skia.Paint:
    color = self.theme.major_grid_color if major else self.theme.minor_grid_color
    return skia.Paint(Style=skia.Paint.kStroke_Style, Color=to_skia_color(color), StrokeWidth=self.theme.grid_width)

  def _draw_y_ticks_and_labels(self, canvas: skia.Canvas, surface: SkiaSurface, font: skia.Font):
    rect = surface.rect
    ymin, ymax = surface.y_range
    text_paint = skia.Paint(AntiAlias=True, Color=to_skia_color(self.theme.text_color))
    tick_list = visible_ticks(AutoTicker(surface.height).ticks(ymin, ymax), ymin, ymax)
    for tick in tick_list:
      y = surface.value_to_y(tick.value)
      canvas.drawLine(rect.left(), y, rect.right(), y, self._grid_paint(tick.is_major))
      if not tick.is_major:
        continue
      canvas.drawString(
        tick.label,
        rect.left() - float(self.theme.y_label_pad_left) - font.measureText(tick.label),
        y + float(self.theme.y_label_baseline_dy),
        font,
        text_paint
      )

  def _draw_x_ticks_and_labels(self, canvas: skia.Canvas, surface: SkiaSurface, font: skia.Font, image_width: int):
    rect = surface.rect
    xmin, xmax = surface.x_range
    text_paint = skia.Paint(AntiAlias=True, Color=to_skia_color(self.theme.text_color))
    tick_paint = skia.Paint(Style=skia.Paint.kStroke_Style, Color=to_skia_color(self.theme.axis_color), StrokeWidth=1.0)
    tick_list = visible_ticks(AutoTicker(surface.width).ticks(xmin, xmax), xmin, xmax)
    for tick in tick_list:
      px = surface.value_to_x(tick.value)
      canvas.drawLine(px, rect.top(), px, rect.bottom(), self._grid_paint(tick.is_major))
      if not tick.is_major:
        continue
      y1 = rect.bottom()
      y2 = y1 + self.theme.tick_length
      canvas.drawLine(px, y1, px, y2, tick_paint)
      w = font.measureText(tick.label)
      # keep edge labels inside the image
      lx = min(max(px - w / 2.0, 0.0), float(image_width) - w)
      canvas.drawString(tick.label, lx, y2 + float(self.theme.x_label_offset_dy), font, text_paint)

  def render_image(self, lines: Sequence[QuantizedLine], width: int, height: int) -> skia.Image:
    t = self.theme
    layout = self._make_layout(width, height)
    xmin, xmax, ymin, ymax = data_limits(lines)

    surface = skia.Surface(width, height)
    canvas = surface.getCanvas()
    canvas.clear(to_skia_color(t.bg_color))

    plot_rect = layout.plot_rect
    canvas.drawRect(plot_rect, skia.Paint(Color=to_skia_color(t.plot_bg_color)))

    font = skia.Font(skia.Typeface(t.font_family), t.font_size)
    plot = SkiaSurface(canvas, plot_rect, (xmin, xmax), (ymin, ymax))

    self._draw_y_ticks_and_labels(canvas, plot, font)
    self._draw_x_ticks_and_labels(canvas, plot, font, layout.width)

    canvas.save()
    canvas.clipRect(plot_rect)
    for line in lines:
      line.plot(plot)
    canvas.restore()

    axis_paint = skia.Paint(Style=skia.Paint.kStroke_Style, Color=to_skia_color(t.axis_color), StrokeWidth=t.grid_width)
    canvas.drawRect(plot_rect, axis_paint)

    return surface.makeImageSnapshot()

  def render_png(self, lines: Sequence[QuantizedLine], width: int, height: int) -> bytes:
    image = self.render_image(lines, width, height)
    data = image.encodeToData(skia.kPNG, 100)
    if data is None:
      raise DrawingError("PNG encoding failed")
    return bytes(data)


def line_for(source: XYSource, color_hex: str, width: float = 1.0) -> QuantizedLine:
  return QuantizedLine(source, LineStyle(color=parse_hex_color(color_hex), width=width))
