import logging
from dataclasses import dataclass
from io import BytesIO

from PIL import Image
from PIL import ImageDraw
from PIL import ImageFont
from starlette.concurrency import run_in_threadpool

from contribution_drawer.constants import CAPTURE_OVERSAMPLE
from contribution_drawer.constants import COLS
from contribution_drawer.constants import DAY_LABELS
from contribution_drawer.constants import EXPORT_FILENAME
from contribution_drawer.constants import EXPORT_HEIGHT
from contribution_drawer.constants import EXPORT_PADDING
from contribution_drawer.constants import EXPORT_WIDTH
from contribution_drawer.constants import MONTHS
from contribution_drawer.constants import PALETTE
from contribution_drawer.constants import ROWS
from contribution_drawer.models import Grid


logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)
LABEL_COLOR = (87, 96, 106)


class ExportError(Exception):
    """Raised when a grid image could not be produced."""


class CaptureFailure(ExportError):
    """Raised when rendering the grid to a raster fails."""


class DecodeFailure(ExportError):
    """Raised when a captured raster cannot be loaded back as an image."""


def hex_to_rgb(hx: str) -> tuple[int, int, int]:
    s = hx.strip().lstrip("#")
    if len(s) != 6:
        raise ValueError(f"Invalid hex color: {hx!r}")
    return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))


@dataclass(frozen=True)
class GridLayout:
    """Natural-size geometry of the rendered grid, in unscaled pixels."""

    margin: int = 8
    label_column: int = 28
    header_height: int = 15
    cell: int = 10
    gap: int = 3
    radius: int = 2
    legend_gap: int = 8
    font_size: int = 9

    @property
    def step(self) -> int:
        return self.cell + self.gap

    @property
    def width(self) -> int:
        return 2 * self.margin + self.label_column + COLS * self.step - self.gap

    @property
    def height(self) -> int:
        return (
            2 * self.margin
            + self.header_height
            + ROWS * self.step
            - self.gap
            + self.legend_gap
            + self.cell
        )

    @property
    def legend_top(self) -> int:
        return self.height - self.margin - self.cell

    def cell_origin(self, week: int, day: int) -> tuple[int, int]:
        x = self.margin + self.label_column + week * self.step
        y = self.margin + self.header_height + day * self.step
        return x, y


def grid_layout() -> GridLayout:
    return GridLayout()


@dataclass(frozen=True)
class CapturedRaster:
    """Encoded PNG of the grid at its (oversampled) natural size."""

    data: bytes
    width: int
    height: int


@dataclass(frozen=True)
class Placement:
    scale: float
    draw_width: float
    draw_height: float
    x: float
    y: float

    @property
    def box(self) -> tuple[int, int, int, int]:
        """Integer (left, top, width, height) used when pasting."""

        return (
            round(self.x),
            round(self.y),
            max(1, round(self.draw_width)),
            max(1, round(self.draw_height)),
        )


def load_label_font(
    size: int, font_path: str | None = None
) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load the label font, falling back to Pillow's bundled default.

    A missing or broken font file must never fail a capture.
    """

    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError:
            logger.warning("Could not load font %s, using the default font", font_path)
    return ImageFont.load_default(size=size)


def _draw_label(
    draw: ImageDraw.ImageDraw,
    x: float,
    center_y: float,
    text: str,
    font: ImageFont.FreeTypeFont | ImageFont.ImageFont,
) -> None:
    left, top, _, bottom = draw.textbbox((0, 0), text, font=font)
    draw.text(
        (x - left, center_y - (bottom - top) / 2 - top),
        text,
        fill=LABEL_COLOR,
        font=font,
    )


def render_grid(
    grid: Grid,
    *,
    oversample: int = CAPTURE_OVERSAMPLE,
    font: ImageFont.FreeTypeFont | ImageFont.ImageFont | None = None,
    layout: GridLayout | None = None,
) -> Image.Image:
    """Draw the grid, its labels and the legend onto an opaque white image."""

    if oversample < 1:
        raise ValueError("oversample must be at least 1")
    layout = layout or grid_layout()
    k = oversample
    if font is None:
        font = load_label_font(layout.font_size * k)

    image = Image.new("RGB", (layout.width * k, layout.height * k), WHITE)
    draw = ImageDraw.Draw(image)
    colors = [hex_to_rgb(hx) for hx in PALETTE]

    def cell_rect(x: int, y: int) -> list[int]:
        return [x * k, y * k, (x + layout.cell) * k - 1, (y + layout.cell) * k - 1]

    header_center = (layout.margin + layout.header_height / 2) * k
    for label, start, _span in MONTHS:
        x, _ = layout.cell_origin(start, 0)
        _draw_label(draw, x * k, header_center, label, font)

    for day, label in enumerate(DAY_LABELS):
        if not label:
            continue
        _, y = layout.cell_origin(0, day)
        _draw_label(draw, layout.margin * k, (y + layout.cell / 2) * k, label, font)

    for week in range(COLS):
        for day in range(ROWS):
            x, y = layout.cell_origin(week, day)
            draw.rounded_rectangle(
                cell_rect(x, y),
                radius=layout.radius * k,
                fill=colors[grid.get(week, day)],
            )

    # Legend, right aligned under the grid: "Less [swatches] More".
    legend_center = (layout.legend_top + layout.cell / 2) * k
    right = (layout.width - layout.margin) * k
    more_width = draw.textlength("More", font=font)
    less_width = draw.textlength("Less", font=font)
    swatches_right = right - more_width - layout.gap * 2 * k
    swatches_left = swatches_right - (len(colors) * layout.step - layout.gap) * k
    _draw_label(draw, right - more_width, legend_center, "More", font)
    _draw_label(
        draw, swatches_left - layout.gap * 2 * k - less_width, legend_center, "Less", font
    )
    for index, color in enumerate(colors):
        x0 = swatches_left + index * layout.step * k
        y0 = layout.legend_top * k
        draw.rounded_rectangle(
            [x0, y0, x0 + layout.cell * k - 1, y0 + layout.cell * k - 1],
            radius=layout.radius * k,
            fill=color,
        )

    return image


def capture_grid(
    grid: Grid,
    *,
    oversample: int = CAPTURE_OVERSAMPLE,
    font_path: str | None = None,
) -> CapturedRaster:
    """Render the grid at natural size times ``oversample`` and encode it."""

    layout = grid_layout()
    try:
        font = load_label_font(layout.font_size * oversample, font_path)
        image = render_grid(grid, oversample=oversample, font=font, layout=layout)
        buffer = BytesIO()
        image.save(buffer, format="PNG")
    except Exception as exc:
        raise CaptureFailure("Could not render the contribution grid") from exc

    return CapturedRaster(data=buffer.getvalue(), width=image.width, height=image.height)


def fit_content(
    captured_width: int,
    captured_height: int,
    *,
    width: int = EXPORT_WIDTH,
    height: int = EXPORT_HEIGHT,
    padding: int = EXPORT_PADDING,
) -> Placement:
    """Scale content uniformly into the padded target and center it."""

    if captured_width <= 0 or captured_height <= 0:
        raise ValueError("captured size must be positive")
    available_width = width - 2 * padding
    available_height = height - 2 * padding
    if available_width <= 0 or available_height <= 0:
        raise ValueError("padding leaves no room for content")

    scale = min(available_width / captured_width, available_height / captured_height)
    draw_width = captured_width * scale
    draw_height = captured_height * scale
    return Placement(
        scale=scale,
        draw_width=draw_width,
        draw_height=draw_height,
        x=(width - draw_width) / 2,
        y=(height - draw_height) / 2,
    )


def _decode(raster: CapturedRaster) -> Image.Image:
    try:
        source = Image.open(BytesIO(raster.data))
        source.load()
    except Exception as exc:
        raise DecodeFailure("Captured grid image could not be decoded") from exc

    if source.mode in ("RGBA", "LA", "PA") or "transparency" in source.info:
        background = Image.new("RGBA", source.size, WHITE + (255,))
        source = Image.alpha_composite(background, source.convert("RGBA"))
    return source.convert("RGB")


def compose_export(
    raster: CapturedRaster,
    *,
    width: int = EXPORT_WIDTH,
    height: int = EXPORT_HEIGHT,
    padding: int = EXPORT_PADDING,
) -> bytes:
    """Draw a captured raster onto a white ``width`` x ``height`` PNG."""

    source = _decode(raster)
    try:
        placement = fit_content(
            source.width, source.height, width=width, height=height, padding=padding
        )
        left, top, draw_width, draw_height = placement.box

        canvas = Image.new("RGB", (width, height), WHITE)
        scaled = source.resize((draw_width, draw_height), Image.Resampling.LANCZOS)
        canvas.paste(scaled, (left, top))
    except Exception as exc:
        raise ExportError("Could not compose the exported image") from exc

    buffer = BytesIO()
    try:
        canvas.save(buffer, format="PNG")
    except Exception as exc:
        raise ExportError("Could not encode the exported image") from exc
    return buffer.getvalue()


@dataclass(frozen=True)
class PendingExport:
    """An export whose raster is captured but not yet recomposed.

    Exporting is capture-then-recompose: the grid is rendered at its natural
    layout size (oversampled for sharpness) and encoded, like a screenshot of
    the on-screen grid, and ``resolve`` draws that raster uniformly scaled and
    centered onto a white canvas of the export size. Rendering straight at
    the export size would stretch or clip the grid whenever its aspect ratio
    differs from the canvas. Each pending export owns its raster, so several
    may resolve at once while the grid keeps changing.
    """

    raster: CapturedRaster
    width: int = EXPORT_WIDTH
    height: int = EXPORT_HEIGHT
    padding: int = EXPORT_PADDING
    filename: str = EXPORT_FILENAME

    async def resolve(self) -> bytes:
        return await run_in_threadpool(
            compose_export,
            self.raster,
            width=self.width,
            height=self.height,
            padding=self.padding,
        )


def request_export(
    grid: Grid,
    *,
    oversample: int = CAPTURE_OVERSAMPLE,
    font_path: str | None = None,
) -> PendingExport:
    """Capture ``grid`` now; recomposition happens in ``PendingExport.resolve``."""

    raster = capture_grid(grid, oversample=oversample, font_path=font_path)
    logger.debug("Captured grid raster %sx%s", raster.width, raster.height)
    return PendingExport(raster=raster)
