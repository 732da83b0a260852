"""
Label rasterization: barcode, code text and item name on one PNG.
"""

# Standard Library
import io
import typing
from collections.abc import Callable

# PIP3 modules
import arabic_reshaper
import barcode
import barcode.errors
import barcode.writer
import bidi.algorithm
import PIL.features
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont

# local repo modules
import warehouse_barcode_labels as wbl
import warehouse_barcode_labels.config
import warehouse_barcode_labels.errors


LabelInstance = wbl.config.LabelInstance
RasterConfig = wbl.config.RasterConfig
RasterizedLabel = wbl.config.RasterizedLabel
RenderSurfaceUnavailableError = wbl.errors.RenderSurfaceUnavailableError
InvalidBarcodeError = wbl.errors.InvalidBarcodeError

ELLIPSIS = wbl.config.ELLIPSIS
BARCODE_FALLBACK = wbl.config.BARCODE_FALLBACK
BARCODE_MODULE_WIDTH = wbl.config.BARCODE_MODULE_WIDTH
BARCODE_MODULE_HEIGHT = wbl.config.BARCODE_MODULE_HEIGHT
BARCODE_QUIET_ZONE = wbl.config.BARCODE_QUIET_ZONE
FONT_REGULAR_CANDIDATES = wbl.config.FONT_REGULAR_CANDIDATES
FONT_BOLD_CANDIDATES = wbl.config.FONT_BOLD_CANDIDATES

BACKGROUND_COLOR = "white"
TEXT_COLOR = "black"


class SurfaceProvider(typing.Protocol):
	def new_surface(self, width: int, height: int) -> PIL.Image.Image: ...


class PillowSurfaceProvider:
	"""
	Creates blank Pillow images to draw labels on.
	"""

	def new_surface(self, width: int, height: int) -> PIL.Image.Image:
		return PIL.Image.new("RGB", (width, height), BACKGROUND_COLOR)


#============================================
def truncate_text(text: str, max_width: float, measure: Callable[[str], float]) -> str:
	"""
	Shorten text with a trailing ellipsis until it fits a width budget.

	Args:
		text: Text to fit.
		max_width: Width budget.
		measure: Function returning the rendered width of a string.

	Returns:
		Original text when it fits, otherwise a shortened copy ending in an
		ellipsis. Empty when not even the ellipsis fits.
	"""
	if not text:
		return ""
	if measure(text) <= max_width:
		return text
	current = text
	while current and measure(current + ELLIPSIS) > max_width:
		current = current[:-1]
	if current:
		return current + ELLIPSIS
	if measure(ELLIPSIS) <= max_width:
		return ELLIPSIS
	return ""


#============================================
def load_font(
	font_path: str | None,
	candidates: tuple[str, ...],
	size: int,
) -> PIL.ImageFont.FreeTypeFont:
	"""
	Load a TrueType font, searching common system fonts when no path is given.

	Args:
		font_path: Explicit font file, or None.
		candidates: Font file names to try in order.
		size: Font size in pixels.

	Returns:
		Font instance.
	"""
	if font_path:
		return PIL.ImageFont.truetype(font_path, size)
	for candidate in candidates:
		try:
			return PIL.ImageFont.truetype(candidate, size)
		except OSError:
			continue
	return PIL.ImageFont.load_default(size=size)


#============================================
def text_direction() -> str | None:
	"""
	Right-to-left layout needs libraqm; plain layout is used without it.
	"""
	if PIL.features.check_feature("raqm"):
		return "rtl"
	return None


#============================================
def visual_text(text: str, direction: str | None) -> str:
	"""
	Prepare logical-order text for drawing.

	With libraqm Pillow shapes and orders right-to-left text itself. Without
	it, Arabic-script letters are joined with arabic_reshaper and the string
	is reordered for display with python-bidi.

	Args:
		text: Text in logical order.
		direction: Layout direction passed to Pillow.

	Returns:
		Text to hand to Pillow.
	"""
	if direction == "rtl" or not text:
		return text
	reshaped = arabic_reshaper.reshape(text)
	return bidi.algorithm.get_display(reshaped)


#============================================
def render_barcode(code: str, config: RasterConfig) -> PIL.Image.Image:
	"""
	Render a Code-128 symbol sized to the barcode box.

	Args:
		code: Value to encode; empty values encode a dash.
		config: Raster configuration.

	Returns:
		Barcode image no wider than the box and exactly the box height.
	"""
	scale = config.resolution_scale
	box_width = int(config.canvas_width * config.barcode_width_ratio * scale)
	box_height = int(config.barcode_height * scale)
	try:
		symbol = barcode.Code128(code or BARCODE_FALLBACK, writer=barcode.writer.ImageWriter())
		image = symbol.render(
			writer_options={
				"module_width": BARCODE_MODULE_WIDTH,
				"module_height": BARCODE_MODULE_HEIGHT,
				"quiet_zone": BARCODE_QUIET_ZONE,
				"write_text": False,
				"background": BACKGROUND_COLOR,
				"foreground": TEXT_COLOR,
			},
		)
	except barcode.errors.BarcodeError as error:
		raise InvalidBarcodeError(code, str(error)) from error
	target_width = min(image.width, box_width)
	return image.convert("RGB").resize((target_width, box_height), PIL.Image.NEAREST)


#============================================
def rasterize_label(
	label: LabelInstance,
	config: RasterConfig | None = None,
	provider: SurfaceProvider | None = None,
) -> RasterizedLabel:
	"""
	Draw one label into a PNG image.

	Layout from top to bottom: the barcode centered horizontally, the code in
	bold, then the item name truncated to the name width budget.

	Args:
		label: Label content.
		config: Raster configuration.
		provider: Surface provider creating the blank canvas.

	Returns:
		RasterizedLabel with PNG bytes and pixel size.
	"""
	if config is None:
		config = RasterConfig()
	if provider is None:
		provider = PillowSurfaceProvider()
	scale = config.resolution_scale
	width = int(config.canvas_width * scale)
	height = int(config.canvas_height * scale)

	try:
		canvas = provider.new_surface(width, height)
	except (OSError, ValueError, MemoryError) as error:
		raise RenderSurfaceUnavailableError(
			f"Could not create a {width}x{height} drawing surface: {error}"
		) from error
	if canvas is None:
		raise RenderSurfaceUnavailableError("The drawing surface is not available.")

	barcode_image = render_barcode(label.code, config)
	barcode_x = (width - barcode_image.width) // 2
	barcode_y = int(config.barcode_top * scale)
	canvas.paste(barcode_image, (barcode_x, barcode_y))
	barcode_bottom = barcode_y + barcode_image.height

	draw = PIL.ImageDraw.Draw(canvas)
	center_x = width / 2.0

	code_font = load_font(
		config.bold_font_path,
		FONT_BOLD_CANDIDATES,
		int(config.code_text_size * scale),
	)
	code_y = barcode_bottom + config.code_line_gap * scale
	draw.text((center_x, code_y), label.code, font=code_font, fill=TEXT_COLOR, anchor="ms")

	name_font = load_font(
		config.font_path,
		FONT_REGULAR_CANDIDATES,
		int(config.name_text_size * scale),
	)
	direction = text_direction()

	# truncation works on logical order; the ellipsis lands at the reading end
	def measure(value: str) -> float:
		return draw.textlength(visual_text(value, direction), font=name_font, direction=direction)

	max_name_width = width * config.name_width_ratio
	name_text = truncate_text(label.name, max_name_width, measure)
	name_y = code_y + config.name_line_gap * scale
	if name_text:
		draw.text(
			(center_x, name_y),
			visual_text(name_text, direction),
			font=name_font,
			fill=TEXT_COLOR,
			anchor="ms",
			direction=direction,
		)

	buffer = io.BytesIO()
	canvas.save(buffer, format="PNG")
	return RasterizedLabel(png_bytes=buffer.getvalue(), width=width, height=height)
