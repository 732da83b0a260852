"""
Label expansion and two-up page composition.
"""

# Standard Library
import functools
import io
import pathlib
import typing
from collections.abc import Callable

# PIP3 modules
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import warehouse_barcode_labels as wbl
import warehouse_barcode_labels.config
import warehouse_barcode_labels.errors
import warehouse_barcode_labels.raster
import warehouse_barcode_labels.rows


ParsedRow = wbl.config.ParsedRow
LabelInstance = wbl.config.LabelInstance
LabelKey = wbl.config.LabelKey
PageConfig = wbl.config.PageConfig
RasterConfig = wbl.config.RasterConfig
RasterizedLabel = wbl.config.RasterizedLabel
SlotPlacement = wbl.config.SlotPlacement
CompositionResult = wbl.config.CompositionResult
NoLabelsError = wbl.errors.NoLabelsError

LABELS_PER_PAGE = wbl.config.LABELS_PER_PAGE
SCALE_MODE_FIT = wbl.config.SCALE_MODE_FIT
FIELD_SYNONYMS = wbl.config.FIELD_SYNONYMS
ROLL_PRESET = wbl.config.ROLL_PRESET
PROGRESS_BAR_WIDTH = wbl.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = wbl.config.PROGRESS_UPDATE_EVERY


class DocumentSink(typing.Protocol):
	"""
	Page-oriented document builder that embeds each label image once.
	"""

	def new_page(self) -> None: ...

	def embed_image(self, raster: RasterizedLabel) -> typing.Any: ...

	def draw_image(self, handle: typing.Any, x: float, y: float, width: float, height: float) -> None: ...

	def finish(self) -> bytes: ...


class ReportLabDocumentSink:
	"""
	Builds the PDF with a ReportLab canvas held in memory.
	"""

	def __init__(self, page_width: float, page_height: float):
		self.buffer = io.BytesIO()
		self.pdf = reportlab.pdfgen.canvas.Canvas(
			self.buffer,
			pagesize=(page_width, page_height),
		)
		self.page_count = 0

	def new_page(self) -> None:
		if self.page_count > 0:
			self.pdf.showPage()
		self.page_count += 1

	def embed_image(self, raster: RasterizedLabel) -> reportlab.lib.utils.ImageReader:
		return reportlab.lib.utils.ImageReader(io.BytesIO(raster.png_bytes))

	def draw_image(
		self,
		handle: reportlab.lib.utils.ImageReader,
		x: float,
		y: float,
		width: float,
		height: float,
	) -> None:
		self.pdf.drawImage(
			handle,
			x,
			y,
			width=width,
			height=height,
			mask=None,
			preserveAspectRatio=False,
			anchor="sw",
		)

	def finish(self) -> bytes:
		self.pdf.save()
		return self.buffer.getvalue()


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def expand_labels(rows: list[ParsedRow]) -> list[LabelInstance]:
	"""
	Repeat each row once per unit of quantity.

	Args:
		rows: Parsed rows in input order.

	Returns:
		Label instances; a row's copies are consecutive and rows keep their order.
	"""
	instances: list[LabelInstance] = []
	for row in rows:
		for _ in range(max(0, row.quantity)):
			instances.append(LabelInstance(code=row.code, name=row.name))
	return instances


#============================================
def compute_slot_placement(
	slot: int,
	image_width: float,
	image_height: float,
	config: PageConfig,
) -> tuple[float, float, float, float]:
	"""
	Scale and position a label image inside a page slot.

	Args:
		slot: 0 for the left half of the page, 1 for the right half.
		image_width: Native image width in pixels.
		image_height: Native image height in pixels.
		config: Page configuration.

	Returns:
		Tuple of (x, y, width, height) in page units.
	"""
	slot_width = config.page_width / LABELS_PER_PAGE
	base_x = slot * slot_width
	available_width = slot_width - 2.0 * config.horizontal_padding
	scale = available_width / image_width
	if config.scale_mode == SCALE_MODE_FIT:
		available_height = config.page_height - 2.0 * config.vertical_padding
		scale = min(scale, available_height / image_height)
	scaled_width = image_width * scale
	scaled_height = image_height * scale
	x = base_x + config.horizontal_padding
	y = (config.page_height - scaled_height) / 2.0
	return (x, y, scaled_width, scaled_height)


#============================================
def compose_labels_pdf(
	instances: list[LabelInstance],
	page_config: PageConfig = ROLL_PRESET,
	raster_config: RasterConfig | None = None,
	rasterize: Callable[[LabelInstance], RasterizedLabel] | None = None,
	sink: DocumentSink | None = None,
	verbose: bool = False,
) -> CompositionResult:
	"""
	Lay out label instances two per page and serialize the PDF.

	Each distinct (code, name) pair is rasterized and embedded once; the
	cache lives only for this call and never needs invalidation because a
	label image depends on nothing but its key.

	Args:
		instances: Label instances in print order.
		page_config: Page geometry and scaling mode.
		raster_config: Raster configuration for the default rasterizer.
		rasterize: Function turning a label into a RasterizedLabel.
		sink: Document builder; a ReportLab sink is created when None.
		verbose: Print a progress bar while placing labels.

	Returns:
		CompositionResult.
	"""
	if not instances:
		raise NoLabelsError()
	wbl.config.validate_page_config(page_config)
	if rasterize is None:
		rasterize = functools.partial(wbl.raster.rasterize_label, config=raster_config)
	if sink is None:
		sink = ReportLabDocumentSink(page_config.page_width, page_config.page_height)

	cache: dict[LabelKey, tuple[RasterizedLabel, object]] = {}
	cache_hits = 0
	placements: list[SlotPlacement] = []
	page_index = -1
	slot = LABELS_PER_PAGE
	total = len(instances)
	if verbose:
		print_progress("Labels", 0, total)

	for index, label in enumerate(instances, start=1):
		if slot >= LABELS_PER_PAGE:
			sink.new_page()
			page_index += 1
			slot = 0

		key = LabelKey(code=label.code, name=label.name)
		if key in cache:
			cache_hits += 1
			raster, handle = cache[key]
		else:
			raster = rasterize(label)
			handle = sink.embed_image(raster)
			cache[key] = (raster, handle)

		x, y, width, height = compute_slot_placement(
			slot,
			raster.width,
			raster.height,
			page_config,
		)
		sink.draw_image(handle, x, y, width, height)
		placements.append(
			SlotPlacement(
				page_index=page_index,
				slot=slot,
				x=x,
				y=y,
				width=width,
				height=height,
				key=key,
			)
		)
		slot += 1
		if verbose and (index % PROGRESS_UPDATE_EVERY == 0 or index == total):
			print_progress("Labels", index, total)
	if verbose:
		print()

	pdf_bytes = sink.finish()
	return CompositionResult(
		pdf_bytes=pdf_bytes,
		total_labels=total,
		unique_labels=len(cache),
		cache_hits=cache_hits,
		pages=page_index + 1,
		placements=placements,
	)


#============================================
def build_labels_pdf(
	source: pathlib.Path | bytes,
	page_config: PageConfig = ROLL_PRESET,
	raster_config: RasterConfig | None = None,
	synonyms: tuple[tuple[str, tuple[str, ...]], ...] = FIELD_SYNONYMS,
	verbose: bool = False,
) -> CompositionResult:
	"""
	Run the whole pipeline from a transfer spreadsheet to PDF bytes.

	Args:
		source: Spreadsheet path or raw xlsx bytes.
		page_config: Page geometry and scaling mode.
		raster_config: Raster configuration.
		synonyms: Header synonym sets.
		verbose: Print a progress bar while placing labels.

	Returns:
		CompositionResult.
	"""
	rows = wbl.rows.parse_transfers(source, synonyms)
	instances = expand_labels(rows)
	return compose_labels_pdf(
		instances,
		page_config,
		raster_config=raster_config,
		verbose=verbose,
	)
