import io
import math

import pypdf
import pytest

import warehouse_barcode_labels.compose
import warehouse_barcode_labels.config
import warehouse_barcode_labels.errors


compose = warehouse_barcode_labels.compose
ParsedRow = warehouse_barcode_labels.config.ParsedRow
LabelInstance = warehouse_barcode_labels.config.LabelInstance
LabelKey = warehouse_barcode_labels.config.LabelKey
ROLL_PRESET = warehouse_barcode_labels.config.ROLL_PRESET
WIDE_PRESET = warehouse_barcode_labels.config.WIDE_PRESET
EPSILON = 0.001


class RecordingSink:
	"""
	Document sink that records pages and draw calls instead of writing a PDF.
	"""

	def __init__(self):
		self.pages: list[list[tuple]] = []
		self.embedded = 0

	def new_page(self) -> None:
		self.pages.append([])

	def embed_image(self, raster):
		self.embedded += 1
		return ("image", self.embedded)

	def draw_image(self, handle, x, y, width, height) -> None:
		self.pages[-1].append((handle, x, y, width, height))

	def finish(self) -> bytes:
		return b"%PDF-recorded"


#============================================
def test_expand_repeats_rows_in_order() -> None:
	"""
	Each row contributes quantity consecutive copies, rows in order.
	"""
	rows = [
		ParsedRow(name="Widget", code="W1", quantity=3),
		ParsedRow(name="Gadget", code="G1", quantity=1),
	]
	instances = compose.expand_labels(rows)
	assert instances == [
		LabelInstance(code="W1", name="Widget"),
		LabelInstance(code="W1", name="Widget"),
		LabelInstance(code="W1", name="Widget"),
		LabelInstance(code="G1", name="Gadget"),
	]


#============================================
def test_expand_count_matches_quantity_sum() -> None:
	rows = [ParsedRow(name=f"n{index}", code=f"c{index}", quantity=index) for index in range(1, 8)]
	assert len(compose.expand_labels(rows)) == sum(row.quantity for row in rows)


#============================================
def test_expand_tolerates_zero_quantity() -> None:
	"""
	A zero or negative quantity contributes nothing.
	"""
	rows = [
		ParsedRow(name="Zero", code="Z", quantity=0),
		ParsedRow(name="Minus", code="M", quantity=-1),
		ParsedRow(name="One", code="O", quantity=1),
	]
	assert compose.expand_labels(rows) == [LabelInstance(code="O", name="One")]


#============================================
def test_empty_input_fails_before_any_page() -> None:
	sink = RecordingSink()
	with pytest.raises(warehouse_barcode_labels.errors.NoLabelsError):
		compose.compose_labels_pdf([], ROLL_PRESET, sink=sink)
	assert sink.pages == []


#============================================
@pytest.mark.parametrize("total", [1, 2, 3, 4, 7, 10])
def test_pagination_two_per_page(total: int, counting_rasterizer) -> None:
	"""
	N labels need ceil(N / 2) pages; only the last page may hold one label.
	"""
	instances = [LabelInstance(code=f"C{index}", name="Item") for index in range(total)]
	sink = RecordingSink()
	result = compose.compose_labels_pdf(
		instances,
		ROLL_PRESET,
		rasterize=counting_rasterizer,
		sink=sink,
	)
	assert result.pages == math.ceil(total / 2)
	assert len(sink.pages) == result.pages
	for page in sink.pages[:-1]:
		assert len(page) == 2
	assert len(sink.pages[-1]) == (1 if total % 2 else 2)

	slots = [(placement.page_index, placement.slot) for placement in result.placements]
	assert slots == [(index // 2, index % 2) for index in range(total)]
	if total % 2:
		last = result.placements[-1]
		assert last.slot == 0
		assert last.x < ROLL_PRESET.page_width / 2


#============================================
def test_widget_row_scenario(counting_rasterizer) -> None:
	"""
	Three Widget labels fill one full page and half of a second one.
	"""
	instances = compose.expand_labels([ParsedRow(name="Widget", code="W1", quantity=3)])
	assert len(instances) == 3
	result = compose.compose_labels_pdf(
		instances,
		ROLL_PRESET,
		rasterize=counting_rasterizer,
		sink=RecordingSink(),
	)
	assert result.pages == 2
	assert len(counting_rasterizer.calls) == 1
	assert result.cache_hits == 2


#============================================
def test_identical_labels_rasterized_once(counting_rasterizer) -> None:
	"""
	Repeated (code, name) pairs reuse one cached raster and keep row order.
	"""
	rows = [
		ParsedRow(name="Bolt", code="B1", quantity=2),
		ParsedRow(name="Nut", code="N1", quantity=1),
		ParsedRow(name="Bolt", code="B1", quantity=2),
		ParsedRow(name="Bolt", code="B2", quantity=1),
	]
	instances = compose.expand_labels(rows)
	sink = RecordingSink()
	result = compose.compose_labels_pdf(
		instances,
		ROLL_PRESET,
		rasterize=counting_rasterizer,
		sink=sink,
	)
	assert result.unique_labels == 3
	assert len(counting_rasterizer.calls) == 3
	assert sink.embedded == 3
	assert result.cache_hits == len(instances) - 3
	assert [placement.key for placement in result.placements] == [
		LabelKey(code="B1", name="Bolt"),
		LabelKey(code="B1", name="Bolt"),
		LabelKey(code="N1", name="Nut"),
		LabelKey(code="B1", name="Bolt"),
		LabelKey(code="B1", name="Bolt"),
		LabelKey(code="B2", name="Bolt"),
	]
	handles = [call[0] for page in sink.pages for call in page]
	assert handles[0] == handles[1] == handles[3] == handles[4]


#============================================
def test_cache_does_not_leak_between_calls(counting_rasterizer) -> None:
	instances = [LabelInstance(code="W1", name="Widget")]
	compose.compose_labels_pdf(instances, ROLL_PRESET, rasterize=counting_rasterizer, sink=RecordingSink())
	compose.compose_labels_pdf(instances, ROLL_PRESET, rasterize=counting_rasterizer, sink=RecordingSink())
	assert len(counting_rasterizer.calls) == 2


#============================================
def test_width_mode_placement() -> None:
	"""
	Width scaling fills the slot width minus padding and centers vertically.
	"""
	x, y, width, height = compose.compute_slot_placement(0, 1000, 250, ROLL_PRESET)
	assert abs(x - 5.0) < EPSILON
	assert abs(width - 272.5) < EPSILON
	assert abs(height - 68.125) < EPSILON
	assert abs(y - (141.0 - 68.125) / 2.0) < EPSILON

	right_x, right_y, _, _ = compose.compute_slot_placement(1, 1000, 250, ROLL_PRESET)
	assert abs(right_x - (282.5 + 5.0)) < EPSILON
	assert abs(right_y - y) < EPSILON


#============================================
def test_fit_mode_respects_both_dimensions() -> None:
	"""
	Fit scaling keeps the image inside the padded slot in both directions.
	"""
	config = warehouse_barcode_labels.config.PageConfig(
		page_width=600.0,
		page_height=60.0,
		horizontal_padding=3.0,
		vertical_padding=3.0,
		scale_mode="fit",
	)
	for slot in (0, 1):
		x, y, width, height = compose.compute_slot_placement(slot, 1000, 250, config)
		base = slot * config.page_width / 2.0
		assert x >= base + config.horizontal_padding - EPSILON
		assert x + width <= base + config.page_width / 2.0 - config.horizontal_padding + EPSILON
		assert y >= config.vertical_padding - EPSILON
		assert y + height <= config.page_height - config.vertical_padding + EPSILON
		assert abs(width / height - 4.0) < EPSILON

	x, y, width, height = compose.compute_slot_placement(0, 1000, 250, WIDE_PRESET)
	assert abs(width - 1044.0) < EPSILON
	assert abs(height - 261.0) < EPSILON


#============================================
def test_invalid_page_config_is_rejected(counting_rasterizer) -> None:
	config = warehouse_barcode_labels.config.PageConfig(
		page_width=10.0,
		page_height=10.0,
		horizontal_padding=5.0,
		vertical_padding=0.0,
		scale_mode="width",
	)
	with pytest.raises(ValueError):
		compose.compose_labels_pdf(
			[LabelInstance(code="W1", name="Widget")],
			config,
			rasterize=counting_rasterizer,
			sink=RecordingSink(),
		)


#============================================
def test_real_pdf_pages_and_size() -> None:
	"""
	The ReportLab sink writes ceil(N / 2) pages of the configured size.
	"""
	instances = compose.expand_labels(
		[
			ParsedRow(name="Widget", code="W1", quantity=3),
			ParsedRow(name="Gadget", code="G1", quantity=2),
		]
	)
	result = compose.compose_labels_pdf(instances, ROLL_PRESET)
	assert result.pdf_bytes.startswith(b"%PDF")
	reader = pypdf.PdfReader(io.BytesIO(result.pdf_bytes))
	assert len(reader.pages) == 3
	for page in reader.pages:
		assert abs(float(page.mediabox.width) - ROLL_PRESET.page_width) < EPSILON
		assert abs(float(page.mediabox.height) - ROLL_PRESET.page_height) < EPSILON


#============================================
def test_build_labels_pdf_from_workbook(transfer_workbook) -> None:
	path = transfer_workbook(
		[
			["Item Name", "Warehouse Code", "Qty"],
			["Widget", "W1", 3],
			["Broken", "", 4],
			["Gadget", "G1", -2],
		]
	)
	result = compose.build_labels_pdf(path, WIDE_PRESET)
	assert result.total_labels == 3
	assert result.pages == 2
	reader = pypdf.PdfReader(io.BytesIO(result.pdf_bytes))
	assert len(reader.pages) == 2
	assert abs(float(reader.pages[0].mediabox.width) - WIDE_PRESET.page_width) < EPSILON
