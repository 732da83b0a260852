"""
Shared configuration and constants.
"""

# Standard Library
import dataclasses


SCALE_MODE_WIDTH = "width"
SCALE_MODE_FIT = "fit"
SCALE_MODES = (SCALE_MODE_WIDTH, SCALE_MODE_FIT)

LABELS_PER_PAGE = 2

# Roll printer sheet measured from the production barcode.pdf
ROLL_PAGE_WIDTH = 565.0
ROLL_PAGE_HEIGHT = 141.0
ROLL_PADDING = 5.0

WIDE_PAGE_WIDTH = 2100.0
WIDE_PAGE_HEIGHT = 300.0
WIDE_PADDING = 3.0

CANVAS_WIDTH = 1000
CANVAS_HEIGHT = 250
BARCODE_WIDTH_RATIO = 0.98
BARCODE_HEIGHT = 140
BARCODE_TOP = 10
BARCODE_MODULE_WIDTH = 0.4
BARCODE_MODULE_HEIGHT = 15.0
BARCODE_QUIET_ZONE = 1.5
BARCODE_FALLBACK = "-"
CODE_TEXT_SIZE = 42
NAME_TEXT_SIZE = 28
CODE_LINE_GAP = 40
NAME_LINE_GAP = 38
NAME_WIDTH_RATIO = 0.9
ELLIPSIS = "\u2026"

FONT_REGULAR_CANDIDATES = ("DejaVuSans.ttf", "Arial.ttf", "arial.ttf", "Tahoma.ttf")
FONT_BOLD_CANDIDATES = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf", "tahomabd.ttf")

PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10

SUPPORTED_EXTENSIONS = (".xlsx", ".xlsm", ".csv")

FIELD_NAME = "name"
FIELD_CODE = "code"
FIELD_QUANTITY = "quantity"

# Evaluated in order; synonyms are compared against normalized headers
FIELD_SYNONYMS = (
	(FIELD_NAME, ("نامکالا", "ناممحصول", "productname", "itemname", "name")),
	(
		FIELD_CODE,
		("کدانبارکالا", "کدانبار", "کدکالا", "sku", "itemcode", "warehousecode", "code"),
	),
	(FIELD_QUANTITY, ("تعداد", "تیراژ", "تعدادلیبل", "quantity", "qty", "count")),
)


@dataclasses.dataclass(frozen=True)
class ParsedRow:
	name: str
	code: str
	quantity: int


@dataclasses.dataclass(frozen=True)
class LabelInstance:
	code: str
	name: str


@dataclasses.dataclass(frozen=True)
class LabelKey:
	code: str
	name: str


@dataclasses.dataclass(frozen=True)
class ColumnMap:
	name_index: int
	code_index: int
	quantity_index: int


@dataclasses.dataclass
class PageConfig:
	page_width: float
	page_height: float
	horizontal_padding: float
	vertical_padding: float
	scale_mode: str


@dataclasses.dataclass
class RasterConfig:
	canvas_width: int = CANVAS_WIDTH
	canvas_height: int = CANVAS_HEIGHT
	barcode_width_ratio: float = BARCODE_WIDTH_RATIO
	barcode_height: int = BARCODE_HEIGHT
	barcode_top: int = BARCODE_TOP
	code_text_size: int = CODE_TEXT_SIZE
	name_text_size: int = NAME_TEXT_SIZE
	code_line_gap: int = CODE_LINE_GAP
	name_line_gap: int = NAME_LINE_GAP
	name_width_ratio: float = NAME_WIDTH_RATIO
	resolution_scale: float = 1.0
	font_path: str | None = None
	bold_font_path: str | None = None


@dataclasses.dataclass(frozen=True)
class RasterizedLabel:
	png_bytes: bytes
	width: int
	height: int


@dataclasses.dataclass
class SlotPlacement:
	page_index: int
	slot: int
	x: float
	y: float
	width: float
	height: float
	key: LabelKey


@dataclasses.dataclass
class CompositionResult:
	pdf_bytes: bytes
	total_labels: int
	unique_labels: int
	cache_hits: int
	pages: int
	placements: list[SlotPlacement]


ROLL_PRESET = PageConfig(
	page_width=ROLL_PAGE_WIDTH,
	page_height=ROLL_PAGE_HEIGHT,
	horizontal_padding=ROLL_PADDING,
	vertical_padding=ROLL_PADDING,
	scale_mode=SCALE_MODE_WIDTH,
)

WIDE_PRESET = PageConfig(
	page_width=WIDE_PAGE_WIDTH,
	page_height=WIDE_PAGE_HEIGHT,
	horizontal_padding=WIDE_PADDING,
	vertical_padding=WIDE_PADDING,
	scale_mode=SCALE_MODE_FIT,
)

PAGE_PRESETS = {
	"roll": ROLL_PRESET,
	"wide": WIDE_PRESET,
}


#============================================
def validate_page_config(config: PageConfig) -> None:
	"""
	Check that a page geometry leaves room for two label slots.

	Args:
		config: Page configuration.
	"""
	if config.scale_mode not in SCALE_MODES:
		raise ValueError(f"Unknown scale mode: {config.scale_mode!r}")
	if config.page_width <= 0.0 or config.page_height <= 0.0:
		raise ValueError("Page width and height must be positive")
	if config.page_width / LABELS_PER_PAGE - 2.0 * config.horizontal_padding <= 0.0:
		raise ValueError("Horizontal padding leaves no room for a label")
	if config.scale_mode == SCALE_MODE_FIT:
		if config.page_height - 2.0 * config.vertical_padding <= 0.0:
			raise ValueError("Vertical padding leaves no room for a label")
