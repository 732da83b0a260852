"""
CLI entry points for spreadsheet to label PDF conversion.
"""

# Standard Library
import argparse
import dataclasses
import pathlib
import sys
import time

# local repo modules
import warehouse_barcode_labels as wbl
import warehouse_barcode_labels.compose
import warehouse_barcode_labels.config
import warehouse_barcode_labels.errors
import warehouse_barcode_labels.headers
import warehouse_barcode_labels.rows


PageConfig = wbl.config.PageConfig
RasterConfig = wbl.config.RasterConfig
LabelPipelineError = wbl.errors.LabelPipelineError

PAGE_PRESETS = wbl.config.PAGE_PRESETS
SCALE_MODES = wbl.config.SCALE_MODES
SUPPORTED_EXTENSIONS = wbl.config.SUPPORTED_EXTENSIONS


#============================================
def build_page_config(args: argparse.Namespace) -> PageConfig:
	"""
	Build page config from the chosen preset and CLI overrides.

	Args:
		args: Parsed argparse namespace.

	Returns:
		PageConfig.
	"""
	config = dataclasses.replace(PAGE_PRESETS[args.preset])
	if args.page_width is not None:
		config.page_width = args.page_width
	if args.page_height is not None:
		config.page_height = args.page_height
	if args.horizontal_padding is not None:
		config.horizontal_padding = args.horizontal_padding
	if args.vertical_padding is not None:
		config.vertical_padding = args.vertical_padding
	if args.scale_mode is not None:
		config.scale_mode = args.scale_mode
	wbl.config.validate_page_config(config)
	return config


#============================================
def build_raster_config(args: argparse.Namespace) -> RasterConfig:
	"""
	Build raster config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		RasterConfig.
	"""
	return RasterConfig(
		resolution_scale=args.resolution_scale,
		font_path=args.font_path,
		bold_font_path=args.bold_font_path,
	)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(
		description="Convert a warehouse transfer spreadsheet into a two-up barcode label PDF."
	)
	parser.add_argument("input", help="Spreadsheet file (.xlsx, .xlsm or .csv).")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output PDF path (default: input name with .pdf).")

	page_group = parser.add_argument_group("Page")
	page_group.add_argument("-p", "--preset", dest="preset", choices=sorted(PAGE_PRESETS), default="roll", help="Page geometry preset.")
	page_group.add_argument("-W", "--page-width", dest="page_width", type=float, default=None, help="Page width in points.")
	page_group.add_argument("-H", "--page-height", dest="page_height", type=float, default=None, help="Page height in points.")
	page_group.add_argument("-x", "--horizontal-padding", dest="horizontal_padding", type=float, default=None, help="Padding left and right of each label.")
	page_group.add_argument("-y", "--vertical-padding", dest="vertical_padding", type=float, default=None, help="Padding above and below each label.")
	page_group.add_argument("-s", "--scale-mode", dest="scale_mode", choices=SCALE_MODES, default=None, help="Fit label width only, or width and height.")

	label_group = parser.add_argument_group("Label")
	label_group.add_argument("-f", "--font", dest="font_path", default=None, help="TrueType font for the item name.")
	label_group.add_argument("-b", "--bold-font", dest="bold_font_path", default=None, help="TrueType font for the item code.")
	label_group.add_argument("-r", "--resolution-scale", dest="resolution_scale", type=float, default=1.0, help="Multiplier for the label raster size.")
	label_group.add_argument("-S", "--synonyms", dest="synonyms_path", default=None, help="JSON file with header synonyms.")

	args = parser.parse_args(argv)
	if pathlib.Path(args.input).suffix.lower() not in SUPPORTED_EXTENSIONS:
		parser.error(f"input must be one of: {', '.join(SUPPORTED_EXTENSIONS)}")
	if args.resolution_scale <= 0.0:
		parser.error("resolution scale must be positive")
	return args


#============================================
def run_pipeline(args: argparse.Namespace) -> wbl.config.CompositionResult:
	"""
	Run the full pipeline from spreadsheet input to PDF output.

	Args:
		args: Parsed argparse namespace.

	Returns:
		CompositionResult.
	"""
	input_path = pathlib.Path(args.input)
	output_path = pathlib.Path(args.output_path or input_path.with_suffix(".pdf"))
	page_config = build_page_config(args)
	raster_config = build_raster_config(args)
	synonyms = wbl.config.FIELD_SYNONYMS
	if args.synonyms_path:
		synonyms = wbl.headers.load_synonyms(pathlib.Path(args.synonyms_path))

	print("Transfer spreadsheet to barcode labels")
	print(f"Input: {input_path}")
	print(f"Output PDF: {output_path}")
	print(f"Page: {page_config.page_width:g} x {page_config.page_height:g}")
	print(
		f"Padding: {page_config.horizontal_padding:g} / {page_config.vertical_padding:g}"
	)
	print(f"Scale mode: {page_config.scale_mode}")
	if args.synonyms_path:
		print(f"Synonyms: {args.synonyms_path}")

	start_time = time.perf_counter()
	rows = wbl.rows.parse_transfers(input_path, synonyms)
	parse_end = time.perf_counter()
	print(f"Rows accepted: {len(rows)}")

	instances = wbl.compose.expand_labels(rows)
	print(f"Labels to print: {len(instances)}")

	result = wbl.compose.compose_labels_pdf(
		instances,
		page_config,
		raster_config=raster_config,
		verbose=True,
	)
	compose_end = time.perf_counter()
	output_path.write_bytes(result.pdf_bytes)

	print(f"Unique label images: {result.unique_labels}")
	print(f"Pages written: {result.pages}")
	total_time = time.perf_counter() - start_time
	print(
		"Timing: parse={:.2f}s compose={:.2f}s total={:.2f}s".format(
			parse_end - start_time,
			compose_end - parse_end,
			total_time,
		)
	)
	return result


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Main entry point.

	Returns:
		Process exit status.
	"""
	args = parse_args(argv)
	try:
		run_pipeline(args)
	except LabelPipelineError as error:
		print(f"Error ({error.kind}): {error.message}", file=sys.stderr)
		return 1
	except (ValueError, OSError) as error:
		print(f"Error: {error}", file=sys.stderr)
		return 1
	return 0
