"""
Spreadsheet reading and row normalization.
"""

# Standard Library
import csv
import io
import math
import pathlib

# PIP3 modules
import openpyxl

# local repo modules
import warehouse_barcode_labels as wbl
import warehouse_barcode_labels.config
import warehouse_barcode_labels.errors
import warehouse_barcode_labels.headers


ParsedRow = wbl.config.ParsedRow
ColumnMap = wbl.config.ColumnMap
FIELD_SYNONYMS = wbl.config.FIELD_SYNONYMS
NoDataError = wbl.errors.NoDataError
NoValidRowsError = wbl.errors.NoValidRowsError


#============================================
def is_blank_row(row: list[object]) -> bool:
	"""
	Check whether every cell in a row is empty.
	"""
	for value in row:
		if value is None:
			continue
		if isinstance(value, str) and not value.strip():
			continue
		return False
	return True


#============================================
def read_workbook_rows(source: pathlib.Path | bytes) -> list[list[object]]:
	"""
	Read the first worksheet of an xlsx workbook.

	Args:
		source: Workbook path or raw workbook bytes.

	Returns:
		Rows as lists of cell values.
	"""
	if isinstance(source, (bytes, bytearray)):
		handle = io.BytesIO(source)
	else:
		handle = str(source)
	workbook = openpyxl.load_workbook(handle, read_only=True, data_only=True)
	try:
		if not workbook.worksheets:
			raise NoDataError("The spreadsheet has no sheets.")
		worksheet = workbook.worksheets[0]
		rows = [list(row) for row in worksheet.iter_rows(values_only=True)]
	finally:
		workbook.close()
	return rows


#============================================
def read_csv_rows(path: pathlib.Path) -> list[list[object]]:
	"""
	Read a CSV file into rows of strings.

	Args:
		path: CSV path.

	Returns:
		Rows as lists of cell values.
	"""
	with path.open("r", encoding="utf-8-sig", newline="") as handle:
		return [list(row) for row in csv.reader(handle)]


#============================================
def read_sheet_rows(source: pathlib.Path | bytes) -> list[list[object]]:
	"""
	Read the first sheet of a spreadsheet.

	Trailing blank rows are dropped, so a sheet holding only empty cells
	counts as having no rows.

	Args:
		source: Spreadsheet path (.xlsx, .xlsm, .csv) or raw xlsx bytes.

	Returns:
		Rows as lists of cell values, header row first.
	"""
	if isinstance(source, (bytes, bytearray)):
		rows = read_workbook_rows(source)
	else:
		path = pathlib.Path(source)
		if path.suffix.lower() == ".csv":
			rows = read_csv_rows(path)
		else:
			rows = read_workbook_rows(path)
	while rows and is_blank_row(rows[-1]):
		rows.pop()
	if not rows:
		raise NoDataError("The spreadsheet is empty.")
	return rows


#============================================
def cell_to_text(value: object) -> str:
	"""
	Convert a cell value to trimmed text.

	Args:
		value: Raw cell value.

	Returns:
		Text value, empty for missing cells.
	"""
	if value is None:
		return ""
	if isinstance(value, float) and math.isfinite(value) and value.is_integer():
		return str(int(value))
	return str(value).strip()


#============================================
def parse_quantity(value: object) -> int:
	"""
	Parse a quantity cell into a whole label count.

	Args:
		value: Raw cell value.

	Returns:
		Floored positive count, or 0 for anything unusable.
	"""
	if value is None or isinstance(value, bool):
		return 0
	if isinstance(value, (int, float)):
		number = float(value)
	else:
		text = str(value).strip()
		if not text:
			return 0
		try:
			number = float(text)
		except ValueError:
			return 0
	if not math.isfinite(number) or number <= 0.0:
		return 0
	return math.floor(number)


#============================================
def get_cell(row: list[object], index: int) -> object:
	if index < len(row):
		return row[index]
	return None


#============================================
def normalize_rows(rows: list[list[object]], column_map: ColumnMap) -> list[ParsedRow]:
	"""
	Convert data rows into validated ParsedRow records.

	Args:
		rows: Data rows (header excluded).
		column_map: Resolved column indices.

	Returns:
		ParsedRow list in input order.
	"""
	parsed: list[ParsedRow] = []
	for row in rows:
		if not row:
			continue
		name = cell_to_text(get_cell(row, column_map.name_index))
		code = cell_to_text(get_cell(row, column_map.code_index))
		quantity = parse_quantity(get_cell(row, column_map.quantity_index))

		if not name and not code and quantity == 0:
			continue
		# no label without a warehouse code
		if not code:
			continue
		if quantity <= 0:
			continue

		parsed.append(ParsedRow(name=name or code, code=code, quantity=quantity))

	if not parsed:
		raise NoValidRowsError()
	return parsed


#============================================
def parse_transfers(
	source: pathlib.Path | bytes,
	synonyms: tuple[tuple[str, tuple[str, ...]], ...] = FIELD_SYNONYMS,
) -> list[ParsedRow]:
	"""
	Parse a transfer spreadsheet into label rows.

	Args:
		source: Spreadsheet path or raw xlsx bytes.
		synonyms: Ordered (field, synonyms) pairs for header matching.

	Returns:
		ParsedRow list.
	"""
	rows = read_sheet_rows(source)
	column_map = wbl.headers.resolve_headers(rows[0], synonyms)
	return normalize_rows(rows[1:], column_map)
