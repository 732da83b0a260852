"""
Header row matching for transfer spreadsheets.
"""

# Standard Library
import json
import pathlib

# local repo modules
import warehouse_barcode_labels as wbl
import warehouse_barcode_labels.config
import warehouse_barcode_labels.errors


ColumnMap = wbl.config.ColumnMap
FIELD_SYNONYMS = wbl.config.FIELD_SYNONYMS
MissingColumnsError = wbl.errors.MissingColumnsError

ZERO_WIDTH_CHARS = ("\u200b", "\u200c", "\u200d", "\ufeff")


#============================================
def normalize_header(value: object) -> str:
	"""
	Normalize a header cell for synonym matching.

	Args:
		value: Raw cell value.

	Returns:
		Lowercased text with whitespace and zero-width characters removed.
	"""
	if value is None:
		return ""
	text = str(value).strip().lower()
	text = "".join(text.split())
	for char in ZERO_WIDTH_CHARS:
		text = text.replace(char, "")
	return text


#============================================
def find_column(normalized: list[str], synonyms: tuple[str, ...]) -> int:
	"""
	Return the first column containing any synonym, or -1.
	"""
	for index, header in enumerate(normalized):
		for synonym in synonyms:
			if synonym and synonym in header:
				return index
	return -1


#============================================
def resolve_headers(
	header_cells: list[object],
	synonyms: tuple[tuple[str, tuple[str, ...]], ...] = FIELD_SYNONYMS,
) -> ColumnMap:
	"""
	Resolve the name, code and quantity columns from the header row.

	Args:
		header_cells: Cells of the first spreadsheet row.
		synonyms: Ordered (field, synonyms) pairs.

	Returns:
		ColumnMap with the first matching index for each field.
	"""
	normalized = [normalize_header(cell) for cell in header_cells]
	indices: dict[str, int] = {}
	missing: list[str] = []
	for field, field_synonyms in synonyms:
		index = find_column(normalized, field_synonyms)
		if index == -1:
			missing.append(field)
		indices[field] = index
	if missing:
		raise MissingColumnsError(missing)
	return ColumnMap(
		name_index=indices[wbl.config.FIELD_NAME],
		code_index=indices[wbl.config.FIELD_CODE],
		quantity_index=indices[wbl.config.FIELD_QUANTITY],
	)


#============================================
def load_synonyms(path: pathlib.Path) -> tuple[tuple[str, tuple[str, ...]], ...]:
	"""
	Load synonym sets from a JSON file.

	The file holds an object mapping each field (name, code, quantity) to a
	list of header variants. Variants are normalized like header cells.

	Args:
		path: JSON file path.

	Returns:
		Ordered (field, synonyms) pairs.
	"""
	payload = json.loads(path.read_text(encoding="utf-8"))
	if not isinstance(payload, dict):
		raise ValueError(f"Synonym file must hold a JSON object: {path}")
	result = []
	for field, _defaults in FIELD_SYNONYMS:
		values = payload.get(field)
		if not isinstance(values, list):
			raise ValueError(f"Synonym file is missing a list for '{field}': {path}")
		normalized = tuple(
			normalize_header(value) for value in values if normalize_header(value)
		)
		if not normalized:
			raise ValueError(f"Synonym list for '{field}' is empty: {path}")
		result.append((field, normalized))
	return tuple(result)
