"""
Error kinds raised by the label pipeline.

Every error is fatal to the current build. Callers can branch on the class
or on the ``kind`` tag when showing a message to the user.
"""


class LabelPipelineError(Exception):
	kind = "label_pipeline"

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message


class MissingColumnsError(LabelPipelineError):
	kind = "missing_columns"

	def __init__(self, missing: list[str]):
		self.missing = list(missing)
		message = (
			"Required columns not found in the header row: "
			+ ", ".join(self.missing)
			+ ". Expected item name, warehouse code and quantity columns."
		)
		super().__init__(message)


class NoDataError(LabelPipelineError):
	kind = "no_data"


class NoValidRowsError(LabelPipelineError):
	kind = "no_valid_rows"

	def __init__(self, message: str | None = None):
		if message is None:
			message = (
				"No valid rows found for label generation "
				"(warehouse code must be filled and quantity greater than zero)."
			)
		super().__init__(message)


class NoLabelsError(LabelPipelineError):
	kind = "no_labels"

	def __init__(self, message: str | None = None):
		if message is None:
			message = "There are no labels to generate."
		super().__init__(message)


class RenderSurfaceUnavailableError(LabelPipelineError):
	kind = "render_surface_unavailable"


class InvalidBarcodeError(LabelPipelineError):
	kind = "invalid_barcode"

	def __init__(self, code: str, detail: str):
		self.code = code
		message = f"Warehouse code {code!r} cannot be encoded as a Code 128 barcode: {detail}"
		super().__init__(message)
