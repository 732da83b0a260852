"""
Pytest configuration: local imports and shared spreadsheet fixtures.
"""

# Standard Library
import os
import pathlib
import sys

# PIP3 modules
import openpyxl
import pytest


#============================================
def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

import warehouse_barcode_labels.config


#============================================
def write_workbook(path: pathlib.Path, rows: list[list[object]]) -> pathlib.Path:
	"""
	Write rows to the first sheet of a new xlsx workbook.

	Args:
		path: Output xlsx path.
		rows: Rows including the header row.

	Returns:
		The written path.
	"""
	workbook = openpyxl.Workbook()
	worksheet = workbook.active
	for row in rows:
		worksheet.append(row)
	workbook.save(str(path))
	return path


#============================================
@pytest.fixture
def transfer_workbook(tmp_path: pathlib.Path):
	"""
	Factory fixture writing a transfer workbook into tmp_path.
	"""
	def _build(rows: list[list[object]], name: str = "transfers.xlsx") -> pathlib.Path:
		return write_workbook(tmp_path / name, rows)
	return _build


#============================================
@pytest.fixture
def counting_rasterizer():
	"""
	Rasterizer stand-in that records every label it is asked to draw.
	"""
	calls: list[warehouse_barcode_labels.config.LabelInstance] = []

	def _rasterize(label):
		calls.append(label)
		return warehouse_barcode_labels.config.RasterizedLabel(
			png_bytes=b"",
			width=1000,
			height=250,
		)

	_rasterize.calls = calls
	return _rasterize
