#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Convert a warehouse transfer spreadsheet into a two-up barcode label PDF.
"""

# Standard Library
import sys

# local repo modules
import warehouse_barcode_labels.cli


if __name__ == "__main__":
	sys.exit(warehouse_barcode_labels.cli.main())
