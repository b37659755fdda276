"""Readers and writers for flat annotation tables."""

from eupathdb.io.text_table import parse_text_table
from eupathdb.io.writer import output_path_for, write_flat_table

__all__ = ["output_path_for", "parse_text_table", "write_flat_table"]
