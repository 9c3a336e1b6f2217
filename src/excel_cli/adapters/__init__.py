"""openpyxl-backed query operations."""
