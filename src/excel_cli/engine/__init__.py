"""Command parsing, workbook access, and dispatch."""
