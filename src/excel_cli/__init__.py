"""excel-cli: read tabular data and metadata out of Excel workbooks."""

__version__ = "0.1.0"
