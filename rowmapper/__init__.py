"""Copy source spreadsheet rows into cloned sheets of a template workbook."""

__version__ = "0.3.0"
