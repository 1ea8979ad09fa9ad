"""salesbook - query and maintain a Products / Customers / Orders workbook."""

__version__ = "0.1.0"
