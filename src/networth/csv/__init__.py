"""CSV import/export utilities."""

from networth.csv.importer import CsvImporter
from networth.csv.exporter import CsvExporter
from networth.csv.template import CsvTemplateGenerator

__all__ = [
    "CsvImporter",
    "CsvExporter",
    "CsvTemplateGenerator",
]
