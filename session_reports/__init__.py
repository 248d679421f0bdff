from __future__ import annotations  # Session report package exports

from .export import FORMATS, export_report
from .pdf import generate_report_pdf

__all__ = ["FORMATS", "export_report", "generate_report_pdf"]
