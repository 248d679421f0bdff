from __future__ import annotations  # Report serialisation entry point

from assessment.types import Report
from observability.logger import log_event

from .pdf import generate_report_pdf

FORMATS = ("json", "pdf")


def export_report(report: Report, fmt: str = "json") -> bytes:
    """Serialise ``report`` as ``json`` or ``pdf`` bytes.

    Raises:
        ValueError: ``fmt`` is not one of :data:`FORMATS`.
    """

    normalized = fmt.strip().lower()
    if normalized == "json":
        payload = report.model_dump_json(indent=2).encode("utf-8")
    elif normalized == "pdf":
        payload = generate_report_pdf(report)
    else:
        raise ValueError(f"Unsupported report format: {fmt!r}; expected one of {', '.join(FORMATS)}")
    log_event("report_exported", report.session_id, status=normalized, size=len(payload))
    return payload
