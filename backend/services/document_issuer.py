"""
Concrete Station Approval - Document Issuer
Version: 1.1.1

Changelog:
v1.1.1 (2026-10-19): Certificate PDF rendered off the event loop before the
                      write transaction; removed again if the write fails
v1.1.0 (2026-10-12): Certificate issuance records the approval period through
                      the update orchestrator
v1.0.0 (2026-10-05): Initial approval certificate and operation letter PDFs

Renders the two documents a station can obtain:
- Approval certificate: station approved (all seven items passed)
- Operation letter: first six items passed, 28-day strength still open

Files are written under DOCUMENTS_DIR and served from /documents.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import List

from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.lib import colors
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from config import settings
from database import get_db, transaction
from errors import ValidationError
from models.station import Station, StationStatus, STATION_STATUS_NAMES
from models.visit import Visit, VisitStatus, TestItem, TEST_ITEM_LABELS, SEVENTH_ITEM
from services import record_store
from services.station_orchestrator import get_orchestrator
from services.visit_aggregator import aggregate_visits

logger = logging.getLogger(__name__)

LETTER_LANGUAGES = ("ar", "en")

_LETTER_TEXT = {
    "en": {
        "title": "Operation Letter",
        "body": ("This is to confirm that the ready-mix concrete station "
                 "<b>{name}</b> ({code}) has passed the inspection tests listed "
                 "below and may start operating while the 28-day compression "
                 "strength result is pending."),
    },
    "ar": {
        "title": "خطاب تشغيل",
        "body": ("نفيد بأن محطة الخرسانة الجاهزة <b>{name}</b> ({code}) قد اجتازت "
                 "الاختبارات الموضحة أدناه ويمكنها بدء التشغيل لحين ظهور نتيجة "
                 "مقاومة الضغط عند عمر 28 يوم."),
    },
}


def _font_name() -> str:
    """Register the configured TTF once; fall back to Helvetica"""
    if not settings.DOCUMENT_FONT_PATH:
        return "Helvetica"
    if "DocumentFont" not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont("DocumentFont", settings.DOCUMENT_FONT_PATH))
    return "DocumentFont"


def _document_path(prefix: str, station: Station) -> Path:
    doc_dir = Path(settings.DOCUMENTS_DIR)
    doc_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d%H%M%S")
    return doc_dir / f"{prefix}_{station.code.replace('/', '-')}_{stamp}.pdf"


def _station_table(station: Station, font: str) -> Table:
    rows = [
        ["Station Code", station.code],
        ["Station", station.name],
        ["Owner", station.owner],
        ["Address", f"{station.address}, {station.city_district}"],
        ["Mixers", str(station.mixers_count)],
        ["Max Capacity (m3/h)", str(station.max_capacity)],
        ["Mixing Type", station.mixing_type.value],
    ]
    if station.approval_start_date and station.approval_end_date:
        rows.append(["Approval Period",
                     f"{station.approval_start_date.date()} - {station.approval_end_date.date()}"])

    table = Table(rows, colWidths=[1.8*inch, 4.5*inch])
    table.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('BACKGROUND', (0, 0), (0, -1), colors.Color(0.9, 0.9, 0.9)),
        ('FONTNAME', (0, 0), (-1, -1), font),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('LEFTPADDING', (0, 0), (-1, -1), 6),
    ]))
    return table


def _item_label(item: TestItem, font: str) -> str:
    """Arabic label needs a TTF with Arabic glyphs; otherwise the item id"""
    return item.value if font == "Helvetica" else TEST_ITEM_LABELS[item]


def _results_table(visits: List[Visit], font: str) -> Table:
    results = aggregate_visits(visits)
    rows = [["Test Item", "Result"]]
    for item, result in results.first_six.items():
        rows.append([_item_label(item, font), result.status.value.upper()])
    seventh = results.seventh
    rows.append([_item_label(SEVENTH_ITEM, font),
                 seventh.status.value.upper() if seventh else "PENDING"])

    table = Table(rows, colWidths=[4.8*inch, 1.5*inch])
    table.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('BACKGROUND', (0, 0), (-1, 0), colors.Color(0.2, 0.3, 0.5)),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, -1), font),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))
    return table


def _render(path: Path, title: str, intro: str, station: Station,
            visits: List[Visit]) -> None:
    font = _font_name()
    styles = getSampleStyleSheet()
    for name in ("Title", "Normal", "Heading2"):
        styles[name].fontName = font

    doc = SimpleDocTemplate(str(path), pagesize=A4,
                            topMargin=0.5*inch, bottomMargin=0.5*inch)
    story = [
        Paragraph(f"<b>{title}</b>", styles['Title']),
        Spacer(1, 0.15 * inch),
        Paragraph(intro, styles['Normal']),
        Spacer(1, 0.2 * inch),
        _station_table(station, font),
        Spacer(1, 0.2 * inch),
        Paragraph("<b>Test Results</b>", styles['Heading2']),
        _results_table(visits, font),
        Spacer(1, 0.3 * inch),
        Paragraph(f"Issued: {datetime.now().date()}", styles['Normal']),
    ]
    doc.build(story)


def _require_status(station: Station, required: StationStatus, document: str) -> None:
    if station.status != required:
        raise ValidationError(
            f"{document} requires status '{STATION_STATUS_NAMES[required]}'",
            field="status", invalid_value=station.status.value)


async def generate_approval_certificate(station_id: int) -> Path:
    """
    Issue the approval certificate of an approved station.

    The PDF is rendered first, outside any transaction. A short write
    transaction then sets the approval period (now .. now +
    APPROVAL_VALIDITY_DAYS) and marks the latest completed visit as
    certificate-issued. If that transaction fails the PDF is removed.
    Returns the PDF path.
    """
    async with get_db() as db:
        station = await record_store.get_station(db, station_id)
        _require_status(station, StationStatus.APPROVED, "Approval certificate")
        visits = await record_store.list_visits_by_station(db, station_id)

    start = datetime.now()
    end = start + timedelta(days=settings.APPROVAL_VALIDITY_DAYS)
    issued = station.model_copy(update={"approval_start_date": start,
                                        "approval_end_date": end})
    path = _document_path("approval_certificate", station)

    loop = asyncio.get_running_loop()
    await loop.run_in_executor(
        None, _render, path, "Approval Certificate",
        f"The ready-mix concrete station <b>{station.name}</b> is approved "
        f"from {start.date()} until {end.date()}.",
        issued, visits)

    try:
        async with get_db() as db:
            async with transaction(db):
                station = await record_store.get_station(db, station_id)
                _require_status(station, StationStatus.APPROVED, "Approval certificate")
                await get_orchestrator().apply_station_update(db, station_id, {
                    "approval_start_date": start,
                    "approval_end_date": end,
                })

                visits = await record_store.list_visits_by_station(db, station_id)
                completed = [v for v in visits if v.status == VisitStatus.COMPLETED]
                if completed:
                    await record_store.update_row(db, "visits", completed[-1].id, {
                        "certificate_issued": True,
                        "certificate_url": f"/documents/{path.name}",
                    })
                else:
                    logger.warning(f"Station {station_id} approved without a completed visit")
    except Exception:
        path.unlink(missing_ok=True)
        raise

    logger.info(f"Approval certificate issued for station {station_id}: {path}")
    return path


async def generate_operation_letter(station_id: int, language: str = "ar") -> Path:
    """Render the operation letter (``ar`` or ``en``). Returns the PDF path."""
    if language not in LETTER_LANGUAGES:
        raise ValidationError("Unsupported letter language",
                              field="language", invalid_value=language)

    async with get_db() as db:
        station = await record_store.get_station(db, station_id)
        _require_status(station, StationStatus.OPERATION_LETTER_ELIGIBLE, "Operation letter")
        visits = await record_store.list_visits_by_station(db, station_id)

    text = _LETTER_TEXT[language]
    path = _document_path(f"operation_letter_{language}", station)
    _render(path, text["title"],
            text["body"].format(name=station.name, code=station.code),
            station, visits)

    logger.info(f"Operation letter ({language}) issued for station {station_id}: {path}")
    return path
