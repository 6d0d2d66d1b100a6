"""
Printable PDF report for the current dataset.

The layout is the same text-first summary the upload view used to write to
disk, extended with the quality numbers, the insight text, a small bar chart
and the first rows of the batch.  The report is built in memory and handed
back as bytes; the view decides how to serve it.
"""
from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Dict, Sequence

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from .records import DatasetSummary, EquipmentCategory, EquipmentRecord

PREVIEW_ROWS = 20
TABLE_COLUMNS = (
    ("Equipment", 60),
    ("Type", 140),
    ("Flowrate", 250),
    ("Pressure", 320),
    ("Temperature", 390),
    ("Status", 480),
)


def report_filename(summary: DatasetSummary) -> str:
    stem = summary.file_name.rsplit(".", 1)[0] or "dataset"
    return f"Equipment_Summary_Report_{stem}_{summary.id}.pdf"


def render_distribution_chart(type_distribution: Dict[str, int]) -> bytes:
    """PNG bar chart of the type distribution, one colour per category."""
    fig = Figure(figsize=(6, 2.8))
    FigureCanvasAgg(fig)
    ax = fig.add_subplot(111)

    labels = list(type_distribution.keys())
    values = list(type_distribution.values())
    colours = [EquipmentCategory.from_label(label).colour for label in labels]

    ax.bar(labels, values, color=colours)
    ax.set_title("Equipment type distribution")
    ax.set_ylabel("Count")
    ax.tick_params(axis="x", labelrotation=20)
    fig.tight_layout()

    buffer = BytesIO()
    fig.savefig(buffer, format="png", dpi=120)
    return buffer.getvalue()


def build_report_pdf(
    summary: DatasetSummary, records: Sequence[EquipmentRecord]
) -> bytes:
    """Return the whole report as PDF bytes."""
    buffer = BytesIO()
    pdf_canvas = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4

    y = height - 50

    def ensure_space(needed: float) -> None:
        nonlocal y
        if y - needed < 50:
            pdf_canvas.showPage()
            pdf_canvas.setFont("Helvetica", 10)
            y = height - 50

    pdf_canvas.setFont("Helvetica-Bold", 14)
    pdf_canvas.drawString(40, y, "Chemical Equipment Summary Report")
    y -= 30

    pdf_canvas.setFont("Helvetica", 10)
    pdf_canvas.drawString(40, y, f"Source file: {summary.file_name}")
    y -= 15
    pdf_canvas.drawString(40, y, f"Uploaded: {summary.upload_date}")
    y -= 15
    pdf_canvas.drawString(40, y, f"Generated at: {datetime.now():%Y-%m-%d %H:%M:%S}")
    y -= 30

    pdf_canvas.setFont("Helvetica-Bold", 12)
    pdf_canvas.drawString(40, y, "Summary Statistics")
    y -= 20

    pdf_canvas.setFont("Helvetica", 10)
    lines = [
        f"Total equipment count: {summary.total_count}",
        f"Average flowrate: {summary.avg_flowrate:.2f}",
        f"Average pressure: {summary.avg_pressure:.2f}",
        f"Average temperature: {summary.avg_temperature:.2f}",
        f"Temperature outliers: {summary.outlier_count}",
        f"Data quality score: {summary.data_quality_score}/100",
        f"Classification: {summary.classification}",
    ]
    for line in lines:
        pdf_canvas.drawString(60, y, line)
        y -= 15
    y -= 10

    if summary.ai_insights:
        pdf_canvas.setFont("Helvetica-Bold", 12)
        pdf_canvas.drawString(40, y, "Insights")
        y -= 20
        pdf_canvas.setFont("Helvetica", 10)
        for paragraph in summary.ai_insights.split("\n"):
            for line in simpleSplit(paragraph, "Helvetica", 10, width - 100):
                ensure_space(15)
                pdf_canvas.drawString(60, y, line)
                y -= 15
        y -= 10

    chart_height = 200
    ensure_space(chart_height + 30)
    pdf_canvas.setFont("Helvetica-Bold", 12)
    pdf_canvas.drawString(40, y, "Equipment Type Distribution")
    y -= 10 + chart_height
    chart = ImageReader(BytesIO(render_distribution_chart(summary.type_distribution)))
    pdf_canvas.drawImage(chart, 40, y, width=width - 80, height=chart_height)
    y -= 30

    ensure_space(60)
    pdf_canvas.setFont("Helvetica-Bold", 12)
    pdf_canvas.drawString(40, y, f"First {min(PREVIEW_ROWS, len(records))} Records")
    y -= 20
    pdf_canvas.setFont("Helvetica-Bold", 9)
    for title, x in TABLE_COLUMNS:
        pdf_canvas.drawString(x, y, title)
    y -= 14

    pdf_canvas.setFont("Helvetica", 9)
    for record in records[:PREVIEW_ROWS]:
        ensure_space(14)
        pdf_canvas.setFont("Helvetica", 9)
        cells = (
            record.equipment_id,
            record.type,
            f"{record.flowrate:.2f}",
            f"{record.pressure:.2f}",
            f"{record.temperature:.2f}",
            record.status.value,
        )
        for (_, x), cell in zip(TABLE_COLUMNS, cells):
            pdf_canvas.drawString(x, y, cell)
        y -= 14

    pdf_canvas.showPage()
    pdf_canvas.save()
    return buffer.getvalue()
