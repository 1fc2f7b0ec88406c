from io import BytesIO
from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from django.http import HttpResponse

HEADER_BLUE = HexColor("#1F618D")
GRID_GREY = HexColor("#B3B6B7")
ROW_SHADES = [HexColor("#F8F9F9"), HexColor("#EBF5FB")]


def data_table_style(padding=6):
    return TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), HEADER_BLUE),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('GRID', (0, 0), (-1, -1), 0.3, GRID_GREY),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), ROW_SHADES),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('TOPPADDING', (0, 0), (-1, -1), padding),
        ('BOTTOMPADDING', (0, 0), (-1, -1), padding),
    ])


def generate_fee_report_pdf(summary_data, fee_data, month, year, admin_name):
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, rightMargin=20, leftMargin=20, topMargin=20, bottomMargin=20)
    elements = []
    styles = getSampleStyleSheet()

    # Header info
    header_data = [
        ["Academy:", admin_name, "", ""],
        ["Month:", month, "Year:", year],
    ]
    table_width = A4[0] - doc.leftMargin - doc.rightMargin
    col_widths_header = [table_width * 0.15, table_width * 0.35, table_width * 0.15, table_width * 0.35]

    header_table = Table(header_data, colWidths=col_widths_header, hAlign='LEFT')
    header_table.setStyle(TableStyle([
        # Labels (col 0 and 2)
        ('BACKGROUND', (0, 0), (0, -1), HEADER_BLUE),
        ('BACKGROUND', (2, 1), (2, -1), HEADER_BLUE),
        ('TEXTCOLOR', (0, 0), (0, -1), colors.white),
        ('TEXTCOLOR', (2, 1), (2, -1), colors.white),
        ('SPAN', (1, 0), (3, 0)),

        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('GRID', (0, 0), (-1, -1), 0.3, GRID_GREY),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))

    elements.append(header_table)
    elements.append(Spacer(1, 15))

    # Summary table
    elements.append(Paragraph("Fee Collection Summary", styles['Heading2']))
    summary_rows = [["Metric", "Value"]] + [[label, str(value)] for label, value in summary_data]
    t_summary = Table(summary_rows, colWidths=[table_width * 0.5, table_width * 0.5], hAlign='CENTER')
    t_summary.setStyle(data_table_style(padding=8))
    elements.append(t_summary)
    elements.append(Spacer(1, 15))

    # Fee details table
    elements.append(Paragraph("Fee Details", styles['Heading2']))
    num_cols = len(fee_data[0])
    t_fees = Table(fee_data, colWidths=[table_width / num_cols] * num_cols, hAlign='CENTER', repeatRows=1)
    t_fees.setStyle(data_table_style())
    elements.append(t_fees)

    # Build PDF
    doc.build(elements)
    buffer.seek(0)

    filename = f"fee_report_{month}_{year}.pdf".replace(" ", "_")

    response = HttpResponse(buffer, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response
