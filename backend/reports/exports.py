"""
Export utilities for FinBot data.
Supports Excel (.xlsx), CSV (.csv), Text (.txt) and PDF (.pdf) formats.

Columns are dicts with 'key', 'header', optional 'width', 'numeric' and
'kind' ('money', 'date' or 'datetime'). Values are rendered through
ExportOptions so the same data can be written for tr-TR or en-US.
"""
import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from django.http import HttpResponse
from django.utils.html import escape
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle


class ExportFormat:
    EXCEL = 'xlsx'
    CSV = 'csv'
    TXT = 'txt'
    PDF = 'pdf'

    CHOICES = [EXCEL, CSV, TXT, PDF]
    CONTENT_TYPES = {
        EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        CSV: 'text/csv',
        TXT: 'text/plain',
        PDF: 'application/pdf',
    }


LOCALES = ('tr-TR', 'en-US')
DATE_FORMATS = {
    'DD/MM/YYYY': '%d/%m/%Y',
    'MM/DD/YYYY': '%m/%d/%Y',
    'YYYY-MM-DD': '%Y-%m-%d',
}

LOCALE_CONFIG = {
    'tr-TR': {
        'separator': ';',
        'decimal': ',',
        'thousands': '.',
        'bom': True,
        'date_format': 'DD/MM/YYYY',
        'yes': 'Evet',
        'no': 'Hayır',
        'exported': 'Dışa aktarma',
    },
    'en-US': {
        'separator': ',',
        'decimal': '.',
        'thousands': ',',
        'bom': False,
        'date_format': 'MM/DD/YYYY',
        'yes': 'Yes',
        'no': 'No',
        'exported': 'Exported',
    },
}


@dataclass
class ExportOptions:
    locale: str = 'tr-TR'
    date_format: str = ''
    currency: str = 'TRY'
    show_currency: bool = False
    include_headers: bool = True

    def __post_init__(self):
        if self.locale not in LOCALE_CONFIG:
            raise ValueError(f"Invalid locale: {self.locale}. Must be one of {list(LOCALES)}")
        if not self.date_format:
            self.date_format = LOCALE_CONFIG[self.locale]['date_format']
        if self.date_format not in DATE_FORMATS:
            raise ValueError(f"Invalid date format: {self.date_format}. Must be one of {list(DATE_FORMATS)}")

    @property
    def config(self) -> dict:
        return LOCALE_CONFIG[self.locale]


def format_number(value, options: ExportOptions, places: int = 2) -> str:
    """1234.5 -> '1.234,50' (tr-TR) or '1,234.50' (en-US)."""
    text = f"{Decimal(value):,.{places}f}"
    config = options.config
    return text.replace(',', '\0').replace('.', config['decimal']).replace('\0', config['thousands'])


def format_date(value, options: ExportOptions) -> str:
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        value = value.date()
    return value.strftime(DATE_FORMATS[options.date_format])


def format_value(value: Any, options: ExportOptions = None, column: dict = None, row: dict = None) -> str:
    """Format a value for export."""
    options = options or ExportOptions(locale='en-US', date_format='YYYY-MM-DD')
    column = column or {}
    if value is None or value == '':
        return ''
    if isinstance(value, bool):
        return options.config['yes'] if value else options.config['no']
    if isinstance(value, datetime):
        if column.get('kind') == 'date':
            return format_date(value, options)
        local = timezone.localtime(value) if timezone.is_aware(value) else value
        return f"{format_date(local, options)} {local.strftime('%H:%M:%S')}"
    if isinstance(value, date):
        return format_date(value, options)
    if isinstance(value, (Decimal, float)) or column.get('kind') == 'money':
        number = format_number(value, options)
        if column.get('kind') == 'money' and options.show_currency:
            currency = (row or {}).get('currency') or options.currency
            return f"{currency} {number}"
        return number
    return str(value)


def _cells(row_data: dict, columns: list[dict], options: ExportOptions) -> list[str]:
    return [format_value(row_data.get(col['key'], ''), options, col, row_data) for col in columns]


def export_to_excel(
    data: list[dict],
    columns: list[dict],
    options: ExportOptions,
    title: str = 'Export',
    sheet_name: str = 'Data',
) -> bytes:
    """
    Export data to Excel format.

    Args:
        data: List of dictionaries containing the data
        columns: List of column definitions with 'key', 'header', and optional 'width'
        options: Locale and formatting options
        title: Title for the export (used in header row)
        sheet_name: Name of the worksheet

    Returns:
        Bytes of the Excel file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name[:31]

    # Styles
    header_font = Font(bold=True, color='FFFFFF')
    header_fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
    header_alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
    thin_border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    # Title row
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(columns))
    title_cell = ws.cell(row=1, column=1, value=title)
    title_cell.font = Font(bold=True, size=14)
    title_cell.alignment = Alignment(horizontal='center')

    # Export timestamp
    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=len(columns))
    timestamp_cell = ws.cell(
        row=2, column=1,
        value=f"{options.config['exported']}: {format_value(timezone.now(), options)}",
    )
    timestamp_cell.alignment = Alignment(horizontal='center')
    timestamp_cell.font = Font(italic=True, size=10, color='666666')

    # Header row
    header_row = 4
    for col_idx, col in enumerate(columns, 1):
        cell = ws.cell(row=header_row, column=col_idx, value=col['header'])
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = thin_border

        width = col.get('width', 15)
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    # Data rows
    for row_idx, row_data in enumerate(data, header_row + 1):
        for col_idx, (col, value) in enumerate(zip(columns, _cells(row_data, columns, options)), 1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            cell.border = thin_border

            if col.get('numeric'):
                cell.alignment = Alignment(horizontal='right')

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def export_to_csv(
    data: list[dict],
    columns: list[dict],
    options: ExportOptions,
) -> str:
    """
    Export data to CSV format.

    tr-TR output is ';'-separated and starts with a UTF-8 BOM so Excel
    opens it with the right encoding; en-US output is ','-separated.
    """
    output = io.StringIO()
    if options.config['bom']:
        output.write('\ufeff')
    writer = csv.writer(output, delimiter=options.config['separator'], quoting=csv.QUOTE_MINIMAL, lineterminator='\n')

    if options.include_headers:
        writer.writerow([col['header'] for col in columns])

    for row_data in data:
        writer.writerow(_cells(row_data, columns, options))

    return output.getvalue()


def export_to_txt(
    data: list[dict],
    columns: list[dict],
    options: ExportOptions,
    separator: str = '\t',
) -> str:
    """
    Export data to text format with fixed-width columns.

    Args:
        data: List of dictionaries containing the data
        columns: List of column definitions with 'key', 'header', and optional 'width'
        options: Locale and formatting options
        separator: Column separator character

    Returns:
        Text string
    """
    lines = []
    rows = [_cells(row_data, columns, options) for row_data in data]

    # Calculate column widths for fixed-width format
    col_widths = []
    for idx, col in enumerate(columns):
        width = max([col.get('width', len(col['header'])), len(col['header'])] + [len(r[idx]) for r in rows])
        col_widths.append(min(width, 50))  # Cap at 50 chars

    lines.append(separator.join(col['header'].ljust(col_widths[idx]) for idx, col in enumerate(columns)))
    lines.append(separator.join('-' * width for width in col_widths))

    for row in rows:
        row_parts = []
        for idx, value in enumerate(row):
            if len(value) > col_widths[idx]:
                value = value[:col_widths[idx] - 3] + '...'
            row_parts.append(value.ljust(col_widths[idx]))
        lines.append(separator.join(row_parts))

    return '\n'.join(lines)


def export_to_pdf(
    data: list[dict],
    columns: list[dict],
    options: ExportOptions,
    title: str = 'Export',
) -> bytes:
    """Export data to a landscape A4 PDF with a single table."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        leftMargin=1.5 * cm,
        rightMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        title=title,
    )
    styles = getSampleStyleSheet()
    cell_style = styles['BodyText']
    cell_style.fontSize = 8
    cell_style.leading = 10

    flow = [
        Paragraph(title, styles['Title']),
        Paragraph(f"{options.config['exported']}: {format_value(timezone.now(), options)}", styles['Italic']),
        Spacer(1, 0.4 * cm),
    ]

    table_rows = [[Paragraph(f"<b>{escape(col['header'])}</b>", cell_style) for col in columns]]
    for row_data in data:
        table_rows.append([Paragraph(escape(value), cell_style) for value in _cells(row_data, columns, options)])

    total_width = sum(col.get('width', 15) for col in columns)
    available = doc.width
    col_widths = [available * col.get('width', 15) / total_width for col in columns]

    table = Table(table_rows, colWidths=col_widths, repeatRows=1)
    style = [
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#4472C4')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('GRID', (0, 0), (-1, -1), 0.25, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F2F2F2')]),
    ]
    for idx, col in enumerate(columns):
        if col.get('numeric'):
            style.append(('ALIGN', (idx, 1), (idx, -1), 'RIGHT'))
    table.setStyle(TableStyle(style))
    flow.append(table)

    doc.build(flow)
    return buffer.getvalue()


def create_export_response(
    data: list[dict],
    columns: list[dict],
    format: str,
    filename: str,
    title: str = 'Export',
    options: ExportOptions = None,
) -> HttpResponse:
    """
    Create an HTTP response with the exported file.

    Args:
        data: List of dictionaries containing the data
        columns: List of column definitions
        format: Export format (xlsx, csv, txt, pdf)
        filename: Base filename (without extension)
        title: Title for Excel and PDF exports
        options: Locale and formatting options (tr-TR defaults)

    Returns:
        HttpResponse with the file content
    """
    if format not in ExportFormat.CHOICES:
        raise ValueError(f"Invalid format: {format}. Must be one of {ExportFormat.CHOICES}")

    options = options or ExportOptions()
    content_type = ExportFormat.CONTENT_TYPES[format]
    full_filename = f"{filename}.{format}"

    if format == ExportFormat.EXCEL:
        content = export_to_excel(data, columns, options, title=title)
        response = HttpResponse(content, content_type=content_type)
    elif format == ExportFormat.CSV:
        content = export_to_csv(data, columns, options)
        response = HttpResponse(content, content_type=f'{content_type}; charset=utf-8')
    elif format == ExportFormat.PDF:
        content = export_to_pdf(data, columns, options, title=title)
        response = HttpResponse(content, content_type=content_type)
    else:  # TXT
        content = export_to_txt(data, columns, options)
        response = HttpResponse(content, content_type=f'{content_type}; charset=utf-8')

    response['Content-Disposition'] = f'attachment; filename="{full_filename}"'
    return response
