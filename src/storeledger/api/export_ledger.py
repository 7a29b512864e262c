"""Excel export of ledger days."""

import io
from datetime import date as date_type
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.db import get_db
from storeledger.core.errors import ValidationError
from storeledger.core.ledger_days import list_ledger_days
from storeledger.core.logging import get_logger
from storeledger.models import LedgerDay

logger = get_logger(__name__)

router = APIRouter(prefix="/ledger", tags=["export"])

EXPORT_COLUMNS = [
    ("Date", lambda d: d.date.isoformat()),
    ("Processor Available", lambda d: d.processor_available),
    ("Processor Pending", lambda d: d.processor_pending),
    ("Processor Held", lambda d: d.processor_held),
    ("Platform Pending", lambda d: d.platform_pending),
    ("Processor Total", lambda d: d.processor_total),
    ("Grand Total", lambda d: d.grand_total),
    ("Processor Settled", lambda d: d.processor_settled_today),
    ("Platform Settled", lambda d: d.platform_settled_today),
    ("Tax Withheld", lambda d: d.tax_withheld_today),
    ("Net Day Movement", lambda d: d.net_day_movement),
    ("Opening Balance", lambda d: "Yes" if d.is_opening_balance else "No"),
    ("Notes", lambda d: d.notes or ""),
]


def _create_excel_export(days: list[LedgerDay]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Ledger"

    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")

    for col_idx, (header, _) in enumerate(EXPORT_COLUMNS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for row_idx, ledger_day in enumerate(days, start=2):
        for col_idx, (_, getter) in enumerate(EXPORT_COLUMNS, start=1):
            value = getter(ledger_day)
            if isinstance(value, Decimal):
                # openpyxl writes floats; amounts are already 2-decimal
                cell = ws.cell(row=row_idx, column=col_idx, value=float(value))
                cell.number_format = "#,##0.00"
            else:
                ws.cell(row=row_idx, column=col_idx, value=value)

    for col_idx, (header, _) in enumerate(EXPORT_COLUMNS, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = max(14, len(header) + 2)
    ws.freeze_panes = "A2"

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


@router.get("/export.xlsx")
async def export_ledger_excel(
    from_date: date_type | None = Query(None),
    to_date: date_type | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Download ledger days in the range as an Excel workbook."""
    if from_date and to_date and from_date > to_date:
        raise ValidationError("from_date must be on or before to_date")

    days = await list_ledger_days(db, from_date, to_date)
    content = _create_excel_export(days)

    logger.info(
        "ledger.exported",
        day_count=len(days),
        from_date=from_date.isoformat() if from_date else None,
        to_date=to_date.isoformat() if to_date else None,
    )

    filename = f"ledger_{from_date or 'start'}_{to_date or 'end'}.xlsx"
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
