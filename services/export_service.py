"""
Export service — Generate pallet plan Excel files.

One workbook per plan: a Summary sheet with the yield figures and a
Pallets sheet with one row per pallet, ready to print as pallet labels.
"""

from datetime import datetime
from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
import structlog

from models.packing import PackingPlan
from services.packing_summary_service import format_known
from utils.text_utils import format_quantity

logger = structlog.get_logger(__name__)

PALLET_COLUMNS = ["Pallet", "Cases", "Size", "Label", "Bottles", "Tail"]


def export_filename(template_name: Optional[str], generated_at: datetime) -> str:
    """
    Download filename for a plan.

    'Line 3 / night' at 2025-01-15 08:30 -> 'pallet-plan_Line-3-night_20250115-0830.xlsx'
    """
    stamp = generated_at.strftime("%Y%m%d-%H%M")
    words = ("".join(c for c in part if c.isalnum()) for part in (template_name or "").split())
    cleaned = "-".join(w for w in words if w)
    if cleaned:
        return f"pallet-plan_{cleaned}_{stamp}.xlsx"
    return f"pallet-plan_{stamp}.xlsx"


class ExportService:
    """Service for generating pallet plan export files."""

    def generate_pallet_plan_excel(
        self,
        plan: PackingPlan,
        template_name: Optional[str] = None,
        generated_at: Optional[datetime] = None,
    ) -> BytesIO:
        """
        Generate Excel file for a pallet plan.

        Creates:
        - Summary sheet with totals and the pallet one-liner
        - Pallets sheet with one row per pallet

        Args:
            plan: Calculated packing plan
            template_name: Free-text template label shown in the header
            generated_at: Timestamp shown in the header (defaults to now)

        Returns:
            BytesIO containing the Excel file
        """
        if generated_at is None:
            generated_at = datetime.now()

        summary = plan.summary

        logger.info(
            "generating_pallet_plan_excel",
            pallet_count=len(plan.pallets),
            total_cases=str(summary.total_cases),
        )

        wb = Workbook()

        # Styles
        title_font = Font(bold=True, size=14)
        header_font = Font(bold=True, size=11)
        thin_border = Border(
            bottom=Side(style="thin", color="000000")
        )
        header_fill = PatternFill(start_color="E0E8FF", end_color="E0E8FF", fill_type="solid")
        tail_fill = PatternFill(start_color="FFF0E0", end_color="FFF0E0", fill_type="solid")

        # ===== SUMMARY SHEET =====
        ws_summary = wb.active
        ws_summary.title = "Summary"
        ws_summary.column_dimensions["A"].width = 28
        ws_summary.column_dimensions["B"].width = 36

        row = 1
        ws_summary[f"A{row}"] = "PALLET PLAN"
        ws_summary[f"A{row}"].font = title_font
        row += 2

        ws_summary[f"A{row}"] = "Template:"
        ws_summary[f"B{row}"] = template_name or ""
        row += 1
        ws_summary[f"A{row}"] = "Generated:"
        ws_summary[f"B{row}"] = generated_at.strftime("%Y-%m-%d %H:%M")
        row += 2

        ws_summary[f"A{row}"] = "TOTALS"
        ws_summary[f"A{row}"].font = header_font
        ws_summary[f"A{row}"].fill = header_fill
        ws_summary[f"B{row}"].fill = header_fill
        row += 1

        totals = [
            ("Buckets:", summary.bucket_count),
            ("Cases:", summary.case_text),
            ("Bottles:", format_quantity(summary.total_bottles)),
            ("Bottles incl. samples:", format_known(summary.bottle_with_sample)),
            ("Labels used:", format_known(summary.label_count)),
            ("Pallets:", summary.pallet_text),
        ]
        for label, value in totals:
            ws_summary[f"A{row}"] = label
            ws_summary[f"B{row}"] = value
            ws_summary[f"B{row}"].alignment = Alignment(horizontal="left")
            row += 1

        # ===== PALLETS SHEET =====
        ws = wb.create_sheet(title="Pallets")
        for col, width in zip("ABCDEF", (10, 14, 8, 48, 12, 8)):
            ws.column_dimensions[col].width = width

        for col_idx, header in enumerate(PALLET_COLUMNS, start=1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.border = thin_border

        for row_idx, pallet in enumerate(plan.pallets, start=2):
            values = [
                pallet.index,
                f"{pallet.case_start}-{pallet.case_end}",
                pallet.size,
                pallet.text,
                pallet.bottle_count,
                "Yes" if pallet.is_tail else None,
            ]
            for col_idx, value in enumerate(values, start=1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                if pallet.is_tail:
                    cell.fill = tail_fill

        ws.freeze_panes = "A2"

        output = BytesIO()
        wb.save(output)
        output.seek(0)

        return output


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
