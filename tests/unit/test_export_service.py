"""
Tests for export_service — Pallet plan Excel generation.
"""

from datetime import datetime
from io import BytesIO

from openpyxl import load_workbook

from services.export_service import (
    PALLET_COLUMNS,
    ExportService,
    export_filename,
    get_export_service,
)
from services.packing_plan_service import PackingPlanService


GENERATED_AT = datetime(2025, 1, 15, 8, 30)


class TestExportFilename:
    """Tests for export_filename()"""

    def test_with_template_name(self):
        assert export_filename("Line 3 / night", GENERATED_AT) == (
            "pallet-plan_Line-3-night_20250115-0830.xlsx"
        )

    def test_without_template_name(self):
        assert export_filename(None, GENERATED_AT) == "pallet-plan_20250115-0830.xlsx"

    def test_template_name_without_usable_characters(self):
        assert export_filename(" / ", GENERATED_AT) == "pallet-plan_20250115-0830.xlsx"


class TestGeneratePalletPlanExcel:
    """Tests for ExportService.generate_pallet_plan_excel()"""

    def _workbook(self, snapshot, template_name="Line 3"):
        plan = PackingPlanService().calculate(snapshot)
        output = ExportService().generate_pallet_plan_excel(
            plan,
            template_name=template_name,
            generated_at=GENERATED_AT,
        )
        assert isinstance(output, BytesIO)
        return load_workbook(output)

    def test_sheets(self, two_bucket_snapshot):
        wb = self._workbook(two_bucket_snapshot)

        assert wb.sheetnames == ["Summary", "Pallets"]

    def test_summary_sheet(self, short_fill_snapshot):
        ws = self._workbook(short_fill_snapshot)["Summary"]

        assert ws["A1"].value == "PALLET PLAN"
        assert ws["B3"].value == "Line 3"
        assert ws["B4"].value == "2025-01-15 08:30"

        rows = {
            ws.cell(row=r, column=1).value: ws.cell(row=r, column=2).value
            for r in range(1, ws.max_row + 1)
        }
        assert rows["Cases:"] == "15 units+3 units"
        assert rows["Bottles:"] == "183"
        assert rows["Bottles incl. samples:"] == "-"
        assert rows["Labels used:"] == "-"
        assert rows["Pallets:"] == "1 full pallets+7 units+3 units"

    def test_pallet_rows(self, short_fill_snapshot):
        ws = self._workbook(short_fill_snapshot)["Pallets"]

        assert [c.value for c in ws[1]] == PALLET_COLUMNS
        assert [c.value for c in ws[2]] == [1, "1-8", 8, "A1-A8", 96, None]
        assert [c.value for c in ws[3]] == [
            2, "9-15", 7, "A9-A10、B1-B5 short-fill B6(3 units)", 87, "Yes",
        ]
        assert ws.max_row == 3

    def test_empty_plan(self, empty_snapshot):
        ws = self._workbook(empty_snapshot, template_name=None)["Pallets"]

        assert ws.max_row == 1


class TestExportServiceInstance:
    """Tests for service instance creation."""

    def test_get_export_service_returns_singleton(self):
        assert get_export_service() is get_export_service()
