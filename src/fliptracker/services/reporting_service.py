from __future__ import annotations

import csv
import logging
from pathlib import Path

from openpyxl import Workbook
from openpyxl.chart import LineChart, Reference
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from fliptracker.domain.ledger import build_capital_series, compute_totals, product_reports
from fliptracker.domain.models import CapitalSeries, ProductReport, Totals
from fliptracker.repositories.contracts import SnapshotRepository

log = logging.getLogger(__name__)

MOVEMENT_HEADERS = ["Date", "Kind", "Description", "Value"]
PRODUCT_HEADERS = ["Product", "Total cost", "Sales", "Profit", "Margin (%)", "ROI (%)", "Status"]


def _write_csv(path: Path | str, headers: list[str], rows: list[list]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh, delimiter=";")
        writer.writerow(headers)
        writer.writerows(rows)


def _product_row(r: ProductReport) -> list:
    return [r.name, r.total_cost, r.total_sales, r.profit, f"{r.margin_pct:.2f}", f"{r.roi_pct:.2f}", r.status]


class ReportingService:
    def __init__(self, repo: SnapshotRepository):
        self.repo = repo

    def totals(self, user_id: str) -> Totals:
        return compute_totals(self.repo.get(user_id))

    def capital_series(self, user_id: str) -> CapitalSeries:
        return build_capital_series(self.repo.get(user_id))

    def product_reports(self, user_id: str) -> list[ProductReport]:
        return product_reports(self.repo.get(user_id))

    def export_movements_csv(self, user_id: str, path: Path | str) -> int:
        movements = self.totals(user_id).movements
        _write_csv(path, MOVEMENT_HEADERS, [[m.date, m.kind, m.description, m.value] for m in movements])
        log.info("movements_csv_exported user=%s rows=%s path=%s", user_id, len(movements), path)
        return len(movements)

    def export_products_csv(self, user_id: str, path: Path | str) -> int:
        reports = self.product_reports(user_id)
        _write_csv(path, PRODUCT_HEADERS, [_product_row(r) for r in reports])
        log.info("products_csv_exported user=%s rows=%s path=%s", user_id, len(reports), path)
        return len(reports)

    def export_report_excel(self, user_id: str, path: Path | str) -> None:
        snapshot = self.repo.get(user_id)
        totals = compute_totals(snapshot)
        series = build_capital_series(snapshot)
        reports = product_reports(snapshot)

        wb = Workbook()

        def money(cell):
            cell.number_format = "#,##0.00"

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        def add_table(ws, name: str, start_row: int, start_col: int, end_row: int, end_col: int):
            ref = f"{get_column_letter(start_col)}{start_row}:{get_column_letter(end_col)}{end_row}"
            tab = Table(displayName=name, ref=ref)
            tab.tableStyleInfo = TableStyleInfo(
                name="TableStyleMedium9",
                showRowStripes=True,
                showColumnStripes=False,
            )
            ws.add_table(tab)

        # -------- 1) Summary --------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = "Summary"
        ws["A1"].font = Font(bold=True, size=14)

        ws["A3"] = "Start date"
        ws["B3"] = snapshot.config.start_date

        rows = [
            ("Initial capital", snapshot.config.initial_capital),
            ("Current capital", totals.current_capital),
            ("Total purchases", totals.total_purchases),
            ("Total sales", totals.total_sales),
            ("Profit", totals.profit),
            ("Inventory value (at cost)", totals.inventory_value),
        ]
        start_row = 5
        for i, (label, val) in enumerate(rows):
            r = start_row + i
            ws[f"A{r}"] = label
            ws[f"B{r}"] = float(val)
            money(ws[f"B{r}"])

        set_widths(ws, {"A": 28, "B": 20})

        # -------- 2) Movements --------
        ws2 = wb.create_sheet("Movements")
        ws2.append(MOVEMENT_HEADERS)
        bold_row(ws2, 1)
        for m in totals.movements:
            ws2.append([m.date, m.kind, m.description, float(m.value)])
            money(ws2[f"D{ws2.max_row}"])

        ws2.freeze_panes = "A2"
        set_widths(ws2, {"A": 12, "B": 14, "C": 48, "D": 16})
        if ws2.max_row >= 2:
            add_table(ws2, "MovementsTable", 1, 1, ws2.max_row, 4)

        # -------- 3) Products --------
        ws3 = wb.create_sheet("Products")
        ws3.append(PRODUCT_HEADERS + ["Stock"])
        bold_row(ws3, 1)
        for r in reports:
            ws3.append([
                r.name, float(r.total_cost), float(r.total_sales), float(r.profit),
                round(float(r.margin_pct), 2), round(float(r.roi_pct), 2), r.status, int(r.stock),
            ])
            for col in "BCD":
                money(ws3[f"{col}{ws3.max_row}"])

        ws3.freeze_panes = "A2"
        set_widths(ws3, {"A": 34, "B": 16, "C": 16, "D": 16, "E": 12, "F": 12, "G": 12, "H": 8})
        if ws3.max_row >= 2:
            add_table(ws3, "ProductsTable", 1, 1, ws3.max_row, 8)

        # -------- 4) Capital --------
        ws4 = wb.create_sheet("Capital")
        ws4.append(["Date", "Capital"])
        bold_row(ws4, 1)
        for label, value in series.points():
            ws4.append([label, float(value)])
            money(ws4[f"B{ws4.max_row}"])
        set_widths(ws4, {"A": 12, "B": 16})

        chart = LineChart()
        chart.title = "Capital over time"
        chart.y_axis.title = "Capital"
        chart.x_axis.title = "Date"
        data = Reference(ws4, min_col=2, min_row=1, max_row=ws4.max_row)
        cats = Reference(ws4, min_col=1, min_row=2, max_row=ws4.max_row)
        chart.add_data(data, titles_from_data=True)
        chart.set_categories(cats)
        chart.legend = None
        ws4.add_chart(chart, "D2")

        wb.save(path)
        log.info("report_exported user=%s path=%s", user_id, path)
