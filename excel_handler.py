import logging
import os
from datetime import datetime
from typing import Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from batch_store import BatchStore
from errors import StorageError
from reporting import batch_roster, summarize

HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
FULL_FILL = PatternFill(start_color="FFE6E6", end_color="FFE6E6", fill_type="solid")
UNALLOCATED_FILL = PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid")
TOTALS_FILL = PatternFill(start_color="D9EAD3", end_color="D9EAD3", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)


class ExcelHandler:
    def __init__(self, export_folder: str = 'exports'):
        self.logger = logging.getLogger(__name__)
        self.export_folder = export_folder

    def export_allocation(self, store: BatchStore, filename: Optional[str] = None) -> str:
        """
        Export the current allocation to an Excel workbook.

        The "Batches" sheet lists every member grouped by batch, followed by the
        unallocated students; the "Summary" sheet has per-batch utilization and
        the overall totals.
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Batches"

        ws['A1'] = "Student Batch Allocation"
        ws['A1'].font = Font(bold=True, size=14)
        ws.merge_cells('A1:E1')
        ws['A2'] = f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
        ws['A2'].font = Font(size=10, italic=True)

        headers = ['Batch', 'Position', 'SAP ID', 'Name', 'Marks']
        self._write_header(ws, 4, headers)

        row_num = 5
        for batch in batch_roster(store):
            is_full = batch['filled'] >= batch['capacity']
            for position, member in enumerate(batch['members'], 1):
                row_data = [batch['name'], position, member['key'], member['name'], member['score']]
                self._write_row(ws, row_num, row_data, FULL_FILL if is_full else None)
                row_num += 1

        for student in store.list_students():
            if store.batch_for(student) is None:
                row_data = ["Unallocated", None, student.key, student.name, student.score]
                self._write_row(ws, row_num, row_data, UNALLOCATED_FILL)
                row_num += 1

        self._fit_columns(ws, len(headers), row_num)
        self._write_summary_sheet(wb, store)

        if filename is None:
            filename = f"batch_allocation_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
        return self._save(wb, filename, "allocation")

    def export_students(self, store: BatchStore, filename: Optional[str] = None) -> str:
        """Export the student roster as a flat table."""
        df = pd.DataFrame(
            [s.to_dict() for s in store.list_students()],
            columns=['key', 'name', 'score', 'batch_index']
        )
        if filename is None:
            filename = f"students_export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
        filepath = os.path.join(self.export_folder, filename)

        try:
            os.makedirs(self.export_folder, exist_ok=True)
            df.to_excel(filepath, index=False, engine='openpyxl')
        except OSError as e:
            self.logger.error(f"Error exporting students: {e}")
            raise StorageError(filepath, f"could not write workbook ({e})")

        self.logger.info(f"Exported {len(df)} students to {filepath}")
        return filepath

    def _write_summary_sheet(self, wb: Workbook, store: BatchStore):
        ws = wb.create_sheet("Summary")

        headers = ['Batch', 'Capacity', 'Filled', 'Empty', 'Utilization %']
        self._write_header(ws, 1, headers)

        row_num = 2
        for batch in batch_roster(store):
            capacity = batch['capacity']
            filled = batch['filled']
            utilization = round(filled / capacity * 100, 1) if capacity > 0 else 0
            row_data = [batch['name'], capacity, filled, capacity - filled, f"{utilization}%"]
            self._write_row(ws, row_num, row_data, FULL_FILL if filled >= capacity else None)
            row_num += 1

        summary = summarize(store)
        row_num += 1
        stats = [
            ("Total students", summary['total_students']),
            ("Total batches", summary['total_batches']),
            ("Allocated students", summary['allocated_count']),
            ("Unallocated students", summary['unallocated_count']),
            ("Total capacity", summary['total_capacity']),
        ]
        for label, value in stats:
            ws.cell(row=row_num, column=1, value=label).font = Font(bold=True)
            cell = ws.cell(row=row_num, column=2, value=value)
            cell.fill = TOTALS_FILL
            row_num += 1

        self._fit_columns(ws, len(headers), row_num)

    def _write_header(self, ws, row: int, headers):
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = Font(bold=True, size=12, color="FFFFFF")
            cell.fill = HEADER_FILL
            cell.border = THIN_BORDER
            cell.alignment = Alignment(horizontal='center', vertical='center')

    def _write_row(self, ws, row: int, values, fill: Optional[PatternFill] = None):
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.border = THIN_BORDER
            if fill is not None:
                cell.fill = fill

    def _fit_columns(self, ws, column_count: int, last_row: int):
        for col_idx in range(1, column_count + 1):
            max_length = 0
            column_letter = get_column_letter(col_idx)
            for row_idx in range(1, last_row + 1):
                value = ws.cell(row=row_idx, column=col_idx).value
                if value is not None:
                    max_length = max(max_length, len(str(value)))
            # Cap at 50 characters
            ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

    def _save(self, wb: Workbook, filename: str, what: str) -> str:
        filepath = os.path.join(self.export_folder, filename)
        try:
            os.makedirs(self.export_folder, exist_ok=True)
            wb.save(filepath)
        except OSError as e:
            self.logger.error(f"Error exporting {what}: {e}")
            raise StorageError(filepath, f"could not write workbook ({e})")

        self.logger.info(f"Exported {what} to {filepath}")
        return filepath
