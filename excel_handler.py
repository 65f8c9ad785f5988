import pandas as pd
import openpyxl
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter
import os
import logging
from datetime import datetime
from typing import Optional, List

from analytics import SurveyAnalytics
from models import FeedbackSubmission, Student
from questions import (ACCOMPLISHMENT, DEPARTMENT_NAMES, FACILITIES, QUESTIONS, RATING_LABELS,
                       RATING_SCALE, SECTION_TITLES, PARTICIPATION)

COLLEGE_NAME = "Government Nachimuthu Polytechnic College"
COLLEGE_LINES = [
    "Aided Autonomous Institute · Approved by AICTE, New Delhi",
    "Affiliated to State Board of Technical Education & Training, Tamil Nadu",
]
TERM = "VI"


class ExcelHandler:
    def __init__(self, export_folder: str = 'exports'):
        self.logger = logging.getLogger(__name__)
        self.export_folder = export_folder
        os.makedirs(self.export_folder, exist_ok=True)

        self.header_font = Font(bold=True, size=11)
        self.header_fill = PatternFill(start_color="D9E1F2", end_color="D9E1F2", fill_type="solid")
        self.border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )
        self.center = Alignment(horizontal='center', vertical='center')
        self.wrap = Alignment(vertical='top', wrap_text=True)

    def export_department_report(self, department: str,
                                 feedback: List[FeedbackSubmission]) -> Optional[str]:
        """
        Export the exit survey report of one department to an Excel file.

        Layout follows the printed report: college header, one table per
        section with the rating distribution of every question, the
        strengths/improvements comments, and the signature footer.
        """
        try:
            stats = SurveyAnalytics(submissions=feedback)
            total_responses = len(feedback)
            dept_name = DEPARTMENT_NAMES.get(department, department)

            wb = openpyxl.Workbook()
            ws = wb.active
            ws.title = f"{department} Exit Survey"

            # College header
            ws['A1'] = COLLEGE_NAME
            ws['A1'].font = Font(bold=True, size=14)
            ws['A1'].alignment = self.center
            ws.merge_cells('A1:G1')
            row = 2
            for line in COLLEGE_LINES:
                ws.cell(row=row, column=1, value=line).alignment = self.center
                ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=7)
                row += 1

            ws.cell(row=row, column=1, value="EXIT SURVEY").font = Font(bold=True, size=12)
            ws.cell(row=row, column=1).alignment = self.center
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=7)
            row += 1
            ws.cell(row=row, column=1,
                    value=f"Department: {dept_name} · Term: {TERM} · Total Responses: {total_responses}")
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=7)
            row += 2

            # Rated sections
            rating_headers = [f"{RATING_LABELS[r]} ({r})" for r in RATING_SCALE]
            for section in (FACILITIES, ACCOMPLISHMENT):
                row = self._write_section_title(ws, row, SECTION_TITLES[section])
                row = self._write_header(ws, row, ['S.No', 'Criteria'] + rating_headers + ['Average', 'Total'])
                for question in QUESTIONS[section]:
                    q_stats = stats.question_stats(section, question.id)
                    values = [question.id, question.text] + list(q_stats.counts) + [q_stats.average,
                                                                                    total_responses]
                    row = self._write_row(ws, row, values)
                row += 1

            # Participation
            row = self._write_section_title(ws, row, SECTION_TITLES[PARTICIPATION])
            row = self._write_header(ws, row, ['S.No', 'Question', 'Yes', 'No', 'Total'])
            for question in QUESTIONS[PARTICIPATION]:
                p_stats = stats.participation_stats(question.id)
                row = self._write_row(ws, row, [question.id, question.text, p_stats.yes, p_stats.no,
                                                total_responses])
            row += 1

            # Comments
            row = self._write_section_title(ws, row, "Strengths and Areas for Improvement")
            row = self._write_header(ws, row, ['S.No', 'Strengths', 'Areas that need improvement'])
            for i, submission in enumerate(feedback, 1):
                row = self._write_row(ws, row, [i, submission.strengths or '-', submission.improvements or '-'])

            # Footer
            row += 1
            ws.cell(row=row, column=1, value=f"Date: {datetime.now().strftime('%d/%m/%Y')}")
            ws.cell(row=row, column=5, value=f"Exit Survey Report - {dept_name}")
            row += 3
            ws.cell(row=row, column=1, value="HOD Signature").font = Font(bold=True)
            ws.cell(row=row, column=5, value="Principal Signature").font = Font(bold=True)

            widths = {1: 8, 2: 60, 3: 16, 4: 16, 5: 16, 6: 18, 7: 10}
            for col_idx, width in widths.items():
                ws.column_dimensions[get_column_letter(col_idx)].width = width

            filename = f"{department}_exit_survey_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
            filepath = os.path.join(self.export_folder, filename)
            wb.save(filepath)

            self.logger.info(f"Exported {department} exit survey report to {filepath}")
            return filepath

        except Exception as e:
            self.logger.error(f"Error exporting department report: {str(e)}")
            return None

    def _write_section_title(self, ws, row: int, title: str) -> int:
        ws.cell(row=row, column=1, value=title).font = Font(bold=True, size=12)
        return row + 1

    def _write_header(self, ws, row: int, headers: List[str]) -> int:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.border = self.border
            cell.alignment = self.center
        return row + 1

    def _write_row(self, ws, row: int, values: List) -> int:
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.border = self.border
            # Text columns wrap, counts are centred
            cell.alignment = self.wrap if isinstance(value, str) else self.center
        return row + 1

    def export_students(self, students: List[Student]) -> Optional[str]:
        """
        Export the student roster with submission status. Passwords are left out.
        """
        try:
            df = pd.DataFrame([{
                'Roll Number': s.roll_number,
                'Name': s.name,
                'Department': s.department,
                'Date of Birth': s.dob,
                'Status': 'Submitted' if s.has_submitted else 'Pending',
            } for s in students], columns=['Roll Number', 'Name', 'Department', 'Date of Birth', 'Status'])

            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            filepath = os.path.join(self.export_folder, f"students_export_{timestamp}.xlsx")
            df.to_excel(filepath, index=False, engine='openpyxl')

            self.logger.info(f"Exported {len(df)} students to {filepath}")
            return filepath

        except Exception as e:
            self.logger.error(f"Error exporting students: {str(e)}")
            return None
