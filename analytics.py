"""
Aggregated statistics over feedback submissions.

Everything is recomputed from the raw collections on each call; the
submission volume is bounded by the roster size.
"""
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from models import FeedbackSubmission
from questions import ACCOMPLISHMENT, FACILITIES, NO, PARTICIPATION, RATED_SECTIONS, RATING_SCALE, YES

# counts are ordered best to worst: [Very Good(4), Good(3), Average(2), Below Average(1)]
QuestionStats = namedtuple('QuestionStats', ['counts', 'average', 'answered', 'responses'])
ParticipationStats = namedtuple('ParticipationStats', ['yes', 'no', 'responses'])


def round2(value: float) -> float:
    """Round to two decimals, halves away from zero, on the decimal value."""
    return float(Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def mean(values: List[int]) -> float:
    if not values:
        return 0.0
    return round2(sum(values) / len(values))


class SurveyAnalytics:
    """
    Read-only queries over a store, or over an explicit list of submissions
    (used for per-department reports).
    """

    def __init__(self, store=None, submissions: Optional[List[FeedbackSubmission]] = None):
        if store is None and submissions is None:
            raise ValueError("SurveyAnalytics needs a store or a list of submissions")
        self.store = store
        self._submissions = submissions

    @property
    def submissions(self) -> List[FeedbackSubmission]:
        if self._submissions is not None:
            return self._submissions
        return self.store.get_submissions()

    def question_stats(self, section: str, question_id: int) -> QuestionStats:
        """
        Rating histogram and average for one rated question.

        A submission without an answer to the question lands in no bucket and
        is left out of the average; answered < responses shows the gap.
        """
        if section not in RATED_SECTIONS:
            raise ValueError(f"{section} is not a rated section")

        submissions = self.submissions
        counts = [0] * len(RATING_SCALE)
        ratings = []
        for submission in submissions:
            answer = submission.find_answer(section, question_id)
            if answer is None or answer.rating not in RATING_SCALE:
                continue
            counts[RATING_SCALE.index(answer.rating)] += 1
            ratings.append(answer.rating)

        return QuestionStats(counts, mean(ratings), len(ratings), len(submissions))

    def participation_stats(self, question_id: int) -> ParticipationStats:
        submissions = self.submissions
        yes = no = 0
        for submission in submissions:
            answer = submission.find_answer(PARTICIPATION, question_id)
            if answer is None:
                continue
            if answer.rating == YES:
                yes += 1
            elif answer.rating == NO:
                no += 1
        return ParticipationStats(yes, no, len(submissions))

    def feedback_by_department(self, department: str) -> List[FeedbackSubmission]:
        return [f for f in self.submissions if f.department == department]

    def department_analytics(self) -> Dict:
        if self.store is None:
            raise ValueError("department_analytics needs the student roster from a store")

        students = self.store.get_students()
        submissions = self.submissions

        departments = []
        for student in students:
            if student.department not in departments:
                departments.append(student.department)

        total = len(students)
        submitted = sum(1 for s in students if s.has_submitted)

        per_department = []
        for dept in departments:
            dept_students = [s for s in students if s.department == dept]
            dept_feedback = [f for f in submissions if f.department == dept]
            dept_submitted = sum(1 for s in dept_students if s.has_submitted)

            facility_ratings = [a.rating for f in dept_feedback for a in f.answers if a.section == FACILITIES]
            accomplishment_ratings = [a.rating for f in dept_feedback for a in f.answers
                                      if a.section == ACCOMPLISHMENT]

            per_department.append({
                'department': dept,
                'total': len(dept_students),
                'submitted': dept_submitted,
                'pending': len(dept_students) - dept_submitted,
                'facility_avg': mean(facility_ratings),
                'accomplishment_avg': mean(accomplishment_ratings),
            })

        return {
            'total': total,
            'submitted': submitted,
            'pending': total - submitted,
            'departments': departments,
            'per_department': per_department,
        }
