import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from database import SUBMISSIONS
from errors import IncompleteSubmission
from models import Answer, FeedbackSubmission, StudentSession
from questions import SECTIONS, question_ids, valid_ratings

COMMENT_FIELDS = ['strengths', 'improvements', 'general_strengths',
                  'general_improvements', 'general_admin']

INCOMPLETE_MESSAGES = {
    'facilities': 'Please answer all facility questions',
    'participation': 'Please answer all participation questions',
    'accomplishment': 'Please answer all accomplishment questions',
}


class SubmissionRecorder:
    """
    Single writer of submission state.

    submit() trusts its input: it neither checks completeness (see
    check_complete) nor refuses a second submission for the same roll number.
    """

    def __init__(self, store):
        self.logger = logging.getLogger(__name__)
        self.store = store

    def submit(self, submission: FeedbackSubmission):
        with self.store.transaction():
            self.store.update(SUBMISSIONS, lambda subs: subs + [submission.to_dict()])
            self.store.mark_submitted(submission.roll_number)
        self.logger.info(f"Recorded feedback from {submission.roll_number} ({submission.department})")


def check_complete(answers: List[Answer]):
    """
    Raise IncompleteSubmission unless every section has exactly one valid
    answer per question.
    """
    for section in SECTIONS:
        expected = question_ids(section)
        given = [a for a in answers if a.section == section]
        ids = [a.question_id for a in given]

        if len(ids) != len(set(ids)):
            raise IncompleteSubmission(f"Duplicate answers in {section} section", section)
        unknown = set(ids) - set(expected)
        if unknown:
            raise IncompleteSubmission(f"Unknown {section} question(s): {sorted(unknown)}", section)
        if set(ids) != set(expected):
            raise IncompleteSubmission(INCOMPLETE_MESSAGES[section], section)
        for answer in given:
            if answer.rating not in valid_ratings(section):
                raise IncompleteSubmission(
                    f"Invalid rating {answer.rating} for {section} question {answer.question_id}", section)

    unknown_sections = {a.section for a in answers} - set(SECTIONS)
    if unknown_sections:
        raise IncompleteSubmission(f"Unknown section(s): {sorted(unknown_sections)}")


def parse_rating(value) -> int:
    """Whole-number rating from JSON: an int (not a bool) or a digit-only string"""
    if isinstance(value, bool):
        raise ValueError(f"Not a rating: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError(f"Not a rating: {value!r}")


def build_submission(session: StudentSession, ratings: Dict, comments: Optional[Dict] = None,
                     submitted_at: Optional[str] = None) -> FeedbackSubmission:
    """
    Assemble a submission from form data.

    ratings maps section -> {question_id: rating}; question ids may arrive as
    strings from JSON. Answers are ordered by section, then question id.
    """
    if not isinstance(ratings, dict):
        raise IncompleteSubmission("Malformed ratings")
    comments = comments or {}
    if not isinstance(comments, dict):
        raise IncompleteSubmission("Malformed comments")

    answers = []
    for section in SECTIONS:
        section_ratings = ratings.get(section) or {}
        if not isinstance(section_ratings, dict):
            raise IncompleteSubmission(f"Malformed {section} answers", section)
        try:
            pairs = sorted((int(qid), parse_rating(rating)) for qid, rating in section_ratings.items())
        except (TypeError, ValueError):
            raise IncompleteSubmission(f"Malformed {section} answers", section)
        answers.extend(Answer(qid, section, rating) for qid, rating in pairs)

    return FeedbackSubmission(
        roll_number=session.roll_number,
        student_name=session.name,
        department=session.department,
        answers=answers,
        submitted_at=submitted_at or datetime.now(timezone.utc).isoformat(),
        **{name: str(comments.get(name) or '') for name in COMMENT_FIELDS}
    )
