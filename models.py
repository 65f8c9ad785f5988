# Records are persisted as JSON documents by SurveyStore (see database.py).
# Each model converts to and from the plain dicts stored there.

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Union


@dataclass
class Student:
    roll_number: str
    name: str
    department: str
    dob: str = ''
    password: str = ''
    has_submitted: bool = False

    def __post_init__(self):
        # Initial password is the roll number
        if not self.password:
            self.password = self.roll_number

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Student':
        return cls(
            roll_number=str(data['roll_number']),
            name=data['name'],
            department=data['department'],
            dob=data.get('dob', ''),
            password=data.get('password', ''),
            has_submitted=bool(data.get('has_submitted', False)),
        )


@dataclass
class AdminCredential:
    username: str
    password: str

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'AdminCredential':
        return cls(username=data['username'], password=data['password'])


@dataclass(frozen=True)
class Question:
    id: int
    section: str
    text: str


@dataclass(frozen=True)
class Answer:
    question_id: int
    section: str
    rating: int

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Answer':
        return cls(int(data['question_id']), data['section'], int(data['rating']))


@dataclass
class FeedbackSubmission:
    roll_number: str
    student_name: str
    department: str
    answers: List[Answer] = field(default_factory=list)
    strengths: str = ''
    improvements: str = ''
    general_strengths: str = ''
    general_improvements: str = ''
    general_admin: str = ''
    submitted_at: str = ''

    def find_answer(self, section: str, question_id: int) -> Optional[Answer]:
        return next((a for a in self.answers
                     if a.section == section and a.question_id == question_id), None)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['answers'] = [a.to_dict() for a in self.answers]
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'FeedbackSubmission':
        return cls(
            roll_number=str(data['roll_number']),
            student_name=data.get('student_name', ''),
            department=data['department'],
            answers=[Answer.from_dict(a) for a in data.get('answers', [])],
            strengths=data.get('strengths', ''),
            improvements=data.get('improvements', ''),
            general_strengths=data.get('general_strengths', ''),
            general_improvements=data.get('general_improvements', ''),
            general_admin=data.get('general_admin', ''),
            submitted_at=data.get('submitted_at', ''),
        )


@dataclass(frozen=True)
class StudentSession:
    roll_number: str
    name: str
    department: str
    role = 'student'

    def to_dict(self) -> Dict:
        return {'role': self.role, 'roll_number': self.roll_number,
                'name': self.name, 'department': self.department}


@dataclass(frozen=True)
class AdminSession:
    username: str
    role = 'admin'

    def to_dict(self) -> Dict:
        return {'role': self.role, 'username': self.username}


Session = Union[StudentSession, AdminSession]


def session_from_dict(data: Optional[Dict]) -> Optional[Session]:
    """Rebuild a persisted session record, or None for an empty/unknown one."""
    if not data:
        return None
    role = data.get('role')
    if role == StudentSession.role:
        return StudentSession(data['roll_number'], data['name'], data['department'])
    if role == AdminSession.role:
        return AdminSession(data['username'])
    return None
