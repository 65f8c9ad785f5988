import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, List, Optional, Union

from errors import StoreUnavailable
from models import AdminCredential, FeedbackSubmission, Student
from questions import DEPARTMENTS

STUDENTS = 'students'
SUBMISSIONS = 'submissions'
ADMIN = 'admin'
COLLECTIONS = (STUDENTS, SUBMISSIONS, ADMIN)

CURRENT_SESSION = 'current_session'

DEFAULT_ADMIN = {'username': 'admin', 'password': 'admin123'}

DEMO_STUDENTS = [
    {'roll_number': '23CE01', 'name': 'ADITHYA P', 'department': 'CIVIL', 'dob': '05/04/2007'},
    {'roll_number': '23CE02', 'name': 'ANBALAGAN M', 'department': 'CIVIL', 'dob': '24/11/2007'},
    {'roll_number': '23ME01', 'name': 'ARUN KUMAR S', 'department': 'MECH', 'dob': '12/03/2007'},
    {'roll_number': '23ME02', 'name': 'BALA MURUGAN K', 'department': 'MECH', 'dob': '15/06/2007'},
    {'roll_number': '23EE01', 'name': 'DHARANI R', 'department': 'EEE', 'dob': '20/01/2007'},
    {'roll_number': '23EC01', 'name': 'GOWTHAM S', 'department': 'ECE', 'dob': '08/09/2007'},
    {'roll_number': '23CS01', 'name': 'HARISH V', 'department': 'CSE', 'dob': '11/11/2007'},
    {'roll_number': '23CS02', 'name': 'KARTHIK R', 'department': 'CSE', 'dob': '03/07/2007'},
    {'roll_number': '23IT01', 'name': 'LOKESH M', 'department': 'IT', 'dob': '22/04/2007'},
    {'roll_number': '23IT02', 'name': 'NAVEEN K', 'department': 'IT', 'dob': '19/12/2007'},
]


def seed_students() -> List[Dict]:
    return [Student.from_dict(s).to_dict() for s in DEMO_STUDENTS]


class SurveyStore:
    """
    Key/value store of whole JSON collections in a single SQLite file.

    Every collection is read and written wholesale. All writes pass through
    one lock plus an immediate SQLite transaction, so only one mutation is
    in flight per database file at a time, across threads and processes.
    """

    def __init__(self, path: str):
        self.logger = logging.getLogger(__name__)
        self.path = path
        self._lock = threading.RLock()
        self._depth = 0
        try:
            # Autocommit mode; transactions are opened explicitly below
            self.conn = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open database {path}: {e}") from e
        self.init_db()

    def init_db(self):
        """Create the collections table if it is missing"""
        self._run("""
            CREATE TABLE IF NOT EXISTS collections (
                name TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def close(self):
        with self._lock:
            self.conn.close()

    def _run(self, query, args=()):
        try:
            return self.conn.execute(query, args)
        except sqlite3.Error as e:
            self.logger.error(f"Database error on {self.path}: {str(e)}")
            raise StoreUnavailable(f"Database error: {e}") from e

    @contextmanager
    def transaction(self):
        """Group loads and saves into one atomic write. Nested use joins the outer transaction."""
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self._run("BEGIN IMMEDIATE")
            self._depth = 1
            try:
                yield self
            except Exception:
                self._depth = 0
                self._run("ROLLBACK")
                raise
            self._depth = 0
            self._run("COMMIT")

    def _read_key(self, key: str):
        row = self._run("SELECT payload FROM collections WHERE name = ?", (key,)).fetchone()
        return None if row is None else json.loads(row[0])

    def _write_key(self, key: str, value):
        payload = json.dumps(value, ensure_ascii=False)
        with self.transaction():
            self._run(
                "INSERT OR REPLACE INTO collections (name, payload, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
                (key, payload)
            )

    # Collection operations
    def load(self, collection: str) -> Union[List, Dict]:
        """Read a whole collection, seeding its default content on first use"""
        self._check_collection(collection)
        with self._lock:
            value = self._read_key(collection)
            if value is not None:
                return value
            # Another connection may seed or fill it first; decide under the write lock
            with self.transaction():
                value = self._read_key(collection)
                if value is None:
                    value = self._default(collection)
                    self.save(collection, value)
                    self.logger.info(f"Seeded default '{collection}' collection")
            return value

    def save(self, collection: str, value: Union[List, Dict]):
        self._check_collection(collection)
        self._write_key(collection, value)

    def update(self, collection: str, func: Callable) -> Union[List, Dict]:
        """Load, transform and save a collection as one write; func returns the new value"""
        with self.transaction():
            value = func(self.load(collection))
            self.save(collection, value)
            return value

    def _check_collection(self, collection):
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")

    def _default(self, collection):
        if collection == STUDENTS:
            return seed_students()
        if collection == ADMIN:
            return dict(DEFAULT_ADMIN)
        return []

    # Session slot
    def load_session(self) -> Optional[Dict]:
        with self._lock:
            return self._read_key(CURRENT_SESSION)

    def save_session(self, record: Dict):
        self._write_key(CURRENT_SESSION, record)

    def clear_session(self):
        with self.transaction():
            self._run("DELETE FROM collections WHERE name = ?", (CURRENT_SESSION,))

    # Student operations
    def get_students(self) -> List[Student]:
        students = [Student.from_dict(s) for s in self.load(STUDENTS)]
        seen = set()
        for student in students:
            key = student.roll_number.lower()
            if key in seen:
                self.logger.warning(f"Roll number {student.roll_number} collides with another student (case-insensitive)")
            seen.add(key)
        return students

    def get_student(self, roll_number: str) -> Optional[Student]:
        roll_number = str(roll_number or '').strip().lower()
        return next((s for s in self.get_students() if s.roll_number.lower() == roll_number), None)

    def mark_submitted(self, roll_number: str) -> bool:
        """Set a student's submitted flag. Returns False when the roll number is unknown."""
        found = []

        def _mark(students):
            for student in students:
                if student['roll_number'].lower() == roll_number.lower():
                    student['has_submitted'] = True
                    found.append(student['roll_number'])
                    break
            return students

        self.update(STUDENTS, _mark)
        if not found:
            self.logger.warning(f"Cannot mark unknown roll number {roll_number} as submitted")
        return bool(found)

    def add_students(self, records: Iterable[Union[Dict, Student]]) -> Dict[str, int]:
        """
        Bulk import students.

        Rows whose roll number already exists (case-insensitive), or repeats an
        earlier row of the same batch, are skipped as duplicates. Rows missing
        a roll number or name, or naming an unknown department, are skipped as
        invalid. Imported students always start as not submitted.
        """
        result = {'added': 0, 'duplicates': 0, 'invalid': 0}

        def _add(students):
            roll_numbers = {s['roll_number'].lower() for s in students}
            for record in records:
                if isinstance(record, Student):
                    record = record.to_dict()
                roll_number = str(record.get('roll_number') or '').strip()
                name = str(record.get('name') or '').strip()
                department = str(record.get('department') or '').strip().upper()

                if not roll_number or not name or department not in DEPARTMENTS:
                    self.logger.warning(f"Skipping invalid student record: {record}")
                    result['invalid'] += 1
                    continue
                if roll_number.lower() in roll_numbers:
                    result['duplicates'] += 1
                    continue

                student = Student(
                    roll_number=roll_number,
                    name=name,
                    department=department,
                    dob=str(record.get('dob') or '').strip(),
                    password=str(record.get('password') or ''),
                )
                students.append(student.to_dict())
                roll_numbers.add(roll_number.lower())
                result['added'] += 1
            return students

        self.update(STUDENTS, _add)
        self.logger.info(f"Imported {result['added']} students "
                         f"({result['duplicates']} duplicates, {result['invalid']} invalid skipped)")
        return result

    # Submission and admin operations
    def get_submissions(self) -> List[FeedbackSubmission]:
        return [FeedbackSubmission.from_dict(f) for f in self.load(SUBMISSIONS)]

    def get_admin(self) -> AdminCredential:
        return AdminCredential.from_dict(self.load(ADMIN))
