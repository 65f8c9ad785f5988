#!/usr/bin/env python3
"""
Create demo data for the exit survey portal: a generated student roster and,
optionally, random feedback from part of it.
"""
import os
import random
import sys
from faker import Faker

from database import SurveyStore
from feedback import SubmissionRecorder, build_submission
from models import StudentSession
from questions import DEPARTMENTS, QUESTIONS, SECTIONS, valid_ratings

DEPARTMENT_CODES = {
    'CIVIL': 'CE',
    'MECH': 'ME',
    'EEE': 'EE',
    'ECE': 'EC',
    'CSE': 'CS',
    'IT': 'IT',
}


def create_roster(students_per_department=30, batch='22', seed=None):
    """Create realistic student records, one block of roll numbers per department."""
    if seed is not None:
        Faker.seed(seed)
    fake = Faker('en_IN')  # Indian locale for better names

    students = []
    for department in DEPARTMENTS:
        code = DEPARTMENT_CODES[department]
        for i in range(students_per_department):
            roll_number = f"{batch}{code}{str(i + 1).zfill(2)}"
            dob = fake.date_of_birth(minimum_age=18, maximum_age=21)
            students.append({
                'roll_number': roll_number,
                'name': fake.name().upper(),
                'department': department,
                'dob': dob.strftime('%d/%m/%Y'),
            })
    return students


def random_ratings(rng=random):
    return {
        section: {q.id: rng.choice(valid_ratings(section)) for q in QUESTIONS[section]}
        for section in SECTIONS
    }


def create_random_submissions(store, fraction=0.5, seed=None):
    """Submit random, complete feedback for a share of the not-yet-submitted students."""
    rng = random.Random(seed)
    fake = Faker('en_IN')
    recorder = SubmissionRecorder(store)

    pending = [s for s in store.get_students() if not s.has_submitted]
    chosen = rng.sample(pending, int(len(pending) * fraction))
    for student in chosen:
        session = StudentSession(student.roll_number, student.name, student.department)
        comments = {
            'strengths': fake.sentence(),
            'improvements': fake.sentence(),
        }
        recorder.submit(build_submission(session, random_ratings(rng), comments))
    return len(chosen)


if __name__ == "__main__":
    db_path = sys.argv[1] if len(sys.argv) > 1 else os.environ.get('DATABASE', 'survey.db')

    print(f"🎓 Creating exit survey demo data in '{db_path}'")
    print("=" * 50)

    store = SurveyStore(db_path)
    try:
        result = store.add_students(create_roster())
        print(f"📊 Students added: {result['added']} "
              f"({result['duplicates']} duplicates, {result['invalid']} invalid skipped)")

        submitted = create_random_submissions(store)
        print(f"📝 Random submissions recorded: {submitted}")
        print(f"\n✅ Demo data ready! Log in as admin/admin123 to view the dashboard")
    finally:
        store.close()
