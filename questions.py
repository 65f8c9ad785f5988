"""
Static reference data for the exit survey: departments, question sets and
rating labels.
"""
from typing import Dict, List

from models import Question

FACILITIES = 'facilities'
PARTICIPATION = 'participation'
ACCOMPLISHMENT = 'accomplishment'

SECTIONS = [FACILITIES, PARTICIPATION, ACCOMPLISHMENT]
RATED_SECTIONS = [FACILITIES, ACCOMPLISHMENT]

DEPARTMENTS = ['CIVIL', 'MECH', 'EEE', 'ECE', 'CSE', 'IT']

DEPARTMENT_NAMES = {
    'CIVIL': 'Civil Engineering',
    'MECH': 'Mechanical Engineering',
    'EEE': 'Electrical and Electronics Engineering',
    'ECE': 'Electronics and Communication Engineering',
    'CSE': 'Computer Science and Engineering',
    'IT': 'Information Technology',
}

# Best to worst; analytics bucket counts use the same order
RATING_SCALE = [4, 3, 2, 1]
RATING_LABELS = {
    4: 'Very Good',
    3: 'Good',
    2: 'Average',
    1: 'Below Average',
}

YES = 1
NO = 0

facility_questions = [
    Question(1, FACILITIES, 'Classrooms and teaching aids'),
    Question(2, FACILITIES, 'Laboratory facilities and equipment'),
    Question(3, FACILITIES, 'Library books, journals and reading space'),
    Question(4, FACILITIES, 'Computer and internet facilities'),
    Question(5, FACILITIES, 'Sports and extra-curricular facilities'),
    Question(6, FACILITIES, 'Hostel and canteen facilities'),
    Question(7, FACILITIES, 'Drinking water, sanitation and campus upkeep'),
    Question(8, FACILITIES, 'Placement and career guidance support'),
]

participation_questions = [
    Question(1, PARTICIPATION, 'Did you take part in symposiums or technical events?'),
    Question(2, PARTICIPATION, 'Did you attend an industrial visit or in-plant training?'),
    Question(3, PARTICIPATION, 'Did you take part in sports or cultural events?'),
    Question(4, PARTICIPATION, 'Were you a member of NSS, NCC or a student club?'),
    Question(5, PARTICIPATION, 'Did you attend any value-added or certification course?'),
]

accomplishment_questions = [
    Question(1, ACCOMPLISHMENT, 'Knowledge of basic science and engineering fundamentals'),
    Question(2, ACCOMPLISHMENT, 'Ability to use modern tools and equipment of the discipline'),
    Question(3, ACCOMPLISHMENT, 'Ability to carry out experiments and interpret results'),
    Question(4, ACCOMPLISHMENT, 'Communication and presentation skills'),
    Question(5, ACCOMPLISHMENT, 'Ability to work in a team'),
    Question(6, ACCOMPLISHMENT, 'Awareness of professional ethics and responsibilities'),
    Question(7, ACCOMPLISHMENT, 'Awareness of environment and sustainability'),
    Question(8, ACCOMPLISHMENT, 'Confidence to pursue employment or higher studies'),
]

QUESTIONS: Dict[str, List[Question]] = {
    FACILITIES: facility_questions,
    PARTICIPATION: participation_questions,
    ACCOMPLISHMENT: accomplishment_questions,
}

SECTION_TITLES = {
    FACILITIES: 'A. General Assessment',
    PARTICIPATION: 'B. Students Participation',
    ACCOMPLISHMENT: 'C. Assessment of Accomplishment',
}


def valid_ratings(section: str) -> List[int]:
    if section == PARTICIPATION:
        return [YES, NO]
    return RATING_SCALE


def question_ids(section: str) -> List[int]:
    return [q.id for q in QUESTIONS[section]]
