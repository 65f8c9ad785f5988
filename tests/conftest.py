"""
Exit survey portal - test configuration and fixtures
"""
import pytest
from faker import Faker

from app import create_app
from database import SurveyStore
from feedback import build_submission
from models import Answer, FeedbackSubmission, StudentSession
from questions import QUESTIONS, SECTIONS

fake = Faker()


@pytest.fixture
def store(tmp_path):
    """Fresh store on a temporary database file"""
    store = SurveyStore(str(tmp_path / 'survey.db'))
    yield store
    store.close()


@pytest.fixture
def make_ratings():
    """Complete form ratings, one value per section"""
    def _make(facilities=4, participation=1, accomplishment=3):
        values = {'facilities': facilities, 'participation': participation,
                  'accomplishment': accomplishment}
        return {section: {q.id: values[section] for q in QUESTIONS[section]} for section in SECTIONS}
    return _make


@pytest.fixture
def make_submission(make_ratings):
    """Complete submission for a seeded student"""
    def _make(roll_number='23CE01', name='ADITHYA P', department='CIVIL', ratings=None, **comments):
        session = StudentSession(roll_number, name, department)
        return build_submission(session, ratings or make_ratings(), comments)
    return _make


@pytest.fixture
def rated_submission():
    """Submission carrying only the given answers, as (section, question_id, rating) tuples"""
    def _make(answers, department='CIVIL'):
        return FeedbackSubmission(
            roll_number=fake.bothify('23??##').upper(),
            student_name=fake.name(),
            department=department,
            answers=[Answer(qid, section, rating) for section, qid, rating in answers],
        )
    return _make


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'DATABASE': str(tmp_path / 'app.db'),
        'EXPORT_FOLDER': str(tmp_path / 'exports'),
    })
    yield app
    app.extensions['survey_store'].close()


@pytest.fixture
def client(app):
    return app.test_client()
