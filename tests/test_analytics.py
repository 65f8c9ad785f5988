"""
Unit tests for the survey analytics
"""
import random

import pytest

from analytics import SurveyAnalytics, round2
from database import SurveyStore
from feedback import SubmissionRecorder
from questions import DEPARTMENTS, QUESTIONS, RATED_SECTIONS


@pytest.fixture
def analytics(store):
    return SurveyAnalytics(store)


class TestRounding:

    @pytest.mark.parametrize('value,expected', [
        (11 / 3, 3.67),
        (2.675, 2.68),
        (1.005, 1.01),
        (-1.005, -1.01),
        (3.0, 3.0),
        (0, 0.0),
    ])
    def test_round_half_away_from_zero(self, value, expected):
        assert round2(value) == expected


class TestQuestionStats:

    def test_empty_collection_is_all_zero(self, analytics):
        for section in RATED_SECTIONS:
            for question in QUESTIONS[section]:
                stats = analytics.question_stats(section, question.id)
                assert stats.counts == [0, 0, 0, 0]
                assert stats.average == 0
                assert stats.answered == 0
                assert stats.responses == 0

    def test_counts_are_ordered_best_to_worst(self, rated_submission):
        feedback = [rated_submission([('facilities', 1, r)]) for r in (4, 4, 3)]
        stats = SurveyAnalytics(submissions=feedback).question_stats('facilities', 1)

        # [Very Good(4), Good(3), Average(2), Below Average(1)]
        assert stats.counts == [2, 1, 0, 0]
        assert stats.average == 3.67

    def test_each_rating_lands_in_its_bucket(self, rated_submission):
        feedback = [rated_submission([('accomplishment', 2, r)]) for r in (1, 2, 2, 3, 3, 3, 4)]
        stats = SurveyAnalytics(submissions=feedback).question_stats('accomplishment', 2)
        assert stats.counts == [1, 3, 2, 1]
        assert stats.average == 2.57

    def test_order_independent(self, rated_submission):
        feedback = [rated_submission([('facilities', 3, random.choice([1, 2, 3, 4]))]) for _ in range(25)]
        expected = SurveyAnalytics(submissions=feedback).question_stats('facilities', 3)

        for _ in range(5):
            shuffled = feedback[:]
            random.shuffle(shuffled)
            assert SurveyAnalytics(submissions=shuffled).question_stats('facilities', 3) == expected

    def test_missing_answer_is_not_counted(self, rated_submission):
        feedback = [
            rated_submission([('facilities', 1, 4)]),
            rated_submission([('facilities', 1, 2)]),
            rated_submission([('facilities', 2, 1)]),
        ]
        stats = SurveyAnalytics(submissions=feedback).question_stats('facilities', 1)

        assert stats.counts == [1, 0, 1, 0]
        assert stats.average == 3.0
        assert stats.answered == 2
        assert stats.responses == 3

    def test_sections_are_kept_apart(self, rated_submission):
        feedback = [rated_submission([('facilities', 1, 1), ('accomplishment', 1, 4)])]
        analytics = SurveyAnalytics(submissions=feedback)
        assert analytics.question_stats('facilities', 1).counts == [0, 0, 0, 1]
        assert analytics.question_stats('accomplishment', 1).counts == [1, 0, 0, 0]

    def test_participation_is_not_a_rated_section(self, analytics):
        with pytest.raises(ValueError):
            analytics.question_stats('participation', 1)

    def test_needs_a_source(self):
        with pytest.raises(ValueError):
            SurveyAnalytics()


class TestParticipationStats:

    def test_empty(self, analytics):
        for question in QUESTIONS['participation']:
            stats = analytics.participation_stats(question.id)
            assert (stats.yes, stats.no, stats.responses) == (0, 0, 0)

    def test_yes_no_partition(self, rated_submission):
        feedback = [rated_submission([('participation', 1, r)]) for r in (1, 1, 0, 1, 0)]
        stats = SurveyAnalytics(submissions=feedback).participation_stats(1)
        assert (stats.yes, stats.no) == (3, 2)
        assert stats.yes + stats.no == stats.responses

    def test_missing_answers_count_neither_way(self, rated_submission):
        feedback = [
            rated_submission([('participation', 1, 1)]),
            rated_submission([('participation', 2, 0)]),
            rated_submission([('facilities', 1, 4)]),
        ]
        stats = SurveyAnalytics(submissions=feedback).participation_stats(1)
        assert (stats.yes, stats.no) == (1, 0)
        assert stats.yes + stats.no < stats.responses


class TestDepartmentAnalytics:

    def test_seed_roster_without_submissions(self, analytics):
        result = analytics.department_analytics()

        assert result['total'] == 10
        assert result['submitted'] == 0
        assert result['pending'] == 10
        assert result['departments'] == DEPARTMENTS
        for dept in result['per_department']:
            assert dept['submitted'] == 0
            assert dept['pending'] == dept['total']
            assert dept['facility_avg'] == 0
            assert dept['accomplishment_avg'] == 0
        assert sum(d['total'] for d in result['per_department']) == 10

    def test_after_submissions(self, store, analytics, make_submission, make_ratings):
        recorder = SubmissionRecorder(store)
        recorder.submit(make_submission('23CE01', 'ADITHYA P', 'CIVIL',
                                        ratings=make_ratings(facilities=4, accomplishment=3)))
        recorder.submit(make_submission('23CE02', 'ANBALAGAN M', 'CIVIL',
                                        ratings=make_ratings(facilities=3, accomplishment=2)))
        recorder.submit(make_submission('23IT01', 'LOKESH M', 'IT',
                                        ratings=make_ratings(facilities=1, accomplishment=1)))

        result = analytics.department_analytics()
        assert (result['total'], result['submitted'], result['pending']) == (10, 3, 7)

        by_dept = {d['department']: d for d in result['per_department']}
        assert by_dept['CIVIL']['submitted'] == 2
        assert by_dept['CIVIL']['pending'] == 0
        assert by_dept['CIVIL']['facility_avg'] == 3.5
        assert by_dept['CIVIL']['accomplishment_avg'] == 2.5
        assert by_dept['IT']['submitted'] == 1
        assert by_dept['IT']['facility_avg'] == 1.0
        assert by_dept['MECH']['facility_avg'] == 0

    def test_needs_a_store(self):
        with pytest.raises(ValueError):
            SurveyAnalytics(submissions=[]).department_analytics()

    def test_feedback_by_department(self, store, analytics, make_submission):
        recorder = SubmissionRecorder(store)
        recorder.submit(make_submission('23CS01', 'HARISH V', 'CSE'))
        recorder.submit(make_submission('23EC01', 'GOWTHAM S', 'ECE'))

        assert [f.roll_number for f in analytics.feedback_by_department('CSE')] == ['23CS01']
        assert analytics.feedback_by_department('MECH') == []


class TestReloadRoundTrip:

    def test_analytics_survive_reload(self, store, make_submission, make_ratings):
        recorder = SubmissionRecorder(store)
        recorder.submit(make_submission('23ME01', 'ARUN KUMAR S', 'MECH',
                                        ratings=make_ratings(facilities=2, participation=0),
                                        strengths='Workshop, "CNC" lab\n& staff',
                                        general_admin='Bus timings · fees <office>'))
        recorder.submit(make_submission('23EE01', 'DHARANI R', 'EEE'))

        before = SurveyAnalytics(store)
        reopened = SurveyStore(store.path)
        try:
            after = SurveyAnalytics(reopened)
            assert after.department_analytics() == before.department_analytics()
            for section in RATED_SECTIONS:
                for question in QUESTIONS[section]:
                    assert after.question_stats(section, question.id) == \
                        before.question_stats(section, question.id)
            for question in QUESTIONS['participation']:
                assert after.participation_stats(question.id) == before.participation_stats(question.id)
            assert reopened.get_submissions() == store.get_submissions()
            assert reopened.get_submissions()[0].strengths == 'Workshop, "CNC" lab\n& staff'
        finally:
            reopened.close()
