import os
import logging
from functools import wraps

from flask import Flask, request, jsonify, send_file, session

from analytics import SurveyAnalytics
from auth import ADMIN, STUDENT, AuthGate
from database import SurveyStore
from errors import BadCredential, IncompleteSubmission, StoreUnavailable, UnknownIdentity
from excel_handler import ExcelHandler
from feedback import SubmissionRecorder, build_submission, check_complete
from questions import DEPARTMENT_NAMES, DEPARTMENTS, QUESTIONS, RATED_SECTIONS, RATING_LABELS, RATING_SCALE, SECTIONS

# Set up logging
logging.basicConfig(level=logging.DEBUG)

SESSION_USER_KEY = 'user'


class CookieSessionSlot:
    """Keeps the current session in Flask's signed cookie, one per browser."""

    def load_session(self):
        return session.get(SESSION_USER_KEY)

    def save_session(self, record):
        session[SESSION_USER_KEY] = record

    def clear_session(self):
        session.pop(SESSION_USER_KEY, None)


def student_public(student):
    return {
        'roll_number': student.roll_number,
        'name': student.name,
        'department': student.department,
        'dob': student.dob,
        'has_submitted': student.has_submitted,
    }


def create_app(config=None):
    app = Flask(__name__)
    app.secret_key = os.environ.get("SESSION_SECRET", "dev-secret-key-change-in-production")

    # Configuration
    app.config['DATABASE'] = os.environ.get('DATABASE', 'survey.db')
    app.config['EXPORT_FOLDER'] = os.environ.get('EXPORT_FOLDER', 'exports')
    if config:
        app.config.update(config)

    # One store per application, shared by every component
    store = SurveyStore(app.config['DATABASE'])
    gate = AuthGate(store, CookieSessionSlot())
    recorder = SubmissionRecorder(store)
    analytics = SurveyAnalytics(store)
    excel_handler = ExcelHandler(app.config['EXPORT_FOLDER'])
    app.extensions['survey_store'] = store

    def require_role(role):
        def decorator(view):
            @wraps(view)
            def wrapped(*args, **kwargs):
                user = gate.current_session()
                if user is None:
                    return jsonify({'error': 'Please log in first'}), 401
                if user.role != role:
                    return jsonify({'error': 'Not allowed for this account'}), 403
                return view(user, *args, **kwargs)
            return wrapped
        return decorator

    def unknown_department(department):
        return department not in DEPARTMENTS

    @app.errorhandler(StoreUnavailable)
    def store_unavailable(e):
        logging.error(f"Store unavailable: {e.message}")
        return jsonify({'error': 'Storage is unavailable, please try again later'}), 503

    @app.route('/login', methods=['POST'])
    def login():
        data = request.get_json(silent=True) or request.form
        role = str(data.get('role') or STUDENT).strip().lower()
        identity = data.get('roll_number') if role == STUDENT else data.get('username')
        password = str(data.get('password') or '')

        try:
            user = gate.login(role, str(identity or ''), password)
        except (UnknownIdentity, BadCredential) as e:
            return jsonify({'error': e.message}), 401
        except ValueError as e:
            return jsonify({'error': str(e)}), 400

        return jsonify({'user': user.to_dict(), 'redirect': '/student' if role == STUDENT else '/admin'})

    @app.route('/logout', methods=['POST'])
    def logout():
        gate.logout()
        return jsonify({'message': 'Logged out'})

    @app.route('/session')
    def current_session():
        user = gate.current_session()
        return jsonify({'user': user.to_dict() if user else None})

    @app.route('/questions')
    def questions():
        return jsonify({
            'sections': {
                section: [{'id': q.id, 'text': q.text} for q in QUESTIONS[section]]
                for section in SECTIONS
            },
            'rating_labels': [{'rating': r, 'label': RATING_LABELS[r]} for r in RATING_SCALE],
        })

    # Student pages
    @app.route('/student')
    @require_role(STUDENT)
    def student_dashboard(user):
        student = store.get_student(user.roll_number)
        if student is None:
            return jsonify({'error': 'Student not found'}), 404
        return jsonify({'user': user.to_dict(), 'has_submitted': student.has_submitted})

    @app.route('/student/feedback', methods=['POST'])
    @require_role(STUDENT)
    def submit_feedback(user):
        data = request.get_json(silent=True) or {}
        try:
            if not isinstance(data, dict):
                raise IncompleteSubmission('Malformed feedback form')
            submission = build_submission(user, data.get('ratings') or {}, data.get('comments') or {})
            check_complete(submission.answers)
        except IncompleteSubmission as e:
            return jsonify({'error': e.message, 'section': e.section}), 400

        # The flag check and the append share one write so a student records at most once
        with store.transaction():
            student = store.get_student(user.roll_number)
            if student is None:
                return jsonify({'error': 'Student not found'}), 404
            if student.has_submitted:
                return jsonify({'error': 'Feedback already submitted'}), 409
            recorder.submit(submission)
        return jsonify({'message': 'Feedback Submitted Successfully!'}), 201

    # Admin pages
    @app.route('/admin/analytics')
    @require_role(ADMIN)
    def admin_analytics(user):
        return jsonify(analytics.department_analytics())

    @app.route('/admin/students')
    @require_role(ADMIN)
    def admin_students(user):
        department = request.args.get('department') or 'ALL'
        search = request.args.get('q', '').strip().lower()

        students = store.get_students()
        if department != 'ALL':
            students = [s for s in students if s.department == department]
        if search:
            students = [s for s in students
                        if search in s.roll_number.lower() or search in s.name.lower()]
        return jsonify([student_public(s) for s in students])

    @app.route('/admin/students/import', methods=['POST'])
    @require_role(ADMIN)
    def import_students(user):
        data = request.get_json(silent=True)
        if isinstance(data, dict):
            data = data.get('students')
        if not isinstance(data, list):
            return jsonify({'error': 'Expected a list of students'}), 400

        try:
            result = store.add_students(data)
        except StoreUnavailable:
            raise
        except Exception as e:
            logging.error(f"Error importing students: {str(e)}")
            return jsonify({'error': f'Error importing students: {str(e)}'}), 500

        result['message'] = (f"Successfully uploaded {result['added']} students "
                             f"({result['duplicates']} duplicates skipped)")
        return jsonify(result)

    @app.route('/admin/feedback/<department>')
    @require_role(ADMIN)
    def department_feedback(user, department):
        if unknown_department(department):
            return jsonify({'error': 'Department not found'}), 404
        return jsonify([f.to_dict() for f in analytics.feedback_by_department(department)])

    @app.route('/admin/report/<department>')
    @require_role(ADMIN)
    def department_report(user, department):
        if unknown_department(department):
            return jsonify({'error': 'Department not found'}), 404

        feedback = analytics.feedback_by_department(department)
        report = SurveyAnalytics(submissions=feedback)
        sections = {}
        for section in RATED_SECTIONS:
            sections[section] = []
            for q in QUESTIONS[section]:
                stats = report.question_stats(section, q.id)
                sections[section].append({
                    'question_id': q.id,
                    'text': q.text,
                    'counts': stats.counts,
                    'average': stats.average,
                    'answered': stats.answered,
                })
        sections['participation'] = []
        for q in QUESTIONS['participation']:
            stats = report.participation_stats(q.id)
            sections['participation'].append({'question_id': q.id, 'text': q.text,
                                              'yes': stats.yes, 'no': stats.no})

        return jsonify({
            'department': department,
            'name': DEPARTMENT_NAMES[department],
            'total_responses': len(feedback),
            'sections': sections,
            'comments': [{'strengths': f.strengths, 'improvements': f.improvements} for f in feedback],
        })

    @app.route('/admin/report/<department>/export')
    @require_role(ADMIN)
    def export_department_report(user, department):
        if unknown_department(department):
            return jsonify({'error': 'Department not found'}), 404

        filepath = excel_handler.export_department_report(
            department, analytics.feedback_by_department(department))
        if filepath and os.path.exists(filepath):
            return send_file(os.path.abspath(filepath), as_attachment=True,
                             download_name=os.path.basename(filepath))
        return jsonify({'error': 'Error generating Excel file'}), 500

    @app.route('/admin/export_students')
    @require_role(ADMIN)
    def export_students(user):
        students = store.get_students()
        if not students:
            return jsonify({'error': 'No student data to export'}), 404

        filepath = excel_handler.export_students(students)
        if filepath and os.path.exists(filepath):
            return send_file(os.path.abspath(filepath), as_attachment=True,
                             download_name=os.path.basename(filepath))
        return jsonify({'error': 'Error exporting students'}), 500

    return app


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', port=5000, debug=True)
