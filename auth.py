import logging
from typing import Optional

from errors import BadCredential, UnknownIdentity
from models import AdminSession, Session, StudentSession, session_from_dict

STUDENT = 'student'
ADMIN = 'admin'
ROLES = (STUDENT, ADMIN)


class AuthGate:
    """
    Validates login attempts against the store and keeps the current session.

    Passwords are compared as plain text and sessions never expire.

    session_slot is any object with load_session/save_session/clear_session;
    the store itself is used when none is given.
    """

    def __init__(self, store, session_slot=None):
        self.logger = logging.getLogger(__name__)
        self.store = store
        self.session_slot = session_slot if session_slot is not None else store

    def authenticate(self, role: str, identity: str, password: str) -> Session:
        if role == STUDENT:
            student = self.store.get_student(identity or '')
            if student is None:
                raise UnknownIdentity('Invalid Roll Number')
            if student.password != password:
                raise BadCredential('Invalid Password')
            return StudentSession(student.roll_number, student.name, student.department)

        if role == ADMIN:
            admin = self.store.get_admin()
            if admin.username != identity or admin.password != password:
                raise BadCredential('Invalid Admin Credentials')
            return AdminSession(admin.username)

        raise ValueError(f"Unknown role: {role}")

    def login(self, role: str, identity: str, password: str) -> Session:
        session = self.authenticate(role, identity, password)
        self.session_slot.save_session(session.to_dict())
        self.logger.info(f"{session.role} login: {identity}")
        return session

    def logout(self):
        self.session_slot.clear_session()

    def current_session(self) -> Optional[Session]:
        return session_from_dict(self.session_slot.load_session())
