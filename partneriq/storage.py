"""
Persistence backends.

The app factory builds exactly one storage object and hands it to the
services; nothing else in the package touches ``db.session`` directly.

    DatabaseStorage  - Flask-SQLAlchemy (default)
    MemoryStorage    - dicts, for tests and throwaway demos
"""
import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from .database import Company, ActivityLog, TeamMember
from .exceptions import StorageError

logger = logging.getLogger(__name__)


class Storage:
    """Interface shared by the storage backends."""

    # Companies
    def get_company(self, company_id: str) -> Optional[Company]:
        raise NotImplementedError

    def list_companies(self) -> List[Company]:
        """All companies, most recently updated first."""
        raise NotImplementedError

    def add_company(self, company: Company) -> Company:
        raise NotImplementedError

    def save_company(self, company: Company) -> Company:
        raise NotImplementedError

    def delete_company(self, company_id: str) -> bool:
        raise NotImplementedError

    # Activity logs
    def list_activity_logs(self, company_id: Optional[str] = None) -> List[ActivityLog]:
        """Logs newest first, optionally only those for ``company_id``."""
        raise NotImplementedError

    def add_activity_log(self, log: ActivityLog) -> ActivityLog:
        raise NotImplementedError

    # Team members
    def list_team_members(self) -> List[TeamMember]:
        raise NotImplementedError

    def find_team_member_by_email(self, email: str) -> Optional[TeamMember]:
        raise NotImplementedError

    def add_team_member(self, member: TeamMember) -> TeamMember:
        raise NotImplementedError


class DatabaseStorage(Storage):
    """Storage backed by the Flask-SQLAlchemy session."""

    def __init__(self, db):
        self.db = db

    @contextmanager
    def _transaction(self, what: str):
        try:
            yield self.db.session
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            logger.error(f"Database error while trying to {what}: {e}")
            raise StorageError(f"Could not {what}: {e}") from e

    @contextmanager
    def _reading(self, what: str):
        try:
            yield self.db.session
        except SQLAlchemyError as e:
            logger.error(f"Database error while trying to {what}: {e}")
            raise StorageError(f"Could not {what}: {e}") from e

    def get_company(self, company_id):
        with self._reading('load company') as session:
            return session.get(Company, company_id)

    def list_companies(self):
        with self._reading('list companies'):
            return Company.query.order_by(Company.last_updated.desc()).all()

    def add_company(self, company):
        with self._transaction('create company') as session:
            session.add(company)
        return company

    def save_company(self, company):
        with self._transaction('update company') as session:
            session.add(company)
        return company

    def delete_company(self, company_id):
        company = self.get_company(company_id)
        if company is None:
            return False
        with self._transaction('delete company') as session:
            session.delete(company)
        return True

    def list_activity_logs(self, company_id=None):
        with self._reading('list activity logs'):
            query = ActivityLog.query
            if company_id:
                query = query.filter_by(company_id=company_id)
            return query.order_by(ActivityLog.timestamp.desc()).all()

    def add_activity_log(self, log):
        with self._transaction('write activity log') as session:
            session.add(log)
        return log

    def list_team_members(self):
        with self._reading('list team members'):
            return TeamMember.query.order_by(TeamMember.joined_at.desc()).all()

    def find_team_member_by_email(self, email):
        with self._reading('look up team member'):
            return TeamMember.query.filter(
                func.lower(TeamMember.email) == email.lower()
            ).first()

    def add_team_member(self, member):
        with self._transaction('create team member') as session:
            session.add(member)
        return member


def _newest_first(records, attr):
    # reversed() keeps later inserts ahead of earlier ones on equal timestamps
    return sorted(reversed(list(records)), key=lambda r: getattr(r, attr), reverse=True)


class MemoryStorage(Storage):
    """In-process storage. Records are plain (transient) model instances."""

    def __init__(self):
        self.companies = {}
        self.activity_logs = {}
        self.team_members = {}

    def get_company(self, company_id):
        return self.companies.get(company_id)

    def list_companies(self):
        return _newest_first(self.companies.values(), 'last_updated')

    def add_company(self, company):
        self.companies[company.id] = company
        return company

    def save_company(self, company):
        self.companies[company.id] = company
        return company

    def delete_company(self, company_id):
        return self.companies.pop(company_id, None) is not None

    def list_activity_logs(self, company_id=None):
        logs = self.activity_logs.values()
        if company_id:
            logs = [log for log in logs if log.company_id == company_id]
        return _newest_first(logs, 'timestamp')

    def add_activity_log(self, log):
        self.activity_logs[log.id] = log
        return log

    def list_team_members(self):
        return _newest_first(self.team_members.values(), 'joined_at')

    def find_team_member_by_email(self, email):
        for member in self.team_members.values():
            if member.email.lower() == email.lower():
                return member
        return None

    def add_team_member(self, member):
        self.team_members[member.id] = member
        return member
