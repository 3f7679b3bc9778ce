"""
Team roster.
"""
import logging
import re
import uuid

from .database import TeamMember, utcnow
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


class TeamService:
    """Creates and lists team members. Members are never updated or removed."""

    def __init__(self, storage):
        self.storage = storage

    def create(self, data) -> TeamMember:
        if not isinstance(data, dict):
            raise ValidationError("Team member data must be an object")

        errors = {}
        for key in ('name', 'email', 'role'):
            value = data.get(key)
            if not isinstance(value, str) or not value.strip():
                errors[key] = "required"
        email = (data.get('email') or '').strip() if isinstance(data.get('email'), str) else ''
        if 'email' not in errors and not EMAIL_RE.match(email):
            errors['email'] = "must be a valid email address"
        department = data.get('department')
        if department is not None and not isinstance(department, str):
            errors['department'] = "must be a string"
        for key in set(data) - {'name', 'email', 'role', 'department'}:
            errors[key] = "unknown field"
        if errors:
            raise ValidationError("Invalid team member data", details=errors)

        if self.storage.find_team_member_by_email(email):
            raise ValidationError(
                f"A team member with email {email} already exists",
                details={'email': "already exists"}
            )

        member = TeamMember(
            id=str(uuid.uuid4()),
            name=data['name'].strip(),
            email=email,
            role=data['role'].strip(),
            department=department,
            joined_at=utcnow()
        )
        self.storage.add_team_member(member)
        logger.info(f"Added team member {member.name} <{member.email}>")
        return member

    def list(self):
        return self.storage.list_team_members()
