"""
Activity log: an append-only audit trail.
"""
import logging
import uuid
from typing import List, Optional

from .database import ActivityLog, utcnow
from .exceptions import ValidationError
from .storage import Storage

logger = logging.getLogger(__name__)

SYSTEM_USER = ('system', 'System')
AI_USER = ('ai', 'AI Analysis')


class ActivityLogService:
    """Appends and lists activity log entries."""

    REQUIRED_FIELDS = ('user_id', 'user_name', 'action', 'description')

    def __init__(self, storage: Storage):
        self.storage = storage

    def append(self, data) -> ActivityLog:
        """Store a new entry with a fresh id and timestamp.

        ``company_id`` is optional and is not checked against existing
        companies.
        """
        if not isinstance(data, dict):
            raise ValidationError("Activity log data must be an object")

        errors = {}
        for key in self.REQUIRED_FIELDS:
            value = data.get(key)
            if not isinstance(value, str) or not value.strip():
                errors[key] = "required"
        company_id = data.get('company_id')
        if company_id is not None and not isinstance(company_id, str):
            errors['company_id'] = "must be a string"
        unknown = set(data) - set(self.REQUIRED_FIELDS) - {'company_id'}
        for key in unknown:
            errors[key] = "unknown field"
        if errors:
            raise ValidationError("Invalid activity log data", details=errors)

        log = ActivityLog(
            id=str(uuid.uuid4()),
            company_id=company_id or None,
            user_id=data['user_id'],
            user_name=data['user_name'],
            action=data['action'],
            description=data['description'],
            timestamp=utcnow()
        )
        self.storage.add_activity_log(log)
        logger.debug(f"Activity {log.action}: {log.description}")
        return log

    def record(self, action: str, description: str, company_id: Optional[str] = None,
               user=SYSTEM_USER) -> ActivityLog:
        """Shorthand used by the service workflows."""
        user_id, user_name = user
        return self.append({
            'company_id': company_id,
            'user_id': user_id,
            'user_name': user_name,
            'action': action,
            'description': description,
        })

    def list(self, company_id: Optional[str] = None) -> List[ActivityLog]:
        return self.storage.list_activity_logs(company_id)
