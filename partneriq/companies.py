"""
Company service: validation, defaults, partial updates, search and filters.

The service only writes company records. Activity logging for company
writes is the caller's job (see ``operations.PartnerOperations``).
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .database import Company, DigitalTwinStatus, Industry, utcnow
from .exceptions import NotFoundError, ValidationError
from .money import parse_money
from .storage import Storage

logger = logging.getLogger(__name__)

HIGH_OPPORTUNITY_THRESHOLD = 80
MEDIUM_OPPORTUNITY_THRESHOLD = 50

# Integer columns are signed 64-bit
MIN_INT = -2 ** 63
MAX_INT = 2 ** 63 - 1

# Filter values meaning "do not filter on this field"
ALL_INDUSTRIES = "All Industries"
ALL_STATUSES = "All Statuses"
ALL_OPPORTUNITY_SCORES = "All Opportunity Scores"
ALL_COUNTRIES = "All Countries"

INDUSTRIES = [i.value for i in Industry]
DIGITAL_TWIN_STATUSES = [s.value for s in DigitalTwinStatus]

REQUIRED_FIELDS = ('name', 'industry', 'country')
TEXT_FIELDS = (
    'headquarters', 'ceo', 'website', 'notes',
    'competitive_analysis', 'dell_opportunity', 'digital_twin_strategy',
)
MONEY_FIELDS = ('revenue', 'estimated_deal_value')
COMPANY_FIELDS = frozenset(
    REQUIRED_FIELDS + TEXT_FIELDS + MONEY_FIELDS + (
        'employees', 'founded', 'business_areas',
        'digital_twin_status', 'digital_twin_maturity', 'opportunity_score',
        'next_follow_up',
    )
)


def opportunity_bucket(score: int) -> str:
    """Classify an opportunity score as 'high', 'medium' or 'low'."""
    if score >= HIGH_OPPORTUNITY_THRESHOLD:
        return 'high'
    if score >= MEDIUM_OPPORTUNITY_THRESHOLD:
        return 'medium'
    return 'low'


def parse_opportunity_bucket(label: str) -> str:
    """Map a filter label such as "Low (1-4)" to its bucket by leading word."""
    words = label.strip().split()
    bucket = words[0].lower() if words else ''
    if bucket not in ('high', 'medium', 'low'):
        raise ValidationError(
            f"Unknown opportunity score filter: {label}",
            details={'opportunity_score': "expected High, Medium or Low"}
        )
    return bucket


def _is_active(value: Optional[str], sentinel: str) -> bool:
    if value is None:
        return False
    value = value.strip()
    return bool(value) and value.lower() not in ('all', sentinel.lower())


def _is_int(value) -> bool:
    return (
        isinstance(value, int) and not isinstance(value, bool)
        and MIN_INT <= value <= MAX_INT
    )


def _parse_datetime(value):
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed
    return None


class CompanyService:
    """CRUD and queries over partner companies."""

    def __init__(self, storage: Storage):
        self.storage = storage

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate(self, data, partial: bool) -> Dict:
        if not isinstance(data, dict):
            raise ValidationError("Company data must be an object")

        errors = {}
        values = {}

        unknown = sorted(set(data) - COMPANY_FIELDS)
        for key in unknown:
            errors[key] = "unknown field"

        if not partial:
            for key in REQUIRED_FIELDS:
                if data.get(key) in (None, ''):
                    errors[key] = "required"

        for key, value in data.items():
            if key in unknown or key in errors:
                continue

            if key in REQUIRED_FIELDS:
                if not isinstance(value, str) or not value.strip():
                    errors[key] = "must be a non-empty string"
                    continue
                value = value.strip()
                if key == 'industry' and value not in INDUSTRIES:
                    errors[key] = f"must be one of: {', '.join(INDUSTRIES)}"
                    continue
                values[key] = value

            elif key in TEXT_FIELDS:
                if value is not None and not isinstance(value, str):
                    errors[key] = "must be a string"
                    continue
                values[key] = value

            elif key in MONEY_FIELDS:
                if value in (None, ''):
                    values[key] = None
                    continue
                money = parse_money(value)
                if money is None:
                    errors[key] = "must be an amount such as \"$850K\" or {\"currency\": \"USD\", \"amount\": 850000}"
                    continue
                values[key] = money

            elif key == 'employees':
                if value is not None and (not _is_int(value) or value < 0):
                    errors[key] = "must be a non-negative 64-bit integer"
                    continue
                values[key] = value

            elif key == 'founded':
                if value is not None and not _is_int(value):
                    errors[key] = "must be a 64-bit integer year"
                    continue
                values[key] = value

            elif key in ('digital_twin_maturity', 'opportunity_score'):
                if not _is_int(value):
                    errors[key] = "must be a 64-bit integer"
                    continue
                values[key] = value

            elif key == 'digital_twin_status':
                if value not in DIGITAL_TWIN_STATUSES:
                    errors[key] = f"must be one of: {', '.join(DIGITAL_TWIN_STATUSES)}"
                    continue
                values[key] = value

            elif key == 'business_areas':
                if value is None:
                    values[key] = []
                    continue
                if not isinstance(value, list) or not all(isinstance(a, str) for a in value):
                    errors[key] = "must be a list of strings"
                    continue
                values[key] = value

            elif key == 'next_follow_up':
                if value in (None, ''):
                    values[key] = None
                    continue
                parsed = _parse_datetime(value)
                if parsed is None:
                    errors[key] = "must be an ISO 8601 date or datetime"
                    continue
                values[key] = parsed

        if errors:
            raise ValidationError("Invalid company data", details=errors)
        return values

    def _apply(self, company: Company, values: Dict):
        for key, value in values.items():
            if key == 'business_areas':
                company.set_business_areas(value)
            else:
                setattr(company, key, value)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, data) -> Company:
        """Validate ``data`` and persist a new company with defaults filled in."""
        values = self._validate(data, partial=False)

        company = Company(id=str(uuid.uuid4()))
        company.digital_twin_status = DigitalTwinStatus.NOT_STARTED.value
        company.digital_twin_maturity = 0
        company.opportunity_score = 0
        company.set_business_areas([])
        self._apply(company, values)
        company.last_updated = utcnow()

        self.storage.add_company(company)
        logger.info(f"Created company {company.id} ({company.name})")
        return company

    def update(self, company_id: str, data) -> Company:
        """Shallow-merge ``data`` into the company; always bumps last_updated.

        Raises:
            NotFoundError: no company with this id.
            ValidationError: a provided field is malformed.
        """
        company = self.get(company_id)
        values = self._validate(data, partial=True)

        self._apply(company, values)
        now = utcnow()
        if company.last_updated and now < company.last_updated:
            now = company.last_updated
        company.last_updated = now

        self.storage.save_company(company)
        logger.info(f"Updated company {company.id}: {', '.join(values) or 'no fields'}")
        return company

    def delete(self, company_id: str) -> bool:
        """Remove the company. Returns False if it did not exist."""
        deleted = self.storage.delete_company(company_id)
        if deleted:
            logger.info(f"Deleted company {company_id}")
        return deleted

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, company_id: str) -> Company:
        company = self.storage.get_company(company_id)
        if company is None:
            raise NotFoundError("Company", company_id)
        return company

    def list(self) -> List[Company]:
        return self.storage.list_companies()

    def search(self, query: str) -> List[Company]:
        return self.query(search=query)

    def filter(self, criteria: Dict[str, str]) -> List[Company]:
        return self.query(
            industry=criteria.get('industry'),
            digital_twin_status=criteria.get('digital_twin_status'),
            country=criteria.get('country'),
            opportunity_score=criteria.get('opportunity_score'),
        )

    def query(
        self,
        search: Optional[str] = None,
        industry: Optional[str] = None,
        digital_twin_status: Optional[str] = None,
        country: Optional[str] = None,
        opportunity_score: Optional[str] = None,
    ) -> List[Company]:
        """Companies matching the text search AND every active filter.

        The text search is a case-insensitive substring match on name,
        industry or country. Sentinel values ("All Industries" etc.) and
        empty strings disable a filter.
        """
        predicates = []

        if search and search.strip():
            needle = search.strip().lower()
            predicates.append(lambda c: (
                needle in (c.name or '').lower()
                or needle in (c.industry or '').lower()
                or needle in (c.country or '').lower()
            ))

        if _is_active(industry, ALL_INDUSTRIES):
            predicates.append(lambda c: c.industry == industry.strip())

        if _is_active(digital_twin_status, ALL_STATUSES):
            predicates.append(lambda c: c.digital_twin_status == digital_twin_status.strip())

        if _is_active(country, ALL_COUNTRIES):
            predicates.append(lambda c: c.country == country.strip())

        if _is_active(opportunity_score, ALL_OPPORTUNITY_SCORES):
            bucket = parse_opportunity_bucket(opportunity_score)
            predicates.append(lambda c: opportunity_bucket(c.opportunity_score) == bucket)

        return [
            c for c in self.storage.list_companies()
            if all(p(c) for p in predicates)
        ]
