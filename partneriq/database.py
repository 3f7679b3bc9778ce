"""
Database Models for PartnerIQ
"""
from flask_sqlalchemy import SQLAlchemy
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
import json

from .money import Money

db = SQLAlchemy()


def utcnow():
    """Naive UTC timestamp, matching what SQLite hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DigitalTwinStatus(str, Enum):
    """Digital twin adoption stage of a partner company."""
    NOT_STARTED = "not_started"
    RESEARCHING = "researching"
    IMPLEMENTING = "implementing"
    COMPLETED = "completed"


class Industry(str, Enum):
    """Industries a partner company can belong to."""
    MANUFACTURING = "Manufacturing"
    AUTOMOTIVE = "Automotive"
    HEALTHCARE = "Healthcare"
    ENERGY = "Energy"
    AEROSPACE = "Aerospace"
    CHEMICALS = "Chemicals"
    TECHNOLOGY = "Technology"
    FINANCIAL_SERVICES = "Financial Services"
    RETAIL = "Retail"
    OTHER = "Other"


def _money_from_columns(amount, currency):
    if amount is None:
        return None
    return Money(currency or 'USD', Decimal(str(amount)))


class Company(db.Model):
    """Partner company tracked by the sales team."""
    __tablename__ = 'companies'

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    industry = db.Column(db.String(50), nullable=False)
    country = db.Column(db.String(100), nullable=False)
    employees = db.Column(db.Integer)
    headquarters = db.Column(db.String(255))
    ceo = db.Column(db.String(255))
    founded = db.Column(db.Integer)
    website = db.Column(db.String(500))
    business_areas = db.Column(db.Text)  # JSON array

    # Money values are stored as amount + ISO currency code
    revenue_amount = db.Column(db.Numeric(20, 2))
    revenue_currency = db.Column(db.String(3))
    deal_value_amount = db.Column(db.Numeric(20, 2))
    deal_value_currency = db.Column(db.String(3))

    # Digital twin tracking
    digital_twin_status = db.Column(db.String(20), nullable=False, default=DigitalTwinStatus.NOT_STARTED.value)
    digital_twin_maturity = db.Column(db.Integer, nullable=False, default=0)
    opportunity_score = db.Column(db.Integer, nullable=False, default=0)

    # Follow-up
    last_updated = db.Column(db.DateTime, default=utcnow)
    next_follow_up = db.Column(db.DateTime)
    notes = db.Column(db.Text)

    # Analysis (manual or AI-generated)
    competitive_analysis = db.Column(db.Text)
    dell_opportunity = db.Column(db.Text)
    digital_twin_strategy = db.Column(db.Text)

    @property
    def revenue(self):
        return _money_from_columns(self.revenue_amount, self.revenue_currency)

    @revenue.setter
    def revenue(self, money):
        self.revenue_amount = money.amount if money else None
        self.revenue_currency = money.currency if money else None

    @property
    def estimated_deal_value(self):
        return _money_from_columns(self.deal_value_amount, self.deal_value_currency)

    @estimated_deal_value.setter
    def estimated_deal_value(self, money):
        self.deal_value_amount = money.amount if money else None
        self.deal_value_currency = money.currency if money else None

    def get_business_areas(self):
        """Get parsed business areas list."""
        if self.business_areas:
            return json.loads(self.business_areas)
        return []

    def set_business_areas(self, areas):
        self.business_areas = json.dumps(list(areas or []))

    def to_dict(self):
        revenue = self.revenue
        deal_value = self.estimated_deal_value
        return {
            'id': self.id,
            'name': self.name,
            'industry': self.industry,
            'country': self.country,
            'employees': self.employees,
            'revenue': revenue.to_dict() if revenue else None,
            'headquarters': self.headquarters,
            'ceo': self.ceo,
            'founded': self.founded,
            'website': self.website,
            'business_areas': self.get_business_areas(),
            'digital_twin_status': self.digital_twin_status,
            'digital_twin_maturity': self.digital_twin_maturity,
            'opportunity_score': self.opportunity_score,
            'estimated_deal_value': deal_value.to_dict() if deal_value else None,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
            'next_follow_up': self.next_follow_up.isoformat() if self.next_follow_up else None,
            'notes': self.notes,
            'competitive_analysis': self.competitive_analysis,
            'dell_opportunity': self.dell_opportunity,
            'digital_twin_strategy': self.digital_twin_strategy
        }


class ActivityLog(db.Model):
    """Append-only audit trail of company, team and AI events."""
    __tablename__ = 'activity_logs'

    id = db.Column(db.String(36), primary_key=True)
    # Plain column, not a foreign key: logs outlive the company they mention
    company_id = db.Column(db.String(36), index=True)
    user_id = db.Column(db.String(255), nullable=False)
    user_name = db.Column(db.String(255), nullable=False)
    action = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'action': self.action,
            'description': self.description,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None
        }


class TeamMember(db.Model):
    """Sales team roster entry."""
    __tablename__ = 'team_members'

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    role = db.Column(db.String(255), nullable=False)
    department = db.Column(db.String(255))
    joined_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'department': self.department,
            'joined_at': self.joined_at.isoformat() if self.joined_at else None
        }
