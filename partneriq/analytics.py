"""
Analytics over the full company set.

Everything is recomputed from storage on each call; there is no cached or
incrementally maintained state.
"""
import logging
import math
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional

from .companies import HIGH_OPPORTUNITY_THRESHOLD, opportunity_bucket
from .database import DigitalTwinStatus, utcnow
from .money import format_pipeline_value, sum_amounts

logger = logging.getLogger(__name__)

# "Active" means being built or already shipped
ACTIVE_STATUSES = frozenset({
    DigitalTwinStatus.IMPLEMENTING.value,
    DigitalTwinStatus.COMPLETED.value,
})

OPPORTUNITY_RANGE_LABELS = {
    'high': 'High (80-100)',
    'medium': 'Medium (50-79)',
    'low': 'Low (0-49)',
}

FOLLOW_UP_WINDOW_DAYS = 7
STAGNANT_AFTER_DAYS = 30


def count_active_projects(companies) -> int:
    return sum(1 for c in companies if c.digital_twin_status in ACTIVE_STATUSES)


def count_high_opportunity(companies) -> int:
    return sum(1 for c in companies if c.opportunity_score >= HIGH_OPPORTUNITY_THRESHOLD)


def pipeline_value(companies) -> str:
    """Formatted sum of every company's estimated deal value."""
    return format_pipeline_value(sum_amounts(c.estimated_deal_value for c in companies))


def _days_between(later: datetime, earlier: datetime) -> int:
    return math.ceil((later - earlier).total_seconds() / 86400)


class AnalyticsAggregator:
    """Computes dashboard and report figures from storage."""

    def __init__(self, storage):
        self.storage = storage

    def overview(self) -> Dict:
        companies = self.storage.list_companies()
        return {
            'total_partners': len(companies),
            'active_projects': count_active_projects(companies),
            'high_opportunity_count': count_high_opportunity(companies),
            'pipeline_value': pipeline_value(companies),
            'status_distribution': dict(Counter(c.digital_twin_status for c in companies)),
            'industry_distribution': dict(Counter(c.industry for c in companies)),
        }

    def opportunity_distribution(self) -> Dict:
        companies = self.storage.list_companies()
        ranges = Counter(
            OPPORTUNITY_RANGE_LABELS[opportunity_bucket(c.opportunity_score)]
            for c in companies
        )
        return {
            'ranges': dict(ranges),
            'maturity_vs_opportunity': [
                {
                    'name': c.name,
                    'maturity': c.digital_twin_maturity,
                    'opportunity': c.opportunity_score,
                }
                for c in companies
            ],
        }

    def team_activity(self) -> Dict[str, Dict]:
        """Per-user activity counts, keyed by display name."""
        stats = {}
        for log in self.storage.list_activity_logs():
            entry = stats.setdefault(log.user_name, {
                'total_activities': 0,
                'companies_updated': 0,
                'analyses_generated': 0,
                'last_active': log.timestamp,
            })
            entry['total_activities'] += 1
            if log.action == 'company_updated':
                entry['companies_updated'] += 1
            if 'generated' in log.action:
                entry['analyses_generated'] += 1
            if log.timestamp and (entry['last_active'] is None or log.timestamp > entry['last_active']):
                entry['last_active'] = log.timestamp

        for entry in stats.values():
            if entry['last_active']:
                entry['last_active'] = entry['last_active'].isoformat()
        return stats

    def report_summary(self, now: Optional[datetime] = None) -> Dict:
        """Executive report: overview plus follow-ups, stagnant accounts and wins."""
        now = now or utcnow()
        companies = self.storage.list_companies()

        urgent = []
        stagnant = []
        for c in companies:
            if c.next_follow_up:
                days_until = _days_between(c.next_follow_up, now)
                if 0 <= days_until <= FOLLOW_UP_WINDOW_DAYS:
                    urgent.append(c)
            if c.last_updated:
                if _days_between(now, c.last_updated) > STAGNANT_AFTER_DAYS:
                    stagnant.append(c)

        urgent.sort(key=lambda c: c.next_follow_up)

        summary = self.overview()
        summary.update({
            'high_opportunity': [
                c.to_dict() for c in companies
                if c.opportunity_score >= HIGH_OPPORTUNITY_THRESHOLD
            ],
            'urgent_follow_ups': [c.to_dict() for c in urgent],
            'stagnant': [c.to_dict() for c in stagnant],
            'recent_wins': [
                c.to_dict() for c in companies
                if c.digital_twin_status == DigitalTwinStatus.COMPLETED.value
            ],
            'pipeline_stages': {
                status.value: sum(1 for c in companies if c.digital_twin_status == status.value)
                for status in DigitalTwinStatus
            },
        })
        return summary
