"""
Partner workflows.

``PartnerOperations`` holds the services for one storage backend and runs
the multi-step workflows: a company write followed by an activity log
entry, and the three AI generation flows.
"""
import logging
import math
from typing import Dict, Optional

from .activity import ActivityLogService, AI_USER, SYSTEM_USER
from .analytics import AnalyticsAggregator
from .companies import CompanyService
from .database import Company, TeamMember
from .exceptions import StorageError, ValidationError
from .money import format_money
from .team import TeamService

logger = logging.getLogger(__name__)

DEFAULT_OPPORTUNITY_SCORE = 50
MIN_OPPORTUNITY_SCORE = 1
MAX_OPPORTUNITY_SCORE = 100


def clamp_opportunity_score(raw) -> int:
    """Coerce a model-provided score to an integer in [1, 100].

    Missing or non-numeric scores fall back to 50.
    """
    if isinstance(raw, bool) or raw is None:
        return DEFAULT_OPPORTUNITY_SCORE
    try:
        score = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_OPPORTUNITY_SCORE
    if math.isnan(score):
        return DEFAULT_OPPORTUNITY_SCORE
    if math.isinf(score):
        return MAX_OPPORTUNITY_SCORE if score > 0 else MIN_OPPORTUNITY_SCORE
    return max(MIN_OPPORTUNITY_SCORE, min(MAX_OPPORTUNITY_SCORE, int(round(score))))


class PartnerOperations:
    """Services plus the workflows that span more than one of them."""

    def __init__(self, storage, narrator=None):
        self.storage = storage
        self.narrator = narrator
        self.companies = CompanyService(storage)
        self.activity = ActivityLogService(storage)
        self.team = TeamService(storage)
        self.analytics = AnalyticsAggregator(storage)

    def _log(self, action: str, description: str, company_id: Optional[str] = None,
             user=SYSTEM_USER):
        # The primary write already succeeded; a failed log entry must not undo it
        try:
            self.activity.record(action, description, company_id=company_id, user=user)
        except (StorageError, ValidationError) as e:
            logger.warning(f"Could not record activity '{action}': {e}")

    # === Companies ===

    def create_company(self, data: Dict) -> Company:
        company = self.companies.create(data)
        self._log('company_created', f"Added new company: {company.name}", company.id)
        return company

    def update_company(self, company_id: str, data: Dict) -> Company:
        company = self.companies.update(company_id, data)
        fields = ', '.join(data) if data else 'no fields'
        self._log('company_updated', f"Updated {fields} for {company.name}", company.id)
        return company

    def delete_company(self, company_id: str) -> bool:
        company = self.storage.get_company(company_id)
        name = company.name if company else None
        deleted = self.companies.delete(company_id)
        if deleted:
            self._log('company_deleted', f"Deleted company: {name}", company_id)
        return deleted

    # === Team ===

    def add_team_member(self, data: Dict) -> TeamMember:
        member = self.team.create(data)
        self._log('team_member_added', f"Added team member: {member.name} ({member.role})")
        return member

    # === AI analysis ===

    def _require_narrator(self):
        if self.narrator is None:
            raise RuntimeError("No narrative generator configured")
        return self.narrator

    def generate_competitive_analysis(self, company_id: str) -> Dict:
        company = self.companies.get(company_id)
        analysis = self._require_narrator().generate_competitive_analysis(
            company.name, company.industry, company.digital_twin_status
        )

        company = self.companies.update(company_id, {'competitive_analysis': analysis})
        self._log(
            'competitive_analysis_generated',
            f"AI-generated competitive analysis for {company.name}",
            company.id, user=AI_USER
        )
        return {'analysis': analysis, 'company': company}

    def generate_opportunity_assessment(self, company_id: str) -> Dict:
        company = self.companies.get(company_id)
        revenue = format_money(company.revenue) or 'Unknown'
        assessment = self._require_narrator().generate_opportunity_assessment(
            company.name, company.industry, revenue, company.digital_twin_maturity
        )

        score = clamp_opportunity_score(assessment.raw_score)
        if score != assessment.raw_score:
            logger.info(f"Opportunity score {assessment.raw_score!r} for {company.name} clamped to {score}")
        company = self.companies.update(company_id, {
            'opportunity_score': score,
            'dell_opportunity': assessment.notes,
        })
        self._log(
            'opportunity_assessment_generated',
            f"AI-generated opportunity assessment for {company.name} (Score: {score})",
            company.id, user=AI_USER
        )
        return {
            'opportunity_score': score,
            'assessment_notes': assessment.notes,
            'company': company,
        }

    def generate_digital_twin_strategy(self, company_id: str) -> Dict:
        company = self.companies.get(company_id)
        strategy = self._require_narrator().generate_digital_twin_strategy(
            company.name, company.industry, company.get_business_areas()
        )

        company = self.companies.update(company_id, {'digital_twin_strategy': strategy})
        self._log(
            'digital_twin_strategy_generated',
            f"AI-generated digital twin strategy for {company.name}",
            company.id, user=AI_USER
        )
        return {'strategy': strategy, 'company': company}
