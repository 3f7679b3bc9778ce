"""
LLM-Powered Narrative Generator
Produces competitive analysis, opportunity assessments and digital twin
strategy write-ups for partner companies.
"""
import os
import json
import yaml
import logging
from typing import Any, Dict, List, Optional
from dataclasses import dataclass
from openai import OpenAI, AzureOpenAI

from .exceptions import AIGenerationError

logger = logging.getLogger(__name__)


@dataclass
class UntrustedAssessment:
    """Opportunity assessment exactly as the model returned it.

    ``raw_score`` may be missing, non-numeric or out of range; callers must
    clamp it before storing.
    """
    raw_score: Any
    notes: str


DEFAULT_PROMPTS = {
    'competitive_analysis': {
        'system': (
            "You are a competitive intelligence analyst specializing in digital twin "
            "technology and enterprise infrastructure solutions. Provide detailed, "
            "actionable insights for Dell's sales strategy."
        ),
        'user': """Analyze the competitive landscape and Dell's positioning opportunity for {company_name}, a {industry} company with digital twin status: {digital_twin_status}.

Please provide a comprehensive competitive analysis including:
1. Current digital twin technology stack they likely use
2. Key competitors in their digital twin space
3. Dell's specific competitive advantages and positioning opportunities
4. Recommended approach strategy
5. Potential challenges and how to overcome them

Respond with a detailed analysis in JSON format with the following structure:
{{
  "currentTechStack": "description of likely current technology stack",
  "keyCompetitors": ["list of main competitors"],
  "dellAdvantages": ["list of Dell's competitive advantages"],
  "recommendedStrategy": "detailed strategy recommendation",
  "challenges": ["list of potential challenges"],
  "solutions": ["corresponding solutions to challenges"]
}}""",
    },
    'opportunity_assessment': {
        'system': (
            "You are a sales opportunity assessment specialist for Dell Technologies, "
            "focused on digital twin and infrastructure solutions."
        ),
        'user': """Assess the Dell sales opportunity for {company_name}, a {industry} company with revenue of {revenue} and current digital twin maturity of {digital_twin_maturity}%.

Please provide:
1. An opportunity score from 1-100 based on their potential value as a Dell customer
2. Detailed assessment notes explaining the scoring rationale
3. Specific product/solution recommendations
4. Timeline recommendations for engagement

Respond in JSON format:
{{
  "opportunityScore": number,
  "assessmentNotes": "detailed explanation of scoring and recommendations",
  "productRecommendations": ["list of Dell products/solutions"],
  "timelineRecommendation": "suggested engagement timeline"
}}""",
    },
    'digital_twin_strategy': {
        'system': (
            "You are a digital twin strategy consultant with deep expertise in enterprise "
            "digital transformation across various industries."
        ),
        'user': """Analyze the digital twin strategy for {company_name}, a {industry} company with business areas: {business_areas}.

Provide insights on:
1. Current digital twin initiatives they likely have
2. Strategic priorities for digital twin adoption
3. Technology challenges they face
4. Growth opportunities through digital twins
5. Industry-specific digital twin use cases

Respond with a comprehensive strategy analysis in JSON format:
{{
  "currentInitiatives": "description of likely current digital twin efforts",
  "strategicPriorities": ["list of strategic priorities"],
  "technologyChallenges": ["list of technical challenges"],
  "growthOpportunities": ["list of growth opportunities"],
  "industryCases": ["industry-specific use cases"]
}}""",
    },
}


def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    return [str(value)]


def _bullets(items) -> str:
    return '\n'.join(f"• {item}" for item in _as_list(items))


def format_competitive_analysis(result: Dict) -> str:
    """Render the competitive-analysis JSON as Markdown-like text."""
    challenges = _as_list(result.get('challenges'))
    solutions = _as_list(result.get('solutions'))
    challenge_lines = '\n'.join(
        f"• **Challenge**: {challenge}\n  **Solution**: "
        f"{solutions[i] if i < len(solutions) else 'Develop mitigation strategy'}"
        for i, challenge in enumerate(challenges)
    )
    return f"""**Current Technology Stack**: {result.get('currentTechStack', '')}

**Key Competitors**: {', '.join(_as_list(result.get('keyCompetitors')))}

**Dell's Competitive Advantages**:
{_bullets(result.get('dellAdvantages'))}

**Recommended Strategy**: {result.get('recommendedStrategy', '')}

**Potential Challenges & Solutions**:
{challenge_lines}"""


def format_assessment_notes(result: Dict) -> str:
    return f"""**Opportunity Assessment**: {result.get('assessmentNotes', '')}

**Recommended Dell Solutions**:
{_bullets(result.get('productRecommendations'))}

**Engagement Timeline**: {result.get('timelineRecommendation', '')}"""


def format_digital_twin_strategy(result: Dict) -> str:
    return f"""**Current Digital Twin Initiatives**: {result.get('currentInitiatives', '')}

**Strategic Priorities**:
{_bullets(result.get('strategicPriorities'))}

**Technology Challenges**:
{_bullets(result.get('technologyChallenges'))}

**Growth Opportunities**:
{_bullets(result.get('growthOpportunities'))}

**Industry-Specific Use Cases**:
{_bullets(result.get('industryCases'))}"""


class NarrativeGenerator:
    """OpenAI-backed text generation for company analysis fields."""

    def __init__(self, client=None, model: Optional[str] = None, prompts_file: Optional[str] = None,
                 timeout: Optional[float] = None):
        self._client = client
        self.model = model or self._get_model()
        self.timeout = timeout or float(os.getenv('OPENAI_TIMEOUT_SECONDS', 60))
        self.prompts = self._load_prompts(prompts_file or os.getenv('PROMPTS_FILE'))

    @property
    def client(self):
        # Created on first use so the app starts without credentials
        if self._client is None:
            self._client = self._init_client()
        return self._client

    def _init_client(self):
        """Initialize the OpenAI client."""
        if os.getenv('AZURE_OPENAI_ENDPOINT'):
            return AzureOpenAI(
                azure_endpoint=os.getenv('AZURE_OPENAI_ENDPOINT'),
                api_key=os.getenv('AZURE_OPENAI_KEY'),
                api_version=os.getenv('AZURE_OPENAI_API_VERSION', '2024-02-15-preview'),
                timeout=self.timeout
            )
        return OpenAI(api_key=os.getenv('OPENAI_API_KEY'), timeout=self.timeout)

    def _get_model(self) -> str:
        """Get the model/deployment name."""
        if os.getenv('AZURE_OPENAI_ENDPOINT'):
            return os.getenv('AZURE_OPENAI_DEPLOYMENT', 'gpt-4o')
        return os.getenv('OPENAI_MODEL', 'gpt-4o')

    def _load_prompts(self, path: Optional[str]) -> Dict:
        """Built-in prompts, with any templates from a YAML file layered on top."""
        prompts = {name: dict(templates) for name, templates in DEFAULT_PROMPTS.items()}
        if not path:
            return prompts
        try:
            with open(path, 'r') as f:
                overrides = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning(f"Prompts file {path} not found, using defaults")
            return prompts

        for name, templates in overrides.get('prompts', {}).items():
            if name not in prompts:
                logger.warning(f"Ignoring unknown prompt '{name}' in {path}")
                continue
            prompts[name].update(templates or {})
        return prompts

    def _complete_json(self, prompt_name: str, **params) -> Dict:
        templates = self.prompts[prompt_name]
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": templates['system']},
                {"role": "user", "content": templates['user'].format(**params)}
            ],
            response_format={"type": "json_object"}
        )
        result_json = json.loads(response.choices[0].message.content or '{}')
        if not isinstance(result_json, dict):
            raise ValueError("model did not return a JSON object")
        return result_json

    def _run(self, operation: str, prompt_name: str, **params) -> Dict:
        logger.info(f"Generating {operation} for {params.get('company_name')}")
        try:
            return self._complete_json(prompt_name, **params)
        except Exception as e:
            logger.error(f"Error generating {operation}: {e}")
            raise AIGenerationError(operation, e) from e

    def generate_competitive_analysis(self, company_name: str, industry: str,
                                      digital_twin_status: str) -> str:
        result = self._run(
            'competitive analysis', 'competitive_analysis',
            company_name=company_name, industry=industry,
            digital_twin_status=digital_twin_status
        )
        return format_competitive_analysis(result)

    def generate_opportunity_assessment(self, company_name: str, industry: str, revenue: str,
                                        digital_twin_maturity: int) -> UntrustedAssessment:
        result = self._run(
            'opportunity assessment', 'opportunity_assessment',
            company_name=company_name, industry=industry, revenue=revenue,
            digital_twin_maturity=digital_twin_maturity
        )
        return UntrustedAssessment(
            raw_score=result.get('opportunityScore'),
            notes=format_assessment_notes(result)
        )

    def generate_digital_twin_strategy(self, company_name: str, industry: str,
                                       business_areas: List[str]) -> str:
        result = self._run(
            'digital twin strategy', 'digital_twin_strategy',
            company_name=company_name, industry=industry,
            business_areas=', '.join(business_areas)
        )
        return format_digital_twin_strategy(result)
