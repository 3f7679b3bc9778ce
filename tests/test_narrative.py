"""
PartnerIQ
Tests: narrative generator (OpenAI client mocked).

Covers:
    - request shape sent to chat.completions
    - JSON to Markdown-like formatting, including missing fields
    - failures wrapped in AIGenerationError
    - client selection and YAML prompt overrides
"""

import json
from unittest import mock

import pytest

from partneriq.exceptions import AIGenerationError
from partneriq.narrative import (
    NarrativeGenerator, UntrustedAssessment,
    format_assessment_notes, format_competitive_analysis, format_digital_twin_strategy,
)


def _client_returning(payload):
    client = mock.MagicMock()
    content = payload if isinstance(payload, str) else json.dumps(payload)
    client.chat.completions.create.return_value.choices = [
        mock.MagicMock(message=mock.MagicMock(content=content))
    ]
    return client


@pytest.fixture(autouse=True)
def _no_openai_env(monkeypatch):
    for name in ("AZURE_OPENAI_ENDPOINT", "PROMPTS_FILE", "OPENAI_MODEL"):
        monkeypatch.delenv(name, raising=False)


class TestRequests:
    def test_competitive_analysis_request(self):
        client = _client_returning({"currentTechStack": "Azure IoT"})
        generator = NarrativeGenerator(client=client, model="gpt-test")

        text = generator.generate_competitive_analysis("Siemens AG", "Manufacturing", "implementing")

        assert text.startswith("**Current Technology Stack**: Azure IoT")
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"
        assert "Siemens AG" in kwargs["messages"][1]["content"]
        assert "implementing" in kwargs["messages"][1]["content"]

    def test_assessment_returns_untrusted_score(self):
        client = _client_returning({
            "opportunityScore": 150,
            "assessmentNotes": "Large simulation workloads",
            "productRecommendations": ["PowerEdge XE9680"],
            "timelineRecommendation": "Q1",
        })
        generator = NarrativeGenerator(client=client, model="gpt-test")

        result = generator.generate_opportunity_assessment("Boeing", "Aerospace", "$66.6B", 45)

        assert isinstance(result, UntrustedAssessment)
        assert result.raw_score == 150
        assert "• PowerEdge XE9680" in result.notes
        prompt = client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        assert "$66.6B" in prompt
        assert "45%" in prompt

    def test_strategy_joins_business_areas(self):
        client = _client_returning({"strategicPriorities": ["Connected vehicles"]})
        generator = NarrativeGenerator(client=client, model="gpt-test")

        text = generator.generate_digital_twin_strategy("Ford", "Automotive", ["Ford Blue", "Ford Pro"])

        assert "• Connected vehicles" in text
        prompt = client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        assert "Ford Blue, Ford Pro" in prompt

    def test_default_model_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
        assert NarrativeGenerator(client=mock.MagicMock()).model == "gpt-4o-mini"


class TestFailures:
    def test_client_error_is_wrapped(self):
        client = mock.MagicMock()
        client.chat.completions.create.side_effect = TimeoutError("timed out")
        generator = NarrativeGenerator(client=client, model="gpt-test")

        with pytest.raises(AIGenerationError) as exc:
            generator.generate_competitive_analysis("Acme", "Energy", "not_started")

        assert isinstance(exc.value.cause, TimeoutError)
        assert "timed out" in str(exc.value)

    def test_invalid_json_is_wrapped(self):
        generator = NarrativeGenerator(client=_client_returning("not json"), model="gpt-test")
        with pytest.raises(AIGenerationError):
            generator.generate_digital_twin_strategy("Acme", "Energy", [])

    def test_non_object_json_is_wrapped(self):
        generator = NarrativeGenerator(client=_client_returning("[1, 2]"), model="gpt-test")
        with pytest.raises(AIGenerationError):
            generator.generate_opportunity_assessment("Acme", "Energy", "Unknown", 0)

    def test_client_construction_failure_is_wrapped(self):
        with mock.patch("partneriq.narrative.OpenAI", side_effect=RuntimeError("no api key")):
            generator = NarrativeGenerator(model="gpt-test")
            with pytest.raises(AIGenerationError) as exc:
                generator.generate_competitive_analysis("Acme", "Energy", "not_started")
        assert "no api key" in str(exc.value)


class TestClientSelection:
    def test_openai_by_default(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        with mock.patch("partneriq.narrative.OpenAI") as openai_cls:
            generator = NarrativeGenerator(model="gpt-test", timeout=5)
            assert generator.client is openai_cls.return_value
        openai_cls.assert_called_once_with(api_key="sk-test", timeout=5)

    def test_azure_when_endpoint_set(self, monkeypatch):
        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com")
        monkeypatch.setenv("AZURE_OPENAI_DEPLOYMENT", "partneriq-gpt")
        with mock.patch("partneriq.narrative.AzureOpenAI") as azure_cls:
            generator = NarrativeGenerator()
            assert generator.client is azure_cls.return_value
        assert generator.model == "partneriq-gpt"
        assert azure_cls.call_args.kwargs["azure_endpoint"] == "https://example.openai.azure.com"


class TestPrompts:
    def test_yaml_override(self, tmp_path):
        prompts_file = tmp_path / "prompts.yaml"
        prompts_file.write_text(
            "prompts:\n"
            "  competitive_analysis:\n"
            "    system: You are terse.\n"
            "  unknown_prompt:\n"
            "    system: ignored\n"
        )
        client = _client_returning({})
        generator = NarrativeGenerator(client=client, model="gpt-test", prompts_file=str(prompts_file))

        generator.generate_competitive_analysis("Acme", "Energy", "not_started")

        messages = client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0]["content"] == "You are terse."
        assert "Acme" in messages[1]["content"]
        assert "unknown_prompt" not in generator.prompts

    def test_missing_file_uses_defaults(self, tmp_path):
        generator = NarrativeGenerator(client=mock.MagicMock(), model="gpt-test",
                                       prompts_file=str(tmp_path / "missing.yaml"))
        assert "competitive intelligence analyst" in generator.prompts["competitive_analysis"]["system"]


class TestFormatting:
    def test_competitive_analysis_pairs_challenges(self):
        text = format_competitive_analysis({
            "currentTechStack": "MindSphere",
            "keyCompetitors": ["HPE", "Lenovo"],
            "dellAdvantages": ["Edge portfolio"],
            "recommendedStrategy": "Lead with edge",
            "challenges": ["Incumbent vendor", "Budget"],
            "solutions": ["Co-sell"],
        })
        assert "**Key Competitors**: HPE, Lenovo" in text
        assert "• Edge portfolio" in text
        assert "• **Challenge**: Incumbent vendor\n  **Solution**: Co-sell" in text
        assert "• **Challenge**: Budget\n  **Solution**: Develop mitigation strategy" in text

    def test_missing_fields_render_empty(self):
        text = format_competitive_analysis({})
        assert "**Current Technology Stack**: \n" in text
        assert "None" not in text

    def test_assessment_notes(self):
        text = format_assessment_notes({"assessmentNotes": "Strong fit", "timelineRecommendation": "Q2"})
        assert text.startswith("**Opportunity Assessment**: Strong fit")
        assert text.endswith("**Engagement Timeline**: Q2")

    def test_strategy_sections(self):
        text = format_digital_twin_strategy({
            "currentInitiatives": "Factory twins",
            "technologyChallenges": "Data silos",
            "industryCases": ["Predictive maintenance"],
        })
        assert "**Current Digital Twin Initiatives**: Factory twins" in text
        assert "• Data silos" in text
        assert "• Predictive maintenance" in text
