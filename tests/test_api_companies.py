"""
PartnerIQ
Tests: Companies API.

Covers:
    - Company CRUD over HTTP and status codes
    - search/filter query parameters
    - error response shapes
    - analytics, opportunity distribution and report endpoints
"""

from datetime import datetime

import pytest


def _create_company(client, **kw):
    payload = {"name": "Acme", "industry": "Manufacturing", "country": "USA"}
    payload.update(kw)
    res = client.post("/api/companies", json=payload)
    assert res.status_code == 201
    return res.get_json()


class TestCompanyCRUD:
    def test_create_company(self, client):
        data = _create_company(client, revenue="€62.3B", estimated_deal_value="$850K",
                               business_areas=["Mobility"])
        assert data["id"]
        assert data["digital_twin_status"] == "not_started"
        assert data["digital_twin_maturity"] == 0
        assert data["opportunity_score"] == 0
        assert data["business_areas"] == ["Mobility"]
        assert data["revenue"] == {"currency": "EUR", "amount": 62_300_000_000.0, "display": "€62.3B"}
        assert data["estimated_deal_value"]["display"] == "$850K"
        assert data["last_updated"]

    def test_create_logs_activity(self, client):
        company = _create_company(client)
        logs = client.get(f"/api/activity-logs?company_id={company['id']}").get_json()
        assert len(logs) == 1
        assert logs[0]["action"] == "company_created"
        assert logs[0]["description"] == "Added new company: Acme"

    def test_create_missing_fields(self, client):
        res = client.post("/api/companies", json={"name": "Acme"})
        assert res.status_code == 400
        body = res.get_json()
        assert body["error"] == "Invalid company data"
        assert set(body["details"]) == {"industry", "country"}

    def test_create_non_object_body(self, client):
        res = client.post("/api/companies", json=["Acme"])
        assert res.status_code == 400

    def test_create_without_json(self, client):
        res = client.post("/api/companies", data="name=Acme")
        assert res.status_code == 400

    def test_create_non_finite_deal_value(self, client):
        res = client.post("/api/companies", json={
            "name": "Acme", "industry": "Manufacturing", "country": "USA",
            "estimated_deal_value": {"currency": "USD", "amount": "Infinity"},
        })
        assert res.status_code == 400
        assert "estimated_deal_value" in res.get_json()["details"]

    def test_create_oversized_score(self, client):
        res = client.post("/api/companies", json={
            "name": "Acme", "industry": "Manufacturing", "country": "USA",
            "opportunity_score": 10 ** 30,
        })
        assert res.status_code == 400
        assert "opportunity_score" in res.get_json()["details"]

    def test_get_company(self, client):
        company = _create_company(client)
        res = client.get(f"/api/companies/{company['id']}")
        assert res.status_code == 200
        assert res.get_json()["name"] == "Acme"

    def test_get_unknown(self, client):
        res = client.get("/api/companies/nope")
        assert res.status_code == 404
        assert "not found" in res.get_json()["error"]

    def test_patch_company(self, client):
        company = _create_company(client)
        res = client.patch(f"/api/companies/{company['id']}", json={
            "digital_twin_status": "researching", "opportunity_score": 65,
        })
        assert res.status_code == 200
        data = res.get_json()
        assert data["digital_twin_status"] == "researching"
        assert data["opportunity_score"] == 65
        assert data["name"] == "Acme"

    def test_patch_unknown(self, client):
        res = client.patch("/api/companies/nope", json={"notes": "x"})
        assert res.status_code == 404

    def test_patch_invalid(self, client):
        company = _create_company(client)
        res = client.patch(f"/api/companies/{company['id']}", json={"digital_twin_status": "done"})
        assert res.status_code == 400
        assert "digital_twin_status" in res.get_json()["details"]

    def test_patch_empty_body(self, client):
        company = _create_company(client)
        res = client.patch(f"/api/companies/{company['id']}", json={})
        assert res.status_code == 200
        data = res.get_json()
        assert datetime.fromisoformat(data["last_updated"]) >= datetime.fromisoformat(company["last_updated"])
        data.pop("last_updated")
        company.pop("last_updated")
        assert data == company

    def test_delete_company(self, client):
        company = _create_company(client)
        res = client.delete(f"/api/companies/{company['id']}")
        assert res.status_code == 200
        assert res.get_json() == {"success": True}
        assert client.get(f"/api/companies/{company['id']}").status_code == 404

    def test_delete_unknown(self, client):
        res = client.delete("/api/companies/nope")
        assert res.status_code == 404


class TestCompanyQueries:
    @pytest.fixture(autouse=True)
    def _companies(self, client):
        _create_company(client, name="Siemens AG", country="Germany", opportunity_score=82,
                        digital_twin_status="implementing")
        _create_company(client, name="Boeing", industry="Aerospace", opportunity_score=91,
                        digital_twin_status="researching")
        _create_company(client, name="Ford Motor Company", industry="Automotive",
                        opportunity_score=68, digital_twin_status="completed")

    def _names(self, res):
        assert res.status_code == 200
        return sorted(c["name"] for c in res.get_json())

    def test_list_all(self, client):
        assert len(client.get("/api/companies").get_json()) == 3

    def test_search(self, client):
        assert self._names(client.get("/api/companies?search=siemens")) == ["Siemens AG"]

    def test_filter(self, client):
        assert self._names(client.get("/api/companies?industry=Aerospace")) == ["Boeing"]
        assert self._names(client.get("/api/companies?country=USA")) == ["Boeing", "Ford Motor Company"]
        assert self._names(client.get("/api/companies?digital_twin_status=completed")) == ["Ford Motor Company"]

    def test_filter_sentinels(self, client):
        res = client.get("/api/companies", query_string={"industry": "All Industries",
                                                          "opportunity_score": "All Opportunity Scores"})
        assert len(self._names(res)) == 3

    def test_opportunity_bucket(self, client):
        res = client.get("/api/companies", query_string={"opportunity_score": "Medium (50-79)"})
        assert self._names(res) == ["Ford Motor Company"]

    def test_search_and_filter(self, client):
        res = client.get("/api/companies", query_string={"search": "o", "country": "USA",
                                                          "opportunity_score": "High"})
        assert self._names(res) == ["Boeing"]

    def test_unknown_bucket(self, client):
        res = client.get("/api/companies?opportunity_score=Excellent")
        assert res.status_code == 400


class TestAnalyticsEndpoints:
    def test_analytics(self, client):
        _create_company(client, digital_twin_status="implementing", opportunity_score=82,
                        estimated_deal_value="$850K")
        _create_company(client, name="B", digital_twin_status="researching", opportunity_score=91,
                        estimated_deal_value="$1.2M")
        _create_company(client, name="C", digital_twin_status="completed", opportunity_score=68,
                        estimated_deal_value="$650K")

        data = client.get("/api/analytics").get_json()
        assert data["total_partners"] == 3
        assert data["active_projects"] == 2
        assert data["high_opportunity_count"] == 2
        assert data["pipeline_value"] == "$2.7M"
        assert data["industry_distribution"] == {"Manufacturing": 3}

    def test_analytics_after_rejected_nan_deal_value(self, client):
        _create_company(client, estimated_deal_value="$5K")
        res = client.post("/api/companies", json={
            "name": "B", "industry": "Manufacturing", "country": "USA",
            "estimated_deal_value": {"currency": "USD", "amount": "NaN"},
        })
        assert res.status_code == 400

        assert client.get("/api/analytics").get_json()["pipeline_value"] == "$5K"
        assert client.get("/api/reports/summary").status_code == 200

    def test_opportunity_distribution(self, client):
        _create_company(client, opportunity_score=90, digital_twin_maturity=20)
        data = client.get("/api/analytics/opportunity-distribution").get_json()
        assert data["ranges"] == {"High (80-100)": 1}
        assert data["maturity_vs_opportunity"] == [{"name": "Acme", "maturity": 20, "opportunity": 90}]

    def test_report_summary(self, client):
        _create_company(client, digital_twin_status="completed", opportunity_score=85)
        data = client.get("/api/reports/summary").get_json()
        assert [c["name"] for c in data["recent_wins"]] == ["Acme"]
        assert [c["name"] for c in data["high_opportunity"]] == ["Acme"]
        assert data["pipeline_stages"]["completed"] == 1
