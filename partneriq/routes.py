"""
Flask Routes for the JSON API
"""
from flask import Blueprint, current_app, jsonify, request, send_file
from datetime import datetime
import io

from .exceptions import NotFoundError, ValidationError
from .exporter import ReportExporter

api_bp = Blueprint('api', __name__)


def _ops():
    """The PartnerOperations instance built by create_app."""
    return current_app.extensions['partneriq']


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# =============================================================================
# COMPANIES
# =============================================================================

@api_bp.route('/companies')
def list_companies():
    """List companies, optionally searched and filtered."""
    companies = _ops().companies.query(
        search=request.args.get('search'),
        industry=request.args.get('industry'),
        digital_twin_status=request.args.get('digital_twin_status'),
        country=request.args.get('country'),
        opportunity_score=request.args.get('opportunity_score')
    )
    return jsonify([c.to_dict() for c in companies])


@api_bp.route('/companies/<company_id>')
def get_company(company_id):
    return jsonify(_ops().companies.get(company_id).to_dict())


@api_bp.route('/companies', methods=['POST'])
def create_company():
    """Create a new company."""
    company = _ops().create_company(_json_body())
    return jsonify(company.to_dict()), 201


@api_bp.route('/companies/<company_id>', methods=['PATCH'])
def update_company(company_id):
    """Update a company with the fields present in the body."""
    company = _ops().update_company(company_id, _json_body())
    return jsonify(company.to_dict())


@api_bp.route('/companies/<company_id>', methods=['DELETE'])
def delete_company(company_id):
    if not _ops().delete_company(company_id):
        raise NotFoundError("Company", company_id)
    return jsonify({'success': True})


# =============================================================================
# AI ANALYSIS
# =============================================================================

@api_bp.route('/companies/<company_id>/generate-competitive-analysis', methods=['POST'])
def generate_competitive_analysis(company_id):
    result = _ops().generate_competitive_analysis(company_id)
    return jsonify({
        'analysis': result['analysis'],
        'company': result['company'].to_dict()
    })


@api_bp.route('/companies/<company_id>/generate-opportunity-assessment', methods=['POST'])
def generate_opportunity_assessment(company_id):
    result = _ops().generate_opportunity_assessment(company_id)
    return jsonify({
        'opportunity_score': result['opportunity_score'],
        'assessment_notes': result['assessment_notes'],
        'company': result['company'].to_dict()
    })


@api_bp.route('/companies/<company_id>/generate-digital-twin-strategy', methods=['POST'])
def generate_digital_twin_strategy(company_id):
    result = _ops().generate_digital_twin_strategy(company_id)
    return jsonify({
        'strategy': result['strategy'],
        'company': result['company'].to_dict()
    })


# =============================================================================
# ACTIVITY LOGS
# =============================================================================

@api_bp.route('/activity-logs')
def list_activity_logs():
    """Activity logs, newest first."""
    logs = _ops().activity.list(request.args.get('company_id'))
    return jsonify([log.to_dict() for log in logs])


@api_bp.route('/activity-logs', methods=['POST'])
def create_activity_log():
    log = _ops().activity.append(_json_body())
    return jsonify(log.to_dict()), 201


# =============================================================================
# TEAM MEMBERS
# =============================================================================

@api_bp.route('/team-members')
def list_team_members():
    return jsonify([m.to_dict() for m in _ops().team.list()])


@api_bp.route('/team-members', methods=['POST'])
def create_team_member():
    member = _ops().add_team_member(_json_body())
    return jsonify(member.to_dict()), 201


@api_bp.route('/team-members/activity')
def team_activity():
    """Per-user activity statistics."""
    return jsonify(_ops().analytics.team_activity())


# =============================================================================
# ANALYTICS & REPORTS
# =============================================================================

@api_bp.route('/analytics')
def get_analytics():
    """Dashboard statistics."""
    return jsonify(_ops().analytics.overview())


@api_bp.route('/analytics/opportunity-distribution')
def opportunity_distribution():
    return jsonify(_ops().analytics.opportunity_distribution())


@api_bp.route('/reports/summary')
def report_summary():
    """Executive report summary."""
    return jsonify(_ops().analytics.report_summary())


# =============================================================================
# EXPORT
# =============================================================================

@api_bp.route('/export/companies/csv')
def export_companies_csv():
    """Export all companies as CSV."""
    exporter = ReportExporter()
    csv_buffer = exporter.export_companies_csv(_ops().companies.list())

    filename = f"companies_export_{datetime.now().strftime('%Y%m%d')}.csv"
    return send_file(
        io.BytesIO(csv_buffer.getvalue().encode('utf-8')),
        mimetype='text/csv',
        as_attachment=True,
        download_name=filename
    )


@api_bp.route('/export/summary/pdf')
def export_summary_pdf():
    """Export the executive summary as PDF."""
    exporter = ReportExporter()
    pdf_buffer = exporter.export_summary_pdf(_ops().analytics.report_summary())

    filename = f"partner_summary_{datetime.now().strftime('%Y%m%d')}.pdf"
    return send_file(
        pdf_buffer,
        mimetype='application/pdf',
        as_attachment=True,
        download_name=filename
    )
