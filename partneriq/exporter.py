"""
Export functionality for the company list and the executive summary.
Supports PDF and CSV export.
"""
import io
import csv
import logging
from datetime import datetime
from typing import List, Dict
from xml.sax.saxutils import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, HRFlowable
)
from reportlab.lib.enums import TA_CENTER

from .money import format_money

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    'id', 'name', 'industry', 'country', 'employees', 'revenue', 'headquarters',
    'ceo', 'founded', 'website', 'business_areas', 'digital_twin_status',
    'digital_twin_maturity', 'opportunity_score', 'estimated_deal_value',
    'last_updated', 'next_follow_up', 'notes',
]

HEADER_COLOR = colors.HexColor('#1a237e')


def company_row(company) -> Dict:
    """Flatten a company into CSV-friendly values."""
    return {
        'id': company.id,
        'name': company.name,
        'industry': company.industry,
        'country': company.country,
        'employees': company.employees,
        'revenue': format_money(company.revenue) or '',
        'headquarters': company.headquarters or '',
        'ceo': company.ceo or '',
        'founded': company.founded,
        'website': company.website or '',
        'business_areas': '; '.join(company.get_business_areas()),
        'digital_twin_status': company.digital_twin_status,
        'digital_twin_maturity': company.digital_twin_maturity,
        'opportunity_score': company.opportunity_score,
        'estimated_deal_value': format_money(company.estimated_deal_value) or '',
        'last_updated': company.last_updated.isoformat() if company.last_updated else '',
        'next_follow_up': company.next_follow_up.isoformat() if company.next_follow_up else '',
        'notes': company.notes or '',
    }


class ReportExporter:
    """Exports reports in various formats."""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Set up custom paragraph styles."""
        self.styles.add(ParagraphStyle(
            name='ReportTitle',
            parent=self.styles['Heading1'],
            fontSize=24,
            spaceAfter=30,
            alignment=TA_CENTER,
            textColor=HEADER_COLOR
        ))

        self.styles.add(ParagraphStyle(
            name='SectionHeader',
            parent=self.styles['Heading2'],
            fontSize=14,
            spaceBefore=20,
            spaceAfter=10,
            textColor=colors.HexColor('#0d47a1')
        ))

    def _create_header(self, title: str, subtitle: str = None) -> List:
        """Create a report header."""
        elements = [Paragraph(title, self.styles['ReportTitle'])]

        if subtitle:
            elements.append(Paragraph(escape(subtitle), self.styles['BodyText']))

        date_str = datetime.now().strftime('%B %d, %Y at %H:%M')
        elements.append(Paragraph(f"Generated: {date_str}", self.styles['BodyText']))

        elements.append(Spacer(1, 20))
        elements.append(HRFlowable(width="100%", thickness=2, color=HEADER_COLOR))
        elements.append(Spacer(1, 20))
        return elements

    def _table(self, rows: List[List], col_widths: List[float], header_color=HEADER_COLOR) -> Table:
        table = Table(rows, colWidths=col_widths)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), header_color),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#ddd')),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f5f5f5')])
        ]))
        return table

    def export_summary_pdf(self, summary: Dict, title: str = "Partner Pipeline Summary") -> io.BytesIO:
        """Export the executive report summary as PDF.

        ``summary`` is the dict produced by ``AnalyticsAggregator.report_summary``.
        """
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=0.75*inch,
            leftMargin=0.75*inch,
            topMargin=0.75*inch,
            bottomMargin=0.75*inch
        )

        elements = []
        elements.extend(self._create_header(title, f"Total Partners: {summary['total_partners']}"))

        # KPIs
        elements.append(Paragraph("Key Metrics", self.styles['SectionHeader']))
        kpis = [
            ['Metric', 'Value'],
            ['Total Partners', str(summary['total_partners'])],
            ['Active Projects', str(summary['active_projects'])],
            ['High Opportunity Accounts', str(summary['high_opportunity_count'])],
            ['Pipeline Value', summary['pipeline_value']],
        ]
        elements.append(self._table(kpis, [3*inch, 2*inch]))
        elements.append(Spacer(1, 15))

        # Pipeline stages
        stages = [['Status', 'Companies']]
        for status, count in summary.get('pipeline_stages', {}).items():
            stages.append([status.replace('_', ' ').title(), str(count)])
        elements.append(Paragraph("Pipeline Stages", self.styles['SectionHeader']))
        elements.append(self._table(stages, [3*inch, 2*inch]))

        # High opportunity accounts
        elements.append(Paragraph("High Opportunity Accounts", self.styles['SectionHeader']))
        high = summary.get('high_opportunity', [])
        if high:
            rows = [['Company', 'Industry', 'Score', 'Deal Value']]
            for company in high:
                deal_value = company.get('estimated_deal_value') or {}
                rows.append([
                    company['name'],
                    company['industry'],
                    str(company['opportunity_score']),
                    deal_value.get('display') or 'N/A'
                ])
            elements.append(self._table(rows, [2.5*inch, 1.75*inch, 0.75*inch, 1.5*inch],
                                        header_color=colors.HexColor('#2e7d32')))
        else:
            elements.append(Paragraph("No high opportunity accounts.", self.styles['BodyText']))

        # Follow-ups
        elements.append(Paragraph("Upcoming Follow-ups", self.styles['SectionHeader']))
        urgent = summary.get('urgent_follow_ups', [])
        if urgent:
            rows = [['Company', 'Follow-up', 'Status']]
            for company in urgent:
                rows.append([
                    company['name'],
                    (company.get('next_follow_up') or '')[:10],
                    company['digital_twin_status'].replace('_', ' ').title()
                ])
            elements.append(self._table(rows, [3*inch, 1.5*inch, 2*inch]))
        else:
            elements.append(Paragraph("No follow-ups due in the next 7 days.", self.styles['BodyText']))

        doc.build(elements)
        buffer.seek(0)
        logger.info(f"Exported summary PDF for {summary['total_partners']} partners")
        return buffer

    def export_csv(self, data: List[Dict], fieldnames: List[str] = None) -> io.StringIO:
        """Export data as CSV."""
        buffer = io.StringIO()

        if not data and not fieldnames:
            return buffer

        writer = csv.DictWriter(buffer, fieldnames=fieldnames or list(data[0].keys()))
        writer.writeheader()
        writer.writerows(data)

        buffer.seek(0)
        return buffer

    def export_companies_csv(self, companies) -> io.StringIO:
        return self.export_csv([company_row(c) for c in companies], fieldnames=CSV_COLUMNS)
