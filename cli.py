#!/usr/bin/env python3
"""
PartnerIQ - Command Line Interface
Provides CLI commands for managing partner data and reports.
"""
import argparse
from datetime import datetime
from dotenv import load_dotenv

load_dotenv()


def init_app():
    """Initialize the Flask app and its services."""
    from partneriq import create_app
    app = create_app()
    return app, app.extensions['partneriq']


def cmd_init(args):
    """Initialize the database with demo data."""
    from partneriq.demo_data import populate_demo_data

    app, ops = init_app()
    with app.app_context():
        print("Initializing database...")
        if populate_demo_data(ops):
            print("Demo data loaded successfully!")
        else:
            print("Companies already exist, demo data skipped.")


def cmd_companies(args):
    """List or search companies."""
    app, ops = init_app()
    with app.app_context():
        companies = ops.companies.query(
            search=args.query if args.action == 'search' else None,
            industry=args.industry,
            digital_twin_status=args.status,
            country=args.country,
            opportunity_score=args.opportunity
        )

        print(f"\n{len(companies)} companies:\n")
        for c in companies:
            deal = c.estimated_deal_value.display() if c.estimated_deal_value else 'N/A'
            print(f"[{c.id}] {c.name}")
            print(f"    {c.industry} | {c.country}")
            print(f"    Status: {c.digital_twin_status} ({c.digital_twin_maturity}% mature)")
            print(f"    Opportunity: {c.opportunity_score}/100 | Deal value: {deal}")
            print()


def cmd_analytics(args):
    """Print dashboard statistics."""
    app, ops = init_app()
    with app.app_context():
        stats = ops.analytics.overview()

        print(f"\nTotal Partners:   {stats['total_partners']}")
        print(f"Active Projects:  {stats['active_projects']}")
        print(f"High Opportunity: {stats['high_opportunity_count']}")
        print(f"Pipeline Value:   {stats['pipeline_value']}")

        print(f"\nBy Status:")
        for status, count in sorted(stats['status_distribution'].items()):
            print(f"  {status}: {count}")

        print(f"\nBy Industry:")
        for industry, count in sorted(stats['industry_distribution'].items(), key=lambda x: -x[1]):
            print(f"  {industry}: {count}")


def cmd_report(args):
    """Generate a text executive report."""
    app, ops = init_app()
    with app.app_context():
        summary = ops.analytics.report_summary()

        print(f"\n{'='*60}")
        print(f"PARTNER PIPELINE REPORT")
        print(f"Generated: {datetime.utcnow().strftime('%Y-%m-%d %H:%M UTC')}")
        print(f"{'='*60}\n")

        print(f"SUMMARY")
        print(f"{'-'*40}")
        print(f"Total Partners: {summary['total_partners']}")
        print(f"Active Projects: {summary['active_projects']}")
        print(f"Pipeline Value: {summary['pipeline_value']}")

        sections = [
            ('HIGH OPPORTUNITY', summary['high_opportunity']),
            ('FOLLOW-UPS DUE THIS WEEK', summary['urgent_follow_ups']),
            ('NO UPDATES IN 30+ DAYS', summary['stagnant']),
            ('COMPLETED DEPLOYMENTS', summary['recent_wins']),
        ]
        for title, companies in sections:
            if not companies:
                continue
            print(f"\n{title}")
            print(f"{'-'*40}")
            for c in companies:
                print(f"• {c['name']} ({c['industry']}, score {c['opportunity_score']})")

        print(f"\n{'='*60}")


def cmd_export(args):
    """Export companies as CSV or the summary as PDF."""
    from partneriq.exporter import ReportExporter

    app, ops = init_app()
    with app.app_context():
        exporter = ReportExporter()
        stamp = datetime.now().strftime('%Y%m%d')

        if args.format == 'csv':
            output = args.output or f"companies_export_{stamp}.csv"
            buffer = exporter.export_companies_csv(ops.companies.list())
            with open(output, 'w', newline='', encoding='utf-8') as f:
                f.write(buffer.getvalue())
        else:
            output = args.output or f"partner_summary_{stamp}.pdf"
            buffer = exporter.export_summary_pdf(ops.analytics.report_summary())
            with open(output, 'wb') as f:
                f.write(buffer.getvalue())

        print(f"Exported to {output}")


def main():
    parser = argparse.ArgumentParser(
        description='PartnerIQ - Partner Intelligence CLI'
    )
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # init command
    init_parser = subparsers.add_parser('init', help='Initialize database with demo data')
    init_parser.set_defaults(func=cmd_init)

    # companies command
    comp_parser = subparsers.add_parser('companies', help='List or search companies')
    comp_parser.add_argument('action', choices=['list', 'search'], help='Action')
    comp_parser.add_argument('query', nargs='?', default='', help='Search text')
    comp_parser.add_argument('--industry', help='Filter by industry')
    comp_parser.add_argument('--status', help='Filter by digital twin status')
    comp_parser.add_argument('--country', help='Filter by country')
    comp_parser.add_argument('--opportunity', help='Filter by opportunity range (High, Medium, Low)')
    comp_parser.set_defaults(func=cmd_companies)

    # analytics command
    analytics_parser = subparsers.add_parser('analytics', help='Show dashboard statistics')
    analytics_parser.set_defaults(func=cmd_analytics)

    # report command
    report_parser = subparsers.add_parser('report', help='Generate report')
    report_parser.set_defaults(func=cmd_report)

    # export command
    export_parser = subparsers.add_parser('export', help='Export data')
    export_parser.add_argument('format', choices=['csv', 'pdf'], help='Export format')
    export_parser.add_argument('--output', '-o', help='Output file path')
    export_parser.set_defaults(func=cmd_export)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    args.func(args)


if __name__ == '__main__':
    main()
