"""
Demo data for PartnerIQ demonstrations.
Loaded by ``cli.py init`` and, for the in-memory backend, by SEED_DEMO_DATA.
"""
import logging

logger = logging.getLogger(__name__)

# ===== TEAM MEMBERS =====
TEAM_MEMBERS = [
    {'name': 'Sarah Chen', 'email': 'sarah.chen@dell.com', 'role': 'Senior Sales Engineer', 'department': 'Pre-Sales'},
    {'name': 'Michael Rodriguez', 'email': 'michael.rodriguez@dell.com', 'role': 'Solutions Architect', 'department': 'Technical Sales'},
    {'name': 'Lisa Wang', 'email': 'lisa.wang@dell.com', 'role': 'Business Development Manager', 'department': 'Strategic Partnerships'},
    {'name': 'David Kumar', 'email': 'david.kumar@dell.com', 'role': 'Digital Twin Specialist', 'department': 'Technology Solutions'},
]

# ===== COMPANIES =====
COMPANIES = [
    {
        'name': 'Siemens AG',
        'industry': 'Manufacturing',
        'country': 'Germany',
        'employees': 385000,
        'revenue': '€62.3B',
        'headquarters': 'Munich, Germany',
        'ceo': 'Roland Busch',
        'founded': 1847,
        'website': 'siemens.com',
        'business_areas': ['Digital Industries', 'Smart Infrastructure', 'Mobility', 'Siemens Healthineers', 'Siemens Energy'],
        'digital_twin_status': 'implementing',
        'digital_twin_maturity': 75,
        'opportunity_score': 82,
        'estimated_deal_value': '$850K',
        'next_follow_up': '2024-12-15',
        'notes': 'CEO mentioned significant investments in IoT and edge computing infrastructure during Q3 earnings call.',
        'digital_twin_strategy': 'Siemens is heavily investing in digital twin technology across manufacturing and infrastructure. They have developed their own MindSphere platform and are looking to expand their edge computing capabilities.',
        'dell_opportunity': "High potential for Dell's edge computing infrastructure and storage solutions. Siemens needs robust data processing at manufacturing sites.",
        'competitive_analysis': 'Currently partnered with Microsoft Azure for cloud solutions. Dell could position edge computing and hybrid cloud solutions as complementary to their existing Azure partnership.',
    },
    {
        'name': 'Boeing',
        'industry': 'Aerospace',
        'country': 'USA',
        'employees': 142000,
        'revenue': '$66.6B',
        'headquarters': 'Chicago, USA',
        'ceo': 'David Calhoun',
        'founded': 1916,
        'website': 'boeing.com',
        'business_areas': ['Commercial Airplanes', 'Defense Space & Security', 'Global Services', 'Boeing Capital'],
        'digital_twin_status': 'researching',
        'digital_twin_maturity': 45,
        'opportunity_score': 91,
        'estimated_deal_value': '$1.2M',
        'next_follow_up': '2024-12-20',
        'notes': 'Boeing is exploring digital twin applications for aircraft design and predictive maintenance.',
        'digital_twin_strategy': 'Focused on aircraft lifecycle management and predictive maintenance. Looking at digital twins for both design optimization and operational efficiency.',
        'dell_opportunity': 'Excellent opportunity for high-performance computing solutions for simulation workloads and secure data storage for sensitive aerospace data.',
        'competitive_analysis': "Boeing has partnerships with various cloud providers. Dell's strength in secure, on-premise solutions could be attractive for classified defense projects.",
    },
    {
        'name': 'Ford Motor Company',
        'industry': 'Automotive',
        'country': 'USA',
        'employees': 190000,
        'revenue': '$158B',
        'headquarters': 'Dearborn, USA',
        'ceo': 'Jim Farley',
        'founded': 1903,
        'website': 'ford.com',
        'business_areas': ['Ford Blue', 'Ford Model e', 'Ford Pro', 'Ford Credit'],
        'digital_twin_status': 'completed',
        'digital_twin_maturity': 90,
        'opportunity_score': 68,
        'estimated_deal_value': '$650K',
        'next_follow_up': '2025-01-10',
        'notes': 'Ford has successfully implemented digital twins in their manufacturing processes and is looking to expand to connected vehicle services.',
        'digital_twin_strategy': 'Advanced digital twin implementation across manufacturing and vehicle development. Now focusing on connected vehicle data and smart mobility services.',
        'dell_opportunity': 'Potential for expanding existing relationship with connected vehicle data processing and edge computing for autonomous driving development.',
        'competitive_analysis': 'Ford has existing relationships with AWS and Microsoft. Dell could focus on edge computing for real-time vehicle data processing.',
    },
]


def populate_demo_data(operations) -> bool:
    """Load the demo team and companies through the services.

    Does nothing if any company already exists. Returns True when data was
    loaded. Seed records are not written to the activity log.
    """
    if operations.companies.list():
        logger.info("Companies already present, skipping demo data")
        return False

    for member in TEAM_MEMBERS:
        if not operations.storage.find_team_member_by_email(member['email']):
            operations.team.create(member)

    for company in COMPANIES:
        operations.companies.create(company)

    logger.info(f"Loaded {len(TEAM_MEMBERS)} team members and {len(COMPANIES)} demo companies")
    return True
