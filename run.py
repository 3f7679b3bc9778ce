#!/usr/bin/env python3
"""
PartnerIQ - Main Application Runner
Starts the Flask API server.
"""
import os
import sys
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler('logs/app.log', mode='a')
    ] if os.path.exists('logs') else [logging.StreamHandler(sys.stdout)]
)

logger = logging.getLogger(__name__)

# Import and create app at module level for gunicorn
from partneriq import create_app
app = create_app()


def main():
    """Main entry point for local development."""
    host = os.getenv('FLASK_HOST', '0.0.0.0')
    port = int(os.getenv('FLASK_PORT', 5000))
    debug = os.getenv('FLASK_DEBUG', 'true').lower() == 'true'

    logger.info(f"Starting PartnerIQ on {host}:{port}")
    logger.info(f"Debug mode: {debug}")

    app.run(
        host=host,
        port=port,
        debug=debug
    )


if __name__ == '__main__':
    main()
