"""
PartnerIQ Application Package
"""
from flask import Flask, jsonify
from flask_cors import CORS
import os
import logging
from pathlib import Path
from dotenv import load_dotenv

from .exceptions import AIGenerationError, NotFoundError, StorageError, ValidationError

load_dotenv()

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Base directory for the project
BASE_DIR = Path(__file__).resolve().parent.parent

# On Azure App Service, use /home for persistent storage
# Otherwise use local data directory
if os.path.exists('/home') and os.environ.get('WEBSITE_SITE_NAME'):
    DATA_DIR = Path('/home/data')
else:
    DATA_DIR = BASE_DIR / 'data'

DB_FILENAME = 'partneriq.db'


def _env_flag(name, default='false'):
    return os.getenv(name, default).lower() == 'true'


def create_app(test_config=None, storage=None, narrator=None):
    """Create and configure the Flask application.

    ``storage`` and ``narrator`` replace the configured backend and the
    OpenAI-backed narrative generator, mainly for tests.
    """
    app = Flask(__name__)

    # Configuration
    db_path = DATA_DIR / DB_FILENAME
    app.config.update(
        SECRET_KEY=os.getenv('FLASK_SECRET_KEY', 'dev-secret-key'),
        SQLALCHEMY_DATABASE_URI=os.getenv('DATABASE_URL', f'sqlite:///{db_path}'),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        STORAGE_BACKEND=os.getenv('STORAGE_BACKEND', 'database').lower(),
        SEED_DEMO_DATA=_env_flag('SEED_DEMO_DATA'),
        RESET_DATABASE=_env_flag('RESET_DATABASE'),
    )
    if test_config:
        app.config.update(test_config)

    # Enable CORS for frontend hosted on different domain
    cors_origins = os.getenv('CORS_ORIGINS', '*')
    CORS(app, resources={
        r"/api/*": {
            "origins": cors_origins.split(',') if cors_origins != '*' else '*',
            "methods": ["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    })

    # Initialize database
    from .database import db
    db.init_app(app)

    if storage is None:
        storage = _init_storage(app, db, db_path)

    if narrator is None:
        from .narrative import NarrativeGenerator
        narrator = NarrativeGenerator()

    from .operations import PartnerOperations
    operations = PartnerOperations(storage, narrator)
    app.extensions['partneriq'] = operations

    if app.config['STORAGE_BACKEND'] == 'memory' and app.config['SEED_DEMO_DATA']:
        from .demo_data import populate_demo_data
        populate_demo_data(operations)

    register_error_handlers(app)

    # Register blueprints
    from .routes import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    return app


def _init_storage(app, db, db_path):
    from .storage import DatabaseStorage, MemoryStorage

    backend = app.config['STORAGE_BACKEND']
    if backend == 'memory':
        logger.info("Using in-memory storage")
        return MemoryStorage()
    if backend != 'database':
        raise ValueError(f"Unknown STORAGE_BACKEND '{backend}', expected 'database' or 'memory'")

    uses_default_file = app.config['SQLALCHEMY_DATABASE_URI'] == f'sqlite:///{db_path}'
    if uses_default_file:
        # Ensure data directory exists before any database operations
        DATA_DIR.mkdir(parents=True, exist_ok=True)

        if app.config['RESET_DATABASE'] and db_path.exists():
            app.logger.warning("RESET_DATABASE flag detected - deleting existing database")
            db_path.unlink()

    with app.app_context():
        db.create_all()
        app.logger.info("Database initialized successfully")

    return DatabaseStorage(db)


def register_error_handlers(app):
    """Map domain exceptions to JSON error responses."""

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({'error': str(e), 'details': e.details}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return jsonify({'error': str(e)}), 404

    @app.errorhandler(AIGenerationError)
    def handle_ai_error(e):
        return jsonify({'error': str(e)}), 502

    @app.errorhandler(StorageError)
    def handle_storage_error(e):
        logger.error(f"Storage failure: {e}")
        return jsonify({'error': str(e)}), 500
