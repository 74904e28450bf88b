"""
BillboardOps - Billboard Booking Operations
Flask application factory and initialization
"""

import os
import click
import logging
from flask import Flask, g
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import database functions
from database import close_db, init_db, get_db, seed_database

# Import domain errors
from models.errors import BookingError, ConflictError

from utils.api_response import api_error
from utils.messages import get_message


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def register_blueprints(app):
    """Register Flask blueprints."""
    from blueprints.api import api_bp

    app.register_blueprint(api_bp, url_prefix='/api')

    @app.route('/')
    def index():
        """Service banner."""
        return {
            'app': app.config.get('APP_NAME', 'BillboardOps'),
            'version': app.config.get('APP_VERSION', '1.0.0'),
            'api': '/api'
        }


def _rollback():
    db = g.get('db')
    if db is not None and db.in_transaction:
        db.rollback()


def register_error_handlers(app):
    """Register JSON error handlers."""

    @app.errorhandler(BookingError)
    def booking_error(error):
        """Business-rule failures carry their own HTTP status."""
        _rollback()
        if isinstance(error, ConflictError):
            return api_error(error.message, error.status_code, conflicts=error.conflicts)
        return api_error(error.message, error.status_code)

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return api_error(get_message('resource_not_found'), 404)

    @app.errorhandler(HTTPException)
    def http_error(error):
        """Other HTTP errors (405, 400 from malformed JSON...)."""
        return api_error(error.description or error.name, error.code)

    @app.errorhandler(Exception)
    def internal_error(error):
        """Handle unexpected errors."""
        # Rollback database on error
        _rollback()
        app.logger.error('Unhandled error: %s', error, exc_info=True)
        return api_error(get_message('internal_error'), 500)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database schema (drops existing data)."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('seed-demo')
    def seed_demo_command():
        """Insert demo customers and billboards."""
        with app.app_context():
            db = get_db()
            seed_database(db)
            db.commit()
        click.echo('Demo data inserted.')

    @app.cli.command('check-availability')
    @click.argument('billboard_id', type=int)
    @click.argument('start_date')
    @click.argument('end_date')
    @click.option('--slot', type=int, default=None, help='Digital slot number')
    @click.option('--scope', type=click.Choice(['auto', 'billboard', 'slot']),
                  default='auto', show_default=True)
    def check_availability_command(billboard_id, start_date, end_date, slot, scope):
        """Check whether a billboard is free between two dates."""
        from models.booking import check_availability

        with app.app_context():
            try:
                result = check_availability(billboard_id, start_date, end_date,
                                            slot_number=slot, scope=scope)
            except BookingError as e:
                raise click.ClickException(e.message)

        if result['available']:
            click.echo('Available')
            return

        click.echo('Not available. Conflicts:')
        for conflict in result['conflicts']:
            slot_label = f" slot {conflict['slot_number']}" if conflict['slot_number'] else ''
            click.echo(f"  {conflict['reference_code']} {conflict['start_date']}.."
                       f"{conflict['end_date']}{slot_label} ({conflict['status']})")


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/billboard_ops.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        # Model loggers (models.booking_crud, ...) share the file
        models_logger = logging.getLogger('models')
        models_logger.addHandler(file_handler)
        models_logger.setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('BillboardOps startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)
        logging.getLogger('models').setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', debug=True)
