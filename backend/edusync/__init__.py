"""EduSync Attendance - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'EduSync Attendance',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from edusync.api.auth import auth_bp
    from edusync.api.attendance_sessions import sessions_bp
    from edusync.api.attendance import attendance_bp
    from edusync.api.qr import qr_bp

    # Auth
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    # Core Features
    app.register_blueprint(sessions_bp, url_prefix='/api/attendance-sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(qr_bp, url_prefix='/api/qr')

    # Swagger UI
    from flask_swagger_ui import get_swaggerui_blueprint
    from edusync.utils.swagger import SWAGGER_URL, API_URL, generate_swagger_spec

    @app.route(API_URL)
    def swagger_spec():
        """Serve Swagger/OpenAPI specification."""
        return jsonify(generate_swagger_spec())

    swaggerui_bp = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={'app_name': "EduSync Attendance API"}
    )
    app.register_blueprint(swaggerui_bp, url_prefix=SWAGGER_URL)

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from edusync.utils.helpers import handle_error, error_response
    from edusync.utils.exceptions import AttendanceError
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(AttendanceError)
    def attendance_error(error):
        return error_response(
            error.message,
            error.status_code,
            reason=error.code,
            **error.extra
        )

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error(error, 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e.description or e, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'error': True,
            'message': 'Token has expired',
            'status_code': 401
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Invalid token',
            'status_code': 401
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Authorization token required',
            'status_code': 401
        }), 401

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('EduSync Attendance startup')

def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models
        from edusync.models import (
            User, UserRole, Course, Enrollment,
            AttendanceSession, AttendanceRecord, AttendanceStatus,
            ActivityLog
        )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

        # Create default admin
        from edusync.models.user import User, UserRole

        admin = User.query.filter_by(email='admin@edusync.edu').first()
        if not admin:
            admin = User(
                email='admin@edusync.edu',
                first_name='System',
                last_name='Admin',
                role=UserRole.ADMIN
            )
            admin.set_password('admin123456')
            db.session.add(admin)
            db.session.commit()
            click.echo('Created admin user: admin@edusync.edu / admin123456')

    @app.cli.command('seed-db')
    def seed_db():
        """Seed database with demo data."""
        from edusync.services.seed_service import SeedService

        try:
            SeedService.seed_all()
            click.echo('Database seeded successfully!')
        except Exception as e:
            db.session.rollback()
            click.echo(f'Error seeding database: {str(e)}')

    @app.cli.command('create-admin')
    def create_admin():
        """Create admin user."""
        email = click.prompt('Admin email')
        first_name = click.prompt('First name')
        last_name = click.prompt('Last name')
        password = click.prompt('Password', hide_input=True)

        from edusync.models.user import User, UserRole

        admin = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=UserRole.ADMIN
        )
        admin.set_password(password)

        try:
            db.session.add(admin)
            db.session.commit()
            click.echo(f'Admin user created: {email}')
        except Exception as e:
            db.session.rollback()
            click.echo(f'Error creating admin: {str(e)}')
