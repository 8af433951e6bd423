# Import important modules and create app package
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_mail import Mail
from dotenv import load_dotenv
import os
from datetime import datetime

# Load environment variables
load_dotenv()

# Initialize extensions
db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
mail = Mail()


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def create_app(config=None):
    # Initialize app
    app = Flask(__name__)

    # Configure app
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-key')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///grooming.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Scheduling policy
    app.config['SCHEDULING_STRICT_GROOMER'] = _env_flag('SCHEDULING_STRICT_GROOMER')
    app.config['SCHEDULING_PREVENT_OVERLAP'] = _env_flag('SCHEDULING_PREVENT_OVERLAP')
    app.config['SCHEDULING_CLOCK'] = datetime.now
    app.config['DENSITY_LOW_MAX'] = int(os.environ.get('DENSITY_LOW_MAX', 2))
    app.config['DENSITY_MEDIUM_MAX'] = int(os.environ.get('DENSITY_MEDIUM_MAX', 5))

    # Outgoing mail (confirmation messages)
    app.config['MAIL_ENABLED'] = _env_flag('MAIL_ENABLED')
    app.config['MAIL_SERVER'] = os.environ.get('MAIL_SERVER', 'localhost')
    app.config['MAIL_PORT'] = int(os.environ.get('MAIL_PORT', 25))
    app.config['MAIL_USE_TLS'] = _env_flag('MAIL_USE_TLS')
    app.config['MAIL_USERNAME'] = os.environ.get('MAIL_USERNAME')
    app.config['MAIL_PASSWORD'] = os.environ.get('MAIL_PASSWORD')
    app.config['MAIL_DEFAULT_SENDER'] = os.environ.get('MAIL_DEFAULT_SENDER', 'bookings@grooming.local')

    if config:
        app.config.update(config)

    # Initialize extensions with app
    db.init_app(app)
    login_manager.init_app(app)
    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access this page.'
    migrate.init_app(app, db)
    mail.init_app(app)

    # Register blueprints
    from grooming.auth.routes import auth_bp
    from grooming.customer.routes import customer_bp
    from grooming.staff.routes import staff_bp
    from grooming.admin.routes import admin_bp
    from grooming.main.routes import main_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(customer_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(main_bp)

    # Scheduling errors that escape a view become JSON responses
    from grooming.scheduling.errors import SchedulingError

    @app.errorhandler(SchedulingError)
    def handle_scheduling_error(error):
        return jsonify(error.to_dict()), error.status_code

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Unauthorized', 'message': login_manager.login_message}), 401

    from grooming.notifications import register_notifications
    register_notifications(app)

    # Create database tables
    with app.app_context():
        db.create_all()
        app.logger.info("Database tables created successfully")

    return app
