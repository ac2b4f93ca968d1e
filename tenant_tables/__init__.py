import os

from dotenv import load_dotenv
from flask import Flask

from tenant_tables.utils.logging_utils import get_logger, init_logger

from .commands.setup_commands import setup_command

# Load environment variables from .env file
load_dotenv()

# Import configuration after loading .env
from .config import config, Config
from .extensions import db, ma


def configure_logging(app):
    """Build the category loggers from app.config and align the Flask logger level."""
    manager = init_logger(app)
    app.logger.setLevel(manager.settings.level)
    get_logger("app").info(
        "Logging configured level=%s dir=%s json=%s",
        app.config.get('LOGGING_LEVEL', 'INFO'),
        manager.settings.base_dir,
        manager.settings.json_format,
    )
    return manager


def create_app(config_name=None):
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'default')

    config_class = config.get(config_name, Config)

    app = Flask(__name__)
    app.config.from_object(config_class)
    config_class.init_app(app)

    configure_logging(app)
    get_logger("app").info("Application startup with config %s", config_class.__name__)

    db.init_app(app)
    ma.init_app(app)
    app.cli.add_command(setup_command)

    return app
