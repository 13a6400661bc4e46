import os
import logging
from dotenv import load_dotenv
load_dotenv()
from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate
from config import config_dict, configure_logging, ProdConfig
from models import db
from routes.errors import register_error_handlers
from routes.students import student_bp
from routes.lecturers import lecturer_bp

logger = logging.getLogger(__name__)

migrate = Migrate()


def create_app(config_name=None):
    env = (config_name or os.environ.get("FLASK_ENV", "production")).lower()
    config_class = config_dict.get(env, ProdConfig)

    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app.config["LOG_LEVEL"])

    @app.route('/')
    def home():
        return "Welcome to the LMS progress service!"

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"], "supports_credentials": True}})

    db.init_app(app)
    migrate.init_app(app, db)

    register_error_handlers(app)
    app.register_blueprint(student_bp, url_prefix='/api/student')
    app.register_blueprint(lecturer_bp, url_prefix='/api/lecturer')

    logger.info("App created for environment %s", env)
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=app.config['DEBUG'])
