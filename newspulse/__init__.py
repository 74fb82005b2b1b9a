from flask import Flask, request
import logging

def create_app(config_object, llm_client=None, search_client=None, fetcher_kwargs=None):
    """Create and configure the Flask application"""
    app = Flask(__name__)

    # Configure logging first
    logging.basicConfig(level=logging.INFO)
    app.logger.setLevel(logging.INFO)

    # Load configuration
    try:
        app.config.from_object(config_object)
    except Exception as e:
        app.logger.error(f"Failed to load configuration: {e}")
        raise

    missing = config_object.missing_keys() if hasattr(config_object, 'missing_keys') else []
    for key in missing:
        app.logger.warning(f"{key} is not configured; endpoints that need it will fail")

    # Register blueprints and initialize routes
    try:
        from .routes.main import main_bp, init_route_dependencies
        from .routes.chat import chat_bp
        app.register_blueprint(main_bp)
        app.register_blueprint(chat_bp)

        init_route_dependencies(
            app,
            llm_client=llm_client,
            search_client=search_client,
            fetcher_kwargs=fetcher_kwargs
        )
    except Exception as e:
        app.logger.error(f"Failed to initialize application routes: {e}")
        raise

    @app.before_request
    def log_request():
        app.logger.info(f"{request.method} {request.path}")

    @app.route('/')
    def index():
        return "newspulse backend is running!"

    return app

__all__ = ['create_app']
