from flask import Flask
from .auth.saml_config import IdPMetadataSettings
from .auth.saml_metadata import TemplatedMetadataAndCertificatesGenerationService
from .config import config
import logging

def create_app(config_name='default', config_overrides=None):
    """Application factory function"""
    app = Flask(__name__)

    # Configure logging
    logging.basicConfig(level=logging.INFO)

    # Load configuration
    app.config.from_object(config[config_name])
    if config_overrides:
        app.config.update(config_overrides)

    try:
        # Generate IdP certificates and metadata before serving requests
        settings = IdPMetadataSettings.from_app_config(app.config)
        metadata_service = TemplatedMetadataAndCertificatesGenerationService(settings)
        metadata_service.initialize()
        app.extensions['saml_idp_metadata'] = metadata_service

        # Register blueprints
        from .views.idp import idp_bp

        app.register_blueprint(idp_bp, url_prefix='/idp')

        app.logger.info("Application initialized successfully")
        return app

    except Exception as e:
        app.logger.error(f"Failed to initialize application: {str(e)}")
        raise
