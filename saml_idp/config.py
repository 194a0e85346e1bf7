import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Base configuration class"""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-key-change-in-production')
    DEBUG = False
    TESTING = False

    CAS_SERVER_PREFIX = os.getenv('CAS_SERVER_PREFIX', 'https://localhost:8443/cas')

    SAML_IDP_ENTITY_ID = os.getenv('SAML_IDP_ENTITY_ID', 'https://localhost:8443/idp')
    SAML_IDP_SCOPE = os.getenv('SAML_IDP_SCOPE', 'localhost')
    SAML_IDP_METADATA_LOCATION = os.getenv('SAML_IDP_METADATA_LOCATION', '/etc/cas/saml')
    SAML_IDP_METADATA_TEMPLATE = os.getenv('SAML_IDP_METADATA_TEMPLATE', 'classpath:/template-idp-metadata.xml')

    # Left unset, these fall back to well-known names under the metadata location
    SAML_IDP_SIGNING_CERT_FILE = os.getenv('SAML_IDP_SIGNING_CERT_FILE')
    SAML_IDP_SIGNING_KEY_FILE = os.getenv('SAML_IDP_SIGNING_KEY_FILE')
    SAML_IDP_ENCRYPTION_CERT_FILE = os.getenv('SAML_IDP_ENCRYPTION_CERT_FILE')
    SAML_IDP_ENCRYPTION_KEY_FILE = os.getenv('SAML_IDP_ENCRYPTION_KEY_FILE')
    SAML_IDP_METADATA_FILE = os.getenv('SAML_IDP_METADATA_FILE')

class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    SAML_IDP_METADATA_LOCATION = os.getenv('SAML_IDP_METADATA_LOCATION', 'saml')

class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True
    CAS_SERVER_PREFIX = 'https://idp.example.org/cas'
    SAML_IDP_ENTITY_ID = 'https://idp.example.org/idp'
    SAML_IDP_SCOPE = 'example.org'

class ProductionConfig(Config):
    """Production configuration"""
    pass

config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
