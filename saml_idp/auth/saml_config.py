"""
SAML IdP configuration module.
Provides the settings consumed by the metadata and certificate bootstrap.
"""
import os
from urllib.parse import urlparse

from .errors import ConfigurationError

DEFAULT_TEMPLATE = 'classpath:/template-idp-metadata.xml'

SIGNING_CERT_FILE_NAME = 'idp-signing.crt'
SIGNING_KEY_FILE_NAME = 'idp-signing.key'
ENCRYPTION_CERT_FILE_NAME = 'idp-encryption.crt'
ENCRYPTION_KEY_FILE_NAME = 'idp-encryption.key'
METADATA_FILE_NAME = 'idp-metadata.xml'

# Environment variable / app.config key for every settings field
SETTINGS_KEYS = {
    'server_prefix': 'CAS_SERVER_PREFIX',
    'entity_id': 'SAML_IDP_ENTITY_ID',
    'scope': 'SAML_IDP_SCOPE',
    'metadata_location': 'SAML_IDP_METADATA_LOCATION',
    'signing_cert_file': 'SAML_IDP_SIGNING_CERT_FILE',
    'signing_key_file': 'SAML_IDP_SIGNING_KEY_FILE',
    'encryption_cert_file': 'SAML_IDP_ENCRYPTION_CERT_FILE',
    'encryption_key_file': 'SAML_IDP_ENCRYPTION_KEY_FILE',
    'metadata_file': 'SAML_IDP_METADATA_FILE',
    'template': 'SAML_IDP_METADATA_TEMPLATE',
}

ENV_DEFAULTS = {
    'server_prefix': 'https://localhost:8443/cas',
    'entity_id': 'https://localhost:8443/idp',
    'scope': 'localhost',
    'metadata_location': '/etc/cas/saml',
}


class IdPMetadataSettings:
    """Settings for generating IdP metadata and its certificates."""

    def __init__(self, server_prefix, entity_id, scope, metadata_location,
                 signing_cert_file=None, signing_key_file=None,
                 encryption_cert_file=None, encryption_key_file=None,
                 metadata_file=None, template=DEFAULT_TEMPLATE):
        self.server_prefix = server_prefix
        self.entity_id = entity_id
        self.scope = scope
        self.metadata_location = metadata_location
        self.signing_cert_file = signing_cert_file or os.path.join(metadata_location, SIGNING_CERT_FILE_NAME)
        self.signing_key_file = signing_key_file or os.path.join(metadata_location, SIGNING_KEY_FILE_NAME)
        self.encryption_cert_file = encryption_cert_file or os.path.join(metadata_location, ENCRYPTION_CERT_FILE_NAME)
        self.encryption_key_file = encryption_key_file or os.path.join(metadata_location, ENCRYPTION_KEY_FILE_NAME)
        self.metadata_file = metadata_file or os.path.join(metadata_location, METADATA_FILE_NAME)
        self.template = template or DEFAULT_TEMPLATE

    def __repr__(self):
        return (f"IdPMetadataSettings(entity_id={self.entity_id!r}, "
                f"metadata_location={self.metadata_location!r})")

    @classmethod
    def from_mapping(cls, values):
        """
        Build settings from a mapping keyed by the configuration names.

        Args:
            values (Mapping): Flask ``app.config``, ``os.environ`` or any dict.

        Returns:
            IdPMetadataSettings: The settings.
        """
        kwargs = {}
        for field, key in SETTINGS_KEYS.items():
            value = values.get(key)
            if value is None:
                value = ENV_DEFAULTS.get(field)
            kwargs[field] = value
        return cls(**kwargs)

    @classmethod
    def from_env(cls):
        """
        Build settings from environment variables.

        Returns:
            IdPMetadataSettings: The settings.
        """
        return cls.from_mapping(os.environ)

    @classmethod
    def from_app_config(cls, app_config):
        """
        Build settings from a Flask application config.

        Returns:
            IdPMetadataSettings: The settings.
        """
        return cls.from_mapping(app_config)

    def get_idp_endpoint_url(self):
        """
        Get the base URL of the IdP endpoints.

        Returns:
            str: The server prefix followed by ``/idp``.
        """
        return self.server_prefix + '/idp'

    def get_idp_host_name(self):
        """
        Get the IdP host name from the server prefix.

        Returns:
            str: The host component of the server prefix URL.

        Raises:
            ConfigurationError: If the server prefix is not a well-formed URL.
        """
        try:
            url = urlparse(self.server_prefix or '')
            # hostname is lowercased, unlike the raw netloc
            host = url.hostname
            # Accessing port validates it
            url.port
        except ValueError as e:
            raise ConfigurationError(f"Server prefix {self.server_prefix!r} is not a valid URL: {e}") from e

        if not url.scheme or not host:
            raise ConfigurationError(f"Server prefix {self.server_prefix!r} is not a valid URL")
        return host
