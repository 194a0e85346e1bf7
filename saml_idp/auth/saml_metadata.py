"""
SAML metadata generation module.
Generates the IdP signing and encryption certificates and renders the IdP
metadata document from a template.
"""
import logging
import os
from abc import ABC, abstractmethod

from .certificates import SelfSignedCertificateGenerator
from .errors import ConfigurationError, GenerationError, MetadataIOError
from .resources import ResourceLoader

logger = logging.getLogger(__name__)

URI_SUBJECT_ALTNAME_POSTFIX = '/idp/metadata'

BEGIN_CERTIFICATE = '-----BEGIN CERTIFICATE-----'
END_CERTIFICATE = '-----END CERTIFICATE-----'


def strip_certificate(cert_text):
    """
    Remove the PEM header and footer from a certificate.

    Args:
        cert_text (str): PEM encoded certificate.

    Returns:
        str: The base64 body, trimmed of surrounding whitespace.
    """
    cert_text = cert_text.replace(BEGIN_CERTIFICATE, '')
    cert_text = cert_text.replace(END_CERTIFICATE, '')
    return cert_text.strip()


def render_metadata(template, entity_id, scope, idp_endpoint_url, encryption_key, signing_key):
    """Replace the metadata placeholders in ``template`` literally."""
    return template \
        .replace('${entityId}', entity_id) \
        .replace('${scope}', scope) \
        .replace('${idpEndpointUrl}', idp_endpoint_url) \
        .replace('${encryptionKey}', encryption_key) \
        .replace('${signingKey}', signing_key)


class SamlIdPMetadataGenerationService(ABC):
    """Abstract base class for services producing IdP metadata and certificates."""

    @abstractmethod
    def perform_generation_steps(self) -> str:
        """Generate metadata and certificates if needed and return the metadata file path."""
        pass


class TemplatedMetadataAndCertificatesGenerationService(SamlIdPMetadataGenerationService):
    """Metadata generator based on a predefined template."""

    def __init__(self, settings, resource_loader=None, certificate_generator_factory=None):
        self.settings = settings
        self.resource_loader = resource_loader or ResourceLoader()
        self.certificate_generator_factory = certificate_generator_factory or SelfSignedCertificateGenerator

    def initialize(self):
        """
        Create the metadata directory if needed and run the generation steps.

        Returns:
            str: Path to the metadata file.

        Raises:
            ConfigurationError: If the metadata directory cannot be created.
        """
        location = self.settings.metadata_location
        if not os.path.exists(location):
            logger.debug(f"Metadata directory [{location}] does not exist. Creating...")
            try:
                os.mkdir(location)
            except OSError as e:
                logger.error(f"Metadata directory location {location} cannot be located/created: {e}")
                raise ConfigurationError(f"Metadata directory location {location} cannot be located/created") from e

        logger.info(f"Metadata directory location is at [{location}] with entityID [{self.settings.entity_id}]")
        return self.perform_generation_steps()

    def is_metadata_missing(self):
        """
        Check whether the metadata file is absent.

        Returns:
            bool: True if the metadata file does not exist.
        """
        return not os.path.exists(self.settings.metadata_file)

    def perform_generation_steps(self):
        """
        Generate certificates and metadata unless the metadata file already exists.

        Returns:
            str: Path to the metadata file.
        """
        metadata_file = self.settings.metadata_file
        logger.debug(f"Preparing to generate metadata for entityId [{self.settings.entity_id}]")
        if self.is_metadata_missing():
            logger.info(f"Metadata does not exist at [{metadata_file}]. Creating...")

            logger.info("Creating self-sign certificate for signing...")
            self.build_self_signed_signing_cert()

            logger.info("Creating self-sign certificate for encryption...")
            self.build_self_signed_encryption_cert()

            logger.info("Creating metadata...")
            self.build_metadata_generator_parameters()

        logger.info(f"Metadata is available at [{metadata_file}]")
        return metadata_file

    def build_self_signed_signing_cert(self):
        """Generate the signing certificate and private key."""
        self._build_self_signed_cert(self.settings.signing_cert_file, self.settings.signing_key_file)

    def build_self_signed_encryption_cert(self):
        """Generate the encryption certificate and private key."""
        self._build_self_signed_cert(self.settings.encryption_cert_file, self.settings.encryption_key_file)

    def _build_self_signed_cert(self, cert_file, key_file):
        host_name = self.settings.get_idp_host_name()

        try:
            for path in (cert_file, key_file):
                if os.path.exists(path):
                    logger.debug(f"Removing existing file [{path}]")
                    os.remove(path)

            generator = self.certificate_generator_factory()
            generator.host_name = host_name
            generator.certificate_file = cert_file
            generator.private_key_file = key_file
            generator.uri_subject_alt_names = [host_name + URI_SUBJECT_ALTNAME_POSTFIX]
            generator.generate()
        except Exception as e:
            logger.error(f"Failed to generate self-signed certificate {cert_file}: {str(e)}")
            raise GenerationError(f"Failed to generate self-signed certificate {cert_file}: {e}") from e

    def _read_certificate(self, path):
        try:
            with open(path, 'r', encoding='utf-8') as cert_file:
                return strip_certificate(cert_file.read())
        except OSError as e:
            raise MetadataIOError(f"Certificate file {path} cannot be read: {e}") from e

    def build_metadata_generator_parameters(self):
        """
        Render the metadata template with the generated certificates and write
        the result to the metadata file.

        Raises:
            MetadataIOError: If the template or certificates cannot be read, or
                the metadata file cannot be written.
        """
        settings = self.settings

        signing_key = self._read_certificate(settings.signing_cert_file)
        encryption_key = self._read_certificate(settings.encryption_cert_file)

        with self.resource_loader.open_resource(settings.template) as template_file:
            try:
                template = template_file.read()
            except (OSError, UnicodeDecodeError) as e:
                raise MetadataIOError(f"Template {settings.template} cannot be read: {e}") from e

        metadata = render_metadata(
            template,
            entity_id=settings.entity_id,
            scope=settings.scope,
            idp_endpoint_url=settings.get_idp_endpoint_url(),
            encryption_key=encryption_key,
            signing_key=signing_key,
        )

        try:
            with open(settings.metadata_file, 'w', encoding='utf-8') as metadata_file:
                metadata_file.write(metadata)
        except OSError as e:
            logger.error(f"Metadata file {settings.metadata_file} cannot be written: {str(e)}")
            raise MetadataIOError(f"Metadata file {settings.metadata_file} cannot be written: {e}") from e

        logger.debug(f"Wrote {len(metadata)} characters of metadata to {settings.metadata_file}")
