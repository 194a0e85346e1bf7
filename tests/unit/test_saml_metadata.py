"""
Unit tests for SAML IdP metadata generation.
"""
import unittest
from unittest.mock import MagicMock
import functools
import os
import sys
import tempfile
from cryptography import x509
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from saml_idp.auth.certificates import SelfSignedCertificateGenerator
from saml_idp.auth.errors import ConfigurationError, GenerationError, MetadataIOError
from saml_idp.auth.resources import ResourceLoader
from saml_idp.auth.saml_config import IdPMetadataSettings
from saml_idp.auth.saml_metadata import (
    TemplatedMetadataAndCertificatesGenerationService,
    strip_certificate,
    render_metadata,
)

TEST_TEMPLATE = 'entity=${entityId} scope=${scope} url=${idpEndpointUrl} sign=${signingKey} enc=${encryptionKey}'


class FakeCertificateGenerator:
    """Writes fixed PEM text instead of real key material."""

    instances = []

    def __init__(self):
        self.host_name = None
        self.certificate_file = None
        self.private_key_file = None
        self.uri_subject_alt_names = []
        FakeCertificateGenerator.instances.append(self)

    def generate(self):
        body = 'SIGNINGBODY' if 'signing' in self.certificate_file else 'ENCRYPTIONBODY'
        with open(self.certificate_file, 'w') as f:
            f.write(f'-----BEGIN CERTIFICATE-----\n{body}\n-----END CERTIFICATE-----\n')
        with open(self.private_key_file, 'w') as f:
            f.write('key')


class TestCertificateHelpers(unittest.TestCase):
    """Test cases for certificate stripping and template rendering."""

    def test_strip_certificate(self):
        """Test PEM header and footer are removed and whitespace trimmed."""
        cert = '-----BEGIN CERTIFICATE-----\nABC123\n-----END CERTIFICATE-----\n'

        self.assertEqual(strip_certificate(cert), 'ABC123')

    def test_render_metadata_leaves_unknown_tokens(self):
        """Test placeholders without a value are left untouched."""
        rendered = render_metadata('${entityId} ${unknown}', 'a', 'b', 'c', 'd', 'e')

        self.assertEqual(rendered, 'a ${unknown}')

    def test_render_metadata_no_escaping(self):
        """Test values are substituted verbatim."""
        rendered = render_metadata('<x>${scope}</x>', 'a', 'a&b<c>', 'c', 'd', 'e')

        self.assertEqual(rendered, '<x>a&b<c></x>')


class TestTemplatedMetadataGeneration(unittest.TestCase):
    """Test cases for templated metadata and certificate generation."""

    def setUp(self):
        """Set up test fixtures."""
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.location = os.path.join(self.tmp_dir.name, 'saml')
        self.resource_dir = os.path.join(self.tmp_dir.name, 'resources')
        os.makedirs(self.resource_dir)
        with open(os.path.join(self.resource_dir, 'test-template.txt'), 'w', encoding='utf-8') as f:
            f.write(TEST_TEMPLATE)

        self.settings = IdPMetadataSettings(
            server_prefix='https://idp.example.org/cas',
            entity_id='https://sp.example.org',
            scope='example.org',
            metadata_location=self.location,
            template='classpath:/test-template.txt'
        )
        FakeCertificateGenerator.instances = []

    def tearDown(self):
        """Tear down test fixtures."""
        self.tmp_dir.cleanup()

    def _service(self, factory=FakeCertificateGenerator):
        return TemplatedMetadataAndCertificatesGenerationService(
            self.settings,
            resource_loader=ResourceLoader(self.resource_dir),
            certificate_generator_factory=factory
        )

    def _read(self, path):
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def test_initialize_creates_directory(self):
        """Test the metadata directory is created and metadata generated."""
        metadata_file = self._service().initialize()

        self.assertTrue(os.path.isdir(self.location))
        self.assertEqual(metadata_file, self.settings.metadata_file)
        self.assertTrue(os.path.exists(metadata_file))

    def test_initialize_uncreatable_directory(self):
        """Test a directory whose parent is missing cannot be created."""
        self.settings.metadata_location = os.path.join(self.tmp_dir.name, 'missing', 'saml')

        with self.assertRaises(ConfigurationError):
            self._service().initialize()

    def test_template_substitution(self):
        """Test every placeholder is replaced with its value."""
        os.makedirs(self.location)

        self._service().perform_generation_steps()

        self.assertEqual(
            self._read(self.settings.metadata_file),
            'entity=https://sp.example.org scope=example.org url=https://idp.example.org/cas/idp '
            'sign=SIGNINGBODY enc=ENCRYPTIONBODY'
        )

    def test_generator_parameters(self):
        """Test the generator receives the host name, paths and subject alternative name."""
        self.settings.server_prefix = 'https://sso.example.org:8443/cas'
        os.makedirs(self.location)

        self._service().perform_generation_steps()

        signing, encryption = FakeCertificateGenerator.instances
        self.assertEqual(signing.host_name, 'sso.example.org')
        self.assertEqual(signing.certificate_file, self.settings.signing_cert_file)
        self.assertEqual(signing.private_key_file, self.settings.signing_key_file)
        self.assertEqual(signing.uri_subject_alt_names, ['sso.example.org/idp/metadata'])
        self.assertEqual(encryption.certificate_file, self.settings.encryption_cert_file)
        self.assertEqual(encryption.private_key_file, self.settings.encryption_key_file)
        self.assertEqual(encryption.uri_subject_alt_names, ['sso.example.org/idp/metadata'])

    def test_existing_metadata_is_kept(self):
        """Test nothing is generated when the metadata file already exists."""
        os.makedirs(self.location)
        with open(self.settings.metadata_file, 'w', encoding='utf-8') as f:
            f.write('existing metadata')
        existing_files = (
            self.settings.signing_cert_file,
            self.settings.signing_key_file,
            self.settings.encryption_cert_file,
            self.settings.encryption_key_file,
        )
        for path in existing_files:
            with open(path, 'w', encoding='utf-8') as f:
                f.write('existing ' + os.path.basename(path))
            # Backdate so any rewrite shows up as a changed mtime
            os.utime(path, (1000000000, 1000000000))
        service = self._service()

        self.assertFalse(service.is_metadata_missing())
        self.assertEqual(service.perform_generation_steps(), self.settings.metadata_file)

        self.assertEqual(FakeCertificateGenerator.instances, [])
        for path in existing_files:
            self.assertEqual(self._read(path), 'existing ' + os.path.basename(path))
            self.assertEqual(os.stat(path).st_mtime, 1000000000)
        self.assertEqual(self._read(self.settings.metadata_file), 'existing metadata')

    def test_existing_certificates_are_replaced(self):
        """Test stale certificate and key files are deleted before generation."""
        os.makedirs(self.location)
        stale_files = (
            self.settings.signing_cert_file,
            self.settings.signing_key_file,
            self.settings.encryption_cert_file,
            self.settings.encryption_key_file,
        )
        for path in stale_files:
            with open(path, 'w') as f:
                f.write('stale')

        generator = functools.partial(SelfSignedCertificateGenerator, key_size=1024)
        self._service(generator).perform_generation_steps()

        for path in stale_files:
            self.assertNotEqual(self._read(path), 'stale')
        with open(self.settings.signing_cert_file, 'rb') as f:
            cert = x509.load_pem_x509_certificate(f.read())
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        self.assertIn('idp.example.org/idp/metadata', san.get_values_for_type(x509.UniformResourceIdentifier))

        metadata = self._read(self.settings.metadata_file)
        self.assertNotIn('-----BEGIN CERTIFICATE-----', metadata)
        self.assertNotIn('-----END CERTIFICATE-----', metadata)
        self.assertIn('sign=' + strip_certificate(self._read(self.settings.signing_cert_file)), metadata)

    def test_long_host_name(self):
        """Test a host name longer than the CN limit still produces certificates and metadata."""
        self.settings.server_prefix = 'https://' + 'a' * 60 + '.example.org/cas'
        generator = functools.partial(SelfSignedCertificateGenerator, key_size=1024)

        self._service(generator).initialize()

        self.assertTrue(os.path.exists(self.settings.metadata_file))
        with open(self.settings.encryption_cert_file, 'rb') as f:
            cert = x509.load_pem_x509_certificate(f.read())
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        self.assertEqual(san.get_values_for_type(x509.DNSName), ['a' * 60 + '.example.org'])

    def test_invalid_server_prefix(self):
        """Test an unparseable server prefix fails before any certificate is generated."""
        self.settings.server_prefix = 'idp.example.org'
        os.makedirs(self.location)

        with self.assertRaises(ConfigurationError):
            self._service().perform_generation_steps()
        self.assertEqual(FakeCertificateGenerator.instances, [])

    def test_generator_failure(self):
        """Test generator errors are reported as generation errors."""
        os.makedirs(self.location)
        generator = MagicMock()
        generator.generate.side_effect = Exception("crypto failure")

        with self.assertRaises(GenerationError) as context:
            self._service(lambda: generator).perform_generation_steps()

        self.assertIsInstance(context.exception.__cause__, Exception)
        self.assertTrue(self._service().is_metadata_missing())

    def test_missing_template(self):
        """Test a missing template leaves certificates in place and no metadata."""
        self.settings.template = 'classpath:/does-not-exist.xml'
        os.makedirs(self.location)

        with self.assertRaises(MetadataIOError):
            self._service().perform_generation_steps()

        self.assertTrue(os.path.exists(self.settings.signing_cert_file))
        self.assertTrue(os.path.exists(self.settings.encryption_cert_file))
        self.assertFalse(os.path.exists(self.settings.metadata_file))

    def test_unwritable_metadata_file(self):
        """Test output errors are reported as metadata IO errors."""
        os.makedirs(self.location)
        service = self._service()
        service.build_self_signed_signing_cert()
        service.build_self_signed_encryption_cert()
        # A directory cannot be opened for writing
        self.settings.metadata_file = self.location

        with self.assertRaises(MetadataIOError):
            service.build_metadata_generator_parameters()

if __name__ == '__main__':
    unittest.main()
