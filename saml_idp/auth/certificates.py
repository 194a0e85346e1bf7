"""
Self-signed certificate generation module.
Creates the key pairs the IdP uses for signing and encryption.
"""
import datetime
import logging
import os

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

logger = logging.getLogger(__name__)

# X.520 upper bound for commonName
COMMON_NAME_MAX_LENGTH = 64


class SelfSignedCertificateGenerator:
    """Generates an RSA key pair and a self-signed X.509 certificate for a host."""

    def __init__(self, host_name=None, certificate_file=None, private_key_file=None,
                 uri_subject_alt_names=None, dns_subject_alt_names=None,
                 key_size=2048, certificate_lifetime=20):
        self.host_name = host_name
        self.certificate_file = certificate_file
        self.private_key_file = private_key_file
        self.uri_subject_alt_names = list(uri_subject_alt_names or [])
        self.dns_subject_alt_names = list(dns_subject_alt_names or [])
        self.key_size = key_size
        # Years
        self.certificate_lifetime = certificate_lifetime
        self.signature_algorithm = hashes.SHA256()

    def _validate(self):
        if not self.host_name:
            raise ValueError("Host name must be set")
        if not self.certificate_file:
            raise ValueError("Certificate file must be set")
        if not self.private_key_file:
            raise ValueError("Private key file must be set")
        if self.key_size < 1024:
            raise ValueError(f"Key size {self.key_size} is too small, must be at least 1024")
        if self.certificate_lifetime <= 0:
            raise ValueError("Certificate lifetime must be greater than zero")

        for path in (self.certificate_file, self.private_key_file):
            if os.path.exists(path):
                raise FileExistsError(f"Output file {path} already exists")

    def _build_subject_alt_names(self):
        names = [x509.DNSName(self.host_name)]
        names.extend(x509.DNSName(name) for name in self.dns_subject_alt_names)
        names.extend(x509.UniformResourceIdentifier(uri) for uri in self.uri_subject_alt_names)
        return x509.SubjectAlternativeName(names)

    def generate(self):
        """
        Generate the key pair and certificate and write both as PEM files.

        Raises:
            ValueError: If a required attribute is missing or invalid.
            FileExistsError: If either output file already exists.
        """
        self._validate()

        logger.debug(f"Generating {self.key_size}-bit RSA key for {self.host_name}")
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=self.key_size)

        # Longer host names are truncated in the CN; the DNS SAN keeps the full name
        common_name = self.host_name[:COMMON_NAME_MAX_LENGTH]
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
        not_before = datetime.datetime.now(datetime.timezone.utc)
        not_after = not_before + datetime.timedelta(days=365 * self.certificate_lifetime)

        certificate = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(private_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(self._build_subject_alt_names(), critical=False)
            .add_extension(x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()), critical=False)
            .sign(private_key=private_key, algorithm=self.signature_algorithm)
        )

        key_fd = os.open(self.private_key_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(key_fd, 'wb') as key_file:
            key_file.write(private_key.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.PKCS8,
                serialization.NoEncryption(),
            ))

        with open(self.certificate_file, 'wb') as cert_file:
            cert_file.write(certificate.public_bytes(serialization.Encoding.PEM))

        logger.debug(f"Wrote certificate {self.certificate_file} and private key {self.private_key_file}")
        return certificate
