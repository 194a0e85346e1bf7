"""
Errors raised while bootstrapping SAML IdP metadata and certificates.
"""


class SAMLIdPMetadataError(Exception):
    """Base class for metadata bootstrap failures."""


class ConfigurationError(SAMLIdPMetadataError, ValueError):
    """Raised when the IdP settings cannot be used as given."""


class GenerationError(SAMLIdPMetadataError, RuntimeError):
    """Raised when a self-signed certificate cannot be generated."""


class MetadataIOError(SAMLIdPMetadataError, IOError):
    """Raised when the template cannot be read or metadata cannot be written."""
