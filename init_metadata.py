#!/usr/bin/env python3
"""
Generate SAML IdP certificates and metadata without starting the web app
"""
import logging
from dotenv import load_dotenv
from saml_idp.auth.saml_config import IdPMetadataSettings
from saml_idp.auth.saml_metadata import TemplatedMetadataAndCertificatesGenerationService

def generate_metadata():
    """Create IdP metadata if it does not exist yet"""
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    settings = IdPMetadataSettings.from_env()
    service = TemplatedMetadataAndCertificatesGenerationService(settings)
    metadata_file = service.initialize()
    print(f"IdP metadata available at {metadata_file}")

if __name__ == '__main__':
    generate_metadata()
