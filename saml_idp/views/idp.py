from flask import Blueprint, current_app, abort
import logging
import os

idp_bp = Blueprint('idp', __name__)

METADATA_CONTENT_TYPE = 'application/samlmetadata+xml'

@idp_bp.route('/metadata')
def metadata():
    """SAML IdP metadata endpoint"""
    service = current_app.extensions['saml_idp_metadata']
    metadata_file = service.settings.metadata_file

    if not os.path.exists(metadata_file):
        logging.warning(f"IdP metadata requested but {metadata_file} does not exist")
        abort(404)

    with open(metadata_file, 'r', encoding='utf-8') as f:
        metadata = f.read()
    return metadata, 200, {'Content-Type': METADATA_CONTENT_TYPE}
