import logging

from flask import Blueprint, current_app, jsonify, request

import config
from sentiscope.errors import SentiScopeError, UpstreamUnavailable, ValidationError
from sentiscope.history.scope import store_for_request

sentiment_bp = Blueprint('sentiment_bp', __name__)

logger = logging.getLogger(__name__)


###############################################################################
# HELPERS
###############################################################################

def validate_text(payload, max_length=config.MAX_TEXT_LENGTH):
    """Returns the submitted text, or raises ValidationError."""
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')

    text = payload.get('text')
    if not isinstance(text, str) or not text.strip():
        raise ValidationError('Text is required')

    if len(text) > max_length:
        raise ValidationError(f'Text must be less than {max_length} characters')

    return text


def body_too_large(error):
    """Oversized bodies can only carry over-long text; answer like any other bad input."""
    max_length = current_app.config['MAX_TEXT_LENGTH']
    logger.warning(f"Rejected request body over {current_app.config['MAX_CONTENT_LENGTH']} bytes")
    err = ValidationError(f'Text must be less than {max_length} characters')
    return jsonify(err.to_dict()), err.status_code


def save_to_history(result):
    # A failed save must never cost the caller their analysis.
    try:
        item = store_for_request().save(result)
        logger.debug(f"Saved analysis {item['id']} to history")
    except Exception as e:
        logger.error(f"Error saving analysis to history: {e}", exc_info=True)


###############################################################################
# ROUTES
###############################################################################

@sentiment_bp.route('/analyze', methods=['POST'])
def analyze():
    logger.info("Entering analyze() route")
    payload = request.get_json(silent=True)

    try:
        text = validate_text(payload, current_app.config['MAX_TEXT_LENGTH'])
        gateway = current_app.extensions['inference_gateway']
        result = gateway.analyze(text)
    except UpstreamUnavailable as e:
        logger.error(f"Emotion analysis error: {e.message}")
        return jsonify({'error': e.error_code, 'message': e.friendly_message()}), e.status_code
    except SentiScopeError as e:
        logger.warning(f"Analysis request rejected: {e.message}")
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Unexpected error in analyze(): {e}", exc_info=True)
        return jsonify({'error': 'INTERNAL_ERROR', 'message': 'An unexpected error occurred'}), 500

    save_to_history(result)
    return jsonify(result), 200
