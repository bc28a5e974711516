import logging

from flask import Blueprint, current_app, jsonify, request

from sentiscope.errors import SentiScopeError, ValidationError
from sentiscope.history.scope import device_store, store_for_request, user_store
from sentiscope.history.storage import get_analytics

history_bp = Blueprint('history_bp', __name__)

logger = logging.getLogger(__name__)


###############################################################################
# HELPERS
###############################################################################

def parse_filters(args):
    search_term = args.get('search', '')
    sentiment = args.get('sentiment', 'all')

    raw_limit = args.get('limit')
    if raw_limit in (None, ''):
        limit = current_app.config['HISTORY_DEFAULT_LIMIT']
    else:
        try:
            limit = int(raw_limit)
        except ValueError:
            raise ValidationError('limit must be an integer')
        if limit <= 0:
            raise ValidationError('limit must be positive')

    return search_term, sentiment, limit


def list_history(store_factory):
    try:
        store = store_factory()
        search_term, sentiment, limit = parse_filters(request.args)
        analyses = store.list(search_term, sentiment, limit)
    except SentiScopeError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error fetching history: {e}", exc_info=True)
        return jsonify({'error': 'Internal server error'}), 500

    return jsonify({'analyses': analyses}), 200


def delete_history(store_factory):
    try:
        store = store_factory()
        analysis_id = request.args.get('id')
        if analysis_id:
            store.delete(analysis_id)
        else:
            store.clear()
    except SentiScopeError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error deleting history: {e}", exc_info=True)
        return jsonify({'error': 'Internal server error'}), 500

    return jsonify({'success': True}), 200


###############################################################################
# ROUTES
###############################################################################

@history_bp.route('/history', methods=['GET'])
def get_history():
    return list_history(user_store)


@history_bp.route('/history', methods=['DELETE'])
def delete_user_history():
    return delete_history(user_store)


@history_bp.route('/history/local', methods=['GET'])
def get_local_history():
    return list_history(device_store)


@history_bp.route('/history/local', methods=['DELETE'])
def delete_local_history():
    return delete_history(device_store)


@history_bp.route('/analytics', methods=['GET'])
def analytics():
    try:
        snapshot = get_analytics(store_for_request())
    except Exception as e:
        logger.error(f"Error computing analytics: {e}", exc_info=True)
        return jsonify({'error': 'Internal server error'}), 500

    return jsonify(snapshot), 200


@history_bp.route('/profile', methods=['GET'])
def profile():
    try:
        store = user_store()
        snapshot = store.profile()
    except SentiScopeError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error fetching profile: {e}", exc_info=True)
        return jsonify({'error': 'Internal server error'}), 500

    return jsonify(snapshot), 200
