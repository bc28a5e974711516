# sentiscope/history/scope.py

"""
Works out whose history a request touches.

Sign-in itself is handled by the OAuth provider, which leaves the user's id
in the session under 'user_id'. Anonymous visitors get a random device id in
the session the first time they need one.
"""

import uuid

from flask import session

from analysis_storage import DeviceBlobStore
from sentiscope.errors import Unauthorized
from sentiscope.history.storage import LocalHistoryStore, SqlHistoryStore

USER_ID_KEY = 'user_id'
DEVICE_ID_KEY = 'device_id'


def current_user_id():
    return session.get(USER_ID_KEY) or None


def require_user_id():
    user_id = current_user_id()
    if not user_id:
        raise Unauthorized('Unauthorized')
    return user_id


def current_device_id():
    device_id = session.get(DEVICE_ID_KEY)
    if not device_id:
        device_id = uuid.uuid4().hex
        session[DEVICE_ID_KEY] = device_id
    return device_id


def user_store():
    return SqlHistoryStore(require_user_id())


def device_store():
    return LocalHistoryStore(DeviceBlobStore(current_device_id()))


def store_for_request():
    """The user's database history when signed in, else the device history."""
    user_id = current_user_id()
    if user_id:
        return SqlHistoryStore(user_id)
    return device_store()
