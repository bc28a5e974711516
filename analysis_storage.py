# analysis_storage.py

import logging
from collections import OrderedDict

import config

logger = logging.getLogger(__name__)

###############################################################################
# GLOBAL IN-MEMORY STORE
###############################################################################
# NOTE: This holds the history of anonymous visitors, one blob per device and
# key. If the server restarts, the data is gone; signed-in users are stored in
# the database instead. At most MAX_DEVICES devices are kept; the least
# recently used one is dropped when a new device pushes past the limit.
###############################################################################
global_device_blobs = OrderedDict()

MAX_DEVICES = config.MAX_DEVICES

###############################################################################
# HELPER FUNCTIONS TO STORE / RETRIEVE BLOBS BY DEVICE
###############################################################################

def store_blob_for_device(device_id, key, blob):
    """
    Stores a serialized blob under a specific device id and key.

    :param device_id: The id kept in the visitor's session cookie.
    :param key: Name of the blob, e.g. 'sentiment-analysis-history'.
    :param blob: The serialized string to keep.
    """
    global_device_blobs.setdefault(device_id, {})[key] = blob
    global_device_blobs.move_to_end(device_id)

    while len(global_device_blobs) > MAX_DEVICES:
        evicted, _ = global_device_blobs.popitem(last=False)
        logger.debug(f"Evicted history of least recently used device {evicted}")


def get_blob_for_device(device_id, key):
    """
    Retrieves the blob for the given device and key. Returns None if no data
    is found.
    """
    blobs = global_device_blobs.get(device_id)
    if blobs is None:
        return None
    global_device_blobs.move_to_end(device_id)
    return blobs.get(key)


def remove_blob_for_device(device_id, key):
    blobs = global_device_blobs.get(device_id)
    if blobs is not None:
        blobs.pop(key, None)
        if not blobs:
            global_device_blobs.pop(device_id, None)


class DeviceBlobStore:
    """
    Key/value view of one device's blobs, the backing store handed to
    LocalHistoryStore.
    """

    def __init__(self, device_id):
        self.device_id = device_id

    def get(self, key):
        return get_blob_for_device(self.device_id, key)

    def set(self, key, blob):
        store_blob_for_device(self.device_id, key, blob)

    def remove(self, key):
        remove_blob_for_device(self.device_id, key)
