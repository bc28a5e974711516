# sentiscope/history/storage.py

"""
History backends and the analytics aggregation over them.

Both backends implement HistoryStore:

- LocalHistoryStore keeps one JSON array per device in a key/value blob
  store, newest first, capped at LOCAL_HISTORY_LIMIT entries.
- SqlHistoryStore keeps one row per analysis of a signed-in user, uncapped.

compute_analytics() is a pure function of the item list, so the same
aggregation runs over either backend (or over a plain list in tests).
"""

import json
import logging
import uuid
from abc import ABC, abstractmethod

import config
from sentiscope.errors import NotFound
from sentiscope.extensions import db
from sentiscope.history.models import AnalysisRecord, UserProfile, make_preview
from sentiscope.sentiment.normalizer import EMOTION_LABELS, SENTIMENT_LABELS

logger = logging.getLogger(__name__)

HISTORY_KEY = 'sentiment-analysis-history'
ALL = 'all'


def _is_filtered(sentiment):
    return bool(sentiment) and sentiment != ALL


def matches(item, search_term='', sentiment=None):
    if _is_filtered(sentiment) and item.get('label') != sentiment:
        return False
    if not search_term:
        return True

    needle = search_term.lower()
    haystacks = (item.get('text'), item.get('label'), item.get('primaryEmotion'))
    return any(h and needle in h.lower() for h in haystacks)


def filter_items(items, search_term='', sentiment=None, limit=None):
    """Keeps order; items are expected newest first."""
    found = [item for item in items if matches(item, search_term, sentiment)]
    if limit is not None:
        found = found[:limit]
    return found


class HistoryStore(ABC):
    """Port shared by the per-device and per-user history backends."""

    @abstractmethod
    def save(self, result):
        """Persist an analysis result; returns the new history item."""
        raise NotImplementedError

    @abstractmethod
    def list(self, search_term='', sentiment=None, limit=config.HISTORY_DEFAULT_LIMIT):
        raise NotImplementedError

    @abstractmethod
    def delete(self, item_id):
        """Remove one item. Raises NotFound when there is no such item."""
        raise NotImplementedError

    @abstractmethod
    def clear(self):
        raise NotImplementedError

    @abstractmethod
    def all(self):
        """Every item, newest first."""
        raise NotImplementedError


###############################################################################
# PER-DEVICE BACKEND
###############################################################################

class LocalHistoryStore(HistoryStore):

    def __init__(self, blobs, key=HISTORY_KEY, capacity=config.LOCAL_HISTORY_LIMIT):
        self.blobs = blobs
        self.key = key
        self.capacity = capacity

    def _read(self):
        stored = self.blobs.get(self.key)
        if not stored:
            return []
        try:
            history = json.loads(stored)
        except ValueError:
            logger.error("Error reading history: stored blob is not valid JSON", exc_info=True)
            return []
        if not isinstance(history, list):
            logger.error("Error reading history: stored blob is not a list")
            return []
        return history

    def _write(self, history):
        self.blobs.set(self.key, json.dumps(history))

    def save(self, result):
        history = self._read()

        item = dict(result)
        item['id'] = uuid.uuid4().hex
        item['textPreview'] = make_preview(result['text'])

        history.insert(0, item)
        # Oldest entries fall off the end.
        del history[self.capacity:]

        self._write(history)
        logger.debug(f"Saved local history item {item['id']} ({len(history)} stored)")
        return item

    def list(self, search_term='', sentiment=None, limit=config.HISTORY_DEFAULT_LIMIT):
        return filter_items(self._read(), search_term, sentiment, limit)

    def delete(self, item_id):
        history = self._read()
        remaining = [item for item in history if item.get('id') != item_id]
        if len(remaining) == len(history):
            raise NotFound('Analysis not found')
        self._write(remaining)

    def clear(self):
        self.blobs.remove(self.key)

    def all(self):
        return self._read()


###############################################################################
# PER-USER BACKEND
###############################################################################

class SqlHistoryStore(HistoryStore):

    def __init__(self, user_id):
        self.user_id = user_id

    def _query(self):
        return AnalysisRecord.query.filter_by(user_id=self.user_id).order_by(
            AnalysisRecord.created_at.desc(), AnalysisRecord.id.desc()
        )

    def _refresh_profile(self):
        """
        Recount the user's analyses into their profile row. Failures are
        logged only; the history change itself already succeeded.
        """
        try:
            total = AnalysisRecord.query.filter_by(user_id=self.user_id).count()
            profile = UserProfile.query.filter_by(user_id=self.user_id).first()
            if profile is None:
                profile = UserProfile(user_id=self.user_id)
                db.session.add(profile)
            profile.total_analyses = total
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error updating user profile for {self.user_id}: {e}", exc_info=True)

    def save(self, result):
        record = AnalysisRecord.from_result(self.user_id, result)
        try:
            db.session.add(record)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        self._refresh_profile()
        return record.to_dict()

    def list(self, search_term='', sentiment=None, limit=config.HISTORY_DEFAULT_LIMIT):
        query = self._query()

        if _is_filtered(sentiment):
            query = query.filter(AnalysisRecord.label == sentiment)

        if not search_term:
            if limit is not None:
                query = query.limit(limit)
            return [record.to_dict() for record in query.all()]

        # SQLite's lower() only folds ASCII, so the text search runs in Python
        # with the same matching rules as the per-device backend.
        items = (record.to_dict() for record in query.all())
        return filter_items(items, search_term, limit=limit)

    def delete(self, item_id):
        try:
            record_id = int(item_id)
        except (TypeError, ValueError):
            raise NotFound('Analysis not found')

        record = AnalysisRecord.query.filter_by(id=record_id, user_id=self.user_id).first()
        if record is None:
            raise NotFound('Analysis not found')

        db.session.delete(record)
        db.session.commit()
        self._refresh_profile()

    def clear(self):
        deleted = AnalysisRecord.query.filter_by(user_id=self.user_id).delete()
        db.session.commit()
        logger.info(f"Cleared {deleted} analyses for user {self.user_id}")
        self._refresh_profile()
        return deleted

    def all(self):
        return [record.to_dict() for record in self._query().all()]

    def profile(self):
        profile = UserProfile.query.filter_by(user_id=self.user_id).first()
        if profile is None:
            return {'userId': self.user_id, 'totalAnalyses': 0}
        return profile.to_dict()


###############################################################################
# ANALYTICS
###############################################################################

def compute_analytics(items):
    """
    Summary statistics over a history list (newest first). Every sentiment
    and emotion key is always present; averageConfidence is 0 for an empty
    list.
    """
    items = list(items)

    sentiment_distribution = {label: 0 for label in SENTIMENT_LABELS}
    emotion_distribution = {emotion: 0 for emotion in EMOTION_LABELS}
    total_confidence = 0.0

    for item in items:
        label = item.get('label')
        if label in sentiment_distribution:
            sentiment_distribution[label] += 1

        emotion = item.get('primaryEmotion')
        if emotion in emotion_distribution:
            emotion_distribution[emotion] += 1

        total_confidence += item.get('score') or 0.0

    return {
        'totalAnalyses': len(items),
        'sentimentDistribution': sentiment_distribution,
        'emotionDistribution': emotion_distribution,
        'averageConfidence': total_confidence / len(items) if items else 0,
        'recentAnalyses': items,
    }


def get_analytics(store):
    return compute_analytics(store.all())
