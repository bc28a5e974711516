# sentiscope/sentiment/normalizer.py

"""
Turns the raw label/score lists returned by either hosted model into one
canonical analysis result:

    {label, score, text, timestamp, emotions?, primaryEmotion?}

`label` is always "positive", "negative" or "neutral".
"""

import logging
import numbers
from datetime import datetime, timezone

from model_selector import EMOTION, SENTIMENT
from sentiscope.errors import NoResultError

logger = logging.getLogger(__name__)

POSITIVE = 'positive'
NEGATIVE = 'negative'
NEUTRAL = 'neutral'
SENTIMENT_LABELS = (POSITIVE, NEGATIVE, NEUTRAL)

EMOTION_TO_SENTIMENT = {
    'joy': POSITIVE,
    'love': POSITIVE,
    'surprise': POSITIVE,
    'anger': NEGATIVE,
    'sadness': NEGATIVE,
    'fear': NEGATIVE,
    'disgust': NEGATIVE,
    'neutral': NEUTRAL,
}
EMOTION_LABELS = tuple(EMOTION_TO_SENTIMENT)

SENTIMENT_MODEL_LABELS = {
    'LABEL_0': NEGATIVE,
    'LABEL_1': NEUTRAL,
    'LABEL_2': POSITIVE,
}

TOP_EMOTIONS = 3


def _utc_timestamp():
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def _clamp(score):
    return min(1.0, max(0.0, float(score)))


def unwrap_entries(payload):
    """
    Validates the raw list (unwrapping one level of nesting) and returns
    it as [{'label': str, 'score': float}, ...].
    """
    if not isinstance(payload, list) or not payload:
        raise NoResultError('No emotion analysis result received')

    entries = payload[0] if isinstance(payload[0], list) else payload
    if not entries:
        raise NoResultError('No emotion analysis result received')

    cleaned = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise NoResultError('Malformed analysis result received')
        label = entry.get('label')
        score = entry.get('score')
        if not isinstance(label, str) or isinstance(score, bool) \
                or not isinstance(score, numbers.Real):
            raise NoResultError('Malformed analysis result received')
        cleaned.append({'label': label, 'score': _clamp(score)})
    return cleaned


def pick_primary(entries):
    """Highest score wins; on a tie the later entry wins."""
    best = entries[0]
    for entry in entries[1:]:
        if entry['score'] >= best['score']:
            best = entry
    return best


def map_emotion(emotion):
    # Labels outside the table count as neutral.
    return EMOTION_TO_SENTIMENT.get(emotion.lower(), NEUTRAL)


def map_sentiment_label(label):
    if label in SENTIMENT_MODEL_LABELS:
        return SENTIMENT_MODEL_LABELS[label]
    if label.lower() in SENTIMENT_LABELS:
        return label.lower()
    return NEUTRAL


def normalize_emotion(entries, text):
    primary = pick_primary(entries)
    primary_emotion = primary['label'].lower()

    ranked = sorted(entries, key=lambda e: e['score'], reverse=True)
    top_emotions = [
        {'emotion': e['label'].lower(), 'score': e['score']}
        for e in ranked[:TOP_EMOTIONS]
    ]

    return {
        'label': map_emotion(primary_emotion),
        'score': primary['score'],
        'text': text,
        'timestamp': _utc_timestamp(),
        'emotions': top_emotions,
        'primaryEmotion': primary_emotion,
    }


def normalize_sentiment(entries, text):
    primary = pick_primary(entries)
    label = map_sentiment_label(primary['label'])

    return {
        'label': label,
        'score': primary['score'],
        'text': text,
        'timestamp': _utc_timestamp(),
        'primaryEmotion': label,
    }


NORMALIZERS = {
    EMOTION: normalize_emotion,
    SENTIMENT: normalize_sentiment,
}


def normalize(upstream, text):
    """
    Normalize a tagged upstream payload (anything with `.kind` and
    `.payload`) for the submitted text.
    """
    try:
        normalizer = NORMALIZERS[upstream.kind]
    except KeyError:
        raise ValueError(f"Unknown upstream payload kind: {upstream.kind}")

    entries = unwrap_entries(upstream.payload)
    result = normalizer(entries, text)
    logger.info(
        f"Normalized {upstream.kind} result: label={result['label']}, "
        f"score={result['score']:.3f}, primaryEmotion={result.get('primaryEmotion')}"
    )
    return result
