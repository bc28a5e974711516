from datetime import datetime

import pytest

from inference_client import UpstreamPayload
from sentiscope.errors import NoResultError
from sentiscope.sentiment.normalizer import (
    map_emotion,
    map_sentiment_label,
    normalize,
    pick_primary,
    unwrap_entries,
)


def emotion(payload):
    return UpstreamPayload('emotion', payload)


def sentiment(payload):
    return UpstreamPayload('sentiment', payload)


def test_nested_emotion_payload():
    result = normalize(emotion([[
        {'label': 'joy', 'score': 0.9},
        {'label': 'anger', 'score': 0.05},
    ]]), 'What a lovely day')

    assert result['label'] == 'positive'
    assert result['score'] == 0.9
    assert result['primaryEmotion'] == 'joy'
    assert result['emotions'] == [
        {'emotion': 'joy', 'score': 0.9},
        {'emotion': 'anger', 'score': 0.05},
    ]
    assert result['text'] == 'What a lovely day'


def test_flat_emotion_payload_keeps_top_three_by_score():
    result = normalize(emotion([
        {'label': 'neutral', 'score': 0.05},
        {'label': 'Sadness', 'score': 0.6},
        {'label': 'fear', 'score': 0.2},
        {'label': 'joy', 'score': 0.1},
        {'label': 'disgust', 'score': 0.05},
    ]), 'I lost my keys')

    assert result['label'] == 'negative'
    assert result['primaryEmotion'] == 'sadness'
    assert [e['emotion'] for e in result['emotions']] == ['sadness', 'fear', 'joy']


def test_unmapped_emotion_is_neutral():
    result = normalize(emotion([[{'label': 'boredom', 'score': 0.8}]]), 'meh')
    assert result['label'] == 'neutral'
    assert result['primaryEmotion'] == 'boredom'


@pytest.mark.parametrize('label, expected', [
    ('joy', 'positive'), ('love', 'positive'), ('surprise', 'positive'),
    ('anger', 'negative'), ('sadness', 'negative'), ('fear', 'negative'),
    ('disgust', 'negative'), ('neutral', 'neutral'), ('JOY', 'positive'),
])
def test_map_emotion(label, expected):
    assert map_emotion(label) == expected


def test_sentiment_payload():
    result = normalize(sentiment([{'label': 'LABEL_2', 'score': 0.7}]), 'Good stuff')

    assert result['label'] == 'positive'
    assert result['score'] == 0.7
    assert result['primaryEmotion'] == 'positive'
    assert 'emotions' not in result


@pytest.mark.parametrize('label, expected', [
    ('LABEL_0', 'negative'),
    ('LABEL_1', 'neutral'),
    ('LABEL_2', 'positive'),
    ('Negative', 'negative'),
    ('LABEL_9', 'neutral'),
])
def test_map_sentiment_label(label, expected):
    assert map_sentiment_label(label) == expected


def test_nested_sentiment_payload_picks_highest():
    result = normalize(sentiment([[
        {'label': 'LABEL_0', 'score': 0.1},
        {'label': 'LABEL_1', 'score': 0.3},
        {'label': 'LABEL_2', 'score': 0.6},
    ]]), 'ok')
    assert result['label'] == 'positive'


@pytest.mark.parametrize('payload', [
    [],
    [[]],
    {'error': 'Model is loading'},
    None,
    [{'label': 'joy'}],
    [{'label': 3, 'score': 0.5}],
    [{'label': 'joy', 'score': 'high'}],
    ['joy'],
])
def test_malformed_payloads_raise_no_result(payload):
    with pytest.raises(NoResultError):
        normalize(emotion(payload), 'text')


def test_scores_are_clamped():
    entries = unwrap_entries([{'label': 'joy', 'score': 1.3}, {'label': 'fear', 'score': -0.2}])
    assert entries == [{'label': 'joy', 'score': 1.0}, {'label': 'fear', 'score': 0.0}]


def test_tie_goes_to_later_entry():
    primary = pick_primary([
        {'label': 'joy', 'score': 0.5},
        {'label': 'anger', 'score': 0.5},
    ])
    assert primary['label'] == 'anger'


def test_timestamp_is_iso_utc():
    result = normalize(emotion([[{'label': 'joy', 'score': 0.9}]]), 'hi')
    assert result['timestamp'].endswith('Z')
    parsed = datetime.fromisoformat(result['timestamp'].replace('Z', '+00:00'))
    assert parsed.utcoffset().total_seconds() == 0


def test_unknown_kind():
    with pytest.raises(ValueError):
        normalize(UpstreamPayload('toxicity', [{'label': 'x', 'score': 1}]), 'text')
