import pytest

import config
from model_selector import EMOTION, SENTIMENT, choose_model_for_task, model_chain


def test_defaults_come_from_config():
    assert choose_model_for_task(EMOTION) == config.PRIMARY_MODEL_URL
    assert choose_model_for_task(SENTIMENT) == config.FALLBACK_MODEL_URL


def test_settings_override_defaults():
    settings = {'PRIMARY_MODEL_URL': 'https://a', 'FALLBACK_MODEL_URL': 'https://b'}
    assert model_chain(settings) == [(EMOTION, 'https://a'), (SENTIMENT, 'https://b')]


def test_unknown_kind():
    with pytest.raises(ValueError):
        choose_model_for_task('toxicity')
