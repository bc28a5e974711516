# model_selector.py

"""
This file decides which hosted model endpoint serves each kind of analysis,
and in which order they are tried. It lets you change the model lineup
without touching the retry/transport code in inference_client.py.
"""

import config

# Payload kinds understood by the normalizer.
EMOTION = "emotion"
SENTIMENT = "sentiment"


def choose_model_for_task(kind: str, settings=None) -> str:
    """
    Returns the endpoint URL for the given payload kind.

    Arguments:
    ----------
    kind : str
        "emotion" for the primary emotion-classification model,
        "sentiment" for the fallback 3-way sentiment model.
    settings : Mapping, optional
        Usually `app.config`. Keys missing from it fall back to config.py.
    """
    settings = settings or {}

    if kind == EMOTION:
        return settings.get('PRIMARY_MODEL_URL') or config.PRIMARY_MODEL_URL
    elif kind == SENTIMENT:
        return settings.get('FALLBACK_MODEL_URL') or config.FALLBACK_MODEL_URL

    raise ValueError(f"Unsupported model kind: {kind}")


def model_chain(settings=None):
    """Ordered (kind, url) pairs: primary first, fallback second."""
    return [
        (EMOTION, choose_model_for_task(EMOTION, settings)),
        (SENTIMENT, choose_model_for_task(SENTIMENT, settings)),
    ]
