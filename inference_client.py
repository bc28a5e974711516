# inference_client.py

import time
import logging
from collections import namedtuple

import requests

import config
from model_selector import EMOTION, SENTIMENT, choose_model_for_task, model_chain
from sentiscope.errors import ConfigurationError, UpstreamError, UpstreamUnavailable
from sentiscope.sentiment.normalizer import normalize

logger = logging.getLogger(__name__)


###############################################################################
# TAGGED UPSTREAM PAYLOAD
###############################################################################
# kind is "emotion" (primary model) or "sentiment" (fallback model);
# payload is the decoded JSON body exactly as the endpoint returned it.
UpstreamPayload = namedtuple('UpstreamPayload', ['kind', 'payload'])


###############################################################################
# RETRY POLICY
###############################################################################
class RetryPolicy:
    """
    How often and how long to wait when an endpoint fails transiently.

    max_attempts counts every call to the endpoint, the first one included:
    the default of 3 means one call plus at most two retries.

    Delay before attempt n+1 is base_delay * n (linear backoff). Network
    failures are always retryable; HTTP failures only when their status is in
    retryable_statuses.
    """

    def __init__(self, max_attempts=3, base_delay=1.0, retryable_statuses=(503, 504)):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.retryable_statuses = frozenset(retryable_statuses)

    def is_retryable(self, status):
        if status is None:
            return True
        return status in self.retryable_statuses

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * attempt

    def __repr__(self):
        return (
            f"RetryPolicy(max_attempts={self.max_attempts}, base_delay={self.base_delay}, "
            f"retryable_statuses={sorted(self.retryable_statuses)})"
        )


###############################################################################
# OUTBOUND CALL WRAPPER
###############################################################################
class InferenceClient:
    """
    Posts `{"inputs": text}` to a hosted model with a bearer credential and
    retries according to the injected RetryPolicy.
    """

    def __init__(self, api_key, policy=None, timeout=None, session=None, sleep=time.sleep):
        self.api_key = api_key
        self.policy = policy or RetryPolicy()
        self.timeout = timeout if timeout is not None else config.INFERENCE_TIMEOUT
        self.session = session or requests.Session()
        self.sleep = sleep

    def _post_once(self, url, text):
        try:
            resp = self.session.post(
                url,
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json',
                },
                json={'inputs': text},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError(None, str(e))

        if not resp.ok:
            raise UpstreamError(resp.status_code, (resp.text or '')[:200])

        try:
            return resp.json()
        except ValueError:
            # Valid status, unusable body: retrying will not help.
            raise UpstreamError(resp.status_code, 'response body is not JSON')

    def post(self, url, text):
        last_error = None

        for attempt in range(1, self.policy.max_attempts + 1):
            try:
                data = self._post_once(url, text)
                logger.debug(f"[Inference] success: url={url}, attempt={attempt}")
                return data
            except UpstreamError as e:
                last_error = e
                if not self.policy.is_retryable(e.status):
                    logger.error(f"[Inference] non-retryable failure from {url}: {e.message}")
                    raise

                if attempt < self.policy.max_attempts:
                    delay = self.policy.delay_for(attempt)
                    logger.warning(
                        f"[Inference] transient failure from {url}, attempt={attempt}: "
                        f"{e.message}. Sleeping {delay}s."
                    )
                    self.sleep(delay)

        logger.error(
            f"[Inference] All {self.policy.max_attempts} attempts exhausted for {url}: "
            f"{last_error.message}"
        )
        raise last_error


###############################################################################
# GATEWAY: PRIMARY MODEL, THEN FALLBACK
###############################################################################
class InferenceGateway:

    def __init__(self, client, primary_url=None, fallback_url=None):
        self.client = client
        self.primary_url = primary_url or choose_model_for_task(EMOTION)
        self.fallback_url = fallback_url or choose_model_for_task(SENTIMENT)

    def fetch(self, text):
        """
        Returns an UpstreamPayload from the primary model, or from the
        fallback model when the primary ultimately fails.
        """
        if not self.client.api_key:
            logger.error("HUGGING_FACE_API_KEY not found in environment variables")
            raise ConfigurationError('API key not configured')

        logger.info(f"Requesting emotion analysis (text length={len(text)})")
        try:
            return UpstreamPayload(EMOTION, self.client.post(self.primary_url, text))
        except UpstreamError as primary_error:
            logger.warning(
                f"Primary model failed ({primary_error.message}); trying fallback sentiment model"
            )

            try:
                return UpstreamPayload(SENTIMENT, self.client.post(self.fallback_url, text))
            except UpstreamError as fallback_error:
                logger.error(f"Fallback model failed as well: {fallback_error.message}")
                raise UpstreamUnavailable(primary_error, fallback_error)

    def analyze(self, text):
        return normalize(self.fetch(text), text)


def build_gateway(settings, session=None, sleep=time.sleep):
    """
    Assemble a gateway from a settings mapping (usually `app.config`).
    """
    policy = RetryPolicy(
        max_attempts=settings.get('RETRY_MAX_ATTEMPTS', config.RETRY_MAX_ATTEMPTS),
        base_delay=settings.get('RETRY_BASE_DELAY', config.RETRY_BASE_DELAY),
    )
    client = InferenceClient(
        api_key=settings.get('HUGGING_FACE_API_KEY', config.HUGGING_FACE_API_KEY),
        policy=policy,
        timeout=settings.get('INFERENCE_TIMEOUT', config.INFERENCE_TIMEOUT),
        session=session,
        sleep=sleep,
    )
    (_, primary_url), (_, fallback_url) = model_chain(settings)
    return InferenceGateway(client, primary_url=primary_url, fallback_url=fallback_url)
