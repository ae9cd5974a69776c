import logging
import time
from dataclasses import dataclass

import requests

import oauth1
from config import BearerCredentials, OAuth1Credentials

logger = logging.getLogger(__name__)


class TwitterError(Exception):
    """Base for errors while talking to the Twitter API."""
    pass


class UpstreamRejection(TwitterError):
    """Twitter answered with a non-success status."""

    def __init__(self, status_code, payload):
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"Twitter API returned {status_code}")


class TransportFailure(TwitterError):
    """Network failure, or a success response we could not make sense of."""
    pass


@dataclass(frozen=True)
class PostedTweet:
    id: str
    url: str


class OAuth1Authenticator:
    """Signs every request with fresh OAuth 1.0a parameters."""

    def __init__(self, credentials: OAuth1Credentials, clock=time.time, nonce=oauth1.new_nonce):
        self.credentials = credentials
        self.clock = clock
        self.nonce = nonce

    def headers(self, method, url):
        creds = self.credentials
        params = oauth1.oauth_parameters(creds.api_key, creds.access_token, clock=self.clock, nonce=self.nonce)
        params["oauth_signature"] = oauth1.sign(
            method, url, params, creds.api_secret, creds.access_token_secret
        )
        return {"Authorization": oauth1.build_authorization_header(params)}


class BearerAuthenticator:
    def __init__(self, credentials: BearerCredentials):
        self.credentials = credentials

    def headers(self, method, url):
        return {"Authorization": f"Bearer {self.credentials.bearer_token}"}


def authenticator_for(credentials, **kwargs):
    """Pick the authenticator matching the configured credential variant."""
    if isinstance(credentials, OAuth1Credentials):
        return OAuth1Authenticator(credentials, **kwargs)
    if isinstance(credentials, BearerCredentials):
        return BearerAuthenticator(credentials)
    raise TypeError(f"Unsupported credentials: {type(credentials).__name__}")


class TwitterClient:
    def __init__(self, authenticator, tweets_url, status_url_template, timeout=10, session=None):
        self.authenticator = authenticator
        self.tweets_url = tweets_url
        self.status_url_template = status_url_template
        self.timeout = timeout
        self.session = session or requests

    def post_tweet(self, text: str) -> PostedTweet:
        """Create one tweet. Exactly one request, no retries."""
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        headers.update(self.authenticator.headers("POST", self.tweets_url))

        try:
            resp = self.session.post(self.tweets_url, json={"text": text}, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"❌ Request to Twitter failed: {e}")
            raise TransportFailure(f"Request to Twitter failed: {e}") from e

        if not resp.ok:
            try:
                payload = resp.json()
            except ValueError:
                payload = resp.text
            logger.error(f"❌ Twitter API error {resp.status_code}: {payload}")
            raise UpstreamRejection(resp.status_code, payload)

        try:
            tweet_id = resp.json()["data"]["id"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"❌ Unexpected Twitter response: {resp.text[:200]}")
            raise TransportFailure(f"Unexpected response from Twitter: {e}") from e
        if isinstance(tweet_id, bool) or not isinstance(tweet_id, (str, int)) or tweet_id == "":
            logger.error(f"❌ Unexpected Twitter response: {resp.text[:200]}")
            raise TransportFailure(f"Unexpected tweet id from Twitter: {tweet_id!r}")
        tweet_id = str(tweet_id)

        logger.info(f"✅ Tweet {tweet_id} created")
        return PostedTweet(id=tweet_id, url=self.status_url_template.format(id=tweet_id))


def client_for(settings, **kwargs):
    """Build a client from settings; raises MissingCredentials when unconfigured."""
    return TwitterClient(
        authenticator_for(settings.require_credentials(), **kwargs),
        tweets_url=settings.tweets_url,
        status_url_template=settings.status_url_template,
        timeout=settings.timeout,
    )
