"""Tests for the outbound Twitter client."""

import pytest
import requests
import responses
from responses import matchers

import oauth1
from config import BearerCredentials, OAuth1Credentials, Settings
from tweet import (
    BearerAuthenticator,
    OAuth1Authenticator,
    PostedTweet,
    TransportFailure,
    TwitterClient,
    UpstreamRejection,
    authenticator_for,
    client_for,
)

TWEETS_URL = "https://api.twitter.com/2/tweets"
STATUS_URL = "https://twitter.com/i/web/status/{id}"
CREDENTIALS = OAuth1Credentials("key", "secret", "token", "token-secret")


def make_client(authenticator=None):
    return TwitterClient(
        authenticator or BearerAuthenticator(BearerCredentials("AAAA")),
        tweets_url=TWEETS_URL,
        status_url_template=STATUS_URL,
    )


class TestAuthenticators:
    def test_oauth1_header_is_signed_with_pinned_values(self):
        authenticator = OAuth1Authenticator(CREDENTIALS, clock=lambda: 1700000000, nonce=lambda: "abcdef")

        header = authenticator.headers("POST", TWEETS_URL)["Authorization"]

        params = oauth1.oauth_parameters("key", "token", clock=lambda: 1700000000, nonce=lambda: "abcdef")
        params["oauth_signature"] = oauth1.sign("POST", TWEETS_URL, params, "secret", "token-secret")
        assert header == oauth1.build_authorization_header(params)
        assert header.startswith('OAuth oauth_consumer_key="key", oauth_nonce="abcdef", oauth_signature="')

    def test_oauth1_fresh_nonce_each_call(self):
        authenticator = OAuth1Authenticator(CREDENTIALS)

        assert authenticator.headers("POST", TWEETS_URL) != authenticator.headers("POST", TWEETS_URL)

    def test_bearer_header(self):
        assert BearerAuthenticator(BearerCredentials("AAAA")).headers("POST", TWEETS_URL) == {
            "Authorization": "Bearer AAAA",
        }

    def test_authenticator_for(self):
        assert isinstance(authenticator_for(CREDENTIALS), OAuth1Authenticator)
        assert isinstance(authenticator_for(BearerCredentials("AAAA")), BearerAuthenticator)
        with pytest.raises(TypeError):
            authenticator_for("not credentials")


class TestTwitterClient:
    @responses.activate
    def test_posts_text(self):
        endpoint = responses.post(
            TWEETS_URL,
            json={"data": {"id": "123", "text": "hello"}},
            status=201,
            match=[matchers.json_params_matcher({"text": "hello"})],
        )

        result = make_client().post_tweet("hello")

        assert result == PostedTweet(id="123", url="https://twitter.com/i/web/status/123")
        assert endpoint.call_count == 1
        request = responses.calls[0].request
        assert request.headers["Authorization"] == "Bearer AAAA"
        assert request.headers["Content-Type"] == "application/json"

    @responses.activate
    def test_upstream_rejection_carries_payload(self):
        payload = {"title": "Forbidden", "detail": "You are not permitted to perform this action.", "status": 403}
        responses.post(TWEETS_URL, json=payload, status=403)

        with pytest.raises(UpstreamRejection) as excinfo:
            make_client().post_tweet("hello")

        assert excinfo.value.status_code == 403
        assert excinfo.value.payload == payload
        assert len(responses.calls) == 1

    @responses.activate
    def test_upstream_rejection_with_text_body(self):
        responses.post(TWEETS_URL, body="Service Unavailable", status=503)

        with pytest.raises(UpstreamRejection) as excinfo:
            make_client().post_tweet("hello")

        assert excinfo.value.payload == "Service Unavailable"

    @responses.activate
    def test_network_error_is_transport_failure(self):
        responses.post(TWEETS_URL, body=requests.ConnectionError("connection refused"))

        with pytest.raises(TransportFailure):
            make_client().post_tweet("hello")
        assert len(responses.calls) == 1

    @responses.activate
    def test_success_without_id_is_transport_failure(self):
        responses.post(TWEETS_URL, json={"data": {}}, status=201)

        with pytest.raises(TransportFailure):
            make_client().post_tweet("hello")

    @responses.activate
    @pytest.mark.parametrize("tweet_id", [None, "", [], {}, True])
    def test_success_with_bad_id_is_transport_failure(self, tweet_id):
        responses.post(TWEETS_URL, json={"data": {"id": tweet_id}}, status=201)

        with pytest.raises(TransportFailure):
            make_client().post_tweet("hello")

    @responses.activate
    def test_numeric_id_is_accepted(self):
        responses.post(TWEETS_URL, json={"data": {"id": 123}}, status=201)

        assert make_client().post_tweet("hello").id == "123"

    @responses.activate
    def test_success_with_unparseable_body_is_transport_failure(self):
        responses.post(TWEETS_URL, body="<html>", status=200)

        with pytest.raises(TransportFailure):
            make_client().post_tweet("hello")


class TestClientFor:
    def test_uses_settings(self):
        settings = Settings(
            credentials=BearerCredentials("AAAA"),
            tweets_url="https://api.example.com/2/tweets",
            status_url_template="https://x.example.com/{id}",
            timeout=3,
        )

        client = client_for(settings)

        assert isinstance(client.authenticator, BearerAuthenticator)
        assert client.tweets_url == "https://api.example.com/2/tweets"
        assert client.status_url_template == "https://x.example.com/{id}"
        assert client.timeout == 3
