"""OAuth 1.0a request signing (RFC 5849, HMAC-SHA1).

The signing functions (``sign`` and the helpers it uses) are pure: no
clock, no randomness, no I/O. Only ``new_nonce`` and the defaults of
``oauth_parameters`` touch the clock and the random source, and callers may pass
their own ``clock`` and ``nonce`` so a fixed pair always yields the same
signature.
"""

import base64
import hashlib
import hmac
import secrets
import time
from urllib.parse import quote

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


class InvalidInput(ValueError):
    """Signing parameters are missing or malformed."""
    pass


def percent_encode(value) -> str:
    """RFC 3986 encoding: only A-Z a-z 0-9 - . _ ~ pass through."""
    return quote(str(value), safe="~")


def normalize_parameters(parameters) -> str:
    """Encode, sort and join parameters into the RFC 5849 parameter string."""
    pairs = sorted(
        (percent_encode(k), percent_encode(v))
        for k, v in parameters.items()
        if k != "oauth_signature"
    )
    return "&".join(f"{k}={v}" for k, v in pairs)


def signature_base_string(http_method: str, target_url: str, parameters) -> str:
    if not http_method:
        raise InvalidInput("http_method must not be empty")
    if not target_url:
        raise InvalidInput("target_url must not be empty")
    return "&".join([
        http_method.upper(),
        percent_encode(target_url),
        percent_encode(normalize_parameters(parameters)),
    ])


def signing_key(consumer_secret: str, token_secret: str = "") -> str:
    if not consumer_secret:
        raise InvalidInput("consumer_secret must not be empty")
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret or '')}"


def sign(http_method: str, target_url: str, parameters, consumer_secret: str, token_secret: str = "") -> str:
    """Return the base64 HMAC-SHA1 signature for one request.

    ``parameters`` holds the oauth_* protocol parameters plus any query or
    form parameters of the request. An ``oauth_signature`` entry is ignored.
    """
    key = signing_key(consumer_secret, token_secret)
    base = signature_base_string(http_method, target_url, parameters)
    digest = hmac.new(key.encode("utf-8"), base.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def build_authorization_header(parameters) -> str:
    """Format signed parameters as an ``Authorization`` header value."""
    pairs = sorted((percent_encode(k), percent_encode(v)) for k, v in parameters.items())
    return "OAuth " + ", ".join(f'{k}="{v}"' for k, v in pairs)


def new_nonce() -> str:
    return secrets.token_hex(16)


def oauth_parameters(consumer_key: str, token: str, clock=time.time, nonce=new_nonce) -> dict:
    """Protocol parameters for a single call; fresh nonce and timestamp each time."""
    return {
        "oauth_consumer_key": consumer_key,
        "oauth_token": token,
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": str(int(clock())),
        "oauth_nonce": nonce(),
        "oauth_version": OAUTH_VERSION,
    }
