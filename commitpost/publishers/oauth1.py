"""OAuth 1.0a request signing (HMAC-SHA1), as used by the Twitter/X API.

Contains:
- percent_encode: RFC 3986 encoding
- signature_base_string / sign: the signature steps
- authorization_header: a complete ``Authorization: OAuth ...`` value
"""

import base64
import hashlib
import hmac
import secrets
import time
from typing import Mapping, Optional
from urllib.parse import quote

OAUTH_VERSION = "1.0"
SIGNATURE_METHOD = "HMAC-SHA1"


def percent_encode(value: str) -> str:
    """Percent-encode per RFC 3986 (only ``A-Z a-z 0-9 - . _ ~`` stay literal)."""
    return quote(str(value), safe="~")


def normalize_parameters(params: Mapping[str, str]) -> str:
    """Encode, sort and join request and oauth parameters."""
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in params.items())
    return "&".join(f"{k}={v}" for k, v in encoded)


def signature_base_string(method: str, url: str, params: Mapping[str, str]) -> str:
    """Build ``METHOD&encoded-url&encoded-parameter-string``."""
    return "&".join(
        [
            method.upper(),
            percent_encode(url),
            percent_encode(normalize_parameters(params)),
        ]
    )


def sign(base_string: str, consumer_secret: str, token_secret: str) -> str:
    """HMAC-SHA1 the base string with ``consumer_secret&token_secret``, base64."""
    key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"
    digest = hmac.new(key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def generate_nonce() -> str:
    return secrets.token_hex(16)


def authorization_header(
    method: str,
    url: str,
    params: Mapping[str, str],
    consumer_key: str,
    consumer_secret: str,
    token: str,
    token_secret: str,
    nonce: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> str:
    """Build a signed OAuth 1.0a Authorization header value.

    A fresh nonce and timestamp are generated unless given.

    Args:
        method: HTTP method.
        url: Request URL without query string.
        params: Query and form body parameters that are signed with the request.
        consumer_key: API key.
        consumer_secret: API secret.
        token: Access token.
        token_secret: Access token secret.
        nonce: Fixed nonce (tests only).
        timestamp: Fixed timestamp (tests only).

    Returns:
        The header value, starting with ``OAuth ``.
    """
    oauth_params = {
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": nonce or generate_nonce(),
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": timestamp or str(int(time.time())),
        "oauth_token": token,
        "oauth_version": OAUTH_VERSION,
    }

    base_string = signature_base_string(method, url, {**params, **oauth_params})
    oauth_params["oauth_signature"] = sign(base_string, consumer_secret, token_secret)

    fields = ", ".join(
        f'{percent_encode(k)}="{percent_encode(v)}"' for k, v in sorted(oauth_params.items())
    )
    return f"OAuth {fields}"
