"""
KuCoin Request Authentication

This module holds the API credentials and implements KuCoin's request
signing scheme (API key version 3).

Signing Scheme:
    prehash   = timestamp + METHOD + path(with query) + body
    signature = base64(HMAC-SHA256(secret, prehash))
    passphrase = base64(HMAC-SHA256(secret, passphrase))

    The passphrase itself is HMAC-signed with the API secret; KuCoin rejects
    plaintext passphrases for key version 2 and above.

Headers Sent:
    Content-Type:        application/json
    KC-API-KEY:          <key>
    KC-API-SIGN:         <signature>
    KC-API-TIMESTAMP:    <timestamp>
    KC-API-PASSPHRASE:   <encoded passphrase>
    KC-API-KEY-VERSION:  3

API Documentation:
    https://www.kucoin.com/docs/basic-info/connection-method/authentication/signing-a-message
"""

import base64
import hashlib
import hmac
from typing import Dict, Tuple

from pydantic import SecretStr

from core.config import Settings


KEY_VERSION = "3"


class Credentials:
    """
    Immutable holder for the KuCoin key, secret and passphrase.

    Values are wrapped in SecretStr and can only be read through `reveal()`.
    The object does not print its contents, compares by identity only and
    refuses to be pickled. To change credentials, build a new instance and
    hand it to `KucoinAPIClient.set_credentials()`.

    Example:
        >>> creds = Credentials("my-key", "my-secret", "my-passphrase")
        >>> creds
        Credentials(key='**********', secret='**********', passphrase='**********')
    """

    __slots__ = ("_key", "_secret", "_passphrase")

    def __init__(self, key: str, secret: str, passphrase: str):
        object.__setattr__(self, "_key", SecretStr(key))
        object.__setattr__(self, "_secret", SecretStr(secret))
        object.__setattr__(self, "_passphrase", SecretStr(passphrase))

    @classmethod
    def from_settings(cls, config: Settings) -> "Credentials":
        """Build credentials from KUCOIN_API_KEY / _SECRET / _PASSPHRASE."""
        return cls(config.kucoin_api_key, config.kucoin_api_secret, config.kucoin_api_passphrase)

    def reveal(self) -> Tuple[str, str, str]:
        """
        Return the plaintext (key, secret, passphrase).

        Call only at the point where a signature is computed.
        """
        return (
            self._key.get_secret_value(),
            self._secret.get_secret_value(),
            self._passphrase.get_secret_value(),
        )

    def __setattr__(self, name, value):
        raise AttributeError("Credentials are immutable; create a new instance instead")

    def __delattr__(self, name):
        raise AttributeError("Credentials are immutable")

    def __eq__(self, other):
        return self is other

    def __hash__(self):
        return id(self)

    def __reduce__(self):
        raise TypeError("Credentials cannot be pickled or serialized")

    def __repr__(self):
        return f"Credentials(key='{self._key}', secret='{self._secret}', passphrase='{self._passphrase}')"

    __str__ = __repr__


# ============================================
# Signature Primitives
# ============================================

def _hmac_b64(secret: str, message: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def build_prehash(timestamp: str, method: str, path: str, body: str = "") -> str:
    """
    Concatenate the signed fields with no separators.

    Example:
        >>> build_prehash("1700000000000", "POST", "/api/v1/hf/orders", '{"side":"buy"}')
        '1700000000000POST/api/v1/hf/orders{"side":"buy"}'
    """
    return f"{timestamp}{method}{path}{body or ''}"


def sign_prehash(secret: str, timestamp: str, method: str, path: str, body: str = "") -> str:
    """base64(HMAC-SHA256(secret, timestamp + method + path + body))"""
    return _hmac_b64(secret, build_prehash(timestamp, method, path, body))


def sign_passphrase(secret: str, passphrase: str) -> str:
    """base64(HMAC-SHA256(secret, passphrase))"""
    return _hmac_b64(secret, passphrase)


def build_headers(
    credentials: Credentials,
    timestamp: str,
    method: str,
    path: str,
    body: str = "",
    key_version: str = KEY_VERSION,
) -> Dict[str, str]:
    """
    Build the signed header set for one request.

    The result is only valid for this exact (timestamp, method, path, body);
    compute a fresh set for every request.

    Args:
        credentials: Credential snapshot to sign with
        timestamp: Milliseconds since epoch as a decimal string
        method: Upper-case HTTP method
        path: Request path including the query string
        body: Raw request body ("" for bodyless requests)
        key_version: KC-API-KEY-VERSION value

    Returns:
        Dict of the six request headers
    """
    key, secret, passphrase = credentials.reveal()

    return {
        "Content-Type": "application/json",
        "KC-API-KEY": key,
        "KC-API-SIGN": sign_prehash(secret, timestamp, method, path, body),
        "KC-API-TIMESTAMP": timestamp,
        "KC-API-PASSPHRASE": sign_passphrase(secret, passphrase),
        "KC-API-KEY-VERSION": key_version,
    }
