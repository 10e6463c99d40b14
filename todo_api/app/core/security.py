"""
Security helpers for password hashing and signed session tokens.

Tokens are compact HS256 JSON Web Tokens built with HMAC-SHA256 and
base64url encoding.  Each token embeds the owning user id (``_id``),
the access kind (always ``"auth"``), a random ``jti`` so that two
tokens issued in the same second differ, and an ``exp`` timestamp.
A valid signature alone does not authenticate a request: the token
must also still be listed on the user record (see
``UserService.find_by_token``), which is what makes logout effective.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a per-password salt,
stored as ``"salthex$hashhex"``, and verified with a constant-time
comparison.
"""

import base64
import hashlib
import hmac
import json
import os
import secrets
import time
from typing import Callable, Dict, Optional

TOKEN_ACCESS = "auth"
PBKDF2_ITERATIONS = 100_000

PasswordPolicy = Callable[[str], bool]


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(user_id: str, secret_key: str, expires_in: int) -> str:
    """Create a signed token for ``user_id``.

    Parameters
    ----------
    user_id : str
        Identifier of the user the token authenticates.
    secret_key : str
        HMAC secret used to sign the token.
    expires_in : int
        Lifetime of the token in seconds.

    Returns
    -------
    str
        A token of the form ``header.payload.signature``.
    """
    claims = {
        "_id": user_id,
        "access": TOKEN_ACCESS,
        "jti": secrets.token_hex(8),
        "exp": int(time.time()) + expires_in,
    }
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str, secret_key: str) -> Optional[Dict[str, str]]:
    """Verify and decode a token.

    Returns the claims if the signature matches, the token has not
    expired and it was issued for ``"auth"`` access; otherwise ``None``.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(_sign(signing_input, secret_key), actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        # binascii.Error and json.JSONDecodeError are both ValueErrors
        return None
    if not isinstance(data, dict):
        return None
    if data.get("access") != TOKEN_ACCESS or not data.get("_id"):
        return None
    exp = data.get("exp")
    if not isinstance(exp, int) or exp < int(time.time()):
        return None
    return data


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2-HMAC with SHA-256.

    A 16-byte random salt is generated for each password.  The result
    contains the salt and hash in hex separated by ``$``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored ``salt$hash`` string."""
    try:
        salt_hex, hash_hex = hashed_password.split("$", 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)


def min_length_policy(min_length: int) -> PasswordPolicy:
    """Return a password policy accepting passwords of at least ``min_length`` characters."""

    def _policy(password: str) -> bool:
        return len(password) >= min_length

    return _policy
