"""
Credential checks against the user directory.

Passwords are stored as salted PBKDF2-SHA256 hashes in the form
"pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>". Accounts written by the
browser storefront carry the password in plain text; those still verify,
with a constant-time comparison.
"""

import hashlib
import hmac
import logging
import secrets
from typing import Optional

from storefront.config import get_settings
from storefront.errors import AuthenticationError, RegistrationError
from storefront.models import User
from storefront.repositories import UserDirectory

logger = logging.getLogger("auth")

HASH_SCHEME = "pbkdf2_sha256"


def hash_password(password: str, iterations: Optional[int] = None, salt: Optional[str] = None) -> str:
    iterations = iterations or get_settings().password_iterations
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), iterations)
    return f"{HASH_SCHEME}${iterations}${salt}${digest.hex()}"


def verify_password(stored: str, candidate: str) -> bool:
    """Check a candidate password against a stored hash (or legacy plain text)."""
    parts = stored.split("$")
    if len(parts) != 4 or parts[0] != HASH_SCHEME:
        return hmac.compare_digest(stored.encode("utf-8"), candidate.encode("utf-8"))

    _, iterations, salt, expected = parts
    try:
        digest = hashlib.pbkdf2_hmac("sha256", candidate.encode("utf-8"), bytes.fromhex(salt), int(iterations))
    except ValueError:
        logger.warning("Malformed password hash in directory")
        return False
    return hmac.compare_digest(digest.hex(), expected)


class Authenticator:
    """Registers accounts and checks credentials."""

    def __init__(self, directory: UserDirectory, iterations: Optional[int] = None):
        self.directory = directory
        self.iterations = iterations

    def register(self, name: str, email: str, password: str) -> User:
        """
        Create a new account with an empty cart and no orders.

        Raises:
            RegistrationError: empty email/password, or the email (in any
                casing) already has an account
        """
        email = email.strip()
        if not email:
            raise RegistrationError(email, "email is required")
        if not password:
            raise RegistrationError(email, "password is required")
        if self.directory.lookup(email) is not None:
            raise RegistrationError(email, "an account with this email already exists")

        user = User(name=name.strip(), email=email, password=hash_password(password, self.iterations))
        self.directory.upsert(user)
        logger.info(f"Registered account {email}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Return the directory account for valid credentials.

        Raises:
            AuthenticationError: unknown email, account without a credential,
                or wrong password
        """
        user = self.directory.lookup(email.strip())
        if user is None or not user.password or not verify_password(user.password, password):
            logger.info(f"Failed sign-in for {email}")
            raise AuthenticationError(email)
        return user
