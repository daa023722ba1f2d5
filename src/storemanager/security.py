"""Authentication and authorization for the catalog.

Callers authenticate with HTTP Basic credentials that are checked against
bcrypt hashes supplied by a ``CredentialResolver``. ``authorize`` decides,
from the method, the path and the caller alone, whether a request may reach
the routers. Nothing is remembered between requests.
"""

import base64
import binascii
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Protocol

import bcrypt

from storemanager.config import Settings

PRODUCTS_PATH = "/products"
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class Role(StrEnum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


class Decision(Enum):
    ALLOW = "allow"
    DENY = "deny"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class Account:
    """Stored credentials of one user. ``password_hash`` is a bcrypt hash."""

    username: str
    password_hash: bytes
    roles: frozenset[Role]


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of the current request."""

    username: str
    roles: frozenset[Role]


class CredentialResolver(Protocol):
    def resolve(self, username: str) -> Account | None: ...


class InMemoryCredentialStore:
    """Fixed set of accounts held in memory. Usernames match case-insensitively."""

    def __init__(self, accounts: Iterable[Account]) -> None:
        self._accounts = {account.username.lower(): account for account in accounts}

    def resolve(self, username: str) -> Account | None:
        return self._accounts.get(username.lower())

    @classmethod
    def from_plaintext(
        cls,
        users: Mapping[str, tuple[str, Iterable[Role]]],
        rounds: int = 12,
    ) -> "InMemoryCredentialStore":
        """Hash ``{username: (password, roles)}`` and build a store from it."""
        return cls(
            Account(username, hash_secret(password, rounds), frozenset(roles))
            for username, (password, roles) in users.items()
        )


def build_credential_store(settings: Settings) -> InMemoryCredentialStore:
    """Default accounts: a read-only customer and an admin who is also a customer."""
    return InMemoryCredentialStore.from_plaintext(
        {
            settings.customer_username: (settings.customer_password, [Role.CUSTOMER]),
            settings.admin_username: (settings.admin_password, [Role.CUSTOMER, Role.ADMIN]),
        },
        rounds=settings.bcrypt_rounds,
    )


def hash_secret(secret: str, rounds: int = 12) -> bytes:
    return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=rounds))


def verify_secret(secret: str, password_hash: bytes) -> bool:
    try:
        return bcrypt.checkpw(secret.encode("utf-8"), password_hash)
    except ValueError:
        # bcrypt refuses secrets longer than 72 bytes and malformed hashes
        return False


def uses_basic_scheme(header: str) -> bool:
    return header.partition(" ")[0].lower() == "basic"


def parse_basic_credentials(header: str) -> tuple[str, str] | None:
    """Split an ``Authorization: Basic ...`` header into (username, secret)."""
    _, _, encoded = header.partition(" ")
    if not uses_basic_scheme(header) or not encoded.strip():
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, separator, secret = decoded.partition(":")
    if not separator:
        return None
    return username, secret


def authenticate(header: str, credentials: CredentialResolver) -> Principal | None:
    """Return the caller named by a Basic header, or None if the header does not check out."""
    parsed = parse_basic_credentials(header)
    if parsed is None:
        return None
    username, secret = parsed
    account = credentials.resolve(username)
    if account is None or not verify_secret(secret, account.password_hash):
        return None
    return Principal(username=account.username, roles=account.roles)


def is_product_path(path: str) -> bool:
    return path == PRODUCTS_PATH or path.startswith(PRODUCTS_PATH + "/")


def authorize(method: str, path: str, principal: Principal | None) -> Decision:
    """Decide whether ``principal`` (None for anonymous) may call ``method path``.

    Product reads are public, product writes need ADMIN, and every other route
    needs some authenticated caller.
    """
    method = method.upper()
    if is_product_path(path):
        if method == "GET":
            return Decision.ALLOW
        if method in WRITE_METHODS:
            if principal is None:
                return Decision.UNAUTHENTICATED
            return Decision.ALLOW if Role.ADMIN in principal.roles else Decision.DENY
    if principal is None:
        return Decision.UNAUTHENTICATED
    return Decision.ALLOW
