import base64

import pytest

from storemanager.security import (
    Decision,
    InMemoryCredentialStore,
    Principal,
    Role,
    authenticate,
    authorize,
    hash_secret,
    parse_basic_credentials,
    uses_basic_scheme,
    verify_secret,
)

CUSTOMER = Principal(username="customer", roles=frozenset({Role.CUSTOMER}))
ADMIN = Principal(username="admin", roles=frozenset({Role.CUSTOMER, Role.ADMIN}))


def _basic(username: str, secret: str) -> str:
    return "Basic " + base64.b64encode(f"{username}:{secret}".encode()).decode()


# ---------------------------------------------------------------------------
# Authorization policy
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("principal", [None, CUSTOMER, ADMIN], ids=["anonymous", "customer", "admin"])
@pytest.mark.parametrize("path", ["/products", "/products/1", "/products/name/lamp", "/products/id/3"])
def test_product_reads_are_public(principal: Principal | None, path: str) -> None:
    assert authorize("GET", path, principal) is Decision.ALLOW


@pytest.mark.parametrize(
    "method, path",
    [("POST", "/products"), ("PUT", "/products/1"), ("PATCH", "/products/1"), ("DELETE", "/products/1")],
)
def test_product_writes_need_admin(method: str, path: str) -> None:
    assert authorize(method, path, ADMIN) is Decision.ALLOW
    assert authorize(method, path, CUSTOMER) is Decision.DENY
    assert authorize(method, path, None) is Decision.UNAUTHENTICATED


def test_method_is_case_insensitive() -> None:
    assert authorize("delete", "/products/1", CUSTOMER) is Decision.DENY


@pytest.mark.parametrize("method, path", [("GET", "/health"), ("GET", "/docs"), ("HEAD", "/products")])
def test_other_routes_need_any_authenticated_caller(method: str, path: str) -> None:
    assert authorize(method, path, None) is Decision.UNAUTHENTICATED
    assert authorize(method, path, CUSTOMER) is Decision.ALLOW
    assert authorize(method, path, ADMIN) is Decision.ALLOW


def test_similar_prefix_is_not_a_product_path() -> None:
    assert authorize("GET", "/productsearch", None) is Decision.UNAUTHENTICATED


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------
def test_hash_is_salted_and_verifiable() -> None:
    first, second = hash_secret("s3cret", rounds=4), hash_secret("s3cret", rounds=4)

    assert first != second
    assert b"s3cret" not in first
    assert verify_secret("s3cret", first)
    assert not verify_secret("wrong", first)


def test_verify_secret_rejects_malformed_hash() -> None:
    assert not verify_secret("s3cret", b"not-a-bcrypt-hash")


@pytest.mark.parametrize(
    "header",
    [
        "Basic",
        "Basic !!!not-base64!!!",
        "Basic " + base64.b64encode(b"no-colon").decode(),
    ],
    ids=["no_payload", "bad_base64", "no_separator"],
)
def test_parse_basic_credentials_rejects_malformed_headers(header: str) -> None:
    assert parse_basic_credentials(header) is None


def test_parse_basic_credentials_keeps_colons_in_secret() -> None:
    assert parse_basic_credentials(_basic("admin", "a:b:c")) == ("admin", "a:b:c")


def test_authenticate(credentials: InMemoryCredentialStore) -> None:
    assert authenticate(_basic("admin", "adminPassword"), credentials) == ADMIN
    assert authenticate(_basic("customer", "customerPassword"), credentials) == CUSTOMER
    assert authenticate(_basic("admin", "customerPassword"), credentials) is None
    assert authenticate(_basic("nobody", "adminPassword"), credentials) is None


@pytest.mark.parametrize(
    "header, expected",
    [
        (_basic("admin", "adminPassword"), True),
        ("basic dXNlcjpwdw==", True),
        ("Bearer abc.def", False),
        ("Digest username=admin", False),
    ],
)
def test_only_basic_scheme_is_handled(header: str, expected: bool) -> None:
    assert uses_basic_scheme(header) is expected


def test_usernames_match_case_insensitively(credentials: InMemoryCredentialStore) -> None:
    account = credentials.resolve("ADMIN")

    assert account is not None
    assert account.username == "admin"
    assert authenticate(_basic("Admin", "adminPassword"), credentials) == ADMIN
    assert authenticate(_basic("ADMIN", "ADMINPASSWORD"), credentials) is None
