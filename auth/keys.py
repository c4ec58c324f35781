"""
Storage key codec for the account directory.

Every record lives in one flat namespace of colon-delimited keys:

    {account_id}:{service}:{kind}   account-scoped (token, metadata, dcr-client)
    {service}:{kind}                service-scoped (active, linked)

Example: ``work@gmail.com:gmail:token``.

Building a key from bad identifiers is a programmer error and raises.
Parsing a key found in the store is routine and returns None on mismatch.
"""

import logging
from dataclasses import dataclass
from typing import Literal, get_args

from core.errors import InvalidKeyParameterError

logger = logging.getLogger(__name__)

KEY_DELIMITER = ":"

AccountKeyType = Literal["token", "metadata", "dcr-client"]
ServiceKeyType = Literal["active", "linked"]

ACCOUNT_KEY_TYPES: tuple[str, ...] = get_args(AccountKeyType)
SERVICE_KEY_TYPES: tuple[str, ...] = get_args(ServiceKeyType)


@dataclass(frozen=True)
class ParsedTokenKey:
    """Components recovered from a token key."""

    account_id: str
    service: str


def _validate_key_param(name: str, value: object) -> None:
    if not isinstance(value, str):
        raise InvalidKeyParameterError(name, f"must be a string, got: {type(value).__name__}")
    if not value:
        raise InvalidKeyParameterError(name, "cannot be empty")
    if KEY_DELIMITER in value:
        raise InvalidKeyParameterError(name, f"cannot contain colon character: {value}")


def account_key(kind: AccountKeyType, account_id: str, service: str) -> str:
    """
    Create an account-scoped storage key.

    Args:
        kind: 'token' for OAuth tokens, 'metadata' for account details,
            'dcr-client' for a dynamic client registration.
        account_id: Account identifier, typically an email address.
        service: Service name (e.g. 'gmail', 'drive').

    Returns:
        Key in the form "{account_id}:{service}:{kind}".

    Raises:
        InvalidKeyParameterError: If an identifier is not a string, is empty,
            contains the delimiter, or the kind is unknown.
    """
    if kind not in ACCOUNT_KEY_TYPES:
        raise InvalidKeyParameterError("kind", f"must be one of {', '.join(ACCOUNT_KEY_TYPES)}, got: {kind}")
    _validate_key_param("account_id", account_id)
    _validate_key_param("service", service)
    return f"{account_id}{KEY_DELIMITER}{service}{KEY_DELIMITER}{kind}"


def service_key(kind: ServiceKeyType, service: str) -> str:
    """
    Create a service-scoped storage key.

    Args:
        kind: 'active' for the active account pointer, 'linked' for the
            linked accounts list.
        service: Service name.

    Returns:
        Key in the form "{service}:{kind}".

    Raises:
        InvalidKeyParameterError: If the service is invalid or the kind is unknown.
    """
    if kind not in SERVICE_KEY_TYPES:
        raise InvalidKeyParameterError("kind", f"must be one of {', '.join(SERVICE_KEY_TYPES)}, got: {kind}")
    _validate_key_param("service", service)
    return f"{service}{KEY_DELIMITER}{kind}"


def parse_token_key(key: str) -> ParsedTokenKey | None:
    """
    Parse a token key back into its account id and service.

    Returns None for anything that is not exactly
    "{account_id}:{service}:token" with non-empty segments.
    """
    if not isinstance(key, str):
        return None
    parts = key.split(KEY_DELIMITER)
    if len(parts) != 3 or parts[2] != "token" or not parts[0] or not parts[1]:
        return None
    return ParsedTokenKey(account_id=parts[0], service=parts[1])


async def list_account_ids(store, service: str) -> list[str]:
    """
    List every account id that has a token stored for a service.

    Enumeration is best effort: stores without iteration support, or whose
    iteration fails partway, yield an empty list.

    Args:
        store: Key-value store exposing an async ``iterate()`` over keys.
        service: Service name.

    Returns:
        Account ids in store iteration order.
    """
    iterate = getattr(store, "iterate", None)
    if iterate is None:
        logger.debug(f"[list_account_ids] Store {type(store).__name__} does not support iteration")
        return []

    account_ids: list[str] = []
    try:
        async for key in iterate():
            parsed = parse_token_key(key)
            if parsed and parsed.service == service:
                account_ids.append(parsed.account_id)
    except Exception as e:
        logger.debug(f"[list_account_ids] Iteration failed for service '{service}', treating as unsupported: {e}")
        return []

    return account_ids
