# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Cache-key naming for client, token and user records."""

KEY_FORMAT = {
    "client": "clients:%s",
    "token": "tokens:%s",
    "user": "users:%s",
}


def cache_key(category: str, identifier) -> str:
    """
    Substitute *identifier* into the template for *category*.

    Raises ``ValueError`` for an unknown category or an empty identifier.
    """
    try:
        template = KEY_FORMAT[category]
    except KeyError:
        raise ValueError(f"Unknown cache key category: {category!r}") from None

    identifier = str(identifier) if identifier is not None else ""
    if not identifier:
        raise ValueError("Cache key identifier must not be empty")
    return template % identifier


def client_key(client_id) -> str:
    return cache_key("client", client_id)


def token_key(token_id) -> str:
    return cache_key("token", token_id)


def user_key(user_id) -> str:
    return cache_key("user", user_id)
