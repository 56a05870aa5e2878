"""Acting-user identity.

Identity is always passed explicitly. Mutating handlers call
``require_user`` and refuse to run for an anonymous caller.
"""

from typing import Optional

from tradesense.errors import NotAuthenticated


def resolve_user(user_id: Optional[str]) -> Optional[str]:
    """Normalise a user identifier; blank values mean anonymous."""
    if user_id is None:
        return None
    user_id = user_id.strip()
    return user_id or None


def require_user(user_id: Optional[str]) -> str:
    """Return the acting user or raise NotAuthenticated.

    Args:
        user_id: Identifier from the request context.

    Returns:
        The normalised user identifier.

    Raises:
        NotAuthenticated: If there is no acting user.
    """
    resolved = resolve_user(user_id)
    if resolved is None:
        raise NotAuthenticated()
    return resolved
