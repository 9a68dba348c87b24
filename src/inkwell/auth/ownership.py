"""Resource ownership policy.

Learn: Only the recorded author of a post or comment (or the account
holder, for user records) may mutate it. Services must confirm the
resource exists BEFORE calling ensure_owner, so a missing resource is
always NotFound no matter who asks, and an existing one owned by someone
else is always Forbidden.
"""

from inkwell.errors import Forbidden


def permits(resource_author_id: str, caller_id: str) -> bool:
    """True when the caller is the resource's author (string identity)."""
    return str(resource_author_id) == str(caller_id)


def ensure_owner(resource_author_id: str, caller_id: str, message: str) -> None:
    if not permits(resource_author_id, caller_id):
        raise Forbidden(message)
