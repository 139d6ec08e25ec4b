"""Authorization gate: allow/deny decisions over (requester, action, resource owner).

Decision table:

- any role, own account: read/update profile and password -> allow
- admin, own account: change role away from admin or delete -> SelfLockout
- admin, other account: list, stats, update role/tier, delete -> allow
- user, any admin-scoped action -> Forbidden
- owner, own post/collection: create/read/update/delete -> allow
- non-owner, someone else's post/collection: mutate -> Forbidden

The gate holds no state; it only raises or returns.
"""

from enum import Enum

from blogai.core.errors import Forbidden, SelfLockout
from blogai.schemas.auth import SubjectIdentity


class Action(str, Enum):
    READ_OWN = "read_own"
    UPDATE_OWN = "update_own"
    OWNER_READ = "owner_read"
    OWNER_MUTATE = "owner_mutate"
    ADMIN_LIST_ACCOUNTS = "admin_list_accounts"
    ADMIN_READ_STATS = "admin_read_stats"
    ADMIN_UPDATE_ACCOUNT = "admin_update_account"
    ADMIN_DELETE_ACCOUNT = "admin_delete_account"


ADMIN_ACTIONS = frozenset(
    {
        Action.ADMIN_LIST_ACCOUNTS,
        Action.ADMIN_READ_STATS,
        Action.ADMIN_UPDATE_ACCOUNT,
        Action.ADMIN_DELETE_ACCOUNT,
    }
)


def authorize(
    requester: SubjectIdentity,
    action: Action,
    owner_id: int | None = None,
) -> None:
    """
    Raise Forbidden unless requester may perform action on a resource owned by owner_id.

    For READ_OWN/UPDATE_OWN owner_id is the target account id (defaults to the
    requester). Admin-scoped actions ignore owner_id here; self-targeting rules
    live in check_role_change and check_account_deletion.
    """
    if action in ADMIN_ACTIONS:
        if not requester.is_admin:
            raise Forbidden("Admin access required")
        return

    if action in (Action.READ_OWN, Action.UPDATE_OWN):
        target = requester.id if owner_id is None else owner_id
        if target != requester.id:
            raise Forbidden("You can only access your own account")
        return

    if owner_id is None or owner_id != requester.id:
        # Admins get no content override; they remove content via account deletion.
        raise Forbidden("Not authorized to access this resource")


def check_role_change(
    requester: SubjectIdentity,
    target_id: int,
    new_role: str | None,
) -> None:
    """Admin-scoped account update; an admin may not set their own role to anything but admin."""
    authorize(requester, Action.ADMIN_UPDATE_ACCOUNT)
    if target_id == requester.id and new_role is not None and new_role != "admin":
        raise SelfLockout("Cannot change your own admin role")


def check_account_deletion(requester: SubjectIdentity, target_id: int) -> None:
    """Admin-scoped account deletion; an admin may never delete their own account."""
    authorize(requester, Action.ADMIN_DELETE_ACCOUNT)
    if target_id == requester.id:
        raise SelfLockout("Cannot delete your own account")
