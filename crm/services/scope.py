"""Who is asking: admin flag and salesperson code of the current user."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

ALL_SALESPERSONS = "all"


@dataclass(frozen=True)
class Requester:
    is_admin: bool
    spp_code: Optional[str] = None
    user_id: Optional[str] = None


def requester_for(user) -> Requester:
    """Build a :class:`Requester` from a Django user and its sales profile.

    Superusers are always admins. Users without a profile are plain users
    without a salesperson code. ``user_id`` is the backend profile id when
    the profile records one, otherwise the local user's primary key.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return Requester(is_admin=False)

    profile = getattr(user, "sales_profile", None)
    spp_code = (profile.spp_code or None) if profile is not None else None
    is_admin = bool(user.is_superuser or (profile is not None and profile.is_admin))
    backend_id = profile.backend_user_id if profile is not None else None
    return Requester(is_admin=is_admin, spp_code=spp_code, user_id=backend_id or str(user.pk))


def resolve_salesperson(requester: Requester, selected: Optional[str] = None) -> Optional[str]:
    """Return the salesperson code a report should be filtered by.

    Non-admins only ever see their own code. Admins see the selected code,
    or everyone (``None``) when nothing or ``"all"`` is selected.
    """
    if not requester.is_admin:
        return requester.spp_code
    if not selected or selected == ALL_SALESPERSONS:
        return None
    return selected
