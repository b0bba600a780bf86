"""Projection of a complaint into what a given viewer may see."""

from __future__ import annotations

from smartcity.complaints.models import (
    CitizenIdentity,
    Comment,
    Complaint,
    ComplaintView,
)
from smartcity.complaints.policy import is_owner
from smartcity.core.types import STAFF_ROLES, Actor
from smartcity.directory.models import User

ANONYMOUS_AUTHOR = "anonymous"


def citizen_identity(viewer: Actor, complaint: Complaint, citizen: User | None) -> CitizenIdentity:
    """Build the citizen block of a complaint view.

    Anonymous complaints hide identity from everyone but the owner. Otherwise
    the name is shown to any permitted viewer and contact fields only to staff
    roles and the owner.
    """
    owner = is_owner(viewer, complaint)
    if citizen is None or (complaint.is_anonymous and not owner):
        return CitizenIdentity()

    identity = CitizenIdentity(id=citizen.id, full_name=citizen.full_name)
    if owner or viewer.role in STAFF_ROLES:
        identity.email = citizen.email
        identity.phone = citizen.phone
    return identity


def visible_comments(viewer: Actor, complaint: Complaint) -> list[Comment]:
    """Return the comment thread with the owner's authorship masked when anonymous."""
    if not complaint.is_anonymous or is_owner(viewer, complaint):
        return list(complaint.comments)
    return [
        comment.model_copy(update={"author": ANONYMOUS_AUTHOR})
        if comment.author == complaint.created_by
        else comment
        for comment in complaint.comments
    ]


def to_view(viewer: Actor, complaint: Complaint, citizen: User | None) -> ComplaintView:
    return ComplaintView(
        **complaint.model_dump(exclude={"created_by", "comments"}),
        comments=visible_comments(viewer, complaint),
        citizen=citizen_identity(viewer, complaint, citizen),
    )
