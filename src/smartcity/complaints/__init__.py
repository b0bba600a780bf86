"""Complaint lifecycle: state machine, authorization matrix and priority scoring."""

from smartcity.complaints.lifecycle import ComplaintLifecycleEngine
from smartcity.complaints.models import Complaint, ComplaintView
from smartcity.complaints.service import ComplaintService
from smartcity.complaints.store import ComplaintStore

__all__ = [
    "Complaint",
    "ComplaintLifecycleEngine",
    "ComplaintService",
    "ComplaintStore",
    "ComplaintView",
]
