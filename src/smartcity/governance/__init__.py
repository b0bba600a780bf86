"""Governance module: the complaint audit trail."""

from smartcity.governance.audit import AuditEntry, AuditLogger

__all__ = ["AuditEntry", "AuditLogger"]
