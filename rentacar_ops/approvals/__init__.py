"""Approval workflow."""

from .service import ApprovalService, ApprovalServiceDeps

__all__ = ["ApprovalService", "ApprovalServiceDeps"]
