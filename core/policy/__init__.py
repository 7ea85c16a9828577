"""
Structa Policy — Public API
"""

from core.policy.rejection import RejectionCode, RejectionReason

__all__ = ["RejectionCode", "RejectionReason"]
