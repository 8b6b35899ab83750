"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for SLA tracking:
- External: policy file loading and hot reload
"""

from servicedesk.sla.infrastructure.external import PolicyFileHandler, SLAPolicyManager

__all__ = [
    "PolicyFileHandler",
    "SLAPolicyManager",
]
