"""
Alerts Interfaces Layer
=======================

FastAPI route handlers for alert classification.
"""

from servicedesk.alerts.interfaces.controllers import alerts_router

__all__ = ["alerts_router"]
