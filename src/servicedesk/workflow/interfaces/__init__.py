"""
Workflow Interfaces Layer
=========================

FastAPI route handlers for the status workflow.
"""

from servicedesk.workflow.interfaces.controllers import workflow_router

__all__ = ["workflow_router"]
