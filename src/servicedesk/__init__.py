"""
Service Desk SLA Engine
=======================

SLA tracking and ticket-status workflow engine for an IT service desk.

Bounded contexts:
- sla: policy table, duration maths, evaluation, aging, adherence analytics
- workflow: role-gated ticket status state machine
- alerts: mapping of SLA and workflow events to alert records
"""

__version__ = "1.0.0"
