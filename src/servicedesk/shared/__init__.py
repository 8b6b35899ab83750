"""
Shared Kernel Module
====================

Shared infrastructure used across all bounded contexts (SLA, Workflow, Alerts).

DO NOT add business logic from SLA, Workflow or Alerts to shared kernel.
"""
