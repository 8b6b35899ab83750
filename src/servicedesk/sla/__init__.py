"""
SLA Module
==========

Bounded Context for service level agreement tracking over ticket snapshots.

Responsibilities:
- Hold the per-priority SLA policy (YAML file, hot reload via watchdog)
- Evaluate tickets for compliance (met, violated, at_risk, on_track)
- Bucket open tickets by age
- Aggregate adherence overall, per priority and per time window
- Score assigned agents
"""
