"""
Alerts Module
=============

Bounded Context for classifying ticket events into alert records.

Responsibilities:
- Detect the first transition of a ticket into SLA violation
- Map SLA, status, assignment, creation and message events to alerts
- Assign alert type, severity, wording and recipient

Delivery (email, push, chat) is left to the notification channel.
"""
