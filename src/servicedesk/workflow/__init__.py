"""
Status Workflow Module
======================

Bounded Context for the ticket status state machine.

Responsibilities:
- Publish the status catalog and transition graph
- Decide whether a requester may move a ticket between statuses
- Apply transitions, stamping resolved_at on close

The same rules serve the UI (which actions to offer) and the server-side
re-validation before a change is committed.
"""
