"""Shared fixtures: a fixed reference clock and a ticket factory."""

from datetime import datetime

import pytest

from servicedesk.sla.application import (
    AdherenceAggregator,
    AgingClassifier,
    SLAEvaluator,
    StaticPolicyProvider,
)
from servicedesk.sla.domain import SLAPolicy, Ticket
from servicedesk.workflow.application import StatusWorkflow

from tests.helpers import T0


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def make_ticket():
    """Build a Ticket created ``age`` hours before T0 unless created_at is given."""
    counter = {"n": 0}

    def _make(
        priority="Medium",
        status="Open",
        created_at=None,
        resolved_at=None,
        ticket_id=None,
        id=None,
        **kwargs
    ) -> Ticket:
        counter["n"] += 1
        return Ticket(
            id=id or f"t{counter['n']}",
            ticket_id=ticket_id,
            priority=priority,
            status=status,
            created_at=created_at if created_at is not None else T0,
            resolved_at=resolved_at,
            **kwargs
        )

    return _make


@pytest.fixture
def policy() -> SLAPolicy:
    return SLAPolicy()


@pytest.fixture
def provider(policy) -> StaticPolicyProvider:
    return StaticPolicyProvider(policy)


@pytest.fixture
def evaluator(provider) -> SLAEvaluator:
    return SLAEvaluator(provider)


@pytest.fixture
def aging(provider) -> AgingClassifier:
    return AgingClassifier(provider)


@pytest.fixture
def aggregator(evaluator) -> AdherenceAggregator:
    return AdherenceAggregator(evaluator)


@pytest.fixture
def workflow() -> StatusWorkflow:
    return StatusWorkflow()
