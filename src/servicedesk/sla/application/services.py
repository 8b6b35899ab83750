"""
SLA Application Services
=========================

Application services orchestrate the SLA domain logic over ticket snapshots.

Every service is a pure function of (policy, ticket snapshot, instant):
no shared mutable state between calls, so they are safe to call from
concurrent requests over overlapping ticket sets.
"""

import math
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from servicedesk.config import SLACompliance, VALID_PRIORITIES
from servicedesk.core import InvalidTicket, UnknownPriority
from servicedesk.shared.infrastructure.logging import get_logger, log_latency
from servicedesk.sla.application.dto import (
    AdherenceReport,
    AdherenceStats,
    AgentPerformance,
    AgentPerformanceReport,
    AgingBucketResponse,
    AgingReport,
    PriorityAdherence,
    ResolutionTimeStats,
    TicketErrorResponse,
)
from servicedesk.sla.domain import (
    AgingBucket,
    SLACalculator,
    SLAEvaluationResult,
    SLAPolicy,
    Ticket,
    TicketError,
    to_utc,
)

logger = get_logger(__name__)

TIME_WINDOWS: Tuple[Tuple[str, timedelta], ...] = (
    ("last_24h", timedelta(hours=24)),
    ("last_7d", timedelta(days=7)),
    ("last_30d", timedelta(days=30)),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def adherence_percentage(met: int, violated: int) -> Optional[float]:
    """Share of closed tickets that met their target; None when nothing closed."""
    denominator = met + violated
    if denominator == 0:
        return None
    return round(met / denominator * 100, 1)


def adherence_band(percentage: Optional[float]) -> Optional[str]:
    """Dashboard coloring band for an adherence percentage."""
    if percentage is None:
        return None
    if percentage >= 90:
        return "good"
    if percentage >= 75:
        return "fair"
    return "poor"


# ========== Policy Provider Interface (Dependency Inversion) ==========

class ISLAPolicyProvider(ABC):
    """Interface for SLA policy access."""

    @abstractmethod
    def get_policy(self) -> SLAPolicy:
        """Get current SLA policy."""


class StaticPolicyProvider(ISLAPolicyProvider):
    """Serves one fixed policy; handy for embedding and tests."""

    def __init__(self, policy: Optional[SLAPolicy] = None):
        self._policy = policy or SLAPolicy()

    def get_policy(self) -> SLAPolicy:
        return self._policy


# ========== Evaluation ==========

@dataclass
class EvaluationBatch:
    """Evaluation results for a ticket set plus the tickets that failed."""
    results: List[SLAEvaluationResult] = field(default_factory=list)
    # Source snapshot of each result, position for position
    tickets: List[Ticket] = field(default_factory=list)
    errors: List[TicketError] = field(default_factory=list)
    evaluated_at: Optional[datetime] = None


class SLAEvaluator:
    """
    Decides SLA compliance for ticket snapshots.

    The only write it performs is the derived ``sla_violated`` flag on the
    ticket it evaluates.
    """

    def __init__(self, policy_provider: ISLAPolicyProvider):
        self._policy_provider = policy_provider

    @property
    def policy(self) -> SLAPolicy:
        return self._policy_provider.get_policy()

    def evaluate(self, ticket: Ticket, now: Optional[datetime] = None) -> SLAEvaluationResult:
        """
        Evaluate one ticket.

        Raises:
            InvalidTicket: missing/malformed timestamps or unknown status
            UnknownPriority: priority absent from the policy
        """
        return self._evaluate(ticket, self.policy, to_utc(now or _utcnow()))

    def evaluate_many(
        self,
        tickets: Iterable[Ticket],
        now: Optional[datetime] = None
    ) -> EvaluationBatch:
        """
        Evaluate a ticket set against one policy snapshot and one instant.

        Failures are isolated per ticket and returned in ``errors``.
        """
        policy = self.policy
        current_time = to_utc(now or _utcnow())
        batch = EvaluationBatch(evaluated_at=current_time)

        for ticket in tickets:
            try:
                result = self._evaluate(ticket, policy, current_time)
            except (InvalidTicket, UnknownPriority) as e:
                logger.warning(
                    "Ticket excluded from SLA evaluation",
                    extra={"ticket_id": ticket.id, "error_type": type(e).__name__, "error": e.message}
                )
                batch.errors.append(TicketError.from_exception(ticket.id, e))
                continue
            batch.results.append(result)
            batch.tickets.append(ticket)

        return batch

    def _evaluate(
        self,
        ticket: Ticket,
        policy: SLAPolicy,
        current_time: datetime
    ) -> SLAEvaluationResult:
        ticket.validate()

        try:
            target = policy.target_hours(ticket.priority)
        except UnknownPriority:
            raise UnknownPriority(ticket.priority, ticket.id) from None

        end = ticket.resolved_at if ticket.is_closed else current_time
        skewed = SLACalculator.is_skewed(ticket.created_at, end)
        elapsed = SLACalculator.hours_between(ticket.created_at, end)
        compliance = SLACalculator.calculate_compliance(
            elapsed, target, ticket.is_closed, policy.at_risk_threshold
        )

        ticket.sla_violated = compliance == SLACompliance.VIOLATED

        return SLAEvaluationResult(
            ticket_id=ticket.id,
            priority=ticket.priority.value,
            status=ticket.status.value,
            created_at=to_utc(ticket.created_at),
            elapsed_hours=elapsed,
            target_hours=target,
            compliance=compliance,
            evaluated_at=current_time,
            clock_skew=skewed,
        )


# ========== Aging ==========

class AgingClassifier:
    """Buckets open tickets by how long they have been open."""

    def __init__(self, policy_provider: ISLAPolicyProvider):
        self._policy_provider = policy_provider

    def classify(self, ticket: Ticket, now: Optional[datetime] = None) -> Optional[AgingBucket]:
        """
        Aging bucket of an open ticket, or None for a closed one.

        Raises:
            InvalidTicket: missing created_at or unknown status
        """
        classified = self.classify_with_age(ticket, now)
        return classified[0] if classified else None

    def classify_with_age(
        self,
        ticket: Ticket,
        now: Optional[datetime] = None
    ) -> Optional[Tuple[AgingBucket, float]]:
        """Like classify, also returning the elapsed hours used."""
        return self._classify(ticket, self._policy_provider.get_policy(), to_utc(now or _utcnow()))

    def _classify(
        self,
        ticket: Ticket,
        policy: SLAPolicy,
        current_time: datetime
    ) -> Optional[Tuple[AgingBucket, float]]:
        ticket.validate(require_resolved_at=False)
        if not ticket.is_open:
            return None
        elapsed = SLACalculator.hours_between(ticket.created_at, current_time)
        return policy.bucket_for(elapsed), elapsed

    def age_report(self, tickets: Iterable[Ticket], now: Optional[datetime] = None) -> AgingReport:
        """Group open tickets into the policy's aging buckets."""
        policy = self._policy_provider.get_policy()
        current_time = to_utc(now or _utcnow())

        members: Dict[str, List[str]] = {b.label: [] for b in policy.aging_buckets}
        ages: List[float] = []
        errors: List[TicketError] = []

        for ticket in tickets:
            try:
                classified = self._classify(ticket, policy, current_time)
            except InvalidTicket as e:
                logger.warning(
                    "Ticket excluded from aging analysis",
                    extra={"ticket_id": ticket.id, "error": e.message}
                )
                errors.append(TicketError.from_exception(ticket.id, e))
                continue
            if classified is None:
                continue
            bucket, elapsed = classified
            members[bucket.label].append(ticket.id)
            ages.append(elapsed)

        average = round(math.fsum(ages) / len(ages), 2) if ages else None

        return AgingReport(
            generated_at=current_time,
            total_open_tickets=len(ages),
            average_age_hours=average,
            buckets=[
                AgingBucketResponse(
                    label=b.label,
                    lower_hours=b.lower_hours,
                    upper_hours=b.upper_hours,
                    color=b.color,
                    count=len(members[b.label]),
                    ticket_ids=sorted(members[b.label]),
                )
                for b in policy.aging_buckets
            ],
            errors=_error_responses(errors),
        )


# ========== Adherence ==========

class _Tally:
    """Mutable counter used while folding evaluation results."""

    def __init__(self):
        self.total = 0
        self.counts: Dict[SLACompliance, int] = defaultdict(int)
        self.closed_counts: Dict[SLACompliance, int] = defaultdict(int)

    def add(self, result: SLAEvaluationResult) -> None:
        self.total += 1
        if result.is_closed:
            self.closed_counts[result.compliance] += 1
        else:
            self.counts[result.compliance] += 1

    def stats(self) -> dict:
        met = self.closed_counts[SLACompliance.MET]
        violated = self.closed_counts[SLACompliance.VIOLATED]
        percentage = adherence_percentage(met, violated)
        return {
            "total_tickets": self.total,
            "closed_met": met,
            "closed_violated": violated,
            "open_on_track": self.counts[SLACompliance.ON_TRACK],
            "open_at_risk": self.counts[SLACompliance.AT_RISK],
            "open_violated": self.counts[SLACompliance.VIOLATED],
            "adherence_percentage": percentage,
            "band": adherence_band(percentage),
        }


class AdherenceAggregator:
    """
    Reduces a ticket set into adherence statistics.

    Counts are order-independent and keyed in canonical priority order, so
    the same ticket set always produces the same report. Tickets that fail
    evaluation are excluded from every count and listed under ``errors``.
    """

    def __init__(self, evaluator: SLAEvaluator):
        self._evaluator = evaluator

    def aggregate(self, tickets: Iterable[Ticket], now: Optional[datetime] = None) -> AdherenceReport:
        policy = self._evaluator.policy
        tickets = list(tickets)

        with log_latency(logger, "adherence_aggregation", tickets=len(tickets)):
            batch = self._evaluator.evaluate_many(tickets, now)
            current_time = batch.evaluated_at

            overall = _Tally()
            by_priority = {p.value: _Tally() for p in VALID_PRIORITIES}
            resolution_hours: Dict[str, List[float]] = {p.value: [] for p in VALID_PRIORITIES}
            windows = {name: _Tally() for name, _ in TIME_WINDOWS}

            for result in batch.results:
                overall.add(result)
                by_priority[result.priority].add(result)

                if result.is_closed:
                    resolution_hours[result.priority].append(result.elapsed_hours)

                for name, span in TIME_WINDOWS:
                    if current_time - span <= result.created_at <= current_time:
                        windows[name].add(result)

        return AdherenceReport(
            generated_at=current_time,
            at_risk_threshold=policy.at_risk_threshold,
            sla_targets=dict(policy.sla_targets),
            overall=AdherenceStats(**overall.stats()),
            by_priority={
                priority: PriorityAdherence(
                    target_hours=policy.target_hours(priority),
                    **tally.stats()
                )
                for priority, tally in by_priority.items()
            },
            average_resolution_times={
                priority: self._resolution_stats(hours, policy.target_hours(priority))
                for priority, hours in resolution_hours.items()
            },
            time_windows={name: AdherenceStats(**tally.stats()) for name, tally in windows.items()},
            errors=_error_responses(batch.errors),
        )

    def agent_performance(
        self,
        tickets: Iterable[Ticket],
        now: Optional[datetime] = None
    ) -> AgentPerformanceReport:
        """
        Per-agent scorecard over assigned tickets.

        score = closed tickets * 10 - SLA violations * 5
        """
        assigned = [t for t in tickets if t.assigned_to]
        batch = self._evaluator.evaluate_many(assigned, now)

        active: Dict[str, int] = defaultdict(int)
        closed: Dict[str, int] = defaultdict(int)
        violations: Dict[str, int] = defaultdict(int)
        handle_hours: Dict[str, List[float]] = defaultdict(list)

        for ticket, result in zip(batch.tickets, batch.results):
            agent = ticket.assigned_to
            if result.is_closed:
                closed[agent] += 1
                handle_hours[agent].append(result.elapsed_hours)
            else:
                active[agent] += 1
            if result.is_violated:
                violations[agent] += 1

        agents = []
        for agent in set(active) | set(closed):
            hours = handle_hours[agent]
            agents.append(AgentPerformance(
                agent_id=agent,
                active_tickets=active[agent],
                closed_tickets=closed[agent],
                sla_violations=violations[agent],
                average_handle_hours=round(math.fsum(hours) / len(hours), 2) if hours else None,
                score=closed[agent] * 10 - violations[agent] * 5,
            ))
        agents.sort(key=lambda a: (-a.score, a.agent_id))

        return AgentPerformanceReport(
            generated_at=batch.evaluated_at,
            agents=agents,
            errors=_error_responses(batch.errors),
        )

    @staticmethod
    def _resolution_stats(hours: List[float], target: float) -> ResolutionTimeStats:
        if not hours:
            return ResolutionTimeStats(target_hours=target)
        average = math.fsum(hours) / len(hours)
        return ResolutionTimeStats(
            closed_tickets=len(hours),
            average_hours=round(average, 2),
            target_hours=target,
            within_target=average <= target,
        )


def _error_responses(errors: List[TicketError]) -> List[TicketErrorResponse]:
    ordered = sorted(errors, key=lambda e: (e.ticket_id, e.error_type, e.message))
    return [TicketErrorResponse.from_domain(e) for e in ordered]
