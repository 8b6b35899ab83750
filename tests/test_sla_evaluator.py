import pytest

from servicedesk.config import SLACompliance
from servicedesk.core import InvalidTicket, UnknownPriority
from servicedesk.sla.application import TicketSnapshotDTO

from tests.helpers import T0, hours


class TestScenarios:
    def test_critical_ticket_at_risk_then_violated(self, evaluator, make_ticket):
        ticket = make_ticket(priority="Critical", status="Open")

        at_risk = evaluator.evaluate(ticket, now=T0 + hours(3.5))
        assert at_risk.compliance == SLACompliance.AT_RISK
        assert at_risk.ratio == pytest.approx(0.875)
        assert ticket.sla_violated is False

        violated = evaluator.evaluate(ticket, now=T0 + hours(4.1))
        assert violated.compliance == SLACompliance.VIOLATED
        assert ticket.sla_violated is True

    def test_medium_ticket_closed_within_target_is_met(self, evaluator, make_ticket):
        ticket = make_ticket(priority="Medium", status="Closed", resolved_at=T0 + hours(20))
        result = evaluator.evaluate(ticket, now=T0 + hours(100))
        assert result.compliance == SLACompliance.MET
        assert result.elapsed_hours == 20

    def test_medium_ticket_closed_late_is_violated(self, evaluator, make_ticket):
        ticket = make_ticket(priority="Medium", status="Closed", resolved_at=T0 + hours(30))
        result = evaluator.evaluate(ticket, now=T0 + hours(31))
        assert result.compliance == SLACompliance.VIOLATED
        assert ticket.sla_violated is True


class TestEvaluate:
    def test_compliance_never_moves_backwards_as_time_passes(self, evaluator, make_ticket):
        ticket = make_ticket(priority="High", status="Pending")
        order = [SLACompliance.ON_TRACK, SLACompliance.AT_RISK, SLACompliance.VIOLATED]

        seen = [
            evaluator.evaluate(ticket, now=T0 + hours(step / 4)).compliance
            for step in range(0, 60)
        ]
        ranks = [order.index(c) for c in seen]
        assert ranks == sorted(ranks)
        assert seen[0] == SLACompliance.ON_TRACK
        assert seen[-1] == SLACompliance.VIOLATED

    def test_evaluate_twice_is_identical(self, evaluator, make_ticket):
        ticket = make_ticket(priority="Low", status="Open")
        now = T0 + hours(10)
        assert evaluator.evaluate(ticket, now) == evaluator.evaluate(ticket, now)

    def test_closed_compliance_is_frozen(self, evaluator, make_ticket):
        ticket = make_ticket(priority="Critical", status="Closed", resolved_at=T0 + hours(1))
        early = evaluator.evaluate(ticket, now=T0 + hours(2))
        late = evaluator.evaluate(ticket, now=T0 + hours(2000))
        assert early.compliance == late.compliance == SLACompliance.MET

    def test_clock_skew_is_flagged_and_clamped(self, evaluator, make_ticket):
        ticket = make_ticket(priority="High", status="Open", created_at=T0 + hours(1))
        result = evaluator.evaluate(ticket, now=T0)
        assert result.elapsed_hours == 0
        assert result.clock_skew is True
        assert result.compliance == SLACompliance.ON_TRACK

    def test_missing_created_at(self, evaluator, make_ticket):
        ticket = make_ticket()
        ticket.created_at = None
        with pytest.raises(InvalidTicket):
            evaluator.evaluate(ticket, now=T0)

    def test_closed_without_resolved_at(self, evaluator, make_ticket):
        with pytest.raises(InvalidTicket):
            evaluator.evaluate(make_ticket(status="Closed"), now=T0)

    def test_unknown_status(self, evaluator, make_ticket):
        with pytest.raises(InvalidTicket):
            evaluator.evaluate(make_ticket(status="Resolved"), now=T0)

    def test_unknown_priority(self, evaluator, make_ticket):
        with pytest.raises(UnknownPriority) as exc:
            evaluator.evaluate(make_ticket(priority="Urgent", id="x1"), now=T0)
        assert exc.value.ticket_id == "x1"


class TestEvaluateMany:
    def test_bad_tickets_are_isolated(self, evaluator, make_ticket):
        good = make_ticket(priority="Critical", id="a")
        bad_priority = make_ticket(priority="Urgent", id="b")
        bad_status = make_ticket(status="Archived", id="c")

        batch = evaluator.evaluate_many([good, bad_priority, bad_status], now=T0 + hours(1))

        assert [r.ticket_id for r in batch.results] == ["a"]
        assert {(e.ticket_id, e.error_type) for e in batch.errors} == {
            ("b", "UnknownPriority"),
            ("c", "InvalidTicket"),
        }
        assert batch.evaluated_at == T0 + hours(1)

    def test_malformed_timestamp_from_snapshot(self, evaluator):
        dto = TicketSnapshotDTO(id=7, priority="High", status="Open", created_at="yesterday-ish")
        assert dto.id == "7"
        assert dto.created_at is None

        batch = evaluator.evaluate_many([dto.to_domain()], now=T0)
        assert batch.results == []
        assert batch.errors[0].ticket_id == "7"
        assert batch.errors[0].error_type == "InvalidTicket"

    def test_snapshot_without_priority_or_status(self, evaluator):
        tickets = [
            TicketSnapshotDTO(id="p", status="Open", created_at=T0).to_domain(),
            TicketSnapshotDTO(id="s", priority="High", created_at=T0).to_domain(),
        ]

        batch = evaluator.evaluate_many(tickets, now=T0)

        assert batch.results == []
        assert {(e.ticket_id, e.error_type) for e in batch.errors} == {
            ("p", "UnknownPriority"),
            ("s", "InvalidTicket"),
        }

    def test_results_are_paired_with_their_tickets(self, evaluator, make_ticket):
        tickets = [make_ticket(id="a"), make_ticket(id="b", priority="Urgent"), make_ticket(id="c")]

        batch = evaluator.evaluate_many(tickets, now=T0)

        assert [t.id for t in batch.tickets] == [r.ticket_id for r in batch.results] == ["a", "c"]

    def test_snapshot_timestamp_with_z_suffix(self, evaluator):
        dto = TicketSnapshotDTO(
            id="9", priority="Critical", status="Open", created_at="2024-01-10T10:00:00Z"
        )
        result = evaluator.evaluate(dto.to_domain(), now=T0 + hours(5))
        assert result.compliance == SLACompliance.VIOLATED
