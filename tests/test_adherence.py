import pytest

from servicedesk.sla.application import adherence_band, adherence_percentage

from tests.helpers import T0, hours


@pytest.fixture
def scenario_c(make_ticket):
    """3 Critical (1 violated) and 7 Low (none violated), all closed."""
    critical = [
        make_ticket(id="c1", priority="Critical", status="Closed", resolved_at=T0 + hours(2)),
        make_ticket(id="c2", priority="Critical", status="Closed", resolved_at=T0 + hours(3)),
        make_ticket(id="c3", priority="Critical", status="Closed", resolved_at=T0 + hours(5)),
    ]
    low = [
        make_ticket(id=f"l{i}", priority="Low", status="Closed", resolved_at=T0 + hours(10))
        for i in range(7)
    ]
    return critical + low


class TestPercentage:
    def test_rounding(self):
        assert adherence_percentage(2, 1) == 66.7
        assert adherence_percentage(9, 1) == 90.0

    def test_no_closed_tickets_is_null(self):
        assert adherence_percentage(0, 0) is None

    @pytest.mark.parametrize("value,band", [
        (100.0, "good"), (90.0, "good"), (89.9, "fair"), (75.0, "fair"), (74.9, "poor"), (None, None)
    ])
    def test_band(self, value, band):
        assert adherence_band(value) == band


class TestAggregate:
    def test_scenario_c(self, aggregator, scenario_c):
        report = aggregator.aggregate(scenario_c, now=T0 + hours(12))

        assert report.overall.total_tickets == 10
        assert report.overall.closed_met == 9
        assert report.overall.closed_violated == 1
        assert report.overall.adherence_percentage == 90.0
        assert report.overall.band == "good"

        assert report.by_priority["Critical"].adherence_percentage == 66.7
        assert report.by_priority["Critical"].band == "poor"
        assert report.by_priority["Low"].adherence_percentage == 100.0
        assert report.by_priority["High"].adherence_percentage is None
        assert report.by_priority["High"].band is None

    def test_priorities_in_canonical_order(self, aggregator, scenario_c):
        report = aggregator.aggregate(reversed(scenario_c), now=T0 + hours(12))
        assert list(report.by_priority) == ["Critical", "High", "Medium", "Low"]
        assert report.by_priority["Medium"].target_hours == 24

    def test_priority_counts_sum_to_overall(self, aggregator, make_ticket):
        now = T0 + hours(30)
        tickets = [
            make_ticket(priority="Critical", status="Open"),
            make_ticket(priority="High", status="Open", created_at=now - hours(7)),
            make_ticket(priority="Medium", status="Pending", created_at=now - hours(1)),
            make_ticket(priority="Low", status="Closed", resolved_at=T0 + hours(80)),
            make_ticket(priority="High", status="Closed", resolved_at=T0 + hours(4)),
            make_ticket(priority="Urgent", status="Open"),
        ]

        report = aggregator.aggregate(tickets, now=now)

        fields = [
            "total_tickets", "closed_met", "closed_violated",
            "open_on_track", "open_at_risk", "open_violated",
        ]
        for name in fields:
            total = sum(getattr(p, name) for p in report.by_priority.values())
            assert total == getattr(report.overall, name), name

        assert report.overall.total_tickets == 5
        assert report.overall.open_violated == 1
        assert report.overall.open_at_risk == 1
        assert report.overall.open_on_track == 1
        assert [e.ticket_id for e in report.errors] == [tickets[-1].id]

    def test_open_only_set_has_null_adherence(self, aggregator, make_ticket):
        report = aggregator.aggregate([make_ticket(status="Open")], now=T0 + hours(1))
        assert report.overall.adherence_percentage is None
        assert report.overall.open_on_track == 1

    def test_average_resolution_times(self, aggregator, scenario_c):
        report = aggregator.aggregate(scenario_c, now=T0 + hours(12))
        critical = report.average_resolution_times["Critical"]
        assert critical.closed_tickets == 3
        assert critical.average_hours == pytest.approx(3.33, abs=0.01)
        assert critical.within_target is True
        assert report.average_resolution_times["Medium"].average_hours is None
        assert report.average_resolution_times["Medium"].within_target is None

    def test_time_windows(self, aggregator, make_ticket):
        now = T0
        tickets = [
            make_ticket(status="Open", created_at=now - hours(2)),
            make_ticket(status="Open", created_at=now - hours(24 * 3)),
            make_ticket(status="Open", created_at=now - hours(24 * 20)),
            make_ticket(status="Open", created_at=now - hours(24 * 40)),
        ]

        report = aggregator.aggregate(tickets, now=now)

        assert report.time_windows["last_24h"].total_tickets == 1
        assert report.time_windows["last_7d"].total_tickets == 2
        assert report.time_windows["last_30d"].total_tickets == 3
        assert report.overall.total_tickets == 4

    def test_same_input_same_report(self, aggregator, scenario_c):
        now = T0 + hours(12)
        first = aggregator.aggregate(scenario_c, now=now)
        second = aggregator.aggregate(list(reversed(scenario_c)), now=now)
        assert first == second

    def test_echoes_policy(self, aggregator):
        report = aggregator.aggregate([], now=T0)
        assert report.sla_targets == {"Critical": 4, "High": 8, "Medium": 24, "Low": 72}
        assert report.at_risk_threshold == 0.8
        assert report.overall.total_tickets == 0


class TestAgentPerformance:
    def test_scorecard(self, aggregator, make_ticket):
        tickets = [
            make_ticket(id="a1", priority="Critical", status="Closed",
                        resolved_at=T0 + hours(2), assigned_to="alice"),
            make_ticket(id="a2", priority="Critical", status="Closed",
                        resolved_at=T0 + hours(3), assigned_to="alice"),
            make_ticket(id="b1", priority="Critical", status="Closed",
                        resolved_at=T0 + hours(5), assigned_to="bob"),
            make_ticket(id="b2", priority="Low", status="Open", assigned_to="bob"),
            make_ticket(id="k1", priority="Low", status="Open", assigned_to="carol"),
            make_ticket(id="k2", priority="Low", status="Open", assigned_to="aaron"),
            make_ticket(id="u1", priority="Low", status="Open"),
        ]

        report = aggregator.agent_performance(tickets, now=T0 + hours(12))

        assert [a.agent_id for a in report.agents] == ["alice", "bob", "aaron", "carol"]
        alice, bob = report.agents[0], report.agents[1]
        assert (alice.closed_tickets, alice.sla_violations, alice.score) == (2, 0, 20)
        assert alice.average_handle_hours == 2.5
        assert (bob.active_tickets, bob.closed_tickets, bob.sla_violations, bob.score) == (1, 1, 1, 5)
        assert report.agents[2].average_handle_hours is None

    def test_unassigned_only(self, aggregator, make_ticket):
        report = aggregator.agent_performance([make_ticket()], now=T0)
        assert report.agents == []

    def test_duplicate_ids_credit_each_record_to_its_own_agent(self, aggregator, make_ticket):
        tickets = [
            make_ticket(id="x", assigned_to="alice"),
            make_ticket(id="x", assigned_to="bob"),
        ]

        report = aggregator.agent_performance(tickets, now=T0 + hours(1))

        assert sorted((a.agent_id, a.active_tickets) for a in report.agents) == [
            ("alice", 1), ("bob", 1)
        ]

    def test_failing_ticket_does_not_shift_credit(self, aggregator, make_ticket):
        tickets = [
            make_ticket(id="bad", priority="Urgent", assigned_to="alice"),
            make_ticket(id="ok", status="Closed", resolved_at=T0 + hours(1), assigned_to="bob"),
        ]

        report = aggregator.agent_performance(tickets, now=T0 + hours(2))

        assert [(a.agent_id, a.closed_tickets) for a in report.agents] == [("bob", 1)]
        assert [e.ticket_id for e in report.errors] == ["bad"]
