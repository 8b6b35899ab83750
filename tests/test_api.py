import pytest
from fastapi.testclient import TestClient

from servicedesk.config import Settings
from servicedesk.main import create_app

NOW = "2024-01-10T15:00:00+00:00"


@pytest.fixture
def client(tmp_path):
    settings = Settings(
        sla_policy_path=tmp_path / "sla_policy.yaml",
        watch_sla_policy=False,
        environment="development",
    )
    with TestClient(create_app(settings)) as test_client:
        yield test_client


def _ticket(id, priority="Critical", status="Open", **fields):
    ticket = {
        "id": id,
        "priority": priority,
        "status": status,
        "created_at": "2024-01-10T10:00:00Z",
    }
    ticket.update(fields)
    return ticket


class TestService:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["checks"]["sla_policy"] == "loaded"
        assert body["checks"]["policy_watcher"] == "stopped"

    def test_root(self, client):
        body = client.get("/").json()
        assert set(body["modules"]) == {"sla", "workflow", "alerts"}

    def test_correlation_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"


class TestSLAEndpoints:
    def test_policy_defaults(self, client):
        body = client.get("/sla/policy").json()
        assert body["sla_targets"] == {"Critical": 4, "High": 8, "Medium": 24, "Low": 72}
        assert body["at_risk_threshold"] == 0.8
        assert [b["label"] for b in body["aging_buckets"]][-1] == "72+ hours"

    def test_evaluate(self, client):
        response = client.post("/sla/evaluate", json={
            "tickets": [
                _ticket("1"),
                _ticket(2, priority="Low"),
                _ticket("3", priority="Urgent"),
                _ticket("4", created_at="not a date"),
            ],
            "now": NOW,
        })
        assert response.status_code == 200
        body = response.json()

        results = {r["ticket_id"]: r for r in body["results"]}
        assert results["1"]["compliance"] == "violated"
        assert results["1"]["elapsed_display"] == "5h"
        assert results["2"]["compliance"] == "on_track"
        assert [(e["ticket_id"], e["error_type"]) for e in body["errors"]] == [
            ("3", "UnknownPriority"),
            ("4", "InvalidTicket"),
        ]

    def test_adherence(self, client):
        tickets = [
            _ticket("c1", status="Closed", resolved_at="2024-01-10T12:00:00Z"),
            _ticket("c2", status="Closed", resolved_at="2024-01-10T12:30:00Z"),
            _ticket("c3", status="Closed", resolved_at="2024-01-10T15:00:00Z"),
        ]
        body = client.post("/sla/adherence", json={"tickets": tickets, "now": NOW}).json()
        assert body["overall"]["adherence_percentage"] == 66.7
        assert body["by_priority"]["Critical"]["closed_violated"] == 1
        assert body["by_priority"]["Low"]["adherence_percentage"] is None
        assert body["time_windows"]["last_24h"]["total_tickets"] == 3

    def test_aging(self, client):
        tickets = [
            _ticket("a", status="New"),
            _ticket("b", status="Closed", resolved_at="2024-01-10T11:00:00Z"),
        ]
        body = client.post("/sla/aging", json={"tickets": tickets, "now": NOW}).json()
        assert body["total_open_tickets"] == 1
        assert body["buckets"][0]["ticket_ids"] == ["a"]
        assert body["average_age_hours"] == 5.0

    def test_agent_performance(self, client):
        tickets = [
            _ticket("a", status="Closed", resolved_at="2024-01-10T11:00:00Z", assigned_to="alice"),
            _ticket("b", assigned_to="bob"),
        ]
        body = client.post("/sla/agent-performance", json={"tickets": tickets, "now": NOW}).json()
        assert [(a["agent_id"], a["score"]) for a in body["agents"]] == [("alice", 10), ("bob", -5)]

    def test_bad_record_does_not_fail_adherence(self, client):
        tickets = [
            _ticket("ok", priority="High", status="Closed", resolved_at="2024-01-10T12:00:00Z"),
            _ticket("bad", priority=None),
        ]
        response = client.post("/sla/adherence", json={"tickets": tickets, "now": NOW})

        assert response.status_code == 200
        body = response.json()
        assert [(e["ticket_id"], e["error_type"]) for e in body["errors"]] == [("bad", "UnknownPriority")]
        assert body["overall"]["adherence_percentage"] == 100.0

    def test_missing_fields_are_isolated_per_ticket(self, client):
        tickets = [
            _ticket("ok"),
            {"id": "no-status", "priority": "Low", "created_at": "2024-01-10T10:00:00Z"},
            {"id": "no-priority", "status": "Open", "created_at": "2024-01-10T10:00:00Z"},
        ]
        response = client.post("/sla/evaluate", json={"tickets": tickets, "now": NOW})

        assert response.status_code == 200
        body = response.json()
        assert [r["ticket_id"] for r in body["results"]] == ["ok"]
        assert [(e["ticket_id"], e["error_type"]) for e in body["errors"]] == [
            ("no-priority", "UnknownPriority"),
            ("no-status", "InvalidTicket"),
        ]

    def test_invalid_body(self, client):
        assert client.post("/sla/evaluate", json={"tickets": [{"priority": "High"}]}).status_code == 422


class TestWorkflowEndpoints:
    def test_workflow(self, client):
        body = client.get("/status/workflow").json()
        assert [s["name"] for s in body["statuses"]] == ["New", "Open", "Pending", "Closed"]
        edges = {(e["from_status"], e["to_status"]) for e in body["transitions"]}
        assert ("New", "Closed") not in edges
        assert ("New", "Open") in edges
        assert body["role_permissions"]["Normal User"] == []
        assert body["creator_can_cancel"] is False

    def test_allowed_transitions(self, client):
        body = client.get("/status/allowed-transitions/Pending").json()
        assert body["allowed_transitions"] == ["Open", "Closed"]
        assert client.get("/status/allowed-transitions/Closed").json()["allowed_transitions"] == []

    def test_validate_rejection(self, client):
        body = client.post("/status/validate", json={
            "role": "Normal User",
            "current_status": "Open",
            "target_status": "Pending",
            "creator_id": "u1",
            "requester_id": "u1",
        }).json()
        assert body["allowed"] is False
        assert body["code"] == "creator_after_new"
        assert body["allowed_transitions"] == []

    def test_apply_close(self, client):
        response = client.post("/status/apply", json={
            "ticket": _ticket("9", ticket_id="TKT-9", created_by="u1"),
            "target_status": "Closed",
            "role": "Technical User",
            "requester_id": "agent-1",
            "now": NOW,
        })
        assert response.status_code == 200
        body = response.json()
        assert body["applied"] is True
        assert body["ticket"]["status"] == "Closed"
        assert body["ticket"]["resolved_at"].startswith("2024-01-10T15:00:00")
        assert body["alert"]["alert_type"] == "status_change"
        assert body["alert"]["recipient_id"] == "u1"
        assert body["alert"]["title"] == "Ticket TKT-9 was closed"

    def test_apply_already_closed(self, client):
        body = client.post("/status/apply", json={
            "ticket": _ticket("9", status="Closed", resolved_at="2024-01-10T12:00:00Z"),
            "target_status": "Closed",
            "role": "Technical User",
            "now": NOW,
        }).json()
        assert body["already_closed"] is True
        assert body["applied"] is False
        assert body["alert"] is None
        assert body["ticket"]["resolved_at"].startswith("2024-01-10T12:00:00")

    def test_apply_illegal_is_conflict(self, client):
        response = client.post("/status/apply", json={
            "ticket": _ticket("9", status="New"),
            "target_status": "Closed",
            "role": "System Admin",
            "requester_id": "admin",
        })
        assert response.status_code == 409
        body = response.json()
        assert body["error_type"] == "IllegalTransition"
        assert body["details"]["code"] == "not_actioned"
        assert body["details"]["reason"] == "must be actioned before closing"


class TestAlertEndpoints:
    def test_classify(self, client):
        response = client.post("/alerts/classify", json={"event": {
            "kind": "sla_violation",
            "ticket_id": "42",
            "priority": "Critical",
            "elapsed_hours": 5,
            "target_hours": 4,
            "occurred_at": NOW,
            "assigned_to": "agent-7",
        }})
        assert response.status_code == 200
        body = response.json()
        assert body["alert_type"] == "sla_violation"
        assert body["severity"] == "critical"
        assert body["recipient_id"] == "agent-7"

    def test_unknown_kind(self, client):
        response = client.post("/alerts/classify", json={"event": {"kind": "escalation", "ticket_id": "1"}})
        assert response.status_code == 422
