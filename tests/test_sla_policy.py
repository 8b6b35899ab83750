import pytest
from pydantic import ValidationError

from servicedesk.config import Priority
from servicedesk.core import ConfigurationException, UnknownPriority
from servicedesk.sla.domain import DEFAULT_AGING_BUCKETS, SLAPolicy


def _buckets(*bounds):
    return [
        {"label": f"b{i}", "lower_hours": lo, "upper_hours": hi, "color": "gray"}
        for i, (lo, hi) in enumerate(bounds)
    ]


class TestDefaults:
    def test_targets(self, policy):
        assert policy.target_hours(Priority.CRITICAL) == 4
        assert policy.target_hours("High") == 8
        assert policy.target_hours("Medium") == 24
        assert policy.target_hours(Priority.LOW) == 72
        assert policy.at_risk_threshold == 0.8

    def test_unknown_priority_raises(self, policy):
        with pytest.raises(UnknownPriority):
            policy.target_hours("Urgent")

    def test_priority_lookup_is_case_sensitive(self, policy):
        with pytest.raises(UnknownPriority):
            policy.target_hours("critical")

    def test_default_buckets(self, policy):
        assert policy.aging_buckets == DEFAULT_AGING_BUCKETS
        assert [b.color for b in policy.aging_buckets] == ["blue", "amber", "orange", "red"]


class TestBucketFor:
    @pytest.mark.parametrize("elapsed,label", [
        (0, "0-24 hours"),
        (23.99, "0-24 hours"),
        (24, "24-48 hours"),
        (47.5, "24-48 hours"),
        (48, "48-72 hours"),
        (72, "72+ hours"),
        (1000, "72+ hours"),
    ])
    def test_boundaries(self, policy, elapsed, label):
        assert policy.bucket_for(elapsed).label == label


class TestFromMapping:
    def test_overrides(self):
        policy = SLAPolicy.from_mapping({
            "sla_targets": {"Critical": 2, "High": 6, "Medium": 12, "Low": 48},
            "at_risk_threshold": 0.75,
        })
        assert policy.target_hours("Critical") == 2
        assert policy.at_risk_threshold == 0.75

    def test_missing_priority(self):
        with pytest.raises(ConfigurationException):
            SLAPolicy.from_mapping({"sla_targets": {"Critical": 2, "High": 6, "Medium": 12}})

    def test_unknown_priority(self):
        with pytest.raises(ConfigurationException):
            SLAPolicy.from_mapping({
                "sla_targets": {"Critical": 2, "High": 6, "Medium": 12, "Low": 48, "Urgent": 1}
            })

    @pytest.mark.parametrize("target", [0, -1, float("nan"), float("inf")])
    def test_non_positive_target(self, target):
        with pytest.raises(ConfigurationException):
            SLAPolicy.from_mapping({
                "sla_targets": {"Critical": target, "High": 6, "Medium": 12, "Low": 48}
            })

    @pytest.mark.parametrize("threshold", [0, 1, 1.5])
    def test_threshold_out_of_range(self, threshold):
        with pytest.raises(ConfigurationException):
            SLAPolicy.from_mapping({"at_risk_threshold": threshold})

    def test_custom_buckets(self):
        policy = SLAPolicy.from_mapping({"aging_buckets": _buckets((0, 8), (8, None))})
        assert policy.bucket_for(7.9).label == "b0"
        assert policy.bucket_for(8).label == "b1"

    @pytest.mark.parametrize("bounds", [
        ((1, 8), (8, None)),
        ((0, 8), (10, None)),
        ((0, 8), (8, 20)),
        ((0, None), (8, None)),
    ])
    def test_buckets_must_partition(self, bounds):
        with pytest.raises(ConfigurationException):
            SLAPolicy.from_mapping({"aging_buckets": _buckets(*bounds)})

    def test_policy_is_immutable(self, policy):
        with pytest.raises(ValidationError):
            policy.at_risk_threshold = 0.5
