"""
Subscription status from the check-subscription function.
"""

from __future__ import annotations

from datetime import datetime, timezone

from conftest import FakeClient
from subscription import SubscriptionInfo, check_subscription, is_active, is_trialing, period_end_label, trial_days_left

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_check_subscription_parses_payload() -> None:
    client = FakeClient()
    client.function_results["check-subscription"] = {
        "subscribed": False,
        "status": "trialing",
        "trial_ends_at": "2025-06-04T00:00:00Z",
        "plan_type": "monthly",
    }
    result = check_subscription(client=client)
    assert result.ok
    info = result.data
    assert is_trialing(info) and not is_active(info)
    assert info.plan_type == "monthly"
    assert client.function_calls == [("check-subscription", {})]


def test_check_subscription_errors() -> None:
    client = FakeClient()
    client.function_results["check-subscription"] = {"error": "No customer"}
    assert check_subscription(client=client).error == "No customer"

    client.function_results["check-subscription"] = RuntimeError("timeout")
    result = check_subscription(client=client)
    assert not result.ok and result.data is None

    client.function_results["check-subscription"] = ["not", "a", "dict"]
    assert check_subscription(client=client).error == "Unexpected subscription response"


def test_trial_days_left_rounds_up() -> None:
    info = SubscriptionInfo(status="trialing", trial_ends_at="2025-06-04T00:00:00Z")
    assert trial_days_left(info, NOW) == 3
    info = SubscriptionInfo(status="trialing", trial_ends_at="2025-06-01T13:00:00")
    assert trial_days_left(info, NOW) == 1
    info = SubscriptionInfo(status="trialing", trial_ends_at="2025-05-01T00:00:00Z")
    assert trial_days_left(info, NOW) == 0
    assert trial_days_left(SubscriptionInfo(), NOW) is None
    assert trial_days_left(None, NOW) is None


def test_active_and_period_end() -> None:
    info = SubscriptionInfo.from_payload({"subscribed": True, "status": "active", "current_period_end": "2025-07-01T00:00:00Z"})
    assert is_active(info) and not is_trialing(info)
    assert period_end_label(info) == "01 Jul 2025"
    assert period_end_label(SubscriptionInfo()) is None
    assert SubscriptionInfo.from_payload({"subscribed": "yes"}).subscribed is False


if __name__ == "__main__":
    test_check_subscription_parses_payload()
    test_check_subscription_errors()
    test_trial_days_left_rounds_up()
    test_active_and_period_end()
    print("PASS")
