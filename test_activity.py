"""
Data room activity log and super admin audit log reads.
"""

from __future__ import annotations

from activity import list_audit_logs, list_data_room_activity, list_data_rooms, log_data_room_activity
from conftest import FakeClient


def test_log_activity_for_member_and_guest() -> None:
    client = FakeClient()
    assert log_data_room_activity("room-1", "org-a", "u1", "Ada", "ada@example.com", "room_viewed", client=client)
    assert log_data_room_activity(
        "room-1", "org-a", "u9", "Guest", "guest@example.com", "file_downloaded", {"file": "deck.pdf"}, is_guest=True, client=client
    )
    member, guest = client.tables["data_room_activity"]
    assert member["user_id"] == "u1" and member["is_guest"] is False and member["details"] is None
    assert guest["user_id"] is None and guest["is_guest"] is True
    assert guest["details"] == {"file": "deck.pdf"}


def test_log_failure_returns_false() -> None:
    client = FakeClient()
    client.failing_tables.add("data_room_activity")
    assert log_data_room_activity("room-1", "org-a", "u1", "Ada", "a@example.com", "room_viewed", client=client) is False


def test_reads_order_and_limit() -> None:
    client = FakeClient(
        {
            "data_rooms": [
                {"id": "r2", "name": "Series A", "organization_id": "org-a"},
                {"id": "r1", "name": "Board", "organization_id": "org-a"},
                {"id": "r3", "name": "Gone", "organization_id": "org-a", "deleted_at": "2025-01-01T00:00:00Z"},
            ],
            "data_room_activity": [
                {"data_room_id": "r1", "action": "a", "created_at": "2025-01-01T00:00:00Z"},
                {"data_room_id": "r1", "action": "b", "created_at": "2025-02-01T00:00:00Z"},
                {"data_room_id": "r2", "action": "c", "created_at": "2025-03-01T00:00:00Z"},
            ],
            "super_admin_audit_logs": [
                {"action": "suspend", "created_at": "2025-01-01T00:00:00Z"},
                {"action": "restore", "created_at": "2025-04-01T00:00:00Z"},
            ],
        }
    )
    assert [r["name"] for r in list_data_rooms("org-a", client=client)] == ["Board", "Series A"]
    assert list_data_rooms(None) == []
    assert [r["action"] for r in list_data_room_activity("r1", client=client)] == ["b", "a"]
    assert len(list_data_room_activity("r1", 1, client=client)) == 1
    assert list_data_room_activity(None) == []
    assert [r["action"] for r in list_audit_logs(client=client)] == ["restore", "suspend"]

    client.failing_tables.add("super_admin_audit_logs")
    assert list_audit_logs(client=client) == []


if __name__ == "__main__":
    test_log_activity_for_member_and_guest()
    test_log_failure_returns_false()
    test_reads_order_and_limit()
    print("PASS")
