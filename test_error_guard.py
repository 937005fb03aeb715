"""
Control-flow exceptions must pass through the page error guard.
"""

from __future__ import annotations

from error_guard import is_control_flow


class StopException(Exception):
    pass


class RerunException(Exception):
    pass


class SwitchPageRerun(RerunException):
    pass


def test_control_flow_detection() -> None:
    assert is_control_flow(StopException())
    assert is_control_flow(RerunException())
    assert is_control_flow(SwitchPageRerun())
    assert not is_control_flow(ValueError("boom"))
    assert not is_control_flow(PermissionError("View-only access"))


if __name__ == "__main__":
    test_control_flow_detection()
    print("PASS")
