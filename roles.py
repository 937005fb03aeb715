from __future__ import annotations

DB_ROLES = ("admin", "moderator", "user", "super_admin")
UI_ROLES = ("admin", "member", "viewer")

_DB_TO_UI = {"admin": "admin", "moderator": "member", "user": "viewer"}
_UI_TO_DB = {ui: db for db, ui in _DB_TO_UI.items()}

UI_ROLE_LABELS = {
    "admin": "Full Access",
    "member": "Manager",
    "viewer": "Team",
}


def db_role_to_ui(db_role: str | None) -> str | None:
    return _DB_TO_UI.get(db_role or "")


def ui_role_to_db(ui_role: str) -> str:
    try:
        return _UI_TO_DB[ui_role]
    except KeyError:
        raise ValueError(f"Unknown access role: {ui_role!r}") from None


def role_label(db_role: str | None) -> str:
    ui_role = db_role_to_ui(db_role)
    return UI_ROLE_LABELS.get(ui_role or "", "No access")
