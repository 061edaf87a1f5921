from datetime import date, datetime, timedelta

import pytest

from clubhouse.config import settings
from clubhouse.deps import get_opening_hours
from clubhouse.main import app
from clubhouse.models import Address, Appointment
from clubhouse.opening_hours import CLOSED_DAY, DEFAULT_OPENING_HOURS, week_schedule
from clubhouse.permissions import PermissionLevel


def upcoming(weekday: int) -> date:
    """A date at least a week ahead falling on `weekday` (Monday=0)."""
    day = date.today() + timedelta(days=7)
    return day + timedelta(days=(weekday - day.weekday()) % 7)


MONDAY = 0
FRIDAY = 4
SUNDAY = 6


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


# --- auth & users -----------------------------------------------------------

def test_register_and_login(client):
    resp = client.post("/users", json={"email": "ann@example.com", "password": "s3cret-pass"})
    assert resp.status_code == 201
    assert resp.json()["permission"] == PermissionLevel.REGULAR
    assert resp.json()["permission_label"] == "Regular"

    dup = client.post("/users", json={"email": "ann@example.com", "password": "s3cret-pass"})
    assert dup.status_code == 409

    bad = client.post("/auth/login", data={"username": "ann@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401

    login = client.post("/auth/login", data={"username": "ann@example.com", "password": "s3cret-pass"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "ann@example.com"
    assert me.json()["club_ids"] == []


def test_invalid_token(client):
    resp = client.get("/me", headers={"Authorization": "Bearer nonsense"})
    assert resp.status_code == 401


def test_me_reports_unknown_permission(client, make_user):
    _, headers = make_user(permission=99)
    assert client.get("/me", headers=headers).json()["permission_label"] == "Unknown"


def test_list_users_is_admin_only(client, make_club, make_user):
    club = make_club()
    _, regular = make_user(PermissionLevel.REGULAR, clubs=[club])
    _, admin = make_user(PermissionLevel.ADMIN, clubs=[club])

    assert client.get("/users", headers=regular).status_code == 403
    resp = client.get("/users", headers=admin)
    assert resp.status_code == 200
    assert len(resp.json()) == 2


def test_admin_cannot_grant_super_admin(client, make_club, make_user):
    club = make_club()
    target, _ = make_user(PermissionLevel.REGULAR, clubs=[club])
    _, admin = make_user(PermissionLevel.ADMIN, clubs=[club])
    _, super_admin = make_user(PermissionLevel.SUPER_ADMIN)

    resp = client.put(f"/users/{target.id}/permission", json={"permission": 3}, headers=admin)
    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"

    resp = client.put(f"/users/{target.id}/permission", json={"permission": 4}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["permission_label"] == "Limited"

    resp = client.put(f"/users/{target.id}/permission", json={"permission": 3}, headers=super_admin)
    assert resp.status_code == 200
    assert resp.json()["permission_label"] == "Super Admin"

    # an admin may no longer touch them
    resp = client.put(f"/users/{target.id}/permission", json={"permission": 2}, headers=admin)
    assert resp.status_code == 403


def test_permission_must_be_a_known_level(client, make_user):
    target, _ = make_user()
    _, super_admin = make_user(PermissionLevel.SUPER_ADMIN)
    resp = client.put(f"/users/{target.id}/permission", json={"permission": 7}, headers=super_admin)
    assert resp.status_code == 422


def test_admin_cannot_manage_users_of_other_clubs(client, make_club, make_user):
    mine = make_club("Mine")
    other = make_club("Other")
    colleague, _ = make_user(clubs=[mine])
    outsider, _ = make_user(clubs=[other])
    loner, _ = make_user()
    admin_user, admin = make_user(PermissionLevel.ADMIN, clubs=[mine])
    _, super_admin = make_user(PermissionLevel.SUPER_ADMIN)

    resp = client.put(f"/users/{outsider.id}/permission", json={"permission": 1}, headers=admin)
    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"
    assert client.put(f"/users/{loner.id}/permission", json={"permission": 4}, headers=admin).status_code == 403

    resp = client.put(f"/users/{colleague.id}/permission", json={"permission": 4}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["club_ids"] == [mine.id]

    listed = {u["id"] for u in client.get("/users", headers=admin).json()}
    assert listed == {colleague.id, admin_user.id}

    # super admins are not club-scoped
    resp = client.put(f"/users/{outsider.id}/permission", json={"permission": 1}, headers=super_admin)
    assert resp.status_code == 200
    assert len(client.get("/users", headers=super_admin).json()) == 5

# --- clubs ------------------------------------------------------------------

def test_club_listing_is_scoped(client, make_club, make_user):
    mine = make_club("Mine")
    make_club("Other")
    _, member = make_user(clubs=[mine])
    _, super_admin = make_user(PermissionLevel.SUPER_ADMIN)

    assert [c["name"] for c in client.get("/clubs", headers=member).json()] == ["Mine"]
    assert [c["name"] for c in client.get("/clubs", headers=super_admin).json()] == ["Mine", "Other"]


def test_only_super_admin_creates_clubs(client, make_user):
    _, admin = make_user(PermissionLevel.ADMIN)
    _, super_admin = make_user(PermissionLevel.SUPER_ADMIN)

    assert client.post("/clubs", json={"name": "New"}, headers=admin).status_code == 403
    resp = client.post("/clubs", json={"name": "New"}, headers=super_admin)
    assert resp.status_code == 201
    assert resp.json()["name"] == "New"


def test_admin_assigns_members(client, make_club, make_user):
    club = make_club()
    newcomer, _ = make_user()
    _, admin = make_user(PermissionLevel.ADMIN, clubs=[club])
    _, regular = make_user(clubs=[club])

    path = f"/clubs/{club.id}/members"
    assert client.post(path, json={"user_id": newcomer.id}, headers=regular).status_code == 403

    resp = client.post(path, json={"user_id": newcomer.id}, headers=admin)
    assert resp.status_code == 201
    assert resp.json()["club_ids"] == [club.id]

    # assigning again changes nothing
    assert client.post(path, json={"user_id": newcomer.id}, headers=admin).status_code == 201
    members = client.get(path, headers=regular).json()
    assert newcomer.id in [m["id"] for m in members]
    assert len(members) == 3


def test_admin_without_membership_is_forbidden(client, make_club, make_user):
    club = make_club()
    _, admin = make_user(PermissionLevel.ADMIN)
    resp = client.put(f"/clubs/{club.id}", json={"name": "Renamed"}, headers=admin)
    assert resp.status_code == 403


def test_missing_club_is_not_found(client, make_user):
    _, super_admin = make_user(PermissionLevel.SUPER_ADMIN)
    assert client.get("/clubs/999/members", headers=super_admin).status_code == 404


# --- addresses & consists ---------------------------------------------------

def test_address_number_unique_while_in_use(client, make_club, make_user):
    club = make_club()
    _, member = make_user(clubs=[club])
    path = f"/clubs/{club.id}/addresses"

    first = client.post(path, json={"number": 3, "description": "GP38", "in_use": True}, headers=member)
    assert first.status_code == 201

    clash = client.post(path, json={"number": 3, "description": "SD40", "in_use": True}, headers=member)
    assert clash.status_code == 409
    assert clash.json()["code"] == "NUMBER_IN_USE"

    # a parked loco may share the number
    parked = client.post(path, json={"number": 3, "description": "SD40", "in_use": False}, headers=member)
    assert parked.status_code == 201

    # editing the in-use row keeps its own number
    edit = client.put(
        f"/addresses/{first.json()['id']}",
        json={"number": 3, "description": "GP38-2", "in_use": True},
        headers=member,
    )
    assert edit.status_code == 200
    assert edit.json()["description"] == "GP38-2"

    # re-activating the parked one now clashes
    reactivate = client.put(
        f"/addresses/{parked.json()['id']}",
        json={"number": 3, "description": "SD40", "in_use": True},
        headers=member,
    )
    assert reactivate.status_code == 409

    listed = client.get(path, params={"in_use": True}, headers=member).json()
    assert [a["description"] for a in listed] == ["GP38-2"]


def test_address_mutation_rights(client, make_club, make_user):
    club = make_club()
    owner, owner_headers = make_user(clubs=[club])
    _, other = make_user(clubs=[club])
    _, admin = make_user(PermissionLevel.ADMIN, clubs=[club])
    _, outsider_admin = make_user(PermissionLevel.ADMIN)

    created = client.post(
        f"/clubs/{club.id}/addresses",
        json={"number": 11, "description": "Switcher", "in_use": True},
        headers=owner_headers,
    ).json()
    assert created["user_id"] == owner.id
    path = f"/addresses/{created['id']}"
    body = {"number": 12, "description": "Switcher", "in_use": True}

    assert client.put(path, json=body, headers=other).status_code == 403
    assert client.put(path, json=body, headers=outsider_admin).status_code == 403
    assert client.put(path, json=body, headers=admin).status_code == 200
    assert client.delete(path, headers=other).status_code == 403
    assert client.delete(path, headers=owner_headers).status_code == 204
    assert client.delete(path, headers=owner_headers).status_code == 404


def test_ownerless_address_is_admin_only(client, session, make_club, make_user):
    club = make_club()
    _, member = make_user(clubs=[club])
    _, admin = make_user(PermissionLevel.ADMIN, clubs=[club])

    orphan = Address(number=20, description="Orphan", in_use=False, user_id=None, club_id=club.id)
    session.add(orphan)
    session.commit()
    session.refresh(orphan)

    assert client.delete(f"/addresses/{orphan.id}", headers=member).status_code == 403
    assert client.delete(f"/addresses/{orphan.id}", headers=admin).status_code == 204


def test_only_admin_creates_for_someone_else(client, make_club, make_user):
    club = make_club()
    friend, _ = make_user(clubs=[club])
    _, member = make_user(clubs=[club])
    _, admin = make_user(PermissionLevel.ADMIN, clubs=[club])
    path = f"/clubs/{club.id}/addresses"
    body = {"number": 5, "description": "Gift", "in_use": False, "user_id": friend.id}

    assert client.post(path, json=body, headers=member).status_code == 403
    resp = client.post(path, json=body, headers=admin)
    assert resp.status_code == 201
    assert resp.json()["user_id"] == friend.id


def test_non_member_cannot_see_addresses(client, make_club, make_user):
    club = make_club()
    _, outsider = make_user()
    assert client.get(f"/clubs/{club.id}/addresses", headers=outsider).status_code == 403


def test_consists(client, make_club, make_user):
    club = make_club()
    _, member = make_user(clubs=[club])
    _, other = make_user(clubs=[club])
    path = f"/clubs/{club.id}/consists"

    created = client.post(path, json={"number": 101, "in_use": True}, headers=member)
    assert created.status_code == 201
    assert client.post(path, json={"number": 101, "in_use": True}, headers=other).status_code == 409

    consist_path = f"/consists/{created.json()['id']}"
    assert client.put(consist_path, json={"number": 101, "in_use": False}, headers=other).status_code == 403
    assert client.put(consist_path, json={"number": 101, "in_use": False}, headers=member).status_code == 200
    assert client.post(path, json={"number": 101, "in_use": True}, headers=other).status_code == 201
    assert len(client.get(path, headers=member).json()) == 2


# --- opening hours ----------------------------------------------------------

def test_opening_hours_for_monday(client):
    monday = upcoming(MONDAY)
    data = client.get("/opening-hours", params={"on_date": monday.isoformat()}).json()
    assert data["day_name"] == "Monday"
    assert data["is_open"] is True
    assert data["hours"] == "9:00 AM - 9:30 PM"
    assert data["slots"][0] == "9:00 AM"
    assert data["slots"][-1] == "9:30 PM"


def test_opening_hours_for_sunday(client):
    data = client.get("/opening-hours", params={"on_date": upcoming(SUNDAY).isoformat()}).json()
    assert data["is_open"] is False
    assert data["hours"] == "Closed"
    assert data["slots"] == []


def test_weekly_hours(client):
    rows = client.get("/opening-hours/week").json()
    assert rows[0] == {"day_name": "Sunday", "hours": "Closed"}
    assert rows[6] == {"day_name": "Saturday", "hours": "10:00 AM - 4:30 PM"}


def test_opening_hours_can_be_overridden(client):
    app.dependency_overrides[get_opening_hours] = lambda: week_schedule({**DEFAULT_OPENING_HOURS, 1: CLOSED_DAY})
    data = client.get("/opening-hours", params={"on_date": upcoming(MONDAY).isoformat()}).json()
    assert data["is_open"] is False
    assert data["slots"] == []


# --- appointments -----------------------------------------------------------

@pytest.fixture
def club_member(make_club, make_user):
    club = make_club()
    user, headers = make_user(clubs=[club])
    return club, user, headers


def test_create_appointment_from_slot(client, club_member):
    club, user, headers = club_member
    monday = upcoming(MONDAY)

    resp = client.post(
        f"/clubs/{club.id}/appointments",
        json={"date": monday.isoformat(), "time": "7:30 PM", "duration": 120},
        headers=headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["start_time"] == "7:30 PM"
    assert body["user_id"] == user.id
    assert body["schedule"].startswith(f"{monday.isoformat()}T19:30")


def test_create_appointment_from_timestamp(client, club_member):
    club, _, headers = club_member
    start = datetime.combine(upcoming(MONDAY), datetime.min.time()).replace(hour=9)

    resp = client.post(
        f"/clubs/{club.id}/appointments",
        json={"schedule": start.isoformat(), "duration": 30},
        headers=headers,
    )
    assert resp.status_code == 201
    assert resp.json()["start_time"] == "9:00 AM"


@pytest.mark.parametrize("duration,status", [(29, 422), (30, 201), (480, 201), (481, 422), (45, 422)])
def test_duration_bounds(client, club_member, duration, status):
    club, _, headers = club_member
    resp = client.post(
        f"/clubs/{club.id}/appointments",
        json={"date": upcoming(MONDAY).isoformat(), "time": "10:00 AM", "duration": duration},
        headers=headers,
    )
    assert resp.status_code == status


@pytest.mark.parametrize("time,code", [
    ("8:30 AM", "OUTSIDE_OPENING_HOURS"),
    ("10:00 PM", "OUTSIDE_OPENING_HOURS"),
    ("10:15 AM", "OUTSIDE_OPENING_HOURS"),
    ("ten o'clock", "INVALID_TIME_FORMAT"),
])
def test_start_time_rules(client, club_member, time, code):
    club, _, headers = club_member
    resp = client.post(
        f"/clubs/{club.id}/appointments",
        json={"date": upcoming(MONDAY).isoformat(), "time": time, "duration": 60},
        headers=headers,
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == code


def test_closed_day_rejected(client, club_member):
    club, _, headers = club_member
    resp = client.post(
        f"/clubs/{club.id}/appointments",
        json={"date": upcoming(SUNDAY).isoformat(), "time": "10:00 AM", "duration": 60},
        headers=headers,
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "CLOSED_DAY"


def test_past_appointment_rejected(client, club_member):
    club, _, headers = club_member
    last_monday = upcoming(MONDAY) - timedelta(weeks=3)
    resp = client.post(
        f"/clubs/{club.id}/appointments",
        json={"date": last_monday.isoformat(), "time": "10:00 AM", "duration": 60},
        headers=headers,
    )
    assert resp.status_code == 422


def test_start_is_required(client, club_member):
    club, _, headers = club_member
    resp = client.post(f"/clubs/{club.id}/appointments", json={"duration": 60}, headers=headers)
    assert resp.status_code == 422


def test_overlapping_appointments_are_allowed(client, club_member, make_user):
    club, _, headers = club_member
    _, other = make_user(clubs=[club])
    body = {"date": upcoming(MONDAY).isoformat(), "time": "6:00 PM", "duration": 120}

    assert client.post(f"/clubs/{club.id}/appointments", json=body, headers=headers).status_code == 201
    assert client.post(f"/clubs/{club.id}/appointments", json=body, headers=other).status_code == 201
    listed = client.get(
        f"/clubs/{club.id}/appointments",
        params={"on_date": upcoming(MONDAY).isoformat()},
        headers=headers,
    ).json()
    assert len(listed) == 2


def test_appointment_edit_and_delete_rights(client, club_member, make_user):
    club, _, owner = club_member
    _, other = make_user(clubs=[club])
    _, admin = make_user(PermissionLevel.ADMIN, clubs=[club])
    monday = upcoming(MONDAY).isoformat()

    created = client.post(
        f"/clubs/{club.id}/appointments",
        json={"date": monday, "time": "10:00 AM", "duration": 60},
        headers=owner,
    ).json()
    path = f"/appointments/{created['id']}"
    edit = {"date": monday, "time": "11:00 AM", "duration": 90}

    assert client.put(path, json=edit, headers=other).status_code == 403
    resp = client.put(path, json=edit, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["start_time"] == "11:00 AM"
    assert resp.json()["duration"] == 90

    # edits are validated like new bookings
    bad = client.put(path, json={"date": monday, "time": "11:00 PM", "duration": 90}, headers=owner)
    assert bad.status_code == 422

    assert client.delete(path, headers=other).status_code == 403
    assert client.delete(path, headers=admin).status_code == 204
    assert client.delete(path, headers=admin).status_code == 404


def test_non_member_cannot_book(client, make_club, make_user):
    club = make_club()
    _, outsider = make_user()
    resp = client.post(
        f"/clubs/{club.id}/appointments",
        json={"date": upcoming(MONDAY).isoformat(), "time": "10:00 AM", "duration": 60},
        headers=outsider,
    )
    assert resp.status_code == 403


def test_my_appointments_grouped(client, session, club_member):
    club, user, headers = club_member
    session.add(Appointment(schedule=datetime(2020, 1, 6, 10, 0), duration=60, user_id=user.id, club_id=club.id))
    session.commit()
    client.post(
        f"/clubs/{club.id}/appointments",
        json={"date": upcoming(MONDAY).isoformat(), "time": "10:00 AM", "duration": 60},
        headers=headers,
    )

    grouped = client.get("/me/appointments", headers=headers).json()
    assert len(grouped["past"]) == 1
    assert len(grouped["future"]) == 1

    upcoming_only = client.get(f"/clubs/{club.id}/appointments", params={"upcoming": True}, headers=headers).json()
    assert len(upcoming_only) == 1


# --- friday evenings --------------------------------------------------------

def test_friday_evening_signup(client, club_member, make_user, monkeypatch):
    club, user, headers = club_member
    _, other = make_user(clubs=[club])
    monkeypatch.setattr(settings, "FRIDAY_EVENING_CLUB_ID", club.id)
    friday = upcoming(FRIDAY)
    path = f"/clubs/{club.id}/friday-evenings"

    resp = client.post(f"{path}/{friday.isoformat()}/signup", headers=headers)
    assert resp.status_code == 201
    assert resp.json()["start_time"] == "7:00 PM"
    assert resp.json()["duration"] == 120

    assert client.post(f"{path}/{friday.isoformat()}/signup", headers=headers).status_code == 409
    assert client.post(f"{path}/{friday.isoformat()}/signup", headers=other).status_code == 201

    evenings = client.get(path, headers=headers).json()
    assert len(evenings) == settings.FRIDAYS_TO_SHOW
    evening = next(e for e in evenings if e["date"] == friday.isoformat())
    assert evening["attendee_count"] == 2
    assert evening["enough_attendees"] is True
    assert evening["is_user_attending"] is True
    assert user.id in evening["attendees"]


def test_friday_signup_needs_a_friday(client, club_member, monkeypatch):
    club, _, headers = club_member
    monkeypatch.setattr(settings, "FRIDAY_EVENING_CLUB_ID", club.id)
    resp = client.post(f"/clubs/{club.id}/friday-evenings/{upcoming(MONDAY).isoformat()}/signup", headers=headers)
    assert resp.status_code == 422


def test_friday_evenings_disabled_for_other_clubs(client, club_member, monkeypatch):
    club, _, headers = club_member
    monkeypatch.setattr(settings, "FRIDAY_EVENING_CLUB_ID", None)
    assert client.get(f"/clubs/{club.id}/friday-evenings", headers=headers).status_code == 404


def test_numbers_are_scoped_per_club(client, make_club, make_user):
    first = make_club("First")
    second = make_club("Second")
    _, member = make_user(clubs=[first, second])
    body = {"number": 7, "description": "Geep", "in_use": True}

    assert client.post(f"/clubs/{first.id}/addresses", json=body, headers=member).status_code == 201
    assert client.post(f"/clubs/{second.id}/addresses", json=body, headers=member).status_code == 201
