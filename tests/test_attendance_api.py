import json
from datetime import datetime, timedelta

import pytest
from bson import ObjectId
from pymongo.errors import BulkWriteError, DuplicateKeyError

from models.amavasya import Amavasya
from models.amavasya_user_location import AmavasyaUserLocation
from tests.conftest import make_user

BASE = "/api/v1/amavasyaUserLocation"


def add_event(db, year, month, day=15):
    start = datetime(year, month, day)
    doc = Amavasya(start.strftime("%B"), year, start, endDate=start + timedelta(hours=20)).to_dict()
    return db.amavasyas.insert_one(doc).inserted_id


def assign(client, headers, amavasya_id, user_id, location_id, note=None):
    return client.post(BASE, json={
        "amavasyaId": str(amavasya_id),
        "userId": str(user_id),
        "locationId": str(location_id),
        "note": note,
    }, headers=headers)


@pytest.fixture
def events(db):
    """January, February and March 2024, already past."""
    return [add_event(db, 2024, month) for month in (1, 2, 3)]


# ---------------- Amavasya ----------------

def test_amavasya_end_before_start_rejected(client, admin_headers):
    response = client.post("/api/v1/amavasya", json={
        "month": "April", "year": 2024,
        "startDate": "2024-04-08T00:00:00", "endDate": "2024-04-07T00:00:00",
    }, headers=admin_headers)
    assert response.status_code == 400


def test_amavasya_list_oldest_first(client, admin_headers, db):
    add_event(db, 2024, 5)
    add_event(db, 2024, 2)
    add_event(db, 2023, 12)

    items = client.get("/api/v1/amavasya?year=2024", headers=admin_headers).get_json()["data"]["items"]
    assert [i["month"] for i in items] == ["February", "May"]


# ---------------- Assignments ----------------

def test_assignment_duplicate_rejected(client, admin_headers, events, sevak, location):
    first = assign(client, admin_headers, events[0], sevak["_id"], location["_id"], "gate duty")
    assert first.status_code == 201

    again = assign(client, admin_headers, events[0], sevak["_id"], location["_id"])
    assert again.status_code == 400
    assert again.get_json()["message"] == "User already assigned to this amavasya"


def test_assignment_unknown_references(client, admin_headers, events, sevak, location):
    assert assign(client, admin_headers, ObjectId(), sevak["_id"], location["_id"]).status_code == 404
    assert assign(client, admin_headers, events[0], ObjectId(), location["_id"]).status_code == 404
    assert assign(client, admin_headers, events[0], sevak["_id"], ObjectId()).status_code == 404


def test_assignment_list_is_populated(client, admin_headers, events, sevak, location):
    assign(client, admin_headers, events[0], sevak["_id"], location["_id"])

    data = client.get(f"{BASE}?userId={sevak['_id']}", headers=admin_headers).get_json()["data"]
    item = data["items"][0]
    assert data["total"] == 1
    assert item["user"]["userName"] == "Ramesh Patel"
    assert item["location"]["name"] == "Mandir"
    assert item["amavasya"]["month"] == "January"

    data = client.get(f"{BASE}?q=mandir", headers=admin_headers).get_json()["data"]
    assert data["total"] == 1


def test_assignment_update_and_delete(client, admin_headers, db, events, sevak, location):
    record = assign(client, admin_headers, events[0], sevak["_id"], location["_id"]).get_json()["data"]
    other = db.locations.find_one({"name": "Bhojnalaya"})

    updated = client.put(f"{BASE}/{record['_id']}", json={"locationId": str(other["_id"]), "note": "serving"},
                         headers=admin_headers)
    assert updated.status_code == 200
    assert updated.get_json()["data"]["locationId"] == str(other["_id"])

    fetched = client.get(f"{BASE}/{record['_id']}", headers=admin_headers).get_json()["data"]
    assert fetched["location"]["name"] == "Bhojnalaya"

    assert client.delete(f"{BASE}/{record['_id']}", headers=admin_headers).status_code == 200
    assert client.get(f"{BASE}/{record['_id']}", headers=admin_headers).status_code == 404


def test_assignment_update_cannot_create_duplicate(client, admin_headers, events, sevak, location):
    assign(client, admin_headers, events[0], sevak["_id"], location["_id"])
    record = assign(client, admin_headers, events[1], sevak["_id"], location["_id"]).get_json()["data"]

    response = client.put(f"{BASE}/{record['_id']}", json={"amavasyaId": str(events[0])}, headers=admin_headers)
    assert response.status_code == 400


def test_bulk_assignment_skips_existing(client, admin_headers, db, events, sevak, location):
    other = make_user(db, "Mahesh Joshi", "mahesh@example.com", "9988776655")
    assign(client, admin_headers, events[0], sevak["_id"], location["_id"])

    body = {
        "amavasyaId": str(events[0]),
        "locationId": str(location["_id"]),
        "userIds": [str(sevak["_id"]), str(other["_id"])],
    }
    response = client.post(f"{BASE}/bulk", json=body, headers=admin_headers)
    assert response.status_code == 201
    assert response.get_json()["data"] == {"inserted": 1, "skipped": 1}

    again = client.post(f"{BASE}/bulk", json=body, headers=admin_headers)
    assert again.status_code == 200
    assert again.get_json()["data"] == {"inserted": 0, "skipped": 2}
    assert db.amavasya_user_locations.count_documents({"amavasyaId": events[0]}) == 2


def test_bulk_assignment_needs_users(client, admin_headers, events, location):
    response = client.post(f"{BASE}/bulk", json={
        "amavasyaId": str(events[0]), "locationId": str(location["_id"]), "userIds": [],
    }, headers=admin_headers)
    assert response.status_code == 400


def test_sevak_cannot_assign(client, sevak_headers, events, sevak, location):
    assert assign(client, sevak_headers, events[0], sevak["_id"], location["_id"]).status_code == 403


# ---------------- Attendance ----------------

def test_user_attendance(client, admin_headers, db, events, sevak, location):
    add_event(db, datetime.utcnow().year + 1, 6)
    assign(client, admin_headers, events[0], sevak["_id"], location["_id"])
    assign(client, admin_headers, events[2], sevak["_id"], location["_id"], "shoe stand")

    response = client.get(f"{BASE}/userAttendance/{sevak['_id']}", headers=admin_headers)
    data = response.get_json()["data"]

    assert response.status_code == 200
    assert data["totalAmavasya"] == 3
    assert data["present"] == 2
    assert data["absent"] == 1
    assert data["continuousPresentCount"] == 1
    assert data["upcoming"] == 1
    assert data["user"]["userName"] == "Ramesh Patel"
    assert [i["status"] for i in data["items"]] == ["Present", "Absent", "Present"]
    assert data["items"][2]["location"] == "Mandir"
    assert data["items"][2]["note"] == "shoe stand"


def test_user_attendance_filters_only_items(client, admin_headers, events, sevak, location):
    assign(client, admin_headers, events[2], sevak["_id"], location["_id"])

    data = client.get(f"{BASE}/userAttendance/{sevak['_id']}?status=Absent", headers=admin_headers).get_json()["data"]
    assert [i["month"] for i in data["items"]] == ["January", "February"]
    assert data["totalAmavasya"] == 3
    assert data["continuousPresentCount"] == 1

    data = client.get(f"{BASE}/userAttendance/{sevak['_id']}?search=feb", headers=admin_headers).get_json()["data"]
    assert [i["month"] for i in data["items"]] == ["February"]


def test_user_attendance_year(client, admin_headers, db, events, sevak):
    add_event(db, 2023, 12)
    data = client.get(f"{BASE}/userAttendance/{sevak['_id']}?year=2023", headers=admin_headers).get_json()["data"]
    assert data["totalAmavasya"] == 1

    assert client.get(f"{BASE}/userAttendance/{sevak['_id']}?year=abc", headers=admin_headers).status_code == 400


def test_user_attendance_unknown_or_invalid_user(client, admin_headers):
    assert client.get(f"{BASE}/userAttendance/{ObjectId()}", headers=admin_headers).status_code == 404
    assert client.get(f"{BASE}/userAttendance/nope", headers=admin_headers).status_code == 400


def test_sevak_can_view_attendance(client, sevak_headers, sevak):
    response = client.get(f"{BASE}/userAttendance/{sevak['_id']}", headers=sevak_headers)
    assert response.status_code == 200
    assert response.get_json()["data"]["totalAmavasya"] == 0


# ---------------- Exports ----------------

@pytest.mark.parametrize("fmt, mimetype", [
    ("csv", "text/csv"),
    ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
    ("pdf", "application/pdf"),
])
def test_attendance_export(client, admin_headers, events, sevak, location, fmt, mimetype):
    assign(client, admin_headers, events[0], sevak["_id"], location["_id"])

    response = client.get(f"{BASE}/userAttendance/{sevak['_id']}/export?format={fmt}", headers=admin_headers)
    assert response.status_code == 200
    assert response.mimetype == mimetype
    assert f"attendance_Ramesh_Patel.{fmt}" in response.headers["Content-Disposition"]


def test_attendance_export_csv_rows(client, admin_headers, events, sevak, location):
    assign(client, admin_headers, events[0], sevak["_id"], location["_id"])

    text = client.get(f"{BASE}/userAttendance/{sevak['_id']}/export", headers=admin_headers).get_data(as_text=True)
    lines = text.splitlines()
    assert lines[0] == "Month,Year,Start Date,Status,Location,Note"
    assert lines[1].startswith("January,2024,2024-01-15,Present,Mandir")
    assert lines[2].startswith("February,2024,2024-02-15,Absent")


def test_attendance_export_bad_format(client, admin_headers, sevak):
    response = client.get(f"{BASE}/userAttendance/{sevak['_id']}/export?format=doc", headers=admin_headers)
    assert response.status_code == 400


def test_sevak_cannot_export(client, sevak_headers, sevak):
    response = client.get(f"{BASE}/userAttendance/{sevak['_id']}/export", headers=sevak_headers)
    assert response.status_code == 403


# ---------------- Role permissions alias ----------------

def test_role_permission_alias(client, admin_headers, sevak_role):
    rows = client.get(f"{BASE}/permission/{sevak_role['_id']}", headers=admin_headers).get_json()["data"]["items"]
    assert {r["activityName"]: r["permissionNames"] for r in rows} == {
        "DASHBOARD": ["VIEW LIST", "VIEW DETAILS"],
        "ATTENDANCE": ["VIEW LIST", "VIEW DETAILS"],
    }


# ---------------- Dashboard ----------------

def test_dashboard_counts(client, admin_headers, events, sevak, location):
    assign(client, admin_headers, events[0], sevak["_id"], location["_id"])
    data = client.get("/api/v1/dashboard/counts", headers=admin_headers).get_json()["data"]

    assert data == {
        "users": 2,
        "roles": 2,
        "locations": 3,
        "permissions": 7,
        "amavasya": 3,
        "amavasyaUserLocations": 1,
    }


def test_dashboard_user_attendance_count(client, admin_headers, db, events, sevak, location):
    other = make_user(db, "Mahesh Joshi", "mahesh@example.com", "9988776655")
    for event in events:
        assign(client, admin_headers, event, sevak["_id"], location["_id"])
    assign(client, admin_headers, events[0], other["_id"], location["_id"])

    data = client.get("/api/v1/dashboard/userAttendanceCount", headers=admin_headers).get_json()["data"]
    assert data["totalUsers"] == 2
    assert [(i["userName"], i["totalAttendance"]) for i in data["items"]] == [
        ("Ramesh Patel", 3),
        ("Mahesh Joshi", 1),
    ]

    data = client.get("/api/v1/dashboard/userAttendanceCount?search=mahesh", headers=admin_headers).get_json()["data"]
    assert [i["userName"] for i in data["items"]] == ["Mahesh Joshi"]


def test_dashboard_timeline(client, sevak_headers, db):
    now = datetime.utcnow()
    db.amavasyas.insert_one(Amavasya(now.strftime("%B"), now.year, now).to_dict())
    add_event(db, 2020, 1)

    items = client.get("/api/v1/dashboard/amavasya", headers=sevak_headers).get_json()["data"]["items"]
    assert [i["timeStatus"] for i in items] == ["CURRENT"]


# ---------------- Wire format ----------------

def test_ids_and_dates_are_plain_strings(client, admin_headers, events, sevak, location):
    response = assign(client, admin_headers, events[0], sevak["_id"], location["_id"])
    raw = response.get_data(as_text=True)

    assert '"$oid"' not in raw
    assert '"$date"' not in raw

    data = json.loads(raw)["data"]
    assert data["amavasyaId"] == str(events[0])
    assert data["userId"] == str(sevak["_id"])
    datetime.fromisoformat(data["createdAt"])


def test_attendance_payload_dates_are_iso(client, admin_headers, events, sevak):
    raw = client.get(f"{BASE}/userAttendance/{sevak['_id']}", headers=admin_headers).get_data(as_text=True)

    assert '"$oid"' not in raw
    item = json.loads(raw)["data"]["items"][0]
    assert item["amavasyaId"] == str(events[0])
    assert item["startDate"] == "2024-01-15T00:00:00"


# ---------------- Null updates ----------------

def test_amavasya_update_rejects_null_required_fields(client, admin_headers, db, events):
    for body in ({"startDate": None}, {"month": None}, {"year": None}):
        response = client.put(f"/api/v1/amavasya/{events[0]}", json=body, headers=admin_headers)
        assert response.status_code == 400

    stored = db.amavasyas.find_one({"_id": events[0]})
    assert stored["startDate"] == datetime(2024, 1, 15)
    assert stored["month"] == "January"


def test_amavasya_update_can_clear_end_date(client, admin_headers, db, events):
    response = client.put(f"/api/v1/amavasya/{events[0]}", json={"endDate": None}, headers=admin_headers)

    assert response.status_code == 200
    assert db.amavasyas.find_one({"_id": events[0]})["endDate"] is None


def test_assignment_update_rejects_null_ids(client, admin_headers, events, sevak, location):
    record = assign(client, admin_headers, events[0], sevak["_id"], location["_id"]).get_json()["data"]

    response = client.put(f"{BASE}/{record['_id']}", json={"locationId": None}, headers=admin_headers)
    assert response.status_code == 400


# ---------------- Concurrent assignments ----------------

class CollidingCollection:
    """Wraps the real collection; writes fail as if another request assigned first."""

    def __init__(self, collection, inserted=0):
        self._collection = collection
        self._inserted = inserted

    def __getattr__(self, name):
        return getattr(self._collection, name)

    def insert_many(self, documents, ordered=True):
        errors = [
            {"index": i, "code": 11000, "errmsg": "E11000 duplicate key error"}
            for i in range(self._inserted, len(documents))
        ]
        raise BulkWriteError({"nInserted": self._inserted, "writeErrors": errors})

    def find_one_and_update(self, *args, **kwargs):
        raise DuplicateKeyError("E11000 duplicate key error")


def collide(monkeypatch, db, inserted=0):
    wrapper = CollidingCollection(db.amavasya_user_locations, inserted)
    monkeypatch.setattr(AmavasyaUserLocation, "collection", staticmethod(lambda: wrapper))


def test_bulk_assignment_concurrent_duplicates_are_skipped(client, admin_headers, db, events, sevak, location,
                                                            monkeypatch):
    other = make_user(db, "Mahesh Joshi", "mahesh@example.com", "9988776655")
    collide(monkeypatch, db, inserted=1)

    response = client.post(f"{BASE}/bulk", json={
        "amavasyaId": str(events[0]),
        "locationId": str(location["_id"]),
        "userIds": [str(sevak["_id"]), str(other["_id"])],
    }, headers=admin_headers)

    assert response.status_code == 201
    assert response.get_json()["data"] == {"inserted": 1, "skipped": 1}


def test_bulk_assignment_all_taken_concurrently(client, admin_headers, db, events, sevak, location, monkeypatch):
    collide(monkeypatch, db)

    response = client.post(f"{BASE}/bulk", json={
        "amavasyaId": str(events[0]), "locationId": str(location["_id"]), "userIds": [str(sevak["_id"])],
    }, headers=admin_headers)

    assert response.status_code == 200
    assert response.get_json()["data"] == {"inserted": 0, "skipped": 1}


def test_assignment_update_concurrent_duplicate(client, admin_headers, db, events, sevak, location, monkeypatch):
    record = assign(client, admin_headers, events[0], sevak["_id"], location["_id"]).get_json()["data"]
    collide(monkeypatch, db)

    response = client.put(f"{BASE}/{record['_id']}", json={"amavasyaId": str(events[1])}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["message"] == "User already assigned to this amavasya"
