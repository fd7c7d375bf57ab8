from bson import ObjectId


# ---------------- Roles ----------------

def test_role_lifecycle(client, admin_headers):
    created = client.post("/api/v1/role", json={"name": "  Coordinator  ", "description": "Leads sevaks"},
                          headers=admin_headers)
    assert created.status_code == 201
    role = created.get_json()["data"]
    assert role["name"] == "Coordinator"
    assert role["isActive"] is True

    duplicate = client.post("/api/v1/role", json={"name": "Coordinator"}, headers=admin_headers)
    assert duplicate.status_code == 400

    patched = client.patch(f"/api/v1/role/{role['_id']}/status", json={"status": "Inactive"}, headers=admin_headers)
    assert patched.get_json()["data"]["isActive"] is False

    listed = client.get("/api/v1/role?isActive=false", headers=admin_headers).get_json()["data"]
    assert [r["name"] for r in listed["items"]] == ["Coordinator"]

    assert client.delete(f"/api/v1/role/{role['_id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/v1/role/{role['_id']}", headers=admin_headers).status_code == 404


def test_admin_role_cannot_be_deleted(client, admin_headers, db):
    admin_role = db.roles.find_one({"name": "Admin"})
    response = client.delete(f"/api/v1/role/{admin_role['_id']}", headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()["message"] == "Admin role cannot be deleted"


def test_role_unknown_field_rejected(client, admin_headers):
    response = client.post("/api/v1/role", json={"name": "Helper", "color": "red"}, headers=admin_headers)
    assert response.status_code == 400


def test_invalid_object_id_is_400(client, admin_headers):
    response = client.get("/api/v1/role/not-an-id", headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["message"] == "Invalid id"


# ---------------- Permissions / activities ----------------

def test_permission_search_matches_description(client, admin_headers):
    client.post("/api/v1/permission", json={"name": "EXPORT", "description": "Spreadsheet output"},
                headers=admin_headers)

    items = client.get("/api/v1/permission?name=spreadsheet", headers=admin_headers).get_json()["data"]["items"]
    assert [p["name"] for p in items] == ["EXPORT"]


def test_activity_status_update(client, admin_headers, db):
    tasks = db.activities.find_one({"name": "TASKS"})
    response = client.patch(f"/api/v1/activity/{tasks['_id']}/status", json={"status": "INACTIVE"},
                            headers=admin_headers)

    assert response.status_code == 200
    assert db.activities.find_one({"_id": tasks["_id"]})["status"] == "INACTIVE"


def test_assign_activity_permissions_replaces_rows(client, admin_headers, db, sevak_role):
    reports = db.activities.find_one({"name": "REPORTS"})
    users = db.activities.find_one({"name": "USERS"})
    download = db.permissions.find_one({"name": "DOWNLOAD"})

    response = client.post("/api/v1/activityPermission", json={
        "roleId": str(sevak_role["_id"]),
        "activities": [
            {"activityId": str(reports["_id"]), "permissionIds": [str(download["_id"])]},
            {"activityId": str(users["_id"]), "permissionIds": []},
        ],
    }, headers=admin_headers)
    assert response.status_code == 200
    assert db.activity_permissions.count_documents({"roleId": sevak_role["_id"]}) == 1

    view = client.get(f"/api/v1/activityPermission/permission/{sevak_role['_id']}", headers=admin_headers)
    rows = view.get_json()["data"]["items"]
    assert [(r["activityName"], r["permissionNames"]) for r in rows] == [("REPORTS", ["DOWNLOAD"])]

    raw = client.get(f"/api/v1/activityPermission/role/{sevak_role['_id']}", headers=admin_headers)
    assert raw.get_json()["data"]["activities"][0]["permissionIds"] == [str(download["_id"])]


def test_assign_permissions_unknown_role(client, admin_headers):
    response = client.post("/api/v1/activityPermission", json={"roleId": str(ObjectId()), "activities": []},
                           headers=admin_headers)
    assert response.status_code == 404


# ---------------- Users ----------------

def new_user_body(sevak_role, **overrides):
    body = {
        "userName": "Suresh Shah",
        "email": "Suresh@Example.com",
        "mobileNumber": "9123456780",
        "password": "secret12",
        "roleId": str(sevak_role["_id"]),
    }
    body.update(overrides)
    return body


def test_user_create_hides_password(client, admin_headers, sevak_role, db):
    response = client.post("/api/v1/user", json=new_user_body(sevak_role), headers=admin_headers)
    data = response.get_json()["data"]

    assert response.status_code == 201
    assert data["email"] == "suresh@example.com"
    assert "password" not in data
    assert db.users.find_one({"email": "suresh@example.com"})["password"] != "secret12"


def test_user_duplicate_email_or_mobile(client, admin_headers, sevak_role, sevak):
    same_email = new_user_body(sevak_role, email=sevak["email"])
    same_mobile = new_user_body(sevak_role, mobileNumber=sevak["mobileNumber"])

    for body in (same_email, same_mobile):
        response = client.post("/api/v1/user", json=body, headers=admin_headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "Email or Mobile already exists"


def test_user_unknown_role(client, admin_headers, sevak_role):
    response = client.post("/api/v1/user", json=new_user_body(sevak_role, roleId=str(ObjectId())),
                           headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["message"] == "Invalid roleId"


def test_user_list_filters_and_role(client, admin_headers, sevak):
    data = client.get("/api/v1/user?roleName=sevak", headers=admin_headers).get_json()["data"]

    assert data["total"] == 1
    assert data["items"][0]["userName"] == "Ramesh Patel"
    assert data["items"][0]["role"]["name"] == "Sevak"
    assert "password" not in data["items"][0]

    data = client.get("/api/v1/user?q=9876", headers=admin_headers).get_json()["data"]
    assert data["total"] == 1


def test_user_update_rehashes_password(client, admin_headers, sevak, db):
    response = client.put(f"/api/v1/user/{sevak['_id']}", json={"userName": "Ramesh P", "password": "newpass1"},
                          headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["data"]["userName"] == "Ramesh P"

    login = client.post("/api/v1/auth/login", json={"email": sevak["email"], "password": "newpass1"})
    assert login.status_code == 200


def test_user_update_rejects_null_required_fields(client, admin_headers, sevak, db):
    for body in ({"roleId": None}, {"email": None}, {"userName": None}):
        response = client.put(f"/api/v1/user/{sevak['_id']}", json=body, headers=admin_headers)
        assert response.status_code == 400

    stored = db.users.find_one({"_id": sevak["_id"]})
    assert stored["roleId"] == sevak["roleId"]
    assert stored["email"] == sevak["email"]


def test_user_delete(client, admin_headers, sevak):
    assert client.delete(f"/api/v1/user/{sevak['_id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/v1/user/{sevak['_id']}", headers=admin_headers).status_code == 404


# ---------------- Locations ----------------

def test_location_crud(client, admin_headers):
    created = client.post("/api/v1/location", json={"name": "Gaushala"}, headers=admin_headers).get_json()["data"]

    updated = client.put(f"/api/v1/location/{created['_id']}", json={"isActive": False}, headers=admin_headers)
    assert updated.get_json()["data"]["isActive"] is False

    listed = client.get("/api/v1/location?isActive=true", headers=admin_headers).get_json()["data"]
    assert sorted(l["name"] for l in listed["items"]) == ["Bhojnalaya", "Dharamshala", "Mandir"]

    assert client.delete(f"/api/v1/location/{created['_id']}", headers=admin_headers).status_code == 200


def test_location_update_can_clear_description(client, admin_headers, db):
    created = client.post("/api/v1/location", json={"name": "Gaushala", "description": "cow shelter"},
                          headers=admin_headers).get_json()["data"]

    response = client.put(f"/api/v1/location/{created['_id']}", json={"description": None}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["data"]["description"] is None

    response = client.put(f"/api/v1/location/{created['_id']}", json={"name": None}, headers=admin_headers)
    assert response.status_code == 400


# ---------------- Authorization ----------------

def test_sevak_cannot_manage_locations(client, sevak_headers):
    response = client.post("/api/v1/location", json={"name": "Parking"}, headers=sevak_headers)

    assert response.status_code == 403
    assert response.get_json() == {"success": False, "status": 403, "message": "Access denied", "data": None}


def test_sevak_cannot_list_users(client, sevak_headers):
    assert client.get("/api/v1/user", headers=sevak_headers).status_code == 403


def test_sevak_can_read_amavasya_list(client, sevak_headers):
    assert client.get("/api/v1/amavasya", headers=sevak_headers).status_code == 200


# ---------------- Errors ----------------

def test_unknown_route_uses_envelope(client):
    response = client.get("/api/v1/nothing-here")
    body = response.get_json()

    assert response.status_code == 404
    assert body["success"] is False
    assert body["status"] == 404


def test_method_not_allowed(client, admin_headers):
    assert client.patch("/api/v1/location", headers=admin_headers).status_code == 405
