from decimal import Decimal

from app.api.routes import departments as department_routes
from app.models.department import Department


def create_instructor(client, last_name, first_mid_name, hire_date="2001-01-15"):
    response = client.post(
        "/api/instructors/",
        json={"last_name": last_name, "first_mid_name": first_mid_name, "hire_date": hire_date},
    )
    assert response.status_code == 201
    return response.json()


def create_department(client, **overrides):
    payload = {"name": "Physics", "budget": "1000", "start_date": "2007-09-01", "instructor_id": None}
    payload.update(overrides)
    response = client.post("/api/departments/", json=payload)
    assert response.status_code == 201
    return response.json()


def edit_payload(department, **overrides):
    payload = {
        "name": department["name"],
        "budget": department["budget"],
        "start_date": department["start_date"],
        "instructor_id": department["instructor_id"],
        "row_version": department["row_version"],
    }
    payload.update(overrides)
    return payload


def test_create_list_and_get_department(client):
    abercrombie = create_instructor(client, "Abercrombie", "Kim", "1995-03-11")
    created = create_department(client, name="English", budget="350000", instructor_id=abercrombie["id"])

    assert created["administrator_name"] == "Abercrombie, Kim"
    assert Decimal(created["budget"]) == Decimal("350000")
    assert created["row_version"]

    listing = client.get("/api/departments/")
    assert listing.status_code == 200
    assert [item["name"] for item in listing.json()] == ["English"]

    fetched = client.get(f"/api/departments/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["row_version"] == created["row_version"]


def test_missing_department_is_404(client):
    response = client.get("/api/departments/999")

    assert response.status_code == 404
    assert response.json()["message"] == "Department with id 999 not found"


def test_administrator_must_be_an_instructor(client):
    student = client.post(
        "/api/students/",
        json={"last_name": "Alexander", "first_mid_name": "Carson", "enrollment_date": "2010-09-01"},
    ).json()

    response = client.post(
        "/api/departments/",
        json={"name": "Physics", "budget": "1000", "start_date": "2007-09-01", "instructor_id": student["id"]},
    )

    assert response.status_code == 422


def test_edit_with_current_token_succeeds_and_rotates_it(client):
    department = create_department(client)

    response = client.put(
        f"/api/departments/{department['id']}",
        json=edit_payload(department, name="Applied Physics"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Applied Physics"
    assert body["row_version"] != department["row_version"]


def test_stale_edit_reports_conflicting_fields_and_fresh_token(client):
    department = create_department(client)
    # Another user saves the form unchanged, which still issues a new token.
    first = client.put(f"/api/departments/{department['id']}", json=edit_payload(department))
    assert first.status_code == 200

    stale = client.put(
        f"/api/departments/{department['id']}",
        json=edit_payload(department, name="Physik"),
    )

    assert stale.status_code == 409
    body = stale.json()
    assert body["message"].startswith("The record you attempted to edit was modified by another user")
    details = body["details"]
    assert details["status"] == "conflicting"
    assert details["row_version"] == first.json()["row_version"]
    assert details["fields"] == [
        {
            "field": "name",
            "client_value": "Physik",
            "current_value": "Physics",
            "message": "Current value: Physics",
        }
    ]
    assert details["current"]["name"] == "Physics"

    retry = client.put(
        f"/api/departments/{department['id']}",
        json=edit_payload(department, name="Physik", row_version=details["row_version"]),
    )
    assert retry.status_code == 200
    assert retry.json()["name"] == "Physik"


def test_conflict_messages_show_current_values(client):
    kapoor = create_instructor(client, "Kapoor", "Candace")
    department = create_department(client)
    client.put(
        f"/api/departments/{department['id']}",
        json=edit_payload(department, budget="2500.50", start_date="2008-01-01", instructor_id=kapoor["id"]),
    )

    stale = client.put(f"/api/departments/{department['id']}", json=edit_payload(department))

    assert stale.status_code == 409
    messages = {item["field"]: item["message"] for item in stale.json()["details"]["fields"]}
    assert messages == {
        "budget": "Current value: $2,500.50",
        "start_date": "Current value: 2008-01-01",
        "instructor_id": "Current value: Kapoor, Candace",
    }


def test_edit_of_deleted_department_is_reported(client):
    department = create_department(client)
    deleted = client.delete(
        f"/api/departments/{department['id']}",
        params={"row_version": department["row_version"]},
    )
    assert deleted.json() == {"success": True, "already_deleted": False}

    response = client.put(f"/api/departments/{department['id']}", json=edit_payload(department, name="Physik"))

    assert response.status_code == 409
    body = response.json()
    assert body["message"] == "Unable to save changes. The department was deleted by another user."
    assert body["details"]["status"] == "deleted_by_other"
    assert body["details"]["submitted"]["name"] == "Physik"


def test_writer_that_sneaks_in_before_the_guarded_update_is_detected(client, session_factory, monkeypatch):
    department = create_department(client)
    real_update = department_routes.conditional_update_department

    def update_after_competing_write(db, department_id, values, expected_row_version):
        with session_factory() as other:
            record = other.get(Department, department_id)
            record.budget = Decimal("9999")
            other.commit()
        return real_update(db, department_id, values, expected_row_version)

    monkeypatch.setattr(department_routes, "conditional_update_department", update_after_competing_write)

    response = client.put(f"/api/departments/{department['id']}", json=edit_payload(department, name="Physik"))

    assert response.status_code == 409
    fields = {item["field"]: item for item in response.json()["details"]["fields"]}
    assert set(fields) == {"name", "budget"}
    assert Decimal(fields["budget"]["current_value"]) == Decimal("9999")
    assert client.get(f"/api/departments/{department['id']}").json()["name"] == "Physics"


def test_malformed_row_version_is_rejected(client):
    department = create_department(client)

    response = client.put(
        f"/api/departments/{department['id']}",
        json=edit_payload(department, row_version="not base64!"),
    )

    assert response.status_code == 422


def test_delete_requires_the_current_token(client):
    department = create_department(client)
    client.put(f"/api/departments/{department['id']}", json=edit_payload(department, budget="2000"))

    stale = client.delete(
        f"/api/departments/{department['id']}",
        params={"row_version": department["row_version"]},
    )
    assert stale.status_code == 409
    details = stale.json()["details"]
    assert Decimal(details["current"]["budget"]) == Decimal("2000")

    deleted = client.delete(
        f"/api/departments/{department['id']}",
        params={"row_version": details["row_version"]},
    )
    assert deleted.json() == {"success": True, "already_deleted": False}

    again = client.delete(
        f"/api/departments/{department['id']}",
        params={"row_version": details["row_version"]},
    )
    assert again.status_code == 200
    assert again.json() == {"success": True, "already_deleted": True}


def test_deleting_a_department_removes_its_courses(client):
    department = create_department(client)
    client.post("/api/courses/", json={"id": 1050, "title": "Chemistry", "credits": 3, "department_id": department["id"]})

    client.delete(f"/api/departments/{department['id']}", params={"row_version": department["row_version"]})

    assert client.get("/api/courses/1050").status_code == 404


def test_deleted_department_wins_over_a_removed_administrator(client):
    instructor = create_instructor(client, "Harui", "Roger")
    department = create_department(client, instructor_id=instructor["id"])
    client.delete(f"/api/departments/{department['id']}", params={"row_version": department["row_version"]})
    assert client.delete(f"/api/instructors/{instructor['id']}").status_code == 200

    response = client.put(f"/api/departments/{department['id']}", json=edit_payload(department))

    assert response.status_code == 409
    assert response.json()["details"]["status"] == "deleted_by_other"


def test_stale_edit_with_a_removed_administrator_is_a_conflict(client):
    instructor = create_instructor(client, "Harui", "Roger")
    department = create_department(client, instructor_id=instructor["id"])
    client.put(f"/api/departments/{department['id']}", json=edit_payload(department, instructor_id=None))
    assert client.delete(f"/api/instructors/{instructor['id']}").status_code == 200

    response = client.put(f"/api/departments/{department['id']}", json=edit_payload(department))

    assert response.status_code == 409
    details = response.json()["details"]
    assert details["status"] == "conflicting"
    assert [item["field"] for item in details["fields"]] == ["instructor_id"]
    assert details["fields"][0]["message"] == "Current value: None"


def test_current_edit_still_requires_an_existing_administrator(client):
    department = create_department(client)

    response = client.put(f"/api/departments/{department['id']}", json=edit_payload(department, instructor_id=999))

    assert response.status_code == 422


def test_department_deleted_right_after_a_successful_edit_is_404(client, session_factory, monkeypatch):
    department = create_department(client)
    real_save = department_routes.save_changes

    def save_then_delete(db):
        real_save(db)
        with session_factory() as other:
            other.delete(other.get(Department, department["id"]))
            other.commit()

    monkeypatch.setattr(department_routes, "save_changes", save_then_delete)

    response = client.put(f"/api/departments/{department['id']}", json=edit_payload(department, name="Physik"))

    assert response.status_code == 404
