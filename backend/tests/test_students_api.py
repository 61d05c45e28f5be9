def student_payload(**overrides):
    payload = {
        "last_name": "Alexander",
        "first_mid_name": "Carson",
        "email_address": "Carson.Alexander@Contoso.edu",
        "enrollment_date": "2010-09-01",
    }
    payload.update(overrides)
    return payload


def test_create_student_normalizes_fields(client):
    response = client.post("/api/students/", json=student_payload(last_name="  Alexander "))

    assert response.status_code == 201
    body = response.json()
    assert body["last_name"] == "Alexander"
    assert body["email_address"] == "carson.alexander@contoso.edu"
    assert body["full_name"] == "Alexander, Carson"


def test_invalid_email_is_rejected(client):
    response = client.post("/api/students/", json=student_payload(email_address="not-an-email"))

    assert response.status_code == 422


def test_list_only_returns_students(client):
    client.post("/api/students/", json=student_payload(last_name="Olivetto", first_mid_name="Nino"))
    client.post("/api/students/", json=student_payload(email_address=None))
    client.post(
        "/api/instructors/",
        json={"last_name": "Harui", "first_mid_name": "Roger", "hire_date": "1998-07-01"},
    )

    names = [item["full_name"] for item in client.get("/api/students/").json()]

    assert names == ["Alexander, Carson", "Olivetto, Nino"]


def test_partial_update(client):
    student = client.post("/api/students/", json=student_payload()).json()

    response = client.put(f"/api/students/{student['id']}", json={"first_mid_name": "Carla", "email_address": None})

    assert response.status_code == 200
    body = response.json()
    assert body["first_mid_name"] == "Carla"
    assert body["last_name"] == "Alexander"
    assert body["email_address"] is None


def test_instructor_is_not_a_student(client):
    instructor = client.post(
        "/api/instructors/",
        json={"last_name": "Kapoor", "first_mid_name": "Candace", "hire_date": "2001-01-15"},
    ).json()

    assert client.get(f"/api/students/{instructor['id']}").status_code == 404
    assert client.delete(f"/api/students/{instructor['id']}").status_code == 404


def test_delete_student(client):
    student = client.post("/api/students/", json=student_payload()).json()

    assert client.delete(f"/api/students/{student['id']}").json() == {"success": True}
    assert client.get(f"/api/students/{student['id']}").status_code == 404
