def test_admin_manages_departments(client, admin_token, student_token):
    headers = {"Authorization": f"Bearer {admin_token}"}

    response = client.post("/api/v1/departments", json={"name": "Registrar", "description": "Records"}, headers=headers)
    assert response.status_code == 201
    department = response.json()
    assert department["is_active"] is True

    response = client.post("/api/v1/departments", json={"name": "Registrar"}, headers=headers)
    assert response.status_code == 409

    response = client.put(f"/api/v1/departments/{department['id']}", json={"description": "Student records"},
                          headers=headers)
    assert response.status_code == 200
    assert response.json()["description"] == "Student records"
    assert response.json()["name"] == "Registrar"

    response = client.put(f"/api/v1/departments/{department['id']}/deactivate", headers=headers)
    assert response.json()["is_active"] is False
    active = client.get("/api/v1/departments?active_only=true", headers=headers).json()
    assert department["id"] not in [d["id"] for d in active]

    response = client.put(f"/api/v1/departments/{department['id']}/activate", headers=headers)
    assert response.json()["is_active"] is True

    # Any authenticated user can read
    response = client.get(f"/api/v1/departments/{department['id']}", headers={"Authorization": f"Bearer {student_token}"})
    assert response.status_code == 200
    assert response.json()["name"] == "Registrar"


def test_non_admin_cannot_create(client, student_token, staff_token):
    for token in (student_token, staff_token):
        response = client.post(
            "/api/v1/departments",
            json={"name": "Shadow IT"},
            headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 403


def test_departments_require_auth(client):
    assert client.get("/api/v1/departments").status_code == 401


def test_missing_department(client, admin_token):
    response = client.get("/api/v1/departments/9999", headers={"Authorization": f"Bearer {admin_token}"})
    assert response.status_code == 404


def test_admin_deletes_unused_department(client, admin_token, staff_token):
    headers = {"Authorization": f"Bearer {admin_token}"}
    department = client.post("/api/v1/departments", json={"name": "Archive"}, headers=headers).json()

    response = client.delete(f"/api/v1/departments/{department['id']}",
                             headers={"Authorization": f"Bearer {staff_token}"})
    assert response.status_code == 403

    response = client.delete(f"/api/v1/departments/{department['id']}", headers=headers)
    assert response.status_code == 204
    assert client.get(f"/api/v1/departments/{department['id']}", headers=headers).status_code == 404
    assert client.delete(f"/api/v1/departments/{department['id']}", headers=headers).status_code == 404


def test_department_with_complaints_cannot_be_deleted(client, admin_token, student_token):
    headers = {"Authorization": f"Bearer {admin_token}"}
    department = client.post("/api/v1/departments", json={"name": "Transport"}, headers=headers).json()
    response = client.post("/api/v1/complaints", json={
        "title": "Late buses", "description": "Campus shuttle is always late",
        "type": "FACILITY", "department_id": department["id"],
    }, headers={"Authorization": f"Bearer {student_token}"})
    assert response.status_code == 201

    response = client.delete(f"/api/v1/departments/{department['id']}", headers=headers)
    assert response.status_code == 409
    assert client.get(f"/api/v1/departments/{department['id']}", headers=headers).status_code == 200
