from sqlalchemy import select

from donation_api.models.disbursement import ActivityFile, DisbursementActivity

from conftest import fetch_all


def create_disbursement(client, headers, amount=150000, description="Sewa gedung"):
    response = client.post(
        "/api/admin/disbursements",
        json={"amount": amount, "description": description},
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()["disbursement_id"]


def test_create_and_list_disbursements(client, admin_headers):
    response = client.post(
        "/api/admin/disbursements",
        json={"amount": 150000, "description": "<b>Sewa</b> gedung/aula"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert isinstance(data["disbursement_id"], int)

    listing = client.get("/api/admin/disbursements", headers=admin_headers).json()
    assert isinstance(listing, list)
    assert listing[0]["id"] == data["disbursement_id"]
    assert listing[0]["description"] == "Sewa gedung&#x2F;aula"
    assert listing[0]["activities"] == []


def test_invalid_disbursement(client, admin_headers):
    response = client.post(
        "/api/admin/disbursements",
        json={"amount": 0, "description": "Nol"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"

    response = client.post(
        "/api/admin/disbursements",
        json={"amount": 1000},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "MISSING_REQUIRED_FIELD"
    assert response.json()["details"]["field"] == "description"


def test_tag_only_description_is_rejected(client, admin_headers):
    response = client.post(
        "/api/admin/disbursements",
        json={"amount": 1000, "description": "<img src=x>"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_create_activity_with_files(client, admin_headers, SessionLocal):
    disbursement_id = create_disbursement(client, admin_headers)

    response = client.post(
        f"/api/admin/disbursements/{disbursement_id}/activities",
        json={
            "activity_time": "2025-10-01T08:00:00+07:00",
            "description": "Pembayaran DP gedung",
            "files": [
                {"file_url": "/uploads/activity_1_ab.png", "file_name": "nota.png", "file_type": "image/png"},
                {"file_url": "/uploads/activity_2_cd.pdf"},
            ],
        },
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True

    activities = client.get(
        f"/api/admin/disbursements/{disbursement_id}/activities", headers=admin_headers
    ).json()
    assert len(activities) == 1
    assert activities[0]["id"] == data["activity_id"]
    # stored as naive UTC
    assert activities[0]["activity_time"].startswith("2025-10-01T01:00:00")
    assert [f["file_name"] for f in activities[0]["files"]] == ["nota.png"]

    assert len(fetch_all(SessionLocal, select(ActivityFile))) == 1


def test_activities_are_listed_chronologically(client, admin_headers):
    disbursement_id = create_disbursement(client, admin_headers)
    for when, text in [("2025-10-03T10:00:00", "Ketiga"), ("2025-10-01T10:00:00", "Pertama"),
                       ("2025-10-02T10:00:00", "Kedua")]:
        client.post(
            f"/api/admin/disbursements/{disbursement_id}/activities",
            json={"activity_time": when, "description": text},
            headers=admin_headers,
        )

    activities = client.get(
        f"/api/admin/disbursements/{disbursement_id}/activities", headers=admin_headers
    ).json()
    assert [a["description"] for a in activities] == ["Pertama", "Kedua", "Ketiga"]


def test_activity_for_unknown_disbursement(client, admin_headers, SessionLocal):
    response = client.post(
        "/api/admin/disbursements/9999/activities",
        json={"activity_time": "2025-10-01T08:00:00", "description": "Tidak ada"},
        headers=admin_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"
    assert fetch_all(SessionLocal, select(DisbursementActivity)) == []

    response = client.get("/api/admin/disbursements/9999/activities", headers=admin_headers)
    assert response.status_code == 404


def test_activity_requires_time_and_description(client, admin_headers):
    disbursement_id = create_disbursement(client, admin_headers)

    response = client.post(
        f"/api/admin/disbursements/{disbursement_id}/activities",
        json={"description": "Tanpa waktu"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "activity_time"

    response = client.post(
        f"/api/admin/disbursements/{disbursement_id}/activities",
        json={"activity_time": "kemarin", "description": "Waktu rusak"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"
