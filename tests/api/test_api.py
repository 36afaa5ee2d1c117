from __future__ import annotations

from datetime import date, timedelta

from university_erp.core.exceptions import RepositoryError


def _create_employee(client, headers, code="EMP-100"):
    return client.post(
        "/api/v1/hr/employees",
        json={"userId": 10, "employeeCode": code, "designation": "Lecturer", "joiningDate": "2024-09-01"},
        headers=headers,
    )


def _submit_leave(client, headers, employee_id):
    start = date.today() + timedelta(days=3)
    return client.post(
        "/api/v1/hr/leave-requests",
        json={
            "employeeId": employee_id,
            "leaveType": "casual",
            "startDate": start.isoformat(),
            "endDate": (start + timedelta(days=1)).isoformat(),
            "reason": "Convocation",
        },
        headers=headers,
    )


def test_health(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "data": {"status": "ok"}}


def test_missing_token_is_401(client):
    resp = client.get("/api/v1/hr/employees")

    assert resp.status_code == 401
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"]["code"] == "AUTHENTICATION_ERROR"


def test_malformed_or_foreign_token_is_401(client, bearer):
    assert client.get("/api/v1/hr/employees", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/api/v1/hr/employees", headers=bearer({"userId": 5}, secret="other")).status_code == 401


def test_create_employee_envelope(client, auth_headers):
    resp = _create_employee(client, auth_headers)

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["message"] == "Employee created successfully"
    assert body["data"]["employeeCode"] == "EMP-100"
    assert body["data"]["joiningDate"] == "2024-09-01"


def test_duplicate_employee_is_409(client, auth_headers):
    _create_employee(client, auth_headers)

    resp = _create_employee(client, auth_headers)

    assert resp.status_code == 409
    assert resp.get_json()["error"]["code"] == "CONFLICT"


def test_list_employees_pagination(client, auth_headers):
    _create_employee(client, auth_headers, "EMP-1")
    _create_employee(client, auth_headers, "EMP-2")

    body = client.get("/api/v1/hr/employees?page=1&limit=1", headers=auth_headers).get_json()

    assert len(body["data"]["employees"]) == 1
    assert body["data"]["pagination"] == {
        "page": 1,
        "limit": 1,
        "total": 2,
        "totalPages": 2,
        "hasNext": True,
        "hasPrev": False,
    }


def test_unknown_employee_is_404(client, auth_headers):
    resp = client.get("/api/v1/hr/employees/999", headers=auth_headers)

    assert resp.status_code == 404
    assert resp.get_json()["error"] == {"code": "NOT_FOUND", "message": "Employee not found"}


def test_leave_approval_records_token_user(client, auth_headers):
    employee_id = _create_employee(client, auth_headers).get_json()["data"]["employeeId"]
    leave_id = _submit_leave(client, auth_headers, employee_id).get_json()["data"]["requestId"]

    resp = client.post(
        f"/api/v1/hr/leave-requests/{leave_id}/approve", json={"status": "approved"}, headers=auth_headers
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["message"] == "Leave request approved successfully"
    assert body["data"]["status"] == "approved"
    assert body["data"]["approvedBy"] == 5

    again = client.post(
        f"/api/v1/hr/leave-requests/{leave_id}/approve", json={"status": "rejected"}, headers=auth_headers
    )
    assert again.status_code == 422
    assert again.get_json()["error"]["code"] == "INVALID_STATUS_TRANSITION"


def test_token_with_only_id_identifies_actor(client, auth_headers, bearer):
    employee_id = _create_employee(client, auth_headers).get_json()["data"]["employeeId"]
    leave_id = _submit_leave(client, auth_headers, employee_id).get_json()["data"]["requestId"]

    resp = client.post(
        f"/api/v1/hr/leave-requests/{leave_id}/approve",
        json={"status": "rejected", "rejectionReason": "exam week"},
        headers=bearer({"id": 42}),
    )

    assert resp.get_json()["data"]["approvedBy"] == 42
    assert resp.get_json()["data"]["rejectionReason"] == "exam week"


def test_bad_decision_status_is_400(client, auth_headers):
    resp = client.post("/api/v1/hr/leave-requests/1/approve", json={"status": "maybe"}, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_datastore_failure_is_500(client, auth_headers, hr_repo, monkeypatch):
    def boom(employee_id):
        raise RepositoryError("Failed to fetch employee") from ConnectionError("lost connection")

    monkeypatch.setattr(hr_repo, "get_employee", boom)

    resp = client.get("/api/v1/hr/employees/1", headers=auth_headers)

    assert resp.status_code == 500
    assert resp.get_json()["error"]["code"] == "REPOSITORY_ERROR"


def test_certificate_verification_is_public(client, certification_repo):
    resp = client.get("/api/v1/certification/verify?verificationCode=VER-0000000000000000")

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["isValid"] is False

    certification_repo.fail_lookups = True
    failed = client.post("/api/v1/certification/verify", json={"certificateNumber": "CERT-2026-0101-00001"})
    assert failed.status_code == 200
    assert failed.get_json()["data"]["isValid"] is False


def test_record_payment(client, auth_headers, finance_repo):
    fee = finance_repo.add_fee(student_id=8, due="25000")

    resp = client.post(
        "/api/v1/finance/payments",
        json={
            "studentFeeId": fee.student_fee_id,
            "studentId": 8,
            "amount": "25000",
            "paymentMethod": "online",
            "paymentDate": "2026-03-02",
        },
        headers=auth_headers,
    )

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["updatedFee"]["paymentStatus"] == "paid"
    assert data["payment"]["receivedBy"] == 5
    assert data["payment"]["amount"] == 25000
