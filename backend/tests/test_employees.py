# Overview: Pytest coverage for owner-managed employee logins.

import pytest

from salonbook.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from salonbook.extensions import db
from salonbook.models import SecurityEvent, Staff, User, ROLE_EMPLOYEE
from salonbook.services import auth_service, employee_service, sale_service, session_service, token_service
from salonbook.services.employee_service import EmployeePatch


@pytest.fixture
def employee_a(account_a):
    return employee_service.create_employee(
        account_a.id,
        username="elif",
        email="elif@studio-a.test",
        password="Password123",
        phone="+905550000100",
        full_name="Elif Kaya",
        staff_role="Therapist",
    )


class TestCreateEmployee:
    def test_creates_user_and_staff_together(self, account_a, employee_a):
        user = employee_a.user
        assert user.role == ROLE_EMPLOYEE
        assert user.account_id == account_a.id
        assert user.phone == "+905550000100"
        assert employee_a.account_id == account_a.id
        assert employee_a.full_name == "Elif Kaya"
        assert employee_a.role == "Therapist"
        assert employee_a.email == "elif@studio-a.test"
        assert auth_service.authenticate("elif", "Password123").id == user.id

    def test_defaults(self, account_a):
        staff = employee_service.create_employee(
            account_a.id, username="zehra", email="zehra@studio-a.test", password="Password123"
        )
        assert staff.full_name == "zehra"
        assert staff.role == "Staff"
        assert staff.is_active is True

    def test_duplicate_username_creates_nothing(self, account_a, tenant_b):
        with pytest.raises(ConflictError):
            employee_service.create_employee(
                account_a.id, username="owner_b", email="fresh@studio-a.test", password="Password123"
            )
        assert db.session.query(Staff).count() == 0
        assert db.session.query(User).filter_by(role=ROLE_EMPLOYEE).count() == 0

    def test_weak_password_creates_nothing(self, account_a):
        with pytest.raises(ValidationError):
            employee_service.create_employee(
                account_a.id, username="weak", email="weak@studio-a.test", password="short"
            )
        assert db.session.query(Staff).count() == 0


class TestListAndGet:
    def test_lists_only_employee_logins(self, account_a, account_b, employee_a, staff_a):
        employee_service.create_employee(
            account_b.id, username="can", email="can@clinic-b.test", password="Password123"
        )
        assert [s.id for s in employee_service.list_employees(account_a.id)] == [employee_a.id]

    def test_plain_staff_is_not_an_employee(self, account_a, staff_a):
        with pytest.raises(NotFoundError):
            employee_service.get_employee(staff_a.id, account_a.id)

    def test_foreign_employee_forbidden(self, account_b, employee_a):
        with pytest.raises(ForbiddenError):
            employee_service.get_employee(employee_a.id, account_b.id)


class TestUpdateEmployee:
    def test_updates_login_and_mirrors_staff(self, account_a, employee_a):
        staff = employee_service.update_employee(
            employee_a.id,
            account_a.id,
            EmployeePatch(username="elif.k", email="elif.k@studio-a.test", phone="+905550000199", password="NewPass456"),
        )
        user = staff.user
        assert user.username == "elif.k"
        assert user.email == staff.email == "elif.k@studio-a.test"
        assert user.phone == staff.phone == "+905550000199"
        assert auth_service.authenticate("elif.k", "NewPass456") is not None
        assert auth_service.authenticate("elif.k", "Password123") is None

    def test_keeping_own_username_is_not_a_conflict(self, account_a, employee_a):
        staff = employee_service.update_employee(
            employee_a.id, account_a.id, EmployeePatch(username="elif", full_name="Elif K.")
        )
        assert staff.full_name == "Elif K."

    def test_taken_email_conflicts(self, account_a, employee_a):
        with pytest.raises(ConflictError):
            employee_service.update_employee(employee_a.id, account_a.id, EmployeePatch(email="owner_a@studio-a.test"))
        db.session.refresh(employee_a.user)
        assert employee_a.user.email == "elif@studio-a.test"

    def test_weak_password_rejected(self, account_a, employee_a):
        with pytest.raises(ValidationError):
            employee_service.update_employee(employee_a.id, account_a.id, EmployeePatch(password="nodigits"))
        assert auth_service.authenticate("elif", "Password123") is not None


class TestDeleteEmployee:
    def test_deactivates_and_signs_out(self, account_a, employee_a):
        _, plaintext = token_service.create_token(employee_a.user)

        employee_service.delete_employee(employee_a.id, account_a.id)

        assert token_service.validate_token(plaintext) is None
        assert auth_service.authenticate("elif", "Password123") is None
        assert employee_service.list_employees(account_a.id) == []
        event = db.session.query(SecurityEvent).filter_by(event_type="USER_DEACTIVATED").one()
        assert event.user_id == employee_a.user_id
        assert event.account_id == account_a.id
        with pytest.raises(NotFoundError):
            employee_service.get_employee(employee_a.id, account_a.id)

    def test_session_history_keeps_staff(self, account_a, client_a, service_a, employee_a):
        sale = sale_service.create_sale(account_a.id, client_a.id, service_a.id)
        record = session_service.use_session(sale.id, account_a.id, staff_id=employee_a.id).session

        employee_service.delete_employee(employee_a.id, account_a.id)

        db.session.refresh(record)
        assert record.staff_id == employee_a.id
        assert record.to_detail_dict()["staff"]["full_name"] == "Elif Kaya"


class TestEmployeesHttp:
    def test_owner_manages_employee_who_can_only_sign_in(self, client, headers_a, headers_b, login):
        resp = client.post("/api/employees", headers=headers_a, json={
            "username": "deniz",
            "email": "deniz@studio-a.test",
            "password": "Password123",
            "full_name": "Deniz Koç",
        })
        assert resp.status_code == 201
        employee = resp.json["employee"]
        staff_id = employee["id"]
        assert employee["user"]["role"] == ROLE_EMPLOYEE
        assert employee["user_id"] == employee["user"]["id"]

        listed = client.get("/api/employees", headers=headers_a).json["employees"]
        assert [e["id"] for e in listed] == [staff_id]
        assert client.get(f"/api/employees/{staff_id}", headers=headers_b).status_code == 403

        employee_headers = login("deniz")
        me = client.get("/api/auth/me", headers=employee_headers).json["user"]
        assert me["role"] == ROLE_EMPLOYEE
        assert client.get("/api/sales", headers=employee_headers).status_code == 403
        assert client.get("/api/employees", headers=employee_headers).status_code == 403

        resp = client.patch(f"/api/employees/{staff_id}", headers=headers_a, json={"phone": "+905550000300"})
        assert resp.json["employee"]["phone"] == "+905550000300"

        assert client.delete(f"/api/employees/{staff_id}", headers=headers_a).status_code == 200
        assert client.get("/api/auth/me", headers=employee_headers).status_code == 401
        assert client.get(f"/api/employees/{staff_id}", headers=headers_a).status_code == 404

    def test_missing_fields(self, client, headers_a):
        resp = client.post("/api/employees", headers=headers_a, json={"username": "nobody"})
        assert resp.status_code == 400
