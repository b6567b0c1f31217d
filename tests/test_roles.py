import pytest
from schoolcore.models.audit_log import AuditAction, AuditLog
from schoolcore.models.custom_role import CustomRole
from schoolcore.models.user import User
from schoolcore.repositories.custom_role_repository import CustomRoleRepository


FEE_STRUCTURE = {"name": "Term 1 tuition", "class_name": "5A", "amount": 250.0, "frequency": "term"}


def create_role(client, headers, name, permissions):
    response = client.post("/api/roles", json={"name": name, "permissions": permissions}, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def system_role(db_session, school):
    role = CustomRole(school_id=school.id, name="Teacher", is_system=True)
    db_session.add(role)
    db_session.commit()
    db_session.refresh(role)
    return role


class TestReadOnlyTeacher:
    """A custom role overriding the teacher default on fees"""

    def test_custom_role_blocks_fee_creation(self, client, teacher, teacher_headers, admin_headers):
        # Teacher default allows adding fee structures
        assert client.post("/api/fees/structures", json=FEE_STRUCTURE, headers=teacher_headers).status_code == 201

        role = create_role(
            client,
            admin_headers,
            "ReadOnlyTeacher",
            [{"module": "fees", "view": True, "add": False, "edit": False, "delete": False}],
        )
        response = client.put(
            f"/api/roles/assignments/{teacher.id}",
            json={"custom_role_id": role["id"]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["custom_role_id"] == role["id"]

        denied = client.post("/api/fees/structures", json=FEE_STRUCTURE, headers=teacher_headers)
        assert denied.status_code == 403
        assert "fees:add" in denied.json()["detail"]

        # View is still granted and other modules keep teacher defaults
        assert client.get("/api/fees/structures", headers=teacher_headers).status_code == 200
        assert client.get("/api/teachers", headers=teacher_headers).status_code == 200

    def test_me_reflects_custom_role(self, client, teacher, teacher_headers, admin_headers):
        role = create_role(
            client, admin_headers, "ReadOnlyTeacher", [{"module": "fees", "view": True}]
        )
        client.put(f"/api/roles/assignments/{teacher.id}", json={"custom_role_id": role["id"]}, headers=admin_headers)

        permissions = client.get("/api/auth/me", headers=teacher_headers).json()["permissions"]

        assert permissions["fees"] == {"can_view": True, "can_add": False, "can_edit": False, "can_delete": False}
        assert permissions["attendance"]["can_add"] is True

    def test_disabling_role_restores_defaults(self, client, teacher, teacher_headers, admin_headers):
        role = create_role(client, admin_headers, "ReadOnlyTeacher", [{"module": "fees", "view": True}])
        client.put(f"/api/roles/assignments/{teacher.id}", json={"custom_role_id": role["id"]}, headers=admin_headers)

        response = client.patch(f"/api/roles/{role['id']}", json={"is_active": False}, headers=admin_headers)
        assert response.status_code == 200

        assert client.post("/api/fees/structures", json=FEE_STRUCTURE, headers=teacher_headers).status_code == 201


class TestRoleManagement:
    """Tests for /api/roles"""

    def test_create_role(self, client, admin_headers):
        role = create_role(
            client,
            admin_headers,
            "Librarian",
            [
                {"module": "library", "view": True, "add": True, "edit": True},
                {"module": "warp_drive", "view": True},
            ],
        )

        assert role["name"] == "Librarian"
        assert role["is_system"] is False
        assert [p["module"] for p in role["permissions"]] == ["library"]

    def test_name_too_short(self, client, admin_headers):
        response = client.post("/api/roles", json={"name": " x "}, headers=admin_headers)
        assert response.status_code == 400

    def test_duplicate_name_case_insensitive(self, client, admin_headers):
        create_role(client, admin_headers, "Librarian", [])
        response = client.post("/api/roles", json={"name": "LIBRARIAN"}, headers=admin_headers)
        assert response.status_code == 409

    def test_concurrent_duplicate_name_conflict(self, client, db_session, admin_headers, monkeypatch):
        """Both requests pass the name lookup; the unique constraint decides"""
        monkeypatch.setattr(CustomRoleRepository, "find_by_name", lambda self, *args, **kwargs: None)
        create_role(client, admin_headers, "Librarian", [])

        response = client.post("/api/roles", json={"name": "Librarian"}, headers=admin_headers)

        assert response.status_code == 409
        assert db_session.query(CustomRole).count() == 1

    def test_concurrent_rename_conflict(self, client, admin_headers, monkeypatch):
        create_role(client, admin_headers, "Librarian", [])
        accountant = create_role(client, admin_headers, "Accountant", [{"module": "fees", "view": True}])
        monkeypatch.setattr(CustomRoleRepository, "find_by_name", lambda self, *args, **kwargs: None)

        response = client.patch(
            f"/api/roles/{accountant['id']}",
            json={"name": "Librarian", "permissions": [{"module": "exams", "view": True}]},
            headers=admin_headers,
        )

        assert response.status_code == 409
        roles = {r["name"]: r for r in client.get("/api/roles", headers=admin_headers).json()}
        assert set(roles) == {"Librarian", "Accountant"}
        assert [p["module"] for p in roles["Accountant"]["permissions"]] == ["fees"]

    def test_same_name_in_other_school(self, client, admin_headers, other_admin_headers):
        create_role(client, admin_headers, "Librarian", [])
        create_role(client, other_admin_headers, "Librarian", [])

    def test_list_system_roles_first(self, client, admin_headers, system_role):
        create_role(client, admin_headers, "Accountant", [])

        names = [r["name"] for r in client.get("/api/roles", headers=admin_headers).json()]

        assert names == ["Teacher", "Accountant"]

    def test_update_replaces_permissions(self, client, admin_headers):
        role = create_role(client, admin_headers, "Librarian", [{"module": "library", "view": True}])

        response = client.patch(
            f"/api/roles/{role['id']}",
            json={"permissions": [{"module": "exams", "view": True}]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert [p["module"] for p in response.json()["permissions"]] == ["exams"]

    def test_update_same_module_grants(self, client, admin_headers):
        role = create_role(client, admin_headers, "Librarian", [{"module": "library", "view": True}])

        response = client.patch(
            f"/api/roles/{role['id']}",
            json={"permissions": [{"module": "library", "view": True, "add": True}]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["permissions"] == [
            {"module": "library", "view": True, "add": True, "edit": False, "delete": False}
        ]

    def test_update_audits_previous_grants(self, client, db_session, admin_headers):
        role = create_role(client, admin_headers, "Librarian", [{"module": "library", "view": True}])

        client.patch(
            f"/api/roles/{role['id']}",
            json={"permissions": [{"module": "library", "view": True, "add": True}]},
            headers=admin_headers,
        )

        entry = (
            db_session.query(AuditLog)
            .filter(AuditLog.entity_type == "role", AuditLog.action == AuditAction.UPDATE)
            .one()
        )
        assert entry.changes["permissions"]["old"] == [
            {"module": "library", "view": True, "add": False, "edit": False, "delete": False}
        ]
        assert entry.changes["permissions"]["new"] == [
            {"module": "library", "view": True, "add": True, "edit": False, "delete": False}
        ]

    def test_system_role_cannot_be_renamed(self, client, admin_headers, system_role):
        response = client.patch(f"/api/roles/{system_role.id}", json={"name": "Tutor"}, headers=admin_headers)
        assert response.status_code == 400

    def test_system_role_cannot_be_deleted(self, client, admin_headers, system_role):
        response = client.delete(f"/api/roles/{system_role.id}", headers=admin_headers)
        assert response.status_code == 400

    def test_delete_unassigns_users(self, client, db_session, teacher, admin_headers):
        role = create_role(client, admin_headers, "Librarian", [])
        client.put(f"/api/roles/assignments/{teacher.id}", json={"custom_role_id": role["id"]}, headers=admin_headers)

        response = client.delete(f"/api/roles/{role['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["unassigned_users"] == 1
        db_session.expire_all()
        assert db_session.get(User, teacher.id).custom_role_id is None
        assert db_session.get(CustomRole, role["id"]) is None

    def test_cannot_assign_foreign_role(self, client, teacher, admin_headers, other_admin_headers):
        foreign = create_role(client, other_admin_headers, "Librarian", [])

        response = client.put(
            f"/api/roles/assignments/{teacher.id}",
            json={"custom_role_id": foreign["id"]},
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_cannot_manage_foreign_role(self, client, admin_headers, other_admin_headers):
        foreign = create_role(client, other_admin_headers, "Librarian", [])
        response = client.delete(f"/api/roles/{foreign['id']}", headers=admin_headers)
        assert response.status_code == 404
