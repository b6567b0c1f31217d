import pytest
from schoolcore.models.audit_log import AuditAction, AuditLog
from schoolcore.models.department import Department
from schoolcore.models.faculty_workload import FacultyWorkload
from schoolcore.models.role import EntityStatus, SystemRole
from schoolcore.models.student import Student
from schoolcore.models.subject import Subject
from schoolcore.models.transport import TransportAssignment, TransportVehicle
from schoolcore.repositories.subject_repository import SubjectRepository
from schoolcore.services.cascade_service import CascadeCoordinator, ParentKind
from tests.conftest import make_user


def add_subject(db, school, code, teacher=None, department=None, status=EntityStatus.ACTIVE):
    subject = Subject(
        school_id=school.id,
        name=f"Subject {code}",
        code=code,
        teacher_id=teacher.id if teacher else None,
        teacher_name=teacher.name if teacher else "",
        department_id=department.id if department else None,
        status=status,
    )
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject


def add_workload(db, school, teacher, department=None):
    workload = FacultyWorkload(
        school_id=school.id,
        teacher_id=teacher.id,
        teacher_name=teacher.name,
        department_id=department.id if department else None,
        academic_year="2026-27",
        hours_per_week=12,
    )
    db.add(workload)
    db.commit()
    db.refresh(workload)
    return workload


def add_department(db, school, code="SCI"):
    department = Department(school_id=school.id, name="Science", code=code)
    db.add(department)
    db.commit()
    db.refresh(department)
    return department


class TestTeacherDeactivation:
    """Admin deactivates a teacher: subjects unassigned, workloads removed"""

    @pytest.fixture
    def teaching_load(self, db_session, school, teacher):
        s1 = add_subject(db_session, school, "MATH5", teacher=teacher)
        s2 = add_subject(db_session, school, "MATH4", teacher=teacher, status=EntityStatus.INACTIVE)
        w = add_workload(db_session, school, teacher)
        return s1, s2, w

    def test_deactivation_cascade(self, client, db_session, teacher, admin_headers, teaching_load):
        s1, s2, w = teaching_load
        workload_id = w.id

        response = client.delete(f"/api/teachers/{teacher.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["cascade"]["counts"] == {"unassigned_subjects": 1, "removed_workloads": 1}

        db_session.expire_all()
        assert s1.teacher_id is None
        assert s1.teacher_name == ""
        assert s2.teacher_id == teacher.id
        assert s2.teacher_name == "Tom Teacher"
        assert db_session.get(FacultyWorkload, workload_id) is None
        assert teacher.is_active is False

        entries = db_session.query(AuditLog).all()
        assert len(entries) == 1
        assert entries[0].action == AuditAction.DELETE
        assert entries[0].entity_type == "teacher"
        assert entries[0].meta["deactivated_teacher"] == "Tom Teacher"

    def test_other_teachers_untouched(self, client, db_session, school, teacher, admin_headers, teaching_load):
        colleague = make_user(db_session, school, SystemRole.TEACHER, "Carla Colleague")
        theirs = add_subject(db_session, school, "BIO5", teacher=colleague)

        client.delete(f"/api/teachers/{teacher.id}", headers=admin_headers)

        db_session.expire_all()
        assert theirs.teacher_id == colleague.id

    def test_cascade_is_idempotent(self, db_session, school, teacher, teaching_load):
        coordinator = CascadeCoordinator(db_session)

        first = coordinator.cascade_on_deactivate(ParentKind.TEACHER, teacher.id, school.id)
        second = coordinator.cascade_on_deactivate(ParentKind.TEACHER, teacher.id, school.id)

        assert first.total == 2
        assert second.counts == {"unassigned_subjects": 0, "removed_workloads": 0}

    def test_cascade_scoped_to_school(self, db_session, school, other_school, teacher, teaching_load):
        """A foreign school's rows carrying the same teacher id are not touched"""
        foreign = add_subject(db_session, other_school, "MATH5", teacher=teacher)

        CascadeCoordinator(db_session).cascade_on_deactivate(ParentKind.TEACHER, teacher.id, school.id)

        db_session.expire_all()
        assert foreign.teacher_id == teacher.id

    def test_failing_rule_does_not_stop_others(self, db_session, school, teacher, teaching_load, monkeypatch):
        _, _, w = teaching_load
        workload_id = w.id

        def broken(self, teacher_id, school_id):
            raise RuntimeError("subjects store unavailable")

        monkeypatch.setattr(SubjectRepository, "unassign_teacher", broken)

        summary = CascadeCoordinator(db_session).cascade_on_deactivate(
            ParentKind.TEACHER, teacher.id, school.id
        )

        assert summary.failed == ["unassigned_subjects"]
        assert summary.counts == {"unassigned_subjects": 0, "removed_workloads": 1}
        assert db_session.get(FacultyWorkload, workload_id) is None

    def test_failing_cascade_keeps_primary_operation(
        self, client, db_session, teacher, admin_headers, teaching_load, monkeypatch
    ):
        def broken(self, teacher_id, school_id):
            raise RuntimeError("subjects store unavailable")

        monkeypatch.setattr(SubjectRepository, "unassign_teacher", broken)

        response = client.delete(f"/api/teachers/{teacher.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["cascade"]["failed"] == ["unassigned_subjects"]
        db_session.expire_all()
        assert teacher.is_active is False

    def test_reactivation_does_not_restore(self, client, db_session, teacher, admin_headers, teaching_load):
        s1, _, _ = teaching_load
        client.delete(f"/api/teachers/{teacher.id}", headers=admin_headers)

        response = client.post(f"/api/teachers/{teacher.id}/reactivate", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["is_active"] is True
        db_session.expire_all()
        assert s1.teacher_id is None

    def test_reactivate_active_teacher_conflicts(self, client, teacher, admin_headers):
        response = client.post(f"/api/teachers/{teacher.id}/reactivate", headers=admin_headers)
        assert response.status_code == 409


class TestDepartmentDeletion:
    """Pre-delete guard and department cascade"""

    def test_guard_reports_active_subject_count(self, db_session, school):
        department = add_department(db_session, school)
        add_subject(db_session, school, "PHY", department=department)
        add_subject(db_session, school, "CHEM", department=department)
        add_subject(db_session, school, "OLD", department=department, status=EntityStatus.INACTIVE)

        reason = CascadeCoordinator(db_session).guard_before_delete(
            ParentKind.DEPARTMENT, department.id, school.id
        )

        assert reason is not None
        assert "2" in reason

    def test_blocked_delete_returns_409(self, client, db_session, school, admin_headers):
        department = add_department(db_session, school)
        add_subject(db_session, school, "PHY", department=department)
        add_subject(db_session, school, "CHEM", department=department)

        response = client.delete(f"/api/departments/{department.id}", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["count"] == 2
        assert "2 active subject" in response.json()["detail"]
        db_session.expire_all()
        assert db_session.get(Department, department.id) is not None
        assert db_session.query(AuditLog).count() == 0

    def test_delete_clears_references(self, client, db_session, school, teacher, admin_headers):
        department = add_department(db_session, school)
        retired = add_subject(
            db_session, school, "OLD", department=department, status=EntityStatus.INACTIVE
        )
        workload = add_workload(db_session, school, teacher, department=department)

        response = client.delete(f"/api/departments/{department.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["cascade"]["counts"] == {"updated_subjects": 1, "updated_workloads": 1}
        db_session.expire_all()
        assert retired.department_id is None
        assert workload.department_id is None

        entry = db_session.query(AuditLog).one()
        assert entry.action == AuditAction.DELETE
        assert entry.entity_type == "department"

    def test_guard_allows_other_kinds(self, db_session, school, teacher):
        assert CascadeCoordinator(db_session).guard_before_delete(
            ParentKind.TEACHER, teacher.id, school.id
        ) is None

    def test_guard_fails_closed(self, db_session, school, monkeypatch):
        department = add_department(db_session, school)

        def broken(self, department_id, school_id):
            raise RuntimeError("subjects store unavailable")

        monkeypatch.setattr(SubjectRepository, "count_active_by_department", broken)

        guard = CascadeCoordinator(db_session).check_before_delete(
            ParentKind.DEPARTMENT, department.id, school.id
        )

        assert guard.blocked

    def test_teacher_cannot_delete_department(self, client, db_session, school, teacher_headers):
        department = add_department(db_session, school)
        response = client.delete(f"/api/departments/{department.id}", headers=teacher_headers)
        assert response.status_code == 403


class TestStudentDeactivation:
    """Deactivating a student removes them from transport rosters"""

    @pytest.fixture
    def roster(self, db_session, school):
        student = Student(school_id=school.id, name="Alice", class_name="5A", roll_number="1")
        classmate = Student(school_id=school.id, name="Bob", class_name="5A", roll_number="2")
        db_session.add_all([student, classmate])
        db_session.commit()

        vehicles = []
        for number in ("BUS-1", "BUS-2"):
            vehicle = TransportVehicle(
                school_id=school.id, vehicle_number=number, route_name="North", capacity=40
            )
            vehicle.assignments = [
                TransportAssignment(school_id=school.id, student_id=student.id),
                TransportAssignment(school_id=school.id, student_id=classmate.id),
            ]
            vehicles.append(vehicle)
        db_session.add_all(vehicles)
        db_session.commit()
        return student, classmate, vehicles

    def test_removed_from_every_roster(self, client, db_session, admin_headers, roster):
        student, classmate, vehicles = roster

        response = client.delete(f"/api/students/{student.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["cascade"]["counts"] == {"removed_from_transport": 2}
        db_session.expire_all()
        for vehicle in vehicles:
            assert vehicle.assigned_student_ids == [classmate.id]
        assert student.status == EntityStatus.INACTIVE

    def test_second_deactivation_counts_zero(self, client, admin_headers, roster):
        student, _, _ = roster
        client.delete(f"/api/students/{student.id}", headers=admin_headers)

        response = client.delete(f"/api/students/{student.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["cascade"]["counts"] == {"removed_from_transport": 0}
