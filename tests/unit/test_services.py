"""Unit tests for resource services against an in-memory database."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from foome.exceptions import ConflictError, NotFoundError, ValidationError
from foome.services.companies import CompanyService, normalize_cnpj
from foome.services.documents import DocumentService, safe_file_name
from foome.services.employees import EmployeeService
from foome.services.onboarding import OnboardingService
from foome.services.photos import PhotoService
from foome.services.roles import RoleService
from foome.services.teams import TeamService
from foome.services.time_off import TimeOffService

# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestCompanyService:
    def test_normalize_cnpj(self) -> None:
        assert normalize_cnpj("12.345.678/0001-90") == "12345678000190"

    async def test_create_with_admin(self, db, seed) -> None:
        user = await seed.user()
        company, employee = await CompanyService(db).create_with_admin(
            user.id,
            "Initech",
            "12.345.678/0001-90",
            "11-50",
            {"full_name": "Bill Lumbergh", "email": "Bill@Initech.com"},
        )
        assert company.cnpj == "12345678000190"
        assert employee.company_id == company.id
        assert employee.user_id == user.id
        assert employee.is_admin is True
        assert employee.email == "bill@initech.com"

    async def test_duplicate_cnpj(self, db, seed) -> None:
        service = CompanyService(db)
        first, second = await seed.user(), await seed.user()
        admin = {"full_name": "Bill Lumbergh", "email": "bill@initech.com"}
        await service.create_with_admin(first.id, "Initech", "12345678000190", None, admin)
        with pytest.raises(ConflictError, match="CNPJ"):
            await service.create_with_admin(second.id, "Other", "12.345.678/0001-90", None, admin)

    async def test_user_already_in_company(self, db, seed, acme) -> None:
        user = await seed.user()
        await seed.employee(acme, user_id=user.id)
        with pytest.raises(ConflictError, match="already belongs"):
            await CompanyService(db).create_with_admin(
                user.id, "Initech", "12345678000190", None, {"full_name": "X Y", "email": "x@y.io"}
            )


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestTeamService:
    async def test_subteam_member_must_belong_to_parent_team(self, db, seed, acme) -> None:
        teams = TeamService(db)
        employee = await seed.employee(acme)
        team = await teams.create(acme.id, {"name": "Platform"}, created_by=employee.id)
        subteam = await teams.create_subteam(team, {"name": "Infra"}, created_by=employee.id)

        with pytest.raises(ConflictError, match="parent team"):
            await teams.add_subteam_member(subteam, employee.id, added_by=employee.id)

        await teams.add_member(team, employee.id)
        await teams.add_subteam_member(subteam, employee.id, added_by=employee.id)
        members = await teams.subteam_members(subteam.id)
        assert [m.id for m in members] == [employee.id]

    async def test_duplicate_membership_conflicts(self, db, seed, acme) -> None:
        teams = TeamService(db)
        employee = await seed.employee(acme)
        team = await teams.create(acme.id, {"name": "Platform"}, created_by=employee.id)
        await teams.add_member(team, employee.id)
        with pytest.raises(ConflictError):
            await teams.add_member(team, employee.id)

    async def test_remove_member_also_leaves_subteams(self, db, seed, acme) -> None:
        teams = TeamService(db)
        employee = await seed.employee(acme)
        team = await teams.create(acme.id, {"name": "Platform"}, created_by=employee.id)
        subteam = await teams.create_subteam(team, {"name": "Infra"}, created_by=employee.id)
        await teams.add_member(team, employee.id)
        await teams.add_subteam_member(subteam, employee.id, added_by=employee.id)

        await teams.remove_member(team, employee.id)
        assert await teams.members(team.id) == []
        assert await teams.subteam_members(subteam.id) == []

    async def test_remove_non_member_is_not_found(self, db, seed, acme) -> None:
        teams = TeamService(db)
        employee = await seed.employee(acme)
        team = await teams.create(acme.id, {"name": "Platform"}, created_by=employee.id)
        with pytest.raises(NotFoundError):
            await teams.remove_member(team, employee.id)

    async def test_subteam_of_other_team_is_hidden(self, db, seed, acme) -> None:
        teams = TeamService(db)
        employee = await seed.employee(acme)
        first = await teams.create(acme.id, {"name": "A"}, created_by=employee.id)
        second = await teams.create(acme.id, {"name": "B"}, created_by=employee.id)
        subteam = await teams.create_subteam(first, {"name": "A1"}, created_by=employee.id)
        assert await teams.get_subteam(first, subteam.id) is not None
        assert await teams.get_subteam(second, subteam.id) is None

    async def test_delete_team_cascades(self, db, seed, acme) -> None:
        teams = TeamService(db)
        employee = await seed.employee(acme)
        team = await teams.create(acme.id, {"name": "Platform"}, created_by=employee.id)
        subteam = await teams.create_subteam(team, {"name": "Infra"}, created_by=employee.id)
        await teams.add_member(team, employee.id)
        await teams.add_subteam_member(subteam, employee.id, added_by=employee.id)

        await teams.delete(team)
        assert await teams.get(team.id) is None
        assert await teams.list_subteams(team.id) == []
        assert await teams.get_membership(team.id, employee.id) is None

    async def test_member_counts(self, db, seed, acme) -> None:
        teams = TeamService(db)
        first, second = await seed.employee(acme), await seed.employee(acme)
        team = await teams.create(acme.id, {"name": "Platform"}, created_by=first.id)
        empty = await teams.create(acme.id, {"name": "Empty"}, created_by=first.id)
        await teams.add_member(team, first.id)
        await teams.add_member(team, second.id)
        assert await teams.member_counts([team.id, empty.id]) == {team.id: 2, empty.id: 0}


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestEmployeeService:
    async def test_list_filters(self, db, seed, acme, globex) -> None:
        await seed.employee(acme, full_name="Ana Lima", department="Sales")
        await seed.employee(acme, full_name="Bruno Costa", department="Engineering")
        await seed.employee(globex, full_name="Ana Foreign", department="Sales")
        employees = EmployeeService(db)

        names = [e.full_name for e in await employees.list_all(acme.id)]
        assert names == ["Ana Lima", "Bruno Costa"]
        sales = await employees.list_all(acme.id, department="Sales")
        assert [e.full_name for e in sales] == ["Ana Lima"]
        found = await employees.list_all(acme.id, search="bruno")
        assert [e.full_name for e in found] == ["Bruno Costa"]
        assert await employees.departments(acme.id) == ["Engineering", "Sales"]

    async def test_delete_removes_dependent_rows_and_returns_blob_keys(
        self, db, seed, acme, store
    ) -> None:
        employee = await seed.employee(acme)
        manager = await seed.employee(acme)
        teams = TeamService(db)
        team = await teams.create(acme.id, {"name": "Ops", "manager_id": employee.id}, manager.id)
        await teams.add_member(team, employee.id)
        document = await DocumentService(db, store).create(
            employee,
            name="RG",
            doc_type="rg",
            file_name="rg.pdf",
            content=b"%PDF",
            content_type="application/pdf",
            expiration_date=None,
            uploaded_by=manager.id,
        )

        keys = await EmployeeService(db).delete(employee)
        assert keys == [document.file_path]
        assert await EmployeeService(db).get(employee.id) is None
        refreshed = await teams.get(team.id)
        assert refreshed is not None
        assert refreshed.manager_id is None
        assert await teams.members(team.id) == []

    async def test_link_user_by_email(self, db, seed, acme) -> None:
        employee = await seed.employee(acme, email="new.hire@example.com")
        user = await seed.user("new.hire@example.com")
        linked = await EmployeeService(db).link_user(user)
        assert linked is not None
        assert linked.id == employee.id
        assert linked.user_id == user.id

    async def test_link_user_ambiguous_email_is_skipped(self, db, seed, acme, globex) -> None:
        await seed.employee(acme, email="dup@example.com")
        await seed.employee(globex, email="dup@example.com")
        user = await seed.user("dup@example.com")
        assert await EmployeeService(db).link_user(user) is None


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestRoleService:
    async def test_assign_closes_previous_role(self, db, seed, acme) -> None:
        roles = RoleService(db)
        employee = await seed.employee(acme)
        junior = await roles.create(acme.id, {"title": "Junior Dev"})
        senior = await roles.create(acme.id, {"title": "Senior Dev"})

        await roles.assign(junior, employee.id, date(2024, 1, 1))
        await roles.assign(senior, employee.id, date(2025, 1, 1))

        history = await roles.history(employee.id)
        assert [(r.title, a.is_current) for a, r in history] == [
            ("Senior Dev", True),
            ("Junior Dev", False),
        ]
        assert history[1][0].end_date == date(2025, 1, 1)
        assert [e.id for e in await roles.current_employees(senior.id)] == [employee.id]
        assert await roles.current_employees(junior.id) == []

    async def test_list_hides_inactive_by_default(self, db, acme) -> None:
        roles = RoleService(db)
        await roles.create(acme.id, {"title": "Active"})
        await roles.create(acme.id, {"title": "Retired", "active": False})
        assert [r.title for r in await roles.list_all(acme.id)] == ["Active"]
        every = await roles.list_all(acme.id, include_inactive=True)
        assert [r.title for r in every] == ["Active", "Retired"]

    async def test_end_assignment(self, db, seed, acme) -> None:
        roles = RoleService(db)
        employee = await seed.employee(acme)
        role = await roles.create(acme.id, {"title": "Analyst"})
        assignment = await roles.assign(role, employee.id, date(2024, 3, 1))

        found = await roles.get_assignment(assignment.id)
        assert found is not None
        assert found[1].id == employee.id

        with pytest.raises(ValidationError):
            await roles.end_assignment(assignment, date(2024, 2, 1))

        ended = await roles.end_assignment(assignment, date(2024, 9, 30))
        assert ended.is_current is False
        assert ended.end_date == date(2024, 9, 30)
        assert await roles.current_employees(role.id) == []
        with pytest.raises(ConflictError, match="already ended"):
            await roles.end_assignment(ended)
        assert await roles.get_assignment("missing") is None


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestOnboardingService:
    async def test_assign_defaults_due_date_from_task(self, db, seed, acme) -> None:
        onboarding = OnboardingService(db)
        employee = await seed.employee(acme)
        task = await onboarding.create_task(acme.id, {"name": "Sign contract", "default_due_days": 3})
        [record] = await onboarding.assign(employee, [task])
        assert record.status == "pending"
        assert record.due_date == date.today() + timedelta(days=3)

    async def test_update_status_sets_and_clears_completion(self, db, seed, acme) -> None:
        onboarding = OnboardingService(db)
        employee = await seed.employee(acme)
        task = await onboarding.create_task(acme.id, {"name": "Laptop setup"})
        [record] = await onboarding.assign(employee, [task])

        done = await onboarding.update_status(record, "completed", completed_by=employee.id)
        assert done.completed_at is not None
        assert done.completed_by == employee.id
        detail = await onboarding.detail(done)
        assert detail["completed_by_employee"] == {"full_name": employee.full_name}

        reopened = await onboarding.update_status(done, "pending")
        assert reopened.completed_at is None
        assert reopened.completed_by is None

    async def test_get_for_company_hides_foreign_records(self, db, seed, acme, globex) -> None:
        onboarding = OnboardingService(db)
        employee = await seed.employee(acme)
        task = await onboarding.create_task(acme.id, {"name": "Badge"})
        [record] = await onboarding.assign(employee, [task])
        assert await onboarding.get_for_company(record.id, acme.id) is not None
        assert await onboarding.get_for_company(record.id, globex.id) is None

    async def test_assigned_task_cannot_be_deleted(self, db, seed, acme) -> None:
        onboarding = OnboardingService(db)
        employee = await seed.employee(acme)
        task = await onboarding.create_task(acme.id, {"name": "Badge"})
        await onboarding.assign(employee, [task])
        with pytest.raises(ConflictError):
            await onboarding.delete_task(task)

    async def test_list_search_matches_task_or_employee(self, db, seed, acme) -> None:
        onboarding = OnboardingService(db)
        carla = await seed.employee(acme, full_name="Carla Dias")
        task = await onboarding.create_task(acme.id, {"name": "Security training"})
        await onboarding.assign(carla, [task])
        assert len(await onboarding.list_all(acme.id, search="SECURITY")) == 1
        assert len(await onboarding.list_all(acme.id, search="carla")) == 1
        assert await onboarding.list_all(acme.id, search="nothing") == []


# ---------------------------------------------------------------------------
# Documents and photos
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestDocumentService:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("contract.pdf", "contract.pdf"),
            ("../../etc/passwd", "passwd"),
            ("C:\\Users\\me\\my file (1).pdf", "my_file_1_.pdf"),
            ("...", "file"),
        ],
    )
    def test_safe_file_name(self, raw: str, expected: str) -> None:
        assert safe_file_name(raw) == expected

    async def test_create_and_delete_manage_blob(self, db, seed, acme, store) -> None:
        documents = DocumentService(db, store)
        employee = await seed.employee(acme)
        document = await documents.create(
            employee,
            name="CPF",
            doc_type="cpf",
            file_name="cpf.png",
            content=b"\x89PNG",
            content_type="image/png",
            expiration_date=None,
            uploaded_by=employee.id,
        )
        assert document.file_path.startswith(f"documents/{acme.id}/{employee.id}/")
        assert document.file_size == 4
        assert await documents.read_blob(document) == b"\x89PNG"
        assert documents.public_url(document) == f"/files/{document.file_path}"

        await documents.delete(document)
        assert await store.get(document.file_path) is None
        assert await documents.get(document.id) is None


@pytest.mark.unit
class TestPhotoService:
    async def test_replace_drops_previous_blob(self, db, seed, acme, store) -> None:
        photos = PhotoService(db, store)
        employee = await seed.employee(acme)
        first = await photos.replace(employee, b"first", "image/png")
        first_key = first.admission_photo
        second = await photos.replace(employee, b"second", "image/jpeg")

        assert second.id == first.id
        assert second.admission_photo.endswith(".jpg")
        assert await store.get(first_key) is None
        assert await store.get(second.admission_photo) == b"second"
        assert second.photo_url == store.public_url(second.admission_photo)


# ---------------------------------------------------------------------------
# Time off
# ---------------------------------------------------------------------------


def _leave(start: date, end: date, **extra) -> dict:
    return {"type": "vacation", "start_date": start, "end_date": end, "reason": "Rest", **extra}


@pytest.mark.unit
class TestTimeOffService:
    async def test_create_counts_inclusive_days(self, db, seed, acme) -> None:
        employee = await seed.employee(acme)
        record = await TimeOffService(db).create(
            employee, _leave(date(2026, 7, 1), date(2026, 7, 10))
        )
        assert record.total_days == 10
        assert record.status == "pending"
        assert record.approved_by is None

    async def test_set_status_records_and_clears_approver(self, db, seed, acme) -> None:
        service = TimeOffService(db)
        employee = await seed.employee(acme)
        boss = await seed.employee(acme, full_name="Boss", is_admin=True)
        record = await service.create(employee, _leave(date(2026, 7, 1), date(2026, 7, 2)))

        approved = await service.set_status(record, "approved", reviewer_id=boss.id)
        assert approved.approved_by == boss.id
        assert approved.approved_at is not None
        assert (await service.detail(approved))["approver"] == {"full_name": "Boss"}

        rejected = await service.set_status(approved, "rejected", reviewer_id=boss.id)
        assert rejected.approved_by is None
        assert rejected.approved_at is None

    async def test_is_on_time_off_needs_approval_and_coverage(self, db, seed, acme) -> None:
        service = TimeOffService(db)
        employee = await seed.employee(acme)
        today = date.today()
        record = await service.create(
            employee, _leave(today - timedelta(days=2), today + timedelta(days=2))
        )
        assert await service.is_on_time_off(employee.id) is False

        await service.set_status(record, "approved", reviewer_id=employee.id)
        assert await service.is_on_time_off(employee.id) is True
        assert await service.is_on_time_off(employee.id, on=today + timedelta(days=2)) is True
        assert await service.is_on_time_off(employee.id, on=today + timedelta(days=3)) is False

    async def test_list_is_company_scoped(self, db, seed, acme, globex) -> None:
        service = TimeOffService(db)
        ours = await seed.employee(acme, full_name="Ana Lima")
        theirs = await seed.employee(globex, full_name="Ana Souza")
        await service.create(ours, _leave(date(2026, 1, 1), date(2026, 1, 2)))
        await service.create(theirs, _leave(date(2026, 1, 1), date(2026, 1, 2)))

        rows = await service.list_all(acme.id, search="ana")
        assert [r["employee"]["full_name"] for r in rows] == ["Ana Lima"]
        assert await service.list_all(acme.id, type_="sick_leave") == []

    async def test_employee_delete_clears_approvals(self, db, seed, acme) -> None:
        service = TimeOffService(db)
        employee = await seed.employee(acme)
        boss = await seed.employee(acme, full_name="Boss", is_admin=True)
        record = await service.create(employee, _leave(date(2026, 7, 1), date(2026, 7, 2)))
        await service.set_status(record, "approved", reviewer_id=boss.id)

        await EmployeeService(db).delete(boss)
        found = await service.get(record.id)
        assert found is not None
        assert found[0].approved_by is None
