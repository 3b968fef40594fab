"""Tests for DesignationService."""

import pytest

from payroll_kernel.exceptions import (
    DesignationInUseError,
    DesignationNotFoundError,
    DuplicateDesignationError,
    ReservedDesignationError,
)


class TestDefaults:
    def test_defaults_created_once(self, services):
        created = services.designations.ensure_defaults()
        assert {d.key for d in created} == {
            "operator",
            "karigar",
            "helper",
            "supervisor",
            "manager",
        }
        assert services.designations.ensure_defaults() == []

    def test_production_roles_are_variable_pay(self, designations):
        assert designations["operator"].is_variable_pay
        assert designations["helper"].is_variable_pay
        assert not designations["manager"].is_variable_pay


class TestCreate:
    def test_create_and_find_case_insensitively(self, services, designations):
        created = services.designations.create(" Cutter ", is_variable_pay=False, notes="night")
        assert created.name == "Cutter"
        assert services.designations.find_by_name("CUTTER").id == created.id

    def test_duplicate_name_rejected(self, services, designations):
        with pytest.raises(DuplicateDesignationError):
            services.designations.create("Operator", is_variable_pay=True)

    def test_empty_name_rejected(self, services):
        with pytest.raises(ValueError):
            services.designations.create("   ", is_variable_pay=True)


class TestUpdate:
    def test_rename_custom_designation(self, services, designations):
        updated = services.designations.update(
            designations["supervisor"].id, name="Floor Supervisor"
        )
        assert updated.name == "Floor Supervisor"
        assert services.designations.find_by_name("supervisor") is None

    def test_rename_to_existing_name_rejected(self, services, designations):
        with pytest.raises(DuplicateDesignationError):
            services.designations.update(designations["supervisor"].id, name="Manager")

    def test_reserved_cannot_be_renamed(self, services, designations):
        with pytest.raises(ReservedDesignationError) as exc_info:
            services.designations.update(designations["operator"].id, name="Machinist")
        assert exc_info.value.action == "rename"

    def test_reserved_cannot_change_pay_mode(self, services, designations):
        with pytest.raises(ReservedDesignationError) as exc_info:
            services.designations.update(designations["helper"].id, is_variable_pay=False)
        assert exc_info.value.code == "RESERVED_DESIGNATION"

    def test_reserved_notes_can_change(self, services, designations):
        updated = services.designations.update(designations["karigar"].id, notes="skilled")
        assert updated.notes == "skilled"

    def test_pay_mode_change_blocked_while_in_use(self, services, designations, make_employee):
        make_employee("Asif", "manager", "30000")
        with pytest.raises(DesignationInUseError) as exc_info:
            services.designations.update(designations["manager"].id, is_variable_pay=True)
        assert exc_info.value.employee_count == 1

    def test_pay_mode_change_when_unused(self, services, designations):
        updated = services.designations.update(
            designations["supervisor"].id, is_variable_pay=True
        )
        assert updated.is_variable_pay

    def test_no_change_returns_current(self, services, designations):
        current = designations["manager"]
        assert services.designations.update(current.id, name="manager") == current


class TestDelete:
    def test_reserved_cannot_be_deleted(self, services, designations):
        with pytest.raises(ReservedDesignationError) as exc_info:
            services.designations.delete(designations["karigar"].id)
        assert exc_info.value.action == "delete"

    def test_in_use_cannot_be_deleted(self, services, designations, make_employee):
        make_employee("Asif", "supervisor", "25000")
        with pytest.raises(DesignationInUseError):
            services.designations.delete(designations["supervisor"].id)

    def test_delete_unused(self, services, designations):
        target = designations["supervisor"]
        services.designations.delete(target.id)
        with pytest.raises(DesignationNotFoundError):
            services.designations.get(target.id)
