from datetime import date, datetime

import pytest

from ferias.core.exceptions import ApprovalNotAllowedError, InvalidTransitionError
from ferias.core.models import FractionStatus, OrgUnit, Role, WorkflowStatus
from ferias.core.workflow import (
    APPROVE,
    REJECT,
    apply_approval_action,
    can_approve,
    can_transition,
    is_superior_area,
    manager_change_notifications,
    new_signature_envelope,
)

from tests.conftest import make_fraction

NOW = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def pending_period(period, employee):
    return period.model_copy(update={
        "status": WorkflowStatus.PENDING_MANAGER,
        "fracionamentos": [make_fraction(1, date(2026, 11, 30), 20)],
        "info_assinatura": new_signature_envelope(employee, NOW),
    })


@pytest.fixture
def everyone(employee, manager, rh_user, admin_user):
    return [employee, manager, rh_user, admin_user]


class TestTransitions:
    def test_main_path(self):
        assert can_transition(WorkflowStatus.PLANNING, WorkflowStatus.PENDING_MANAGER)
        assert can_transition(WorkflowStatus.PENDING_MANAGER, WorkflowStatus.PENDING_RH)
        assert can_transition(WorkflowStatus.PENDING_RH, WorkflowStatus.SCHEDULED)

    def test_rejected_returns_to_planning_flow(self):
        assert can_transition(WorkflowStatus.REJECTED, WorkflowStatus.PENDING_MANAGER)
        assert not can_transition(WorkflowStatus.REJECTED, WorkflowStatus.SCHEDULED)

    def test_no_shortcut_to_scheduled(self):
        assert not can_transition(WorkflowStatus.PENDING_MANAGER, WorkflowStatus.SCHEDULED)
        assert not can_transition(WorkflowStatus.PLANNING, WorkflowStatus.SCHEDULED)


class TestSuperiorArea:
    def test_transitive_ancestor(self, admin_user, employee, org_units):
        assert is_superior_area(admin_user, employee, org_units)

    def test_sibling_is_not_ancestor(self, rh_user, employee, org_units):
        assert not is_superior_area(rh_user, employee, org_units)

    def test_cycle_does_not_grant(self, admin_user, employee):
        cyclic = [
            OrgUnit(id=2, nome="Tecnologia", id_pai=5),
            OrgUnit(id=5, nome="Produto", id_pai=6),
            OrgUnit(id=6, nome="Plataforma", id_pai=5),
        ]
        assert not is_superior_area(admin_user, employee, cyclic)


class TestCanApprove:
    def test_manager_same_area(self, manager, employee, org_units):
        assert can_approve(manager, employee, WorkflowStatus.PENDING_MANAGER, org_units)

    def test_manager_needs_higher_level(self, manager, employee, org_units):
        peer = manager.model_copy(update={"nivel_hierarquico": 1})
        assert not can_approve(peer, employee, WorkflowStatus.PENDING_MANAGER, org_units)

    def test_user_role_cannot_approve(self, manager, employee, org_units):
        plain = manager.model_copy(update={"role": Role.USER})
        assert not can_approve(plain, employee, WorkflowStatus.PENDING_MANAGER, org_units)

    def test_superior_area_can_approve(self, admin_user, employee, org_units):
        assert can_approve(admin_user, employee, WorkflowStatus.PENDING_MANAGER, org_units)

    def test_other_area_cannot_approve(self, rh_user, employee, org_units):
        senior_rh = rh_user.model_copy(update={"nivel_hierarquico": 3})
        assert not can_approve(senior_rh, employee, WorkflowStatus.PENDING_MANAGER, org_units)

    def test_rh_stage_requires_rh_area(self, rh_user, admin_user, employee, org_units):
        assert can_approve(rh_user, employee, WorkflowStatus.PENDING_RH, org_units)
        # Admin fora da área de RH não aprova a etapa do RH
        assert not can_approve(admin_user, employee, WorkflowStatus.PENDING_RH, org_units)

    def test_rh_stage_requires_level_two(self, rh_user, employee, org_units):
        junior = rh_user.model_copy(update={"nivel_hierarquico": 1})
        assert not can_approve(junior, employee, WorkflowStatus.PENDING_RH, org_units)

    @pytest.mark.parametrize("status", [WorkflowStatus.PLANNING, WorkflowStatus.SCHEDULED, WorkflowStatus.REJECTED])
    def test_other_statuses_not_approvable(self, manager, employee, org_units, status):
        assert not can_approve(manager, employee, status, org_units)

    def test_missing_participants(self, manager, org_units):
        assert not can_approve(None, manager, WorkflowStatus.PENDING_MANAGER, org_units)


class TestApplyApprovalAction:
    def test_manager_approval(self, pending_period, manager, employee, everyone, org_units):
        outcome = apply_approval_action(pending_period, APPROVE, manager, employee, everyone, org_units, NOW)

        assert outcome.period.status == WorkflowStatus.PENDING_RH
        assert outcome.period.id_aprovador_gestor == manager.id
        assert len(outcome.period.info_assinatura.participantes) == 2
        assert outcome.period.info_assinatura.participantes[-1].assinante_id == manager.id
        recipients = sorted(n.user_id for n in outcome.notifications)
        # Solicitante, RH e admin
        assert recipients == [1, 3, 4]
        assert pending_period.status == WorkflowStatus.PENDING_MANAGER

    def test_rh_approval_schedules_fractions(self, pending_period, rh_user, employee, everyone, org_units):
        at_rh = pending_period.model_copy(update={"status": WorkflowStatus.PENDING_RH, "id_aprovador_gestor": 2})
        outcome = apply_approval_action(at_rh, APPROVE, rh_user, employee, everyone, org_units, NOW)

        assert outcome.period.status == WorkflowStatus.SCHEDULED
        assert outcome.period.id_aprovador_rh == rh_user.id
        assert all(f.status == FractionStatus.SCHEDULED for f in outcome.period.fracionamentos)
        assert sorted(n.user_id for n in outcome.notifications) == [1, 2]
        assert "aprovada" in outcome.notifications[0].message
        assert at_rh.fracionamentos[0].status == FractionStatus.PLANNED

    def test_rh_approval_keeps_canceled_fractions(self, pending_period, rh_user, employee, everyone, org_units):
        fractions = [
            make_fraction(1, date(2026, 11, 30), 20),
            make_fraction(2, date(2027, 1, 4), 10, status=FractionStatus.CANCELED),
        ]
        at_rh = pending_period.model_copy(update={"status": WorkflowStatus.PENDING_RH, "fracionamentos": fractions})
        outcome = apply_approval_action(at_rh, APPROVE, rh_user, employee, everyone, org_units, NOW)
        assert [f.status for f in outcome.period.fracionamentos] == [FractionStatus.SCHEDULED, FractionStatus.CANCELED]

    def test_reject_notifies_requester_only(self, pending_period, manager, employee, everyone, org_units):
        outcome = apply_approval_action(pending_period, REJECT, manager, employee, everyone, org_units, NOW)
        assert outcome.period.status == WorkflowStatus.REJECTED
        assert [n.user_id for n in outcome.notifications] == [employee.id]
        assert "rejeitada" in outcome.notifications[0].message
        assert outcome.period.fracionamentos == pending_period.fracionamentos

    def test_without_authority(self, pending_period, rh_user, employee, everyone, org_units):
        with pytest.raises(ApprovalNotAllowedError):
            apply_approval_action(pending_period, APPROVE, rh_user, employee, everyone, org_units, NOW)

    @pytest.mark.parametrize("status", [WorkflowStatus.PLANNING, WorkflowStatus.SCHEDULED, WorkflowStatus.REJECTED])
    def test_not_approvable_status(self, pending_period, manager, employee, everyone, org_units, status):
        p = pending_period.model_copy(update={"status": status})
        with pytest.raises(InvalidTransitionError):
            apply_approval_action(p, APPROVE, manager, employee, everyone, org_units, NOW)

    def test_unknown_action(self, pending_period, manager, employee, everyone, org_units):
        with pytest.raises(InvalidTransitionError):
            apply_approval_action(pending_period, "cancel", manager, employee, everyone, org_units, NOW)


class TestManagerChange:
    def test_new_manager_notified_of_pending_requests(self, employee, admin_user, manager, pending_period):
        old = employee.model_copy(update={"periodos_aquisitivos": [pending_period]})
        new = old.model_copy(update={"gestor": admin_user.id})
        notifications = manager_change_notifications(old, new, [employee, manager, admin_user])
        assert [n.user_id for n in notifications] == [admin_user.id]
        assert "transferidas" in notifications[0].message

    def test_no_notification_without_pending(self, employee, admin_user, manager):
        new = employee.model_copy(update={"gestor": admin_user.id})
        assert manager_change_notifications(employee, new, [employee, manager, admin_user]) == []
