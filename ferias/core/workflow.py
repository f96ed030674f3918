# ferias/core/workflow.py
"""
Fluxo de Aprovação - Approval Workflow

Máquina de estados persistida do período aquisitivo:

    planning -> pending_manager -> pending_rh -> scheduled
                      |                |
                      +--> rejected <--+

`rejected` volta ao planejamento por uma nova solicitação. O status de
gozo das frações é derivado à parte (ferias.core.status) e nunca se
mistura com o status de fluxo gravado.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional

from pydantic import BaseModel, Field

from ferias.config import Config
from ferias.core.exceptions import ApprovalNotAllowedError, InvalidTransitionError
from ferias.core.models import (
    AccrualPeriod,
    Employee,
    FractionStatus,
    Notification,
    OrgUnit,
    Role,
    SignatureEvent,
    SignatureInfo,
    SignatureParticipant,
    WorkflowStatus,
)
from ferias.utils.date_utils import format_date

logger = logging.getLogger(__name__)

APPROVE = "approve"
REJECT = "reject"
SUBMIT = "submit"

WORKFLOW_TRANSITIONS: Dict[WorkflowStatus, FrozenSet[WorkflowStatus]] = {
    WorkflowStatus.PLANNING: frozenset({WorkflowStatus.PENDING_MANAGER}),
    WorkflowStatus.PENDING_MANAGER: frozenset({
        WorkflowStatus.PENDING_RH,
        WorkflowStatus.REJECTED,
        WorkflowStatus.PENDING_MANAGER,
    }),
    WorkflowStatus.PENDING_RH: frozenset({
        WorkflowStatus.SCHEDULED,
        WorkflowStatus.REJECTED,
        WorkflowStatus.PENDING_MANAGER,
    }),
    WorkflowStatus.REJECTED: frozenset({WorkflowStatus.PENDING_MANAGER}),
    # Programado não recebe aprovação/rejeição; só uma nova solicitação reabre o fluxo
    WorkflowStatus.SCHEDULED: frozenset({WorkflowStatus.PENDING_MANAGER}),
}

APPROVABLE_STATUSES = frozenset({WorkflowStatus.PENDING_MANAGER, WorkflowStatus.PENDING_RH})

_MANAGER_APPROVER_ROLES = (Role.MANAGER, Role.RH, Role.ADMIN)
_RH_APPROVER_ROLES = (Role.RH, Role.ADMIN)
_MIN_RH_LEVEL = 2


class ApprovalOutcome(BaseModel):
    """Período atualizado e notificações geradas por uma ação de aprovação"""

    period: AccrualPeriod
    notifications: List[Notification] = Field(default_factory=list)


def can_transition(current: WorkflowStatus, target: WorkflowStatus) -> bool:
    return target in WORKFLOW_TRANSITIONS.get(current, frozenset())


def is_superior_area(potential_superior: Employee, subordinate: Employee,
                     org_units: Iterable[OrgUnit]) -> bool:
    """
    Verifica se a área do aprovador é ancestral da área do subordinado

    Percorre a cadeia de `id_pai` a partir da área do subordinado. A árvore
    é editável pelo usuário; uma cadeia que revisita um nó é tratada como
    configuração inválida e não concede alçada.
    """
    units = list(org_units)
    subordinate_area = next(
        (u for u in units if u.nome == subordinate.departamento and u.tipo == "Área"), None
    )
    if subordinate_area is None:
        return False

    by_id = {u.id: u for u in units}
    visited = {subordinate_area.id}
    current_id = subordinate_area.id_pai

    while current_id is not None:
        if current_id in visited:
            logger.warning(f"Ciclo detectado na estrutura organizacional (unidade {current_id})")
            return False
        visited.add(current_id)
        parent = by_id.get(current_id)
        if parent is None:
            break
        if parent.nome == potential_superior.departamento:
            return True
        current_id = parent.id_pai
    return False


def can_approve(approver: Optional[Employee], requester: Optional[Employee], status,
                org_units: Iterable[OrgUnit],
                rh_department: str = Config.RH_DEPARTAMENTO) -> bool:
    """
    Alçada de aprovação do período

    Args:
        approver: Colaborador que pretende aprovar
        requester: Dono da solicitação
        status: Status de fluxo atual do período
        org_units: Estrutura organizacional
        rh_department: Nome da área de RH

    Returns:
        bool: True se o aprovador pode aprovar/rejeitar nesse status
    """
    if approver is None or requester is None:
        return False

    if status == WorkflowStatus.PENDING_MANAGER:
        has_role = approver.role in _MANAGER_APPROVER_ROLES
        is_higher_level = approver.nivel_hierarquico > requester.nivel_hierarquico
        same_area = approver.departamento == requester.departamento
        return has_role and is_higher_level and (
            same_area or is_superior_area(approver, requester, org_units)
        )

    if status == WorkflowStatus.PENDING_RH:
        return (
            approver.role in _RH_APPROVER_ROLES
            and approver.nivel_hierarquico >= _MIN_RH_LEVEL
            and approver.departamento == rh_department
        )

    return False


def build_signature_participant(signer: Employee, now: datetime,
                                description: str) -> SignatureParticipant:
    """Participante com a trilha de eventos de uma assinatura concluída"""
    return SignatureParticipant(
        assinante_id=signer.id,
        data_conclusao=now,
        eventos=[
            SignatureEvent(name="Termos da assinatura eletrônica", timestamp=now,
                           detalhes="Aceitou os termos da assinatura eletrônica"),
            SignatureEvent(name="Assinatura efetuada", timestamp=now,
                           detalhes=f"Realizou a assinatura com validade jurídica ({description})"),
            SignatureEvent(name="Operação concluída", timestamp=now, detalhes="Operação concluída"),
        ],
    )


def new_signature_envelope(requester: Employee, now: datetime) -> SignatureInfo:
    """Envelope novo, com o solicitante como primeiro signatário"""
    return SignatureInfo(
        document_id=f"doc-{uuid.uuid4().hex[:12]}",
        operation_id=str(uuid.uuid4().int % 9_000_000 + 1_000_000),
        participantes=[build_signature_participant(requester, now, "solicitação")],
    )


def apply_approval_action(period: AccrualPeriod, action: str, approver: Employee,
                          requester: Employee, all_employees: Iterable[Employee],
                          org_units: Iterable[OrgUnit], now: datetime,
                          rh_department: str = Config.RH_DEPARTAMENTO) -> ApprovalOutcome:
    """
    Aplica uma ação de aprovação ou rejeição

    Args:
        period: Período aquisitivo aguardando aprovação
        action: 'approve' ou 'reject'
        approver: Quem executa a ação
        requester: Dono do período
        all_employees: Colaboradores (para localizar RH e gestor)
        org_units: Estrutura organizacional
        now: Momento da ação (registro da assinatura)

    Returns:
        ApprovalOutcome: período atualizado (cópia) e notificações

    Raises:
        InvalidTransitionError: ação desconhecida ou status não aprovável
        ApprovalNotAllowedError: aprovador sem alçada
    """
    status = period.status
    if action not in (APPROVE, REJECT) or status not in APPROVABLE_STATUSES:
        raise InvalidTransitionError(status.value, action)

    org_units = list(org_units)
    if not can_approve(approver, requester, status, org_units, rh_department):
        raise ApprovalNotAllowedError(
            f"{approver.nome} não possui alçada para aprovar a solicitação de {requester.nome}"
        )

    employees = list(all_employees)
    period_label = f"{format_date(period.inicio_pa)} a {format_date(period.termino_pa)}"
    notifications: List[Notification] = []

    if action == REJECT:
        updated = period.model_copy(deep=True, update={"status": WorkflowStatus.REJECTED})
        notifications.append(Notification(
            user_id=requester.id,
            message=f"Sua programação de férias para o período de {period_label} foi rejeitada.",
        ))
        logger.info(f"Período {period.id} de {requester.matricula} rejeitado por {approver.matricula}")
        return ApprovalOutcome(period=updated, notifications=notifications)

    updated = period.model_copy(deep=True)
    participant = build_signature_participant(approver, now, "aprovação")
    if updated.info_assinatura is None:
        updated.info_assinatura = SignatureInfo(
            document_id=f"doc-{uuid.uuid4().hex[:12]}",
            operation_id=str(uuid.uuid4().int % 9_000_000 + 1_000_000),
        )
    updated.info_assinatura.participantes.append(participant)

    if status == WorkflowStatus.PENDING_MANAGER:
        updated.status = WorkflowStatus.PENDING_RH
        updated.id_aprovador_gestor = approver.id
        notifications.append(Notification(
            user_id=requester.id,
            message="Sua programação de férias foi aprovada pelo seu gestor e aguarda o RH.",
        ))
        for rh_user in employees:
            if rh_user.role in (Role.RH, Role.ADMIN):
                notifications.append(Notification(
                    user_id=rh_user.id,
                    message=(f"A solicitação de {requester.nome} foi aprovada pelo gestor "
                             "e precisa da sua aprovação."),
                ))
    else:
        updated.status = WorkflowStatus.SCHEDULED
        updated.id_aprovador_rh = approver.id
        for fraction in updated.fracionamentos:
            if fraction.status == FractionStatus.PLANNED:
                fraction.status = FractionStatus.SCHEDULED
        notifications.append(Notification(
            user_id=requester.id,
            message=f"Sua programação de férias para o período de {period_label} foi aprovada!",
        ))
        manager = next((e for e in employees if e.id == requester.gestor), None)
        if manager is not None:
            notifications.append(Notification(
                user_id=manager.id,
                message=f"A solicitação de {requester.nome} foi aprovada pelo RH.",
            ))

    logger.info(
        f"Período {period.id} de {requester.matricula}: {status.value} -> {updated.status.value} "
        f"(aprovador {approver.matricula})"
    )
    return ApprovalOutcome(period=updated, notifications=notifications)


def manager_change_notifications(old: Employee, new: Employee,
                                 all_employees: Iterable[Employee]) -> List[Notification]:
    """Avisa o novo gestor quando há solicitações aguardando aprovação transferidas"""
    if old.gestor == new.gestor or new.gestor is None:
        return []
    pending = [p for p in new.periodos_aquisitivos if p.status == WorkflowStatus.PENDING_MANAGER]
    if not pending:
        return []
    new_manager = next((e for e in all_employees if e.id == new.gestor), None)
    if new_manager is None:
        return []
    return [Notification(
        user_id=new_manager.id,
        message=(f"Você tem novas solicitações de férias de {new.nome} que foram "
                 "transferidas para sua aprovação."),
    )]
