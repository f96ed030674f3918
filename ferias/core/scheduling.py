# ferias/core/scheduling.py
"""
Operações de Agendamento - Scheduling Operations

Escritas feitas pelo chamador depois de uma validação aceita, bloqueios de
exclusão e provisionamento de novos períodos aquisitivos. Todas as funções
devolvem cópias; nenhum argumento é alterado.
"""

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from ferias.config import Config
from ferias.core.exceptions import InvalidTransitionError, OperationBlockedError
from ferias.core.models import (
    AbonoBasis,
    AccrualPeriod,
    AppConfig,
    DayInputMode,
    Employee,
    FractionRequest,
    FractionStatus,
    Notification,
    PeriodDisplayStatus,
    VacationFraction,
    WorkflowStatus,
)
from ferias.core.status import (
    derive_accrual_period_status,
    derive_fraction_status,
    has_started_fractions,
)
from ferias.core.workflow import SUBMIT, can_transition, new_signature_envelope
from ferias.utils.date_utils import add_days, add_years, end_date_for

logger = logging.getLogger(__name__)


def resequence(fractions: Iterable[VacationFraction]) -> List[VacationFraction]:
    """Ordena por data de início e renumera a sequência 1..N"""
    ordered = sorted(fractions, key=lambda f: f.inicio_ferias)
    return [f.model_copy(update={"sequencia": index}) for index, f in enumerate(ordered, start=1)]


def apply_fraction_request(employee: Employee, period: AccrualPeriod, request: FractionRequest,
                           now: datetime, editing_fraction_id: Optional[int] = None,
                           new_fraction_id: Optional[int] = None) -> Tuple[AccrualPeriod, List[Notification]]:
    """
    Grava uma solicitação já validada no período

    A fração entra (ou volta) como planejada, as frações são renumeradas,
    o período segue para aprovação do gestor com aprovadores limpos e um
    novo envelope de assinatura do solicitante.

    Args:
        employee: Solicitante
        period: Período aquisitivo alvo
        request: Solicitação aceita pelo motor de regras
        now: Momento da gravação
        editing_fraction_id: Fração editada (None para inclusão)
        new_fraction_id: ID da nova fração (padrão: maior ID do período + 1)

    Returns:
        tuple: (período atualizado, notificações)
    """
    if not can_transition(period.status, WorkflowStatus.PENDING_MANAGER):
        raise InvalidTransitionError(period.status.value, SUBMIT)

    start = request.data_inicio
    values = {
        "inicio_ferias": start,
        "termino_ferias": end_date_for(start, request.quantidade_dias),
        "quantidade_dias": request.quantidade_dias,
        "dias_abono": request.effective_abono_days,
        "adiantamento13": request.adiantamento13,
        "status": FractionStatus.PLANNED,
    }

    if editing_fraction_id is not None:
        if not any(f.id == editing_fraction_id for f in period.fracionamentos):
            raise ValueError(f"Fração {editing_fraction_id} não encontrada no período {period.id}")
        fractions = [
            f.model_copy(update=values) if f.id == editing_fraction_id else f
            for f in period.fracionamentos
        ]
    else:
        if new_fraction_id is None:
            new_fraction_id = max((f.id for f in period.fracionamentos), default=0) + 1
        fractions = [*period.fracionamentos, VacationFraction(id=new_fraction_id, sequencia=1, **values)]

    updated = period.model_copy(deep=True, update={
        "fracionamentos": resequence(fractions),
        "status": WorkflowStatus.PENDING_MANAGER,
        "id_aprovador_gestor": None,
        "id_aprovador_rh": None,
        "info_assinatura": new_signature_envelope(employee, now),
    })

    notifications = []
    if employee.gestor is not None:
        notifications.append(Notification(
            user_id=employee.gestor,
            message=f"{employee.nome} solicitou um novo período de férias.",
        ))

    logger.info(f"Férias gravadas para {employee.matricula} no período {period.id}; aguardando gestor")
    return updated, notifications


def can_delete_fraction(fraction: VacationFraction, today: date) -> bool:
    return derive_fraction_status(fraction, today) not in (FractionStatus.ENJOYING, FractionStatus.ENJOYED)


def delete_fraction(period: AccrualPeriod, fraction_id: int, today: date) -> AccrualPeriod:
    """
    Exclui uma fração e renumera as restantes

    Raises:
        OperationBlockedError: fração já iniciada ou concluída
        ValueError: fração inexistente
    """
    fraction = next((f for f in period.fracionamentos if f.id == fraction_id), None)
    if fraction is None:
        raise ValueError(f"Fração {fraction_id} não encontrada no período {period.id}")
    if not can_delete_fraction(fraction, today):
        raise OperationBlockedError("Não é possível excluir férias que já foram iniciadas ou concluídas.")

    remaining = [f for f in period.fracionamentos if f.id != fraction_id]
    return period.model_copy(deep=True, update={"fracionamentos": resequence(remaining)})


def delete_schedule(period: AccrualPeriod, today: date) -> AccrualPeriod:
    """
    Exclui todo o planejamento do período

    Raises:
        OperationBlockedError: alguma fração já iniciada ou concluída
    """
    if has_started_fractions(period, today):
        raise OperationBlockedError(
            "Não é possível excluir o planejamento, pois ele contém férias que já foram "
            "iniciadas ou concluídas."
        )
    return period.model_copy(deep=True, update={"fracionamentos": []})


def can_modify_schedule(period: AccrualPeriod, today: date) -> bool:
    """Planejamento editável até o limite de concessão e enquanto nenhuma fração começou"""
    if period.limite_concessao < today:
        return False
    return not has_started_fractions(period, today)


# Provisionamento de períodos aquisitivos

def period_label(start: date, end: date) -> str:
    return f"{start.year}-{end.year}"


def suggest_next_period(employee: Employee) -> Tuple[date, date]:
    """
    Datas sugeridas para o próximo período aquisitivo

    Returns:
        tuple: (início, término) - dia seguinte ao último período (ou a
        admissão) e um ano menos um dia depois
    """
    if employee.periodos_aquisitivos:
        last = max(employee.periodos_aquisitivos, key=lambda p: p.termino_pa)
        start = add_days(last.termino_pa, 1)
    else:
        start = employee.data_admissao
    end = add_days(add_years(start, 1), -1)
    return start, end


def create_accrual_period(employee: Employee, start: date, end: date, config: AppConfig,
                          period_id: int,
                          day_input_mode: DayInputMode = DayInputMode.SYSTEM,
                          abono_basis: AbonoBasis = AbonoBasis.SYSTEM) -> Employee:
    """
    Inclui um novo período aquisitivo no colaborador

    Raises:
        ValueError: datas ausentes/invertidas ou período já existente
    """
    if start is None or end is None:
        raise ValueError("As datas de início e fim são obrigatórias.")
    if start >= end:
        raise ValueError("A data de início deve ser anterior à data de fim.")

    label = period_label(start, end)
    if any(p.rotulo_periodo == label for p in employee.periodos_aquisitivos):
        raise ValueError(f"Erro: O colaborador já possui o período aquisitivo {label}.")

    period = AccrualPeriod(
        id=period_id,
        rotulo_periodo=label,
        inicio_pa=start,
        termino_pa=end,
        limite_concessao=add_days(end, config.prazo_limite_concessao_dias),
        saldo_total=Config.SALDO_TOTAL_PADRAO,
        status=WorkflowStatus.PLANNING,
        tipo_entrada_dias_ferias=day_input_mode,
        base_calculo_abono=abono_basis,
    )
    return employee.model_copy(deep=True, update={
        "periodos_aquisitivos": [*employee.periodos_aquisitivos, period],
    })


def provision_periods_by_due_date(employees: Iterable[Employee], due_date_limit: date,
                                  config: AppConfig, first_period_id: int) -> Tuple[List[Employee], int]:
    """
    Criação de períodos em massa

    Para cada colaborador ativo cujo próximo período sugerido termina até
    `due_date_limit`, cria esse período.

    Returns:
        tuple: (colaboradores atualizados, quantidade de períodos criados)
    """
    updated_employees = []
    created = 0
    next_id = first_period_id

    for employee in employees:
        if employee.status != "active":
            updated_employees.append(employee)
            continue
        start, end = suggest_next_period(employee)
        if end > due_date_limit:
            updated_employees.append(employee)
            continue
        try:
            employee = create_accrual_period(employee, start, end, config, next_id)
        except ValueError as e:
            logger.warning(f"Período não criado para {employee.matricula}: {e}")
            updated_employees.append(employee)
            continue
        next_id += 1
        created += 1
        updated_employees.append(employee)

    logger.info(f"Criação em massa até {due_date_limit}: {created} período(s) criado(s)")
    return updated_employees, created


def periods_to_display(employee: Employee, config: AppConfig, today: date) -> List[AccrualPeriod]:
    """
    Períodos exibidos no painel do colaborador

    Ocultos: limite de concessão vencido, período gozado, ou término após
    o limite de exibição configurado.
    """
    visible = []
    for period in employee.periodos_aquisitivos:
        if period.limite_concessao < today:
            continue
        if derive_accrual_period_status(period, today) == PeriodDisplayStatus.ENJOYED:
            continue
        if config.exibir_limite_prazo and period.termino_pa > config.exibir_limite_prazo:
            continue
        visible.append(period)
    return sorted(visible, key=lambda p: p.inicio_pa)
