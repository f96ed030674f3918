# ferias/core/status.py
"""
Derivação de Status - Status Derivation

Calcula o status efetivo (dinâmico) de frações e períodos aquisitivos a
partir do status gravado e da data de hoje. O resultado nunca é gravado:
"hoje" muda sem que haja escrita, então a derivação é refeita a cada leitura.

Também reúne as operações sobre o catálogo configurável de status.
"""

import re
from datetime import date
from typing import List, Optional

from ferias.core.models import (
    AccrualPeriod,
    AppConfig,
    FractionStatus,
    PeriodDisplayStatus,
    StatusConfig,
    VacationFraction,
    WorkflowStatus,
)

_TERMINAL_FRACTION_STATUSES = (FractionStatus.CANCELED, FractionStatus.ENJOYED)
_TIME_DRIVEN_FRACTION_STATUSES = (FractionStatus.SCHEDULED, FractionStatus.ENJOYING)
_WORKFLOW_DOMINANT_STATUSES = (
    WorkflowStatus.PENDING_MANAGER,
    WorkflowStatus.PENDING_RH,
    WorkflowStatus.REJECTED,
)

STATUS_LABELS = {
    "planned": "Planejado",
    "scheduled": "Programado",
    "pending_manager": "Aguardando Gestor",
    "pending_rh": "Aguardando RH",
    "enjoying": "Em Gozo",
    "enjoyed": "Gozado",
    "canceled": "Cancelado",
    "rejected": "Rejeitado",
    "planning": "Em planejamento",
}

_STATUS_ID_PATTERN = re.compile(r"^[a-z0-9_]+$")


def derive_fraction_status(fraction: VacationFraction, today: date) -> FractionStatus:
    """
    Status efetivo de uma fração na data `today`

    Args:
        fraction: Fração com status gravado
        today: Data de referência

    Returns:
        FractionStatus: scheduled/enjoying/enjoyed para frações programadas,
        status gravado nos demais casos
    """
    status = fraction.status

    if status in _TERMINAL_FRACTION_STATUSES:
        return status

    if status in _TIME_DRIVEN_FRACTION_STATUSES:
        if today > fraction.termino_ferias:
            return FractionStatus.ENJOYED
        if fraction.inicio_ferias <= today:
            return FractionStatus.ENJOYING
        return FractionStatus.SCHEDULED

    return status


def derive_accrual_period_status(period: AccrualPeriod, today: date) -> PeriodDisplayStatus:
    """
    Status efetivo do período aquisitivo

    Status de fluxo (aguardando gestor/RH, rejeitado) prevalecem; sem frações
    válidas o período está em planejamento; com todas gozadas, gozado.
    """
    if period.status in _WORKFLOW_DOMINANT_STATUSES:
        return PeriodDisplayStatus(period.status.value)

    valid_fractions = period.active_fractions()
    if not valid_fractions:
        return PeriodDisplayStatus.PLANNING

    if all(derive_fraction_status(f, today) == FractionStatus.ENJOYED for f in valid_fractions):
        return PeriodDisplayStatus.ENJOYED

    return PeriodDisplayStatus.SCHEDULED


def has_started_fractions(period: AccrualPeriod, today: date) -> bool:
    """Indica se alguma fração do período já está em gozo ou gozada"""
    return any(
        derive_fraction_status(f, today) in (FractionStatus.ENJOYING, FractionStatus.ENJOYED)
        for f in period.fracionamentos
    )


# Catálogo de status

def _status_value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def status_label(status, config: Optional[AppConfig] = None) -> str:
    """Rótulo exibido para um status (catálogo configurado tem precedência)"""
    status_id = _status_value(status)
    if config is not None:
        custom = next((s for s in config.status_ferias if s.id == status_id), None)
        if custom:
            return custom.label
    return STATUS_LABELS.get(status_id, "Desconhecido")


def active_statuses(config: AppConfig, category: str) -> List[StatusConfig]:
    """Status ativos de uma categoria ('period' ou 'fraction'); 'both' entra nas duas"""
    return [
        s for s in config.status_ferias
        if s.active and (s.category == category or s.category == "both")
    ]


def add_status(config: AppConfig, status_id: str, label: str, style: str = "neutral",
               category: str = "both") -> AppConfig:
    """
    Inclui um status customizado no catálogo

    Raises:
        ValueError: ID/rótulo vazios, ID fora do padrão ou já existente
    """
    clean_id = re.sub(r"\s+", "_", (status_id or "").strip().lower())
    if not clean_id or not (label or "").strip():
        raise ValueError("ID e Rótulo são obrigatórios.")
    if any(s.id == clean_id for s in config.status_ferias):
        raise ValueError("Este ID de status já existe.")
    if not _STATUS_ID_PATTERN.match(clean_id):
        raise ValueError("O ID deve conter apenas letras minúsculas, números e underline.")

    new_status = StatusConfig(
        id=clean_id,
        label=label.strip(),
        style=style,
        active=True,
        category=category,
        is_system=False,
    )
    return config.model_copy(update={"status_ferias": [*config.status_ferias, new_status]})


def remove_status(config: AppConfig, status_id: str) -> AppConfig:
    """
    Remove um status customizado do catálogo

    Raises:
        ValueError: status inexistente ou protegido (de sistema)
    """
    target = next((s for s in config.status_ferias if s.id == status_id), None)
    if target is None:
        raise ValueError(f"Status não encontrado: {status_id}")
    if target.is_system:
        raise ValueError(f"Status de sistema não pode ser excluído: {status_id}")
    remaining = [s for s in config.status_ferias if s.id != status_id]
    return config.model_copy(update={"status_ferias": remaining})
