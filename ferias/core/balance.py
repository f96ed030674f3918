# ferias/core/balance.py
"""
Cálculo de Saldo - Balance Calculator

Dias utilizados, dias de abono, saldo restante e cota de abono pecuniário
de um período aquisitivo.
"""

from typing import List, Optional

from ferias.config import require_config
from ferias.core.models import (
    AbonoBasis,
    AccrualPeriod,
    AppConfig,
    BalanceSummary,
    DayInputMode,
)


def effective_abono_basis(period: AccrualPeriod, config: AppConfig) -> AbonoBasis:
    """Base de cálculo do abono: sobrescrita do período ou padrão do sistema"""
    if period.base_calculo_abono != AbonoBasis.SYSTEM:
        return period.base_calculo_abono
    return AbonoBasis(config.base_calculo_abono)


def effective_day_input_mode(period: AccrualPeriod, config: AppConfig) -> DayInputMode:
    """Modo de entrada dos dias: lista de opções ou digitação livre"""
    if period.tipo_entrada_dias_ferias != DayInputMode.SYSTEM:
        return period.tipo_entrada_dias_ferias
    return DayInputMode(config.tipo_entrada_dias_ferias)


def compute_balance(period: AccrualPeriod, config: AppConfig,
                    exclude_fraction_id: Optional[int] = None) -> BalanceSummary:
    """
    Calcula o saldo do período

    Args:
        period: Período aquisitivo
        config: Configuração do sistema
        exclude_fraction_id: Fração em edição, que não conta contra si mesma

    Returns:
        BalanceSummary: dias utilizados, abono, saldo restante e cota de abono
    """
    require_config(config)
    fractions = period.active_fractions(exclude_id=exclude_fraction_id)

    used_days = sum(f.quantidade_dias for f in fractions)
    abono_days = sum(f.dias_abono for f in fractions)
    remaining = period.saldo_total - used_days - abono_days

    basis = effective_abono_basis(period, config)
    if basis == AbonoBasis.CURRENT_BALANCE:
        quota = remaining // 3
    else:
        # Saldo inicial: uma única concessão de abono por período
        quota = 0 if abono_days > 0 else period.saldo_total // 3

    return BalanceSummary(
        dias_utilizados=used_days,
        dias_abono=abono_days,
        saldo_restante=remaining,
        cota_abono=max(quota, 0),
    )


def is_abono_disabled(proposed_days: int, summary: BalanceSummary) -> bool:
    """Abono não é oferecido sem cota ou quando férias + abono excedem o saldo"""
    if summary.cota_abono <= 0:
        return True
    return proposed_days + summary.cota_abono > summary.saldo_restante


def available_day_options(config: AppConfig, summary: BalanceSummary) -> List[int]:
    """Opções de quantidade de dias que ainda cabem no saldo"""
    return [d for d in config.dias_ferias_options if d <= summary.saldo_restante]
