# ferias/core/rules.py
"""
Regras de Negocio - Vacation Business Rules

Define as regras de legalidade para agendamento de ferias (nova fracao ou
edicao de uma existente), baseadas na CLT e nas politicas da empresa.

As regras sao avaliadas em ordem fixa; a primeira violada interrompe a
avaliacao e determina o motivo devolvido ao usuario.
"""

import logging
from datetime import date
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from ferias.config import require_config
from ferias.core.balance import compute_balance, is_abono_disabled
from ferias.core.collective import find_applicable_rule
from ferias.core.exceptions import ConfigurationError
from ferias.core.models import (
    AccrualPeriod,
    AppConfig,
    CollectiveVacationRule,
    Employee,
    FractionRequest,
    Holiday,
    HolidayType,
    ValidationResult,
)
from ferias.utils.date_utils import (
    add_days,
    end_date_for,
    format_date,
    in_recurring_window,
    is_friday_or_saturday,
)

logger = logging.getLogger(__name__)

BLOCKING_HOLIDAY_TYPES = (HolidayType.FERIADO.value, HolidayType.PONTO_FACULTATIVO.value)
MIN_FRACTION_DAYS = 5
MIN_RESIDUAL_DAYS = 5
MANDATORY_BLOCK_DAYS = 14


class ValidationInput(BaseModel):
    """Contexto completo de uma solicitacao de agendamento"""

    employee: Employee
    period: AccrualPeriod
    request: FractionRequest
    today: date
    config: Optional[AppConfig] = None
    holidays: List[Holiday] = Field(default_factory=list)
    collective_rules: List[CollectiveVacationRule] = Field(default_factory=list)
    editing_fraction_id: Optional[int] = None


class _Proposal:
    """Valores derivados da solicitacao, calculados uma unica vez"""

    def __init__(self, data: ValidationInput):
        request = data.request
        self.start = request.data_inicio
        self.days = request.quantidade_dias
        self.abono = request.effective_abono_days
        self.end = end_date_for(self.start, self.days) if self.start and self.days > 0 else self.start
        self.other_fractions = data.period.active_fractions(exclude_id=data.editing_fraction_id)
        self.balance = compute_balance(data.period, data.config, exclude_fraction_id=data.editing_fraction_id)
        self.remaining_after = self.balance.saldo_restante - self.days - self.abono
        self.all_day_counts = [f.quantidade_dias for f in self.other_fractions] + [self.days]


class VacationRules:
    """Classe que encapsula todas as regras de legalidade do agendamento de ferias"""

    def __init__(self):
        # Ordem contratual: mensagens e UX dependem dela
        self.rules: List[Tuple[str, Callable]] = [
            ("data_inicio_obrigatoria", self.check_start_date_required),
            ("quantidade_dias_invalida", self.check_day_count),
            ("inicio_antes_repouso", self.check_start_weekday),
            ("inicio_antes_feriado", self.check_holiday_proximity),
            ("inicio_antes_termino_pa", self.check_accrual_period_end),
            ("antecedencia_minima", self.check_minimum_notice),
            ("antecedencia_abono", self.check_abono_notice),
            ("adiantamento13", self.check_13th_advance),
            ("limite_concessao", self.check_concession_deadline),
            ("sobreposicao", self.check_overlap),
            ("cota_abono", self.check_abono_quota),
            ("saldo_insuficiente", self.check_balance),
            ("max_fracionamentos", self.check_fraction_count),
            ("fracao_minima", self.check_minimum_fraction_size),
            ("saldo_residual", self.check_residual_balance),
            ("periodo_14_dias", self.check_mandatory_block),
        ]

    def validate(self, data: ValidationInput) -> ValidationResult:
        """
        Valida uma solicitacao de ferias nova ou editada

        Args:
            data: Colaborador, periodo, solicitacao, configuracao e calendarios

        Returns:
            ValidationResult: aceito, ou a primeira regra violada com o motivo

        Raises:
            ConfigurationError: Configuracao do sistema nao carregada
        """
        require_config(data.config)
        if data.period is None or data.employee is None:
            raise ConfigurationError("Colaborador e período aquisitivo são obrigatórios")

        proposal = _Proposal(data)
        for code, rule in self.rules:
            is_valid, reason = rule(data, proposal)
            if not is_valid:
                return self._reject(code, reason)

        logger.debug(
            f"Solicitação aceita: matrícula {data.employee.matricula}, "
            f"início {format_date(proposal.start)}, {proposal.days} dias"
        )
        return ValidationResult.accepted()

    def _reject(self, code: str, reason: str) -> ValidationResult:
        logger.debug(f"Solicitação rejeitada pela regra '{code}': {reason}")
        return ValidationResult.rejected(code, reason)

    def check_start_date_required(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        if proposal.start is None:
            return False, "Por favor, selecione uma data de início."
        return True, ""

    def check_day_count(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        if proposal.days <= 0:
            return False, "A quantidade de dias de férias deve ser maior que zero."
        return True, ""

    def check_start_weekday(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        """Ferias nao podem iniciar em sexta ou sabado (antecedem o repouso semanal)"""
        if is_friday_or_saturday(proposal.start):
            return False, ("É vedado o início das férias em sextas-feiras e sábados, "
                           "pois antecedem o repouso semanal.")
        return True, ""

    def check_holiday_proximity(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        """Ferias nao podem iniciar nos 2 dias que antecedem feriado ou ponto facultativo"""
        blocked_dates = {add_days(proposal.start, 1), add_days(proposal.start, 2)}
        unit = data.employee.unidade

        for holiday in data.holidays:
            if holiday.data not in blocked_dates:
                continue
            if holiday.tipo not in BLOCKING_HOLIDAY_TYPES:
                continue
            if holiday.unidade and holiday.unidade != unit:
                continue
            return False, "O início das férias não pode ocorrer nos 2 dias que antecedem um feriado."
        return True, ""

    def check_accrual_period_end(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        """
        Ferias antecipadas (antes do termino do P.A.) so valem se cobrirem
        integralmente as ferias coletivas aplicaveis ao colaborador
        """
        if proposal.start >= data.period.termino_pa:
            return True, ""

        rule = find_applicable_rule(data.employee, data.collective_rules, data.today)
        if rule is None:
            return False, ("Não é permitido agendar férias com início antes do término do "
                           f"período aquisitivo ({format_date(data.period.termino_pa)}).")

        if not (proposal.start <= rule.inicio and proposal.end >= rule.fim):
            return False, ("Férias antecipadas só são permitidas se cobrirem todo o período "
                           "de férias coletivas definido pela empresa.")
        return True, ""

    def check_minimum_notice(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        notice = data.config.antecedencia_minima_dias
        if proposal.start < add_days(data.today, notice):
            return False, f"A solicitação deve ser feita com no mínimo {notice} dias de antecedência."
        return True, ""

    def check_abono_notice(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        if proposal.abono <= 0:
            return True, ""
        notice = data.config.antecedencia_minima_abono_dias
        if data.today > add_days(data.period.limite_concessao, -notice):
            return False, (f"A solicitação de abono deve ser feita com no mínimo {notice} dias de "
                           "antecedência do vencimento do período "
                           f"({format_date(data.period.limite_concessao)}).")
        return True, ""

    def check_13th_advance(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        """Um adiantamento do 13o por ano civil, dentro da janela configurada"""
        if not data.request.adiantamento13:
            return True, ""

        vacation_year = proposal.start.year
        for period in data.employee.periodos_aquisitivos:
            for fraction in period.active_fractions():
                if fraction.id == data.editing_fraction_id:
                    continue
                if fraction.adiantamento13 and fraction.inicio_ferias.year == vacation_year:
                    return False, "Já existe uma solicitação de adiantamento do 13º para este ano."

        start_ddmm = data.config.inicio_adiantamento13
        end_ddmm = data.config.fim_adiantamento13
        if not in_recurring_window(proposal.start, start_ddmm, end_ddmm):
            return False, ("O adiantamento do 13º só pode ser solicitado para férias com início "
                           f"entre {start_ddmm} e {end_ddmm}.")
        return True, ""

    def check_concession_deadline(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        if proposal.start >= data.period.limite_concessao:
            return False, ("A data de início das férias não pode ser no dia ou após o limite de "
                           f"concessão ({format_date(data.period.limite_concessao)}).")
        return True, ""

    def check_overlap(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        for existing in proposal.other_fractions:
            if proposal.start <= existing.termino_ferias and proposal.end >= existing.inicio_ferias:
                return False, ("As datas deste período estão sobrepondo um período já agendado "
                               f"({format_date(existing.inicio_ferias)} a "
                               f"{format_date(existing.termino_ferias)}).")
        return True, ""

    def check_abono_quota(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        """Abono pecuniario so na cota exata, e apenas quando ferias + cota cabem no saldo"""
        if proposal.abono <= 0:
            return True, ""

        quota = proposal.balance.cota_abono
        if is_abono_disabled(proposal.days, proposal.balance):
            return False, (f"O abono pecuniário não está disponível para esta solicitação "
                           f"(cota de {quota} dias, saldo de {proposal.balance.saldo_restante} dias).")
        if proposal.abono != quota:
            return False, f"O abono pecuniário deve ser de exatamente {quota} dias (cota do período)."
        return True, ""

    def check_balance(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        requested = proposal.days + proposal.abono
        remaining = proposal.balance.saldo_restante
        if requested > remaining:
            return False, (f"O total de dias de férias e abono ({requested}) excede o saldo "
                           f"disponível de {remaining} dias.")
        return True, ""

    def check_fraction_count(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        max_fractions = data.config.max_fracionamentos
        if data.editing_fraction_id is None and len(proposal.other_fractions) >= max_fractions:
            return False, f"Não é permitido mais de {max_fractions} períodos de férias."
        return True, ""

    def check_minimum_fraction_size(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        day_counts = proposal.all_day_counts
        if len(day_counts) > 1 and any(d < MIN_FRACTION_DAYS for d in day_counts):
            return False, "Ao fracionar as férias, nenhum período pode ser inferior a 5 dias."
        return True, ""

    def check_residual_balance(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        leftover = proposal.remaining_after
        if 0 < leftover < MIN_RESIDUAL_DAYS:
            return False, (f"Esta solicitação deixaria um saldo residual de {leftover} dias. "
                           "O saldo restante deve ser de no mínimo 5 dias ou zerado.")
        return True, ""

    def check_mandatory_block(self, data: ValidationInput, proposal: _Proposal) -> Tuple[bool, str]:
        """Um dos periodos deve ter no minimo 14 dias corridos"""
        if any(d >= MANDATORY_BLOCK_DAYS for d in proposal.all_day_counts):
            return True, ""

        leftover = proposal.remaining_after
        if leftover == 0:
            return False, ("Ao utilizar todo o saldo em períodos fracionados, um deles deve ser "
                           "de no mínimo 14 dias.")
        if 0 < leftover < MANDATORY_BLOCK_DAYS:
            return False, (f"Esta solicitação deixaria um saldo residual de {leftover} dias, "
                           "impossibilitando a programação do período obrigatório de 14 dias.")
        return True, ""


def validate_new_or_edited_fraction(data: ValidationInput) -> ValidationResult:
    """Atalho funcional para VacationRules().validate"""
    return VacationRules().validate(data)
