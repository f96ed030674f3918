# ferias/agents/scheduling.py
"""
Agente de Agendamento - Scheduling Agent

Função Principal:
- Processa a planilha SOLICITACOES na ordem do arquivo
- Valida cada solicitação no motor de regras (primeira regra violada vence)
- Em modo lista, recusa quantidades de dias fora das opções que cabem no saldo
- Grava as solicitações aceitas no repositório: a fração entra como
  planejada e o período segue para aprovação do gestor
- Registra aceito/regra/motivo por linha; uma linha com erro não
  interrompe o lote
"""

import logging
from datetime import datetime, time
from typing import Dict, List

import pandas as pd

from ferias.core.balance import available_day_options, compute_balance, effective_day_input_mode
from ferias.core.models import DayInputMode, FractionRequest, Notification
from ferias.core.rules import ValidationInput, VacationRules
from ferias.core.scheduling import apply_fraction_request
from ferias.graph.state import FeriasState
from ferias.utils.date_utils import format_date, parse_date
from ferias.utils.excel_handler import ExcelHandler

logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "linha", "matricula", "periodo_id", "data_inicio", "quantidade_dias",
    "dias_abono", "adiantamento13", "aceito", "regra", "motivo",
]


class SchedulingAgent:
    def __init__(self):
        self.rules = VacationRules()

    def execute(self, state: FeriasState) -> FeriasState:
        """Valida e grava as solicitações de férias"""
        logger.info("Executando SchedulingAgent...")

        try:
            if not state.get("success") or state.get("repository") is None:
                raise ValueError("Dados de entrada não carregados")

            df = state.get("raw_files", {}).get("solicitacoes")
            rows = ExcelHandler.dataframe_to_records(df) if df is not None else []
            results: List[Dict] = []

            for line, row in enumerate(rows, start=1):
                results.append(self._process_row(state, line, row))

            accepted = sum(1 for r in results if r["aceito"])
            state["schedule_results"] = pd.DataFrame(results, columns=RESULT_COLUMNS)
            state["accepted_requests"] = accepted
            state["rejected_requests"] = len(results) - accepted
            state["processing_stage"] = "scheduling_complete"

            logger.info(f"Solicitações processadas: {len(results)} ({accepted} aceitas)")

        except Exception as e:
            logger.error(f"Erro no agendamento: {str(e)}")
            if "errors" not in state:
                state["errors"] = []
            state["errors"].append({"stage": "scheduling", "error": str(e)})
            state["success"] = False
            state["processing_stage"] = "scheduling_failed"

        return state

    def _process_row(self, state: FeriasState, line: int, row: Dict) -> Dict:
        result = {
            "linha": line,
            "matricula": row.get("matricula"),
            "periodo_id": row.get("periodo_id"),
            "data_inicio": row.get("data_inicio"),
            "quantidade_dias": row.get("quantidade_dias"),
            "dias_abono": row.get("dias_abono") or 0,
            "adiantamento13": ExcelHandler.parse_bool(row.get("adiantamento13")),
            "aceito": False,
            "regra": None,
            "motivo": None,
        }

        try:
            repository = state["repository"]
            employee = repository.find_by_matricula(row["matricula"])
            if employee is None:
                raise ValueError(f"Colaborador não encontrado: {row['matricula']}")
            period = employee.find_period(ExcelHandler.parse_int(row["periodo_id"]))
            if period is None:
                raise ValueError(f"Período {row['periodo_id']} não encontrado para {employee.matricula}")

            abono_days = ExcelHandler.parse_int(row.get("dias_abono")) or 0
            request = FractionRequest(
                data_inicio=parse_date(row.get("data_inicio")),
                quantidade_dias=ExcelHandler.parse_int(row.get("quantidade_dias")) or 0,
                solicitar_abono=ExcelHandler.parse_bool(row.get("solicitar_abono")) or abono_days > 0,
                dias_abono=abono_days,
                adiantamento13=ExcelHandler.parse_bool(row.get("adiantamento13")),
            )
            editing_id = ExcelHandler.parse_int(row.get("fracao_id"))

            options = self._day_options(state, period, editing_id)
            if options is not None and request.quantidade_dias not in options:
                result["regra"] = "opcao_dias"
                result["motivo"] = (f"Quantidade de dias ({request.quantidade_dias}) fora das opções "
                                    f"disponíveis: {options}")
                return result

            verdict = self.rules.validate(ValidationInput(
                employee=employee,
                period=period,
                request=request,
                today=state["today"],
                config=state["config"],
                holidays=state.get("holidays", []),
                collective_rules=state.get("collective_rules", []),
                editing_fraction_id=editing_id,
            ))
            if not verdict.ok:
                result["regra"] = verdict.regra
                result["motivo"] = verdict.motivo
                return result

            new_id = None if editing_id is not None else repository.next_fraction_id()
            updated_period, notifications = apply_fraction_request(
                employee, period, request,
                now=datetime.combine(state["today"], time(12, 0)),
                editing_fraction_id=editing_id,
                new_fraction_id=new_id,
            )
            employee.periodos_aquisitivos = [
                updated_period if p.id == period.id else p for p in employee.periodos_aquisitivos
            ]
            repository.save_employee(employee)
            self._notify(state, notifications)

            result["aceito"] = True
            result["data_inicio"] = format_date(request.data_inicio)
            return result

        except Exception as e:
            logger.warning(f"Solicitação da linha {line} não processada: {e}")
            result["regra"] = "erro"
            result["motivo"] = str(e)
            if "warnings" not in state:
                state["warnings"] = []
            state["warnings"].append({"stage": "scheduling", "message": f"Linha {line}: {e}"})
            return result

    @staticmethod
    def _day_options(state: FeriasState, period, editing_id):
        """Opções de dias do período em modo lista; None quando a digitação é livre"""
        config = state["config"]
        if effective_day_input_mode(period, config) != DayInputMode.LIST:
            return None
        balance = compute_balance(period, config, exclude_fraction_id=editing_id)
        return available_day_options(config, balance)

    @staticmethod
    def _notify(state: FeriasState, notifications: List[Notification]):
        if "notifications" not in state:
            state["notifications"] = []
        state["notifications"].extend(notifications)
