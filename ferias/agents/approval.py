# ferias/agents/approval.py
"""
Agente de Aprovação - Approval Agent

Função Principal:
- Processa a planilha APROVACOES na ordem do arquivo
- Confere a alçada do aprovador e aplica a ação (aprovar/rejeitar) no
  fluxo gestor -> RH
- Grava o período atualizado e acumula as notificações geradas
"""

import logging
from datetime import datetime, time
from typing import Dict, List

import pandas as pd

from ferias.config import Config
from ferias.core.workflow import APPROVE, REJECT, apply_approval_action
from ferias.graph.state import FeriasState
from ferias.utils.excel_handler import ExcelHandler

logger = logging.getLogger(__name__)

ACTION_ALIASES = {
    "approve": APPROVE,
    "aprovar": APPROVE,
    "aprovado": APPROVE,
    "reject": REJECT,
    "rejeitar": REJECT,
    "rejeitado": REJECT,
}

RESULT_COLUMNS = [
    "linha", "matricula", "periodo_id", "aprovador_matricula", "acao",
    "status_anterior", "status_novo", "sucesso", "motivo",
]


class ApprovalAgent:
    def __init__(self, rh_department: str = Config.RH_DEPARTAMENTO):
        self.rh_department = rh_department

    def execute(self, state: FeriasState) -> FeriasState:
        """Aplica as ações de aprovação/rejeição"""
        logger.info("Executando ApprovalAgent...")

        try:
            if state.get("repository") is None:
                raise ValueError("Repositório de colaboradores não carregado")

            df = state.get("raw_files", {}).get("aprovacoes")
            rows = ExcelHandler.dataframe_to_records(df) if df is not None else []
            results: List[Dict] = [self._process_row(state, line, row) for line, row in enumerate(rows, start=1)]

            state["approval_results"] = pd.DataFrame(results, columns=RESULT_COLUMNS)
            state["processing_stage"] = "approval_complete"

            applied = sum(1 for r in results if r["sucesso"])
            logger.info(f"Ações de aprovação processadas: {len(results)} ({applied} aplicadas)")

        except Exception as e:
            logger.error(f"Erro na aprovação: {str(e)}")
            if "errors" not in state:
                state["errors"] = []
            state["errors"].append({"stage": "approval", "error": str(e)})
            state["success"] = False
            state["processing_stage"] = "approval_failed"

        return state

    def _process_row(self, state: FeriasState, line: int, row: Dict) -> Dict:
        action = ACTION_ALIASES.get(str(row.get("acao") or "").strip().lower(), row.get("acao"))
        result = {
            "linha": line,
            "matricula": row.get("matricula"),
            "periodo_id": row.get("periodo_id"),
            "aprovador_matricula": row.get("aprovador_matricula"),
            "acao": action,
            "status_anterior": None,
            "status_novo": None,
            "sucesso": False,
            "motivo": None,
        }

        try:
            repository = state["repository"]
            requester = repository.find_by_matricula(row["matricula"])
            approver = repository.find_by_matricula(row["aprovador_matricula"])
            if requester is None or approver is None:
                raise ValueError("Solicitante ou aprovador não encontrado")

            period = requester.find_period(ExcelHandler.parse_int(row["periodo_id"]))
            if period is None:
                raise ValueError(f"Período {row['periodo_id']} não encontrado para {requester.matricula}")
            result["status_anterior"] = period.status.value

            outcome = apply_approval_action(
                period, action, approver, requester,
                all_employees=repository.list_employees(),
                org_units=state.get("org_units", []),
                now=datetime.combine(state["today"], time(12, 0)),
                rh_department=self.rh_department,
            )

            requester.periodos_aquisitivos = [
                outcome.period if p.id == period.id else p for p in requester.periodos_aquisitivos
            ]
            repository.save_employee(requester)
            if "notifications" not in state:
                state["notifications"] = []
            state["notifications"].extend(outcome.notifications)

            result["status_novo"] = outcome.period.status.value
            result["sucesso"] = True
            return result

        except (ValueError, PermissionError) as e:
            logger.warning(f"Ação da linha {line} não aplicada: {e}")
            result["motivo"] = str(e)
            return result
