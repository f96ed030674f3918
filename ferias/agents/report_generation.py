# ferias/agents/report_generation.py
import logging
import pandas as pd
from datetime import datetime
from pathlib import Path
from typing import Dict, List
import os

from ferias.core.balance import compute_balance
from ferias.core.status import derive_accrual_period_status, derive_fraction_status, status_label
from ferias.graph.state import FeriasState
from ferias.utils.date_utils import format_date
from ferias.utils.excel_handler import ExcelHandler

logger = logging.getLogger(__name__)

STATUS_COLUMNS = [
    "Matricula", "Nome", "Período", "Início P.A.", "Término P.A.", "Limite Concessão",
    "Status Fluxo", "Status Período", "Saldo Restante", "Cota Abono",
    "Fração", "Início Férias", "Término Férias", "Dias", "Abono", "Adiantamento 13º",
    "Status Gravado", "Status Fração",
]
NOTIFICATION_COLUMNS = ["Destinatário", "Matricula", "Mensagem"]


class ReportGenerationAgent:
    def __init__(self, output_path: str = None):
        self.output_path = Path(output_path or os.getenv("OUTPUT_PATH", "data/output"))

    def execute(self, state: FeriasState) -> FeriasState:
        """Gera o workbook de resultado do processamento"""
        logger.info("Executando ReportGenerationAgent...")

        try:
            repository = state.get("repository")
            if repository is None:
                raise ValueError("Repositório de colaboradores não encontrado no state")

            status_df = self._build_status_sheet(state)

            sheets = {
                "solicitacoes": self._or_empty(state.get("schedule_results")),
                "aprovacoes": self._or_empty(state.get("approval_results")),
                "notificacoes": self._build_notifications_sheet(state),
                "status": status_df,
            }

            # Gerar nome do arquivo com timestamp
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filepath = self.output_path / f"{timestamp}_ferias_report.xlsx"
            ExcelHandler.write_report(sheets, filepath)

            state["status_report"] = status_df
            state["output_file"] = str(filepath)
            state["processing_stage"] = "report_complete"
            state["success"] = not state.get("errors")

            logger.info(f"Relatório gerado: {filepath}")
            logger.info(f"Linhas de status: {len(status_df)}")

        except Exception as e:
            logger.error(f"Erro na geracao do relatorio: {str(e)}")
            if "errors" not in state:
                state["errors"] = []
            state["errors"].append({"stage": "report_generation", "error": str(e)})
            state["success"] = False
            state["processing_stage"] = "report_failed"

        return state

    @staticmethod
    def _or_empty(df) -> pd.DataFrame:
        if isinstance(df, pd.DataFrame):
            return df
        return pd.DataFrame(columns=["linha"])

    def _build_notifications_sheet(self, state: FeriasState) -> pd.DataFrame:
        repository = state["repository"]
        rows = []
        for notification in state.get("notifications", []):
            recipient = repository.get_employee(notification.user_id)
            rows.append({
                "Destinatário": recipient.nome if recipient else notification.user_id,
                "Matricula": recipient.matricula if recipient else None,
                "Mensagem": notification.message,
            })
        return pd.DataFrame(rows, columns=NOTIFICATION_COLUMNS)

    def _build_status_sheet(self, state: FeriasState) -> pd.DataFrame:
        """Uma linha por fração (ou por período sem frações), com status gravado e derivado"""
        today = state["today"]
        config = state["config"]
        rows: List[Dict] = []

        for employee in sorted(state["repository"].list_employees(), key=lambda e: e.matricula):
            for period in employee.periodos_aquisitivos:
                balance = compute_balance(period, config)
                base = {
                    "Matricula": employee.matricula,
                    "Nome": employee.nome,
                    "Período": period.rotulo_periodo,
                    "Início P.A.": format_date(period.inicio_pa),
                    "Término P.A.": format_date(period.termino_pa),
                    "Limite Concessão": format_date(period.limite_concessao),
                    "Status Fluxo": status_label(period.status, config),
                    "Status Período": status_label(derive_accrual_period_status(period, today), config),
                    "Saldo Restante": balance.saldo_restante,
                    "Cota Abono": balance.cota_abono,
                }
                if not period.fracionamentos:
                    rows.append(base)
                    continue
                for fraction in period.fracionamentos:
                    rows.append({
                        **base,
                        "Fração": fraction.sequencia,
                        "Início Férias": format_date(fraction.inicio_ferias),
                        "Término Férias": format_date(fraction.termino_ferias),
                        "Dias": fraction.quantidade_dias,
                        "Abono": fraction.dias_abono,
                        "Adiantamento 13º": "Sim" if fraction.adiantamento13 else "Não",
                        "Status Gravado": status_label(fraction.status, config),
                        "Status Fração": status_label(derive_fraction_status(fraction, today), config),
                    })

        return pd.DataFrame(rows, columns=STATUS_COLUMNS)
