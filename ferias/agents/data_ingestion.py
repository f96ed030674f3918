# ferias/agents/data_ingestion.py
"""
Agente de Ingestão de Dados - Data Ingestion Agent

Função Principal:
- Primeira etapa do pipeline de férias
- Carrega as planilhas de entrada (.xlsx ou .csv); COLABORADORES e PERIODOS
  são obrigatórias
- Monta colaboradores, períodos aquisitivos e frações como modelos e os
  grava num repositório em memória
- Carrega feriados, férias coletivas, estrutura organizacional e a
  configuração do sistema
- Registra como avisos os achados dos validadores estruturais
"""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, List

import pandas as pd

from ferias.config import Config
from ferias.core.models import (
    AccrualPeriod,
    AppConfig,
    CollectiveVacationRule,
    Employee,
    Holiday,
    OrgUnit,
    VacationFraction,
)
from ferias.core.repository import InMemoryEmployeeRepository
from ferias.core.validators import DataValidators
from ferias.graph.state import FeriasState
from ferias.utils.date_utils import add_days, end_date_for, parse_date
from ferias.utils.excel_handler import ExcelHandler

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {
    "colaboradores": ["id", "matricula", "nome", "data_admissao"],
    "periodos": ["id", "colaborador_id", "inicio_pa", "termino_pa"],
    "fracoes": ["id", "periodo_id", "inicio_ferias", "quantidade_dias"],
    "feriados": ["data"],
    "ferias_coletivas": ["inicio", "fim"],
    "unidades": ["id", "nome"],
    "solicitacoes": ["matricula", "periodo_id", "data_inicio", "quantidade_dias"],
    "aprovacoes": ["matricula", "periodo_id", "aprovador_matricula", "acao"],
    "configuracao": ["chave", "valor"],
}

# Campos da configuração que são listas de inteiros
_LIST_CONFIG_KEYS = {"dias_ferias_options"}
_INT_CONFIG_KEYS = {
    "antecedencia_minima_dias",
    "antecedencia_minima_abono_dias",
    "max_fracionamentos",
    "prazo_limite_concessao_dias",
}


class DataIngestionAgent:
    def __init__(self, input_path: str):
        self.input_path = Path(input_path)

    def execute(self, state: FeriasState) -> FeriasState:
        """Carrega as planilhas e monta o repositório de colaboradores"""
        logger.info("Iniciando ingestão de dados...")

        try:
            raw_files = ExcelHandler.read_all_input_files(self.input_path)

            missing_files = [f for f in ExcelHandler.REQUIRED_FILES if f not in raw_files]
            if missing_files:
                raise ValueError(f"Arquivos obrigatórios não encontrados: {missing_files}")

            self._validate_columns(raw_files)

            config = self._build_config(raw_files.get("configuracao"))
            employees = self._build_employees(raw_files, config)
            repository = InMemoryEmployeeRepository(employees)

            state["raw_files"] = raw_files
            state["repository"] = repository
            state["config"] = config
            state["holidays"] = self._build_models(raw_files.get("feriados"), self._holiday_from_row)
            state["collective_rules"] = self._build_models(
                raw_files.get("ferias_coletivas"), self._collective_rule_from_row
            )
            state["org_units"] = self._build_models(raw_files.get("unidades"), self._org_unit_from_row)
            state["total_employees"] = len(repository)

            self._collect_warnings(state, employees, config)

            state["processing_stage"] = "ingestion_complete"
            state["success"] = True

            total_periods = sum(len(e.periodos_aquisitivos) for e in employees)
            logger.info(
                f"Carregados {len(raw_files)} arquivos: {len(employees)} colaboradores, "
                f"{total_periods} períodos aquisitivos"
            )

        except Exception as e:
            logger.error(f"Erro na ingestão de dados: {str(e)}")
            if "errors" not in state:
                state["errors"] = []
            state["errors"].append({"stage": "ingestion", "error": str(e)})
            state["success"] = False
            state["processing_stage"] = "ingestion_failed"

        return state

    def _validate_columns(self, raw_files: Dict[str, pd.DataFrame]):
        for file_key, df in raw_files.items():
            is_valid, missing = DataValidators.validate_required_columns(
                df, REQUIRED_COLUMNS.get(file_key, []), file_key
            )
            if not is_valid:
                raise ValueError(f"{ExcelHandler.FILES_MAP[file_key]}: colunas ausentes {missing}")

    def _build_config(self, df: pd.DataFrame) -> AppConfig:
        """Configuração do sistema: padrões de Config sobrescritos pela planilha CONFIGURACAO"""
        overrides = {}
        if df is not None:
            for row in ExcelHandler.dataframe_to_records(df):
                key, value = row.get("chave"), row.get("valor")
                if key is None or value is None:
                    continue
                if key in _LIST_CONFIG_KEYS:
                    value = ExcelHandler.parse_id_list(value)
                elif key in _INT_CONFIG_KEYS:
                    value = ExcelHandler.parse_int(value)
                overrides[key] = value
            logger.info(f"Configuração: {len(overrides)} parâmetro(s) sobrescrito(s)")
        return Config.app_config(**overrides)

    def _build_employees(self, raw_files: Dict[str, pd.DataFrame], config: AppConfig) -> List[Employee]:
        fractions_by_period = defaultdict(list)
        if raw_files.get("fracoes") is not None:
            for row in ExcelHandler.dataframe_to_records(raw_files["fracoes"]):
                fraction = self._fraction_from_row(row)
                fractions_by_period[ExcelHandler.parse_int(row["periodo_id"])].append(fraction)

        periods_by_employee = defaultdict(list)
        for row in ExcelHandler.dataframe_to_records(raw_files["periodos"]):
            period_id = ExcelHandler.parse_int(row["id"])
            fractions = sorted(fractions_by_period.pop(period_id, []), key=lambda f: f.inicio_ferias)
            period = self._period_from_row(row, fractions, config)
            periods_by_employee[ExcelHandler.parse_int(row["colaborador_id"])].append(period)

        for orphan_period_id in fractions_by_period:
            logger.warning(f"Frações do período {orphan_period_id} ignoradas: período inexistente")

        employees = []
        for row in ExcelHandler.dataframe_to_records(raw_files["colaboradores"]):
            employee_id = ExcelHandler.parse_int(row["id"])
            employees.append(Employee(
                id=employee_id,
                matricula=str(row["matricula"]),
                nome=row["nome"],
                data_admissao=row["data_admissao"],
                cargo=row.get("cargo") or "",
                unidade=row.get("unidade"),
                area=row.get("area"),
                departamento=row.get("departamento"),
                gestor=ExcelHandler.parse_int(row.get("gestor")),
                email=row.get("email") or "",
                role=row.get("role") or "user",
                status=row.get("status") or "active",
                nivel_hierarquico=ExcelHandler.parse_int(row.get("nivel_hierarquico")) or 1,
                periodos_aquisitivos=sorted(
                    periods_by_employee.pop(employee_id, []), key=lambda p: p.inicio_pa
                ),
            ))

        for orphan_employee_id in periods_by_employee:
            logger.warning(f"Períodos do colaborador {orphan_employee_id} ignorados: colaborador inexistente")

        return employees

    def _period_from_row(self, row: Dict, fractions: List[VacationFraction],
                         config: AppConfig) -> AccrualPeriod:
        start = parse_date(row["inicio_pa"])
        end = parse_date(row["termino_pa"])
        deadline = parse_date(row.get("limite_concessao")) or add_days(end, config.prazo_limite_concessao_dias)
        values = {
            "id": ExcelHandler.parse_int(row["id"]),
            "rotulo_periodo": row.get("rotulo_periodo") or f"{start.year}-{end.year}",
            "inicio_pa": start,
            "termino_pa": end,
            "limite_concessao": deadline,
            "saldo_total": ExcelHandler.parse_int(row.get("saldo_total")) or Config.SALDO_TOTAL_PADRAO,
            "fracionamentos": fractions,
            "id_aprovador_gestor": ExcelHandler.parse_int(row.get("id_aprovador_gestor")),
            "id_aprovador_rh": ExcelHandler.parse_int(row.get("id_aprovador_rh")),
        }
        for optional in ("status", "tipo_entrada_dias_ferias", "base_calculo_abono"):
            if row.get(optional):
                values[optional] = row[optional]
        return AccrualPeriod(**values)

    def _fraction_from_row(self, row: Dict) -> VacationFraction:
        start = parse_date(row["inicio_ferias"])
        days = ExcelHandler.parse_int(row["quantidade_dias"])
        values = {
            "id": ExcelHandler.parse_int(row["id"]),
            "sequencia": ExcelHandler.parse_int(row.get("sequencia")) or 1,
            "inicio_ferias": start,
            "termino_ferias": parse_date(row.get("termino_ferias")) or end_date_for(start, days),
            "quantidade_dias": days,
            "dias_abono": ExcelHandler.parse_int(row.get("dias_abono")) or 0,
            "adiantamento13": ExcelHandler.parse_bool(row.get("adiantamento13")),
        }
        if row.get("status"):
            values["status"] = row["status"]
        return VacationFraction(**values)

    @staticmethod
    def _holiday_from_row(index: int, row: Dict) -> Holiday:
        return Holiday(
            id=ExcelHandler.parse_int(row.get("id")) or index,
            data=row["data"],
            descricao=row.get("descricao") or "",
            tipo=row.get("tipo") or "feriado",
            unidade=row.get("unidade"),
        )

    @staticmethod
    def _collective_rule_from_row(index: int, row: Dict) -> CollectiveVacationRule:
        return CollectiveVacationRule(
            id=ExcelHandler.parse_int(row.get("id")) or index,
            descricao=row.get("descricao") or "",
            inicio=row["inicio"],
            fim=row["fim"],
            unidade=row.get("unidade"),
            area=row.get("area"),
            departamento=row.get("departamento"),
            colaborador_ids=ExcelHandler.parse_id_list(row.get("colaborador_ids")),
        )

    @staticmethod
    def _org_unit_from_row(index: int, row: Dict) -> OrgUnit:
        return OrgUnit(
            id=ExcelHandler.parse_int(row["id"]),
            nome=row["nome"],
            tipo=row.get("tipo") or "Área",
            id_pai=ExcelHandler.parse_int(row.get("id_pai")),
        )

    def _build_models(self, df: pd.DataFrame, factory) -> List:
        """Converte uma planilha opcional em modelos; linha a linha, na ordem do arquivo"""
        if df is None:
            return []
        return [factory(index, row) for index, row in enumerate(ExcelHandler.dataframe_to_records(df), start=1)]

    def _collect_warnings(self, state: FeriasState, employees: List[Employee], config: AppConfig):
        """Registra achados dos validadores estruturais como avisos"""
        if "warnings" not in state:
            state["warnings"] = []

        findings = []
        findings.extend(DataValidators.validate_unique_matriculas(state["raw_files"]["colaboradores"])[1])
        findings.extend(DataValidators.validate_app_config(config)[1])
        findings.extend(DataValidators.validate_org_units(state["org_units"])[1])
        for employee in employees:
            findings.extend(DataValidators.validate_employee(employee)[1])
            for period in employee.periodos_aquisitivos:
                findings.extend(DataValidators.validate_accrual_period(period, config.max_fracionamentos)[1])

        for message in findings:
            logger.warning(message)
            state["warnings"].append({"stage": "ingestion", "message": message})
