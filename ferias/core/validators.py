# ferias/core/validators.py
"""
Validadores de Dados - Data Validators

Validacoes estruturais dos dados carregados (planilhas e modelos). Nao
substituem o motor de regras: apontam dados incoerentes, que o pipeline
registra como avisos.
"""

import pandas as pd
from typing import Dict, Iterable, List, Optional, Tuple

from ferias.core.models import AccrualPeriod, AppConfig, Employee, OrgUnit
from ferias.utils.date_utils import add_days, add_years, end_date_for, parse_day_month


class DataValidators:
    """Classe com validadores de dados para o sistema de ferias"""

    @staticmethod
    def validate_required_columns(df: pd.DataFrame, required_cols: List[str],
                                  file_name: str = "") -> Tuple[bool, List[str]]:
        """
        Valida se DataFrame possui colunas obrigatorias

        Args:
            df: DataFrame a ser validado
            required_cols: Lista de colunas obrigatorias
            file_name: Nome do arquivo (para logs)

        Returns:
            Tuple[bool, List[str]]: (is_valid, missing_columns)
        """
        missing_cols = [col for col in required_cols if col not in df.columns]
        return len(missing_cols) == 0, missing_cols

    @staticmethod
    def validate_unique_matriculas(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """
        Valida duplicidade de matriculas e linhas vazias

        Returns:
            Tuple[bool, List[str]]: (is_valid, consistency_errors)
        """
        errors = []

        if "matricula" in df.columns:
            duplicated = df[df.duplicated("matricula", keep=False)]["matricula"].astype(str).tolist()
            if duplicated:
                errors.append(f"Matriculas duplicadas encontradas: {sorted(set(duplicated))}")

        empty_rows = int(df.isnull().all(axis=1).sum())
        if empty_rows > 0:
            errors.append(f"Encontradas {empty_rows} linhas completamente vazias")

        return len(errors) == 0, errors

    @staticmethod
    def validate_employee(employee: Employee) -> Tuple[bool, List[str]]:
        errors = []
        if employee.gestor is not None and employee.gestor == employee.id:
            errors.append(f"Colaborador {employee.matricula} nao pode ser gestor de si mesmo")
        if employee.nivel_hierarquico < 1:
            errors.append(f"Colaborador {employee.matricula}: nivel hierarquico invalido")
        return len(errors) == 0, errors

    @staticmethod
    def validate_accrual_period(period: AccrualPeriod,
                                max_fractions: int = 3) -> Tuple[bool, List[str]]:
        """
        Valida a coerencia interna de um periodo aquisitivo

        Args:
            period: Periodo a ser validado
            max_fractions: Limite de fracoes ativas

        Returns:
            Tuple[bool, List[str]]: (is_valid, errors)
        """
        errors = []
        label = period.rotulo_periodo or str(period.id)

        expected_end = add_days(add_years(period.inicio_pa, 1), -1)
        if period.termino_pa != expected_end:
            errors.append(f"Periodo {label}: termino deveria ser {expected_end.isoformat()}")

        if period.limite_concessao <= period.termino_pa:
            errors.append(f"Periodo {label}: limite de concessao anterior ao termino")

        # Fracoes canceladas e rejeitadas nao consomem saldo
        active = period.active_fractions()
        used = sum(f.quantidade_dias + f.dias_abono for f in active)
        if used > period.saldo_total:
            errors.append(f"Periodo {label}: {used} dias utilizados excedem o saldo de {period.saldo_total}")

        if len(active) > max_fractions:
            errors.append(f"Periodo {label}: {len(active)} fracoes ativas (maximo {max_fractions})")

        for fraction in period.fracionamentos:
            if fraction.termino_ferias != end_date_for(fraction.inicio_ferias, fraction.quantidade_dias):
                errors.append(
                    f"Periodo {label}: fracao {fraction.id} com termino inconsistente "
                    f"com {fraction.quantidade_dias} dias"
                )

        return len(errors) == 0, errors

    @staticmethod
    def validate_org_units(units: Iterable[OrgUnit]) -> Tuple[bool, List[str]]:
        """Valida pais inexistentes e ciclos na arvore organizacional"""
        units = list(units)
        by_id: Dict[int, OrgUnit] = {u.id: u for u in units}
        errors = []

        for unit in units:
            if unit.id_pai is not None and unit.id_pai not in by_id:
                errors.append(f"Unidade '{unit.nome}' aponta para pai inexistente ({unit.id_pai})")

        reported = set()
        for unit in units:
            visited = []
            current: Optional[OrgUnit] = unit
            while current is not None and current.id_pai is not None:
                if current.id in visited:
                    cycle = frozenset(visited[visited.index(current.id):])
                    if cycle not in reported:
                        reported.add(cycle)
                        errors.append(f"Ciclo na estrutura organizacional: unidades {sorted(cycle)}")
                    break
                visited.append(current.id)
                current = by_id.get(current.id_pai)

        return len(errors) == 0, errors

    @staticmethod
    def validate_app_config(config: AppConfig) -> Tuple[bool, List[str]]:
        errors = []

        for field_name in ("inicio_adiantamento13", "fim_adiantamento13"):
            try:
                parse_day_month(getattr(config, field_name))
            except ValueError as e:
                errors.append(f"{field_name}: {e}")

        if config.antecedencia_minima_dias < 0:
            errors.append("antecedencia_minima_dias nao pode ser negativa")
        if config.antecedencia_minima_abono_dias < 0:
            errors.append("antecedencia_minima_abono_dias nao pode ser negativa")
        if config.max_fracionamentos < 1:
            errors.append("max_fracionamentos deve ser no minimo 1")
        if any(d <= 0 for d in config.dias_ferias_options):
            errors.append("dias_ferias_options deve conter apenas valores positivos")

        return len(errors) == 0, errors
