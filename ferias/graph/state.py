# ferias/graph/state.py
from datetime import date
from typing import TypedDict, Dict, List, Optional
import pandas as pd

from ferias.core.models import AppConfig, CollectiveVacationRule, Holiday, Notification, OrgUnit
from ferias.core.repository import InMemoryEmployeeRepository


class FeriasState(TypedDict):
    # Dados carregados
    raw_files: Dict[str, pd.DataFrame]
    repository: Optional[InMemoryEmployeeRepository]
    holidays: List[Holiday]
    collective_rules: List[CollectiveVacationRule]
    org_units: List[OrgUnit]
    config: Optional[AppConfig]

    # Resultados de cada estágio
    schedule_results: Optional[pd.DataFrame]
    approval_results: Optional[pd.DataFrame]
    status_report: Optional[pd.DataFrame]
    notifications: List[Notification]

    # Metadados
    today: date
    total_employees: int
    accepted_requests: int
    rejected_requests: int

    # Controle
    errors: List[Dict]
    warnings: List[Dict]
    processing_stage: str
    success: bool
    output_file: Optional[str]
