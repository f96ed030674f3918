# ferias/core/repository.py
"""
Repositório de Colaboradores - Employee Repository

Fronteira de armazenamento do sistema. O motor de regras só lê cópias e
devolve cópias; quem grava é o chamador, através do repositório.
"""

import logging
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

from ferias.core.models import Employee

logger = logging.getLogger(__name__)


@runtime_checkable
class EmployeeRepository(Protocol):
    """Contrato mínimo de persistência de colaboradores"""

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        ...

    def list_employees(self) -> List[Employee]:
        ...

    def save_employee(self, employee: Employee) -> None:
        ...

    def find_by_matricula(self, matricula: str) -> Optional[Employee]:
        ...

    def next_fraction_id(self) -> int:
        ...

    def next_period_id(self) -> int:
        ...


class InMemoryEmployeeRepository:
    """
    Repositório em memória

    Leituras e escritas trabalham com cópias profundas, então alterar um
    objeto devolvido não altera o armazenado. Concorrência: último a gravar
    vence.
    """

    def __init__(self, employees: Optional[Iterable[Employee]] = None):
        self._employees: Dict[int, Employee] = {}
        for employee in employees or []:
            self.save_employee(employee)

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        employee = self._employees.get(employee_id)
        return employee.model_copy(deep=True) if employee is not None else None

    def list_employees(self) -> List[Employee]:
        return [e.model_copy(deep=True) for e in self._employees.values()]

    def save_employee(self, employee: Employee) -> None:
        self._employees[employee.id] = employee.model_copy(deep=True)
        logger.debug(f"Colaborador {employee.matricula} gravado")

    def find_by_matricula(self, matricula: str) -> Optional[Employee]:
        target = str(matricula).strip()
        for employee in self._employees.values():
            if employee.matricula == target:
                return employee.model_copy(deep=True)
        return None

    def next_fraction_id(self) -> int:
        """Próximo ID de fração, único entre todos os colaboradores"""
        ids = [
            f.id
            for e in self._employees.values()
            for p in e.periodos_aquisitivos
            for f in p.fracionamentos
        ]
        return max(ids, default=0) + 1

    def next_period_id(self) -> int:
        ids = [p.id for e in self._employees.values() for p in e.periodos_aquisitivos]
        return max(ids, default=0) + 1

    def __len__(self) -> int:
        return len(self._employees)
