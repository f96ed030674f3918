"""Fixtures compartilhadas: data de referência fixa, colaboradores e período."""

from datetime import date

import pytest

from ferias.config import Config
from ferias.core.models import (
    AccrualPeriod,
    Employee,
    FractionRequest,
    OrgUnit,
    Role,
    VacationFraction,
)
from ferias.core.rules import ValidationInput
from ferias.utils.date_utils import end_date_for

# Segunda-feira
TODAY = date(2026, 10, 19)


def make_fraction(fraction_id, start, days, **kwargs):
    return VacationFraction(
        id=fraction_id,
        sequencia=kwargs.pop("sequencia", fraction_id),
        inicio_ferias=start,
        termino_ferias=end_date_for(start, days),
        quantidade_dias=days,
        **kwargs,
    )


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def app_config():
    return Config.app_config()


@pytest.fixture
def period():
    """P.A. 2025-2026 já encerrado; limite de concessão em 26/06/2027"""
    return AccrualPeriod(
        id=10,
        rotulo_periodo="2025-2026",
        inicio_pa=date(2025, 8, 1),
        termino_pa=date(2026, 7, 31),
        limite_concessao=date(2027, 6, 26),
    )


@pytest.fixture
def open_period():
    """P.A. ainda em aquisição (termina em 31/03/2027)"""
    return AccrualPeriod(
        id=11,
        rotulo_periodo="2026-2027",
        inicio_pa=date(2026, 4, 1),
        termino_pa=date(2027, 3, 31),
        limite_concessao=date(2028, 2, 24),
    )


@pytest.fixture
def employee(period):
    return Employee(
        id=1,
        matricula="1001",
        nome="Ana Souza",
        data_admissao=date(2024, 8, 1),
        cargo="Analista",
        unidade="Matriz",
        area="Tecnologia",
        departamento="Tecnologia",
        gestor=2,
        role=Role.USER,
        nivel_hierarquico=1,
        periodos_aquisitivos=[period],
    )


@pytest.fixture
def manager():
    return Employee(
        id=2,
        matricula="1002",
        nome="Bruno Lima",
        data_admissao=date(2018, 1, 10),
        unidade="Matriz",
        area="Tecnologia",
        departamento="Tecnologia",
        role=Role.MANAGER,
        nivel_hierarquico=2,
    )


@pytest.fixture
def rh_user():
    return Employee(
        id=3,
        matricula="1003",
        nome="Carla Dias",
        data_admissao=date(2015, 5, 4),
        unidade="Matriz",
        area="Recursos Humanos",
        departamento="Recursos Humanos",
        role=Role.RH,
        nivel_hierarquico=2,
    )


@pytest.fixture
def admin_user():
    return Employee(
        id=4,
        matricula="1004",
        nome="Diego Alves",
        data_admissao=date(2012, 3, 1),
        departamento="Diretoria",
        role=Role.ADMIN,
        nivel_hierarquico=4,
    )


@pytest.fixture
def org_units():
    return [
        OrgUnit(id=1, nome="Diretoria", tipo="Área"),
        OrgUnit(id=2, nome="Tecnologia", tipo="Área", id_pai=1),
        OrgUnit(id=3, nome="Recursos Humanos", tipo="Área", id_pai=1),
        OrgUnit(id=4, nome="Infraestrutura", tipo="Área", id_pai=2),
    ]


@pytest.fixture
def make_input(employee, app_config):
    """Monta um ValidationInput; o período padrão é o primeiro do colaborador"""

    def _make(start, days, period=None, fractions=None, abono=0, **kwargs):
        target = period or employee.periodos_aquisitivos[0]
        if fractions is not None:
            target = target.model_copy(update={"fracionamentos": fractions})
        request = FractionRequest(
            data_inicio=start,
            quantidade_dias=days,
            solicitar_abono=abono > 0,
            dias_abono=abono,
            adiantamento13=kwargs.pop("adiantamento13", False),
        )
        owner = kwargs.pop("employee", employee)
        periods = [p for p in owner.periodos_aquisitivos if p.id != target.id] + [target]
        owner = owner.model_copy(update={"periodos_aquisitivos": periods})
        return ValidationInput(
            employee=owner,
            period=target,
            request=request,
            today=kwargs.pop("today", TODAY),
            config=kwargs.pop("config", app_config),
            holidays=kwargs.pop("holidays", []),
            collective_rules=kwargs.pop("collective_rules", []),
            editing_fraction_id=kwargs.pop("editing_fraction_id", None),
        )

    return _make
