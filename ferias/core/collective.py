# ferias/core/collective.py
"""
Férias Coletivas - Collective Vacation Matcher

Localiza a regra de férias coletivas aplicável a um colaborador. Filtros
vazios da regra valem como curinga; a primeira regra vigente que casa vence.
"""

from datetime import date
from typing import Iterable, Optional

from ferias.core.models import CollectiveVacationRule, Employee


def rule_matches(rule: CollectiveVacationRule, employee: Employee) -> bool:
    """Filtros ausentes valem como curinga"""
    if rule.unidade and rule.unidade != employee.unidade:
        return False
    if rule.area and rule.area != employee.area:
        return False
    if rule.departamento and rule.departamento != employee.departamento:
        return False
    if rule.colaborador_ids and employee.id not in rule.colaborador_ids:
        return False
    return True


def find_applicable_rule(employee: Employee, rules: Iterable[CollectiveVacationRule],
                         today: date) -> Optional[CollectiveVacationRule]:
    """
    Primeira regra de férias coletivas vigente aplicável ao colaborador

    Args:
        employee: Colaborador
        rules: Regras na ordem de cadastro
        today: Data de referência; regras encerradas antes dela são ignoradas

    Returns:
        Regra aplicável ou None
    """
    if employee is None or not rules:
        return None
    for rule in rules:
        if rule.fim < today:
            continue
        if rule_matches(rule, employee):
            return rule
    return None
