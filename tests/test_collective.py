from datetime import date

from ferias.core.collective import find_applicable_rule, rule_matches
from ferias.core.models import CollectiveVacationRule


def _rule(rule_id, **filters):
    return CollectiveVacationRule(
        id=rule_id,
        descricao=f"Regra {rule_id}",
        inicio=filters.pop("inicio", date(2026, 12, 23)),
        fim=filters.pop("fim", date(2027, 1, 3)),
        **filters,
    )


class TestRuleMatching:
    def test_rule_without_filters_matches_everyone(self, employee):
        assert rule_matches(_rule(1), employee)

    def test_every_present_filter_must_match(self, employee):
        assert rule_matches(_rule(1, unidade="Matriz", area="Tecnologia"), employee)
        assert not rule_matches(_rule(1, unidade="Matriz", area="Comercial"), employee)
        assert not rule_matches(_rule(1, departamento="Financeiro"), employee)

    def test_employee_list_filter(self, employee):
        assert rule_matches(_rule(1, colaborador_ids=[1, 5]), employee)
        assert not rule_matches(_rule(1, colaborador_ids=[5]), employee)


class TestFindApplicableRule:
    def test_first_match_in_declaration_order(self, employee, today):
        rules = [_rule(1, area="Comercial"), _rule(2, area="Tecnologia"), _rule(3)]
        assert find_applicable_rule(employee, rules, today).id == 2

    def test_expired_rules_skipped(self, employee, today):
        rules = [_rule(1, inicio=date(2025, 12, 22), fim=date(2026, 1, 2)), _rule(2)]
        assert find_applicable_rule(employee, rules, today).id == 2

    def test_rule_ending_today_still_applies(self, employee, today):
        rules = [_rule(1, inicio=date(2026, 10, 1), fim=today)]
        assert find_applicable_rule(employee, rules, today).id == 1

    def test_no_match(self, employee, today):
        assert find_applicable_rule(employee, [_rule(1, unidade="Filial")], today) is None
        assert find_applicable_rule(employee, [], today) is None
