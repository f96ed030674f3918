from datetime import date, timedelta

import pytest

from ferias.core.models import FractionStatus, PeriodDisplayStatus, WorkflowStatus
from ferias.core.status import (
    active_statuses,
    add_status,
    derive_accrual_period_status,
    derive_fraction_status,
    has_started_fractions,
    remove_status,
    status_label,
)

from tests.conftest import make_fraction

START = date(2026, 11, 30)


class TestDeriveFractionStatus:
    @pytest.mark.parametrize("today,expected", [
        (date(2026, 11, 29), FractionStatus.SCHEDULED),
        (date(2026, 11, 30), FractionStatus.ENJOYING),
        (date(2026, 12, 19), FractionStatus.ENJOYING),
        (date(2026, 12, 20), FractionStatus.ENJOYED),
    ])
    def test_scheduled_fraction_follows_calendar(self, today, expected):
        fraction = make_fraction(1, START, 20, status=FractionStatus.SCHEDULED)
        assert derive_fraction_status(fraction, today) == expected

    def test_progression_never_reverses(self):
        fraction = make_fraction(1, START, 20, status=FractionStatus.SCHEDULED)
        order = [FractionStatus.SCHEDULED, FractionStatus.ENJOYING, FractionStatus.ENJOYED]
        seen = [
            order.index(derive_fraction_status(fraction, START + timedelta(days=offset)))
            for offset in range(-5, 30)
        ]
        assert seen == sorted(seen)

    def test_stale_enjoying_is_rederived(self):
        fraction = make_fraction(1, START, 20, status=FractionStatus.ENJOYING)
        assert derive_fraction_status(fraction, date(2027, 1, 10)) == FractionStatus.ENJOYED

    @pytest.mark.parametrize("status", [
        FractionStatus.CANCELED, FractionStatus.ENJOYED, FractionStatus.PLANNED, FractionStatus.REJECTED,
    ])
    def test_non_time_driven_statuses_unchanged(self, status):
        fraction = make_fraction(1, START, 20, status=status)
        assert derive_fraction_status(fraction, date(2027, 1, 10)) == status

    def test_derivation_is_idempotent_and_pure(self):
        fraction = make_fraction(1, START, 20, status=FractionStatus.SCHEDULED)
        before = fraction.model_dump()
        first = derive_fraction_status(fraction, date(2026, 12, 5))
        second = derive_fraction_status(fraction, date(2026, 12, 5))
        assert first == second
        assert fraction.model_dump() == before


class TestDeriveAccrualPeriodStatus:
    @pytest.mark.parametrize("status", [
        WorkflowStatus.PENDING_MANAGER, WorkflowStatus.PENDING_RH, WorkflowStatus.REJECTED,
    ])
    def test_workflow_status_dominates(self, period, status):
        enjoyed = make_fraction(1, date(2026, 1, 5), 30, status=FractionStatus.ENJOYED)
        p = period.model_copy(update={"status": status, "fracionamentos": [enjoyed]})
        assert derive_accrual_period_status(p, date(2026, 10, 19)).value == status.value

    def test_no_valid_fractions_is_planning(self, period, today):
        canceled = make_fraction(1, START, 20, status=FractionStatus.CANCELED)
        p = period.model_copy(update={"status": WorkflowStatus.SCHEDULED, "fracionamentos": [canceled]})
        assert derive_accrual_period_status(p, today) == PeriodDisplayStatus.PLANNING

    def test_all_enjoyed_is_enjoyed(self, period):
        fractions = [
            make_fraction(1, date(2026, 8, 3), 15, status=FractionStatus.SCHEDULED),
            make_fraction(2, date(2026, 9, 7), 15, status=FractionStatus.ENJOYED),
        ]
        p = period.model_copy(update={"status": WorkflowStatus.SCHEDULED, "fracionamentos": fractions})
        assert derive_accrual_period_status(p, date(2026, 10, 19)) == PeriodDisplayStatus.ENJOYED

    def test_partially_enjoyed_is_scheduled(self, period):
        fractions = [
            make_fraction(1, date(2026, 8, 3), 15, status=FractionStatus.SCHEDULED),
            make_fraction(2, START, 15, status=FractionStatus.SCHEDULED),
        ]
        p = period.model_copy(update={"status": WorkflowStatus.SCHEDULED, "fracionamentos": fractions})
        assert derive_accrual_period_status(p, date(2026, 10, 19)) == PeriodDisplayStatus.SCHEDULED

    def test_has_started_fractions(self, period):
        p = period.model_copy(update={
            "fracionamentos": [make_fraction(1, START, 20, status=FractionStatus.SCHEDULED)],
        })
        assert not has_started_fractions(p, date(2026, 11, 29))
        assert has_started_fractions(p, date(2026, 11, 30))


class TestStatusCatalog:
    def test_builtin_label(self, app_config):
        assert status_label(FractionStatus.ENJOYING, app_config) == "Em Gozo"
        assert status_label("pending_rh") == "Aguardando RH"
        assert status_label("inexistente") == "Desconhecido"

    def test_custom_label_takes_precedence(self, app_config):
        catalog = [
            s.model_copy(update={"label": "Programadas"}) if s.id == "scheduled" else s
            for s in app_config.status_ferias
        ]
        config = app_config.model_copy(update={"status_ferias": catalog})
        assert status_label(WorkflowStatus.SCHEDULED, config) == "Programadas"

    def test_active_statuses_by_category(self, app_config):
        period_ids = {s.id for s in active_statuses(app_config, "period")}
        fraction_ids = {s.id for s in active_statuses(app_config, "fraction")}
        assert "pending_manager" in period_ids
        assert "enjoying" in fraction_ids
        # Categoria 'both' aparece nas duas listas
        assert "scheduled" in period_ids and "scheduled" in fraction_ids

    def test_inactive_status_hidden(self, app_config):
        catalog = [s.model_copy(update={"active": s.id != "canceled"}) for s in app_config.status_ferias]
        config = app_config.model_copy(update={"status_ferias": catalog})
        assert "canceled" not in {s.id for s in active_statuses(config, "fraction")}

    def test_add_status_normalizes_id(self, app_config):
        config = add_status(app_config, "  Em Revisao ", "Em revisão", style="warning", category="period")
        added = config.status_ferias[-1]
        assert added.id == "em_revisao"
        assert not added.is_system
        assert len(app_config.status_ferias) == len(config.status_ferias) - 1

    @pytest.mark.parametrize("status_id,label", [("", "Rótulo"), ("novo", "  "), ("scheduled", "Outro"), ("ação", "X")])
    def test_add_status_rejects_invalid(self, app_config, status_id, label):
        with pytest.raises(ValueError):
            add_status(app_config, status_id, label)

    def test_remove_custom_status(self, app_config):
        config = add_status(app_config, "em_revisao", "Em revisão")
        config = remove_status(config, "em_revisao")
        assert "em_revisao" not in {s.id for s in config.status_ferias}

    def test_system_status_cannot_be_removed(self, app_config):
        with pytest.raises(ValueError, match="sistema"):
            remove_status(app_config, "scheduled")

    def test_remove_unknown_status(self, app_config):
        with pytest.raises(ValueError):
            remove_status(app_config, "nao_existe")
