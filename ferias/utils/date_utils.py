# ferias/utils/date_utils.py
"""
Utilitários de data civil

Todas as datas do motor são datas de calendário (ano, mês, dia), sem
componente de hora. Valores com hora são reduzidos à data que carregam,
nunca convertidos pelo fuso local, para que uma data não "ande" um dia.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

import pandas as pd

# Sexta (4) e sábado (5) antecedem o repouso semanal
FRIDAY = 4
SATURDAY = 5


def parse_date(value) -> Optional[date]:
    """
    Converte valores de planilha/JSON em data civil

    Args:
        value: date, datetime, pd.Timestamp, 'YYYY-MM-DD' ou 'DD/MM/YYYY'

    Returns:
        date ou None para valores vazios
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
            try:
                return datetime.strptime(text[:10], fmt).date()
            except ValueError:
                continue
        raise ValueError(f"Data inválida: {value}")
    if pd.isna(value):
        return None
    raise ValueError(f"Data inválida: {value!r}")


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def add_years(value: date, years: int) -> date:
    """Soma anos, ajustando 29/02 para 28/02 em anos não bissextos"""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, day=28)


def end_date_for(start: date, days: int) -> date:
    """Data de término de um período de `days` dias corridos iniciado em `start`"""
    return add_days(start, days - 1)


def weekday(value: date) -> int:
    """Dia da semana (segunda=0 ... domingo=6)"""
    return value.weekday()


def is_friday_or_saturday(value: date) -> bool:
    return weekday(value) in (FRIDAY, SATURDAY)


def format_date(value: Optional[date]) -> str:
    """Formata no padrão DD/MM/YYYY"""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def parse_day_month(text: str) -> Tuple[int, int]:
    """
    Interpreta um marco recorrente 'DD/MM'

    Returns:
        tuple: (dia, mês)
    """
    try:
        day_str, month_str = str(text).strip().split("/")
        day, month = int(day_str), int(month_str)
    except ValueError:
        raise ValueError(f"Marco DD/MM inválido: {text}")
    if not (1 <= month <= 12 and 1 <= day <= 31):
        raise ValueError(f"Marco DD/MM inválido: {text}")
    return day, month


def month_day_value(month: int, day: int) -> int:
    """Valor ordenável de (mês, dia): março 5 -> 305"""
    return month * 100 + day


def in_recurring_window(value: date, start_ddmm: str, end_ddmm: str) -> bool:
    """
    Verifica se (mês, dia) de `value` está na janela anual [início, fim]

    A janela pode atravessar a virada do ano: se fim < início, vale
    data >= início OU data <= fim.
    """
    start_day, start_month = parse_day_month(start_ddmm)
    end_day, end_month = parse_day_month(end_ddmm)
    current = month_day_value(value.month, value.day)
    start_value = month_day_value(start_month, start_day)
    end_value = month_day_value(end_month, end_day)

    if end_value < start_value:
        return current >= start_value or current <= end_value
    return start_value <= current <= end_value


def today(tz: Optional[str] = None) -> date:
    """Data de hoje no fuso de negócio (usado apenas na borda do sistema)"""
    if tz:
        return datetime.now(ZoneInfo(tz)).date()
    return date.today()
