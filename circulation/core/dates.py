"""
Aritmética de datas usada pelas regras de circulação.

Todos os instantes circulam na aplicação como datetime *naive* em UTC.
As colunas são ``timestamp without time zone`` e guardam UTC; valores de
entrada com tzinfo são normalizados com ``to_naive_utc``.
"""

from datetime import date, datetime, timezone
from decimal import Decimal


def utcnow() -> datetime:
    """Instante real (relógio de parede) em UTC naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Converte um datetime qualquer para UTC naive."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_instant(value: str) -> datetime:
    """
    Converte uma string ISO 8601 em instante UTC naive.

    Aceita datas puras ("2025-01-20"), que viram meia-noite UTC.

    Raises:
        ValueError: String não é uma data ISO 8601 válida
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        parsed = date.fromisoformat(text)
        return datetime(parsed.year, parsed.month, parsed.day)


def days_between(start: datetime, end: datetime) -> int:
    """
    Número de dias de calendário entre duas datas, ignorando o horário.

    Positivo quando ``end`` é posterior a ``start``; antissimétrico.
    """
    return (to_naive_utc(end).date() - to_naive_utc(start).date()).days


def is_overdue(due_date: datetime, now: datetime) -> bool:
    """Atrasado a partir do dia seguinte ao vencimento."""
    return days_between(due_date, now) > 0


def is_due_soon(due_date: datetime, now: datetime, threshold_days: int = 2) -> bool:
    """Vence entre hoje e ``threshold_days`` dias a partir de hoje."""
    days_until_due = days_between(now, due_date)
    return 0 <= days_until_due <= threshold_days


def days_overdue(due_date: datetime, now: datetime) -> int:
    """Dias em atraso (0 se ainda não venceu)."""
    return max(0, days_between(due_date, now))


def calculate_late_fee(due_date: datetime, now: datetime, fee_per_day: Decimal) -> Decimal:
    """Multa por atraso: dias_atraso * taxa diária."""
    return Decimal(days_overdue(due_date, now)) * fee_per_day
