"""Validazione e conversione dei valori in ingresso (form JSON, script)"""
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation


def parse_amount(value):
    """Converte un importo in Decimal a due decimali; deve essere positivo"""
    if isinstance(value, bool) or value is None:
        raise ValueError("Please enter a valid amount")
    try:
        amount = Decimal(str(value).replace(',', '.')).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError):
        raise ValueError("Please enter a valid amount")
    if not amount.is_finite() or amount <= 0:
        raise ValueError("Please enter a valid amount")
    return amount


def parse_date(value, field_name='date'):
    """Accetta date, datetime o stringhe ISO (YYYY-MM-DD o timestamp completo)"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValueError(f"Invalid {field_name}")
    try:
        return datetime.fromisoformat(value.strip().replace('Z', '+00:00')).date()
    except ValueError:
        raise ValueError(f"Invalid {field_name} (expected YYYY-MM-DD)")


def parse_datetime(value, field_name='now'):
    """Timestamp ISO senza fuso (naive); quelli con fuso vengono convertiti in UTC"""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
        except ValueError:
            raise ValueError(f"Invalid {field_name} (expected ISO timestamp)")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_optional_int(value, field_name):
    """None/'' -> None; altrimenti intero"""
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field_name}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {field_name}")
