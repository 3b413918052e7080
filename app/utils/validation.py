"""
Validation utilities for form input
"""
import re
from datetime import date


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_optional_text(value: str | None) -> str | None:
    """
    Обрезать пробелы; пустая строка превращается в None

    Example:
        >>> normalize_optional_text("  nota ")
        "nota"
        >>> normalize_optional_text("   ")
        None
    """
    if value is None:
        return None
    value = value.strip()
    return value or None


def is_valid_email(value: str) -> bool:
    """
    Простая проверка формата email (одна @, точка в домене, без пробелов)

    Example:
        >>> is_valid_email("ana@example.cl")
        True
        >>> is_valid_email("ana@example")
        False
    """
    return bool(_EMAIL_RE.match(value))


def parse_iso_date(value: str | date | None) -> date | None:
    """
    Разобрать дату из формы (YYYY-MM-DD); пустое значение - None

    Raises:
        ValueError: если строка не является датой
    """
    if value is None or isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Некорректная дата: «{value}». Используйте формат ГГГГ-ММ-ДД")
