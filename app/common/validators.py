"""
Validadores específicos para Indonesia
"""
import re
from typing import Optional

# 08 + 8 a 11 dígitos (móvil indonesio en formato local)
INDONESIA_PHONE_PATTERN = re.compile(r'^08[0-9]{8,11}$')


def clean_phone(phone: str) -> str:
    """Quitar espacios, guiones y paréntesis."""
    return re.sub(r'[\s\-\(\)]', '', phone)


def validate_indonesia_phone(phone: str) -> bool:
    """
    Valida número de teléfono indonesio.
    Formato válido:
    - 08XXXXXXXX a 08XXXXXXXXXXX (10 a 13 dígitos en total)
    """
    if not phone:
        return False
    return INDONESIA_PHONE_PATTERN.match(phone) is not None


def normalize_text(value: Optional[str]) -> Optional[str]:
    """Recortar espacios; cadenas vacías se vuelven None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def require_text(value: Optional[str], field_name: str) -> str:
    """Recortar y exigir contenido; lanza ValueError para que pydantic lo reporte."""
    cleaned = normalize_text(value)
    if cleaned is None:
        raise ValueError(f"{field_name} is required")
    return cleaned
