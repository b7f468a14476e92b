"""
Excepciones de dominio compartidas por los módulos.

Los routers las traducen a HTTPException; los servicios y el CRUD nunca
construyen respuestas HTTP directamente.
"""


class ValidationError(ValueError):
    """Entrada inválida detectada antes de tocar la base de datos."""


class InvalidStatusTransition(ValidationError):
    """Transición de estado no permitida por el ciclo de vida."""

    def __init__(self, current: str, target: str, reason: str = ""):
        self.current = current
        self.target = target
        message = f"Cannot change subscription status from '{current}' to '{target}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class SubscriptionNotFound(LookupError):
    """La suscripción no existe o no pertenece al usuario."""


class TestimonialNotFound(LookupError):
    """El testimonio no existe."""


class PersistenceUnavailable(RuntimeError):
    """La base de datos no respondió o está mal configurada."""
