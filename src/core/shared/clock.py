"""
Relógio injetável.

Toda lógica temporal do motor de SLA lê o "agora" por meio de um
Clock, o que torna a detecção de violações determinística em testes.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Fonte de instante atual (sempre timezone-aware, UTC)."""

    def agora(self) -> datetime:
        ...


class SystemClock:
    """Relógio do sistema operacional."""

    def agora(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Relógio controlado manualmente (para testes).

    Example:
        clock = FixedClock(datetime(2024, 1, 1, 8, tzinfo=timezone.utc))
        clock.avancar(hours=5)
        clock.agora()  # 2024-01-01 13:00 UTC
    """

    def __init__(self, instante: datetime = None):
        self._instante = instante or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def agora(self) -> datetime:
        return self._instante

    def avancar(self, **kwargs) -> datetime:
        """Avança o relógio (aceita os mesmos argumentos de timedelta)."""
        self._instante = self._instante + timedelta(**kwargs)
        return self._instante

    def definir(self, instante: datetime) -> None:
        self._instante = instante
