"""
Domain Events do motor de SLA.

Eventos:
- TicketEscalonadoEvent: prioridade subiu um degrau por violação
- TicketSLAVioladoEvent: violação em URGENTE (sem mudança de prioridade),
  emitido uma única vez por violação

Ambos são entregues aos usuários com a capacidade RECEBER_ESCALONAMENTO.
"""

from dataclasses import dataclass, field
from typing import List

from src.core.shared.events import DomainEvent


@dataclass
class TicketEscalonadoEvent(DomainEvent):
    """
    Evento: Ticket foi escalonado automaticamente.

    Attributes:
        prioridade_anterior: Nome da prioridade antes
        prioridade_nova: Nome da prioridade depois
        tipos: Tipos de violação que motivaram (response_time, resolution_time)
        horas_atraso: Maior atraso entre as violações
        ciclo_id: Varredura que aplicou o escalonamento
    """

    prioridade_anterior: str = ""
    prioridade_nova: str = ""
    tipos: List[str] = field(default_factory=list)
    horas_atraso: float = 0.0
    ciclo_id: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketSLAVioladoEvent(DomainEvent):
    """
    Evento: SLA violado com o ticket já na prioridade máxima.

    Attributes:
        prioridade: Nome da prioridade atual (URGENTE)
        tipos: Tipos de violação
        horas_atraso: Maior atraso entre as violações
        ciclo_id: Varredura que detectou
    """

    prioridade: str = ""
    tipos: List[str] = field(default_factory=list)
    horas_atraso: float = 0.0
    ciclo_id: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Ticket"
