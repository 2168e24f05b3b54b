"""
Domain Events do Domínio de Tickets.

Cada transição bem-sucedida do ciclo de vida emite exatamente um
evento, consumido pelo Notification Dispatcher.

Eventos:
- TicketCriadoEvent: Novo ticket foi criado
- TicketAtribuidoEvent: Ticket foi atribuído a técnico
- TicketStatusAlteradoEvent: Status mudou (exceto entrada em RESOLVIDO)
- TicketResolvidoEvent: Ticket entrou em RESOLVIDO
- TicketPrioridadeAlteradaEvent: Prioridade foi alterada manualmente

Uso:
    with uow:
        ticket.alterar_status(novo, agora)
        repo.save(ticket)
        uow.publish_event(TicketStatusAlteradoEvent(...))
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.core.shared.events import DomainEvent


@dataclass
class TicketCriadoEvent(DomainEvent):
    """
    Evento: Ticket foi criado.

    Handlers típicos:
    - Notificar o criador (ticket_created)
    - Notificar a triagem (new_ticket)

    Attributes:
        criador_id: ID do usuário que criou
        titulo: Título do ticket
        prioridade: Prioridade do ticket (nome do enum)
        monitorado: Se uma política de SLA foi vinculada
    """

    criador_id: str = ""
    titulo: str = ""
    prioridade: str = ""
    monitorado: bool = False

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketAtribuidoEvent(DomainEvent):
    """
    Evento: Ticket foi atribuído a técnico.

    Attributes:
        tecnico_id: ID do técnico atribuído
        atribuido_por_id: ID de quem fez a atribuição
    """

    tecnico_id: str = ""
    atribuido_por_id: Optional[str] = None

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketStatusAlteradoEvent(DomainEvent):
    """
    Evento: Status do ticket mudou.

    Attributes:
        status_anterior: Nome do status anterior
        status_novo: Nome do novo status
        alterado_por_id: ID de quem alterou
    """

    status_anterior: str = ""
    status_novo: str = ""
    alterado_por_id: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketResolvidoEvent(DomainEvent):
    """
    Evento: Ticket entrou em RESOLVIDO.

    Attributes:
        resolvido_por_id: ID de quem resolveu
        resolvido_em: Instante (ISO 8601) gravado no ticket
        dentro_sla: Se foi resolvido antes do prazo (None se não monitorado)
    """

    resolvido_por_id: str = ""
    resolvido_em: str = ""
    dentro_sla: Optional[bool] = None

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketPrioridadeAlteradaEvent(DomainEvent):
    """
    Evento: Prioridade do ticket foi alterada manualmente.

    Attributes:
        prioridade_anterior: Nome da prioridade antes da mudança
        prioridade_nova: Nome da prioridade após mudança
        alterado_por_id: ID de quem alterou
    """

    prioridade_anterior: str = ""
    prioridade_nova: str = ""
    alterado_por_id: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "prioridade_anterior": self.prioridade_anterior,
            "prioridade_nova": self.prioridade_nova,
            "alterado_por_id": self.alterado_por_id,
        }
