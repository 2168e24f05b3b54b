"""
Mapeamento evento de domínio -> destinatários -> notificação.

| Evento                       | Destinatários                    | Tipo                  |
|------------------------------|----------------------------------|-----------------------|
| TicketCriadoEvent            | criador                          | ticket_created        |
|                              | capacidade TRIAGEM               | new_ticket            |
| TicketAtribuidoEvent         | técnico atribuído                | ticket_assigned       |
| TicketStatusAlteradoEvent    | criador                          | ticket_status_changed |
| TicketResolvidoEvent         | criador                          | ticket_resolved       |
| TicketEscalonadoEvent        | capacidade RECEBER_ESCALONAMENTO | sla_escalated         |
| TicketSLAVioladoEvent        | capacidade RECEBER_ESCALONAMENTO | sla_escalated         |
"""

from typing import Callable, Dict, List, Type
import logging

from src.core.shared.authorization import Capacidade, UserDirectory, UsuarioInfo
from src.core.shared.events import DomainEvent
from src.core.sla.events import TicketEscalonadoEvent, TicketSLAVioladoEvent
from src.core.tickets.entities import TicketEntity, TicketPriority, TicketStatus
from src.core.tickets.events import (
    TicketAtribuidoEvent,
    TicketCriadoEvent,
    TicketResolvidoEvent,
    TicketStatusAlteradoEvent,
)
from src.core.tickets.ports import TicketRepository

from . import templates
from .dispatcher import NotificationDispatcher
from .entities import NotificationEntity

logger = logging.getLogger(__name__)


class NotificationEventHandler:
    """
    Handler de eventos que gera notificações.

    Example:
        handler = NotificationEventHandler(ticket_repo, dispatcher, directory)
        publisher.register_handler("TicketCriadoEvent", handler.handle)
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        dispatcher: NotificationDispatcher,
        directory: UserDirectory,
    ):
        self.ticket_repo = ticket_repo
        self.dispatcher = dispatcher
        self.directory = directory
        self._handlers: Dict[
            Type[DomainEvent],
            Callable[[DomainEvent, TicketEntity], List[NotificationEntity]],
        ] = {
            TicketCriadoEvent: self._ticket_criado,
            TicketAtribuidoEvent: self._ticket_atribuido,
            TicketStatusAlteradoEvent: self._status_alterado,
            TicketResolvidoEvent: self._ticket_resolvido,
            TicketEscalonadoEvent: self._sla_escalonado,
            TicketSLAVioladoEvent: self._sla_escalonado,
        }

    @property
    def tipos_tratados(self) -> List[str]:
        """Nomes dos eventos que geram notificação."""
        return [tipo.__name__ for tipo in self._handlers]

    def handle(self, evento: DomainEvent) -> List[NotificationEntity]:
        """
        Processa um evento.

        Returns:
            Notificações criadas (vazio para eventos sem notificação
            ou já processados)
        """
        handler = self._handlers.get(type(evento))
        if handler is None:
            logger.debug(f"[NOTIFICATION] Sem notificação para {evento.event_type}")
            return []

        ticket = self.ticket_repo.get_by_id(evento.aggregate_id)
        if ticket is None:
            logger.warning(
                f"[NOTIFICATION] Ticket {evento.aggregate_id} do evento "
                f"{evento.event_type} não encontrado"
            )
            return []

        return handler(evento, ticket)

    # =========================================================================
    # Destinatários
    # =========================================================================

    def _usuario(self, usuario_id: str) -> UsuarioInfo:
        # Sem cadastro no diretório o registro in-app é criado mesmo assim
        return self.directory.obter(usuario_id) or UsuarioInfo(id=usuario_id)

    def _ticket_criado(self, evento: TicketCriadoEvent, ticket: TicketEntity):
        criador = self._usuario(ticket.criador_id)
        criadas = self.dispatcher.notificar(
            templates.ticket_criado(ticket.id, ticket.titulo),
            ticket_id=ticket.id,
            chave_evento=evento.event_id,
            destinatarios=[criador],
        )
        criadas += self.dispatcher.notificar(
            templates.novo_ticket(ticket.id, ticket.titulo, criador.nome),
            ticket_id=ticket.id,
            chave_evento=evento.event_id,
            destinatarios=self.directory.listar_com_capacidade(Capacidade.TRIAGEM),
        )
        return criadas

    def _ticket_atribuido(self, evento: TicketAtribuidoEvent, ticket: TicketEntity):
        return self.dispatcher.notificar(
            templates.ticket_atribuido(ticket.id, ticket.titulo),
            ticket_id=ticket.id,
            chave_evento=evento.event_id,
            destinatarios=[self._usuario(evento.tecnico_id)],
        )

    def _status_alterado(self, evento: TicketStatusAlteradoEvent, ticket: TicketEntity):
        return self.dispatcher.notificar(
            templates.status_alterado(
                ticket.id, ticket.titulo, _rotulo_status(evento.status_novo)
            ),
            ticket_id=ticket.id,
            chave_evento=evento.event_id,
            destinatarios=[self._usuario(ticket.criador_id)],
        )

    def _ticket_resolvido(self, evento: TicketResolvidoEvent, ticket: TicketEntity):
        return self.dispatcher.notificar(
            templates.ticket_resolvido(ticket.id, ticket.titulo),
            ticket_id=ticket.id,
            chave_evento=evento.event_id,
            destinatarios=[self._usuario(ticket.criador_id)],
        )

    def _sla_escalonado(self, evento: DomainEvent, ticket: TicketEntity):
        prioridade = getattr(evento, "prioridade_nova", "") or getattr(evento, "prioridade", "")
        return self.dispatcher.notificar(
            templates.sla_escalonado(
                ticket.id,
                ticket.titulo,
                _rotulo_prioridade(prioridade),
                evento.tipos,
            ),
            ticket_id=ticket.id,
            chave_evento=evento.event_id,
            destinatarios=self.directory.listar_com_capacidade(
                Capacidade.RECEBER_ESCALONAMENTO
            ),
        )


def _rotulo_status(nome: str) -> str:
    try:
        return TicketStatus.from_string(nome).value
    except ValueError:
        return nome


def _rotulo_prioridade(nome: str) -> str:
    try:
        return TicketPriority.from_string(nome).value
    except ValueError:
        return nome
