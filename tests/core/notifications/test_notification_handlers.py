"""
Testes do mapeamento evento -> destinatários (NotificationEventHandler).
"""

import pytest

from src.core.notifications.dispatcher import NotificationDispatcher
from src.core.notifications.entities import NotificationType
from src.core.notifications.handlers import NotificationEventHandler
from src.core.notifications.ports import InMemoryDeliveryChannel
from src.core.sla.events import TicketEscalonadoEvent, TicketSLAVioladoEvent
from src.core.tickets.entities import TicketPriority
from src.core.tickets.events import (
    TicketAtribuidoEvent,
    TicketCriadoEvent,
    TicketPrioridadeAlteradaEvent,
    TicketResolvidoEvent,
    TicketStatusAlteradoEvent,
)


@pytest.fixture
def canal():
    return InMemoryDeliveryChannel()


@pytest.fixture
def handler(ticket_repo, notification_repo, canal, clock, directory):
    dispatcher = NotificationDispatcher(notification_repo, canal, clock)
    return NotificationEventHandler(ticket_repo, dispatcher, directory)


def _por_destinatario(notificacoes):
    return {(n.destinatario_id, n.tipo) for n in notificacoes}


class TestRoteamento:

    def test_criacao_notifica_criador_e_triagem(self, handler, novo_ticket):
        ticket = novo_ticket()
        evento = TicketCriadoEvent(aggregate_id=ticket.id, criador_id="user-1", titulo=ticket.titulo)

        criadas = handler.handle(evento)

        assert _por_destinatario(criadas) == {
            ("user-1", NotificationType.TICKET_CRIADO),
            ("gestor-1", NotificationType.NOVO_TICKET),
        }
        novo = [n for n in criadas if n.tipo == NotificationType.NOVO_TICKET][0]
        assert "Carla" in novo.mensagem

    def test_atribuicao_notifica_tecnico(self, handler, novo_ticket):
        ticket = novo_ticket()
        criadas = handler.handle(TicketAtribuidoEvent(aggregate_id=ticket.id, tecnico_id="tec-1"))
        assert _por_destinatario(criadas) == {("tec-1", NotificationType.TICKET_ATRIBUIDO)}

    def test_status_notifica_criador_com_rotulo(self, handler, novo_ticket):
        ticket = novo_ticket(criador_id="user-2")
        criadas = handler.handle(
            TicketStatusAlteradoEvent(
                aggregate_id=ticket.id, status_anterior="ABERTO", status_novo="EM_PROGRESSO"
            )
        )
        assert _por_destinatario(criadas) == {("user-2", NotificationType.STATUS_ALTERADO)}
        assert "Em Progresso" in criadas[0].mensagem

    def test_resolucao_notifica_criador(self, handler, novo_ticket):
        ticket = novo_ticket()
        criadas = handler.handle(TicketResolvidoEvent(aggregate_id=ticket.id))
        assert _por_destinatario(criadas) == {("user-1", NotificationType.TICKET_RESOLVIDO)}

    def test_escalonamento_notifica_gestores(self, handler, novo_ticket):
        ticket = novo_ticket(TicketPriority.ALTA)
        criadas = handler.handle(
            TicketEscalonadoEvent(
                aggregate_id=ticket.id,
                prioridade_anterior="ALTA",
                prioridade_nova="URGENTE",
                tipos=["response_time"],
            )
        )
        assert _por_destinatario(criadas) == {("gestor-1", NotificationType.SLA_ESCALONADO)}
        assert "Urgente" in criadas[0].mensagem

    def test_sla_violado_no_maximo_notifica_gestores(self, handler, novo_ticket):
        ticket = novo_ticket(TicketPriority.URGENTE)
        criadas = handler.handle(
            TicketSLAVioladoEvent(
                aggregate_id=ticket.id, prioridade="URGENTE", tipos=["resolution_time"]
            )
        )
        assert _por_destinatario(criadas) == {("gestor-1", NotificationType.SLA_ESCALONADO)}

    def test_usuario_fora_do_diretorio_recebe_in_app(self, handler, novo_ticket, canal):
        ticket = novo_ticket(criador_id="desconhecido")
        criadas = handler.handle(TicketResolvidoEvent(aggregate_id=ticket.id))

        assert [n.destinatario_id for n in criadas] == ["desconhecido"]
        assert canal.enviadas[0][0] == "desconhecido"


class TestCasosDeBorda:

    def test_evento_sem_notificacao(self, handler, novo_ticket):
        ticket = novo_ticket()
        evento = TicketPrioridadeAlteradaEvent(aggregate_id=ticket.id)
        assert handler.handle(evento) == []

    def test_ticket_inexistente(self, handler):
        assert handler.handle(TicketResolvidoEvent(aggregate_id="sumiu")) == []

    def test_reentrega_do_mesmo_evento_e_idempotente(self, handler, novo_ticket, notification_repo):
        ticket = novo_ticket()
        evento = TicketResolvidoEvent(aggregate_id=ticket.id)

        handler.handle(evento)
        assert handler.handle(evento) == []
        assert len(notification_repo.list_all()) == 1

    def test_tipos_tratados(self, handler):
        assert set(handler.tipos_tratados) == {
            "TicketCriadoEvent",
            "TicketAtribuidoEvent",
            "TicketStatusAlteradoEvent",
            "TicketResolvidoEvent",
            "TicketEscalonadoEvent",
            "TicketSLAVioladoEvent",
        }
