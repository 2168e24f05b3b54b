"""
Textos das notificações (in-app e e-mail).
"""

from dataclasses import dataclass
from typing import Iterable

from .entities import NotificationType


@dataclass(frozen=True)
class MensagemNotificacao:
    """Conteúdo de uma notificação, antes de ter destinatário."""

    tipo: NotificationType
    titulo: str
    mensagem: str


def _ref(ticket_id: str) -> str:
    return f"#{ticket_id[:8]}"


def ticket_criado(ticket_id: str, titulo: str) -> MensagemNotificacao:
    return MensagemNotificacao(
        tipo=NotificationType.TICKET_CRIADO,
        titulo="Ticket criado com sucesso",
        mensagem=f'Seu ticket "{titulo}" foi criado. Ticket {_ref(ticket_id)}',
    )


def novo_ticket(ticket_id: str, titulo: str, nome_criador: str) -> MensagemNotificacao:
    return MensagemNotificacao(
        tipo=NotificationType.NOVO_TICKET,
        titulo="Novo ticket criado",
        mensagem=f'{nome_criador or "Um usuário"} abriu o ticket {_ref(ticket_id)}: "{titulo}"',
    )


def ticket_atribuido(ticket_id: str, titulo: str) -> MensagemNotificacao:
    return MensagemNotificacao(
        tipo=NotificationType.TICKET_ATRIBUIDO,
        titulo="Ticket atribuído a você",
        mensagem=f'Você é o responsável pelo ticket {_ref(ticket_id)}: "{titulo}"',
    )


def status_alterado(ticket_id: str, titulo: str, status_novo: str) -> MensagemNotificacao:
    return MensagemNotificacao(
        tipo=NotificationType.STATUS_ALTERADO,
        titulo="Ticket atualizado",
        mensagem=f'O ticket {_ref(ticket_id)} "{titulo}" mudou para {status_novo}',
    )


def ticket_resolvido(ticket_id: str, titulo: str) -> MensagemNotificacao:
    return MensagemNotificacao(
        tipo=NotificationType.TICKET_RESOLVIDO,
        titulo="Ticket resolvido",
        mensagem=f'Seu ticket {_ref(ticket_id)} "{titulo}" foi resolvido.',
    )


def sla_escalonado(
    ticket_id: str,
    titulo: str,
    prioridade: str,
    tipos: Iterable[str],
) -> MensagemNotificacao:
    return MensagemNotificacao(
        tipo=NotificationType.SLA_ESCALONADO,
        titulo=f"Violação de SLA: ticket {_ref(ticket_id)}",
        mensagem=(
            f'O ticket {_ref(ticket_id)} "{titulo}" violou o SLA '
            f'({", ".join(tipos)}). Prioridade atual: {prioridade}. '
            f"Ação imediata necessária."
        ),
    )
