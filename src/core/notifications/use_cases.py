"""
Use Cases da caixa de notificações in-app.

- ListarNotificacoesService: notificações do próprio usuário
- MarcarNotificacaoLidaService: apenas o destinatário marca como lida
"""

from typing import List
import logging

from src.core.shared.authorization import Ator
from src.core.shared.exceptions import EntityNotFoundError, PermissionDeniedError
from src.core.shared.interfaces import UnitOfWork

from .dtos import NotificationOutputDTO
from .ports import NotificationRepository

logger = logging.getLogger(__name__)


class ListarNotificacoesService:
    """Use Case: Listar notificações do ator (mais recentes primeiro)."""

    def __init__(self, notification_repo: NotificationRepository):
        self.notification_repo = notification_repo

    def execute(self, ator: Ator, apenas_nao_lidas: bool = False) -> List[NotificationOutputDTO]:
        notificacoes = self.notification_repo.list_by_destinatario(
            ator.id, apenas_nao_lidas=apenas_nao_lidas
        )
        notificacoes.sort(key=lambda n: n.criado_em, reverse=True)
        return [NotificationOutputDTO.from_entity(n) for n in notificacoes]


class MarcarNotificacaoLidaService:
    """
    Use Case: Marcar notificação como lida.

    Raises:
        EntityNotFoundError: Se a notificação não existe
        PermissionDeniedError: Se o ator não é o destinatário
    """

    def __init__(self, notification_repo: NotificationRepository, uow: UnitOfWork):
        self.notification_repo = notification_repo
        self.uow = uow

    def execute(self, notificacao_id: str, ator: Ator) -> NotificationOutputDTO:
        with self.uow:
            notificacao = self.notification_repo.get_by_id(notificacao_id)
            if notificacao is None:
                raise EntityNotFoundError(
                    f"Notificação {notificacao_id} não encontrada",
                    entity_type="Notification",
                    entity_id=notificacao_id,
                )

            if notificacao.destinatario_id != ator.id:
                raise PermissionDeniedError(
                    "Apenas o destinatário pode marcar a notificação como lida",
                    acao="marcar_notificacao_lida",
                    ator_id=ator.id,
                )

            if notificacao.marcar_como_lida():
                self.notification_repo.save(notificacao)

        return NotificationOutputDTO.from_entity(notificacao)
