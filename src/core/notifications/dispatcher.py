"""
Notification Dispatcher.

Para cada destinatário:
1. Cria o registro in-app (idempotente por ticket/evento/destinatário/tipo)
2. Entrega pelo canal externo apenas se o registro é novo

Falhas do canal (DeliveryFailureError) são registradas em log e nunca
propagadas: a operação de negócio que originou o evento já foi
confirmada.
"""

from typing import Dict, Iterable, List, Optional
import logging

from src.core.shared.authorization import UsuarioInfo
from src.core.shared.clock import Clock, SystemClock
from src.core.shared.exceptions import DeliveryFailureError

from .entities import NotificationEntity
from .ports import DeliveryChannel, NotificationRepository
from .templates import MensagemNotificacao

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Example:
        dispatcher = NotificationDispatcher(repo, canal)
        criadas = dispatcher.notificar(
            templates.ticket_resolvido(ticket.id, ticket.titulo),
            ticket_id=ticket.id,
            chave_evento=evento.event_id,
            destinatarios=[criador],
        )
    """

    def __init__(
        self,
        notification_repo: NotificationRepository,
        canal: Optional[DeliveryChannel] = None,
        clock: Optional[Clock] = None,
    ):
        self.notification_repo = notification_repo
        self.canal = canal
        self.clock = clock or SystemClock()

    def notificar(
        self,
        mensagem: MensagemNotificacao,
        ticket_id: str,
        chave_evento: str,
        destinatarios: Iterable[UsuarioInfo],
    ) -> List[NotificationEntity]:
        """
        Notifica cada destinatário uma única vez.

        Args:
            mensagem: Conteúdo (tipo, título, texto)
            ticket_id: Ticket de origem
            chave_evento: ID do evento de domínio (chave de idempotência)
            destinatarios: Usuários a notificar (duplicados são ignorados)

        Returns:
            Notificações criadas nesta chamada
        """
        unicos: Dict[str, UsuarioInfo] = {}
        for usuario in destinatarios:
            unicos.setdefault(usuario.id, usuario)

        criadas: List[NotificationEntity] = []
        agora = self.clock.agora()

        for usuario in unicos.values():
            notificacao = NotificationEntity.criar(
                destinatario_id=usuario.id,
                ticket_id=ticket_id,
                titulo=mensagem.titulo,
                mensagem=mensagem.mensagem,
                tipo=mensagem.tipo,
                chave_evento=chave_evento,
                criado_em=agora,
            )

            if not self.notification_repo.adicionar_se_ausente(notificacao):
                logger.debug(
                    f"[NOTIFICATION] Duplicada ignorada: {mensagem.tipo.value} "
                    f"ticket={ticket_id} destinatario={usuario.id}"
                )
                continue

            criadas.append(notificacao)
            self._entregar(usuario, notificacao)

        if criadas:
            logger.info(
                f"[NOTIFICATION] {mensagem.tipo.value}: {len(criadas)} "
                f"notificação(ões) para o ticket {ticket_id}"
            )
        return criadas

    def _entregar(self, usuario: UsuarioInfo, notificacao: NotificationEntity) -> None:
        if self.canal is None:
            return
        try:
            self.canal.enviar(usuario, notificacao)
        except DeliveryFailureError as e:
            logger.warning(
                f"[NOTIFICATION] Falha na entrega para {usuario.id}: {e.message}"
            )
