"""
Repositório Django para notificações in-app.
"""

from typing import List, Optional
import logging

from django.db import IntegrityError, transaction

from src.core.notifications.entities import NotificationEntity, NotificationType

from .models import NotificationModel

logger = logging.getLogger(__name__)


class NotificationMapper:
    """Conversão NotificationEntity <-> NotificationModel."""

    @staticmethod
    def to_entity(model: NotificationModel) -> NotificationEntity:
        return NotificationEntity(
            id=model.id,
            destinatario_id=model.destinatario_id,
            ticket_id=model.ticket_id,
            titulo=model.titulo,
            mensagem=model.mensagem,
            tipo=NotificationType(model.tipo),
            chave_evento=model.chave_evento,
            criado_em=model.criado_em,
            lida=model.lida,
        )


class DjangoNotificationRepository:
    """
    Implementação Django do NotificationRepository.

    adicionar_se_ausente usa get_or_create sobre a chave de
    idempotência; a constraint única resolve a corrida entre dois
    workers que processam o mesmo evento.
    """

    def __init__(self):
        self._mapper = NotificationMapper()

    def adicionar_se_ausente(self, notificacao: NotificationEntity) -> bool:
        try:
            with transaction.atomic():
                _, criada = NotificationModel.objects.get_or_create(
                    ticket_id=notificacao.ticket_id,
                    chave_evento=notificacao.chave_evento,
                    destinatario_id=notificacao.destinatario_id,
                    tipo=notificacao.tipo.value,
                    defaults={
                        'id': notificacao.id,
                        'titulo': notificacao.titulo,
                        'mensagem': notificacao.mensagem,
                        'criado_em': notificacao.criado_em,
                        'lida': notificacao.lida,
                    },
                )
        except IntegrityError:
            criada = False

        if not criada:
            logger.debug(
                f"[NOTIFICATION] Duplicada ignorada: "
                f"{notificacao.tipo.value} {notificacao.ticket_id} -> {notificacao.destinatario_id}"
            )
        return criada

    def get_by_id(self, notificacao_id: str) -> Optional[NotificationEntity]:
        try:
            return self._mapper.to_entity(NotificationModel.objects.get(id=notificacao_id))
        except NotificationModel.DoesNotExist:
            return None

    def list_by_destinatario(
        self,
        destinatario_id: str,
        apenas_nao_lidas: bool = False,
    ) -> List[NotificationEntity]:
        queryset = NotificationModel.objects.filter(destinatario_id=destinatario_id)
        if apenas_nao_lidas:
            queryset = queryset.filter(lida=False)
        return [self._mapper.to_entity(model) for model in queryset]

    def save(self, notificacao: NotificationEntity) -> None:
        NotificationModel.objects.filter(id=notificacao.id).update(lida=notificacao.lida)
