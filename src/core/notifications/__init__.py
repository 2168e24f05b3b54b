"""
Domínio de Notificações.

- NotificationEntity / NotificationType
- NotificationDispatcher: registro in-app idempotente + canal externo
- NotificationEventHandler: evento de domínio -> destinatários
- Caixa de entrada (listar, marcar como lida)
"""

from .entities import NotificationEntity, NotificationType
from .ports import (
    NotificationRepository,
    DeliveryChannel,
    InMemoryNotificationRepository,
    InMemoryDeliveryChannel,
)
from .dispatcher import NotificationDispatcher
from .handlers import NotificationEventHandler
from .dtos import NotificationOutputDTO
from .use_cases import ListarNotificacoesService, MarcarNotificacaoLidaService

__all__ = [
    "NotificationEntity",
    "NotificationType",
    "NotificationRepository",
    "DeliveryChannel",
    "InMemoryNotificationRepository",
    "InMemoryDeliveryChannel",
    "NotificationDispatcher",
    "NotificationEventHandler",
    "NotificationOutputDTO",
    "ListarNotificacoesService",
    "MarcarNotificacaoLidaService",
]
