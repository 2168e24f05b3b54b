"""
Event Publishers - Publicadores de Eventos de Domínio.

Responsável por entregar eventos confirmados ao Notification Dispatcher.
Implementações:
- LoggingEventPublisher: Loga e executa handlers no próprio processo (sync)
- CeleryEventPublisher: Envia para a fila `events` (celery)
- InMemoryEventPublisher: Para testes

Padrão Observer/Pub-Sub para desacoplamento.
"""

from typing import Callable, Dict, Iterable, List, Optional
import json
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], object]


class _HandlerRegistry:
    """Registro de handlers síncronos por tipo de evento."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def register_handler(self, event_type: str, handler: EventHandler) -> None:
        """Registra handler para tipo de evento."""
        self._handlers.setdefault(event_type, []).append(handler)

    def register_for(self, event_types: Iterable[str], handler: EventHandler) -> None:
        for event_type in event_types:
            self.register_handler(event_type, handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        """
        Despacha evento para handlers registrados.

        Erros de handler são registrados e não afetam a operação
        que originou o evento.
        """
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"[EVENT] Erro em handler para {event.event_type}: {e}",
                    exc_info=True,
                )


class LoggingEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Publisher que loga eventos e executa handlers locais.

    Modo `sync`: usado em desenvolvimento e em instalações sem broker.
    """

    def __init__(self, log_level: int = logging.INFO):
        super().__init__()
        self._log_level = log_level

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._log_level,
            f"[EVENT] {event.event_type} | "
            f"aggregate={event.aggregate_id} | "
            f"data={json.dumps(event.to_dict(), default=str)}"
        )
        self._dispatch_to_handlers(event)


class CeleryEventPublisher(EventPublisher):
    """
    Publisher que envia eventos para Celery.

    Usado em produção: notificações processadas pelos workers.
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event: DomainEvent) -> None:
        if self._also_log:
            logger.info(
                f"[EVENT->CELERY] {event.event_type} | "
                f"aggregate={event.aggregate_id}"
            )

        from src.adapters.django_app.events.handlers import dispatch_domain_event

        try:
            dispatch_domain_event.delay(event.event_type, event.to_dict())
        except Exception as e:
            # Broker indisponível não desfaz a operação já confirmada
            logger.error(f"Falha ao publicar evento no Celery: {e}", exc_info=True)


class InMemoryEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Publisher em memória para testes.

    Armazena eventos publicados para verificação e executa handlers.
    """

    def __init__(self):
        super().__init__()
        self._published_events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        self._dispatch_to_handlers(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events.copy()

    def clear(self) -> None:
        self._published_events.clear()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self._published_events if e.event_type == event_type]


def get_event_publisher(
    modo: str = "sync",
    notification_handler: Optional[object] = None,
) -> EventPublisher:
    """
    Factory para obter publisher apropriado.

    Args:
        modo: "sync" (handlers no processo) ou "celery"
        notification_handler: NotificationEventHandler para o modo sync

    Returns:
        Publisher configurado
    """
    if modo == "celery":
        return CeleryEventPublisher()

    publisher = LoggingEventPublisher()
    if notification_handler is not None:
        publisher.register_for(
            notification_handler.tipos_tratados,
            notification_handler.handle,
        )
    return publisher
