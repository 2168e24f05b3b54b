"""
Unit of Work - Implementação Django.

Gerencia transações atômicas por operação de negócio, garantindo
que a escrita condicional do ticket e os eventos resultantes formem
uma única unidade.

Responsabilidades:
- Iniciar/finalizar transações (transaction.atomic)
- Commit/Rollback coordenado
- Publicar eventos após commit bem-sucedido

ACID Guarantees:
- Atomicidade: Tudo ou nada
- Consistência: Eventos refletem estado persistido
- Isolamento: Cada thread usa sua própria conexão e transação
- Durabilidade: PostgreSQL garante
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.interfaces import EventPublisher, UnitOfWork
from src.core.shared.events import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Usa django.db.transaction.atomic para gerenciar transações; dentro
    de um bloco atômico externo (ex: testes) vira um savepoint.
    Eventos são publicados apenas após a saída bem-sucedida do bloco.

    Example:
        uow = DjangoUnitOfWork(event_publisher=publisher)
        with uow:
            repo.save(entity)
            uow.publish_event(MyEvent(...))
        # Commit automático + eventos publicados

    Example com rollback:
        with uow:
            repo.save(entity)
            raise ConcurrencyError("...")
        # Rollback automático, eventos descartados
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        """
        Args:
            event_publisher: Publicador de eventos (síncrono ou Celery)
        """
        super().__init__()
        self._event_publisher = event_publisher

    def _begin_transaction(self) -> None:
        atomic = transaction.atomic()
        atomic.__enter__()
        self._local.atomic = atomic
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Confirma a transação e publica eventos.

        Ordem de execução:
        1. Saída do bloco atômico (commit ou release do savepoint)
        2. Publicação dos eventos enfileirados
        3. Limpeza da fila
        """
        atomic = self._take_atomic()
        if atomic is not None:
            atomic.__exit__(None, None, None)
            logger.debug("Transaction committed")

        eventos = list(self._events)
        self.clear_events()
        self._publish_events(eventos)

    def rollback(self) -> None:
        """Desfaz mudanças e descarta eventos."""
        atomic = self._take_atomic()
        if atomic is not None:
            transaction.set_rollback(True)
            atomic.__exit__(None, None, None)
            logger.debug("Transaction rolled back")
        self.clear_events()

    def _take_atomic(self):
        atomic = getattr(self._local, "atomic", None)
        self._local.atomic = None
        return atomic

    def _publish_events(self, eventos: List[DomainEvent]) -> None:
        """
        Publica eventos para handlers.

        Falha de publicação não desfaz a operação já confirmada.
        """
        for event in eventos:
            logger.info(
                f"Publishing event: {event.event_type} "
                f"for aggregate {event.aggregate_id}"
            )

            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error(f"Failed to publish event: {e}", exc_info=True)


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes.

    Não persiste nada - apenas simula comportamento
    para testes unitários sem banco de dados.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            # operações
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        """Simula início de transação."""
        pass

    def commit(self) -> None:
        """Simula commit e publica eventos."""
        self._committed = True
        eventos = list(self._events)
        self.clear_events()
        self._published_events.extend(eventos)

        if self._event_publisher:
            for event in eventos:
                self._event_publisher.publish(event)

    def rollback(self) -> None:
        """Simula rollback."""
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        """Retorna eventos que foram 'publicados'."""
        return list(self._published_events)

    def events_of_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self._published_events if e.event_type == event_type]

    def reset(self) -> None:
        """Reset para próximo teste."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
