"""
Event Handlers - Tarefas Celery do motor de SLA.

Tarefas:
- dispatch_domain_event: reconstrói o evento e entrega ao
  NotificationEventHandler (fila `events`)
- verificar_sla_task: varredura periódica de SLA (Celery Beat, fila `sla`)

Também expõe disparar_verificacao_sla(), chamado ao final de cada
mudança de status bem-sucedida.

Padrão:
    @shared_task(bind=True, ...)
    def tarefa(self, ...) -> ...:
        container = get_container()
        ...
"""

from typing import Any, Dict, Optional, Type
import logging

from celery import shared_task
from celery.signals import worker_shutting_down
from django.conf import settings

from src.core.shared.events import DomainEvent
from src.core.shared.exceptions import DomainException
from src.core.sla.events import TicketEscalonadoEvent, TicketSLAVioladoEvent
from src.core.tickets.events import (
    TicketAtribuidoEvent,
    TicketCriadoEvent,
    TicketPrioridadeAlteradaEvent,
    TicketResolvidoEvent,
    TicketStatusAlteradoEvent,
)

logger = logging.getLogger(__name__)


EVENTOS: Dict[str, Type[DomainEvent]] = {
    classe.__name__: classe
    for classe in (
        TicketCriadoEvent,
        TicketAtribuidoEvent,
        TicketStatusAlteradoEvent,
        TicketResolvidoEvent,
        TicketPrioridadeAlteradaEvent,
        TicketEscalonadoEvent,
        TicketSLAVioladoEvent,
    )
}


def reconstruir_evento(event_type: str, event_data: Dict[str, Any]) -> Optional[DomainEvent]:
    """Reconstrói o evento serializado por DomainEvent.to_dict()."""
    classe = EVENTOS.get(event_type)
    if classe is None:
        return None
    return classe.from_dict(event_data)


def _container():
    from src.config.container import get_container
    return get_container()


# =============================================================================
# Event Dispatcher
# =============================================================================

@shared_task(bind=True, max_retries=5, default_retry_delay=30, acks_late=True)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> int:
    """
    Entrega um Domain Event ao dispatcher de notificações.

    Re-execuções são seguras: notificações são idempotentes por
    (ticket, evento, destinatário, tipo).

    Args:
        event_type: Tipo do evento (ex: 'TicketCriadoEvent')
        event_data: Evento serializado

    Returns:
        Número de notificações criadas
    """
    evento = reconstruir_evento(event_type, event_data)
    if evento is None:
        logger.warning(f"[EVENT] Handler não encontrado para {event_type}")
        return 0

    try:
        criadas = _container().notification_handler().handle(evento)
    except DomainException as e:
        logger.warning(f"[EVENT] {event_type} descartado: {e}")
        return 0
    except Exception as e:
        logger.error(f"[EVENT] Erro ao processar {event_type}: {e}", exc_info=True)
        raise self.retry(exc=e)

    logger.info(f"[EVENT] {event_type} -> {len(criadas)} notificação(ões)")
    return len(criadas)


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True, ignore_result=True)
def verificar_sla_task(self) -> Dict[str, Any]:
    """
    Varredura periódica de SLA.

    Uma passada com falha é registrada; a próxima execução do Beat
    segue normalmente.

    Returns:
        Relatório da passada (vazio em caso de falha)
    """
    logger.info("[SCHEDULED] Iniciando verificação de SLA...")

    try:
        relatorio = _container().verificar_sla_service().execute()
    except Exception as e:
        logger.error(f"[SCHEDULED] Falha na verificação de SLA: {e}", exc_info=True)
        return {}

    logger.info(
        f"[SCHEDULED] Verificação {relatorio.ciclo_id[:8]} concluída: "
        f"{len(relatorio.violacoes)} violação(ões), {relatorio.escalados} escalonado(s), "
        f"{len(relatorio.falhas)} falha(s)"
    )
    return relatorio.to_dict()


def disparar_verificacao_sla() -> None:
    """
    Verificação de SLA após mudança de status.

    Em modo celery apenas enfileira; nos demais executa no processo.
    Erros nunca chegam a quem alterou o status.
    """
    if not getattr(settings, 'SLA_SWEEP_ON_STATUS_CHANGE', True):
        return

    try:
        if getattr(settings, 'EVENT_PUBLISHER_MODE', 'sync') == 'celery':
            verificar_sla_task.delay()
        else:
            _container().verificar_sla_service().execute()
    except Exception as e:
        logger.error(f"[SLA] Verificação após mudança de status falhou: {e}", exc_info=True)


@worker_shutting_down.connect
def sinalizar_parada_sla(sender=None, **kwargs) -> None:
    """Liga a flag de parada: varreduras em curso abandonam o restante."""
    logger.info("[SLA] Worker encerrando; interrompendo varreduras em curso")
    _container().sinal_parada_sla().set()
