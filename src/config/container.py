"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, registry, canal)
- Factory: Nova instância por chamada (services, UoW)
- Configuration: valores vindos de django.conf.settings em get_container()

Adapters Django são importados sob demanda: o container pode ser
importado antes de o registro de apps estar pronto.
"""

from typing import Optional
import importlib
import threading

from dependency_injector import containers, providers

from src.core.notifications.dispatcher import NotificationDispatcher
from src.core.notifications.handlers import NotificationEventHandler
from src.core.notifications.use_cases import (
    ListarNotificacoesService,
    MarcarNotificacaoLidaService,
)
from src.core.shared.authorization import RoleTableAuthorizationService
from src.core.shared.clock import SystemClock
from src.core.sla.detector import SLAViolationDetector
from src.core.sla.escalation import EscalarTicketService, EscalationPolicy
from src.core.sla.registry import SLAPolicyRegistry
from src.core.sla.use_cases import (
    AtualizarPoliticaSLAService,
    CriarPoliticaSLAService,
    ListarPoliticasSLAService,
    RemoverPoliticaSLAService,
    VerificarSLAService,
)
from src.core.tickets.use_cases import (
    AlterarPrioridadeService,
    AlterarStatusService,
    AtribuirTicketService,
    CriarTicketService,
    ListarTicketsService,
    ObterTicketService,
)


def _lazy(modulo: str, nome: str):
    """Construtor que só importa `modulo` na primeira chamada."""

    def construir(*args, **kwargs):
        return getattr(importlib.import_module(modulo), nome)(*args, **kwargs)

    construir.__name__ = nome
    return construir


def _fechar_conexoes() -> None:
    from src.adapters.django_app.shared.database import fechar_conexoes_da_thread
    fechar_conexoes_da_thread()


def _disparar_verificacao() -> None:
    from src.adapters.django_app.events.handlers import disparar_verificacao_sla
    disparar_verificacao_sla()


_REPOSITORIES = 'src.adapters.django_app.tickets.repositories'


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: settings do Django
    - Infrastructure: relógio, canal de e-mail, publisher, sinal de parada
    - Repositories: Persistência
    - Unit of Work: Transações
    - Services: Use Cases

    Example:
        from src.config.container import get_container

        service = get_container().verificar_sla_service()
        relatorio = service.execute()
    """

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure
    # =========================================================================

    clock = providers.Singleton(SystemClock)

    # Sinalizado no desligamento do worker; a varredura para de agendar tickets
    sinal_parada_sla = providers.Singleton(threading.Event)

    canal_email = providers.Singleton(
        _lazy('src.adapters.django_app.notifications.channels', 'criar_canal_email'),
        modo=config.notifications.email_mode,
    )

    user_directory = providers.Singleton(
        _lazy('src.adapters.django_app.accounts.directory', 'DjangoUserDirectory'),
        grupos_por_capacidade=config.authz.capability_groups,
    )

    authz = providers.Singleton(
        RoleTableAuthorizationService.from_config,
        tabela=config.authz.role_permissions,
        acoes_do_criador=config.authz.owner_actions,
    )

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    ticket_repository = providers.Singleton(
        _lazy(_REPOSITORIES, 'DjangoTicketRepository'),
    )

    sla_policy_repository = providers.Singleton(
        _lazy(_REPOSITORIES, 'DjangoSLAPolicyRepository'),
    )

    notification_repository = providers.Singleton(
        _lazy(
            'src.adapters.django_app.notifications.repositories',
            'DjangoNotificationRepository',
        ),
    )

    sla_registry = providers.Singleton(
        SLAPolicyRegistry,
        policy_repo=sla_policy_repository,
        clock=clock,
        ttl_segundos=config.sla.registry_ttl_seconds,
    )

    # =========================================================================
    # Notificações e Event Bus
    # =========================================================================

    notification_dispatcher = providers.Singleton(
        NotificationDispatcher,
        notification_repo=notification_repository,
        canal=canal_email,
        clock=clock,
    )

    notification_handler = providers.Singleton(
        NotificationEventHandler,
        ticket_repo=ticket_repository,
        dispatcher=notification_dispatcher,
        directory=user_directory,
    )

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'get_event_publisher'),
        modo=config.events.publisher_mode,
        notification_handler=notification_handler,
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'DjangoUnitOfWork'),
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Services: Tickets
    # =========================================================================

    criar_ticket_service = providers.Factory(
        CriarTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        registry=sla_registry,
        clock=clock,
    )

    alterar_status_service = providers.Factory(
        AlterarStatusService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        authz=authz,
        clock=clock,
        max_tentativas=config.sla.max_retries,
        ao_alterar_status=providers.Object(_disparar_verificacao),
    )

    atribuir_ticket_service = providers.Factory(
        AtribuirTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        authz=authz,
        directory=user_directory,
        clock=clock,
        max_tentativas=config.sla.max_retries,
    )

    alterar_prioridade_service = providers.Factory(
        AlterarPrioridadeService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        authz=authz,
        clock=clock,
        max_tentativas=config.sla.max_retries,
    )

    # Leitura (sem UoW)
    listar_tickets_service = providers.Factory(
        ListarTicketsService,
        ticket_repo=ticket_repository,
        clock=clock,
    )

    obter_ticket_service = providers.Factory(
        ObterTicketService,
        ticket_repo=ticket_repository,
        clock=clock,
    )

    # =========================================================================
    # Services: SLA
    # =========================================================================

    sla_detector = providers.Factory(
        SLAViolationDetector,
        ticket_repo=ticket_repository,
        clock=clock,
    )

    escalar_ticket_service = providers.Factory(
        EscalarTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        clock=clock,
        politica=providers.Singleton(EscalationPolicy),
        max_tentativas=config.sla.max_retries,
    )

    verificar_sla_service = providers.Factory(
        VerificarSLAService,
        detector=sla_detector,
        escalar_service=escalar_ticket_service,
        clock=clock,
        authz=authz,
        sinal_parada=sinal_parada_sla,
        max_workers=config.sla.max_workers,
        ao_encerrar_thread=providers.Object(_fechar_conexoes),
    )

    listar_politicas_sla_service = providers.Factory(
        ListarPoliticasSLAService,
        policy_repo=sla_policy_repository,
        authz=authz,
    )

    criar_politica_sla_service = providers.Factory(
        CriarPoliticaSLAService,
        policy_repo=sla_policy_repository,
        uow=unit_of_work,
        registry=sla_registry,
        authz=authz,
        clock=clock,
    )

    atualizar_politica_sla_service = providers.Factory(
        AtualizarPoliticaSLAService,
        policy_repo=sla_policy_repository,
        uow=unit_of_work,
        registry=sla_registry,
        authz=authz,
        clock=clock,
    )

    remover_politica_sla_service = providers.Factory(
        RemoverPoliticaSLAService,
        policy_repo=sla_policy_repository,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        registry=sla_registry,
        authz=authz,
    )

    # =========================================================================
    # Services: Notificações
    # =========================================================================

    listar_notificacoes_service = providers.Factory(
        ListarNotificacoesService,
        notification_repo=notification_repository,
    )

    marcar_notificacao_lida_service = providers.Factory(
        MarcarNotificacaoLidaService,
        notification_repo=notification_repository,
        uow=unit_of_work,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None
_lock = threading.Lock()


def _config_from_settings() -> dict:
    from django.conf import settings

    return {
        'sla': {
            'max_retries': settings.SLA_MAX_RETRIES,
            'max_workers': settings.SLA_SWEEP_MAX_WORKERS,
            'registry_ttl_seconds': settings.SLA_REGISTRY_TTL_SECONDS,
        },
        'authz': {
            'role_permissions': settings.HELPDESK_ROLE_PERMISSIONS,
            'owner_actions': settings.HELPDESK_OWNER_ACTIONS,
            'capability_groups': settings.HELPDESK_CAPABILITY_GROUPS,
        },
        'notifications': {
            'email_mode': settings.NOTIFICATION_EMAIL_MODE,
        },
        'events': {
            'publisher_mode': settings.EVENT_PUBLISHER_MODE,
        },
    }


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization), lendo a configuração de
    django.conf.settings. Threads da varredura compartilham a instância.
    """
    global _container

    if _container is None:
        with _lock:
            if _container is None:
                container = Container()
                container.config.from_dict(_config_from_settings())
                _container = container

    return _container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Permite criar novo container limpo após override_settings.
    """
    global _container
    _container = None
