"""
Configurações globais do Pytest para o Helpdesk SLA.

Este arquivo é carregado automaticamente pelo pytest e:
- Configura o Django (SQLite em memória) para os testes de adapters
- Fornece fixtures do Core (repositórios em memória, relógio fixo)
"""

from datetime import datetime, timezone

import pytest


def pytest_configure(config):
    """Configura Django antes dos testes."""
    import django
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY='test-secret-key',
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.admin',
                'django.contrib.auth',
                'django.contrib.contenttypes',
                'django.contrib.sessions',
                'django.contrib.messages',
                'src.adapters.django_app.tickets',
                'src.adapters.django_app.notifications',
            ],
            MIDDLEWARE=[
                'django.contrib.sessions.middleware.SessionMiddleware',
                'django.contrib.auth.middleware.AuthenticationMiddleware',
                'django.contrib.messages.middleware.MessageMiddleware',
            ],
            TEMPLATES=[{
                'BACKEND': 'django.template.backends.django.DjangoTemplates',
                'APP_DIRS': True,
                'OPTIONS': {
                    'context_processors': [
                        'django.template.context_processors.request',
                        'django.contrib.auth.context_processors.auth',
                        'django.contrib.messages.context_processors.messages',
                    ],
                },
            }],
            ROOT_URLCONF='src.config.urls',
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='America/Sao_Paulo',
            PASSWORD_HASHERS=['django.contrib.auth.hashers.MD5PasswordHasher'],
            EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
            DEFAULT_FROM_EMAIL='helpdesk@teste.local',
            EMAIL_SUBJECT_PREFIX='[Helpdesk] ',
            # Motor de SLA: sem varredura automática e sem threads
            # (SQLite em memória não é compartilhado entre conexões)
            SLA_SWEEP_INTERVAL_SECONDS=300,
            SLA_SWEEP_MAX_WORKERS=1,
            SLA_MAX_RETRIES=3,
            SLA_SWEEP_ON_STATUS_CHANGE=False,
            SLA_REGISTRY_TTL_SECONDS=60,
            HELPDESK_ROLE_PERMISSIONS={
                'superadmin': [
                    'alterar_status', 'fechar_ticket', 'alterar_prioridade',
                    'atribuir_ticket', 'executar_verificacao_sla',
                    'gerenciar_politicas_sla',
                ],
                'admin': [
                    'alterar_status', 'fechar_ticket', 'alterar_prioridade',
                    'atribuir_ticket', 'executar_verificacao_sla',
                ],
                'agent': ['alterar_status', 'fechar_ticket', 'atribuir_ticket'],
            },
            HELPDESK_OWNER_ACTIONS=['fechar_ticket'],
            HELPDESK_CAPABILITY_GROUPS={
                'atender_tickets': ['agent'],
                'triagem': ['admin', 'superadmin'],
                'receber_escalonamento': ['admin', 'superadmin'],
            },
            NOTIFICATION_EMAIL_MODE='direct',
            EVENT_PUBLISHER_MODE='sync',
        )
        django.setup()


# =============================================================================
# Fixtures do Core
# =============================================================================

@pytest.fixture
def inicio():
    """Instante de referência dos testes (UTC)."""
    return datetime(2024, 3, 4, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(inicio):
    from src.core.shared.clock import FixedClock
    return FixedClock(inicio)


@pytest.fixture
def ticket_repo():
    """Repositório de tickets em memória."""
    from src.core.tickets.ports import InMemoryTicketRepository
    return InMemoryTicketRepository()


@pytest.fixture
def policy_repo():
    from src.core.sla.ports import InMemorySLAPolicyRepository
    return InMemorySLAPolicyRepository()


@pytest.fixture
def notification_repo():
    from src.core.notifications.ports import InMemoryNotificationRepository
    return InMemoryNotificationRepository()


@pytest.fixture
def uow():
    """Unit of Work em memória para testes unitários."""
    from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
    return InMemoryUnitOfWork()


@pytest.fixture
def authz():
    """Autorização com a mesma tabela usada em settings."""
    from src.core.shared.authorization import RoleTableAuthorizationService
    from django.conf import settings

    return RoleTableAuthorizationService.from_config(
        settings.HELPDESK_ROLE_PERMISSIONS,
        settings.HELPDESK_OWNER_ACTIONS,
    )


@pytest.fixture
def directory():
    """
    Diretório em memória:
    - tec-1: técnico
    - gestor-1: triagem + escalonamento
    - user-1 / user-2: usuários comuns
    """
    from src.core.shared.authorization import Capacidade, InMemoryUserDirectory

    diretorio = InMemoryUserDirectory()
    diretorio.adicionar(
        "tec-1", "Técnica Ana", "ana@teste.local",
        capacidades={Capacidade.ATENDER_TICKETS},
    )
    diretorio.adicionar(
        "gestor-1", "Gestor Bruno", "bruno@teste.local",
        capacidades={Capacidade.TRIAGEM, Capacidade.RECEBER_ESCALONAMENTO},
    )
    diretorio.adicionar("user-1", "Carla", "carla@teste.local")
    diretorio.adicionar("user-2", "Davi", "davi@teste.local")
    return diretorio


@pytest.fixture
def admin():
    from src.core.shared.authorization import Ator
    return Ator(id="admin-1", papeis=frozenset({"admin"}), nome="Admin")


@pytest.fixture
def superadmin():
    from src.core.shared.authorization import Ator
    return Ator(id="root-1", papeis=frozenset({"superadmin"}), nome="Root")


@pytest.fixture
def agente():
    from src.core.shared.authorization import Ator
    return Ator(id="tec-1", papeis=frozenset({"agent"}), nome="Técnica Ana")


@pytest.fixture
def usuario():
    from src.core.shared.authorization import Ator
    return Ator(id="user-1", nome="Carla")


@pytest.fixture
def politicas(policy_repo):
    """Catálogo padrão: (resposta, resolução) em horas por prioridade."""
    from src.core.sla.entities import SLAPolicyEntity
    from src.core.tickets.entities import TicketPriority

    catalogo = {
        TicketPriority.BAIXA: SLAPolicyEntity.criar("SLA Baixa", TicketPriority.BAIXA, 24, 72),
        TicketPriority.MEDIA: SLAPolicyEntity.criar("SLA Média", TicketPriority.MEDIA, 8, 24),
        TicketPriority.ALTA: SLAPolicyEntity.criar("SLA Alta", TicketPriority.ALTA, 2, 8),
        TicketPriority.URGENTE: SLAPolicyEntity.criar("SLA Urgente", TicketPriority.URGENTE, 1, 4),
    }
    for politica in catalogo.values():
        policy_repo.save(politica)
    return catalogo


@pytest.fixture
def registry(policy_repo, clock):
    from src.core.sla.registry import SLAPolicyRegistry
    return SLAPolicyRegistry(policy_repo, clock, ttl_segundos=60)


@pytest.fixture
def novo_ticket(ticket_repo, politicas, clock):
    """
    Factory: cria e persiste ticket já vinculado à política da prioridade.

    Example:
        ticket = novo_ticket(TicketPriority.ALTA)
    """
    from src.core.sla.registry import calcular_prazo
    from src.core.tickets.entities import TicketEntity, TicketPriority

    def criar(prioridade=TicketPriority.MEDIA, criador_id="user-1", com_sla=True):
        ticket = TicketEntity.criar(
            titulo="Impressora do financeiro parada",
            descricao="A impressora não responde desde a troca de toner",
            criador_id=criador_id,
            prioridade=prioridade,
            criado_em=clock.agora(),
        )
        if com_sla:
            politica = politicas[prioridade]
            ticket.vincular_sla(
                politica.snapshot(), calcular_prazo(ticket.criado_em, politica)
            )
        ticket_repo.save(ticket)
        return ticket

    return criar
