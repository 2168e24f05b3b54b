"""
Fixtures dos testes de adapters Django.

- Container DI limpo a cada teste (o registro de políticas é singleton)
- Usuários com os papéis configurados em settings
- Catálogo de políticas persistido
- Cliente HTTP autenticado com helpers JSON
"""

import json

import pytest


@pytest.fixture(autouse=True)
def reset_di_container():
    """Reset container entre testes."""
    from src.config.container import reset_container

    reset_container()
    yield
    reset_container()


@pytest.fixture
def usuarios(db):
    """
    Usuários:
    - carla: sem grupos (usuário comum)
    - ana: grupo agent (técnica)
    - bruno: grupo admin (triagem + escalonamento)
    - root: superusuário
    """
    from django.contrib.auth.models import Group, User

    agent = Group.objects.create(name='agent')
    admin = Group.objects.create(name='admin')

    carla = User.objects.create_user('carla', 'carla@teste.local', 'x', first_name='Carla')
    ana = User.objects.create_user('ana', 'ana@teste.local', 'x', first_name='Ana')
    ana.groups.add(agent)
    bruno = User.objects.create_user('bruno', 'bruno@teste.local', 'x', first_name='Bruno')
    bruno.groups.add(admin)
    root = User.objects.create_superuser('root', 'root@teste.local', 'x')

    return {'carla': carla, 'ana': ana, 'bruno': bruno, 'root': root}


@pytest.fixture
def politicas_db(db):
    """Catálogo padrão persistido (prioridade -> entidade)."""
    from src.adapters.django_app.tickets.repositories import DjangoSLAPolicyRepository
    from src.core.sla.entities import SLAPolicyEntity
    from src.core.tickets.entities import TicketPriority

    repo = DjangoSLAPolicyRepository()
    catalogo = {
        TicketPriority.BAIXA: SLAPolicyEntity.criar("SLA Baixa", TicketPriority.BAIXA, 24, 72),
        TicketPriority.MEDIA: SLAPolicyEntity.criar("SLA Média", TicketPriority.MEDIA, 8, 24),
        TicketPriority.ALTA: SLAPolicyEntity.criar("SLA Alta", TicketPriority.ALTA, 2, 8),
        TicketPriority.URGENTE: SLAPolicyEntity.criar("SLA Urgente", TicketPriority.URGENTE, 1, 4),
    }
    for politica in catalogo.values():
        repo.save(politica)
    return catalogo


class ClienteJSON:
    """Client do Django autenticado, com atalhos para corpo JSON."""

    def __init__(self, client):
        self.client = client

    def _enviar(self, metodo, url, dados):
        resposta = getattr(self.client, metodo)(
            url,
            data=json.dumps(dados) if dados is not None else '',
            content_type='application/json',
        )
        return resposta.status_code, json.loads(resposta.content)

    def get(self, url, **params):
        resposta = self.client.get(url, params)
        return resposta.status_code, json.loads(resposta.content)

    def post(self, url, dados=None):
        return self._enviar('post', url, dados)

    def patch(self, url, dados=None):
        return self._enviar('patch', url, dados)

    def delete(self, url):
        return self._enviar('delete', url, None)


@pytest.fixture
def api():
    """
    Factory: cliente JSON logado como `user` (None = anônimo).

    Example:
        status, corpo = api(usuarios['carla']).post('/tickets/api/', {...})
    """
    from django.test import Client

    def criar(user=None):
        client = Client()
        if user is not None:
            client.force_login(user)
        return ClienteJSON(client)

    return criar


@pytest.fixture
def envelhecer():
    """Recua criado_em de um ticket persistido (simula passagem do tempo)."""
    from datetime import timedelta

    from django.utils import timezone

    from src.adapters.django_app.tickets.models import TicketModel

    def aplicar(ticket_id, **delta):
        TicketModel.objects.filter(id=ticket_id).update(
            criado_em=timezone.now() - timedelta(**delta)
        )

    return aplicar
