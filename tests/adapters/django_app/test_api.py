"""
Testes das APIs JSON (request -> container -> use case -> banco).

Executam o caminho completo em modo `sync`: eventos são entregues no
próprio processo e e-mails caem em mail.outbox.
"""

import pytest
from django.core import mail

from src.adapters.django_app.notifications.models import NotificationModel
from src.adapters.django_app.tickets.models import TicketModel


NOVO_TICKET = {
    'titulo': 'VPN não conecta',
    'descricao': 'Cliente VPN retorna erro 809 ao conectar',
    'prioridade': 'high',
    'categoria': 'Rede',
}


@pytest.fixture
def criar_ticket(api, usuarios):
    """Cria ticket via API como `carla` e devolve o payload."""

    def criar(**extra):
        status, corpo = api(usuarios['carla']).post('/tickets/api/', {**NOVO_TICKET, **extra})
        assert status == 201, corpo
        return corpo['data']

    return criar


def _tipos_de(user):
    return set(
        NotificationModel.objects
        .filter(destinatario_id=str(user.pk))
        .values_list('tipo', flat=True)
    )


@pytest.mark.django_db
class TestCriarTicket:

    def test_post_cria_ticket_com_sla(self, criar_ticket, usuarios, politicas_db):
        """POST deve criar ticket vinculado à política da prioridade."""
        ticket = criar_ticket()

        assert ticket['prioridade'] == 'Alta'
        assert ticket['status'] == 'Aberto'
        assert ticket['criador_id'] == str(usuarios['carla'].pk)
        assert ticket['sla']['horas_resposta'] == 2
        assert ticket['sla']['horas_resolucao'] == 8
        assert ticket['sla']['prazo'] is not None
        assert ticket['versao'] == 1

    def test_post_sem_politica_cria_sem_sla(self, criar_ticket, usuarios):
        """Sem política ativa para a prioridade o ticket não é monitorado."""
        ticket = criar_ticket()
        assert ticket['sla'] is None

    def test_criacao_notifica_criador_e_triagem(self, criar_ticket, usuarios, politicas_db):
        criar_ticket()

        assert _tipos_de(usuarios['carla']) == {'ticket_created'}
        assert _tipos_de(usuarios['bruno']) == {'new_ticket'}
        assert _tipos_de(usuarios['root']) == {'new_ticket'}
        assert _tipos_de(usuarios['ana']) == set()
        assert sorted(m.to[0] for m in mail.outbox) == [
            'bruno@teste.local', 'carla@teste.local', 'root@teste.local',
        ]
        assert all(m.subject.startswith('[Helpdesk] ') for m in mail.outbox)

    def test_post_validacao_erro(self, api, usuarios):
        """POST com título curto deve retornar 400 com o campo."""
        status, corpo = api(usuarios['carla']).post(
            '/tickets/api/', {**NOVO_TICKET, 'titulo': 'ab'}
        )

        assert status == 400
        assert corpo['success'] is False
        assert corpo['error']['field'] == 'titulo'

    def test_prioridade_invalida(self, api, usuarios):
        status, corpo = api(usuarios['carla']).post(
            '/tickets/api/', {**NOVO_TICKET, 'prioridade': 'critica'}
        )
        assert status == 400
        assert corpo['error']['field'] == 'prioridade'

    def test_json_invalido(self, api, usuarios):
        cliente = api(usuarios['carla'])
        resposta = cliente.client.post(
            '/tickets/api/', data='{nao e json', content_type='application/json'
        )
        assert resposta.status_code == 400


@pytest.mark.django_db
class TestConsultas:

    def test_get_lista_paginada(self, api, criar_ticket, usuarios):
        for _ in range(3):
            criar_ticket()

        status, corpo = api(usuarios['bruno']).get('/tickets/api/', per_page=2)

        assert status == 200
        assert len(corpo['data']) == 2
        assert corpo['meta'] == {'total': 3, 'page': 1, 'per_page': 2, 'total_pages': 2}

    def test_get_filtra_por_status(self, api, criar_ticket, usuarios):
        criar_ticket()
        status, corpo = api(usuarios['bruno']).get('/tickets/api/', status='in_progress')
        assert status == 200
        assert corpo['data'] == []

    def test_get_detalhe(self, api, criar_ticket, usuarios):
        ticket = criar_ticket()
        status, corpo = api(usuarios['bruno']).get(f"/tickets/api/{ticket['id']}/")
        assert status == 200
        assert corpo['data']['id'] == ticket['id']

    def test_get_ticket_nao_encontrado(self, api, usuarios):
        """GET para ticket inexistente deve retornar 404."""
        status, corpo = api(usuarios['bruno']).get('/tickets/api/nao-existe/')
        assert status == 404
        assert corpo['error']['error'] == 'ENTITY_NOT_FOUND'


@pytest.mark.django_db
class TestAcoesSobreTicket:

    def test_agente_altera_status(self, api, criar_ticket, usuarios):
        ticket = criar_ticket()

        status, corpo = api(usuarios['ana']).post(
            f"/tickets/api/{ticket['id']}/status/", {'status': 'in_progress'}
        )

        assert status == 200
        assert corpo['data']['status'] == 'Em Progresso'
        assert corpo['data']['versao'] == 2
        assert 'ticket_status_changed' in _tipos_de(usuarios['carla'])

    def test_usuario_comum_nao_altera_status(self, api, criar_ticket, usuarios):
        ticket = criar_ticket()
        status, corpo = api(usuarios['carla']).post(
            f"/tickets/api/{ticket['id']}/status/", {'status': 'in_progress'}
        )
        assert status == 403
        assert corpo['error']['acao'] == 'alterar_status'

    def test_criador_pode_fechar(self, api, criar_ticket, usuarios):
        ticket = criar_ticket()
        status, corpo = api(usuarios['carla']).post(
            f"/tickets/api/{ticket['id']}/status/", {'status': 'closed'}
        )
        assert status == 200
        assert corpo['data']['status'] == 'Fechado'

    def test_transicao_invalida(self, api, criar_ticket, usuarios):
        ticket = criar_ticket()
        cliente = api(usuarios['ana'])
        cliente.post(f"/tickets/api/{ticket['id']}/status/", {'status': 'resolved'})

        status, corpo = cliente.post(f"/tickets/api/{ticket['id']}/status/", {'status': 'open'})

        assert status == 422
        assert corpo['error']['rule'] == 'transicao_status_invalida'
        assert 'ticket_resolved' in _tipos_de(usuarios['carla'])

    def test_status_obrigatorio(self, api, criar_ticket, usuarios):
        ticket = criar_ticket()
        status, corpo = api(usuarios['ana']).post(f"/tickets/api/{ticket['id']}/status/", {})
        assert status == 400
        assert corpo['error']['field'] == 'status'

    def test_atribuir_a_tecnico(self, api, criar_ticket, usuarios):
        ticket = criar_ticket()
        ana = usuarios['ana']

        status, corpo = api(usuarios['bruno']).post(
            f"/tickets/api/{ticket['id']}/atribuir/", {'tecnico_id': ana.pk}
        )

        assert status == 200
        assert corpo['data']['atribuido_a_id'] == str(ana.pk)
        assert corpo['data']['status'] == 'Em Progresso'
        assert _tipos_de(ana) == {'ticket_assigned'}
        assert TicketModel.objects.get(id=ticket['id']).atribuido_a_id == str(ana.pk)

    def test_atribuir_a_quem_nao_atende(self, api, criar_ticket, usuarios):
        ticket = criar_ticket()
        status, corpo = api(usuarios['bruno']).post(
            f"/tickets/api/{ticket['id']}/atribuir/", {'tecnico_id': usuarios['carla'].pk}
        )
        assert status == 422
        assert corpo['error']['rule'] == 'tecnico_sem_capacidade'

    def test_post_sem_tecnico_id(self, api, criar_ticket, usuarios):
        """POST sem tecnico_id deve retornar erro."""
        ticket = criar_ticket()
        status, corpo = api(usuarios['bruno']).post(f"/tickets/api/{ticket['id']}/atribuir/", {})
        assert status == 400
        assert corpo['error']['field'] == 'tecnico_id'

    def test_alterar_prioridade(self, api, criar_ticket, usuarios):
        ticket = criar_ticket()

        status, corpo = api(usuarios['bruno']).post(
            f"/tickets/api/{ticket['id']}/prioridade/", {'prioridade': 'urgent'}
        )

        assert status == 200
        assert corpo['data']['prioridade'] == 'Urgente'

    def test_agente_nao_altera_prioridade(self, api, criar_ticket, usuarios):
        ticket = criar_ticket()
        status, _ = api(usuarios['ana']).post(
            f"/tickets/api/{ticket['id']}/prioridade/", {'prioridade': 'urgent'}
        )
        assert status == 403

    def test_anonimo_negado(self, api, criar_ticket):
        ticket = criar_ticket()
        status, _ = api().post(f"/tickets/api/{ticket['id']}/status/", {'status': 'resolved'})
        assert status == 403


@pytest.mark.django_db
class TestVerificacaoSLA:

    def test_verificacao_sob_demanda_escala(self, api, criar_ticket, usuarios, politicas_db, envelhecer):
        ticket = criar_ticket()
        envelhecer(ticket['id'], hours=5)

        status, corpo = api(usuarios['bruno']).post('/tickets/api/sla/verificar/')

        assert status == 200
        assert corpo['data']['escalados'] == 1
        assert corpo['data']['resultados'][0]['prioridade_nova'] == 'URGENTE'
        modelo = TicketModel.objects.get(id=ticket['id'])
        assert modelo.prioridade == 'Urgente'
        assert modelo.versao == 2
        assert 'sla_escalated' in _tipos_de(usuarios['bruno'])

    def test_segunda_verificacao_nao_reescala(self, api, criar_ticket, usuarios, politicas_db, envelhecer):
        ticket = criar_ticket()
        envelhecer(ticket['id'], hours=5)
        cliente = api(usuarios['bruno'])

        cliente.post('/tickets/api/sla/verificar/')
        status, corpo = cliente.post('/tickets/api/sla/verificar/')

        assert status == 200
        assert corpo['data']['escalados'] == 0
        assert corpo['data']['no_maximo'] == 1
        assert NotificationModel.objects.filter(
            destinatario_id=str(usuarios['bruno'].pk), tipo='sla_escalated'
        ).count() == 1

    def test_ticket_no_prazo_nao_escala(self, api, criar_ticket, usuarios, politicas_db):
        criar_ticket()
        status, corpo = api(usuarios['root']).post('/tickets/api/sla/verificar/')
        assert status == 200
        assert corpo['data']['violacoes'] == []

    def test_usuario_comum_nao_dispara(self, api, usuarios):
        status, _ = api(usuarios['carla']).post('/tickets/api/sla/verificar/')
        assert status == 403


@pytest.mark.django_db
class TestPoliticasAPI:

    def test_listar(self, api, usuarios, politicas_db):
        status, corpo = api(usuarios['root']).get('/tickets/api/sla/politicas/')
        assert status == 200
        assert [p['prioridade'] for p in corpo['data']] == ['Baixa', 'Média', 'Alta', 'Urgente']

    def test_admin_sem_gestao_de_politicas(self, api, usuarios, politicas_db):
        status, _ = api(usuarios['bruno']).get('/tickets/api/sla/politicas/')
        assert status == 403

    def test_criar_e_ver_efeito_em_ticket_novo(self, api, usuarios, criar_ticket):
        status, corpo = api(usuarios['root']).post('/tickets/api/sla/politicas/', {
            'nome': 'SLA Alta', 'prioridade': 'high',
            'horas_resposta': 3, 'horas_resolucao': 12,
        })

        assert status == 201
        assert criar_ticket()['sla']['horas_resolucao'] == 12

    def test_criar_segunda_ativa(self, api, usuarios, politicas_db):
        status, corpo = api(usuarios['root']).post('/tickets/api/sla/politicas/', {
            'nome': 'Outra', 'prioridade': 'high',
            'horas_resposta': 3, 'horas_resolucao': 12,
        })
        assert status == 422
        assert corpo['error']['rule'] == 'politica_ativa_unica'

    def test_orcamento_invalido(self, api, usuarios):
        status, corpo = api(usuarios['root']).post('/tickets/api/sla/politicas/', {
            'nome': 'Quebrada', 'prioridade': 'low',
            'horas_resposta': 'duas', 'horas_resolucao': 12,
        })
        assert status == 400
        assert corpo['error']['field'] == 'horas_resposta'

    def test_ativa_em_texto_e_rejeitado(self, api, usuarios, politicas_db):
        from src.adapters.django_app.tickets.models import SLAPolicyModel

        status, corpo = api(usuarios['root']).post('/tickets/api/sla/politicas/', {
            'nome': 'Alta (rascunho)', 'prioridade': 'high',
            'horas_resposta': 3, 'horas_resolucao': 12, 'ativa': 'false',
        })

        assert status == 400
        assert corpo['error']['field'] == 'ativa'
        assert SLAPolicyModel.objects.count() == 4

    def test_criar_inativa_com_booleano(self, api, usuarios, politicas_db):
        status, corpo = api(usuarios['root']).post('/tickets/api/sla/politicas/', {
            'nome': 'Alta (rascunho)', 'prioridade': 'high',
            'horas_resposta': 3, 'horas_resolucao': 12, 'ativa': False,
        })

        assert status == 201
        assert corpo['data']['ativa'] is False

    def test_atualizar_ativa_em_texto_e_rejeitado(self, api, usuarios, politicas_db):
        from src.core.tickets.entities import TicketPriority

        status, corpo = api(usuarios['root']).patch(
            f'/tickets/api/sla/politicas/{politicas_db[TicketPriority.BAIXA].id}/',
            {'ativa': 'false'},
        )

        assert status == 400
        assert corpo['error']['field'] == 'ativa'

    def test_atualizar_nao_afeta_ticket_existente(self, api, usuarios, politicas_db, criar_ticket):
        from src.core.tickets.entities import TicketPriority

        ticket = criar_ticket()
        politica_id = politicas_db[TicketPriority.ALTA].id

        status, corpo = api(usuarios['root']).patch(
            f'/tickets/api/sla/politicas/{politica_id}/', {'horas_resolucao': 16}
        )

        assert status == 200
        assert corpo['data']['horas_resolucao'] == 16
        assert TicketModel.objects.get(id=ticket['id']).sla_horas_resolucao == 8

    def test_remover(self, api, usuarios, politicas_db, criar_ticket):
        from src.core.tickets.entities import TicketPriority

        criar_ticket()
        cliente = api(usuarios['root'])

        status, corpo = cliente.delete(
            f'/tickets/api/sla/politicas/{politicas_db[TicketPriority.ALTA].id}/'
        )
        assert status == 422
        assert corpo['error']['rule'] == 'politica_referenciada'

        status, _ = cliente.delete(
            f'/tickets/api/sla/politicas/{politicas_db[TicketPriority.BAIXA].id}/'
        )
        assert status == 200


@pytest.mark.django_db
class TestNotificacoesAPI:

    def test_listar_e_marcar_lida(self, api, usuarios, criar_ticket):
        criar_ticket()
        cliente = api(usuarios['carla'])

        status, corpo = cliente.get('/notificacoes/api/')
        assert status == 200
        assert corpo['meta']['total'] == 1
        notificacao = corpo['data'][0]
        assert notificacao['tipo'] == 'ticket_created'
        assert notificacao['lida'] is False

        status, corpo = cliente.post(f"/notificacoes/api/{notificacao['id']}/lida/")
        assert status == 200
        assert corpo['data']['lida'] is True

        _, corpo = cliente.get('/notificacoes/api/', nao_lidas=1)
        assert corpo['data'] == []

    def test_outro_usuario_nao_marca(self, api, usuarios, criar_ticket):
        criar_ticket()
        notificacao = NotificationModel.objects.get(destinatario_id=str(usuarios['carla'].pk))

        status, _ = api(usuarios['bruno']).post(f"/notificacoes/api/{notificacao.id}/lida/")

        assert status == 403

    def test_inexistente(self, api, usuarios):
        status, _ = api(usuarios['carla']).post('/notificacoes/api/nada/lida/')
        assert status == 404


@pytest.mark.django_db
def test_health(client):
    resposta = client.get('/health/')
    assert resposta.status_code == 200
    assert resposta.json()['database']['healthy'] is True
