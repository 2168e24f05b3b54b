"""
Testes Unitários para Use Cases do Domínio de Tickets.

Estratégia de Teste:
- InMemoryTicketRepository / InMemoryUnitOfWork para isolamento
- FixedClock para instantes determinísticos
- Verifica eventos publicados e re-tentativa em conflito de versão
"""

from copy import deepcopy
from datetime import timedelta
from unittest.mock import Mock

import pytest

from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConcurrencyError,
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.core.tickets.dtos import (
    AlterarPrioridadeInputDTO,
    AlterarStatusInputDTO,
    AtribuirTicketInputDTO,
    CriarTicketInputDTO,
)
from src.core.tickets.entities import TicketPriority, TicketStatus
from src.core.tickets.ports import InMemoryTicketRepository
from src.core.tickets.use_cases import (
    AlterarPrioridadeService,
    AlterarStatusService,
    AtribuirTicketService,
    CriarTicketService,
    ListarTicketsService,
    ObterTicketService,
)


class ConflitoNaPrimeiraEscrita(InMemoryTicketRepository):
    """Simula outro processo gravando entre a leitura e a primeira escrita."""

    def __init__(self):
        super().__init__()
        self.conflitos = 0

    def save(self, ticket):
        if ticket.versao > 0 and self.conflitos == 0:
            self.conflitos += 1
            # Regravação sem mudanças: só a versão avança
            super().save(self.get_by_id(ticket.id))
        super().save(ticket)


def _dto(prioridade="high", criador_id="user-1"):
    return CriarTicketInputDTO(
        titulo="Servidor de e-mail fora",
        descricao="Nenhuma mensagem chega desde as 8h da manhã",
        criador_id=criador_id,
        prioridade=prioridade,
    )


class TestCriarTicketService:

    @pytest.fixture
    def service(self, ticket_repo, uow, registry, clock):
        return CriarTicketService(ticket_repo, uow, registry, clock)

    def test_vincula_politica_da_prioridade(self, service, politicas, ticket_repo, inicio):
        output = service.execute(_dto("high"))

        politica = politicas[TicketPriority.ALTA]
        assert output.sla_politica_id == politica.id
        assert output.sla_horas_resposta == 2
        assert output.sla_prazo == inicio + timedelta(hours=8)
        assert ticket_repo.get_by_id(output.id).versao == 1

    def test_publica_ticket_criado_apos_commit(self, service, politicas, uow):
        output = service.execute(_dto())

        eventos = uow.events_of_type("TicketCriadoEvent")
        assert len(eventos) == 1
        assert eventos[0].aggregate_id == output.id
        assert eventos[0].prioridade == "ALTA"
        assert eventos[0].monitorado is True

    def test_sem_politica_ativa_cria_sem_monitoramento(self, service, ticket_repo, uow):
        output = service.execute(_dto("low"))

        assert output.sla_politica_id is None
        assert output.sla_prazo is None
        assert ticket_repo.get_by_id(output.id) is not None
        assert uow.events_of_type("TicketCriadoEvent")[0].monitorado is False

    def test_politica_inativa_equivale_a_ausente(
        self, service, politicas, policy_repo, registry, inicio
    ):
        politica = politicas[TicketPriority.MEDIA]
        politica.desativar(inicio)
        policy_repo.save(politica)
        registry.invalidar()

        assert service.execute(_dto("medium")).sla_politica_id is None

    def test_prioridade_invalida(self, service):
        with pytest.raises(ValidationError) as exc:
            service.execute(_dto("critica"))
        assert exc.value.field == "prioridade"

    def test_dados_invalidos_nao_persistem(self, service, ticket_repo, uow):
        with pytest.raises(ValidationError):
            service.execute(CriarTicketInputDTO(
                titulo="x", descricao="descrição válida", criador_id="u"
            ))
        assert ticket_repo.list_all() == []
        assert uow.rolled_back


class TestAlterarStatusService:

    @pytest.fixture
    def service(self, ticket_repo, uow, authz, clock):
        return AlterarStatusService(ticket_repo, uow, authz, clock)

    def test_agente_inicia_atendimento(self, service, novo_ticket, agente, uow):
        ticket = novo_ticket()

        output = service.execute(AlterarStatusInputDTO(ticket.id, "in_progress"), agente)

        assert output.status == TicketStatus.EM_PROGRESSO.value
        evento = uow.events_of_type("TicketStatusAlteradoEvent")[0]
        assert evento.status_anterior == "ABERTO"
        assert evento.status_novo == "EM_PROGRESSO"

    def test_resolucao_publica_ticket_resolvido(self, service, novo_ticket, admin, uow, clock):
        ticket = novo_ticket(TicketPriority.ALTA)
        clock.avancar(hours=3)

        output = service.execute(AlterarStatusInputDTO(ticket.id, "resolved"), admin)

        assert output.resolvido_em == clock.agora()
        evento = uow.events_of_type("TicketResolvidoEvent")[0]
        assert evento.dentro_sla is True
        assert not uow.events_of_type("TicketStatusAlteradoEvent")

    def test_usuario_comum_nao_altera_status(self, service, novo_ticket, usuario):
        ticket = novo_ticket()
        with pytest.raises(PermissionDeniedError):
            service.execute(AlterarStatusInputDTO(ticket.id, "resolved"), usuario)

    def test_criador_pode_fechar_o_proprio_ticket(self, service, novo_ticket, usuario):
        ticket = novo_ticket(criador_id=usuario.id)
        output = service.execute(AlterarStatusInputDTO(ticket.id, "closed"), usuario)
        assert output.status == TicketStatus.FECHADO.value

    def test_criador_nao_fecha_ticket_alheio(self, service, novo_ticket, usuario):
        ticket = novo_ticket(criador_id="user-2")
        with pytest.raises(PermissionDeniedError):
            service.execute(AlterarStatusInputDTO(ticket.id, "closed"), usuario)

    def test_transicao_invalida(self, service, novo_ticket, admin):
        ticket = novo_ticket()
        service.execute(AlterarStatusInputDTO(ticket.id, "closed"), admin)

        with pytest.raises(BusinessRuleViolationError):
            service.execute(AlterarStatusInputDTO(ticket.id, "open"), admin)

    def test_noop_nao_grava_nem_dispara_verificacao(
        self, ticket_repo, uow, authz, clock, novo_ticket, admin
    ):
        gatilho = Mock()
        service = AlterarStatusService(
            ticket_repo, uow, authz, clock, ao_alterar_status=gatilho
        )
        ticket = novo_ticket()

        service.execute(AlterarStatusInputDTO(ticket.id, "open"), admin)

        assert ticket_repo.get_by_id(ticket.id).versao == 1
        assert uow.published_events == []
        gatilho.assert_not_called()

    def test_dispara_verificacao_apos_sucesso(
        self, ticket_repo, uow, authz, clock, novo_ticket, admin
    ):
        gatilho = Mock()
        service = AlterarStatusService(
            ticket_repo, uow, authz, clock, ao_alterar_status=gatilho
        )
        ticket = novo_ticket()

        service.execute(AlterarStatusInputDTO(ticket.id, "in_progress"), admin)

        gatilho.assert_called_once_with()

    def test_status_desconhecido(self, service, novo_ticket, admin):
        ticket = novo_ticket()
        with pytest.raises(ValidationError):
            service.execute(AlterarStatusInputDTO(ticket.id, "pendente"), admin)

    def test_ticket_inexistente(self, service, admin):
        with pytest.raises(EntityNotFoundError):
            service.execute(AlterarStatusInputDTO("nao-existe", "resolved"), admin)

    def test_conflito_de_versao_e_re_tentado(self, uow, authz, clock, admin, politicas):
        repo = ConflitoNaPrimeiraEscrita()
        service = AlterarStatusService(repo, uow, authz, clock)
        criar = CriarTicketService(repo, uow, _registry_fixo(politicas, clock), clock)
        ticket_id = criar.execute(_dto()).id

        output = service.execute(AlterarStatusInputDTO(ticket_id, "resolved"), admin)

        assert repo.conflitos == 1
        assert output.status == TicketStatus.RESOLVIDO.value
        final = repo.get_by_id(ticket_id)
        assert "concorrente" in final.tags
        assert final.versao == 3

    def test_conflito_persistente_propaga(self, uow, authz, clock, admin, novo_ticket):
        repo = Mock()
        ticket = novo_ticket()
        repo.get_by_id.side_effect = lambda _id: deepcopy(ticket)
        repo.save.side_effect = ConcurrencyError("conflito", entity_id=ticket.id)
        service = AlterarStatusService(repo, uow, authz, clock, max_tentativas=2)

        with pytest.raises(ConcurrencyError):
            service.execute(AlterarStatusInputDTO(ticket.id, "in_progress"), admin)
        assert repo.save.call_count == 2


def _registry_fixo(politicas, clock):
    from src.core.sla.ports import InMemorySLAPolicyRepository
    from src.core.sla.registry import SLAPolicyRegistry

    repo = InMemorySLAPolicyRepository()
    for politica in politicas.values():
        repo.save(politica)
    return SLAPolicyRegistry(repo, clock)


class TestAtribuirTicketService:

    @pytest.fixture
    def service(self, ticket_repo, uow, authz, directory, clock):
        return AtribuirTicketService(ticket_repo, uow, authz, directory, clock)

    def test_atribui_tecnico(self, service, novo_ticket, admin, uow):
        ticket = novo_ticket()

        output = service.execute(AtribuirTicketInputDTO(ticket.id, "tec-1"), admin)

        assert output.atribuido_a_id == "tec-1"
        assert output.status == TicketStatus.EM_PROGRESSO.value
        evento = uow.events_of_type("TicketAtribuidoEvent")[0]
        assert evento.tecnico_id == "tec-1"
        assert evento.atribuido_por_id == admin.id

    def test_alvo_sem_capacidade(self, service, novo_ticket, admin):
        ticket = novo_ticket()
        with pytest.raises(BusinessRuleViolationError) as exc:
            service.execute(AtribuirTicketInputDTO(ticket.id, "user-2"), admin)
        assert exc.value.rule == "tecnico_sem_capacidade"

    def test_usuario_comum_nao_atribui(self, service, novo_ticket, usuario):
        ticket = novo_ticket(criador_id=usuario.id)
        with pytest.raises(PermissionDeniedError):
            service.execute(AtribuirTicketInputDTO(ticket.id, "tec-1"), usuario)

    def test_tecnico_obrigatorio(self, service, novo_ticket, admin):
        ticket = novo_ticket()
        with pytest.raises(ValidationError):
            service.execute(AtribuirTicketInputDTO(ticket.id, ""), admin)


class TestAlterarPrioridadeService:

    @pytest.fixture
    def service(self, ticket_repo, uow, authz, clock):
        return AlterarPrioridadeService(ticket_repo, uow, authz, clock)

    def test_altera_sem_refazer_sla(self, service, novo_ticket, admin, ticket_repo, uow):
        ticket = novo_ticket(TicketPriority.BAIXA)

        output = service.execute(AlterarPrioridadeInputDTO(ticket.id, "urgent"), admin)

        assert output.prioridade == TicketPriority.URGENTE.value
        assert output.sla_horas_resolucao == 72
        assert output.sla_prazo == ticket.sla_prazo
        evento = uow.events_of_type("TicketPrioridadeAlteradaEvent")[0]
        assert (evento.prioridade_anterior, evento.prioridade_nova) == ("BAIXA", "URGENTE")

    def test_agente_sem_permissao(self, service, novo_ticket, agente):
        ticket = novo_ticket()
        with pytest.raises(PermissionDeniedError):
            service.execute(AlterarPrioridadeInputDTO(ticket.id, "high"), agente)

    def test_mesma_prioridade_nao_publica(self, service, novo_ticket, admin, uow):
        ticket = novo_ticket(TicketPriority.ALTA)
        service.execute(AlterarPrioridadeInputDTO(ticket.id, "Alta"), admin)
        assert uow.published_events == []


class TestConsultas:

    def test_listar_filtra_por_status(self, ticket_repo, clock, novo_ticket, admin, inicio):
        aberto = novo_ticket()
        resolvido = novo_ticket()
        resolvido.alterar_status(TicketStatus.RESOLVIDO, inicio)
        ticket_repo.save(resolvido)

        service = ListarTicketsService(ticket_repo, clock)

        assert [t.id for t in service.execute(status="open")] == [aberto.id]
        assert len(service.execute()) == 2

    def test_listar_por_criador(self, ticket_repo, clock, novo_ticket):
        novo_ticket(criador_id="user-1")
        novo_ticket(criador_id="user-2")

        service = ListarTicketsService(ticket_repo, clock)

        assert [t.criador_id for t in service.execute(criador_id="user-2")] == ["user-2"]

    def test_filtros_combinados(self, ticket_repo, clock, novo_ticket, inicio):
        proprio_aberto = novo_ticket(criador_id="user-1")
        proprio_resolvido = novo_ticket(criador_id="user-1")
        proprio_resolvido.alterar_status(TicketStatus.RESOLVIDO, inicio)
        ticket_repo.save(proprio_resolvido)
        novo_ticket(criador_id="user-2")

        atribuido = novo_ticket(criador_id="user-2")
        atribuido.atribuir_a("tec-1", inicio)
        ticket_repo.save(atribuido)

        service = ListarTicketsService(ticket_repo, clock)

        assert [t.id for t in service.execute(status="open", criador_id="user-1")] == [
            proprio_aberto.id
        ]
        assert [t.id for t in service.execute(status="open", tecnico_id="tec-1")] == []
        assert [
            t.id for t in service.execute(criador_id="user-2", tecnico_id="tec-1")
        ] == [atribuido.id]

    def test_obter_calcula_atraso_no_instante_atual(
        self, ticket_repo, clock, novo_ticket
    ):
        ticket = novo_ticket(TicketPriority.ALTA)
        service = ObterTicketService(ticket_repo, clock)

        assert service.execute(ticket.id).esta_atrasado is False
        clock.avancar(hours=9)
        assert service.execute(ticket.id).esta_atrasado is True

    def test_obter_inexistente(self, ticket_repo, clock):
        with pytest.raises(EntityNotFoundError):
            ObterTicketService(ticket_repo, clock).execute("nao-existe")
