"""
Testes da varredura de SLA (VerificarSLAService).
"""

import threading
from datetime import timedelta
from unittest.mock import Mock

import pytest

from src.core.shared.exceptions import BusinessRuleViolationError, PermissionDeniedError
from src.core.sla.detector import SLAViolationDetector
from src.core.sla.entities import EscalationOutcome
from src.core.sla.escalation import EscalarTicketService
from src.core.sla.use_cases import VerificarSLAService
from src.core.tickets.entities import TicketPriority, TicketStatus


@pytest.fixture
def escalar_service(ticket_repo, uow, clock):
    return EscalarTicketService(ticket_repo, uow, clock)


@pytest.fixture
def montar(ticket_repo, clock, authz, escalar_service):
    def criar(**kwargs):
        kwargs.setdefault("escalar_service", escalar_service)
        kwargs.setdefault("max_workers", 1)
        return VerificarSLAService(
            detector=SLAViolationDetector(ticket_repo, clock),
            clock=clock,
            authz=authz,
            **kwargs,
        )
    return criar


class TestVarredura:

    def test_alta_violada_vira_urgente(self, montar, novo_ticket, ticket_repo, clock):
        ticket = novo_ticket(TicketPriority.ALTA)
        clock.avancar(hours=5)

        relatorio = montar().execute()

        assert relatorio.escalados == 1
        assert relatorio.resultado_de(ticket.id).prioridade_nova == TicketPriority.URGENTE
        assert ticket_repo.get_by_id(ticket.id).prioridade == TicketPriority.URGENTE
        assert relatorio.concluido_em is not None
        assert relatorio.interrompida is False

    def test_duas_violacoes_um_unico_escalonamento(self, montar, novo_ticket, ticket_repo, clock, uow):
        ticket = novo_ticket(TicketPriority.MEDIA)
        clock.avancar(hours=30)

        relatorio = montar().execute()

        assert len(relatorio.violacoes) == 2
        assert len(relatorio.resultados) == 1
        assert ticket_repo.get_by_id(ticket.id).prioridade == TicketPriority.ALTA
        assert len(uow.events_of_type("TicketEscalonadoEvent")) == 1

    def test_segunda_passada_encontra_no_maximo(self, montar, novo_ticket, clock, uow):
        ticket = novo_ticket(TicketPriority.ALTA)
        clock.avancar(hours=5)
        service = montar()

        service.execute()
        segunda = service.execute()

        resultado = segunda.resultado_de(ticket.id)
        assert resultado.resultado == EscalationOutcome.JA_NO_MAXIMO
        assert resultado.notificado is False
        assert segunda.no_maximo == 1
        assert uow.events_of_type("TicketSLAVioladoEvent") == []

    def test_ignora_tickets_no_prazo_e_encerrados(self, montar, novo_ticket, ticket_repo, clock, inicio):
        novo_ticket(TicketPriority.BAIXA)
        resolvido = novo_ticket(TicketPriority.ALTA)
        resolvido.alterar_status(TicketStatus.RESOLVIDO, inicio)
        ticket_repo.save(resolvido)
        clock.avancar(hours=5)

        relatorio = montar().execute()

        assert relatorio.violacoes == []
        assert relatorio.resultados == []

    def test_ticket_sem_sla_nunca_escala(self, montar, novo_ticket, ticket_repo, clock):
        ticket = novo_ticket(TicketPriority.ALTA, com_sla=False)
        clock.avancar(days=30)

        relatorio = montar().execute()

        assert relatorio.resultados == []
        assert ticket_repo.get_by_id(ticket.id).prioridade == TicketPriority.ALTA

    def test_instante_explicito(self, montar, novo_ticket, inicio):
        novo_ticket(TicketPriority.ALTA)
        relatorio = montar().execute(agora=inicio + timedelta(hours=3))
        assert relatorio.escalados == 1
        assert relatorio.iniciado_em == inicio + timedelta(hours=3)

    def test_relatorio_serializavel(self, montar, novo_ticket, clock):
        novo_ticket(TicketPriority.ALTA)
        clock.avancar(hours=5)

        dados = montar().execute().to_dict()

        assert dados["escalados"] == 1
        assert dados["violacoes"][0]["tipo"] == "response_time"
        assert dados["interrompida"] is False


class TestAutorizacao:

    def test_agendador_nao_precisa_de_permissao(self, montar, novo_ticket, clock):
        novo_ticket(TicketPriority.ALTA)
        clock.avancar(hours=5)
        assert montar().execute(ator=None).escalados == 1

    def test_admin_pode_disparar(self, montar, admin):
        assert montar().execute(ator=admin).resultados == []

    def test_usuario_comum_negado(self, montar, usuario):
        with pytest.raises(PermissionDeniedError):
            montar().execute(ator=usuario)

    def test_ator_sem_colaborador_de_autorizacao(self, ticket_repo, clock, escalar_service, admin):
        service = VerificarSLAService(
            SLAViolationDetector(ticket_repo, clock), escalar_service, clock
        )
        with pytest.raises(PermissionDeniedError):
            service.execute(ator=admin)


class TestFalhasEParada:

    def test_falha_em_um_ticket_nao_interrompe_os_demais(
        self, montar, novo_ticket, clock, escalar_service
    ):
        quebrado = novo_ticket(TicketPriority.ALTA)
        saudavel = novo_ticket(TicketPriority.ALTA)
        clock.avancar(hours=5)

        def escalar(ticket_id, violacoes, ciclo_id=""):
            if ticket_id == quebrado.id:
                raise BusinessRuleViolationError("Falha simulada", rule="teste")
            return escalar_service.execute(ticket_id, violacoes, ciclo_id)

        relatorio = montar(escalar_service=Mock(execute=Mock(side_effect=escalar))).execute()

        assert quebrado.id in relatorio.falhas
        assert relatorio.resultado_de(saudavel.id).resultado == EscalationOutcome.APLICADA

    def test_erro_inesperado_vira_falha(self, montar, novo_ticket, clock):
        ticket = novo_ticket(TicketPriority.ALTA)
        clock.avancar(hours=5)
        quebrado = Mock(execute=Mock(side_effect=RuntimeError("conexão perdida")))

        relatorio = montar(escalar_service=quebrado).execute()

        assert relatorio.falhas == {ticket.id: "conexão perdida"}

    def test_parada_abandona_tickets_nao_iniciados(self, montar, novo_ticket, ticket_repo, clock):
        tickets = [novo_ticket(TicketPriority.ALTA) for _ in range(3)]
        clock.avancar(hours=5)
        sinal = threading.Event()
        sinal.set()

        relatorio = montar(sinal_parada=sinal).execute()

        assert relatorio.interrompida is True
        assert sorted(relatorio.abandonados) == sorted(t.id for t in tickets)
        assert all(
            ticket_repo.get_by_id(t.id).prioridade == TicketPriority.ALTA for t in tickets
        )

    def test_parada_durante_a_varredura(self, montar, novo_ticket, clock, escalar_service):
        primeiro = novo_ticket(TicketPriority.ALTA)
        segundo = novo_ticket(TicketPriority.ALTA)
        clock.avancar(hours=5)
        sinal = threading.Event()

        def escalar_e_parar(ticket_id, violacoes, ciclo_id=""):
            resultado = escalar_service.execute(ticket_id, violacoes, ciclo_id)
            sinal.set()
            return resultado

        relatorio = montar(
            escalar_service=Mock(execute=Mock(side_effect=escalar_e_parar)),
            sinal_parada=sinal,
        ).execute()

        assert relatorio.escalados == 1
        assert relatorio.abandonados == [segundo.id]
        assert relatorio.resultado_de(primeiro.id) is not None
        assert relatorio.interrompida is True


class TestPool:

    def test_pool_processa_todos_e_limpa_threads(self, montar, novo_ticket, ticket_repo, clock):
        tickets = [novo_ticket(TicketPriority.MEDIA) for _ in range(6)]
        clock.avancar(hours=9)
        limpeza = Mock()

        relatorio = montar(max_workers=3, ao_encerrar_thread=limpeza).execute()

        assert relatorio.escalados == 6
        assert limpeza.call_count == 6
        assert all(
            ticket_repo.get_by_id(t.id).prioridade == TicketPriority.ALTA for t in tickets
        )

    def test_sequencial_nao_chama_limpeza(self, montar, novo_ticket, clock):
        novo_ticket(TicketPriority.MEDIA)
        novo_ticket(TicketPriority.MEDIA)
        clock.avancar(hours=9)
        limpeza = Mock()

        montar(max_workers=1, ao_encerrar_thread=limpeza).execute()

        limpeza.assert_not_called()
