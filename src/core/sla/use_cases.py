"""
Use Cases do motor de SLA.

Use Cases implementados:
- VerificarSLAService: Varredura (agendada ou sob demanda)
- ListarPoliticasSLAService: Lista o catálogo
- CriarPoliticaSLAService: Cria política
- AtualizarPoliticaSLAService: Edita/ativa/desativa política
- RemoverPoliticaSLAService: Remove política não referenciada

A varredura agendada e o disparo sob demanda compartilham o mesmo
caminho: detectar, agrupar por ticket e escalonar cada ticket uma
única vez por passada.
"""

from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple
import logging
import threading
import uuid

from src.core.shared.authorization import (
    Acao,
    Ator,
    AuthorizationService,
    exigir_permissao,
)
from src.core.shared.clock import Clock
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    DomainException,
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.core.shared.interfaces import UnitOfWork
from src.core.tickets.entities import TicketPriority
from src.core.tickets.ports import TicketRepository

from .detector import SLAViolationDetector
from .dtos import (
    AtualizarPoliticaSLAInputDTO,
    CriarPoliticaSLAInputDTO,
    SLAPolicyOutputDTO,
)
from .entities import EscalationResult, SLAPolicyEntity, SLASweepReport, SLAViolation
from .escalation import EscalarTicketService
from .ports import SLAPolicyRepository
from .registry import SLAPolicyRegistry

logger = logging.getLogger(__name__)


# =============================================================================
# VARREDURA
# =============================================================================

class VerificarSLAService:
    """
    Use Case: Verificar SLA de todos os tickets ativos.

    Fluxo:
    1. Autorizar o ator (apenas disparo sob demanda)
    2. Detectar violações em leitura pontual
    3. Agrupar por ticket (um escalonamento por ticket por passada)
    4. Escalonar em pool limitado de threads
    5. Consolidar relatório

    Parada graciosa:
        Quando `sinal_parada` é ligado, tickets ainda não iniciados são
        abandonados; escalonamentos em andamento terminam (cada um é
        uma única escrita condicional).

    Example:
        service = VerificarSLAService(detector, escalar_service, clock)
        relatorio = service.execute()
        print(relatorio.escalados)
    """

    def __init__(
        self,
        detector: SLAViolationDetector,
        escalar_service: EscalarTicketService,
        clock: Clock,
        authz: Optional[AuthorizationService] = None,
        sinal_parada: Optional[threading.Event] = None,
        max_workers: int = 4,
        ao_encerrar_thread: Optional[Callable[[], None]] = None,
    ):
        """
        Args:
            detector: Detector de violações
            escalar_service: Escalonamento por ticket
            clock: Relógio
            authz: Autorização para disparos com ator
            sinal_parada: Flag de parada compartilhada pelo processo
            max_workers: Tamanho do pool (1 = sequencial)
            ao_encerrar_thread: Limpeza executada nas threads do pool
                (ex: fechar conexões de banco)
        """
        self.detector = detector
        self.escalar_service = escalar_service
        self.clock = clock
        self.authz = authz
        self.sinal_parada = sinal_parada or threading.Event()
        self.max_workers = max(1, max_workers)
        self.ao_encerrar_thread = ao_encerrar_thread

    def execute(
        self,
        ator: Optional[Ator] = None,
        agora: Optional[datetime] = None,
    ) -> SLASweepReport:
        """
        Executa uma varredura.

        Args:
            ator: Quem disparou (None = agendador do sistema)
            agora: Instante de referência (default: relógio)

        Returns:
            SLASweepReport da passada

        Raises:
            PermissionDeniedError: Se o ator não pode disparar a verificação
        """
        if ator is not None:
            if self.authz is None:
                raise PermissionDeniedError(
                    "Verificação sob demanda sem colaborador de autorização",
                    acao=Acao.EXECUTAR_VERIFICACAO_SLA.value,
                    ator_id=ator.id,
                )
            exigir_permissao(self.authz, ator, Acao.EXECUTAR_VERIFICACAO_SLA)

        agora = agora or self.clock.agora()
        relatorio = SLASweepReport(ciclo_id=str(uuid.uuid4()), iniciado_em=agora)

        logger.info(
            f"[SLA] Varredura {relatorio.ciclo_id} iniciada "
            f"por {ator.id if ator else 'agendador'}"
        )

        relatorio.violacoes = self.detector.detectar(agora)
        por_ticket = self._agrupar(relatorio.violacoes)

        if self.max_workers > 1 and len(por_ticket) > 1:
            workers = min(self.max_workers, len(por_ticket))
            with ThreadPoolExecutor(
                max_workers=workers,
                thread_name_prefix="sla-sweep",
            ) as executor:
                futuros = [
                    executor.submit(
                        self._processar_em_thread, ticket_id, violacoes, relatorio.ciclo_id
                    )
                    for ticket_id, violacoes in por_ticket.items()
                ]
                saidas = [f.result() for f in futuros]
        else:
            saidas = [
                self._processar(ticket_id, violacoes, relatorio.ciclo_id)
                for ticket_id, violacoes in por_ticket.items()
            ]

        for ticket_id, resultado, erro in saidas:
            if resultado is not None:
                relatorio.resultados.append(resultado)
            elif erro is not None:
                relatorio.falhas[ticket_id] = erro
            else:
                relatorio.abandonados.append(ticket_id)

        relatorio.interrompida = bool(relatorio.abandonados) or self.sinal_parada.is_set()
        relatorio.concluido_em = self.clock.agora()

        logger.info(
            f"[SLA] Varredura {relatorio.ciclo_id} concluída: "
            f"{len(relatorio.violacoes)} violações em {len(por_ticket)} tickets, "
            f"{relatorio.escalados} escalados, {relatorio.no_maximo} no máximo, "
            f"{len(relatorio.falhas)} falhas, {len(relatorio.abandonados)} abandonados"
        )
        return relatorio

    @staticmethod
    def _agrupar(violacoes: List[SLAViolation]) -> Dict[str, List[SLAViolation]]:
        por_ticket: Dict[str, List[SLAViolation]] = OrderedDict()
        for violacao in violacoes:
            por_ticket.setdefault(violacao.ticket_id, []).append(violacao)
        return por_ticket

    def _processar_em_thread(
        self,
        ticket_id: str,
        violacoes: List[SLAViolation],
        ciclo_id: str,
    ) -> Tuple[str, Optional[EscalationResult], Optional[str]]:
        try:
            return self._processar(ticket_id, violacoes, ciclo_id)
        finally:
            if self.ao_encerrar_thread is not None:
                self.ao_encerrar_thread()

    def _processar(
        self,
        ticket_id: str,
        violacoes: List[SLAViolation],
        ciclo_id: str,
    ) -> Tuple[str, Optional[EscalationResult], Optional[str]]:
        """
        Escalona um ticket.

        Returns:
            (ticket_id, resultado, erro); ambos None = abandonado
        """
        if self.sinal_parada.is_set():
            logger.info(f"[SLA] Parada solicitada; ticket {ticket_id} abandonado")
            return ticket_id, None, None

        try:
            resultado = self.escalar_service.execute(ticket_id, violacoes, ciclo_id)
            return ticket_id, resultado, None
        except DomainException as e:
            logger.warning(f"[SLA] Falha ao escalonar ticket {ticket_id}: {e}")
            return ticket_id, None, str(e)
        except Exception as e:
            logger.error(
                f"[SLA] Erro inesperado ao escalonar ticket {ticket_id}: {e}",
                exc_info=True,
            )
            return ticket_id, None, str(e)


# =============================================================================
# CATÁLOGO DE POLÍTICAS
# =============================================================================

def _converter_prioridade(valor: str) -> TicketPriority:
    try:
        return TicketPriority.from_string(valor)
    except ValueError:
        raise ValidationError(f"Prioridade inválida: {valor}", field="prioridade")


def _garantir_unica_ativa(
    policy_repo: SLAPolicyRepository,
    prioridade: TicketPriority,
    ignorar_id: Optional[str] = None,
) -> None:
    existente = policy_repo.get_ativa_por_prioridade(prioridade)
    if existente is not None and existente.id != ignorar_id:
        raise BusinessRuleViolationError(
            f"Já existe política ativa para a prioridade {prioridade.value}",
            rule="politica_ativa_unica"
        )


class ListarPoliticasSLAService:
    """Use Case: Listar o catálogo de políticas."""

    def __init__(self, policy_repo: SLAPolicyRepository, authz: AuthorizationService):
        self.policy_repo = policy_repo
        self.authz = authz

    def execute(self, ator: Ator, apenas_ativas: bool = False) -> List[SLAPolicyOutputDTO]:
        exigir_permissao(self.authz, ator, Acao.GERENCIAR_POLITICAS_SLA)

        politicas = (
            self.policy_repo.list_ativas() if apenas_ativas
            else self.policy_repo.list_all()
        )
        politicas.sort(key=lambda p: (p.prioridade.nivel, p.nome))
        return [SLAPolicyOutputDTO.from_entity(p) for p in politicas]


class CriarPoliticaSLAService:
    """
    Use Case: Criar política de SLA.

    Regras:
    - No máximo uma política ativa por prioridade
    - Registro é invalidado após sucesso
    """

    def __init__(
        self,
        policy_repo: SLAPolicyRepository,
        uow: UnitOfWork,
        registry: SLAPolicyRegistry,
        authz: AuthorizationService,
        clock: Clock,
    ):
        self.policy_repo = policy_repo
        self.uow = uow
        self.registry = registry
        self.authz = authz
        self.clock = clock

    def execute(self, input_dto: CriarPoliticaSLAInputDTO, ator: Ator) -> SLAPolicyOutputDTO:
        """
        Raises:
            PermissionDeniedError: Se ator sem GERENCIAR_POLITICAS_SLA
            ValidationError: Se dados inválidos
            BusinessRuleViolationError: Se já existe ativa para a prioridade
        """
        exigir_permissao(self.authz, ator, Acao.GERENCIAR_POLITICAS_SLA)
        prioridade = _converter_prioridade(input_dto.prioridade)

        with self.uow:
            politica = SLAPolicyEntity.criar(
                nome=input_dto.nome,
                prioridade=prioridade,
                horas_resposta=input_dto.horas_resposta,
                horas_resolucao=input_dto.horas_resolucao,
                ativa=input_dto.ativa,
                criado_em=self.clock.agora(),
            )
            if politica.ativa:
                _garantir_unica_ativa(self.policy_repo, prioridade)
            self.policy_repo.save(politica)

        self.registry.invalidar()
        logger.info(
            f"[SLA] Política {politica.id} criada para {prioridade.name} "
            f"({politica.horas_resposta}h/{politica.horas_resolucao}h) por {ator.id}"
        )
        return SLAPolicyOutputDTO.from_entity(politica)


class AtualizarPoliticaSLAService:
    """
    Use Case: Atualizar política (nome, orçamentos, prioridade, ativa).

    Tickets existentes mantêm seu snapshot; apenas tickets novos
    enxergam a mudança.
    """

    def __init__(
        self,
        policy_repo: SLAPolicyRepository,
        uow: UnitOfWork,
        registry: SLAPolicyRegistry,
        authz: AuthorizationService,
        clock: Clock,
    ):
        self.policy_repo = policy_repo
        self.uow = uow
        self.registry = registry
        self.authz = authz
        self.clock = clock

    def execute(self, input_dto: AtualizarPoliticaSLAInputDTO, ator: Ator) -> SLAPolicyOutputDTO:
        exigir_permissao(self.authz, ator, Acao.GERENCIAR_POLITICAS_SLA)
        nova_prioridade = (
            _converter_prioridade(input_dto.prioridade)
            if input_dto.prioridade is not None else None
        )

        with self.uow:
            politica = self.policy_repo.get_by_id(input_dto.politica_id)
            if politica is None:
                raise EntityNotFoundError(
                    f"Política {input_dto.politica_id} não encontrada",
                    entity_type="SLAPolicy",
                    entity_id=input_dto.politica_id,
                )

            agora = self.clock.agora()
            politica.atualizar(
                agora,
                nome=input_dto.nome,
                prioridade=nova_prioridade,
                horas_resposta=input_dto.horas_resposta,
                horas_resolucao=input_dto.horas_resolucao,
            )

            if input_dto.ativa is True:
                politica.ativar(agora)
            elif input_dto.ativa is False:
                politica.desativar(agora)

            if politica.ativa:
                _garantir_unica_ativa(
                    self.policy_repo, politica.prioridade, ignorar_id=politica.id
                )
            self.policy_repo.save(politica)

        self.registry.invalidar()
        logger.info(f"[SLA] Política {politica.id} atualizada por {ator.id}")
        return SLAPolicyOutputDTO.from_entity(politica)


class RemoverPoliticaSLAService:
    """
    Use Case: Remover política.

    Política referenciada por algum ticket não pode ser removida;
    desative-a em vez disso.
    """

    def __init__(
        self,
        policy_repo: SLAPolicyRepository,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        registry: SLAPolicyRegistry,
        authz: AuthorizationService,
    ):
        self.policy_repo = policy_repo
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.registry = registry
        self.authz = authz

    def execute(self, politica_id: str, ator: Ator) -> None:
        exigir_permissao(self.authz, ator, Acao.GERENCIAR_POLITICAS_SLA)

        with self.uow:
            if self.policy_repo.get_by_id(politica_id) is None:
                raise EntityNotFoundError(
                    f"Política {politica_id} não encontrada",
                    entity_type="SLAPolicy",
                    entity_id=politica_id,
                )

            referencias = self.ticket_repo.count_by_politica(politica_id)
            if referencias > 0:
                raise BusinessRuleViolationError(
                    f"Política referenciada por {referencias} ticket(s); "
                    f"desative-a em vez de remover",
                    rule="politica_referenciada"
                )

            self.policy_repo.delete(politica_id)

        self.registry.invalidar()
        logger.info(f"[SLA] Política {politica_id} removida por {ator.id}")
