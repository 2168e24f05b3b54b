"""
Escalation Policy e serviço de escalonamento por ticket.

Decisão (pura), na ordem:
1. Ticket terminal                        -> DESCARTADA
2. Prioridade difere da observada         -> JA_ESCALADO_NO_CICLO
3. Nenhuma violação vale no estado atual  -> DESCARTADA
4. Prioridade já é URGENTE                -> JA_NO_MAXIMO
   (notifica apenas tipos de violação ainda não alertados em URGENTE)
5. Caso contrário                         -> APLICADA (sobe um degrau)

Persistência: ler, decidir e gravar com escrita condicional por versão
dentro de um UnitOfWork. ConcurrencyError reinicia o ciclo (releitura),
até o limite de tentativas.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import logging

from src.core.shared.clock import Clock
from src.core.shared.exceptions import EntityNotFoundError, ValidationError
from src.core.shared.interfaces import UnitOfWork
from src.core.shared.retry import MAX_TENTATIVAS_PADRAO, executar_com_retentativa
from src.core.tickets.entities import TicketEntity
from src.core.tickets.ports import TicketRepository

from .detector import SLAViolationDetector
from .entities import (
    EscalationOutcome,
    EscalationResult,
    SLAViolation,
    SLAViolationType,
)
from .events import TicketEscalonadoEvent, TicketSLAVioladoEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EscalationDecision:
    """Decisão tomada para um ticket."""

    resultado: EscalationOutcome
    notificar: bool
    tipos: Tuple[SLAViolationType, ...] = ()
    horas_atraso: float = 0.0


class EscalationPolicy:
    """
    Política de escalonamento (sem efeitos colaterais).

    Example:
        decisao = EscalationPolicy().decidir(ticket, violacoes)
        if decisao.resultado == EscalationOutcome.APLICADA:
            ticket.escalar(agora)
    """

    def decidir(
        self,
        ticket: TicketEntity,
        violacoes: Sequence[SLAViolation],
    ) -> EscalationDecision:
        """
        Decide o escalonamento de um ticket.

        As violações são reavaliadas contra o estado atual do ticket no
        instante da detecção: uma violação de resposta deixa de valer se
        o ticket saiu de ABERTO desde a leitura.

        Args:
            ticket: Estado atual (relido) do ticket
            violacoes: Violações detectadas para este ticket na varredura

        Raises:
            ValidationError: Se a lista de violações estiver vazia ou
                misturar tickets
        """
        if not violacoes:
            raise ValidationError("Nenhuma violação informada", field="violacoes")
        if any(v.ticket_id != ticket.id for v in violacoes):
            raise ValidationError(
                "Violações de outro ticket informadas",
                field="violacoes"
            )

        if ticket.status.e_terminal:
            return EscalationDecision(EscalationOutcome.DESCARTADA, notificar=False)

        prioridade_observada = violacoes[0].prioridade_observada
        if ticket.prioridade != prioridade_observada:
            return EscalationDecision(
                EscalationOutcome.JA_ESCALADO_NO_CICLO, notificar=False
            )

        vigentes = SLAViolationDetector.classificar(ticket, violacoes[0].detectado_em)
        if not vigentes:
            return EscalationDecision(EscalationOutcome.DESCARTADA, notificar=False)

        tipos = tuple(v.tipo for v in vigentes)
        horas_atraso = max(v.horas_atraso for v in vigentes)

        if ticket.prioridade.e_maxima:
            return EscalationDecision(
                EscalationOutcome.JA_NO_MAXIMO,
                notificar=bool(ticket.alertas_pendentes(t.value for t in tipos)),
                tipos=tipos,
                horas_atraso=horas_atraso,
            )

        return EscalationDecision(
            EscalationOutcome.APLICADA,
            notificar=True,
            tipos=tipos,
            horas_atraso=horas_atraso,
        )


class EscalarTicketService:
    """
    Use Case: escalonar um ticket violado.

    Ação do sistema: não passa pelo colaborador de autorização.

    Example:
        service = EscalarTicketService(ticket_repo, uow, clock)
        resultado = service.execute(ticket_id, violacoes_do_ticket, ciclo_id)
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        clock: Clock,
        politica: Optional[EscalationPolicy] = None,
        max_tentativas: int = MAX_TENTATIVAS_PADRAO,
    ):
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.clock = clock
        self.politica = politica or EscalationPolicy()
        self.max_tentativas = max_tentativas

    def execute(
        self,
        ticket_id: str,
        violacoes: List[SLAViolation],
        ciclo_id: str = "",
    ) -> EscalationResult:
        """
        Aplica (ou descarta) o escalonamento de um ticket.

        Returns:
            EscalationResult com o desfecho

        Raises:
            EntityNotFoundError: Se o ticket não existe
            ConcurrencyError: Se o conflito persistir após as tentativas
        """
        tentativas = 0

        def ciclo() -> EscalationResult:
            nonlocal tentativas
            tentativas += 1
            return self._ler_decidir_gravar(ticket_id, violacoes, ciclo_id, tentativas)

        resultado = executar_com_retentativa(
            ciclo,
            max_tentativas=self.max_tentativas,
            descricao=f"escalonamento do ticket {ticket_id}",
        )

        logger.info(
            f"[ESCALATION] Ticket {ticket_id}: {resultado.resultado.value} "
            f"({_nome(resultado.prioridade_anterior)} -> "
            f"{_nome(resultado.prioridade_nova)}, tentativas={resultado.tentativas})"
        )
        return resultado

    def _ler_decidir_gravar(
        self,
        ticket_id: str,
        violacoes: List[SLAViolation],
        ciclo_id: str,
        tentativa: int,
    ) -> EscalationResult:
        with self.uow:
            ticket = self.ticket_repo.get_by_id(ticket_id)
            if ticket is None:
                raise EntityNotFoundError(
                    f"Ticket {ticket_id} não encontrado",
                    entity_type="Ticket",
                    entity_id=ticket_id,
                )

            decisao = self.politica.decidir(ticket, violacoes)
            anterior = ticket.prioridade
            notificado = False

            if decisao.resultado == EscalationOutcome.APLICADA:
                agora = self.clock.agora()
                ticket.escalar(agora, [t.value for t in decisao.tipos])
                self.ticket_repo.save(ticket)
                self.uow.publish_event(
                    TicketEscalonadoEvent(
                        aggregate_id=ticket.id,
                        occurred_at=agora,
                        prioridade_anterior=anterior.name,
                        prioridade_nova=ticket.prioridade.name,
                        tipos=[t.value for t in decisao.tipos],
                        horas_atraso=round(decisao.horas_atraso, 2),
                        ciclo_id=ciclo_id,
                    )
                )
                notificado = True

            elif (
                decisao.resultado == EscalationOutcome.JA_NO_MAXIMO
                and decisao.notificar
            ):
                agora = self.clock.agora()
                ticket.marcar_alerta_maximo(agora, [t.value for t in decisao.tipos])
                self.ticket_repo.save(ticket)
                self.uow.publish_event(
                    TicketSLAVioladoEvent(
                        aggregate_id=ticket.id,
                        occurred_at=agora,
                        prioridade=ticket.prioridade.name,
                        tipos=[t.value for t in decisao.tipos],
                        horas_atraso=round(decisao.horas_atraso, 2),
                        ciclo_id=ciclo_id,
                    )
                )
                notificado = True

        return EscalationResult(
            ticket_id=ticket_id,
            resultado=decisao.resultado,
            prioridade_anterior=anterior,
            prioridade_nova=ticket.prioridade,
            tipos=decisao.tipos,
            notificado=notificado,
            tentativas=tentativa,
        )


def _nome(prioridade) -> str:
    return prioridade.name if prioridade else "-"
