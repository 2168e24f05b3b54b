"""
Violation Detector.

Classifica cada ticket ativo com SLA vinculado contra seu snapshot:

- RESPOSTA  sse status == ABERTO e horas_decorridas > horas_resposta
- RESOLUCAO sse horas_decorridas > horas_resolucao (qualquer status ativo)

Um mesmo ticket pode produzir as duas violações na mesma passada.
"""

from datetime import datetime
from typing import List, Optional
import logging

from src.core.shared.clock import Clock
from src.core.tickets.entities import TicketEntity, TicketStatus
from src.core.tickets.ports import TicketRepository

from .entities import SLAViolation, SLAViolationType

logger = logging.getLogger(__name__)


class SLAViolationDetector:
    """
    Detector de violações de SLA.

    Example:
        detector = SLAViolationDetector(ticket_repo, clock)
        violacoes = detector.detectar()
    """

    def __init__(self, ticket_repo: TicketRepository, clock: Clock):
        self._ticket_repo = ticket_repo
        self._clock = clock

    def detectar(self, agora: Optional[datetime] = None) -> List[SLAViolation]:
        """
        Leitura pontual dos tickets ativos e classificação de cada um.

        Args:
            agora: Instante de referência (default: relógio)

        Returns:
            Violações detectadas (zero, uma ou duas por ticket)
        """
        agora = agora or self._clock.agora()
        candidatos = self._ticket_repo.list_by_status_in(TicketStatus.ativos())

        violacoes: List[SLAViolation] = []
        for ticket in candidatos:
            violacoes.extend(self.classificar(ticket, agora))

        logger.info(
            f"[SLA] Detecção: {len(candidatos)} tickets ativos, "
            f"{len(violacoes)} violações"
        )
        return violacoes

    @staticmethod
    def classificar(ticket: TicketEntity, agora: datetime) -> List[SLAViolation]:
        """
        Classifica um ticket (função pura).

        Tickets terminais ou sem SLA não produzem violações.
        """
        if not ticket.e_monitorado:
            return []

        horas = ticket.horas_decorridas(agora)
        violacoes: List[SLAViolation] = []

        if ticket.status == TicketStatus.ABERTO and horas > ticket.sla.horas_resposta:
            violacoes.append(SLAViolation(
                ticket_id=ticket.id,
                tipo=SLAViolationType.RESPOSTA,
                horas_atraso=horas - ticket.sla.horas_resposta,
                prioridade_observada=ticket.prioridade,
                versao_observada=ticket.versao,
                detectado_em=agora,
            ))

        if horas > ticket.sla.horas_resolucao:
            violacoes.append(SLAViolation(
                ticket_id=ticket.id,
                tipo=SLAViolationType.RESOLUCAO,
                horas_atraso=horas - ticket.sla.horas_resolucao,
                prioridade_observada=ticket.prioridade,
                versao_observada=ticket.versao,
                detectado_em=agora,
            ))

        return violacoes
