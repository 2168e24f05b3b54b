"""
Domínio de SLA - Conformidade e Escalonamento.

Componentes:
- Catálogo de políticas (SLAPolicyEntity, SLAPolicyRepository)
- Registro de políticas ativas e cálculo de prazo
- Detector de violações
- Política de escalonamento e varredura
"""

from .entities import (
    SLAPolicyEntity,
    SLAViolation,
    SLAViolationType,
    EscalationOutcome,
    EscalationResult,
    SLASweepReport,
)
from .events import TicketEscalonadoEvent, TicketSLAVioladoEvent
from .ports import SLAPolicyRepository, InMemorySLAPolicyRepository
from .registry import SLAPolicyRegistry, calcular_prazo
from .detector import SLAViolationDetector
from .escalation import EscalationPolicy, EscalationDecision, EscalarTicketService
from .use_cases import (
    VerificarSLAService,
    ListarPoliticasSLAService,
    CriarPoliticaSLAService,
    AtualizarPoliticaSLAService,
    RemoverPoliticaSLAService,
)

__all__ = [
    "SLAPolicyEntity",
    "SLAViolation",
    "SLAViolationType",
    "EscalationOutcome",
    "EscalationResult",
    "SLASweepReport",
    "TicketEscalonadoEvent",
    "TicketSLAVioladoEvent",
    "SLAPolicyRepository",
    "InMemorySLAPolicyRepository",
    "SLAPolicyRegistry",
    "calcular_prazo",
    "SLAViolationDetector",
    "EscalationPolicy",
    "EscalationDecision",
    "EscalarTicketService",
    "VerificarSLAService",
    "ListarPoliticasSLAService",
    "CriarPoliticaSLAService",
    "AtualizarPoliticaSLAService",
    "RemoverPoliticaSLAService",
]
