"""
Entidades do Domínio de SLA.

Entidades:
- SLAPolicyEntity: Par de orçamentos (resposta, resolução) por prioridade
- SLAViolationType: Tipo de violação detectada
- SLAViolation: Violação transitória (existe durante uma varredura)
- EscalationOutcome / EscalationResult: Resultado do escalonamento
- SLASweepReport: Relatório de uma varredura completa

Regras de Negócio Encapsuladas:
- Orçamentos devem ser positivos
- horas_resolucao >= horas_resposta é recomendado (apenas aviso em log)
- No máximo uma política ATIVA por prioridade (garantido pelos use cases
  e por constraint no banco)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import logging
import uuid

from src.core.shared.exceptions import ValidationError
from src.core.tickets.entities import SLASnapshot, TicketPriority

logger = logging.getLogger(__name__)


def _agora_utc() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SLAPolicyEntity:
    """
    Entidade de Domínio: Política de SLA.

    Attributes:
        id: Identificador único
        nome: Nome legível (ex: "Política Alta")
        prioridade: Prioridade à qual se aplica
        horas_resposta: Orçamento para primeira resposta
        horas_resolucao: Orçamento para resolução
        ativa: Se é elegível para vínculo em tickets novos
        criado_em / atualizado_em: Timestamps

    Example:
        politica = SLAPolicyEntity.criar(
            nome="Política Alta",
            prioridade=TicketPriority.ALTA,
            horas_resposta=2,
            horas_resolucao=8,
        )
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    nome: str = ""
    prioridade: TicketPriority = TicketPriority.MEDIA
    horas_resposta: int = 0
    horas_resolucao: int = 0
    ativa: bool = True
    criado_em: datetime = field(default_factory=_agora_utc)
    atualizado_em: datetime = field(default_factory=_agora_utc)

    NOME_MAX_LENGTH = 100

    @classmethod
    def criar(
        cls,
        nome: str,
        prioridade: TicketPriority,
        horas_resposta: int,
        horas_resolucao: int,
        ativa: bool = True,
        criado_em: Optional[datetime] = None,
    ) -> "SLAPolicyEntity":
        """
        Factory method com validações.

        Raises:
            ValidationError: Se nome vazio ou orçamentos não positivos
        """
        cls._validar_nome(nome)
        cls._validar_orcamentos(horas_resposta, horas_resolucao)

        instante = criado_em or _agora_utc()
        return cls(
            nome=nome.strip(),
            prioridade=prioridade,
            horas_resposta=int(horas_resposta),
            horas_resolucao=int(horas_resolucao),
            ativa=ativa,
            criado_em=instante,
            atualizado_em=instante,
        )

    @classmethod
    def _validar_nome(cls, nome: str) -> None:
        if not nome or not nome.strip():
            raise ValidationError("Nome da política é obrigatório", field="nome")
        if len(nome.strip()) > cls.NOME_MAX_LENGTH:
            raise ValidationError(
                f"Nome deve ter no máximo {cls.NOME_MAX_LENGTH} caracteres",
                field="nome"
            )

    @staticmethod
    def _validar_orcamentos(horas_resposta: Any, horas_resolucao: Any) -> None:
        for campo, valor in (
            ("horas_resposta", horas_resposta),
            ("horas_resolucao", horas_resolucao),
        ):
            if isinstance(valor, bool) or not isinstance(valor, int) or valor <= 0:
                raise ValidationError(
                    f"{campo} deve ser um inteiro positivo",
                    field=campo
                )

        if horas_resolucao < horas_resposta:
            logger.warning(
                f"[SLA] Política com resolução ({horas_resolucao}h) menor que "
                f"resposta ({horas_resposta}h)"
            )

    def atualizar(
        self,
        agora: datetime,
        nome: Optional[str] = None,
        prioridade: Optional[TicketPriority] = None,
        horas_resposta: Optional[int] = None,
        horas_resolucao: Optional[int] = None,
    ) -> None:
        """
        Atualiza campos informados (None = manter).

        Tickets já criados não são afetados: guardam um snapshot.
        """
        novo_resposta = self.horas_resposta if horas_resposta is None else horas_resposta
        novo_resolucao = self.horas_resolucao if horas_resolucao is None else horas_resolucao

        if nome is not None:
            self._validar_nome(nome)
        self._validar_orcamentos(novo_resposta, novo_resolucao)

        if nome is not None:
            self.nome = nome.strip()
        if prioridade is not None:
            self.prioridade = prioridade
        self.horas_resposta = int(novo_resposta)
        self.horas_resolucao = int(novo_resolucao)
        self.atualizado_em = agora

    def ativar(self, agora: datetime) -> None:
        self.ativa = True
        self.atualizado_em = agora

    def desativar(self, agora: datetime) -> None:
        self.ativa = False
        self.atualizado_em = agora

    def snapshot(self) -> SLASnapshot:
        """Cópia congelada para vincular a um ticket."""
        return SLASnapshot(
            politica_id=self.id,
            horas_resposta=self.horas_resposta,
            horas_resolucao=self.horas_resolucao,
            nome=self.nome,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "nome": self.nome,
            "prioridade": self.prioridade.name,
            "horas_resposta": self.horas_resposta,
            "horas_resolucao": self.horas_resolucao,
            "ativa": self.ativa,
            "criado_em": self.criado_em.isoformat(),
            "atualizado_em": self.atualizado_em.isoformat(),
        }


class SLAViolationType(Enum):
    """Tipos de violação."""

    RESPOSTA = "response_time"
    RESOLUCAO = "resolution_time"


@dataclass(frozen=True)
class SLAViolation:
    """
    Violação detectada em uma varredura.

    Guarda a prioridade e a versão observadas na leitura, usadas para
    rejeitar decisões obsoletas no momento da escrita.

    Attributes:
        ticket_id: Ticket violado
        tipo: RESPOSTA ou RESOLUCAO
        horas_atraso: Horas além do orçamento no instante da detecção
        prioridade_observada: Prioridade lida na varredura
        versao_observada: Versão lida na varredura
        detectado_em: Instante da detecção
    """

    ticket_id: str
    tipo: SLAViolationType
    horas_atraso: float
    prioridade_observada: TicketPriority
    versao_observada: int
    detectado_em: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticket_id": self.ticket_id,
            "tipo": self.tipo.value,
            "horas_atraso": round(self.horas_atraso, 2),
            "prioridade_observada": self.prioridade_observada.name,
            "versao_observada": self.versao_observada,
            "detectado_em": self.detectado_em.isoformat(),
        }


class EscalationOutcome(Enum):
    """
    Resultado do escalonamento de um ticket.

    APLICADA: prioridade subiu um degrau
    JA_NO_MAXIMO: ticket em URGENTE; nenhuma mutação de prioridade
    JA_ESCALADO_NO_CICLO: prioridade mudou desde a detecção
    DESCARTADA: ticket ficou terminal desde a detecção
    """

    APLICADA = "applied"
    JA_NO_MAXIMO = "already_at_max"
    JA_ESCALADO_NO_CICLO = "already_escalated_this_cycle"
    DESCARTADA = "discarded"


@dataclass(frozen=True)
class EscalationResult:
    """Resultado do escalonamento de um ticket em uma varredura."""

    ticket_id: str
    resultado: EscalationOutcome
    prioridade_anterior: Optional[TicketPriority]
    prioridade_nova: Optional[TicketPriority]
    tipos: Tuple[SLAViolationType, ...] = ()
    notificado: bool = False
    tentativas: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticket_id": self.ticket_id,
            "resultado": self.resultado.value,
            "prioridade_anterior": (
                self.prioridade_anterior.name if self.prioridade_anterior else None
            ),
            "prioridade_nova": (
                self.prioridade_nova.name if self.prioridade_nova else None
            ),
            "tipos": [t.value for t in self.tipos],
            "notificado": self.notificado,
            "tentativas": self.tentativas,
        }


@dataclass
class SLASweepReport:
    """
    Relatório de uma varredura de SLA.

    Attributes:
        ciclo_id: Identificador da varredura
        iniciado_em / concluido_em: Janela de execução
        violacoes: Violações detectadas
        resultados: Resultado por ticket processado
        falhas: ticket_id -> mensagem de erro
        abandonados: Tickets não iniciados por causa de parada
        interrompida: Se a parada foi solicitada durante a varredura
    """

    ciclo_id: str
    iniciado_em: datetime
    concluido_em: Optional[datetime] = None
    violacoes: List[SLAViolation] = field(default_factory=list)
    resultados: List[EscalationResult] = field(default_factory=list)
    falhas: Dict[str, str] = field(default_factory=dict)
    abandonados: List[str] = field(default_factory=list)
    interrompida: bool = False

    def _contar(self, resultado: EscalationOutcome) -> int:
        return len([r for r in self.resultados if r.resultado == resultado])

    @property
    def escalados(self) -> int:
        return self._contar(EscalationOutcome.APLICADA)

    @property
    def no_maximo(self) -> int:
        return self._contar(EscalationOutcome.JA_NO_MAXIMO)

    def resultado_de(self, ticket_id: str) -> Optional[EscalationResult]:
        for resultado in self.resultados:
            if resultado.ticket_id == ticket_id:
                return resultado
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ciclo_id": self.ciclo_id,
            "iniciado_em": self.iniciado_em.isoformat(),
            "concluido_em": self.concluido_em.isoformat() if self.concluido_em else None,
            "violacoes": [v.to_dict() for v in self.violacoes],
            "resultados": [r.to_dict() for r in self.resultados],
            "escalados": self.escalados,
            "no_maximo": self.no_maximo,
            "falhas": dict(self.falhas),
            "abandonados": list(self.abandonados),
            "interrompida": self.interrompida,
        }
