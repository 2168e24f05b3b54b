"""
Data Transfer Objects (DTOs) da administração de políticas de SLA.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .entities import SLAPolicyEntity


@dataclass(frozen=True)
class CriarPoliticaSLAInputDTO:
    """
    DTO de entrada para criar política.

    Attributes:
        nome: Nome legível
        prioridade: Prioridade (nome, valor ou código, ex: "high")
        horas_resposta: Orçamento de primeira resposta
        horas_resolucao: Orçamento de resolução
        ativa: Se entra em vigor imediatamente
    """

    nome: str
    prioridade: str
    horas_resposta: int
    horas_resolucao: int
    ativa: bool = True


@dataclass(frozen=True)
class AtualizarPoliticaSLAInputDTO:
    """DTO de entrada para atualização parcial (None = manter)."""

    politica_id: str
    nome: Optional[str] = None
    prioridade: Optional[str] = None
    horas_resposta: Optional[int] = None
    horas_resolucao: Optional[int] = None
    ativa: Optional[bool] = None


@dataclass
class SLAPolicyOutputDTO:
    id: str
    nome: str
    prioridade: str
    horas_resposta: int
    horas_resolucao: int
    ativa: bool
    criado_em: datetime
    atualizado_em: datetime

    @classmethod
    def from_entity(cls, entity: SLAPolicyEntity) -> "SLAPolicyOutputDTO":
        return cls(
            id=entity.id,
            nome=entity.nome,
            prioridade=entity.prioridade.value,
            horas_resposta=entity.horas_resposta,
            horas_resolucao=entity.horas_resolucao,
            ativa=entity.ativa,
            criado_em=entity.criado_em,
            atualizado_em=entity.atualizado_em,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "prioridade": self.prioridade,
            "horas_resposta": self.horas_resposta,
            "horas_resolucao": self.horas_resolucao,
            "ativa": self.ativa,
            "criado_em": self.criado_em.isoformat(),
            "atualizado_em": self.atualizado_em.isoformat(),
        }
