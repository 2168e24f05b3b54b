"""
Data Transfer Objects (DTOs) do Domínio de Tickets.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento de entidades para views, tasks e APIs.

Tipos de DTOs:
- Input DTOs: Recebem dados de entrada (de APIs)
- Output DTOs: Formatam dados para resposta
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .entities import TicketEntity


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CriarTicketInputDTO:
    """
    DTO de entrada para criar ticket.

    Attributes:
        titulo: Título do ticket
        descricao: Descrição detalhada
        criador_id: ID do usuário criador
        prioridade: Prioridade (nome, valor ou código, ex: "ALTA", "high")
        categoria: Categoria do ticket
        tags: Tags opcionais
    """

    titulo: str
    descricao: str
    criador_id: str
    prioridade: str = "MEDIA"
    categoria: str = "Geral"
    tags: tuple = field(default_factory=tuple)  # tuple para ser hashable

    def to_dict(self) -> dict:
        return {
            "titulo": self.titulo,
            "descricao": self.descricao,
            "criador_id": self.criador_id,
            "prioridade": self.prioridade,
            "categoria": self.categoria,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class AlterarStatusInputDTO:
    """
    DTO de entrada para transição de status.

    Attributes:
        ticket_id: ID do ticket
        novo_status: Status pedido (nome, valor ou código, ex: "resolved")
    """

    ticket_id: str
    novo_status: str


@dataclass(frozen=True)
class AtribuirTicketInputDTO:
    """
    DTO de entrada para atribuir ticket.

    Attributes:
        ticket_id: ID do ticket
        tecnico_id: ID do técnico a ser atribuído
    """

    ticket_id: str
    tecnico_id: str


@dataclass(frozen=True)
class AlterarPrioridadeInputDTO:
    """DTO de entrada para alteração manual de prioridade."""

    ticket_id: str
    nova_prioridade: str


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class TicketOutputDTO:
    """
    DTO de saída completo com dados do ticket.

    Attributes:
        id: Identificador único
        titulo: Título do ticket
        descricao: Descrição detalhada
        status: Status atual (valor do enum, ex: "Aberto")
        prioridade: Prioridade (valor do enum, ex: "Alta")
        criador_id: ID do criador
        atribuido_a_id: ID do técnico (se atribuído)
        categoria: Categoria
        criado_em: Data/hora de criação
        atualizado_em: Data/hora da última atualização
        sla_politica_id: Política vinculada (None = não monitorado)
        sla_horas_resposta: Orçamento de resposta congelado
        sla_horas_resolucao: Orçamento de resolução congelado
        sla_prazo: Prazo de resolução
        resolvido_em: Primeira resolução
        esta_atrasado: Se está fora do prazo (no instante informado)
        versao: Versão persistida
        tags: Lista de tags
    """

    id: str
    titulo: str
    descricao: str
    status: str
    prioridade: str
    criador_id: str
    atribuido_a_id: Optional[str]
    categoria: str
    criado_em: datetime
    atualizado_em: datetime
    sla_politica_id: Optional[str]
    sla_horas_resposta: Optional[int]
    sla_horas_resolucao: Optional[int]
    sla_prazo: Optional[datetime]
    resolvido_em: Optional[datetime]
    esta_atrasado: bool
    versao: int
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_entity(
        cls,
        entity: TicketEntity,
        agora: Optional[datetime] = None,
    ) -> "TicketOutputDTO":
        """
        Converte entidade em DTO.

        Args:
            entity: Entidade TicketEntity
            agora: Instante de referência para `esta_atrasado`
        """
        sla = entity.sla
        return cls(
            id=entity.id,
            titulo=entity.titulo,
            descricao=entity.descricao,
            status=entity.status.value,
            prioridade=entity.prioridade.value,
            criador_id=entity.criador_id,
            atribuido_a_id=entity.atribuido_a_id,
            categoria=entity.categoria,
            criado_em=entity.criado_em,
            atualizado_em=entity.atualizado_em,
            sla_politica_id=sla.politica_id if sla else None,
            sla_horas_resposta=sla.horas_resposta if sla else None,
            sla_horas_resolucao=sla.horas_resolucao if sla else None,
            sla_prazo=entity.sla_prazo,
            resolvido_em=entity.resolvido_em,
            esta_atrasado=entity.esta_atrasado(agora) if agora else False,
            versao=entity.versao,
            tags=list(entity.tags),
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "id": self.id,
            "titulo": self.titulo,
            "descricao": self.descricao,
            "status": self.status,
            "prioridade": self.prioridade,
            "criador_id": self.criador_id,
            "atribuido_a_id": self.atribuido_a_id,
            "categoria": self.categoria,
            "criado_em": self.criado_em.isoformat(),
            "atualizado_em": self.atualizado_em.isoformat(),
            "sla": {
                "politica_id": self.sla_politica_id,
                "horas_resposta": self.sla_horas_resposta,
                "horas_resolucao": self.sla_horas_resolucao,
                "prazo": self.sla_prazo.isoformat() if self.sla_prazo else None,
            } if self.sla_politica_id else None,
            "resolvido_em": self.resolvido_em.isoformat() if self.resolvido_em else None,
            "esta_atrasado": self.esta_atrasado,
            "versao": self.versao,
            "tags": self.tags,
        }
