"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- Converter TicketEntity <-> TicketModel
- Converter SLAPolicyEntity <-> SLAPolicyModel

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Tratam apenas conversão de dados
"""

from typing import Any, Dict, Iterable, List

from src.core.sla.entities import SLAPolicyEntity
from src.core.tickets.entities import (
    SLASnapshot,
    TicketEntity,
    TicketPriority,
    TicketStatus,
)

from .models import SLAPolicyModel, TicketModel


class TicketMapper:
    """
    Mapper para conversão entre TicketEntity e TicketModel.

    - campos(): Entity -> dict de colunas (insert e update condicional)
    - to_entity(): Model -> Entity
    - to_entity_list(): List[Model] -> List[Entity]
    """

    @staticmethod
    def campos(entity: TicketEntity) -> Dict[str, Any]:
        """
        Colunas persistidas, exceto id e versao.

        Usado tanto no INSERT quanto no UPDATE ... WHERE versao = ?.
        """
        sla = entity.sla
        return {
            'titulo': entity.titulo,
            'descricao': entity.descricao,
            'categoria': entity.categoria,
            'status': entity.status.value,
            'prioridade': entity.prioridade.value,
            'criador_id': entity.criador_id,
            'atribuido_a_id': entity.atribuido_a_id,
            'criado_em': entity.criado_em,
            'atualizado_em': entity.atualizado_em,
            'sla_politica_id': sla.politica_id if sla else None,
            'sla_nome': sla.nome if sla else '',
            'sla_horas_resposta': sla.horas_resposta if sla else None,
            'sla_horas_resolucao': sla.horas_resolucao if sla else None,
            'sla_prazo': entity.sla_prazo,
            'resolvido_em': entity.resolvido_em,
            'escalonado_em': entity.escalonado_em,
            'alertas_maximo': list(entity.alertas_maximo),
            'tags': list(entity.tags),
        }

    @staticmethod
    def to_entity(model: TicketModel) -> TicketEntity:
        """
        Converte TicketModel para TicketEntity.

        Note:
            Bypassa validações do factory method .criar()
            pois dados já foram validados na criação original
        """
        sla = None
        if model.sla_politica_id is not None:
            sla = SLASnapshot(
                politica_id=model.sla_politica_id,
                horas_resposta=model.sla_horas_resposta,
                horas_resolucao=model.sla_horas_resolucao,
                nome=model.sla_nome,
            )

        return TicketEntity(
            id=model.id,
            titulo=model.titulo,
            descricao=model.descricao,
            categoria=model.categoria,
            status=TicketStatus(model.status),
            prioridade=TicketPriority(model.prioridade),
            criador_id=model.criador_id,
            atribuido_a_id=model.atribuido_a_id,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
            sla=sla,
            sla_prazo=model.sla_prazo,
            resolvido_em=model.resolvido_em,
            escalonado_em=model.escalonado_em,
            alertas_maximo=list(model.alertas_maximo) if model.alertas_maximo else [],
            versao=model.versao,
            tags=list(model.tags) if model.tags else [],
        )

    @staticmethod
    def to_entity_list(models: Iterable[TicketModel]) -> List[TicketEntity]:
        return [TicketMapper.to_entity(model) for model in models]


class SLAPolicyMapper:
    """Mapper para conversão entre SLAPolicyEntity e SLAPolicyModel."""

    @staticmethod
    def campos(entity: SLAPolicyEntity) -> Dict[str, Any]:
        return {
            'nome': entity.nome,
            'prioridade': entity.prioridade.value,
            'horas_resposta': entity.horas_resposta,
            'horas_resolucao': entity.horas_resolucao,
            'ativa': entity.ativa,
            'criado_em': entity.criado_em,
            'atualizado_em': entity.atualizado_em,
        }

    @staticmethod
    def to_entity(model: SLAPolicyModel) -> SLAPolicyEntity:
        return SLAPolicyEntity(
            id=model.id,
            nome=model.nome,
            prioridade=TicketPriority(model.prioridade),
            horas_resposta=model.horas_resposta,
            horas_resolucao=model.horas_resolucao,
            ativa=model.ativa,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )

    @staticmethod
    def to_entity_list(models: Iterable[SLAPolicyModel]) -> List[SLAPolicyEntity]:
        return [SLAPolicyMapper.to_entity(model) for model in models]
