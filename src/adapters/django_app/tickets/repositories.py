"""
Repositórios Django para persistência de Tickets e Políticas de SLA.

Implementam as interfaces (Ports) definidas no Core.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Responsabilidades:
- Implementar TicketRepository e SLAPolicyRepository
- Mapear entities para models e vice-versa
- Escrita condicional por versão (UPDATE ... WHERE versao = ?)

Princípios:
- Repository não contém lógica de negócio
- Usa Mapper para conversões
- Trata apenas persistência
"""

from typing import Dict, Iterable, List, Optional
import logging

from django.db import IntegrityError, transaction
from django.db.models import F, ProtectedError

from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConcurrencyError,
    EntityNotFoundError,
)
from src.core.sla.entities import SLAPolicyEntity
from src.core.tickets.entities import TicketEntity, TicketPriority, TicketStatus

from .mappers import SLAPolicyMapper, TicketMapper
from .models import SLAPolicyModel, TicketModel

logger = logging.getLogger(__name__)


class DjangoTicketRepository:
    """
    Implementação Django do TicketRepository.

    Implementa a interface definida em src/core/tickets/ports.py,
    usando Django ORM para persistência em PostgreSQL.

    Concorrência:
        A versão persistida é comparada no próprio UPDATE; se nenhuma
        linha for afetada, outro processo gravou antes e a escrita
        falha com ConcurrencyError.

    Example:
        repo = DjangoTicketRepository()
        repo.save(ticket_entity)         # INSERT (versao 0 -> 1)
        ticket = repo.get_by_id(ticket_entity.id)
        ticket.escalar(agora)
        repo.save(ticket)                # UPDATE WHERE versao = 1
    """

    def __init__(self):
        self._mapper = TicketMapper()

    def save(self, ticket: TicketEntity) -> None:
        """
        Persiste ticket com verificação de versão.

        Raises:
            ConcurrencyError: Versão divergente ou inserção duplicada
            EntityNotFoundError: Atualização de ticket inexistente
        """
        campos = self._mapper.campos(ticket)

        if ticket.versao == 0:
            self._inserir(ticket, campos)
        else:
            self._atualizar(ticket, campos)

        ticket.versao += 1
        logger.debug(f"Ticket saved: {ticket.id} v{ticket.versao}")

    def _inserir(self, ticket: TicketEntity, campos: Dict) -> None:
        try:
            with transaction.atomic():
                TicketModel.objects.create(id=ticket.id, versao=1, **campos)
        except IntegrityError:
            raise ConcurrencyError(
                f"Ticket {ticket.id} já existe",
                entity_id=ticket.id,
                versao_esperada=0,
            )

    def _atualizar(self, ticket: TicketEntity, campos: Dict) -> None:
        atualizados = (
            TicketModel.objects
            .filter(id=ticket.id, versao=ticket.versao)
            .update(versao=F('versao') + 1, **campos)
        )
        if atualizados:
            return

        if not TicketModel.objects.filter(id=ticket.id).exists():
            raise EntityNotFoundError(
                f"Ticket {ticket.id} não encontrado",
                entity_type="Ticket",
                entity_id=ticket.id,
            )
        raise ConcurrencyError(
            f"Ticket {ticket.id} foi modificado concorrentemente "
            f"(esperada v{ticket.versao})",
            entity_id=ticket.id,
            versao_esperada=ticket.versao,
        )

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        try:
            model = TicketModel.objects.get(id=ticket_id)
            return self._mapper.to_entity(model)
        except TicketModel.DoesNotExist:
            logger.debug(f"Ticket not found: {ticket_id}")
            return None

    def list_all(self) -> List[TicketEntity]:
        """
        Lista todos os tickets.

        Warning:
            Use com cuidado em produção - sem paginação
        """
        return self._mapper.to_entity_list(TicketModel.objects.all())

    def list_by_status_in(self, statuses: Iterable[TicketStatus]) -> List[TicketEntity]:
        """
        Lista tickets cujo status pertence ao conjunto.

        Usado pela varredura de SLA (Aberto + Em Progresso).
        """
        valores = [status.value for status in statuses]
        models = TicketModel.objects.filter(status__in=valores)
        return self._mapper.to_entity_list(models)

    def list_by_criador(self, criador_id: str) -> List[TicketEntity]:
        models = TicketModel.objects.filter(criador_id=criador_id)
        return self._mapper.to_entity_list(models)

    def list_by_tecnico(self, tecnico_id: str) -> List[TicketEntity]:
        models = TicketModel.objects.filter(atribuido_a_id=tecnico_id)
        return self._mapper.to_entity_list(models)

    def count_by_politica(self, politica_id: str) -> int:
        return TicketModel.objects.filter(sla_politica_id=politica_id).count()


class DjangoSLAPolicyRepository:
    """
    Implementação Django do SLAPolicyRepository.

    A constraint parcial `uma_politica_ativa_por_prioridade` é a
    última barreira contra duas políticas ativas na mesma prioridade.
    """

    def __init__(self):
        self._mapper = SLAPolicyMapper()

    def save(self, politica: SLAPolicyEntity) -> None:
        try:
            with transaction.atomic():
                SLAPolicyModel.objects.update_or_create(
                    id=politica.id,
                    defaults=self._mapper.campos(politica),
                )
        except IntegrityError:
            raise BusinessRuleViolationError(
                f"Já existe política ativa para {politica.prioridade.value}",
                rule="politica_ativa_unica",
            )
        logger.info(f"[SLA] Política salva: {politica.id} ({politica.nome})")

    def get_by_id(self, politica_id: str) -> Optional[SLAPolicyEntity]:
        try:
            return self._mapper.to_entity(SLAPolicyModel.objects.get(id=politica_id))
        except SLAPolicyModel.DoesNotExist:
            return None

    def delete(self, politica_id: str) -> None:
        """
        Remove política.

        Raises:
            BusinessRuleViolationError: Se algum ticket referencia a política
        """
        try:
            with transaction.atomic():
                SLAPolicyModel.objects.filter(id=politica_id).delete()
        except ProtectedError:
            raise BusinessRuleViolationError(
                f"Política {politica_id} está vinculada a tickets",
                rule="politica_referenciada",
            )
        logger.info(f"[SLA] Política removida: {politica_id}")

    def list_all(self) -> List[SLAPolicyEntity]:
        return self._mapper.to_entity_list(SLAPolicyModel.objects.all())

    def list_ativas(self) -> List[SLAPolicyEntity]:
        return self._mapper.to_entity_list(SLAPolicyModel.objects.filter(ativa=True))

    def get_ativa_por_prioridade(
        self, prioridade: TicketPriority
    ) -> Optional[SLAPolicyEntity]:
        model = (
            SLAPolicyModel.objects
            .filter(ativa=True, prioridade=prioridade.value)
            .first()
        )
        return self._mapper.to_entity(model) if model else None
