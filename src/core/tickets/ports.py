"""
Ports (Interfaces) do Domínio de Tickets.

Define os contratos que os Adapters de infraestrutura devem implementar
para persistência e consulta de tickets.

Concorrência otimista:
    `save` é uma escrita condicional. Entidades com versao == 0 são
    inseridas; as demais só são gravadas se a versão persistida for
    igual à da entidade lida. Após sucesso, entity.versao é
    incrementada. Assim, duas decisões tomadas sobre a mesma leitura
    nunca são ambas aplicadas.

Example:
    class DjangoTicketRepository:
        def save(self, ticket: TicketEntity) -> None:
            updated = TicketModel.objects.filter(
                id=ticket.id, versao=ticket.versao
            ).update(...)
"""

from copy import deepcopy
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable
import threading

from src.core.shared.exceptions import ConcurrencyError, EntityNotFoundError

from .entities import TicketEntity, TicketStatus


@runtime_checkable
class TicketRepository(Protocol):
    """
    Interface para persistência de Tickets.

    Implementações:
    - DjangoTicketRepository (PostgreSQL via ORM)
    - InMemoryTicketRepository (para testes)

    Methods:
        save: Insere ou atualiza condicionalmente (por versão)
        get_by_id: Busca por ID (cópia independente)
        list_all: Lista todos
        list_by_status_in: Filtra por conjunto de status
        list_by_criador: Filtra por criador
        list_by_tecnico: Filtra por técnico atribuído
        count_by_politica: Tickets que referenciam uma política de SLA
    """

    def save(self, ticket: TicketEntity) -> None:
        """
        Persiste ticket com verificação de versão.

        Args:
            ticket: Entidade a ser persistida

        Raises:
            ConcurrencyError: Se a versão persistida difere da lida
            EntityNotFoundError: Se atualização de ticket inexistente
        """
        ...

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        """
        Busca ticket por ID.

        Returns:
            Entidade encontrada ou None se não existir
        """
        ...

    def list_all(self) -> List[TicketEntity]:
        ...

    def list_by_status_in(self, statuses: Iterable[TicketStatus]) -> List[TicketEntity]:
        """
        Leitura pontual dos tickets com status no conjunto.

        Args:
            statuses: Status aceitos

        Returns:
            Lista de tickets (cópias independentes)
        """
        ...

    def list_by_criador(self, criador_id: str) -> List[TicketEntity]:
        ...

    def list_by_tecnico(self, tecnico_id: str) -> List[TicketEntity]:
        ...

    def count_by_politica(self, politica_id: str) -> int:
        """Conta tickets vinculados à política de SLA informada."""
        ...


class InMemoryTicketRepository:
    """
    Implementação em memória do TicketRepository.

    Guarda cópias das entidades, de modo que cada leitura é um
    snapshot independente (como uma linha lida do banco). O lock
    protege apenas o acesso ao dicionário.

    Útil para:
    - Testes unitários
    - Prototipagem

    Não usar em produção!
    """

    def __init__(self):
        self._tickets: Dict[str, TicketEntity] = {}
        self._lock = threading.Lock()

    def save(self, ticket: TicketEntity) -> None:
        """Insere ou atualiza com compare-and-swap na versão."""
        with self._lock:
            atual = self._tickets.get(ticket.id)

            if ticket.versao == 0:
                if atual is not None:
                    raise ConcurrencyError(
                        f"Ticket {ticket.id} já existe",
                        entity_id=ticket.id,
                        versao_esperada=0,
                    )
            else:
                if atual is None:
                    raise EntityNotFoundError(
                        f"Ticket {ticket.id} não encontrado",
                        entity_type="Ticket",
                        entity_id=ticket.id,
                    )
                if atual.versao != ticket.versao:
                    raise ConcurrencyError(
                        f"Ticket {ticket.id} foi modificado concorrentemente "
                        f"(esperada v{ticket.versao}, atual v{atual.versao})",
                        entity_id=ticket.id,
                        versao_esperada=ticket.versao,
                    )

            ticket.versao += 1
            self._tickets[ticket.id] = deepcopy(ticket)

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        with self._lock:
            ticket = self._tickets.get(ticket_id)
            return deepcopy(ticket) if ticket else None

    def list_all(self) -> List[TicketEntity]:
        with self._lock:
            return [deepcopy(t) for t in self._tickets.values()]

    def list_by_status_in(self, statuses: Iterable[TicketStatus]) -> List[TicketEntity]:
        aceitos = set(statuses)
        with self._lock:
            return [
                deepcopy(t) for t in self._tickets.values()
                if t.status in aceitos
            ]

    def list_by_criador(self, criador_id: str) -> List[TicketEntity]:
        with self._lock:
            return [
                deepcopy(t) for t in self._tickets.values()
                if t.criador_id == criador_id
            ]

    def list_by_tecnico(self, tecnico_id: str) -> List[TicketEntity]:
        with self._lock:
            return [
                deepcopy(t) for t in self._tickets.values()
                if t.atribuido_a_id == tecnico_id
            ]

    def count_by_politica(self, politica_id: str) -> int:
        with self._lock:
            return len([
                t for t in self._tickets.values()
                if t.sla is not None and t.sla.politica_id == politica_id
            ])

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        with self._lock:
            self._tickets.clear()
