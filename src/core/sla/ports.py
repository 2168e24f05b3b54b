"""
Ports (Interfaces) do Domínio de SLA.

- SLAPolicyRepository: catálogo persistente de políticas
- InMemorySLAPolicyRepository: implementação para testes
"""

from copy import deepcopy
from typing import Dict, List, Optional, Protocol, runtime_checkable
import threading

from src.core.tickets.entities import TicketPriority

from .entities import SLAPolicyEntity


@runtime_checkable
class SLAPolicyRepository(Protocol):
    """
    Interface para persistência de políticas de SLA.

    Implementações:
    - DjangoSLAPolicyRepository
    - InMemorySLAPolicyRepository
    """

    def save(self, politica: SLAPolicyEntity) -> None:
        """Cria ou atualiza política."""
        ...

    def get_by_id(self, politica_id: str) -> Optional[SLAPolicyEntity]:
        ...

    def delete(self, politica_id: str) -> None:
        """
        Remove política.

        Raises:
            BusinessRuleViolationError: Se referenciada por algum ticket
        """
        ...

    def list_all(self) -> List[SLAPolicyEntity]:
        ...

    def list_ativas(self) -> List[SLAPolicyEntity]:
        """Políticas ativas (no máximo uma por prioridade)."""
        ...

    def get_ativa_por_prioridade(
        self, prioridade: TicketPriority
    ) -> Optional[SLAPolicyEntity]:
        ...


class InMemorySLAPolicyRepository:
    """
    Implementação em memória do SLAPolicyRepository.

    Example:
        repo = InMemorySLAPolicyRepository()
        repo.save(SLAPolicyEntity.criar("Alta", TicketPriority.ALTA, 2, 8))
    """

    def __init__(self):
        self._politicas: Dict[str, SLAPolicyEntity] = {}
        self._lock = threading.Lock()

    def save(self, politica: SLAPolicyEntity) -> None:
        with self._lock:
            self._politicas[politica.id] = deepcopy(politica)

    def get_by_id(self, politica_id: str) -> Optional[SLAPolicyEntity]:
        with self._lock:
            politica = self._politicas.get(politica_id)
            return deepcopy(politica) if politica else None

    def delete(self, politica_id: str) -> None:
        with self._lock:
            self._politicas.pop(politica_id, None)

    def list_all(self) -> List[SLAPolicyEntity]:
        with self._lock:
            return [deepcopy(p) for p in self._politicas.values()]

    def list_ativas(self) -> List[SLAPolicyEntity]:
        with self._lock:
            return [deepcopy(p) for p in self._politicas.values() if p.ativa]

    def get_ativa_por_prioridade(
        self, prioridade: TicketPriority
    ) -> Optional[SLAPolicyEntity]:
        for politica in self.list_ativas():
            if politica.prioridade == prioridade:
                return politica
        return None

    def clear(self) -> None:
        with self._lock:
            self._politicas.clear()
