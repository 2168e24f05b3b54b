"""
Policy Registry e Due-Date Calculator.

O registro mantém, por processo, o mapa prioridade -> política ativa,
recarregado do repositório quando expira o TTL ou quando a
administração do catálogo o invalida. A consulta é pura: não depende
do instante atual além do controle de expiração.

Uma política inativa é tratada exatamente como ausência de política.
"""

from datetime import datetime, timedelta
from typing import Dict, Optional
import logging

from src.core.shared.clock import Clock
from src.core.tickets.entities import TicketPriority

from .entities import SLAPolicyEntity
from .ports import SLAPolicyRepository

logger = logging.getLogger(__name__)


def calcular_prazo(criado_em: datetime, politica: SLAPolicyEntity) -> datetime:
    """
    Prazo de resolução: criado_em + horas_resolucao.

    Args:
        criado_em: Instante de criação do ticket
        politica: Política resolvida para a prioridade do ticket

    Returns:
        Instante limite para resolução
    """
    return criado_em + timedelta(hours=politica.horas_resolucao)


class SLAPolicyRegistry:
    """
    Registro de políticas ativas por prioridade.

    Leitura sem lock: a recarga monta um dicionário novo e troca a
    referência em uma única atribuição.

    Example:
        registry = SLAPolicyRegistry(policy_repo, clock, ttl_segundos=60)
        politica = registry.resolver(TicketPriority.ALTA)
        if politica:
            prazo = calcular_prazo(agora, politica)
    """

    def __init__(
        self,
        policy_repo: SLAPolicyRepository,
        clock: Clock,
        ttl_segundos: int = 60,
    ):
        self._policy_repo = policy_repo
        self._clock = clock
        self._ttl = timedelta(seconds=ttl_segundos)
        self._politicas: Optional[Dict[TicketPriority, SLAPolicyEntity]] = None
        self._carregado_em: Optional[datetime] = None

    def resolver(self, prioridade: TicketPriority) -> Optional[SLAPolicyEntity]:
        """
        Política ativa para a prioridade.

        Returns:
            Política ativa ou None (ticket seguirá não monitorado)
        """
        politicas = self._politicas_vigentes()
        return politicas.get(prioridade)

    def calcular_prazo(self, criado_em: datetime, politica: SLAPolicyEntity) -> datetime:
        return calcular_prazo(criado_em, politica)

    def recarregar(self) -> Dict[TicketPriority, SLAPolicyEntity]:
        """Recarrega imediatamente do repositório e retorna o mapa carregado."""
        politicas: Dict[TicketPriority, SLAPolicyEntity] = {}

        for politica in self._policy_repo.list_ativas():
            if not politica.ativa:
                continue
            existente = politicas.get(politica.prioridade)
            if existente is not None:
                logger.warning(
                    f"[SLA] Mais de uma política ativa para "
                    f"{politica.prioridade.name}; mantendo {existente.id}"
                )
                continue
            politicas[politica.prioridade] = politica

        self._politicas = politicas
        self._carregado_em = self._clock.agora()
        logger.debug(f"[SLA] Registro recarregado: {len(politicas)} políticas ativas")
        return politicas

    def invalidar(self) -> None:
        """Força recarga na próxima consulta."""
        self._politicas = None
        self._carregado_em = None

    def _politicas_vigentes(self) -> Dict[TicketPriority, SLAPolicyEntity]:
        # Uma única leitura dos atributos: invalidar() pode correr em paralelo
        politicas = self._politicas
        carregado_em = self._carregado_em
        if (
            politicas is None
            or carregado_em is None
            or self._clock.agora() - carregado_em >= self._ttl
        ):
            politicas = self.recarregar()
        return politicas
