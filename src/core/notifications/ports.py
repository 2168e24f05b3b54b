"""
Ports (Interfaces) do Domínio de Notificações.

- NotificationRepository: registros in-app (idempotentes)
- DeliveryChannel: canal externo (e-mail)
"""

from copy import deepcopy
from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable
import threading

from src.core.shared.authorization import UsuarioInfo
from src.core.shared.exceptions import DeliveryFailureError

from .entities import NotificationEntity


@runtime_checkable
class NotificationRepository(Protocol):
    """
    Interface para persistência de notificações.

    Implementações:
    - DjangoNotificationRepository (constraint única no banco)
    - InMemoryNotificationRepository
    """

    def adicionar_se_ausente(self, notificacao: NotificationEntity) -> bool:
        """
        Insere se não existir outra com a mesma chave de idempotência.

        Returns:
            True se inseriu, False se já existia
        """
        ...

    def get_by_id(self, notificacao_id: str) -> Optional[NotificationEntity]:
        ...

    def list_by_destinatario(
        self,
        destinatario_id: str,
        apenas_nao_lidas: bool = False,
    ) -> List[NotificationEntity]:
        ...

    def save(self, notificacao: NotificationEntity) -> None:
        """Atualiza notificação existente (indicador de leitura)."""
        ...


@runtime_checkable
class DeliveryChannel(Protocol):
    """
    Canal externo de entrega.

    Raises:
        DeliveryFailureError: Se a entrega falhar
    """

    def enviar(self, destinatario: UsuarioInfo, notificacao: NotificationEntity) -> None:
        ...


class InMemoryNotificationRepository:
    """Implementação em memória (testes)."""

    def __init__(self):
        self._notificacoes: Dict[str, NotificationEntity] = {}
        self._chaves: Dict[Tuple[str, str, str, str], str] = {}
        self._lock = threading.Lock()

    def adicionar_se_ausente(self, notificacao: NotificationEntity) -> bool:
        with self._lock:
            if notificacao.chave_idempotencia in self._chaves:
                return False
            self._chaves[notificacao.chave_idempotencia] = notificacao.id
            self._notificacoes[notificacao.id] = deepcopy(notificacao)
            return True

    def get_by_id(self, notificacao_id: str) -> Optional[NotificationEntity]:
        with self._lock:
            notificacao = self._notificacoes.get(notificacao_id)
            return deepcopy(notificacao) if notificacao else None

    def list_by_destinatario(
        self,
        destinatario_id: str,
        apenas_nao_lidas: bool = False,
    ) -> List[NotificationEntity]:
        with self._lock:
            return [
                deepcopy(n) for n in self._notificacoes.values()
                if n.destinatario_id == destinatario_id
                and not (apenas_nao_lidas and n.lida)
            ]

    def save(self, notificacao: NotificationEntity) -> None:
        with self._lock:
            self._notificacoes[notificacao.id] = deepcopy(notificacao)

    def list_all(self) -> List[NotificationEntity]:
        with self._lock:
            return [deepcopy(n) for n in self._notificacoes.values()]

    def clear(self) -> None:
        with self._lock:
            self._notificacoes.clear()
            self._chaves.clear()


class InMemoryDeliveryChannel:
    """
    Canal que apenas registra as entregas (testes).

    Attributes:
        enviadas: Lista de (destinatario_id, notificacao_id)
        falhar_para: IDs de destinatários cuja entrega deve falhar
    """

    def __init__(self, falhar_para: Tuple[str, ...] = ()):
        self.enviadas: List[Tuple[str, str]] = []
        self.falhar_para = set(falhar_para)

    def enviar(self, destinatario: UsuarioInfo, notificacao: NotificationEntity) -> None:
        if destinatario.id in self.falhar_para:
            raise DeliveryFailureError(
                f"Falha simulada para {destinatario.id}",
                canal="memoria",
                destinatario_id=destinatario.id,
            )
        self.enviadas.append((destinatario.id, notificacao.id))
