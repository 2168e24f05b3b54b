"""
Ports de Autorização e Diretório de Usuários.

O motor nunca compara nomes de papéis diretamente: toda decisão
passa por `AuthorizationService.pode_executar(ator, acao, recurso)`
e toda resolução de destinatários passa por `UserDirectory`, ambos
configurados pelo adapter (tabela papel -> ações, papel -> capacidade).

Componentes:
- Acao / Capacidade: vocabulário fechado do motor
- Ator / UsuarioInfo: value objects imutáveis
- AuthorizationService / UserDirectory: Protocols (Ports)
- RoleTableAuthorizationService: implementação por tabela
- InMemoryUserDirectory: implementação para testes
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Set,
    runtime_checkable,
)
import logging

from .exceptions import PermissionDeniedError

logger = logging.getLogger(__name__)


class Acao(Enum):
    """Ações protegidas por autorização."""

    ALTERAR_STATUS = "alterar_status"
    FECHAR_TICKET = "fechar_ticket"
    ALTERAR_PRIORIDADE = "alterar_prioridade"
    ATRIBUIR_TICKET = "atribuir_ticket"
    GERENCIAR_POLITICAS_SLA = "gerenciar_politicas_sla"
    EXECUTAR_VERIFICACAO_SLA = "executar_verificacao_sla"

    @classmethod
    def from_string(cls, value: str) -> "Acao":
        try:
            return cls[value.upper()]
        except KeyError:
            pass
        for acao in cls:
            if acao.value == value.lower():
                return acao
        raise ValueError(f"Ação inválida: {value}")


class Capacidade(Enum):
    """
    Capacidades usadas para resolver destinatários e validar atribuições.

    ATENDER_TICKETS: pode ser responsável por tickets (técnico)
    TRIAGEM: recebe aviso de todo ticket novo
    RECEBER_ESCALONAMENTO: recebe alertas de violação de SLA
    """

    ATENDER_TICKETS = "atender_tickets"
    TRIAGEM = "triagem"
    RECEBER_ESCALONAMENTO = "receber_escalonamento"


@dataclass(frozen=True)
class Ator:
    """
    Quem solicita uma operação.

    Attributes:
        id: ID do usuário
        papeis: Papéis atribuídos (nomes opacos para o motor)
        nome: Nome para exibição/logs
    """

    id: str
    papeis: FrozenSet[str] = field(default_factory=frozenset)
    nome: str = ""

    @classmethod
    def sistema(cls) -> "Ator":
        """Ator usado por processos automáticos (agendador)."""
        return cls(id="sistema", papeis=frozenset(), nome="Sistema")


@dataclass(frozen=True)
class UsuarioInfo:
    """Dados mínimos de um usuário para entrega de notificações."""

    id: str
    nome: str = ""
    email: str = ""


@runtime_checkable
class AuthorizationService(Protocol):
    """
    Colaborador de autorização.

    Implementações:
    - RoleTableAuthorizationService (tabela configurável)
    """

    def pode_executar(self, ator: Ator, acao: Acao, recurso: Any = None) -> bool:
        """
        Decide se `ator` pode executar `acao` sobre `recurso`.

        Args:
            ator: Quem solicita
            acao: Ação pretendida
            recurso: Entidade alvo (opcional, ex: TicketEntity)

        Returns:
            True para permitir, False para negar
        """
        ...


@runtime_checkable
class UserDirectory(Protocol):
    """
    Diretório de usuários (colaborador externo).

    Implementações:
    - DjangoUserDirectory (django.contrib.auth + Groups)
    - InMemoryUserDirectory (testes)
    """

    def obter(self, usuario_id: str) -> Optional[UsuarioInfo]:
        ...

    def possui_capacidade(self, usuario_id: str, capacidade: Capacidade) -> bool:
        ...

    def listar_com_capacidade(self, capacidade: Capacidade) -> List[UsuarioInfo]:
        ...


def exigir_permissao(
    authz: AuthorizationService,
    ator: Ator,
    acao: Acao,
    recurso: Any = None,
) -> None:
    """
    Lança PermissionDeniedError se o ator não puder executar a ação.

    Raises:
        PermissionDeniedError: Se negado
    """
    if not authz.pode_executar(ator, acao, recurso):
        logger.info(f"[AUTHZ] Negado: ator={ator.id} acao={acao.value}")
        raise PermissionDeniedError(
            f"Usuário {ator.id} não tem permissão para {acao.value}",
            acao=acao.value,
            ator_id=ator.id,
        )


class RoleTableAuthorizationService:
    """
    Autorização por tabela papel -> ações.

    Regras:
    - Permite se algum papel do ator concede a ação
    - Permite ações "do criador" quando recurso.criador_id == ator.id

    Example:
        authz = RoleTableAuthorizationService(
            tabela={"admin": {Acao.ALTERAR_STATUS, Acao.ATRIBUIR_TICKET}},
            acoes_do_criador={Acao.FECHAR_TICKET},
        )
    """

    def __init__(
        self,
        tabela: Mapping[str, Iterable[Acao]],
        acoes_do_criador: Iterable[Acao] = (),
    ):
        self._tabela: Dict[str, Set[Acao]] = {
            papel: set(acoes) for papel, acoes in tabela.items()
        }
        self._acoes_do_criador: Set[Acao] = set(acoes_do_criador)

    @classmethod
    def from_config(
        cls,
        tabela: Mapping[str, Iterable[str]],
        acoes_do_criador: Iterable[str] = (),
    ) -> "RoleTableAuthorizationService":
        """Constrói a partir de nomes de ações (ex: vindos de settings)."""
        return cls(
            tabela={
                papel: {Acao.from_string(a) for a in acoes}
                for papel, acoes in tabela.items()
            },
            acoes_do_criador={Acao.from_string(a) for a in acoes_do_criador},
        )

    def pode_executar(self, ator: Ator, acao: Acao, recurso: Any = None) -> bool:
        for papel in ator.papeis:
            if acao in self._tabela.get(papel, ()):
                return True

        if acao in self._acoes_do_criador and recurso is not None:
            criador_id = getattr(recurso, "criador_id", None)
            if criador_id and criador_id == ator.id:
                return True

        return False


class InMemoryUserDirectory:
    """
    Diretório em memória.

    Example:
        diretorio = InMemoryUserDirectory()
        diretorio.adicionar("tec-1", "Ana", "ana@x.com",
                            capacidades={Capacidade.ATENDER_TICKETS})
    """

    def __init__(self):
        self._usuarios: Dict[str, UsuarioInfo] = {}
        self._capacidades: Dict[str, Set[Capacidade]] = {}

    def adicionar(
        self,
        usuario_id: str,
        nome: str = "",
        email: str = "",
        capacidades: Iterable[Capacidade] = (),
    ) -> UsuarioInfo:
        usuario = UsuarioInfo(id=usuario_id, nome=nome, email=email)
        self._usuarios[usuario_id] = usuario
        self._capacidades[usuario_id] = set(capacidades)
        return usuario

    def obter(self, usuario_id: str) -> Optional[UsuarioInfo]:
        return self._usuarios.get(usuario_id)

    def possui_capacidade(self, usuario_id: str, capacidade: Capacidade) -> bool:
        return capacidade in self._capacidades.get(usuario_id, set())

    def listar_com_capacidade(self, capacidade: Capacidade) -> List[UsuarioInfo]:
        return [
            self._usuarios[uid]
            for uid, caps in self._capacidades.items()
            if capacidade in caps
        ]
