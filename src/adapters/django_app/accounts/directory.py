"""
Diretório de usuários sobre django.contrib.auth.

Papéis são nomes de Groups; superusuários recebem também o papel
"superadmin". Capacidades (Capacidade) são mapeadas para papéis via
settings.HELPDESK_CAPABILITY_GROUPS, de modo que o Core nunca conhece
nomes de grupos.
"""

from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.http import HttpRequest

from src.core.shared.authorization import Ator, Capacidade, UsuarioInfo

logger = logging.getLogger(__name__)

PAPEL_SUPERUSUARIO = "superadmin"
ATOR_ANONIMO = "anonymous"


def papeis_do_usuario(user) -> FrozenSet[str]:
    """Nomes de grupos do usuário (+ superadmin se is_superuser)."""
    papeis = set(user.groups.values_list('name', flat=True))
    if user.is_superuser:
        papeis.add(PAPEL_SUPERUSUARIO)
    return frozenset(papeis)


def _nome_exibicao(user) -> str:
    return user.get_full_name() or user.get_username()


def _usuario_info(user) -> UsuarioInfo:
    return UsuarioInfo(id=str(user.pk), nome=_nome_exibicao(user), email=user.email or "")


def ator_from_request(request: HttpRequest) -> Ator:
    """
    Resolve o Ator da requisição.

    Usuários não autenticados viram um ator sem papéis, que
    qualquer verificação de permissão nega.
    """
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return Ator(id=ATOR_ANONIMO)
    return Ator(
        id=str(user.pk),
        papeis=papeis_do_usuario(user),
        nome=_nome_exibicao(user),
    )


class DjangoUserDirectory:
    """
    UserDirectory sobre User + Group.

    Example:
        diretorio = DjangoUserDirectory()
        diretorio.listar_com_capacidade(Capacidade.RECEBER_ESCALONAMENTO)
    """

    def __init__(self, grupos_por_capacidade: Optional[Mapping[str, Iterable[str]]] = None):
        mapa = grupos_por_capacidade
        if mapa is None:
            mapa = getattr(settings, 'HELPDESK_CAPABILITY_GROUPS', {})
        self._grupos: Dict[str, FrozenSet[str]] = {
            capacidade: frozenset(grupos) for capacidade, grupos in mapa.items()
        }

    def _papeis_para(self, capacidade: Capacidade) -> FrozenSet[str]:
        return self._grupos.get(capacidade.value, frozenset())

    def _filtro(self, capacidade: Capacidade) -> Optional[Q]:
        papeis = self._papeis_para(capacidade)
        if not papeis:
            return None
        filtro = Q(groups__name__in=papeis)
        if PAPEL_SUPERUSUARIO in papeis:
            filtro |= Q(is_superuser=True)
        return filtro

    @staticmethod
    def _buscar(usuario_id: str):
        User = get_user_model()
        if not str(usuario_id).isdigit():
            return None
        return User.objects.filter(pk=int(usuario_id), is_active=True).first()

    def obter(self, usuario_id: str) -> Optional[UsuarioInfo]:
        user = self._buscar(usuario_id)
        return _usuario_info(user) if user else None

    def possui_capacidade(self, usuario_id: str, capacidade: Capacidade) -> bool:
        user = self._buscar(usuario_id)
        if user is None:
            return False
        return bool(papeis_do_usuario(user) & self._papeis_para(capacidade))

    def listar_com_capacidade(self, capacidade: Capacidade) -> List[UsuarioInfo]:
        filtro = self._filtro(capacidade)
        if filtro is None:
            logger.warning(f"[AUTHZ] Nenhum grupo configurado para {capacidade.value}")
            return []
        User = get_user_model()
        usuarios = (
            User.objects
            .filter(filtro, is_active=True)
            .distinct()
            .order_by('pk')
        )
        return [_usuario_info(user) for user in usuarios]
