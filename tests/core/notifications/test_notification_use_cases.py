"""
Testes da caixa de notificações.
"""

from datetime import timedelta

import pytest

from src.core.notifications.entities import NotificationEntity, NotificationType
from src.core.notifications.use_cases import (
    ListarNotificacoesService,
    MarcarNotificacaoLidaService,
)
from src.core.shared.exceptions import EntityNotFoundError, PermissionDeniedError


@pytest.fixture
def notificacoes(notification_repo, inicio):
    """Duas notificações para user-1 e uma para user-2."""
    criadas = []
    for i, destinatario in enumerate(("user-1", "user-1", "user-2")):
        notificacao = NotificationEntity.criar(
            destinatario_id=destinatario,
            ticket_id="t-1",
            titulo=f"Aviso {i}",
            mensagem="Ticket atualizado",
            tipo=NotificationType.STATUS_ALTERADO,
            chave_evento=f"evt-{i}",
            criado_em=inicio + timedelta(minutes=i),
        )
        notification_repo.adicionar_se_ausente(notificacao)
        criadas.append(notificacao)
    return criadas


class TestListar:

    def test_apenas_do_ator_mais_recentes_primeiro(self, notification_repo, notificacoes, usuario):
        saida = ListarNotificacoesService(notification_repo).execute(usuario)
        assert [n.titulo for n in saida] == ["Aviso 1", "Aviso 0"]

    def test_apenas_nao_lidas(self, notification_repo, notificacoes, usuario, uow):
        MarcarNotificacaoLidaService(notification_repo, uow).execute(notificacoes[0].id, usuario)

        saida = ListarNotificacoesService(notification_repo).execute(usuario, apenas_nao_lidas=True)
        assert [n.id for n in saida] == [notificacoes[1].id]


class TestMarcarLida:

    def test_destinatario_marca(self, notification_repo, notificacoes, usuario, uow):
        saida = MarcarNotificacaoLidaService(notification_repo, uow).execute(
            notificacoes[0].id, usuario
        )
        assert saida.lida is True
        assert notification_repo.get_by_id(notificacoes[0].id).lida is True

    def test_marcar_de_novo_e_noop(self, notification_repo, notificacoes, usuario, uow):
        service = MarcarNotificacaoLidaService(notification_repo, uow)
        service.execute(notificacoes[0].id, usuario)
        assert service.execute(notificacoes[0].id, usuario).lida is True

    def test_outro_usuario_negado(self, notification_repo, notificacoes, usuario, uow):
        with pytest.raises(PermissionDeniedError):
            MarcarNotificacaoLidaService(notification_repo, uow).execute(
                notificacoes[2].id, usuario
            )
        assert notification_repo.get_by_id(notificacoes[2].id).lida is False

    def test_inexistente(self, notification_repo, usuario, uow):
        with pytest.raises(EntityNotFoundError):
            MarcarNotificacaoLidaService(notification_repo, uow).execute("nada", usuario)
