"""
Canais externos de entrega (DeliveryChannel).

- DjangoEmailChannel: envia na hora via django.core.mail
- CeleryEmailChannel: enfileira na fila `notifications` (nunca aguarda)

Ambos traduzem falhas para DeliveryFailureError, que o
NotificationDispatcher registra sem interromper a operação.
"""

from smtplib import SMTPException
import logging

from django.conf import settings
from django.core.mail import send_mail

from src.core.notifications.entities import NotificationEntity
from src.core.shared.authorization import UsuarioInfo
from src.core.shared.exceptions import DeliveryFailureError

logger = logging.getLogger(__name__)


def _assunto(notificacao: NotificationEntity) -> str:
    prefixo = getattr(settings, 'EMAIL_SUBJECT_PREFIX', '')
    return f"{prefixo}{notificacao.titulo}"


def _exigir_email(destinatario: UsuarioInfo, canal: str) -> str:
    if not destinatario.email:
        raise DeliveryFailureError(
            f"Usuário {destinatario.id} sem e-mail cadastrado",
            canal=canal,
            destinatario_id=destinatario.id,
        )
    return destinatario.email


class DjangoEmailChannel:
    """Entrega síncrona por e-mail."""

    nome = "email"

    def enviar(self, destinatario: UsuarioInfo, notificacao: NotificationEntity) -> None:
        email = _exigir_email(destinatario, self.nome)
        try:
            send_mail(
                _assunto(notificacao),
                notificacao.mensagem,
                settings.DEFAULT_FROM_EMAIL,
                [email],
                fail_silently=False,
            )
        except (SMTPException, OSError) as e:
            raise DeliveryFailureError(
                f"Falha SMTP para {email}: {e}",
                canal=self.nome,
                destinatario_id=destinatario.id,
            )


class CeleryEmailChannel:
    """Entrega assíncrona: apenas enfileira a tarefa enviar_email."""

    nome = "email-celery"

    def enviar(self, destinatario: UsuarioInfo, notificacao: NotificationEntity) -> None:
        from .tasks import enviar_email

        email = _exigir_email(destinatario, self.nome)
        try:
            enviar_email.delay(email, _assunto(notificacao), notificacao.mensagem)
        except Exception as e:
            # Broker indisponível
            raise DeliveryFailureError(
                f"Falha ao enfileirar e-mail: {e}",
                canal=self.nome,
                destinatario_id=destinatario.id,
            )


def criar_canal_email(modo: str = "direct"):
    """
    Factory do canal de e-mail.

    Args:
        modo: "direct", "celery" ou "none" (sem canal externo)
    """
    if modo == "celery":
        return CeleryEmailChannel()
    if modo == "none":
        return None
    return DjangoEmailChannel()
