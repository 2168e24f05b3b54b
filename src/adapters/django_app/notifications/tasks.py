"""
Tarefas Celery de entrega de notificações (fila `notifications`).
"""

from smtplib import SMTPException
import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=120, acks_late=True)
def enviar_email(self, email: str, assunto: str, corpo: str) -> None:
    """
    Envia e-mail de notificação.

    Falhas de SMTP são re-tentadas pelo Celery; esgotadas as
    tentativas, o erro fica apenas no log do worker.

    Args:
        email: Endereço do destinatário
        assunto: Linha de assunto
        corpo: Texto da mensagem
    """
    try:
        send_mail(
            assunto,
            corpo,
            settings.DEFAULT_FROM_EMAIL,
            [email],
            fail_silently=False,
        )
        logger.info(f"[NOTIFICATION] E-mail enviado para {email}: {assunto}")
    except (SMTPException, OSError) as e:
        logger.warning(f"[NOTIFICATION] Falha ao enviar e-mail para {email}: {e}")
        raise self.retry(exc=e)
