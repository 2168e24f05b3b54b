"""
Django Models para notificações in-app.

A constraint única sobre (ticket, evento, destinatário, tipo) torna a
criação idempotente mesmo com workers concorrentes entregando o
mesmo evento.
"""

from django.db import models
from django.utils import timezone


class NotificationTypeChoices(models.TextChoices):
    """Choices para tipo de notificação (espelha NotificationType do Core)."""
    TICKET_CRIADO = 'ticket_created', 'Ticket criado'
    NOVO_TICKET = 'new_ticket', 'Novo ticket'
    TICKET_ATRIBUIDO = 'ticket_assigned', 'Ticket atribuído'
    STATUS_ALTERADO = 'ticket_status_changed', 'Status alterado'
    TICKET_RESOLVIDO = 'ticket_resolved', 'Ticket resolvido'
    SLA_ESCALONADO = 'sla_escalated', 'SLA escalonado'


class NotificationModel(models.Model):
    """Notificação entregue a um usuário."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)

    destinatario_id = models.CharField(max_length=100, db_index=True)
    ticket_id = models.CharField(max_length=36, db_index=True)

    titulo = models.CharField(max_length=200)
    mensagem = models.TextField()

    tipo = models.CharField(
        max_length=30,
        choices=NotificationTypeChoices.choices,
    )

    chave_evento = models.CharField(
        max_length=64,
        help_text="ID do evento de domínio de origem"
    )

    criado_em = models.DateTimeField(default=timezone.now, db_index=True)
    lida = models.BooleanField(default=False)

    class Meta:
        db_table = 'notifications'
        verbose_name = 'Notificação'
        verbose_name_plural = 'Notificações'
        ordering = ['-criado_em']
        constraints = [
            models.UniqueConstraint(
                fields=['ticket_id', 'chave_evento', 'destinatario_id', 'tipo'],
                name='notificacao_unica_por_evento',
            ),
        ]
        indexes = [
            models.Index(fields=['destinatario_id', 'lida'], name='notificatio_destina_4a8b2c_idx'),
        ]

    def __str__(self):
        return f"{self.tipo} -> {self.destinatario_id}: {self.titulo}"
