"""
Django Admin para notificações (somente leitura do conteúdo).
"""

from django.contrib import admin

from .models import NotificationModel


@admin.register(NotificationModel)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['titulo', 'tipo', 'destinatario_id', 'ticket_id', 'lida', 'criado_em']
    list_filter = ['tipo', 'lida']
    search_fields = ['titulo', 'destinatario_id', 'ticket_id']
    readonly_fields = [
        'id', 'destinatario_id', 'ticket_id', 'titulo', 'mensagem',
        'tipo', 'chave_evento', 'criado_em',
    ]
    ordering = ['-criado_em']
