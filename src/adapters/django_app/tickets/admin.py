"""
Django Admin para os domínios de Tickets e SLA.

Campos controlados pelo motor de SLA (snapshot, marcadores, versão)
são somente leitura: alterações manuais passariam ao largo da
escrita condicional.
"""

import uuid

from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from .models import SLAPolicyModel, TicketModel


def _badge(cor: str, texto: str):
    return format_html(
        '<span style="background-color: {}; color: white; padding: 3px 8px; '
        'border-radius: 3px; font-size: 11px;">{}</span>',
        cor,
        texto
    )


def _texto(cor: str, texto: str):
    return format_html('<span style="color: {};">{}</span>', cor, texto)


@admin.register(SLAPolicyModel)
class SLAPolicyAdmin(admin.ModelAdmin):
    """Admin para o catálogo de políticas."""

    list_display = ['nome', 'prioridade', 'horas_resposta', 'horas_resolucao', 'ativa', 'atualizado_em']
    list_filter = ['prioridade', 'ativa']
    search_fields = ['nome']
    readonly_fields = ['id', 'criado_em', 'atualizado_em']
    ordering = ['prioridade', 'nome']

    def save_model(self, request, obj, form, change):
        if not obj.id:
            obj.id = str(uuid.uuid4())
        obj.atualizado_em = timezone.now()
        super().save_model(request, obj, form, change)


@admin.register(TicketModel)
class TicketAdmin(admin.ModelAdmin):
    """Admin para TicketModel."""

    list_display = [
        'id_curto',
        'titulo',
        'status_badge',
        'prioridade_badge',
        'criador_id',
        'atribuido_a_id',
        'criado_em',
        'sla_status',
    ]

    list_filter = [
        'status',
        'prioridade',
        'categoria',
        'criado_em',
    ]

    search_fields = [
        'id',
        'titulo',
        'descricao',
        'criador_id',
        'atribuido_a_id',
    ]

    readonly_fields = [
        'id',
        'status',
        'prioridade',
        'atribuido_a_id',
        'criado_em',
        'atualizado_em',
        'sla_politica',
        'sla_nome',
        'sla_horas_resposta',
        'sla_horas_resolucao',
        'sla_prazo',
        'resolvido_em',
        'escalonado_em',
        'alertas_maximo',
        'versao',
    ]

    fieldsets = [
        ('Identificação', {
            'fields': ['id', 'titulo', 'descricao', 'categoria', 'tags'],
        }),
        ('Status', {
            'fields': ['status', 'prioridade', 'resolvido_em'],
        }),
        ('Responsáveis', {
            'fields': ['criador_id', 'atribuido_a_id'],
        }),
        ('SLA', {
            'fields': [
                'sla_politica', 'sla_nome', 'sla_horas_resposta',
                'sla_horas_resolucao', 'sla_prazo', 'escalonado_em',
                'alertas_maximo',
            ],
        }),
        ('Controle', {
            'fields': ['versao', 'criado_em', 'atualizado_em'],
            'classes': ['collapse'],
        }),
    ]

    ordering = ['-criado_em']

    date_hierarchy = 'criado_em'

    def id_curto(self, obj):
        """Exibe ID curto (primeiros 8 caracteres)."""
        return obj.id[:8] + '...'
    id_curto.short_description = 'ID'

    def status_badge(self, obj):
        colors = {
            'Aberto': '#17a2b8',
            'Em Progresso': '#ffc107',
            'Resolvido': '#28a745',
            'Fechado': '#343a40',
        }
        return _badge(colors.get(obj.status, '#6c757d'), obj.status)
    status_badge.short_description = 'Status'

    def prioridade_badge(self, obj):
        colors = {
            'Baixa': '#28a745',
            'Média': '#ffc107',
            'Alta': '#fd7e14',
            'Urgente': '#dc3545',
        }
        return _badge(colors.get(obj.prioridade, '#6c757d'), obj.prioridade)
    prioridade_badge.short_description = 'Prioridade'

    def sla_status(self, obj):
        """Situação do prazo de resolução."""
        if not obj.sla_prazo:
            return '-'

        if obj.resolvido_em:
            if obj.resolvido_em <= obj.sla_prazo:
                return _texto('#28a745', '✓ Resolvido no prazo')
            return _texto('#fd7e14', 'Resolvido fora do prazo')

        if obj.status == 'Fechado':
            return _texto('#343a40', 'Fechado')

        if timezone.now() > obj.sla_prazo:
            return _texto('#dc3545', '⚠ Atrasado')

        return _texto('#28a745', '✓ No prazo')
    sla_status.short_description = 'SLA'
