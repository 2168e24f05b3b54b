"""
Django Models para o domínio de Tickets e SLA.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/tickets e src/core/sla.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Tabelas:
- SLAPolicyModel: Catálogo de políticas (uma ativa por prioridade)
- TicketModel: Tickets com snapshot de SLA e versão
"""

from django.db import models
from django.db.models import Q
from django.utils import timezone


class TicketStatusChoices(models.TextChoices):
    """Choices para status de ticket (espelha TicketStatus do Core)."""
    ABERTO = 'Aberto', 'Aberto'
    EM_PROGRESSO = 'Em Progresso', 'Em Progresso'
    RESOLVIDO = 'Resolvido', 'Resolvido'
    FECHADO = 'Fechado', 'Fechado'


class TicketPriorityChoices(models.TextChoices):
    """Choices para prioridade (espelha TicketPriority do Core)."""
    BAIXA = 'Baixa', 'Baixa'
    MEDIA = 'Média', 'Média'
    ALTA = 'Alta', 'Alta'
    URGENTE = 'Urgente', 'Urgente'


class SLAPolicyModel(models.Model):
    """
    Model Django para políticas de SLA.

    A constraint parcial garante no banco no máximo uma política
    ativa por prioridade.
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID da política"
    )

    nome = models.CharField(max_length=100)

    prioridade = models.CharField(
        max_length=20,
        choices=TicketPriorityChoices.choices,
        db_index=True,
        help_text="Prioridade à qual a política se aplica"
    )

    horas_resposta = models.PositiveIntegerField(
        help_text="Orçamento para primeira resposta (horas)"
    )

    horas_resolucao = models.PositiveIntegerField(
        help_text="Orçamento para resolução (horas)"
    )

    ativa = models.BooleanField(default=True, db_index=True)

    criado_em = models.DateTimeField(default=timezone.now)
    atualizado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'sla_policies'
        verbose_name = 'Política de SLA'
        verbose_name_plural = 'Políticas de SLA'
        ordering = ['prioridade', 'nome']
        constraints = [
            models.UniqueConstraint(
                fields=['prioridade'],
                condition=Q(ativa=True),
                name='uma_politica_ativa_por_prioridade',
            ),
        ]

    def __str__(self):
        return f"{self.nome} ({self.prioridade}: {self.horas_resposta}h/{self.horas_resolucao}h)"


class TicketModel(models.Model):
    """
    Model Django para persistência de Tickets.

    Este model é um ADAPTER que persiste dados do TicketEntity.
    NÃO contém lógica de negócio - apenas estrutura de dados.

    Fields:
        id: UUID como primary key (gerado pela Entity)
        titulo / descricao / categoria: Dados descritivos
        status / prioridade: Estado atual (choices)
        criador_id / atribuido_a_id: IDs de usuários
        criado_em / atualizado_em: Timestamps
        sla_politica: Política vinculada (PROTECT impede remoção)
        sla_horas_resposta / sla_horas_resolucao / sla_nome: Snapshot congelado
        sla_prazo: Prazo de resolução
        resolvido_em: Primeira entrada em RESOLVIDO
        escalonado_em: Último escalonamento automático
        alertas_maximo: Tipos de violação já notificados em URGENTE (JSONField)
        versao: Versão para escrita condicional
        tags: Lista de tags (JSONField)
    """

    # Primary Key - UUID gerado pela Entity
    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único do ticket"
    )

    # Dados principais
    titulo = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Título descritivo do ticket"
    )

    descricao = models.TextField(
        help_text="Descrição detalhada do problema"
    )

    categoria = models.CharField(
        max_length=100,
        default='Geral',
        db_index=True,
        help_text="Categoria do ticket"
    )

    # Estado
    status = models.CharField(
        max_length=50,
        choices=TicketStatusChoices.choices,
        default=TicketStatusChoices.ABERTO,
        db_index=True,
        help_text="Estado atual do ticket"
    )

    prioridade = models.CharField(
        max_length=20,
        choices=TicketPriorityChoices.choices,
        default=TicketPriorityChoices.MEDIA,
        db_index=True,
        help_text="Nível de prioridade"
    )

    # Relacionamentos (strings para flexibilidade de integração)
    criador_id = models.CharField(
        max_length=100,
        db_index=True,
        help_text="ID do usuário criador"
    )

    atribuido_a_id = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID do técnico responsável"
    )

    # Timestamps
    criado_em = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="Data/hora de criação"
    )

    atualizado_em = models.DateTimeField(
        default=timezone.now,
        help_text="Data/hora da última atualização"
    )

    # SLA
    sla_politica = models.ForeignKey(
        SLAPolicyModel,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='tickets',
        help_text="Política vinculada na criação"
    )

    sla_nome = models.CharField(max_length=100, blank=True, default='')
    sla_horas_resposta = models.PositiveIntegerField(null=True, blank=True)
    sla_horas_resolucao = models.PositiveIntegerField(null=True, blank=True)

    sla_prazo = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Prazo máximo para resolução"
    )

    resolvido_em = models.DateTimeField(null=True, blank=True)
    escalonado_em = models.DateTimeField(null=True, blank=True)
    alertas_maximo = models.JSONField(
        default=list,
        blank=True,
        help_text="Tipos de violação já notificados em URGENTE"
    )

    # Concorrência otimista
    versao = models.PositiveIntegerField(default=1)

    # Metadata
    tags = models.JSONField(
        default=list,
        blank=True,
        help_text="Lista de tags para categorização"
    )

    class Meta:
        db_table = 'tickets'
        verbose_name = 'Ticket'
        verbose_name_plural = 'Tickets'
        ordering = ['-criado_em']
        indexes = [
            # Índices compostos para queries frequentes
            models.Index(fields=['status', 'criado_em'], name='tickets_status_6f1a2b_idx'),
            models.Index(fields=['atribuido_a_id', 'status'], name='tickets_atribui_3c9d4e_idx'),
            models.Index(fields=['prioridade', 'sla_prazo'], name='tickets_priorid_8e2f7a_idx'),
            models.Index(fields=['criador_id', 'criado_em'], name='tickets_criador_5b7c1d_idx'),
        ]

    def __str__(self):
        return f"[{self.id[:8]}] {self.titulo}"

    def __repr__(self):
        return f"<TicketModel id={self.id[:8]} status={self.status} v{self.versao}>"
