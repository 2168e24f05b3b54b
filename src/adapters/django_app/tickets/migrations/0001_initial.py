"""
Migration inicial para os domínios de Tickets e SLA.

Cria as tabelas:
- sla_policies: Catálogo de políticas (uma ativa por prioridade)
- tickets: Tickets com snapshot de SLA e versão
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


PRIORIDADES = [
    ('Baixa', 'Baixa'),
    ('Média', 'Média'),
    ('Alta', 'Alta'),
    ('Urgente', 'Urgente'),
]


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: sla_policies
        # =================================================================
        migrations.CreateModel(
            name='SLAPolicyModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID da política'
                )),
                ('nome', models.CharField(max_length=100)),
                ('prioridade', models.CharField(
                    max_length=20,
                    choices=PRIORIDADES,
                    db_index=True,
                    help_text='Prioridade à qual a política se aplica'
                )),
                ('horas_resposta', models.PositiveIntegerField(
                    help_text='Orçamento para primeira resposta (horas)'
                )),
                ('horas_resolucao', models.PositiveIntegerField(
                    help_text='Orçamento para resolução (horas)'
                )),
                ('ativa', models.BooleanField(default=True, db_index=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('atualizado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Política de SLA',
                'verbose_name_plural': 'Políticas de SLA',
                'db_table': 'sla_policies',
                'ordering': ['prioridade', 'nome'],
            },
        ),
        migrations.AddConstraint(
            model_name='slapolicymodel',
            constraint=models.UniqueConstraint(
                condition=models.Q(ativa=True),
                fields=('prioridade',),
                name='uma_politica_ativa_por_prioridade',
            ),
        ),

        # =================================================================
        # Tabela: tickets
        # =================================================================
        migrations.CreateModel(
            name='TicketModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único do ticket'
                )),
                ('titulo', models.CharField(
                    max_length=200,
                    db_index=True,
                    help_text='Título descritivo do ticket'
                )),
                ('descricao', models.TextField(
                    help_text='Descrição detalhada do problema'
                )),
                ('categoria', models.CharField(
                    max_length=100,
                    default='Geral',
                    db_index=True,
                    help_text='Categoria do ticket'
                )),
                ('status', models.CharField(
                    max_length=50,
                    choices=[
                        ('Aberto', 'Aberto'),
                        ('Em Progresso', 'Em Progresso'),
                        ('Resolvido', 'Resolvido'),
                        ('Fechado', 'Fechado'),
                    ],
                    default='Aberto',
                    db_index=True,
                    help_text='Estado atual do ticket'
                )),
                ('prioridade', models.CharField(
                    max_length=20,
                    choices=PRIORIDADES,
                    default='Média',
                    db_index=True,
                    help_text='Nível de prioridade'
                )),
                ('criador_id', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='ID do usuário criador'
                )),
                ('atribuido_a_id', models.CharField(
                    max_length=100,
                    null=True,
                    blank=True,
                    db_index=True,
                    help_text='ID do técnico responsável'
                )),
                ('criado_em', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True,
                    help_text='Data/hora de criação'
                )),
                ('atualizado_em', models.DateTimeField(
                    default=django.utils.timezone.now,
                    help_text='Data/hora da última atualização'
                )),
                ('sla_politica', models.ForeignKey(
                    null=True,
                    blank=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='tickets',
                    to='tickets.slapolicymodel',
                    help_text='Política vinculada na criação'
                )),
                ('sla_nome', models.CharField(max_length=100, blank=True, default='')),
                ('sla_horas_resposta', models.PositiveIntegerField(null=True, blank=True)),
                ('sla_horas_resolucao', models.PositiveIntegerField(null=True, blank=True)),
                ('sla_prazo', models.DateTimeField(
                    null=True,
                    blank=True,
                    db_index=True,
                    help_text='Prazo máximo para resolução'
                )),
                ('resolvido_em', models.DateTimeField(null=True, blank=True)),
                ('escalonado_em', models.DateTimeField(null=True, blank=True)),
                ('alertas_maximo', models.JSONField(
                    default=list,
                    blank=True,
                    help_text='Tipos de violação já notificados em URGENTE'
                )),
                ('versao', models.PositiveIntegerField(default=1)),
                ('tags', models.JSONField(
                    default=list,
                    blank=True,
                    help_text='Lista de tags para categorização'
                )),
            ],
            options={
                'verbose_name': 'Ticket',
                'verbose_name_plural': 'Tickets',
                'db_table': 'tickets',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['status', 'criado_em'], name='tickets_status_6f1a2b_idx'),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['atribuido_a_id', 'status'], name='tickets_atribui_3c9d4e_idx'),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['prioridade', 'sla_prazo'], name='tickets_priorid_8e2f7a_idx'),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['criador_id', 'criado_em'], name='tickets_criador_5b7c1d_idx'),
        ),
    ]
