"""
Migration inicial para notificações in-app.
"""

from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='NotificationModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('destinatario_id', models.CharField(max_length=100, db_index=True)),
                ('ticket_id', models.CharField(max_length=36, db_index=True)),
                ('titulo', models.CharField(max_length=200)),
                ('mensagem', models.TextField()),
                ('tipo', models.CharField(
                    max_length=30,
                    choices=[
                        ('ticket_created', 'Ticket criado'),
                        ('new_ticket', 'Novo ticket'),
                        ('ticket_assigned', 'Ticket atribuído'),
                        ('ticket_status_changed', 'Status alterado'),
                        ('ticket_resolved', 'Ticket resolvido'),
                        ('sla_escalated', 'SLA escalonado'),
                    ],
                )),
                ('chave_evento', models.CharField(max_length=64, help_text='ID do evento de domínio de origem')),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now, db_index=True)),
                ('lida', models.BooleanField(default=False)),
            ],
            options={
                'verbose_name': 'Notificação',
                'verbose_name_plural': 'Notificações',
                'db_table': 'notifications',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.AddConstraint(
            model_name='notificationmodel',
            constraint=models.UniqueConstraint(
                fields=('ticket_id', 'chave_evento', 'destinatario_id', 'tipo'),
                name='notificacao_unica_por_evento',
            ),
        ),
        migrations.AddIndex(
            model_name='notificationmodel',
            index=models.Index(fields=['destinatario_id', 'lida'], name='notificatio_destina_4a8b2c_idx'),
        ),
    ]
