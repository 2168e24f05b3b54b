"""
Configuração do Django App para Notificações.
"""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Configuração do app Notifications."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.notifications'
    label = 'notifications'
    verbose_name = 'Notificações'
