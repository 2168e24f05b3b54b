"""
URL Configuration para o Helpdesk SLA.

Estrutura:
- /admin/ - Django Admin
- /tickets/ - API de Tickets e SLA
- /notificacoes/ - Caixa de notificações
- /health/ - Health check
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path

from src.adapters.django_app.shared.database import verificar_conexao


def health(request):
    banco = verificar_conexao()
    return JsonResponse(
        {'status': 'ok' if banco['healthy'] else 'degraded', 'database': banco},
        status=200 if banco['healthy'] else 503,
    )


urlpatterns = [
    path('admin/', admin.site.urls),
    path('tickets/', include('src.adapters.django_app.tickets.urls')),
    path('notificacoes/', include('src.adapters.django_app.notifications.urls')),
    path('health/', health, name='health'),
]
