"""
URL patterns das notificações in-app.
"""

from django.urls import path

from . import api_views

app_name = 'notifications'

urlpatterns = [
    path('api/', api_views.NotificacaoAPIListView.as_view(), name='api_list'),
    path('api/<str:pk>/lida/', api_views.NotificacaoAPILidaView.as_view(), name='api_lida'),
]
