"""
URL patterns para os domínios de Tickets e SLA.

Endpoints API JSON:
- GET/POST /tickets/api/ - Listar/criar tickets
- POST /tickets/api/sla/verificar/ - Verificação de SLA sob demanda
- GET/POST /tickets/api/sla/politicas/ - Catálogo de políticas
- PATCH/DELETE /tickets/api/sla/politicas/<id>/ - Política
- GET /tickets/api/<id>/ - Obter ticket
- POST /tickets/api/<id>/status/ - Alterar status
- POST /tickets/api/<id>/atribuir/ - Atribuir ticket
- POST /tickets/api/<id>/prioridade/ - Alterar prioridade
"""

from django.urls import path

from . import api_views

app_name = 'tickets'

urlpatterns = [
    # Listagem e criação
    path('api/', api_views.TicketAPIListView.as_view(), name='api_list'),

    # SLA (antes do <pk> para não conflitar)
    path('api/sla/verificar/', api_views.SLAVerificarAPIView.as_view(), name='api_sla_verificar'),
    path('api/sla/politicas/', api_views.SLAPoliticaListAPIView.as_view(), name='api_sla_politicas'),
    path(
        'api/sla/politicas/<str:pk>/',
        api_views.SLAPoliticaDetailAPIView.as_view(),
        name='api_sla_politica',
    ),

    # Detalhes
    path('api/<str:pk>/', api_views.TicketAPIDetailView.as_view(), name='api_detail'),

    # Ações
    path('api/<str:pk>/status/', api_views.TicketAPIStatusView.as_view(), name='api_status'),
    path('api/<str:pk>/atribuir/', api_views.TicketAPIAtribuirView.as_view(), name='api_atribuir'),
    path('api/<str:pk>/prioridade/', api_views.TicketAPIPrioridadeView.as_view(), name='api_prioridade'),
]
