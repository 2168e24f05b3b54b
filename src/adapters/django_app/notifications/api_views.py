"""
API JSON da caixa de notificações do usuário autenticado.

Endpoints:
- GET /notificacoes/api/ - Listar (query: nao_lidas=1)
- POST /notificacoes/api/<id>/lida/ - Marcar como lida
"""

import logging

from django.http import HttpRequest, JsonResponse

from src.adapters.django_app.shared.api import BaseAPIView, json_response

logger = logging.getLogger(__name__)


class NotificacaoAPIListView(BaseAPIView):

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            apenas_nao_lidas = request.GET.get('nao_lidas') in ('1', 'true', 'True')
            notificacoes = self.get_service('listar_notificacoes_service').execute(
                ator=self.get_ator(request),
                apenas_nao_lidas=apenas_nao_lidas,
            )
            return json_response(
                success=True,
                data=[n.to_dict() for n in notificacoes],
                meta={'total': len(notificacoes)},
            )
        except Exception as e:
            return self.handle_exception(e)


class NotificacaoAPILidaView(BaseAPIView):

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            notificacao = self.get_service('marcar_notificacao_lida_service').execute(
                notificacao_id=pk,
                ator=self.get_ator(request),
            )
            return json_response(success=True, data=notificacao.to_dict())
        except Exception as e:
            return self.handle_exception(e)
