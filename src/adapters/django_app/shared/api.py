"""
Base para as APIs JSON.

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}

Mapeamento de erros de domínio:
- ValidationError -> 400
- PermissionDeniedError -> 403
- EntityNotFoundError -> 404
- ConcurrencyError -> 409
- BusinessRuleViolationError -> 422
"""

from typing import Any, Dict
import json
import logging

from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from src.adapters.django_app.accounts.directory import ator_from_request
from src.core.shared.authorization import Ator
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConcurrencyError,
    DomainException,
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def json_response(success: bool, data: Any = None, error: Any = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem (ou payload) de erro
        status: HTTP status code
        meta: Metadados adicionais
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValidationError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValidationError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValidationError("Corpo deve ser um objeto JSON")
    return data


_STATUS_POR_EXCECAO = (
    (ValidationError, 400),
    (PermissionDeniedError, 403),
    (EntityNotFoundError, 404),
    (ConcurrencyError, 409),
    (BusinessRuleViolationError, 422),
)


@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Acesso ao container DI
    - Resolução do Ator da requisição
    - Tratamento de erros padronizado
    """

    def get_container(self):
        from src.config.container import get_container
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container."""
        return getattr(self.get_container(), service_name)()

    def get_ator(self, request: HttpRequest) -> Ator:
        return ator_from_request(request)

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Converte exceção em resposta JSON.

        Erros inesperados viram 500 e são registrados com traceback.
        """
        if isinstance(e, DomainException):
            for tipo, status in _STATUS_POR_EXCECAO:
                if isinstance(e, tipo):
                    return json_response(success=False, error=e.to_dict(), status=status)
            return json_response(success=False, error=e.to_dict(), status=400)

        logger.exception(f"Erro inesperado na API: {e}")
        return json_response(
            success=False,
            error={'error': 'INTERNAL_ERROR', 'message': "Erro interno do servidor"},
            status=500,
        )
