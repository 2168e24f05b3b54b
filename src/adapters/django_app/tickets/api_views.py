"""
API Views JSON para os domínios de Tickets e SLA.

Endpoints:
- GET /tickets/api/ - Listar tickets
- POST /tickets/api/ - Criar ticket
- GET /tickets/api/<id>/ - Obter ticket
- POST /tickets/api/<id>/status/ - Alterar status
- POST /tickets/api/<id>/atribuir/ - Atribuir ticket
- POST /tickets/api/<id>/prioridade/ - Alterar prioridade
- POST /tickets/api/sla/verificar/ - Disparar verificação de SLA
- GET/POST /tickets/api/sla/politicas/ - Listar/criar políticas
- PATCH/DELETE /tickets/api/sla/politicas/<id>/ - Atualizar/remover política

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}
"""

import logging

from django.http import HttpRequest, JsonResponse

from src.adapters.django_app.shared.api import BaseAPIView, json_response
from src.core.shared.exceptions import ValidationError
from src.core.sla.dtos import AtualizarPoliticaSLAInputDTO, CriarPoliticaSLAInputDTO
from src.core.tickets.dtos import (
    AlterarPrioridadeInputDTO,
    AlterarStatusInputDTO,
    AtribuirTicketInputDTO,
    CriarTicketInputDTO,
)

logger = logging.getLogger(__name__)


def _obrigatorio(data: dict, campo: str):
    if data.get(campo) in (None, ''):
        raise ValidationError(f"{campo} é obrigatório", field=campo)
    return data[campo]


def _booleano(data: dict, campo: str, padrao=None):
    """Campo booleano JSON (true/false); strings e números são rejeitados."""
    valor = data.get(campo, padrao)
    if valor is not None and not isinstance(valor, bool):
        raise ValidationError(f"{campo} deve ser true ou false", field=campo)
    return valor


# =============================================================================
# Tickets
# =============================================================================

class TicketAPIListView(BaseAPIView):
    """
    GET /tickets/api/ - Lista tickets
    POST /tickets/api/ - Cria ticket
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """
        Lista tickets com filtros opcionais.

        Query params:
        - status, criador_id, tecnico_id
        - page / per_page (default: 1 / 20)
        """
        try:
            tickets = self.get_service('listar_tickets_service').execute(
                status=request.GET.get('status') or None,
                criador_id=request.GET.get('criador_id') or None,
                tecnico_id=request.GET.get('tecnico_id') or None,
            )

            try:
                page = max(1, int(request.GET.get('page', 1)))
                per_page = max(1, int(request.GET.get('per_page', 20)))
            except ValueError:
                raise ValidationError("Paginação inválida", field="page")

            total = len(tickets)
            start = (page - 1) * per_page
            paginated = tickets[start:start + per_page]

            return json_response(
                success=True,
                data=[t.to_dict() for t in paginated],
                meta={
                    'total': total,
                    'page': page,
                    'per_page': per_page,
                    'total_pages': (total + per_page - 1) // per_page,
                }
            )

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Cria novo ticket. O criador é sempre o usuário autenticado.

        Body JSON:
        {
            "titulo": "string (obrigatório)",
            "descricao": "string (obrigatório)",
            "prioridade": "low|medium|high|urgent (opcional)",
            "categoria": "string (opcional)",
            "tags": ["string"] (opcional)
        }
        """
        try:
            data = self.parse_body(request)
            ator = self.get_ator(request)

            input_dto = CriarTicketInputDTO(
                titulo=data.get('titulo', ''),
                descricao=data.get('descricao', ''),
                criador_id=ator.id,
                prioridade=data.get('prioridade', 'MEDIA'),
                categoria=data.get('categoria', 'Geral'),
                tags=tuple(data.get('tags', ())),
            )

            output = self.get_service('criar_ticket_service').execute(input_dto)

            logger.info(f"API: Ticket criado: {output.id}")

            return json_response(success=True, data=output.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class TicketAPIDetailView(BaseAPIView):
    """GET /tickets/api/<id>/"""

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            ticket = self.get_service('obter_ticket_service').execute(pk)
            return json_response(success=True, data=ticket.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class TicketAPIStatusView(BaseAPIView):
    """
    POST /tickets/api/<id>/status/

    Body JSON: {"status": "open|in_progress|resolved|closed"}
    """

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)
            input_dto = AlterarStatusInputDTO(
                ticket_id=pk,
                novo_status=_obrigatorio(data, 'status'),
            )
            output = self.get_service('alterar_status_service').execute(
                input_dto, self.get_ator(request)
            )
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class TicketAPIAtribuirView(BaseAPIView):
    """
    POST /tickets/api/<id>/atribuir/

    Body JSON: {"tecnico_id": "string (obrigatório)"}
    """

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)
            input_dto = AtribuirTicketInputDTO(
                ticket_id=pk,
                tecnico_id=str(_obrigatorio(data, 'tecnico_id')),
            )
            output = self.get_service('atribuir_ticket_service').execute(
                input_dto, self.get_ator(request)
            )

            logger.info(f"API: Ticket {pk} atribuído a {input_dto.tecnico_id}")

            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class TicketAPIPrioridadeView(BaseAPIView):
    """
    POST /tickets/api/<id>/prioridade/

    Body JSON: {"prioridade": "low|medium|high|urgent"}
    """

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)
            input_dto = AlterarPrioridadeInputDTO(
                ticket_id=pk,
                nova_prioridade=_obrigatorio(data, 'prioridade'),
            )
            output = self.get_service('alterar_prioridade_service').execute(
                input_dto, self.get_ator(request)
            )
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


# =============================================================================
# SLA
# =============================================================================

class SLAVerificarAPIView(BaseAPIView):
    """
    POST /tickets/api/sla/verificar/

    Executa uma varredura imediatamente e devolve o relatório.
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            relatorio = self.get_service('verificar_sla_service').execute(
                ator=self.get_ator(request)
            )
            return json_response(success=True, data=relatorio.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class SLAPoliticaListAPIView(BaseAPIView):
    """
    GET /tickets/api/sla/politicas/ (query: ativas=1)
    POST /tickets/api/sla/politicas/
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            politicas = self.get_service('listar_politicas_sla_service').execute(
                ator=self.get_ator(request),
                apenas_ativas=request.GET.get('ativas') in ('1', 'true', 'True'),
            )
            return json_response(success=True, data=[p.to_dict() for p in politicas])
        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "nome": "string",
            "prioridade": "low|medium|high|urgent",
            "horas_resposta": int,
            "horas_resolucao": int,
            "ativa": bool (opcional)
        }
        """
        try:
            data = self.parse_body(request)
            input_dto = CriarPoliticaSLAInputDTO(
                nome=data.get('nome', ''),
                prioridade=_obrigatorio(data, 'prioridade'),
                horas_resposta=data.get('horas_resposta'),
                horas_resolucao=data.get('horas_resolucao'),
                ativa=_booleano(data, 'ativa', True),
            )
            output = self.get_service('criar_politica_sla_service').execute(
                input_dto, self.get_ator(request)
            )
            return json_response(success=True, data=output.to_dict(), status=201)
        except Exception as e:
            return self.handle_exception(e)


class SLAPoliticaDetailAPIView(BaseAPIView):
    """
    PATCH /tickets/api/sla/politicas/<id>/
    DELETE /tickets/api/sla/politicas/<id>/
    """

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)
            input_dto = AtualizarPoliticaSLAInputDTO(
                politica_id=pk,
                nome=data.get('nome'),
                prioridade=data.get('prioridade'),
                horas_resposta=data.get('horas_resposta'),
                horas_resolucao=data.get('horas_resolucao'),
                ativa=_booleano(data, 'ativa'),
            )
            output = self.get_service('atualizar_politica_sla_service').execute(
                input_dto, self.get_ator(request)
            )
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            self.get_service('remover_politica_sla_service').execute(
                pk, self.get_ator(request)
            )
            return json_response(success=True, data={'id': pk})
        except Exception as e:
            return self.handle_exception(e)
