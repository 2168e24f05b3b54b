"""
Exceções de Domínio do Helpdesk SLA.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (validação de entrada)
    ├── EntityNotFoundError (entidade não existe)
    ├── PermissionDeniedError (ator sem permissão para a ação)
    ├── BusinessRuleViolationError (regra de negócio violada)
    ├── ConcurrencyError (escrita condicional falhou)
    └── DeliveryFailureError (canal externo de entrega falhou)

Recuperação:
    - ConcurrencyError é re-tentada internamente (ver shared.retry)
    - DeliveryFailureError nunca é propagada ao chamador da operação
    - As demais são devolvidas ao chamador sem alteração
"""

from typing import Optional


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            ticket.alterar_status(TicketStatus.FECHADO, agora)
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada quando dados fornecidos não atendem aos requisitos
    mínimos para processamento (ex: prioridade desconhecida).

    Example:
        if horas_resposta <= 0:
            raise ValidationError("Horas de resposta devem ser positivas",
                                  field="horas_resposta")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Lançada quando uma busca por ID não retorna resultado.

    Example:
        ticket = repo.get_by_id(ticket_id)
        if not ticket:
            raise EntityNotFoundError(f"Ticket {ticket_id} não encontrado")
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class PermissionDeniedError(DomainException):
    """
    Ator não tem permissão para executar a ação.

    Resultado terminal: nunca é re-tentada pelo motor.

    Example:
        if not authz.pode_executar(ator, Acao.ATRIBUIR_TICKET, ticket):
            raise PermissionDeniedError(
                "Sem permissão para atribuir tickets",
                acao="atribuir_ticket",
                ator_id=ator.id,
            )
    """

    def __init__(self, message: str, acao: str = None, ator_id: str = None):
        self.acao = acao
        self.ator_id = ator_id
        super().__init__(message, "PERMISSION_DENIED")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.acao:
            result["acao"] = self.acao
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Lançada quando uma operação viola uma regra de negócio
    estabelecida no domínio.

    Example:
        if ticket.status == TicketStatus.FECHADO:
            raise BusinessRuleViolationError(
                "Não é possível atribuir ticket fechado"
            )
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class ConcurrencyError(DomainException):
    """
    Erro de concorrência/conflito de versão.

    Lançada quando a escrita condicional de uma entidade falha
    porque outro processo a modificou depois da leitura. O chamador
    deve repetir o ciclo ler-decidir-escrever.

    Example:
        if entity.versao != versao_persistida:
            raise ConcurrencyError(
                "Entidade foi modificada por outro processo",
                entity_id=entity.id,
                versao_esperada=entity.versao,
            )
    """

    def __init__(
        self,
        message: str,
        entity_id: Optional[str] = None,
        versao_esperada: Optional[int] = None,
    ):
        self.entity_id = entity_id
        self.versao_esperada = versao_esperada
        super().__init__(message, "CONCURRENCY_ERROR")


class DeliveryFailureError(DomainException):
    """
    Falha no canal externo de entrega de notificações.

    Não fatal: o dispatcher registra em log e segue adiante.
    """

    def __init__(
        self,
        message: str,
        canal: Optional[str] = None,
        destinatario_id: Optional[str] = None,
    ):
        self.canal = canal
        self.destinatario_id = destinatario_id
        super().__init__(message, "DELIVERY_FAILURE")
