"""
Shared Domain Components.

Contém componentes compartilhados entre todos os domínios:
- Exceções de domínio
- Interfaces (Ports): UnitOfWork, EventPublisher
- Relógio injetável
- Autorização e diretório de usuários
- Base classes para Domain Events
"""

from .exceptions import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    PermissionDeniedError,
    BusinessRuleViolationError,
    ConcurrencyError,
    DeliveryFailureError,
)
from .events import DomainEvent
from .interfaces import UnitOfWork, EventPublisher
from .clock import Clock, SystemClock, FixedClock
from .authorization import (
    Acao,
    Capacidade,
    Ator,
    UsuarioInfo,
    AuthorizationService,
    UserDirectory,
)

__all__ = [
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "PermissionDeniedError",
    "BusinessRuleViolationError",
    "ConcurrencyError",
    "DeliveryFailureError",
    "DomainEvent",
    "UnitOfWork",
    "EventPublisher",
    "Clock",
    "SystemClock",
    "FixedClock",
    "Acao",
    "Capacidade",
    "Ator",
    "UsuarioInfo",
    "AuthorizationService",
    "UserDirectory",
]
