"""
Domínio de Tickets - Ciclo de Vida de Chamados.

Este módulo contém toda a lógica de negócio relacionada a tickets
de suporte técnico, incluindo:
- Entidades (TicketEntity, TicketStatus, TicketPriority, SLASnapshot)
- Use Cases (Criar, AlterarStatus, Atribuir, AlterarPrioridade, Listar, Obter)
- Domain Events (Criado, Atribuido, StatusAlterado, Resolvido, PrioridadeAlterada)
- DTOs (Input/Output Data Transfer Objects)
- Ports (Interfaces para repositórios)

Características do Domínio:
- SLA vinculado na criação a partir da política ativa da prioridade
- Transições de status controladas por máquina de estados
- Escrita condicional por versão (concorrência otimista)
- Eventos disparados para notificações
"""

from .entities import TicketEntity, TicketStatus, TicketPriority, SLASnapshot
from .events import (
    TicketCriadoEvent,
    TicketAtribuidoEvent,
    TicketStatusAlteradoEvent,
    TicketResolvidoEvent,
    TicketPrioridadeAlteradaEvent,
)
from .dtos import (
    CriarTicketInputDTO,
    AlterarStatusInputDTO,
    AtribuirTicketInputDTO,
    AlterarPrioridadeInputDTO,
    TicketOutputDTO,
)
from .ports import TicketRepository, InMemoryTicketRepository
from .use_cases import (
    CriarTicketService,
    AlterarStatusService,
    AtribuirTicketService,
    AlterarPrioridadeService,
    ListarTicketsService,
    ObterTicketService,
)

__all__ = [
    # Entities
    "TicketEntity",
    "TicketStatus",
    "TicketPriority",
    "SLASnapshot",
    # Events
    "TicketCriadoEvent",
    "TicketAtribuidoEvent",
    "TicketStatusAlteradoEvent",
    "TicketResolvidoEvent",
    "TicketPrioridadeAlteradaEvent",
    # DTOs
    "CriarTicketInputDTO",
    "AlterarStatusInputDTO",
    "AtribuirTicketInputDTO",
    "AlterarPrioridadeInputDTO",
    "TicketOutputDTO",
    # Ports
    "TicketRepository",
    "InMemoryTicketRepository",
    # Use Cases
    "CriarTicketService",
    "AlterarStatusService",
    "AtribuirTicketService",
    "AlterarPrioridadeService",
    "ListarTicketsService",
    "ObterTicketService",
]
