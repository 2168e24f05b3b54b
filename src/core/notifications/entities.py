"""
Entidades do Domínio de Notificações.

Regras de Negócio Encapsuladas:
- Uma notificação por (ticket, evento, destinatário, tipo)
- Apenas o indicador de leitura é mutável
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple
import uuid

from src.core.shared.exceptions import ValidationError


def _agora_utc() -> datetime:
    return datetime.now(timezone.utc)


class NotificationType(Enum):
    """Tipos de notificação."""

    TICKET_CRIADO = "ticket_created"
    NOVO_TICKET = "new_ticket"
    TICKET_ATRIBUIDO = "ticket_assigned"
    STATUS_ALTERADO = "ticket_status_changed"
    TICKET_RESOLVIDO = "ticket_resolved"
    SLA_ESCALONADO = "sla_escalated"

    @classmethod
    def from_string(cls, value: str) -> "NotificationType":
        for tipo in cls:
            if value in (tipo.value, tipo.name):
                return tipo
        raise ValueError(f"Tipo de notificação inválido: {value}")


@dataclass
class NotificationEntity:
    """
    Entidade de Domínio: Notificação in-app.

    Attributes:
        id: Identificador único
        destinatario_id: Usuário que recebe
        ticket_id: Ticket de origem
        titulo: Título curto
        mensagem: Texto completo
        tipo: NotificationType
        chave_evento: ID do evento de domínio que originou a notificação
        criado_em: Timestamp
        lida: Se o destinatário já leu
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    destinatario_id: str = ""
    ticket_id: str = ""
    titulo: str = ""
    mensagem: str = ""
    tipo: NotificationType = NotificationType.STATUS_ALTERADO
    chave_evento: str = ""
    criado_em: datetime = field(default_factory=_agora_utc)
    lida: bool = False

    @classmethod
    def criar(
        cls,
        destinatario_id: str,
        ticket_id: str,
        titulo: str,
        mensagem: str,
        tipo: NotificationType,
        chave_evento: str,
        criado_em: Optional[datetime] = None,
    ) -> "NotificationEntity":
        """
        Raises:
            ValidationError: Se destinatário, ticket ou chave ausentes
        """
        if not destinatario_id:
            raise ValidationError("Destinatário é obrigatório", field="destinatario_id")
        if not ticket_id:
            raise ValidationError("Ticket é obrigatório", field="ticket_id")
        if not chave_evento:
            raise ValidationError("Chave do evento é obrigatória", field="chave_evento")

        return cls(
            destinatario_id=destinatario_id,
            ticket_id=ticket_id,
            titulo=titulo,
            mensagem=mensagem,
            tipo=tipo,
            chave_evento=chave_evento,
            criado_em=criado_em or _agora_utc(),
        )

    @property
    def chave_idempotencia(self) -> Tuple[str, str, str, str]:
        return (self.ticket_id, self.chave_evento, self.destinatario_id, self.tipo.value)

    def marcar_como_lida(self) -> bool:
        """Returns: True se mudou, False se já estava lida."""
        if self.lida:
            return False
        self.lida = True
        return True
