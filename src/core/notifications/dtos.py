"""
DTOs do Domínio de Notificações.
"""

from dataclasses import dataclass
from datetime import datetime

from .entities import NotificationEntity


@dataclass
class NotificationOutputDTO:
    id: str
    ticket_id: str
    titulo: str
    mensagem: str
    tipo: str
    criado_em: datetime
    lida: bool

    @classmethod
    def from_entity(cls, entity: NotificationEntity) -> "NotificationOutputDTO":
        return cls(
            id=entity.id,
            ticket_id=entity.ticket_id,
            titulo=entity.titulo,
            mensagem=entity.mensagem,
            tipo=entity.tipo.value,
            criado_em=entity.criado_em,
            lida=entity.lida,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "titulo": self.titulo,
            "mensagem": self.mensagem,
            "tipo": self.tipo,
            "criado_em": self.criado_em.isoformat(),
            "lida": self.lida,
        }
