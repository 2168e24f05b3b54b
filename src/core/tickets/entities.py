"""
Entidades do Domínio de Tickets.

Este módulo define as entidades de domínio que encapsulam
regras de negócio relacionadas a tickets de suporte.

Entidades:
- TicketEntity: Agregado principal do domínio
- TicketStatus: Estados possíveis de um ticket (máquina de estados)
- TicketPriority: Escada fixa de prioridades
- SLASnapshot: Cópia congelada da política de SLA vinculada

Regras de Negócio Encapsuladas:
- Validação de dados na criação
- Transições de status controladas
- resolvido_em gravado uma única vez
- Escalonamento de um degrau, saturando no topo
- Controle de versão para concorrência otimista
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import ClassVar, Dict, FrozenSet, Iterable, List, Optional
import uuid

from src.core.shared.exceptions import (
    ValidationError,
    BusinessRuleViolationError,
)


def _agora_utc() -> datetime:
    return datetime.now(timezone.utc)


class TicketStatus(Enum):
    """
    Estados possíveis de um ticket.

    Fluxo de Estados:
        ABERTO ⇄ EM_PROGRESSO → RESOLVIDO → FECHADO
          └──────────────────────↑
        ABERTO / EM_PROGRESSO → FECHADO (desistência do criador)

    ABERTO e EM_PROGRESSO são ativos (monitorados pelo SLA);
    RESOLVIDO e FECHADO são terminais.
    """

    ABERTO = "Aberto"
    EM_PROGRESSO = "Em Progresso"
    RESOLVIDO = "Resolvido"
    FECHADO = "Fechado"

    @property
    def esta_ativo(self) -> bool:
        return self in (TicketStatus.ABERTO, TicketStatus.EM_PROGRESSO)

    @property
    def e_terminal(self) -> bool:
        return not self.esta_ativo

    @classmethod
    def ativos(cls) -> List["TicketStatus"]:
        return [cls.ABERTO, cls.EM_PROGRESSO]

    @classmethod
    def from_string(cls, value: str) -> "TicketStatus":
        """
        Converte string para enum.

        Aceita o nome (EM_PROGRESSO), o valor ("Em Progresso")
        ou o código de API ("in_progress").

        Raises:
            ValueError: Se valor inválido
        """
        if not value:
            raise ValueError("Status inválido: vazio")

        # Tenta pelo nome (ABERTO)
        try:
            return cls[value.strip().upper().replace(" ", "_")]
        except KeyError:
            pass

        # Tenta pelo valor ("Aberto")
        for status in cls:
            if status.value.lower() == value.strip().lower():
                return status

        # Tenta pelo código de API ("open")
        codigo = _STATUS_POR_CODIGO.get(value.strip().lower())
        if codigo is not None:
            return codigo

        raise ValueError(f"Status inválido: {value}")


_STATUS_POR_CODIGO: Dict[str, TicketStatus] = {
    "open": TicketStatus.ABERTO,
    "in_progress": TicketStatus.EM_PROGRESSO,
    "resolved": TicketStatus.RESOLVIDO,
    "closed": TicketStatus.FECHADO,
}


class TicketPriority(Enum):
    """
    Escada fixa de prioridades: BAIXA < MEDIA < ALTA < URGENTE.

    O escalonamento sobe exatamente um degrau e satura em URGENTE.
    """

    BAIXA = "Baixa"
    MEDIA = "Média"
    ALTA = "Alta"
    URGENTE = "Urgente"

    @property
    def nivel(self) -> int:
        """Posição na escada (0 = BAIXA)."""
        return _ESCADA.index(self)

    @property
    def e_maxima(self) -> bool:
        return self is _ESCADA[-1]

    def proxima(self) -> "TicketPriority":
        """
        Próximo degrau da escada (satura no topo).

        Returns:
            Prioridade seguinte, ou a própria se já for a máxima
        """
        if self.e_maxima:
            return self
        return _ESCADA[self.nivel + 1]

    @classmethod
    def from_string(cls, value: str) -> "TicketPriority":
        """
        Converte string para enum.

        Aceita o nome (MEDIA), o valor ("Média") ou o
        código de API ("medium").

        Raises:
            ValueError: Se valor inválido
        """
        if not value:
            raise ValueError("Prioridade inválida: vazia")

        # Tenta pelo nome (MEDIA)
        try:
            return cls[value.strip().upper()]
        except KeyError:
            pass

        # Tenta pelo valor ("Média")
        for priority in cls:
            if priority.value.lower() == value.strip().lower():
                return priority

        # Tenta pelo código de API ("urgent")
        codigo = _PRIORIDADE_POR_CODIGO.get(value.strip().lower())
        if codigo is not None:
            return codigo

        raise ValueError(f"Prioridade inválida: {value}")


_ESCADA: List[TicketPriority] = [
    TicketPriority.BAIXA,
    TicketPriority.MEDIA,
    TicketPriority.ALTA,
    TicketPriority.URGENTE,
]

_PRIORIDADE_POR_CODIGO: Dict[str, TicketPriority] = {
    "low": TicketPriority.BAIXA,
    "medium": TicketPriority.MEDIA,
    "high": TicketPriority.ALTA,
    "urgent": TicketPriority.URGENTE,
}


TRANSICOES_PERMITIDAS: Dict[TicketStatus, FrozenSet[TicketStatus]] = {
    TicketStatus.ABERTO: frozenset({
        TicketStatus.EM_PROGRESSO,
        TicketStatus.RESOLVIDO,
        TicketStatus.FECHADO,
    }),
    TicketStatus.EM_PROGRESSO: frozenset({
        TicketStatus.ABERTO,
        TicketStatus.RESOLVIDO,
        TicketStatus.FECHADO,
    }),
    TicketStatus.RESOLVIDO: frozenset({
        TicketStatus.FECHADO,
    }),
    TicketStatus.FECHADO: frozenset(),
}


@dataclass(frozen=True)
class SLASnapshot:
    """
    Cópia congelada da política de SLA no momento da criação.

    Mudanças posteriores no catálogo de políticas não afetam
    tickets já criados.
    """

    politica_id: str
    horas_resposta: int
    horas_resolucao: int
    nome: str = ""


@dataclass
class TicketEntity:
    """
    Entidade de Domínio: Ticket.

    Agregado principal do domínio de suporte técnico.

    Invariantes:
    - Título deve ter pelo menos 3 caracteres
    - Descrição deve ter pelo menos 10 caracteres
    - resolvido_em é gravado na primeira entrada em RESOLVIDO e nunca limpo
    - Ticket terminal não é atribuído nem escalado
    - SLA (snapshot + prazo) é vinculado no máximo uma vez
    - versao reflete a última versão persistida (concorrência otimista)

    Attributes:
        id: Identificador único (UUID)
        titulo: Título descritivo do ticket
        descricao: Descrição detalhada do problema
        categoria: Categoria do ticket
        status: Estado atual do ticket
        prioridade: Nível de prioridade
        criador_id: ID do usuário que criou
        atribuido_a_id: ID do técnico responsável
        criado_em: Data/hora de criação (UTC)
        atualizado_em: Data/hora da última atualização
        sla: Snapshot da política vinculada (None = não monitorado)
        sla_prazo: Prazo de resolução calculado na criação
        resolvido_em: Primeira entrada em RESOLVIDO
        escalonado_em: Último escalonamento automático
        alertas_maximo: Tipos de violação já notificados em URGENTE
        versao: Versão persistida
        tags: Lista de tags para categorização

    Example:
        ticket = TicketEntity.criar(
            titulo="Sistema lento",
            descricao="O sistema está demorando mais de 10s para responder",
            criador_id="user123",
            prioridade=TicketPriority.ALTA,
        )
        ticket.atribuir_a("tecnico456", agora)
        ticket.alterar_status(TicketStatus.RESOLVIDO, agora)
    """

    # Identificação
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # Dados principais
    titulo: str = ""
    descricao: str = ""
    categoria: str = "Geral"

    # Estado
    status: TicketStatus = field(default=TicketStatus.ABERTO)
    prioridade: TicketPriority = field(default=TicketPriority.MEDIA)

    # Relacionamentos
    criador_id: str = ""
    atribuido_a_id: Optional[str] = None

    # Timestamps
    criado_em: datetime = field(default_factory=_agora_utc)
    atualizado_em: datetime = field(default_factory=_agora_utc)

    # SLA
    sla: Optional[SLASnapshot] = None
    sla_prazo: Optional[datetime] = None
    resolvido_em: Optional[datetime] = None
    escalonado_em: Optional[datetime] = None
    alertas_maximo: List[str] = field(default_factory=list)

    # Concorrência
    versao: int = 0

    # Metadata
    tags: List[str] = field(default_factory=list)

    # Constantes de validação
    TITULO_MIN_LENGTH: ClassVar[int] = 3
    TITULO_MAX_LENGTH: ClassVar[int] = 200
    DESCRICAO_MIN_LENGTH: ClassVar[int] = 10
    DESCRICAO_MAX_LENGTH: ClassVar[int] = 5000

    @classmethod
    def criar(
        cls,
        titulo: str,
        descricao: str,
        criador_id: str,
        prioridade: TicketPriority = TicketPriority.MEDIA,
        categoria: str = "Geral",
        tags: Optional[List[str]] = None,
        criado_em: Optional[datetime] = None,
    ) -> "TicketEntity":
        """
        Factory method para criar ticket com validações.

        O SLA não é vinculado aqui: o CriarTicketService resolve a
        política e chama `vincular_sla`.

        Args:
            titulo: Título do ticket (min 3 caracteres)
            descricao: Descrição detalhada (min 10 caracteres)
            criador_id: ID do usuário criador
            prioridade: Nível de prioridade (default: MEDIA)
            categoria: Categoria do ticket (default: "Geral")
            tags: Lista de tags opcional
            criado_em: Instante de criação (default: agora, UTC)

        Returns:
            Nova instância de TicketEntity

        Raises:
            ValidationError: Se dados de entrada inválidos
        """
        cls._validar_titulo(titulo)
        cls._validar_descricao(descricao)
        cls._validar_criador(criador_id)

        instante = criado_em or _agora_utc()

        return cls(
            titulo=titulo.strip(),
            descricao=descricao.strip(),
            criador_id=criador_id,
            prioridade=prioridade,
            categoria=categoria.strip() if categoria else "Geral",
            status=TicketStatus.ABERTO,
            criado_em=instante,
            atualizado_em=instante,
            tags=tags or [],
        )

    @classmethod
    def _validar_titulo(cls, titulo: str) -> None:
        """Valida título do ticket."""
        if not titulo or not titulo.strip():
            raise ValidationError("Título é obrigatório", field="titulo")

        titulo_limpo = titulo.strip()

        if len(titulo_limpo) < cls.TITULO_MIN_LENGTH:
            raise ValidationError(
                f"Título deve ter pelo menos {cls.TITULO_MIN_LENGTH} caracteres",
                field="titulo"
            )

        if len(titulo_limpo) > cls.TITULO_MAX_LENGTH:
            raise ValidationError(
                f"Título deve ter no máximo {cls.TITULO_MAX_LENGTH} caracteres",
                field="titulo"
            )

    @classmethod
    def _validar_descricao(cls, descricao: str) -> None:
        """Valida descrição do ticket."""
        if not descricao or not descricao.strip():
            raise ValidationError("Descrição é obrigatória", field="descricao")

        descricao_limpa = descricao.strip()

        if len(descricao_limpa) < cls.DESCRICAO_MIN_LENGTH:
            raise ValidationError(
                f"Descrição deve ter pelo menos {cls.DESCRICAO_MIN_LENGTH} caracteres",
                field="descricao"
            )

        if len(descricao_limpa) > cls.DESCRICAO_MAX_LENGTH:
            raise ValidationError(
                f"Descrição deve ter no máximo {cls.DESCRICAO_MAX_LENGTH} caracteres",
                field="descricao"
            )

    @classmethod
    def _validar_criador(cls, criador_id: str) -> None:
        if not criador_id:
            raise ValidationError("Criador é obrigatório", field="criador_id")

    # =========================================================================
    # SLA
    # =========================================================================

    def vincular_sla(self, snapshot: SLASnapshot, prazo: datetime) -> None:
        """
        Vincula snapshot de política e prazo de resolução.

        Raises:
            BusinessRuleViolationError: Se o ticket já possui SLA
        """
        if self.sla is not None:
            raise BusinessRuleViolationError(
                "SLA já vinculado a este ticket",
                rule="sla_vinculado_uma_vez"
            )
        self.sla = snapshot
        self.sla_prazo = prazo

    @property
    def e_monitorado(self) -> bool:
        """Ticket ativo com política de SLA vinculada."""
        return self.sla is not None and self.status.esta_ativo

    def horas_decorridas(self, agora: datetime) -> float:
        """Horas desde a criação até `agora`."""
        return (agora - self.criado_em).total_seconds() / 3600

    def esta_atrasado(self, agora: datetime) -> bool:
        """
        Verifica se o prazo de resolução passou.

        Tickets sem SLA ou terminais nunca estão atrasados.
        """
        if not self.sla_prazo or self.status.e_terminal:
            return False
        return agora > self.sla_prazo

    def tempo_restante_sla(self, agora: datetime) -> Optional[timedelta]:
        """
        Tempo restante até o prazo.

        Returns:
            Timedelta (negativo se atrasado) ou None se sem SLA/terminal
        """
        if not self.sla_prazo or self.status.e_terminal:
            return None
        return self.sla_prazo - agora

    # =========================================================================
    # Ciclo de vida
    # =========================================================================

    def alterar_status(self, novo_status: TicketStatus, agora: datetime) -> bool:
        """
        Altera status do ticket com validação de transição.

        Transições válidas:
        - ABERTO → EM_PROGRESSO, RESOLVIDO, FECHADO
        - EM_PROGRESSO → ABERTO, RESOLVIDO, FECHADO
        - RESOLVIDO → FECHADO

        Solicitar o status atual é um no-op (retorna False).
        A primeira entrada em RESOLVIDO grava `resolvido_em`.

        Args:
            novo_status: Novo status desejado
            agora: Instante da transição

        Returns:
            True se houve transição, False se no-op

        Raises:
            BusinessRuleViolationError: Se transição inválida
        """
        if novo_status == self.status:
            return False

        if novo_status not in TRANSICOES_PERMITIDAS[self.status]:
            raise BusinessRuleViolationError(
                f"Transição de {self.status.value} para {novo_status.value} não é permitida",
                rule="transicao_status_invalida"
            )

        self.status = novo_status

        if novo_status == TicketStatus.RESOLVIDO and self.resolvido_em is None:
            self.resolvido_em = agora

        self._atualizar_timestamp(agora)
        return True

    def atribuir_a(self, tecnico_id: str, agora: datetime) -> None:
        """
        Atribui ticket a um técnico.

        Regras:
        - Ticket terminal não pode ser atribuído
        - Atribuição força status EM_PROGRESSO

        Args:
            tecnico_id: ID do técnico responsável
            agora: Instante da atribuição

        Raises:
            BusinessRuleViolationError: Se ticket terminal
            ValidationError: Se tecnico_id vazio
        """
        if not tecnico_id:
            raise ValidationError(
                "ID do técnico é obrigatório",
                field="tecnico_id"
            )

        if self.status.e_terminal:
            raise BusinessRuleViolationError(
                f"Não é possível atribuir ticket {self.status.value.lower()}",
                rule="ticket_terminal_imutavel"
            )

        self.atribuido_a_id = tecnico_id
        self.status = TicketStatus.EM_PROGRESSO
        self._atualizar_timestamp(agora)

    def alterar_prioridade(self, nova_prioridade: TicketPriority, agora: datetime) -> bool:
        """
        Altera prioridade manualmente.

        O SLA vinculado não é recalculado. Os alertas em prioridade
        máxima são esquecidos: cada violação em URGENTE volta a ser
        notificada uma vez.

        Returns:
            True se alterou, False se a prioridade já era a pedida

        Raises:
            BusinessRuleViolationError: Se ticket fechado
        """
        if self.status == TicketStatus.FECHADO:
            raise BusinessRuleViolationError(
                "Não é possível alterar prioridade de ticket fechado",
                rule="ticket_terminal_imutavel"
            )

        if nova_prioridade == self.prioridade:
            return False

        self.prioridade = nova_prioridade
        self.alertas_maximo = []
        self._atualizar_timestamp(agora)
        return True

    def escalar(self, agora: datetime, tipos: Iterable[str] = ()) -> TicketPriority:
        """
        Sobe a prioridade exatamente um degrau.

        Ao atingir URGENTE os `tipos` de violação que motivaram o
        escalonamento contam como já alertados.

        Returns:
            Nova prioridade

        Raises:
            BusinessRuleViolationError: Se terminal ou já em URGENTE
        """
        if self.status.e_terminal:
            raise BusinessRuleViolationError(
                "Ticket terminal não é escalado",
                rule="ticket_terminal_imutavel"
            )

        if self.prioridade.e_maxima:
            raise BusinessRuleViolationError(
                "Ticket já está na prioridade máxima",
                rule="prioridade_maxima"
            )

        self.prioridade = self.prioridade.proxima()
        self.escalonado_em = agora
        if self.prioridade.e_maxima:
            self._registrar_alertas(tipos)
        self._atualizar_timestamp(agora)
        return self.prioridade

    def marcar_alerta_maximo(self, agora: datetime, tipos: Iterable[str]) -> None:
        """Registra os tipos de violação já notificados em URGENTE."""
        self._registrar_alertas(tipos)
        self._atualizar_timestamp(agora)

    def alertas_pendentes(self, tipos: Iterable[str]) -> List[str]:
        """Tipos de violação ainda não notificados em URGENTE."""
        return [t for t in tipos if t not in self.alertas_maximo]

    def _registrar_alertas(self, tipos: Iterable[str]) -> None:
        for tipo in tipos:
            if tipo not in self.alertas_maximo:
                self.alertas_maximo.append(tipo)

    def _atualizar_timestamp(self, agora: datetime) -> None:
        self.atualizado_em = agora

    @property
    def esta_atribuido(self) -> bool:
        """Verifica se ticket está atribuído a alguém."""
        return self.atribuido_a_id is not None

    def __repr__(self) -> str:
        """Representação string para debugging."""
        return (
            f"TicketEntity("
            f"id={self.id[:8]}..., "
            f"titulo='{self.titulo[:20]}...', "
            f"status={self.status.value}, "
            f"prioridade={self.prioridade.value}, "
            f"versao={self.versao}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparação por ID (identidade de entidade)."""
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
