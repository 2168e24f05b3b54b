"""
Use Cases (Application Services) do Domínio de Tickets.

Este módulo contém os casos de uso da aplicação, que orquestram
a lógica de negócio coordenando entidades, repositórios e eventos.

Use Cases implementados:
- CriarTicketService: Cria ticket e vincula a política de SLA vigente
- AlterarStatusService: Transição de status (máquina de estados)
- AtribuirTicketService: Atribui ticket a técnico
- AlterarPrioridadeService: Altera prioridade manualmente
- ListarTicketsService: Lista tickets com filtros
- ObterTicketService: Obtém ticket específico

Responsabilidades dos Use Cases:
- Validar entrada (via DTOs)
- Consultar o colaborador de autorização
- Coordenar entidades
- Gerenciar transações (via UoW) e re-tentar conflitos de versão
- Disparar eventos de domínio
- Retornar DTOs de saída

Princípios:
- Um Use Case = Uma operação de negócio
- Dependências injetadas (DI)
- Sem lógica de infraestrutura
"""

from typing import TYPE_CHECKING, Callable, List, Optional, Tuple
import logging

from src.core.shared.authorization import (
    Acao,
    Ator,
    AuthorizationService,
    Capacidade,
    UserDirectory,
    exigir_permissao,
)
from src.core.shared.clock import Clock
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ValidationError,
)
from src.core.shared.interfaces import UnitOfWork
from src.core.shared.retry import MAX_TENTATIVAS_PADRAO, executar_com_retentativa

from .dtos import (
    AlterarPrioridadeInputDTO,
    AlterarStatusInputDTO,
    AtribuirTicketInputDTO,
    CriarTicketInputDTO,
    TicketOutputDTO,
)
from .entities import TicketEntity, TicketPriority, TicketStatus
from .events import (
    TicketAtribuidoEvent,
    TicketCriadoEvent,
    TicketPrioridadeAlteradaEvent,
    TicketResolvidoEvent,
    TicketStatusAlteradoEvent,
)
from .ports import TicketRepository

if TYPE_CHECKING:
    from src.core.sla.registry import SLAPolicyRegistry

logger = logging.getLogger(__name__)


def _converter_prioridade(valor: str, campo: str = "prioridade") -> TicketPriority:
    try:
        return TicketPriority.from_string(valor)
    except ValueError:
        raise ValidationError(f"Prioridade inválida: {valor}", field=campo)


def _converter_status(valor: str, campo: str = "status") -> TicketStatus:
    try:
        return TicketStatus.from_string(valor)
    except ValueError:
        raise ValidationError(f"Status inválido: {valor}", field=campo)


def _obter_ou_falhar(ticket_repo: TicketRepository, ticket_id: str) -> TicketEntity:
    ticket = ticket_repo.get_by_id(ticket_id)
    if not ticket:
        raise EntityNotFoundError(
            f"Ticket {ticket_id} não encontrado",
            entity_type="Ticket",
            entity_id=ticket_id
        )
    return ticket


class CriarTicketService:
    """
    Use Case: Criar um novo ticket.

    Fluxo:
    1. Validar dados de entrada
    2. Criar entidade Ticket
    3. Resolver política ativa para a prioridade e vincular snapshot + prazo
    4. Persistir via repositório
    5. Disparar evento TicketCriado
    6. Retornar DTO de saída

    Sem política ativa o ticket é criado sem monitoramento: lacunas no
    catálogo nunca bloqueiam a criação.

    Example:
        service = CriarTicketService(ticket_repo, uow, registry, clock)
        input_dto = CriarTicketInputDTO(
            titulo="Servidor de e-mail fora",
            descricao="Nenhuma mensagem chega desde as 8h",
            criador_id="user123",
            prioridade="high",
        )
        output = service.execute(input_dto)
        print(output.sla_prazo)  # criado_em + 8h
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        registry: "SLAPolicyRegistry",
        clock: Clock,
    ):
        """
        Inicializa service com dependências injetadas.

        Args:
            ticket_repo: Repositório para persistência
            uow: Unit of Work para transação atômica
            registry: Registro de políticas ativas
            clock: Relógio
        """
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.registry = registry
        self.clock = clock

    def execute(self, input_dto: CriarTicketInputDTO) -> TicketOutputDTO:
        """
        Executa criação de ticket em transação atômica.

        Args:
            input_dto: Dados de entrada

        Returns:
            DTO com dados do ticket criado

        Raises:
            ValidationError: Se dados inválidos
        """
        prioridade = _converter_prioridade(input_dto.prioridade)
        agora = self.clock.agora()

        with self.uow:
            # Criar entidade (validações de negócio na entidade)
            ticket = TicketEntity.criar(
                titulo=input_dto.titulo,
                descricao=input_dto.descricao,
                criador_id=input_dto.criador_id,
                prioridade=prioridade,
                categoria=input_dto.categoria,
                tags=list(input_dto.tags) if input_dto.tags else None,
                criado_em=agora,
            )

            politica = self.registry.resolver(prioridade)
            if politica is not None:
                ticket.vincular_sla(
                    politica.snapshot(),
                    self.registry.calcular_prazo(agora, politica),
                )
            else:
                logger.info(
                    f"[SLA] Nenhuma política ativa para {prioridade.name}; "
                    f"ticket {ticket.id} sem monitoramento"
                )

            self.ticket_repo.save(ticket)

            # Publicado após commit
            self.uow.publish_event(
                TicketCriadoEvent(
                    aggregate_id=ticket.id,
                    occurred_at=agora,
                    criador_id=ticket.criador_id,
                    titulo=ticket.titulo,
                    prioridade=ticket.prioridade.name,
                    monitorado=ticket.sla is not None,
                )
            )

        return TicketOutputDTO.from_entity(ticket, agora)


class AlterarStatusService:
    """
    Use Case: Alterar status de um ticket.

    Fluxo (re-tentado em conflito de versão):
    1. Buscar ticket
    2. Autorizar (FECHAR_TICKET quando o destino é FECHADO,
       ALTERAR_STATUS nos demais casos)
    3. Aplicar transição na entidade (no-op se status igual)
    4. Persistir com escrita condicional
    5. Disparar TicketResolvido (entrada em RESOLVIDO) ou TicketStatusAlterado

    Após sucesso, `ao_alterar_status` é chamado (verificação de SLA).
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        authz: AuthorizationService,
        clock: Clock,
        max_tentativas: int = MAX_TENTATIVAS_PADRAO,
        ao_alterar_status: Optional[Callable[[], None]] = None,
    ):
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.authz = authz
        self.clock = clock
        self.max_tentativas = max_tentativas
        self.ao_alterar_status = ao_alterar_status

    def execute(self, input_dto: AlterarStatusInputDTO, ator: Ator) -> TicketOutputDTO:
        """
        Executa a transição.

        Raises:
            ValidationError: Se status desconhecido
            EntityNotFoundError: Se ticket não existe
            PermissionDeniedError: Se ator não autorizado
            BusinessRuleViolationError: Se transição não permitida
            ConcurrencyError: Se o conflito persistir
        """
        novo_status = _converter_status(input_dto.novo_status, campo="novo_status")

        ticket, alterou = executar_com_retentativa(
            lambda: self._aplicar(input_dto.ticket_id, novo_status, ator),
            max_tentativas=self.max_tentativas,
            descricao=f"alteração de status do ticket {input_dto.ticket_id}",
        )

        if alterou:
            logger.info(
                f"Ticket {ticket.id} agora {ticket.status.name} (por {ator.id})"
            )
            if self.ao_alterar_status is not None:
                self.ao_alterar_status()

        return TicketOutputDTO.from_entity(ticket, self.clock.agora())

    def _aplicar(
        self,
        ticket_id: str,
        novo_status: TicketStatus,
        ator: Ator,
    ) -> Tuple[TicketEntity, bool]:
        with self.uow:
            ticket = _obter_ou_falhar(self.ticket_repo, ticket_id)

            acao = (
                Acao.FECHAR_TICKET if novo_status == TicketStatus.FECHADO
                else Acao.ALTERAR_STATUS
            )
            exigir_permissao(self.authz, ator, acao, ticket)

            anterior = ticket.status
            agora = self.clock.agora()
            if not ticket.alterar_status(novo_status, agora):
                return ticket, False

            self.ticket_repo.save(ticket)

            if novo_status == TicketStatus.RESOLVIDO:
                self.uow.publish_event(
                    TicketResolvidoEvent(
                        aggregate_id=ticket.id,
                        occurred_at=agora,
                        resolvido_por_id=ator.id,
                        resolvido_em=ticket.resolvido_em.isoformat(),
                        dentro_sla=(
                            ticket.resolvido_em <= ticket.sla_prazo
                            if ticket.sla_prazo else None
                        ),
                    )
                )
            else:
                self.uow.publish_event(
                    TicketStatusAlteradoEvent(
                        aggregate_id=ticket.id,
                        occurred_at=agora,
                        status_anterior=anterior.name,
                        status_novo=novo_status.name,
                        alterado_por_id=ator.id,
                    )
                )

        return ticket, True


class AtribuirTicketService:
    """
    Use Case: Atribuir ticket a um técnico.

    Fluxo:
    1. Validar que o alvo tem a capacidade ATENDER_TICKETS
    2. Buscar ticket e autorizar ATRIBUIR_TICKET
    3. Executar atribuição na entidade (força EM_PROGRESSO)
    4. Persistir alterações
    5. Disparar evento TicketAtribuido
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        authz: AuthorizationService,
        directory: UserDirectory,
        clock: Clock,
        max_tentativas: int = MAX_TENTATIVAS_PADRAO,
    ):
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.authz = authz
        self.directory = directory
        self.clock = clock
        self.max_tentativas = max_tentativas

    def execute(self, input_dto: AtribuirTicketInputDTO, ator: Ator) -> TicketOutputDTO:
        """
        Executa atribuição de ticket.

        Raises:
            EntityNotFoundError: Se ticket não existe
            PermissionDeniedError: Se ator não autorizado
            BusinessRuleViolationError: Se alvo não é técnico ou ticket terminal
        """
        if not input_dto.tecnico_id:
            raise ValidationError("ID do técnico é obrigatório", field="tecnico_id")

        if not self.directory.possui_capacidade(
            input_dto.tecnico_id, Capacidade.ATENDER_TICKETS
        ):
            raise BusinessRuleViolationError(
                f"Usuário {input_dto.tecnico_id} não pode atender tickets",
                rule="tecnico_sem_capacidade"
            )

        def ciclo() -> TicketEntity:
            with self.uow:
                ticket = _obter_ou_falhar(self.ticket_repo, input_dto.ticket_id)
                exigir_permissao(self.authz, ator, Acao.ATRIBUIR_TICKET, ticket)

                agora = self.clock.agora()
                ticket.atribuir_a(input_dto.tecnico_id, agora)
                self.ticket_repo.save(ticket)

                self.uow.publish_event(
                    TicketAtribuidoEvent(
                        aggregate_id=ticket.id,
                        occurred_at=agora,
                        tecnico_id=input_dto.tecnico_id,
                        atribuido_por_id=ator.id,
                    )
                )
            return ticket

        ticket = executar_com_retentativa(
            ciclo,
            max_tentativas=self.max_tentativas,
            descricao=f"atribuição do ticket {input_dto.ticket_id}",
        )
        return TicketOutputDTO.from_entity(ticket, self.clock.agora())


class AlterarPrioridadeService:
    """
    Use Case: Alterar prioridade de um ticket manualmente.

    O snapshot de SLA não é refeito: o prazo continua o da criação.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        authz: AuthorizationService,
        clock: Clock,
        max_tentativas: int = MAX_TENTATIVAS_PADRAO,
    ):
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.authz = authz
        self.clock = clock
        self.max_tentativas = max_tentativas

    def execute(self, input_dto: AlterarPrioridadeInputDTO, ator: Ator) -> TicketOutputDTO:
        """
        Altera prioridade do ticket.

        Args:
            input_dto: Dados da alteração
            ator: Quem solicita

        Returns:
            DTO com ticket atualizado
        """
        nova_prioridade = _converter_prioridade(
            input_dto.nova_prioridade, campo="nova_prioridade"
        )

        def ciclo() -> TicketEntity:
            with self.uow:
                ticket = _obter_ou_falhar(self.ticket_repo, input_dto.ticket_id)
                exigir_permissao(self.authz, ator, Acao.ALTERAR_PRIORIDADE, ticket)

                anterior = ticket.prioridade
                agora = self.clock.agora()
                if not ticket.alterar_prioridade(nova_prioridade, agora):
                    return ticket

                self.ticket_repo.save(ticket)
                self.uow.publish_event(
                    TicketPrioridadeAlteradaEvent(
                        aggregate_id=ticket.id,
                        occurred_at=agora,
                        prioridade_anterior=anterior.name,
                        prioridade_nova=nova_prioridade.name,
                        alterado_por_id=ator.id,
                    )
                )
            return ticket

        ticket = executar_com_retentativa(
            ciclo,
            max_tentativas=self.max_tentativas,
            descricao=f"alteração de prioridade do ticket {input_dto.ticket_id}",
        )
        return TicketOutputDTO.from_entity(ticket, self.clock.agora())


class ListarTicketsService:
    """
    Use Case: Listar tickets com filtros.

    Não usa UoW pois é operação de leitura (não precisa de transação).
    """

    def __init__(self, ticket_repo: TicketRepository, clock: Clock):
        self.ticket_repo = ticket_repo
        self.clock = clock

    def execute(
        self,
        status: Optional[str] = None,
        criador_id: Optional[str] = None,
        tecnico_id: Optional[str] = None,
    ) -> List[TicketOutputDTO]:
        """
        Lista tickets com filtros opcionais, combinados (E lógico).

        Args:
            status: Filtrar por status (nome, valor ou código)
            criador_id: Filtrar por criador
            tecnico_id: Filtrar por técnico
        """
        status_filtro = _converter_status(status) if status else None

        if criador_id:
            tickets = self.ticket_repo.list_by_criador(criador_id)
        elif tecnico_id:
            tickets = self.ticket_repo.list_by_tecnico(tecnico_id)
        elif status_filtro is not None:
            tickets = self.ticket_repo.list_by_status_in([status_filtro])
        else:
            tickets = self.ticket_repo.list_all()

        tickets = [
            t for t in tickets
            if (status_filtro is None or t.status == status_filtro)
            and (not criador_id or t.criador_id == criador_id)
            and (not tecnico_id or t.atribuido_a_id == tecnico_id)
        ]

        agora = self.clock.agora()
        tickets.sort(key=lambda t: t.criado_em, reverse=True)
        return [TicketOutputDTO.from_entity(t, agora) for t in tickets]


class ObterTicketService:
    """Use Case: Obter detalhes de um ticket específico."""

    def __init__(self, ticket_repo: TicketRepository, clock: Clock):
        self.ticket_repo = ticket_repo
        self.clock = clock

    def execute(self, ticket_id: str) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se ticket não existe
        """
        ticket = _obter_ou_falhar(self.ticket_repo, ticket_id)
        return TicketOutputDTO.from_entity(ticket, self.clock.agora())
