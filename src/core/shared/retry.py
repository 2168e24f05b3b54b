"""
Re-tentativa do ciclo ler-decidir-escrever sob concorrência otimista.

Apenas ConcurrencyError é re-tentada; qualquer outra exceção é
propagada na primeira ocorrência.
"""

import logging
from typing import Callable, TypeVar

from .exceptions import ConcurrencyError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_TENTATIVAS_PADRAO = 3


def executar_com_retentativa(
    operacao: Callable[[], T],
    max_tentativas: int = MAX_TENTATIVAS_PADRAO,
    descricao: str = "operação",
) -> T:
    """
    Executa `operacao` re-tentando em caso de ConcurrencyError.

    Cada tentativa deve reler o estado persistido: a função recebida
    encapsula o ciclo inteiro, não apenas a escrita.

    Args:
        operacao: Callable sem argumentos com o ciclo completo
        max_tentativas: Número máximo de tentativas (>= 1)
        descricao: Texto usado nos logs

    Returns:
        Valor retornado pela operação

    Raises:
        ConcurrencyError: Se todas as tentativas falharem
    """
    max_tentativas = max(1, max_tentativas)

    for tentativa in range(1, max_tentativas + 1):
        try:
            return operacao()
        except ConcurrencyError as e:
            if tentativa >= max_tentativas:
                logger.warning(
                    f"[RETRY] {descricao}: conflito persistiu após "
                    f"{max_tentativas} tentativas ({e.message})"
                )
                raise
            logger.info(
                f"[RETRY] {descricao}: conflito de versão, "
                f"tentativa {tentativa + 1}/{max_tentativas}"
            )

    # Inalcançável: o laço sempre retorna ou relança
    raise ConcurrencyError(f"{descricao}: tentativas esgotadas")
