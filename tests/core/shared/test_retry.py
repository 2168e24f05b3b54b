"""
Testes da re-tentativa sob concorrência otimista.
"""

from unittest.mock import Mock

import pytest

from src.core.shared.exceptions import ConcurrencyError, ValidationError
from src.core.shared.retry import executar_com_retentativa


def test_sucesso_na_primeira():
    operacao = Mock(return_value="ok")
    assert executar_com_retentativa(operacao) == "ok"
    assert operacao.call_count == 1


def test_conflito_e_retentado():
    operacao = Mock(side_effect=[ConcurrencyError("conflito"), "ok"])
    assert executar_com_retentativa(operacao) == "ok"
    assert operacao.call_count == 2


def test_conflito_persistente_propaga():
    operacao = Mock(side_effect=ConcurrencyError("conflito"))
    with pytest.raises(ConcurrencyError):
        executar_com_retentativa(operacao, max_tentativas=3)
    assert operacao.call_count == 3


def test_outras_excecoes_nao_sao_retentadas():
    operacao = Mock(side_effect=ValidationError("inválido"))
    with pytest.raises(ValidationError):
        executar_com_retentativa(operacao)
    assert operacao.call_count == 1


def test_minimo_de_uma_tentativa():
    operacao = Mock(side_effect=ConcurrencyError("conflito"))
    with pytest.raises(ConcurrencyError):
        executar_com_retentativa(operacao, max_tentativas=0)
    assert operacao.call_count == 1
