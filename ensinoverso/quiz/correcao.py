"""
Correção de Quiz.

Funções puras: não leem nem gravam nada.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping

from ensinoverso.core.erros import ErroValidacao, QuizIncompleto
from ensinoverso.core.modelos import QuestaoQuiz

OPCOES_POR_QUESTAO = 4


@dataclass(frozen=True)
class ResultadoCorrecao:
    acertos: int
    total: int

    @property
    def percentual(self) -> int:
        return percentual(self.acertos, self.total)

    def para_dict(self) -> dict:
        return {'acertos': self.acertos, 'total': self.total, 'percentual': self.percentual}


def arredondar(numerador: int, denominador: int) -> int:
    """numerador/denominador arredondado para o inteiro mais próximo, .5 para cima."""
    return (2 * numerador + denominador) // (2 * denominador)


def percentual(acertos: int, total: int) -> int:
    if total <= 0:
        return 0
    return arredondar(100 * acertos, total)


def normalizar_respostas(respostas) -> Dict[int, int]:
    """
    Aceita {"0": 2, "1": 0} ou [2, 0] (posição = questão).
    Respostas nulas contam como não respondidas.
    """
    if respostas is None:
        return {}
    if isinstance(respostas, list):
        itens = enumerate(respostas)
    elif isinstance(respostas, Mapping):
        itens = respostas.items()
    else:
        raise ErroValidacao(['answers'], "Formato de respostas inválido.")

    normalizadas = {}
    try:
        for indice, opcao in itens:
            if opcao is None:
                continue
            normalizadas[int(indice)] = int(opcao)
    except (TypeError, ValueError):
        raise ErroValidacao(['answers'], "Formato de respostas inválido.")
    return normalizadas


def questoes_faltando(questoes: List[QuestaoQuiz], respostas: Dict[int, int]) -> List[int]:
    return [i for i in range(len(questoes)) if i not in respostas]


def corrigir(questoes: List[QuestaoQuiz], respostas: Dict[int, int]) -> ResultadoCorrecao:
    """
    Conta os acertos. Exige resposta para todas as questões, cada uma entre
    0 e 3, e nenhuma resposta para questão inexistente.
    """
    faltando = questoes_faltando(questoes, respostas)
    if faltando:
        raise QuizIncompleto(faltando)

    invalidas = [i for i, opcao in respostas.items()
                 if i < 0 or i >= len(questoes) or not 0 <= opcao < OPCOES_POR_QUESTAO]
    if invalidas:
        raise ErroValidacao(['answers'], "Há respostas para questões ou alternativas inexistentes.")

    acertos = sum(1 for i, questao in enumerate(questoes) if respostas[i] == questao.correta)
    return ResultadoCorrecao(acertos, len(questoes))


def acertos_sem_validar(questoes: List[QuestaoQuiz], respostas: Dict[int, int]) -> int:
    """Para respostas já gravadas: questão sem resposta conta como erro."""
    return sum(1 for i, questao in enumerate(questoes) if respostas.get(i) == questao.correta)
