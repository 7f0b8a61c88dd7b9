"""
Camada de Serviço (Service Layer) do Quiz

Envio único do quiz de uma aula por estudante e o relatório de desempenho.

A conclusão é uma transição única: a submissão é criada com `create()`, que
falha se o documento já existir. Dois envios simultâneos terminam com
exatamente uma submissão gravada; o segundo recebe o resultado do primeiro.
"""

from dataclasses import dataclass
from typing import List, Optional
import csv
import io

from ensinoverso.core import documentos
from ensinoverso.core.erros import AcessoNegado, NaoEncontrado, RegistroDuplicado
from ensinoverso.core.logger import get_logger
from ensinoverso.core.modelos import Papel, PlanoAula, SubmissaoQuiz, Usuario
from ensinoverso.core.visibilidade import aula_visivel, pode_editar
from .correcao import ResultadoCorrecao, acertos_sem_validar, corrigir, normalizar_respostas
from .desempenho import RelatorioTurma, calcular_relatorio, roster_por_turma

logger = get_logger(__name__)


@dataclass
class ResultadoEnvio:
    aula_id: str
    resultado: Optional[ResultadoCorrecao]
    ja_enviado: bool = False

    def para_dict(self) -> dict:
        corpo = {'aula_id': self.aula_id, 'ja_enviado': self.ja_enviado}
        corpo.update(self.resultado.para_dict() if self.resultado else {'acertos': None, 'percentual': None})
        return corpo


def _aula_com_quiz(principal: Usuario, aula_id: str) -> PlanoAula:
    aula = documentos.aulas.obter(aula_id)
    if aula is None or not aula_visivel(aula, principal):
        raise NaoEncontrado("Aula não encontrada.")
    if not aula.questoes:
        raise NaoEncontrado("Esta aula não tem quiz.")
    return aula


def _resultado_gravado(aula: PlanoAula, estudante_id: str) -> ResultadoEnvio:
    submissao = documentos.submissoes.obter(SubmissaoQuiz.id_para(aula.id, estudante_id))
    if submissao is None:
        # Conclusão registrada sem submissão (dados anteriores às submissões)
        return ResultadoEnvio(aula.id, None, ja_enviado=True)
    acertos = acertos_sem_validar(aula.questoes, submissao.respostas)
    return ResultadoEnvio(aula.id, ResultadoCorrecao(acertos, len(aula.questoes)), ja_enviado=True)


def enviar_quiz(estudante: Usuario, aula_id: str, respostas) -> ResultadoEnvio:
    if estudante.papel != Papel.ESTUDANTE:
        raise AcessoNegado("Apenas estudantes enviam quizzes.")

    aula = _aula_com_quiz(estudante, aula_id)

    if aula.id in estudante.aulas_concluidas:
        logger.info(f"Reenvio ignorado: {estudante.email} já concluiu a aula {aula.id}")
        return _resultado_gravado(aula, estudante.id)

    respostas = normalizar_respostas(respostas)
    # Levanta QuizIncompleto antes de qualquer gravação
    resultado = corrigir(aula.questoes, respostas)

    submissao = SubmissaoQuiz(
        id=SubmissaoQuiz.id_para(aula.id, estudante.id),
        estudante_id=estudante.id,
        aula_id=aula.id,
        respostas=respostas,
    )
    try:
        documentos.submissoes.criar(submissao)
    except RegistroDuplicado:
        logger.warning(f"Envio concorrente do quiz {aula.id} por {estudante.email}; mantido o primeiro")
        documentos.usuarios.adicionar_item(estudante.id, 'aulas_concluidas', aula.id)
        return _resultado_gravado(aula, estudante.id)

    documentos.usuarios.adicionar_item(estudante.id, 'aulas_concluidas', aula.id)

    logger.info(f"Quiz enviado: aula {aula.id} por {estudante.email} ({resultado.percentual}%)")
    return ResultadoEnvio(aula.id, resultado)


def visualizar_quiz(principal: Usuario, aula_id: str) -> dict:
    """
    Estudante antes de concluir: questões sem o gabarito.
    Estudante depois de concluir: visão travada com gabarito, respostas e nota.
    Professor dono e administrador: questões com gabarito.
    """
    aula = _aula_com_quiz(principal, aula_id)
    questoes = [q.model_dump(by_alias=True) for q in aula.questoes]

    if principal.papel != Papel.ESTUDANTE:
        return {'aula_id': aula.id, 'titulo': aula.titulo, 'travado': False, 'questoes': questoes}

    concluido = aula.id in principal.aulas_concluidas
    if not concluido:
        for questao in questoes:
            questao.pop('correctAnswer')
        return {'aula_id': aula.id, 'titulo': aula.titulo, 'travado': False, 'questoes': questoes}

    submissao = documentos.submissoes.obter(SubmissaoQuiz.id_para(aula.id, principal.id))
    visao = {'aula_id': aula.id, 'titulo': aula.titulo, 'travado': True, 'questoes': questoes,
             'respostas': {}, 'acertos': None, 'total': len(aula.questoes), 'percentual': None}
    if submissao is not None:
        resultado = ResultadoCorrecao(acertos_sem_validar(aula.questoes, submissao.respostas), len(aula.questoes))
        visao.update(resultado.para_dict())
        visao['respostas'] = {str(i): opcao for i, opcao in submissao.respostas.items()}
    return visao


def relatorio_desempenho(principal: Usuario, aula_id: str) -> List[RelatorioTurma]:
    aula = documentos.aulas.obter(aula_id)
    if aula is None:
        raise NaoEncontrado("Aula não encontrada.")
    if not pode_editar(aula, principal):
        raise AcessoNegado("Apenas o professor da aula ou um administrador vê o relatório.")

    roster = roster_por_turma(
        documentos.usuarios.filtrar('papel', '==', Papel.ESTUDANTE.value),
        aula.turmas_vinculadas,
    )
    return calcular_relatorio(
        aula,
        documentos.turmas.listar(),
        roster,
        documentos.submissoes.filtrar('aula_id', '==', aula.id),
    )


def relatorio_csv(relatorios: List[RelatorioTurma]) -> str:
    """Uma linha por estudante; quem não enviou aparece sem nota."""
    saida = io.StringIO()
    escritor = csv.writer(saida, delimiter=';')
    escritor.writerow(['Turma', 'Estudante', 'Acertos', 'Percentual', 'Media da turma'])

    for relatorio in relatorios:
        for aluno in relatorio.alunos:
            escritor.writerow([relatorio.turma_nome, aluno.nome, aluno.acertos, aluno.percentual, relatorio.media])
        for nome in relatorio.pendentes:
            escritor.writerow([relatorio.turma_nome, nome, '', 'não enviado', relatorio.media])

    return saida.getvalue()
