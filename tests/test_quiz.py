from concurrent.futures import ThreadPoolExecutor

import pytest

from ensinoverso.core import documentos
from ensinoverso.core.erros import AcessoNegado, ErroValidacao, NaoEncontrado, QuizIncompleto
from ensinoverso.core.modelos import PlanoAula, QuestaoQuiz, SubmissaoQuiz, Turma, Usuario, Papel
from ensinoverso.quiz import services as quiz_services
from ensinoverso.quiz.correcao import arredondar, corrigir, normalizar_respostas, percentual
from ensinoverso.quiz.desempenho import calcular_relatorio, roster_por_turma

CORRETAS = [0, 1, 2, 3, 0, 1, 2, 3, 0, 1]


def _questoes(corretas=CORRETAS):
    return [QuestaoQuiz(pergunta=f"Q{i}", opcoes=['a', 'b', 'c', 'd'], correta=c) for i, c in enumerate(corretas)]


def _respostas_com_acertos(acertos, corretas=CORRETAS):
    return {i: (c if i < acertos else (c + 1) % 4) for i, c in enumerate(corretas)}


# === CORREÇÃO ===

def test_sete_de_dez():
    resultado = corrigir(_questoes(), _respostas_com_acertos(7))
    assert (resultado.acertos, resultado.total, resultado.percentual) == (7, 10, 70)


def test_arredondamento_meio_para_cima():
    assert percentual(1, 3) == 33
    assert percentual(2, 3) == 67
    assert percentual(1, 8) == 13   # 12.5
    assert arredondar(5, 2) == 3    # 2.5
    assert percentual(0, 0) == 0


def test_quiz_incompleto_lista_as_questoes_faltando():
    respostas = _respostas_com_acertos(10)
    del respostas[2], respostas[9]

    with pytest.raises(QuizIncompleto) as erro:
        corrigir(_questoes(), respostas)

    assert erro.value.faltando == [2, 9]
    assert '3, 10' in erro.value.mensagem


def test_alternativa_inexistente():
    respostas = _respostas_com_acertos(10)
    respostas[0] = 4
    with pytest.raises(ErroValidacao):
        corrigir(_questoes(), respostas)


def test_normalizar_respostas():
    assert normalizar_respostas({'0': 2, '1': None, 2: '3'}) == {0: 2, 2: 3}
    assert normalizar_respostas([1, 0]) == {0: 1, 1: 0}
    with pytest.raises(ErroValidacao):
        normalizar_respostas("1,2")


# === ENVIO ===

def _estudante(uid='aluno1'):
    return documentos.usuarios.obter(uid)


def test_envio_grava_submissao_e_conclusao(ctx, escola):
    envio = quiz_services.enviar_quiz(_estudante(), 'aula1', _respostas_com_acertos(7))

    assert envio.para_dict() == {'aula_id': 'aula1', 'ja_enviado': False, 'acertos': 7, 'total': 10,
                                 'percentual': 70}
    assert 'aula1' in escola.documento('users', 'aluno1')['completedLessonIds']
    assert escola.documento('submissions', 'aula1_aluno1')['studentId'] == 'aluno1'


def test_reenvio_devolve_resultado_gravado(ctx, escola):
    quiz_services.enviar_quiz(_estudante(), 'aula1', _respostas_com_acertos(7))

    envio = quiz_services.enviar_quiz(_estudante(), 'aula1', _respostas_com_acertos(10))

    assert envio.ja_enviado
    assert envio.resultado.percentual == 70
    assert escola.documento('users', 'aluno1')['completedLessonIds'] == ['aula1']


def test_incompleto_nao_grava_nada(ctx, escola):
    respostas = _respostas_com_acertos(10)
    del respostas[5]

    with pytest.raises(QuizIncompleto):
        quiz_services.enviar_quiz(_estudante(), 'aula1', respostas)

    assert escola.documento('users', 'aluno1')['completedLessonIds'] == []
    assert escola.documento('submissions', 'aula1_aluno1') is None


def test_envios_simultaneos_gravam_uma_unica_submissao(ctx, escola):
    estudante = _estudante()

    def enviar(acertos):
        with ctx.app_context():
            return quiz_services.enviar_quiz(estudante, 'aula1', _respostas_com_acertos(acertos))

    with ThreadPoolExecutor(max_workers=4) as pool:
        envios = list(pool.map(enviar, [3, 5, 7, 9]))

    assert sum(1 for e in envios if not e.ja_enviado) == 1
    primeiro = next(e for e in envios if not e.ja_enviado)
    assert all(e.resultado.percentual == primeiro.resultado.percentual for e in envios)
    assert escola.documento('users', 'aluno1')['completedLessonIds'] == ['aula1']
    assert len(escola.collection('submissions').dados) == 1


def test_estudante_de_outra_turma_nao_ve_o_quiz(ctx, escola):
    with pytest.raises(NaoEncontrado):
        quiz_services.enviar_quiz(_estudante('aluno3'), 'aula1', _respostas_com_acertos(10))


def test_professor_nao_envia_quiz(ctx, escola):
    with pytest.raises(AcessoNegado):
        quiz_services.enviar_quiz(documentos.usuarios.obter('prof'), 'aula1', {})


def test_visao_do_estudante_esconde_gabarito_ate_concluir(ctx, escola):
    visao = quiz_services.visualizar_quiz(_estudante(), 'aula1')
    assert not visao['travado']
    assert all('correctAnswer' not in q for q in visao['questoes'])

    quiz_services.enviar_quiz(_estudante(), 'aula1', _respostas_com_acertos(7))
    visao = quiz_services.visualizar_quiz(_estudante(), 'aula1')

    assert visao['travado']
    assert [q['correctAnswer'] for q in visao['questoes']] == CORRETAS
    assert visao['percentual'] == 70
    assert visao['respostas']['9'] == (CORRETAS[9] + 1) % 4


# === RELATÓRIO ===

def _submissao(estudante_id, acertos, aula_id='a1'):
    return SubmissaoQuiz(id=f"{aula_id}_{estudante_id}", estudante_id=estudante_id, aula_id=aula_id,
                         respostas=_respostas_com_acertos(acertos))


def test_relatorio_por_turma():
    aula = PlanoAula(id='a1', dono_id='p', disciplina='M', serie='6', questoes=_questoes(),
                     turmas_vinculadas=['t1', 't2', 'apagada'])
    turmas = [Turma(id='t1', nome='6A'), Turma(id='t2', nome='6B')]
    alunos = [
        Usuario(id='e1', nome='Bia', papel=Papel.ESTUDANTE, turmas_vinculadas=['t1']),
        Usuario(id='e2', nome='Caio', papel=Papel.ESTUDANTE, turmas_vinculadas=['t1']),
        Usuario(id='e3', nome='Davi', papel=Papel.ESTUDANTE, turmas_vinculadas=['t1']),
        Usuario(id='e4', nome='Eva', papel=Papel.ESTUDANTE, turmas_vinculadas=['t2']),
        Usuario(id='p', nome='Prof', papel=Papel.PROFESSOR, turmas_vinculadas=['t1']),
    ]
    roster = roster_por_turma(alunos, aula.turmas_vinculadas)

    relatorios = calcular_relatorio(aula, turmas, roster, [_submissao('e1', 6), _submissao('e2', 9)])

    t1, t2 = relatorios
    assert [a.nome for a in t1.alunos] == ['Caio', 'Bia']
    assert t1.media == 75
    assert t1.pendentes == ['Davi']
    assert [q.taxa for q in t1.questoes] == [100] * 6 + [50] * 3 + [0]

    assert t2.alunos == []
    assert t2.media == 0
    assert t2.pendentes == ['Eva']
    assert all(q.taxa == 0 for q in t2.questoes)


def test_relatorio_restrito_ao_dono_e_admin(ctx, escola):
    quiz_services.enviar_quiz(_estudante(), 'aula1', _respostas_com_acertos(8))

    relatorios = quiz_services.relatorio_desempenho(documentos.usuarios.obter('prof'), 'aula1')
    assert relatorios[0].para_dict()['media'] == 80
    assert relatorios[0].pendentes == ['Caio']

    with pytest.raises(AcessoNegado):
        quiz_services.relatorio_desempenho(documentos.usuarios.obter('prof2'), 'aula1')


def test_relatorio_csv(ctx, escola):
    quiz_services.enviar_quiz(_estudante(), 'aula1', _respostas_com_acertos(8))
    relatorios = quiz_services.relatorio_desempenho(documentos.usuarios.obter('admin'), 'aula1')

    linhas = quiz_services.relatorio_csv(relatorios).splitlines()

    assert linhas[0] == 'Turma;Estudante;Acertos;Percentual;Media da turma'
    assert linhas[1] == '6A;Bia;8;80;80'
    assert linhas[2] == '6A;Caio;;não enviado;80'
