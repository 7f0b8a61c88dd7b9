from datetime import date

import pytest
from google.api_core import exceptions as google_exceptions

from ensinoverso.aulas import services as aulas_services
from ensinoverso.core import documentos
from ensinoverso.core.erros import AcessoNegado, ErroValidacao, NaoEncontrado, SincronizacaoParcial
from ensinoverso.core.modelos import SEM_BNCC
from tests.dados import questoes_doc

HOJE = date(2025, 3, 10)


def _dados(**extra):
    dados = {
        'title': 'Equações',
        'subject': 'Matemática',
        'grade': '7º Ano',
        'schoolName': 'Escola Modelo',
        'content': 'Uma equação é uma igualdade...',
        'bnccCodes': ['ef07ma18'],
        'questions': questoes_doc([1, 2]),
        'linkedClassIds': ['t1', 't2'],
    }
    dados.update(extra)
    return dados


def _ids_nas_turmas(db, aula_id):
    return {
        turma_id for turma_id, turma in db.collection('classes').dados.items()
        if any(r['id'] == aula_id for r in turma['lessons'])
    }


def _prof():
    return documentos.usuarios.obter('prof')


def test_publicar_grava_aula_e_sincroniza_turmas(ctx, escola):
    aula, resultado = aulas_services.publicar_aula(_prof(), _dados(), hoje=HOJE)

    gravada = escola.documento('lessons', aula.id)
    assert gravada['ownerId'] == 'prof'
    assert gravada['bnccSkills'] == 'EF07MA18'
    assert gravada['teacherName'] == 'Paulo'
    assert resultado.total == 2 and resultado.completo
    assert _ids_nas_turmas(escola, aula.id) == {'t1', 't2'}
    resumo = next(r for r in escola.documento('classes', 't2')['lessons'] if r['id'] == aula.id)
    assert resumo == {'id': aula.id, 'title': 'Equações', 'date': '10/03/2025', 'category': 'Matemática'}


def test_campos_obrigatorios_bloqueiam_antes_de_gravar(ctx, escola):
    with pytest.raises(ErroValidacao) as erro:
        aulas_services.publicar_aula(_prof(), _dados(schoolName=' ', bnccCodes=[], linkedClassIds=[]))

    assert erro.value.campos == ['schoolName', 'bnccSkills', 'linkedClassIds']
    assert 'escola' in erro.value.mensagem
    assert len(escola.collection('lessons').dados) == 1


def test_serie_nao_e_obrigatoria(ctx, escola):
    aula, _ = aulas_services.publicar_aula(_prof(), _dados(grade=''), hoje=HOJE)

    assert aula.serie == ''
    assert escola.documento('lessons', aula.id)['grade'] == ''


def test_sem_bncc_usa_marcador(ctx, escola):
    aula, _ = aulas_services.publicar_aula(_prof(), _dados(bnccCodes=[], noBncc=True))
    assert aula.habilidades_bncc == SEM_BNCC


def test_turma_inexistente_e_recusada(ctx, escola):
    with pytest.raises(ErroValidacao):
        aulas_services.publicar_aula(_prof(), _dados(linkedClassIds=['t1', 'nao-existe']))


def test_estudante_nao_publica(ctx, escola):
    with pytest.raises(AcessoNegado):
        aulas_services.publicar_aula(documentos.usuarios.obter('aluno1'), _dados())


def test_editar_vinculos_move_a_aula(ctx, escola):
    aula, resultado = aulas_services.publicar_aula(
        _prof(), _dados(title='Frações revisadas', linkedClassIds=['t2']), aula_id='aula1', hoje=HOJE
    )

    assert resultado.total == 2
    assert _ids_nas_turmas(escola, 'aula1') == {'t2'}
    assert escola.documento('lessons', 'aula1')['linkedClassIds'] == ['t2']


def test_editar_sem_mudancas_nao_grava_turmas(ctx, escola):
    aula, _ = aulas_services.publicar_aula(_prof(), _dados(), hoje=HOJE)
    _, resultado = aulas_services.publicar_aula(_prof(), _dados(), aula_id=aula.id, hoje=HOJE)
    assert resultado.total == 0


def test_professor_nao_edita_aula_de_outro(ctx, escola):
    with pytest.raises(AcessoNegado):
        aulas_services.publicar_aula(documentos.usuarios.obter('prof2'), _dados(), aula_id='aula1')


def test_falha_em_uma_turma_mantem_aula_salva(ctx, escola):
    escola.falhar('classes', 't2', vezes=2)

    with pytest.raises(SincronizacaoParcial) as erro:
        aulas_services.publicar_aula(_prof(), _dados(), aula_id='aula1', hoje=HOJE)

    assert (erro.value.aplicadas, erro.value.total) == (1, 2)
    assert list(erro.value.falhas) == ['t2']
    assert escola.documento('lessons', 'aula1')['title'] == 'Equações'

    # Repetir a operação completa o vínculo
    aulas_services.publicar_aula(_prof(), _dados(), aula_id='aula1', hoje=HOJE)
    assert _ids_nas_turmas(escola, 'aula1') == {'t1', 't2'}


def test_modo_atomico_usa_um_unico_lote(ctx, escola):
    ctx.config['SINCRONIZACAO_ATOMICA'] = True
    aula, resultado = aulas_services.publicar_aula(_prof(), _dados(), hoje=HOJE)

    assert escola.commits == 1
    assert resultado.completo
    assert _ids_nas_turmas(escola, aula.id) == {'t1', 't2'}


def test_modo_atomico_nao_grava_nada_se_o_lote_falhar(ctx, escola):
    ctx.config['SINCRONIZACAO_ATOMICA'] = True
    escola.falhar('classes', 't2')

    with pytest.raises(google_exceptions.ServiceUnavailable):
        aulas_services.publicar_aula(_prof(), _dados(), aula_id='aula1', hoje=HOJE)

    assert escola.documento('lessons', 'aula1')['title'] == 'Frações'


def test_excluir_aula_remove_referencias(ctx, escola):
    escola.inserir('submissions', 'aula1_aluno1', {'studentId': 'aluno1', 'lessonId': 'aula1', 'answers': {}})
    documentos.usuarios.adicionar_item('aluno1', 'aulas_concluidas', 'aula1')

    aulas_services.excluir_aula(_prof(), 'aula1')

    assert escola.documento('lessons', 'aula1') is None
    assert _ids_nas_turmas(escola, 'aula1') == set()
    assert escola.documento('users', 'aluno1')['completedLessonIds'] == []
    assert escola.documento('submissions', 'aula1_aluno1') is None


def test_exclusao_interrompida_pode_ser_repetida(ctx, escola):
    escola.inserir('submissions', 'aula1_aluno1', {'studentId': 'aluno1', 'lessonId': 'aula1', 'answers': {}})
    documentos.usuarios.adicionar_item('aluno1', 'aulas_concluidas', 'aula1')
    escola.falhar('classes', 't1', vezes=2)

    with pytest.raises(SincronizacaoParcial) as erro:
        aulas_services.excluir_aula(_prof(), 'aula1')

    assert (erro.value.aplicadas, erro.value.total) == (0, 1)
    assert 'excluir novamente' in erro.value.mensagem
    # Nada some enquanto a turma ainda aponta para a aula
    assert escola.documento('lessons', 'aula1') is not None
    assert escola.documento('users', 'aluno1')['completedLessonIds'] == ['aula1']
    assert escola.documento('submissions', 'aula1_aluno1') is not None

    resultado = aulas_services.excluir_aula(_prof(), 'aula1')

    assert resultado.completo
    assert escola.documento('lessons', 'aula1') is None
    assert _ids_nas_turmas(escola, 'aula1') == set()
    assert escola.documento('users', 'aluno1')['completedLessonIds'] == []
    assert escola.documento('submissions', 'aula1_aluno1') is None


def test_excluir_aula_de_outro_professor(ctx, escola):
    with pytest.raises(AcessoNegado):
        aulas_services.excluir_aula(documentos.usuarios.obter('prof2'), 'aula1')


def test_reparar_vinculos(ctx, escola):
    escola.inserir('classes', 't2', {'name': '6B', 'lessons': [
        {'id': 'apagada', 'title': 'x', 'date': '01/01/2025', 'category': 'x'}
    ]})
    escola.inserir('lessons', 'aula2', {'ownerId': 'prof', 'subject': 'Artes', 'grade': '6º Ano',
                                        'linkedClassIds': ['t2']})

    resultado = aulas_services.reparar_vinculos(HOJE)

    assert resultado.completo
    assert [r['id'] for r in escola.documento('classes', 't2')['lessons']] == ['aula2']
    assert aulas_services.reparar_vinculos(HOJE).total == 0


def test_aula_invisivel_responde_como_inexistente(ctx, escola):
    with pytest.raises(NaoEncontrado):
        aulas_services.obter_aula_visivel(documentos.usuarios.obter('aluno3'), 'aula1')
    assert aulas_services.obter_aula_visivel(documentos.usuarios.obter('aluno1'), 'aula1').id == 'aula1'


def test_fluxo_envia_biblioteca_e_libera_assinatura(ctx, escola):
    fluxo = aulas_services.fluxo_biblioteca(documentos.usuarios.obter('aluno3'), intervalo=0.01)

    primeiro = next(fluxo)
    assert primeiro == 'data: []\n\n'
    assert escola.collection('lessons').ouvintes == 1

    escola.collection('lessons').document('aula9').set(
        {'ownerId': 'prof', 'subject': 'Artes', 'grade': '6º Ano', 'linkedClassIds': ['t2']}
    )
    assert '"aula9"' in next(fluxo)

    fluxo.close()
    assert escola.collection('lessons').ouvintes == 0
