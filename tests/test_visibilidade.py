import random

from ensinoverso.core.modelos import Papel, PlanoAula, Usuario
from ensinoverso.core.visibilidade import (
    AULAS,
    CONFIG,
    aulas_visiveis,
    pode_acessar,
    pode_editar,
    secoes_permitidas,
)

TURMAS = ['t1', 't2', 't3', 't4']


def _aula(aula_id, dono, turmas):
    return PlanoAula(id=aula_id, dono_id=dono, disciplina='Matemática', serie='6º Ano', turmas_vinculadas=turmas)


def _usuario(uid, papel, turmas=(), aprovado=True):
    return Usuario(id=uid, nome=uid, papel=papel, aprovado=aprovado, turmas_vinculadas=list(turmas))


def test_admin_ve_todas():
    aulas = [_aula('a1', 'p1', []), _aula('a2', 'p2', ['t1'])]
    assert aulas_visiveis(aulas, _usuario('adm', Papel.ADMINISTRADOR)) == aulas


def test_professor_ve_apenas_as_suas():
    aulas = [_aula('a1', 'p1', ['t1']), _aula('a2', 'p2', ['t1'])]
    assert [a.id for a in aulas_visiveis(aulas, _usuario('p1', Papel.PROFESSOR))] == ['a1']


def test_estudante_ve_aulas_das_suas_turmas():
    aulas = [_aula('a1', 'p1', ['t1']), _aula('a2', 'p1', ['t2', 't3']), _aula('a3', 'p1', [])]
    estudante = _usuario('e1', Papel.ESTUDANTE, turmas=['t3'])
    assert [a.id for a in aulas_visiveis(aulas, estudante)] == ['a2']


def test_sem_principal_nao_ve_nada():
    assert aulas_visiveis([_aula('a1', 'p1', ['t1'])], None) == []


def test_predicados_em_colecoes_aleatorias():
    """O filtro é puro e cada papel obedece exatamente ao seu predicado."""
    gerador = random.Random(42)
    for _ in range(200):
        aulas = [
            _aula(f"a{i}", gerador.choice(['p1', 'p2', 'p3']), gerador.sample(TURMAS, gerador.randint(0, 3)))
            for i in range(gerador.randint(0, 12))
        ]
        copia = [a.model_copy(deep=True) for a in aulas]
        papel = gerador.choice(list(Papel))
        principal = _usuario(gerador.choice(['p1', 'p2', 'p3']), papel, gerador.sample(TURMAS, gerador.randint(0, 2)))

        visiveis = aulas_visiveis(aulas, principal)

        if papel == Papel.ADMINISTRADOR:
            esperado = aulas
        elif papel == Papel.PROFESSOR:
            esperado = [a for a in aulas if a.dono_id == principal.id]
        else:
            esperado = [a for a in aulas if set(a.turmas_vinculadas) & set(principal.turmas_vinculadas)]

        assert visiveis == esperado
        assert aulas == copia


def test_secoes_por_papel():
    assert pode_acessar(_usuario('adm', Papel.ADMINISTRADOR), CONFIG)
    assert not pode_acessar(_usuario('p', Papel.PROFESSOR), CONFIG)
    assert secoes_permitidas(_usuario('e', Papel.ESTUDANTE)) == {'painel', 'aulas'}


def test_pendente_nao_tem_secoes():
    pendente = _usuario('p', Papel.PROFESSOR, aprovado=False)
    assert secoes_permitidas(pendente) == frozenset()
    assert not pode_acessar(pendente, AULAS)


def test_pode_editar():
    aula = _aula('a1', 'p1', ['t1'])
    assert pode_editar(aula, _usuario('p1', Papel.PROFESSOR))
    assert not pode_editar(aula, _usuario('p2', Papel.PROFESSOR))
    assert pode_editar(aula, _usuario('adm', Papel.ADMINISTRADOR))
    assert not pode_editar(aula, _usuario('e', Papel.ESTUDANTE, ['t1']))
