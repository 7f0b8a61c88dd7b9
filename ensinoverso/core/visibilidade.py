"""
Filtro de Visibilidade por Papel.

Define o que cada principal enxerga: quais aulas (filtro puro, sem efeitos
colaterais) e quais seções da aplicação (tabela estática de capacidades).
"""

from typing import FrozenSet, Iterable, List, Optional

from ensinoverso.core.modelos import Papel, PlanoAula, Usuario

# === SEÇÕES DA APLICAÇÃO ===
PAINEL = 'painel'
TURMAS = 'turmas'
AULAS = 'aulas'
CONFIG = 'config'
VISUAIS = 'visuais'
QUIZ = 'quiz'

SECOES_POR_PAPEL = {
    Papel.ADMINISTRADOR: frozenset({PAINEL, TURMAS, AULAS, CONFIG, VISUAIS, QUIZ}),
    Papel.PROFESSOR: frozenset({PAINEL, AULAS}),
    Papel.ESTUDANTE: frozenset({PAINEL, AULAS}),
}


def secoes_permitidas(principal: Optional[Usuario]) -> FrozenSet[str]:
    if principal is None or not principal.aprovado:
        return frozenset()
    return SECOES_POR_PAPEL.get(principal.papel, frozenset())


def pode_acessar(principal: Optional[Usuario], secao: str) -> bool:
    return secao in secoes_permitidas(principal)


def aula_visivel(aula: PlanoAula, principal: Optional[Usuario]) -> bool:
    if principal is None:
        return False
    if principal.papel == Papel.ADMINISTRADOR:
        return True
    if principal.papel == Papel.PROFESSOR:
        return aula.dono_id == principal.id
    # Estudante: a aula precisa estar vinculada a ao menos uma de suas turmas
    return not set(aula.turmas_vinculadas).isdisjoint(principal.turmas_vinculadas)


def aulas_visiveis(aulas: Iterable[PlanoAula], principal: Optional[Usuario]) -> List[PlanoAula]:
    """
    Subconjunto das aulas visível ao principal, na ordem original.

    - Administrador: todas.
    - Professor: apenas as que criou.
    - Estudante: as vinculadas a alguma de suas turmas.
    """
    if principal is None:
        return []
    return [aula for aula in aulas if aula_visivel(aula, principal)]


def pode_editar(aula: PlanoAula, principal: Optional[Usuario]) -> bool:
    if principal is None or not principal.aprovado:
        return False
    if principal.papel == Papel.ADMINISTRADOR:
        return True
    return principal.papel == Papel.PROFESSOR and aula.dono_id == principal.id
