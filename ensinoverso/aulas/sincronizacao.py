"""
Sincronizador de Vínculos Aula <-> Turma

Cada turma guarda uma lista desnormalizada de resumos das aulas vinculadas a
ela. A regra mantida aqui é:

    o resumo da aula A existe na turma T  <=>  T está em A.turmas_vinculadas

O planejamento é puro (recebe registros, devolve as turmas alteradas) e
só inclui turmas que realmente mudam, então repetir uma sincronização já
aplicada não gera nenhuma escrita. A aplicação grava as turmas em paralelo e
relata quantas foram aplicadas.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional

from ensinoverso.core.constants import FORMATO_DATA
from ensinoverso.core.logger import get_logger
from ensinoverso.core.modelos import PlanoAula, ResumoAulaTurma, Turma

logger = get_logger(__name__)

INCLUIR = 'incluir'
ATUALIZAR = 'atualizar'
REMOVER = 'remover'
REPARAR = 'reparar'


@dataclass(frozen=True)
class AlteracaoTurma:
    """Estado final de uma turma que precisa ser gravada."""

    turma: Turma
    acao: str


@dataclass
class ResultadoSincronizacao:
    aula_id: Optional[str]
    total: int
    aplicadas: List[str] = field(default_factory=list)
    falhas: Dict[str, str] = field(default_factory=dict)

    @property
    def completo(self) -> bool:
        return not self.falhas

    def para_dict(self) -> dict:
        return {
            'aula_id': self.aula_id,
            'total': self.total,
            'aplicadas': len(self.aplicadas),
            'falhas': self.falhas,
        }


def _resumo(aula: PlanoAula, hoje: Optional[date]) -> ResumoAulaTurma:
    return ResumoAulaTurma(
        id=aula.id,
        titulo=aula.titulo,
        data=(hoje or date.today()).strftime(FORMATO_DATA),
        categoria=aula.disciplina,
    )


def planejar_vinculos(aula: PlanoAula, turmas_desejadas: Iterable[str], turmas: Iterable[Turma],
                      hoje: Optional[date] = None) -> List[AlteracaoTurma]:
    """
    Alterações necessárias para que exatamente `turmas_desejadas` listem a aula.

    - vinculada e sem resumo: inclui o resumo (data de hoje);
    - vinculada e com resumo: atualiza título/categoria, mantendo a data do vínculo;
    - não vinculada e com resumo: remove o resumo;
    - não vinculada e sem resumo: nada.
    """
    desejadas = set(turmas_desejadas)
    alteracoes = []

    for turma in turmas:
        vinculada = turma.id in desejadas
        existente = turma.resumo(aula.id)

        if vinculada and existente is None:
            lista = turma.aulas + [_resumo(aula, hoje)]
            alteracoes.append(AlteracaoTurma(turma.model_copy(update={'aulas': lista}), INCLUIR))

        elif vinculada:
            if existente.titulo == aula.titulo and existente.categoria == aula.disciplina:
                continue
            lista = [
                r.model_copy(update={'titulo': aula.titulo, 'categoria': aula.disciplina}) if r.id == aula.id else r
                for r in turma.aulas
            ]
            alteracoes.append(AlteracaoTurma(turma.model_copy(update={'aulas': lista}), ATUALIZAR))

        elif existente is not None:
            lista = [r for r in turma.aulas if r.id != aula.id]
            alteracoes.append(AlteracaoTurma(turma.model_copy(update={'aulas': lista}), REMOVER))

    return alteracoes


def planejar_remocao(aula_id: str, turmas: Iterable[Turma]) -> List[AlteracaoTurma]:
    """Aula excluída: sai de todas as turmas, vinculadas ou não."""
    alteracoes = []
    for turma in turmas:
        if turma.resumo(aula_id) is None:
            continue
        lista = [r for r in turma.aulas if r.id != aula_id]
        alteracoes.append(AlteracaoTurma(turma.model_copy(update={'aulas': lista}), REMOVER))
    return alteracoes


def planejar_reparo(aulas: Iterable[PlanoAula], turmas: Iterable[Turma],
                    hoje: Optional[date] = None) -> List[AlteracaoTurma]:
    """
    Reconstrói a lista de cada turma a partir das aulas (fonte da verdade).

    Remove resumos órfãos ou duplicados, atualiza títulos e categorias e inclui
    resumos que faltam. Resumos válidos mantêm a posição e a data originais.
    """
    aulas = list(aulas)
    por_id = {aula.id: aula for aula in aulas}
    alteracoes = []

    for turma in turmas:
        lista = []
        vistos = set()

        for resumo in turma.aulas:
            aula = por_id.get(resumo.id)
            if aula is None or turma.id not in aula.turmas_vinculadas or resumo.id in vistos:
                continue
            vistos.add(resumo.id)
            lista.append(resumo.model_copy(update={'titulo': aula.titulo, 'categoria': aula.disciplina}))

        for aula in aulas:
            if turma.id in aula.turmas_vinculadas and aula.id not in vistos:
                vistos.add(aula.id)
                lista.append(_resumo(aula, hoje))

        if lista != turma.aulas:
            alteracoes.append(AlteracaoTurma(turma.model_copy(update={'aulas': lista}), REPARAR))

    return alteracoes


def aplicar_alteracoes(aula_id: Optional[str], alteracoes: List[AlteracaoTurma],
                       gravar: Callable[[Turma], None], tentativas: int = 2,
                       max_workers: int = 8) -> ResultadoSincronizacao:
    """
    Grava as turmas em paralelo (não há dependência de ordem entre elas).

    Turmas que falharem são tentadas de novo até `tentativas` rodadas; como
    cada escrita grava o estado final da turma, repetir é seguro.
    """
    resultado = ResultadoSincronizacao(aula_id, total=len(alteracoes))
    pendentes = list(alteracoes)

    for rodada in range(1, tentativas + 1):
        if not pendentes:
            break

        falhas = {}
        with ThreadPoolExecutor(max_workers=min(max_workers, len(pendentes))) as pool:
            futuros = {pool.submit(gravar, alteracao.turma): alteracao for alteracao in pendentes}
            for futuro in as_completed(futuros):
                turma_id = futuros[futuro].turma.id
                try:
                    futuro.result()
                    resultado.aplicadas.append(turma_id)
                except Exception as e:
                    logger.warning(f"Falha ao sincronizar turma {turma_id} (rodada {rodada}): {e}")
                    falhas[turma_id] = str(e)

        pendentes = [a for a in pendentes if a.turma.id in falhas]
        resultado.falhas = falhas

    if resultado.completo:
        logger.info(f"Sincronização da aula {aula_id}: {len(resultado.aplicadas)}/{resultado.total} turmas")
    else:
        logger.error(
            f"Sincronização parcial da aula {aula_id}: {len(resultado.aplicadas)}/{resultado.total} turmas"
        )
    return resultado
