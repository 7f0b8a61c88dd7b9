"""
Relatório de Desempenho por Turma.

`calcular_relatorio` é puro e refeito a cada consulta a partir das
submissões gravadas; nenhum relatório fica armazenado.

As estatísticas consideram apenas os estudantes da turma que enviaram o
quiz. Quem ainda não enviou aparece em `pendentes`.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from ensinoverso.core.modelos import Papel, PlanoAula, SubmissaoQuiz, Turma, Usuario
from .correcao import acertos_sem_validar, arredondar, percentual


@dataclass
class DesempenhoAluno:
    estudante_id: str
    nome: str
    acertos: int
    percentual: int


@dataclass
class TaxaQuestao:
    indice: int
    pergunta: str
    acertos: int
    taxa: int


@dataclass
class RelatorioTurma:
    turma_id: str
    turma_nome: str
    media: int = 0
    alunos: List[DesempenhoAluno] = field(default_factory=list)
    questoes: List[TaxaQuestao] = field(default_factory=list)
    pendentes: List[str] = field(default_factory=list)

    @property
    def enviados(self) -> int:
        return len(self.alunos)

    def para_dict(self) -> dict:
        return {
            'turma_id': self.turma_id,
            'turma_nome': self.turma_nome,
            'media': self.media,
            'enviados': self.enviados,
            'alunos': [vars(a) for a in self.alunos],
            'questoes': [vars(q) for q in self.questoes],
            'pendentes': self.pendentes,
        }


def _relatorio_turma(aula: PlanoAula, turma: Turma, alunos: List[Usuario],
                     por_estudante: Dict[str, SubmissaoQuiz]) -> RelatorioTurma:
    relatorio = RelatorioTurma(turma.id, turma.nome)
    total = len(aula.questoes)
    respondentes = []

    for aluno in alunos:
        submissao = por_estudante.get(aluno.id)
        if submissao is None:
            relatorio.pendentes.append(aluno.nome)
            continue
        respondentes.append(submissao)
        acertos = acertos_sem_validar(aula.questoes, submissao.respostas)
        relatorio.alunos.append(DesempenhoAluno(aluno.id, aluno.nome, acertos, percentual(acertos, total)))

    relatorio.alunos.sort(key=lambda a: (-a.percentual, a.nome))

    if relatorio.alunos:
        relatorio.media = arredondar(sum(a.percentual for a in relatorio.alunos), len(relatorio.alunos))

    for indice, questao in enumerate(aula.questoes):
        acertos = sum(1 for s in respondentes if s.respostas.get(indice) == questao.correta)
        taxa = percentual(acertos, len(respondentes))
        relatorio.questoes.append(TaxaQuestao(indice, questao.pergunta, acertos, taxa))

    return relatorio


def calcular_relatorio(aula: PlanoAula, turmas: Iterable[Turma], roster: Dict[str, List[Usuario]],
                       submissoes: Iterable[SubmissaoQuiz]) -> List[RelatorioTurma]:
    """
    Um relatório para cada turma vinculada à aula, na ordem de `turmas_vinculadas`.

    Args:
        turmas: turmas existentes (ids vinculados sem turma são ignorados).
        roster: id da turma -> estudantes da turma.
        submissoes: submissões da aula (de qualquer turma).
    """
    por_id = {turma.id: turma for turma in turmas}
    por_estudante = {s.estudante_id: s for s in submissoes if s.aula_id == aula.id}

    relatorios = []
    for turma_id in aula.turmas_vinculadas:
        turma = por_id.get(turma_id)
        if turma is None:
            continue
        relatorios.append(_relatorio_turma(aula, turma, roster.get(turma_id, []), por_estudante))
    return relatorios


def roster_por_turma(usuarios: Iterable[Usuario], turma_ids: Iterable[str]) -> Dict[str, List[Usuario]]:
    """Estudantes de cada turma: papel estudante e turma entre as vinculadas."""
    estudantes = [u for u in usuarios if u.papel == Papel.ESTUDANTE]
    return {
        turma_id: sorted((u for u in estudantes if turma_id in u.turmas_vinculadas), key=lambda u: u.nome)
        for turma_id in turma_ids
    }
