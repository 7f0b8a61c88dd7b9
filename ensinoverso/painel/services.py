"""
Indicadores do painel inicial, por perfil.
"""

from typing import Dict

from ensinoverso.core import documentos
from ensinoverso.core.constants import MENSAGENS_BOAS_VINDAS
from ensinoverso.core.estado import ColecaoAtualizada, EstadoAplicacao
from ensinoverso.core.modelos import Papel


def _indicadores_admin() -> Dict[str, int]:
    usuarios = documentos.usuarios.listar()
    return {
        'usuarios': len(usuarios),
        'aguardando_aprovacao': sum(1 for u in usuarios if not u.aprovado),
        'turmas': len(documentos.turmas.listar()),
        'aulas': len(documentos.aulas.listar()),
        'habilidades_bncc': len(documentos.habilidades.listar()),
    }


def resumo(estado: EstadoAplicacao) -> dict:
    principal = estado.principal
    estado.despachar(ColecaoAtualizada('lessons', documentos.aulas.listar()))
    visiveis = estado.aulas_visiveis

    if principal.papel == Papel.ADMINISTRADOR:
        indicadores = _indicadores_admin()
    elif principal.papel == Papel.PROFESSOR:
        indicadores = {
            'aulas': len(visiveis),
            'turmas_atendidas': len({t for aula in visiveis for t in aula.turmas_vinculadas}),
            'quizzes': sum(1 for aula in visiveis if aula.questoes),
        }
    else:
        concluidas = set(principal.aulas_concluidas)
        com_quiz = [aula for aula in visiveis if aula.questoes]
        indicadores = {
            'aulas': len(visiveis),
            'quizzes_concluidos': sum(1 for aula in com_quiz if aula.id in concluidas),
            'quizzes_pendentes': sum(1 for aula in com_quiz if aula.id not in concluidas),
        }

    return {
        'nome': principal.nome,
        'papel': principal.papel.value,
        'boas_vindas': MENSAGENS_BOAS_VINDAS[principal.papel.value],
        'secoes': sorted(estado.secoes),
        'indicadores': indicadores,
    }
