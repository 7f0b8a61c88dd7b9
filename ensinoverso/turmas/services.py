"""
Camada de Serviço (Service Layer) das Turmas
"""

from typing import List, Optional

from ensinoverso.core import documentos, storage
from ensinoverso.core.constants import TURMA_PADRAO
from ensinoverso.core.erros import NaoEncontrado
from ensinoverso.core.logger import get_logger
from ensinoverso.core.modelos import Papel, PlanoAula, Turma, Usuario

logger = get_logger(__name__)

PREFIXO_CAPAS = 'capas'


def obter_turma(turma_id: str) -> Turma:
    turma = documentos.turmas.obter(turma_id)
    if turma is None:
        raise NaoEncontrado("Turma não encontrada.")
    return turma


def turma_para_json(turma: Turma) -> dict:
    corpo = turma.para_json()
    corpo['imageUrl'] = storage.generate_signed_url(turma.imagem_url) if turma.imagem_url else None
    return corpo


def criar_turma(nome: Optional[str] = None, serie: Optional[str] = None) -> Turma:
    turma = Turma(
        id=documentos.turmas.novo_id(),
        nome=(nome or '').strip() or TURMA_PADRAO['nome'],
        serie=(serie or '').strip() or TURMA_PADRAO['serie'],
        cor=TURMA_PADRAO['cor'],
        icone=TURMA_PADRAO['icone'],
    )
    documentos.turmas.salvar(turma, mesclar=False)
    logger.info(f"Turma criada: {turma.id} ({turma.nome})")
    return turma


def editar_turma(turma_id: str, nome: str, serie: str, cor: Optional[str] = None,
                 icone: Optional[str] = None, capa: Optional[tuple] = None) -> Turma:
    """
    Atualiza os dados da turma. `capa` é (bytes, mime) de uma nova imagem;
    a imagem anterior é removida do bucket depois do envio da nova.
    """
    turma = obter_turma(turma_id)
    alteracoes = {'nome': nome.strip(), 'serie': serie.strip()}
    if cor:
        alteracoes['cor'] = cor.strip()
    if icone:
        alteracoes['icone'] = icone.strip()

    capa_antiga = None
    if capa is not None:
        conteudo, mime = capa
        alteracoes['imagem_url'] = storage.upload_imagem(conteudo, mime, PREFIXO_CAPAS)
        capa_antiga = turma.imagem_url

    atualizada = turma.model_copy(update=alteracoes)
    documentos.turmas.salvar(atualizada)
    storage.delete_file(capa_antiga)

    logger.info(f"Turma editada: {turma_id}")
    return atualizada


def excluir_turma(turma_id: str) -> None:
    """Remove a turma e o id dela das aulas e dos usuários vinculados."""
    turma = obter_turma(turma_id)

    for aula in documentos.aulas.filtrar('turmas_vinculadas', 'array_contains', turma_id):
        documentos.aulas.remover_item(aula.id, 'turmas_vinculadas', turma_id)

    for usuario in documentos.usuarios.filtrar('turmas_vinculadas', 'array_contains', turma_id):
        documentos.usuarios.remover_item(usuario.id, 'turmas_vinculadas', turma_id)

    documentos.turmas.excluir(turma_id)
    storage.delete_file(turma.imagem_url)
    logger.info(f"Turma excluída: {turma_id} ({turma.nome})")


def alunos_da_turma(turma_id: str) -> List[Usuario]:
    obter_turma(turma_id)
    vinculados = documentos.usuarios.filtrar('turmas_vinculadas', 'array_contains', turma_id)
    return sorted((u for u in vinculados if u.papel == Papel.ESTUDANTE), key=lambda u: u.nome)


def aulas_da_turma(turma_id: str) -> List[PlanoAula]:
    """Aulas listadas na turma que ainda existem, na ordem da turma."""
    turma = obter_turma(turma_id)
    existentes = {aula.id: aula for aula in documentos.aulas.listar()}
    return [existentes[r.id] for r in turma.aulas if r.id in existentes]
