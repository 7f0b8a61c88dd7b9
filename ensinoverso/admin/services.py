"""
Camada de Serviço (Service Layer) do Admin

Usuários, habilidades BNCC (com importação em lote) e o passe de reparo dos
vínculos aula <-> turma.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional
import csv

from ensinoverso.core import documentos
from ensinoverso.core.erros import AcessoNegado, ErroValidacao, NaoEncontrado
from ensinoverso.core.logger import get_logger
from ensinoverso.core.modelos import HabilidadeBNCC, Papel, Usuario

logger = get_logger(__name__)

MARCAS_CABECALHO = ('código', 'codigo', 'descrição')


# === USUÁRIOS ===

def atualizar_usuario(admin: Usuario, usuario_id: str, papel: str, aprovado: bool,
                      turmas: List[str]) -> Usuario:
    usuario = documentos.usuarios.obter(usuario_id)
    if usuario is None:
        raise NaoEncontrado("Usuário não encontrado.")

    novo_papel = Papel(papel)
    if usuario.id == admin.id and (novo_papel != Papel.ADMINISTRADOR or not aprovado):
        raise AcessoNegado("Você não pode remover o seu próprio acesso de administrador.")

    existentes = {t.id for t in documentos.turmas.listar()}
    desconhecidas = [t for t in turmas if t not in existentes]
    if desconhecidas:
        raise ErroValidacao(['turmas'], f"Turmas inexistentes: {', '.join(desconhecidas)}.")

    atualizado = usuario.model_copy(update={
        'papel': novo_papel,
        'aprovado': aprovado,
        'turmas_vinculadas': list(dict.fromkeys(turmas)),
    })
    documentos.usuarios.salvar(atualizado)

    logger.info(f"Usuário {usuario.email} atualizado por {admin.email}: {novo_papel.value}, aprovado={aprovado}")
    return atualizado


def excluir_usuario(admin: Usuario, usuario_id: str) -> None:
    """Remove o perfil e as submissões de quiz do usuário."""
    if usuario_id == admin.id:
        raise AcessoNegado("Você não pode excluir a sua própria conta.")

    usuario = documentos.usuarios.obter(usuario_id)
    if usuario is None:
        raise NaoEncontrado("Usuário não encontrado.")

    for submissao in documentos.submissoes.filtrar('estudante_id', '==', usuario_id):
        documentos.submissoes.excluir(submissao.id)
    documentos.usuarios.excluir(usuario_id)

    logger.info(f"Usuário {usuario.email} excluído por {admin.email}")


# === HABILIDADES BNCC ===

def buscar_habilidades(termo: Optional[str] = None) -> List[HabilidadeBNCC]:
    habilidades = sorted(documentos.habilidades.listar(), key=lambda h: h.codigo)
    if not termo:
        return habilidades
    termo = termo.strip().lower()
    return [h for h in habilidades if termo in h.codigo.lower() or termo in h.descricao.lower()]


def salvar_habilidade(codigo: str, descricao: str, disciplina: Optional[str] = None,
                      serie: Optional[str] = None, ids_por_codigo: Optional[Dict[str, str]] = None) -> HabilidadeBNCC:
    """Upsert pelo código: um código já cadastrado é sobrescrito."""
    if ids_por_codigo is None:
        ids_por_codigo = {h.codigo: h.id for h in documentos.habilidades.listar()}

    habilidade = HabilidadeBNCC(
        id='',
        codigo=codigo,
        descricao=(descricao or '').strip() or 'Sem descrição',
        disciplina=(disciplina or '').strip() or 'Geral',
        serie=(serie or '').strip() or 'Geral',
    )
    habilidade.id = ids_por_codigo.get(habilidade.codigo) or documentos.habilidades.novo_id()
    ids_por_codigo[habilidade.codigo] = habilidade.id

    documentos.habilidades.salvar(habilidade, mesclar=False)
    return habilidade


def excluir_habilidade(habilidade_id: str) -> None:
    if documentos.habilidades.obter(habilidade_id) is None:
        raise NaoEncontrado("Habilidade não encontrada.")
    documentos.habilidades.excluir(habilidade_id)
    logger.info(f"Habilidade BNCC excluída: {habilidade_id}")


@dataclass
class LinhaBNCC:
    codigo: str
    descricao: str
    disciplina: str
    serie: str


def _separador(linha: str) -> str:
    if ';' in linha:
        return ';'
    if '\t' in linha:
        return '\t'
    return ','


def ler_csv_bncc(texto: str) -> List[LinhaBNCC]:
    """
    Colunas: código, descrição, disciplina, série (as duas últimas opcionais).
    O separador é detectado por linha (';', tabulação ou ',') e a primeira
    linha é ignorada quando é um cabeçalho.
    """
    linhas = [linha.strip() for linha in texto.splitlines() if linha.strip()]
    if linhas and any(marca in linhas[0].lower() for marca in MARCAS_CABECALHO):
        linhas = linhas[1:]

    resultado = []
    for linha in linhas:
        partes = next(csv.reader([linha], delimiter=_separador(linha)))
        partes = [p.strip() for p in partes] + [''] * 4
        resultado.append(LinhaBNCC(*partes[:4]))
    return resultado


def importar_bncc(texto: str) -> int:
    """Grava todas as linhas do CSV. Retorna quantas foram processadas."""
    linhas = ler_csv_bncc(texto)
    if not linhas:
        raise ErroValidacao(['arquivo'], "O arquivo não contém habilidades.")

    ids_por_codigo = {h.codigo: h.id for h in documentos.habilidades.listar()}
    for linha in linhas:
        salvar_habilidade(linha.codigo, linha.descricao, linha.disciplina, linha.serie, ids_por_codigo)

    logger.info(f"Importação BNCC: {len(linhas)} habilidades processadas")
    return len(linhas)
