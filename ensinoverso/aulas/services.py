"""
Camada de Serviço (Service Layer) das Aulas

Publicação, edição e exclusão de planos de aula, sempre seguidas da
sincronização das turmas vinculadas. Também monta a biblioteca visível a cada
principal e o fluxo ao vivo dessa biblioteca.
"""

from datetime import date
from typing import Dict, Iterator, List, Optional, Set, Tuple
import json
import queue

from flask import current_app
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ensinoverso.core import documentos, geracao
from ensinoverso.core.erros import AcessoNegado, ErroValidacao, NaoEncontrado, SincronizacaoParcial
from ensinoverso.core.estado import ColecaoAtualizada, EstadoAplicacao, PrincipalDefinido
from ensinoverso.core.logger import get_logger
from ensinoverso.core.modelos import SEM_BNCC, Papel, PlanoAula, QuestaoQuiz, Turma, Usuario
from ensinoverso.core.visibilidade import aula_visivel, pode_editar
from .sincronizacao import (
    AlteracaoTurma,
    ResultadoSincronizacao,
    aplicar_alteracoes,
    planejar_remocao,
    planejar_reparo,
    planejar_vinculos,
)

logger = get_logger(__name__)

ROTULOS = {
    'schoolName': 'escola',
    'subject': 'disciplina',
    'bnccSkills': 'habilidades BNCC',
    'linkedClassIds': 'turmas',
    'content': 'conteúdo',
}


class AulaEntrada(BaseModel):
    """Dados do formulário de planejamento (JSON)."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    titulo: str = Field('', alias='title')
    disciplina: str = Field('', alias='subject')
    serie: str = Field('', alias='grade')
    escola: str = Field('', alias='schoolName')
    professor: str = Field('', alias='teacherName')
    objetivos: List[str] = Field(default_factory=list, alias='objectives')
    conteudo: str = Field('', alias='content')
    atividades: List[str] = Field(default_factory=list, alias='activities')
    avaliacao: str = Field('', alias='assessment')
    materiais_extras: List[str] = Field(default_factory=list, alias='extraMaterials')
    codigos_bncc: List[str] = Field(default_factory=list, alias='bnccCodes')
    sem_bncc: bool = Field(False, alias='noBncc')
    questoes: List[QuestaoQuiz] = Field(default_factory=list, alias='questions')
    turmas_vinculadas: List[str] = Field(default_factory=list, alias='linkedClassIds')


def ler_entrada(dados: Optional[dict]) -> AulaEntrada:
    try:
        return AulaEntrada.model_validate(dados or {})
    except ValidationError as e:
        campos = sorted({'.'.join(str(p) for p in erro['loc']) for erro in e.errors()})
        raise ErroValidacao(campos, f"Dados da aula inválidos: {', '.join(campos)}.")


def campos_pendentes(entrada: AulaEntrada) -> List[str]:
    """Campos obrigatórios para publicar (mesma regra do botão 'Publicar')."""
    pendentes = []
    if not entrada.escola.strip():
        pendentes.append('schoolName')
    if not entrada.disciplina.strip():
        pendentes.append('subject')
    if not entrada.sem_bncc and not [c for c in entrada.codigos_bncc if c.strip()]:
        pendentes.append('bnccSkills')
    if not entrada.turmas_vinculadas:
        pendentes.append('linkedClassIds')
    if not entrada.conteudo.strip():
        pendentes.append('content')
    return pendentes


def validar_entrada(entrada: AulaEntrada, turmas_existentes: Set[str]) -> None:
    pendentes = campos_pendentes(entrada)
    if pendentes:
        rotulos = ', '.join(ROTULOS[c] for c in pendentes)
        raise ErroValidacao(pendentes, f"Preencha os campos obrigatórios: {rotulos}.")

    desconhecidas = [t for t in entrada.turmas_vinculadas if t not in turmas_existentes]
    if desconhecidas:
        raise ErroValidacao(['linkedClassIds'], f"Turmas inexistentes: {', '.join(desconhecidas)}.")


def montar_aula(entrada: AulaEntrada, aula_id: str, dono_id: str, nome_professor: str) -> PlanoAula:
    codigos = [c.strip().upper() for c in entrada.codigos_bncc if c.strip()]
    return PlanoAula(
        id=aula_id,
        dono_id=dono_id,
        titulo=entrada.titulo.strip() or 'Plano de Aula',
        disciplina=entrada.disciplina.strip(),
        serie=entrada.serie.strip(),
        escola=entrada.escola.strip(),
        professor=entrada.professor.strip() or nome_professor,
        objetivos=entrada.objetivos,
        conteudo=entrada.conteudo,
        atividades=entrada.atividades,
        avaliacao=entrada.avaliacao,
        materiais_extras=[link.strip() for link in entrada.materiais_extras if link.strip()],
        habilidades_bncc=SEM_BNCC if entrada.sem_bncc else ', '.join(dict.fromkeys(codigos)),
        questoes=entrada.questoes,
        # dict.fromkeys: remove repetidos mantendo a ordem
        turmas_vinculadas=list(dict.fromkeys(entrada.turmas_vinculadas)),
    )


# === APLICAÇÃO DAS ALTERAÇÕES ===

def _gravar_turmas(aula_id: Optional[str], alteracoes: List[AlteracaoTurma]) -> ResultadoSincronizacao:
    app = current_app._get_current_object()

    def gravar(turma: Turma) -> None:
        # As threads do pool não herdam o contexto da aplicação
        with app.app_context():
            documentos.turmas.salvar(turma)

    return aplicar_alteracoes(aula_id, alteracoes, gravar)


def _gravar_em_lote(aula: PlanoAula, alteracoes: List[AlteracaoTurma]) -> ResultadoSincronizacao:
    lote = documentos.novo_lote()
    documentos.aulas.salvar_em_lote(lote, aula)
    for alteracao in alteracoes:
        documentos.turmas.salvar_em_lote(lote, alteracao.turma)
    lote.commit()

    return ResultadoSincronizacao(aula.id, total=len(alteracoes), aplicadas=[a.turma.id for a in alteracoes])


# === OPERAÇÕES ===

def publicar_aula(principal: Usuario, dados: dict, aula_id: Optional[str] = None,
                  hoje: Optional[date] = None) -> Tuple[PlanoAula, ResultadoSincronizacao]:
    """
    Cria (aula_id=None) ou edita uma aula e sincroniza as turmas.

    A validação acontece antes de qualquer escrita. No modo padrão a aula é
    gravada primeiro e as turmas depois; se alguma turma falhar, a aula
    continua salva e SincronizacaoParcial informa o que faltou.
    """
    if principal.papel not in (Papel.ADMINISTRADOR, Papel.PROFESSOR):
        raise AcessoNegado("Apenas professores e administradores publicam aulas.")

    entrada = ler_entrada(dados)

    existente = None
    if aula_id:
        existente = documentos.aulas.obter(aula_id)
        if existente is None:
            raise NaoEncontrado("Aula não encontrada.")
        if not pode_editar(existente, principal):
            raise AcessoNegado("Você só pode editar as aulas que criou.")

    turmas = documentos.turmas.listar()
    validar_entrada(entrada, {t.id for t in turmas})

    aula = montar_aula(
        entrada,
        aula_id=aula_id or documentos.aulas.novo_id(),
        dono_id=existente.dono_id if existente else principal.id,
        nome_professor=principal.nome,
    )

    if current_app.config.get('SINCRONIZACAO_ATOMICA'):
        alteracoes = planejar_vinculos(aula, aula.turmas_vinculadas, turmas, hoje)
        resultado = _gravar_em_lote(aula, alteracoes)
    else:
        documentos.aulas.salvar(aula, mesclar=False)
        # Relê as turmas depois da gravação da aula
        alteracoes = planejar_vinculos(aula, aula.turmas_vinculadas, documentos.turmas.listar(), hoje)
        resultado = _gravar_turmas(aula.id, alteracoes)

    if not resultado.completo:
        raise SincronizacaoParcial(aula.id, len(resultado.aplicadas), resultado.total, resultado.falhas)

    acao = 'editada' if existente else 'criada'
    logger.info(f"Aula {acao}: {aula.id} por {principal.email} ({len(aula.turmas_vinculadas)} turmas)")
    return aula, resultado


def excluir_aula(principal: Usuario, aula_id: str) -> ResultadoSincronizacao:
    """
    Remove a aula e tudo que aponta para ela: resumos nas turmas, conclusões
    dos estudantes e submissões de quiz.

    O documento da aula é o último a sair. Se alguma turma falhar, a aula
    fica onde está e a exclusão pode ser repetida até completar.
    """
    aula = documentos.aulas.obter(aula_id)
    if aula is None:
        raise NaoEncontrado("Aula não encontrada.")
    if not pode_editar(aula, principal):
        raise AcessoNegado("Você só pode excluir as aulas que criou.")

    resultado = _gravar_turmas(aula_id, planejar_remocao(aula_id, documentos.turmas.listar()))
    if not resultado.completo:
        raise SincronizacaoParcial(aula_id, len(resultado.aplicadas), resultado.total, resultado.falhas,
                                   exclusao=True)

    for usuario in documentos.usuarios.filtrar('aulas_concluidas', 'array_contains', aula_id):
        documentos.usuarios.remover_item(usuario.id, 'aulas_concluidas', aula_id)

    for submissao in documentos.submissoes.filtrar('aula_id', '==', aula_id):
        documentos.submissoes.excluir(submissao.id)

    documentos.aulas.excluir(aula_id)

    logger.info(f"Aula excluída: {aula_id} por {principal.email}")
    return resultado


def reparar_vinculos(hoje: Optional[date] = None) -> ResultadoSincronizacao:
    """Passe de reparo: corrige qualquer divergência entre aulas e turmas."""
    alteracoes = planejar_reparo(documentos.aulas.listar(), documentos.turmas.listar(), hoje)
    if alteracoes:
        logger.warning(f"Reparo de vínculos: {len(alteracoes)} turma(s) divergentes")
    return _gravar_turmas(None, alteracoes)


# === LEITURA ===

def biblioteca(estado: EstadoAplicacao) -> List[PlanoAula]:
    """Aulas visíveis ao principal do estado, a partir da coleção atual."""
    estado.despachar(ColecaoAtualizada('lessons', documentos.aulas.listar()))
    return estado.aulas_visiveis


def obter_aula_visivel(principal: Usuario, aula_id: str) -> PlanoAula:
    aula = documentos.aulas.obter(aula_id)
    # Aula invisível responde como inexistente
    if aula is None or not aula_visivel(aula, principal):
        raise NaoEncontrado("Aula não encontrada.")
    return aula


def fluxo_biblioteca(principal: Usuario, intervalo: float = 25.0) -> Iterator[str]:
    """
    Server-sent events com a biblioteca visível, reenviada a cada alteração
    da coleção de aulas. A assinatura é cancelada quando o cliente desconecta.
    """
    fila: "queue.Queue[list]" = queue.Queue()

    estado = EstadoAplicacao()
    estado.despachar(PrincipalDefinido(principal))

    def ao_despachar(est: EstadoAplicacao, acao) -> None:
        if isinstance(acao, ColecaoAtualizada) and acao.colecao == 'lessons':
            fila.put([aula.para_json() for aula in est.aulas_visiveis])

    estado.assinar(ao_despachar)
    cancelar = documentos.aulas.assinar(
        lambda registros: estado.despachar(ColecaoAtualizada('lessons', registros))
    )

    try:
        while True:
            try:
                payload = fila.get(timeout=intervalo)
            except queue.Empty:
                yield ": keep-alive\n\n"
                continue
            yield f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"
    finally:
        cancelar()
        logger.info(f"Fluxo da biblioteca encerrado para {principal.email}")


def gerar_rascunho(disciplina: str, serie: str, tema: str, conteudo: bytes, mime: str) -> Dict:
    """Plano + 10 questões sugeridos pela IA. Nada é gravado."""
    plano = geracao.gerar_plano_de_documento(disciplina, serie, tema, conteudo, mime)
    questoes = geracao.gerar_questoes(conteudo, mime)
    return {
        **plano.model_dump(by_alias=True),
        'subject': disciplina,
        'grade': serie,
        'questions': [q.model_dump(by_alias=True) for q in questoes],
    }
