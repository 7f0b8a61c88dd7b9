"""
Rotas do Módulo de Aulas
"""

from flask import Response, jsonify, request, stream_with_context

from . import aulas_bp
from . import services as aulas_services
from ensinoverso.auth.acesso import estado_atual, exigir_papel, exigir_secao
from ensinoverso.core.erros import ErroValidacao
from ensinoverso.core.extensions import limite_geracao, limiter
from ensinoverso.core.formularios import exigir_confirmacao, ler_arquivo
from ensinoverso.core.modelos import Papel
from ensinoverso.core.parser import MIME_PDF
from ensinoverso.core.visibilidade import AULAS
from ensinoverso.core.logger import get_logger

logger = get_logger(__name__)

TIPOS_MATERIAL = {MIME_PDF, 'image/png', 'image/jpeg', 'image/webp'}


@aulas_bp.route('/')
def listar():
    exigir_secao(AULAS)
    aulas = aulas_services.biblioteca(estado_atual())
    return jsonify([aula.para_json() for aula in aulas])


@aulas_bp.route('/fluxo')
def fluxo():
    """Server-sent events: a biblioteca é reenviada a cada alteração."""
    principal = exigir_secao(AULAS)
    return Response(
        stream_with_context(aulas_services.fluxo_biblioteca(principal)),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
    )


@aulas_bp.route('/<aula_id>')
def detalhe(aula_id):
    principal = exigir_secao(AULAS)
    return jsonify(aulas_services.obter_aula_visivel(principal, aula_id).para_json())


@aulas_bp.route('/', methods=['POST'])
def criar():
    principal = exigir_papel(Papel.ADMINISTRADOR, Papel.PROFESSOR)
    aula, resultado = aulas_services.publicar_aula(principal, request.get_json(silent=True))
    return jsonify({'aula': aula.para_json(), 'sincronizacao': resultado.para_dict()}), 201


@aulas_bp.route('/<aula_id>', methods=['PUT'])
def editar(aula_id):
    principal = exigir_papel(Papel.ADMINISTRADOR, Papel.PROFESSOR)
    aula, resultado = aulas_services.publicar_aula(principal, request.get_json(silent=True), aula_id)
    return jsonify({'aula': aula.para_json(), 'sincronizacao': resultado.para_dict()})


@aulas_bp.route('/<aula_id>/excluir', methods=['POST'])
def excluir(aula_id):
    principal = exigir_papel(Papel.ADMINISTRADOR, Papel.PROFESSOR)
    exigir_confirmacao()
    resultado = aulas_services.excluir_aula(principal, aula_id)
    return jsonify({'excluida': aula_id, 'sincronizacao': resultado.para_dict()})


@aulas_bp.route('/rascunho', methods=['POST'])
@limiter.limit(limite_geracao)
def rascunho():
    """Material (PDF ou imagem) -> plano + 10 questões sugeridos pela IA."""
    exigir_papel(Papel.ADMINISTRADOR, Papel.PROFESSOR)

    disciplina = request.form.get('disciplina', '').strip()
    serie = request.form.get('serie', '').strip()
    tema = request.form.get('tema', '').strip()
    faltando = [nome for nome, valor in (('disciplina', disciplina), ('serie', serie), ('tema', tema)) if not valor]
    if faltando:
        raise ErroValidacao(faltando)

    conteudo, mime = ler_arquivo(tipos=TIPOS_MATERIAL)
    logger.info(f"Gerando rascunho de aula: {disciplina} / {serie} / '{tema}'")
    return jsonify(aulas_services.gerar_rascunho(disciplina, serie, tema, conteudo, mime))
