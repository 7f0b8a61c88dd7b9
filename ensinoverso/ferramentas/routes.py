"""
Rotas do Módulo de Ferramentas
"""

from flask import jsonify

from . import ferramentas_bp
from .forms import QuizForm, VisualForm
from ensinoverso.auth.acesso import exigir_secao
from ensinoverso.core import geracao, storage
from ensinoverso.core.erros import ServicoIndisponivel
from ensinoverso.core.extensions import limite_geracao, limiter
from ensinoverso.core.formularios import validar
from ensinoverso.core.logger import get_logger
from ensinoverso.core.visibilidade import QUIZ, VISUAIS

logger = get_logger(__name__)

PREFIXO_VISUAIS = 'visuais'


@ferramentas_bp.route('/visual', methods=['POST'])
@limiter.limit(limite_geracao)
def gerar_visual():
    principal = exigir_secao(VISUAIS)
    form = validar(VisualForm())

    imagem = geracao.gerar_imagem(form.prompt.data.strip())
    if imagem is None:
        raise ServicoIndisponivel("A IA não conseguiu gerar a imagem. Tente outra descrição.")

    conteudo, mime = imagem
    nome_blob = storage.upload_imagem(conteudo, mime, PREFIXO_VISUAIS)
    logger.info(f"Recurso visual gerado por {principal.email}: {nome_blob}")

    return jsonify({'blob': nome_blob, 'url': storage.generate_signed_url(nome_blob)}), 201


@ferramentas_bp.route('/quiz', methods=['POST'])
@limiter.limit(limite_geracao)
def gerar_quiz():
    exigir_secao(QUIZ)
    form = validar(QuizForm())

    questoes = geracao.gerar_quiz(
        form.disciplina.data.strip(), form.serie.data.strip(), form.tema.data.strip(), form.quantidade.data
    )
    return jsonify([q.model_dump(by_alias=True) for q in questoes])
