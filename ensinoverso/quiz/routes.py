"""
Rotas do Módulo de Quiz
"""

from flask import Response, jsonify, request

from . import quiz_bp
from . import services as quiz_services
from ensinoverso.auth.acesso import exigir_papel, exigir_secao
from ensinoverso.core.modelos import Papel
from ensinoverso.core.visibilidade import AULAS


@quiz_bp.route('/<aula_id>')
def visualizar(aula_id):
    principal = exigir_secao(AULAS)
    return jsonify(quiz_services.visualizar_quiz(principal, aula_id))


@quiz_bp.route('/<aula_id>/enviar', methods=['POST'])
def enviar(aula_id):
    estudante = exigir_papel(Papel.ESTUDANTE)
    dados = request.get_json(silent=True) or {}
    envio = quiz_services.enviar_quiz(estudante, aula_id, dados.get('answers'))
    return jsonify(envio.para_dict()), 200 if envio.ja_enviado else 201


@quiz_bp.route('/<aula_id>/relatorio')
def relatorio(aula_id):
    principal = exigir_papel(Papel.ADMINISTRADOR, Papel.PROFESSOR)
    relatorios = quiz_services.relatorio_desempenho(principal, aula_id)
    return jsonify([r.para_dict() for r in relatorios])


@quiz_bp.route('/<aula_id>/relatorio.csv')
def relatorio_csv(aula_id):
    principal = exigir_papel(Papel.ADMINISTRADOR, Papel.PROFESSOR)
    conteudo = quiz_services.relatorio_csv(quiz_services.relatorio_desempenho(principal, aula_id))
    return Response(
        conteudo,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename=relatorio_{aula_id}.csv'},
    )
