"""
Rotas do Módulo de Turmas (somente administradores)
"""

from flask import jsonify

from . import turmas_bp
from . import services as turmas_services
from .forms import NovaTurmaForm, TurmaForm
from ensinoverso.auth.acesso import exigir_secao
from ensinoverso.core import documentos
from ensinoverso.core.formularios import exigir_confirmacao, validar
from ensinoverso.core.visibilidade import TURMAS


@turmas_bp.before_request
def restringir_acesso():
    exigir_secao(TURMAS)


@turmas_bp.route('/')
def listar():
    return jsonify([turmas_services.turma_para_json(t) for t in documentos.turmas.listar()])


@turmas_bp.route('/', methods=['POST'])
def criar():
    form = validar(NovaTurmaForm())
    turma = turmas_services.criar_turma(form.nome.data, form.serie.data)
    return jsonify(turmas_services.turma_para_json(turma)), 201


@turmas_bp.route('/<turma_id>')
def detalhe(turma_id):
    return jsonify(turmas_services.turma_para_json(turmas_services.obter_turma(turma_id)))


@turmas_bp.route('/<turma_id>', methods=['POST'])
def editar(turma_id):
    form = validar(TurmaForm())
    capa = None
    if form.capa.data:
        capa = (form.capa.data.read(), form.capa.data.mimetype)

    turma = turmas_services.editar_turma(
        turma_id, form.nome.data, form.serie.data, form.cor.data, form.icone.data, capa
    )
    return jsonify(turmas_services.turma_para_json(turma))


@turmas_bp.route('/<turma_id>/excluir', methods=['POST'])
def excluir(turma_id):
    exigir_confirmacao()
    turmas_services.excluir_turma(turma_id)
    return jsonify({'excluida': turma_id})


@turmas_bp.route('/<turma_id>/alunos')
def alunos(turma_id):
    return jsonify([u.para_json() for u in turmas_services.alunos_da_turma(turma_id)])


@turmas_bp.route('/<turma_id>/aulas')
def aulas(turma_id):
    return jsonify([a.para_json() for a in turmas_services.aulas_da_turma(turma_id)])
