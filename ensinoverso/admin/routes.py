"""
Rotas do Módulo Admin (seção de configurações)

Todas as rotas exigem um administrador aprovado.
"""

from flask import jsonify, request

from . import admin_bp
from . import services as admin_services
from .forms import HabilidadeForm, ImportacaoBNCCForm, UsuarioForm
from ensinoverso.aulas import services as aulas_services
from ensinoverso.auth.acesso import exigir_secao
from ensinoverso.core import documentos
from ensinoverso.core.formularios import exigir_confirmacao, validar
from ensinoverso.core.logger import get_logger
from ensinoverso.core.visibilidade import CONFIG

logger = get_logger(__name__)


@admin_bp.before_request
def restringir_acesso():
    exigir_secao(CONFIG)


# === USUÁRIOS ===

@admin_bp.route('/usuarios')
def listar_usuarios():
    usuarios = sorted(documentos.usuarios.listar(), key=lambda u: (u.aprovado, u.nome))
    return jsonify([u.para_json() for u in usuarios])


@admin_bp.route('/usuarios/<usuario_id>', methods=['POST'])
def atualizar_usuario(usuario_id):
    form = UsuarioForm()
    form.turmas.choices = [(t.id, t.nome) for t in documentos.turmas.listar()]
    validar(form)

    usuario = admin_services.atualizar_usuario(
        exigir_secao(CONFIG), usuario_id, form.papel.data, form.aprovado.data, form.turmas.data or []
    )
    return jsonify(usuario.para_json())


@admin_bp.route('/usuarios/<usuario_id>/excluir', methods=['POST'])
def excluir_usuario(usuario_id):
    exigir_confirmacao()
    admin_services.excluir_usuario(exigir_secao(CONFIG), usuario_id)
    return jsonify({'excluido': usuario_id})


# === HABILIDADES BNCC ===

@admin_bp.route('/bncc')
def listar_habilidades():
    habilidades = admin_services.buscar_habilidades(request.args.get('q'))
    return jsonify([h.para_json() for h in habilidades])


@admin_bp.route('/bncc', methods=['POST'])
def salvar_habilidade():
    form = validar(HabilidadeForm())
    habilidade = admin_services.salvar_habilidade(
        form.codigo.data, form.descricao.data, form.disciplina.data, form.serie.data
    )
    return jsonify(habilidade.para_json()), 201


@admin_bp.route('/bncc/<habilidade_id>/excluir', methods=['POST'])
def excluir_habilidade(habilidade_id):
    exigir_confirmacao()
    admin_services.excluir_habilidade(habilidade_id)
    return jsonify({'excluida': habilidade_id})


@admin_bp.route('/bncc/importar', methods=['POST'])
def importar_habilidades():
    form = validar(ImportacaoBNCCForm())
    texto = form.arquivo.data.read().decode('utf-8-sig', errors='replace')
    processadas = admin_services.importar_bncc(texto)
    return jsonify({'processadas': processadas})


# === MANUTENÇÃO ===

@admin_bp.route('/reparar-vinculos', methods=['POST'])
def reparar_vinculos():
    resultado = aulas_services.reparar_vinculos()
    logger.info(f"Reparo de vínculos solicitado: {resultado.total} turma(s) corrigidas")
    return jsonify(resultado.para_dict()), 200 if resultado.completo else 502
