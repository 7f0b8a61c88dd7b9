from flask import jsonify

from . import painel_bp
from . import services as painel_services
from ensinoverso.auth.acesso import estado_atual, exigir_secao
from ensinoverso.core.visibilidade import PAINEL


@painel_bp.route('/')
def index():
    exigir_secao(PAINEL)
    return jsonify(painel_services.resumo(estado_atual()))
