"""
Módulo Principal da Aplicação (Application Factory)
"""

from flask import Flask, jsonify
from flask_wtf.csrf import CSRFError
from werkzeug.middleware.proxy_fix import ProxyFix  # Importação necessária para o Cloud Run
from config import Config

from .core import database, identidade
from .core.erros import ErroEnsinoverso
from .core.extensions import csrf, limiter, oauth
from .core.logger import get_logger

logger = get_logger(__name__)


def create_app(config_class=Config, db=None, provedor=None):
    """
    Cria e configura uma instância da aplicação Flask.

    Args:
        config_class: classe de configuração.
        db: cliente Firestore já criado (testes ou emulador). Sem ele, o
            cliente real é criado a partir de GOOGLE_CLOUD_PROJECT.
        provedor: provedor de identidade alternativo ao Identity Toolkit.
    """

    app = Flask(__name__, instance_relative_config=True)

    # === CORREÇÃO HTTPS (Cloud Run) ===
    # Atrás do proxy do Cloud Run as URLs externas precisam sair com 'https://'
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # 1. Carrega a configuração
    app.config.from_object(config_class)

    # 2. Serviços externos
    database.init_app(app, db)
    provedor = identidade.init_app(app, provedor)

    def _registrar_mudanca(uid):
        logger.info(f"Sessão alterada no provedor de identidade: {uid or 'anônimo'}")

    provedor.ao_mudar_sessao(_registrar_mudanca)

    # 3. Extensões
    csrf.init_app(app)
    limiter.init_app(app)
    oauth.init_app(app)

    google_client_id = app.config.get('GOOGLE_CLIENT_ID')
    google_client_secret = app.config.get('GOOGLE_CLIENT_SECRET')

    if google_client_id and google_client_secret:
        oauth.register(
            name='google',
            client_id=google_client_id,
            client_secret=google_client_secret,
            server_metadata_url='https://accounts.google.com/.well-known/openid-configuration',
            client_kwargs={
                'scope': 'openid email profile'
            }
        )
    else:
        logger.warning("GOOGLE_CLIENT_ID ou GOOGLE_CLIENT_SECRET não definidos. Login com Google desativado.")

    # 4. Configura os Blueprints (Módulos)
    from .auth import auth_bp
    app.register_blueprint(auth_bp)

    from .painel import painel_bp
    app.register_blueprint(painel_bp)

    from .aulas import aulas_bp
    app.register_blueprint(aulas_bp)

    from .quiz import quiz_bp
    app.register_blueprint(quiz_bp)

    from .turmas import turmas_bp
    app.register_blueprint(turmas_bp)

    from .ferramentas import ferramentas_bp
    app.register_blueprint(ferramentas_bp)

    from .admin import admin_bp
    app.register_blueprint(admin_bp)

    # 5. Tratamento de erros (todas as respostas em JSON)
    _registrar_erros(app)

    # 6. Rota de Health Check
    @app.route("/health")
    def health_check():
        return "Servidor Ensinoverso no ar!", 200

    return app


def _registrar_erros(app):

    @app.errorhandler(ErroEnsinoverso)
    def erro_de_dominio(e):
        return jsonify(e.para_dict()), e.status

    @app.errorhandler(ConnectionError)
    def banco_indisponivel(e):
        return jsonify({'erro': "Banco de dados indisponível. Tente novamente em instantes."}), 503

    @app.errorhandler(CSRFError)
    def csrf_invalido(e):
        logger.warning(f"Requisição recusada por CSRF: {e.description}")
        return jsonify({'erro': "Sessão expirada. Recarregue a página e tente novamente."}), 400

    @app.errorhandler(404)
    def nao_encontrada(e):
        return jsonify({'erro': "Página não encontrada", 'status': 404}), 404

    @app.errorhandler(405)
    def metodo_nao_permitido(e):
        return jsonify({'erro': "Método não permitido."}), 405

    @app.errorhandler(413)
    def arquivo_grande(e):
        return jsonify({'erro': "Arquivo muito grande (máximo 20 MB)."}), 413

    @app.errorhandler(429)
    def limite_excedido(e):
        return jsonify({'erro': f"Muitas requisições. Limite: {e.description}"}), 429

    @app.errorhandler(500)
    def erro_interno(e):
        logger.error(f"Erro interno: {e}", exc_info=True)
        return jsonify({'erro': "Erro interno do servidor."}), 500
