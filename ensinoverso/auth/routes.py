"""
Rotas do Módulo de Autenticação

Gerencia /login, /cadastro, /logout, login com Google e a consulta da sessão.
Todas as respostas são JSON.
"""

from flask import g, jsonify, redirect, url_for
from flask_wtf.csrf import generate_csrf

from . import auth_bp
from .acesso import carregar_estado, encerrar_sessao, estado_atual, iniciar_sessao
from .forms import CadastroForm, LoginForm
from ensinoverso.core.erros import ServicoIndisponivel
from ensinoverso.core.extensions import limiter, oauth
from ensinoverso.core.formularios import validar
from ensinoverso.core.identidade import get_provedor
from ensinoverso.core.logger import get_logger

logger = get_logger(__name__)


@auth_bp.before_app_request
def resolver_sessao():
    """Portão de sessão: todo request conhece seu principal (ou a falta dele)."""
    carregar_estado()


def _resposta_sessao(status: int = 200):
    corpo = g.sessao.para_dict()
    corpo['secoes'] = sorted(estado_atual().secoes)
    return jsonify(corpo), status


@auth_bp.route('/csrf')
def csrf_token():
    """Token CSRF para clientes que enviam formulários via fetch."""
    return jsonify({'csrf_token': generate_csrf()})


@auth_bp.route('/sessao')
def sessao():
    return _resposta_sessao()


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    form = validar(LoginForm())
    email = form.email.data.strip().lower()

    # Falha na autenticação deixa a sessão vazia, não a anterior
    encerrar_sessao()
    uid = get_provedor().entrar(email, form.senha.data)
    iniciar_sessao(uid, email=email)
    carregar_estado()

    logger.info(f"Login efetuado: {email}")
    return _resposta_sessao()


@auth_bp.route('/cadastro', methods=['POST'])
@limiter.limit("5 per minute")
def cadastro():
    form = validar(CadastroForm())
    nome = form.nome.data.strip().title()
    email = form.email.data.strip().lower()

    encerrar_sessao()
    uid = get_provedor().cadastrar(email, form.senha.data)
    # O portão de sessão cria o perfil no primeiro carregamento
    iniciar_sessao(uid, nome=nome, email=email)
    carregar_estado()

    return _resposta_sessao(201)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    get_provedor().sair()
    encerrar_sessao()
    carregar_estado()
    return _resposta_sessao()


# === LOGIN COM GOOGLE (OPCIONAL) ===

def _cliente_google():
    cliente = oauth.create_client('google')
    if cliente is None:
        raise ServicoIndisponivel("Login com Google não configurado.")
    return cliente


@auth_bp.route('/google/login')
def google_login():
    """ Redireciona para o Google. """
    redirect_uri = url_for('auth_bp.google_callback', _external=True)
    return _cliente_google().authorize_redirect(redirect_uri)


@auth_bp.route('/google/callback')
def google_callback():
    """ Retorno do Google após login. """
    google = _cliente_google()
    try:
        token = google.authorize_access_token()
        user_info = google.userinfo(token=token)
    except Exception as e:
        logger.error(f"Erro no login com Google: {e}", exc_info=True)
        return redirect(url_for('auth_bp.sessao'))

    uid = get_provedor().entrar_externo(f"google-{user_info.get('sub')}")
    iniciar_sessao(uid, nome=user_info.get('name'), email=user_info.get('email'))
    return redirect(url_for('painel_bp.index'))
