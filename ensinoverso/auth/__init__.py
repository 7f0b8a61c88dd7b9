"""
Módulo de Autenticação (Blueprint)

Define o Blueprint do Flask para o portão de sessão e as rotas de
autenticação (Login, Cadastro, Logout, Google OAuth).
"""

from flask import Blueprint

auth_bp = Blueprint('auth_bp', __name__, url_prefix='/auth')

# Importa as rotas no final para evitar dependência circular
from . import routes
