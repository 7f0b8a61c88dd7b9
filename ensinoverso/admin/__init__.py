"""
Módulo Admin (Blueprint)

Configurações do sistema: gestão de usuários, base de habilidades BNCC e
reparo dos vínculos entre aulas e turmas.
"""

from flask import Blueprint

admin_bp = Blueprint('admin_bp', __name__, url_prefix='/admin')

from . import routes
