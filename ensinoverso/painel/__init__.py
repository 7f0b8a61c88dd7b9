"""
Módulo do Painel (Blueprint)

Resumo inicial de cada perfil.
"""

from flask import Blueprint

painel_bp = Blueprint('painel_bp', __name__, url_prefix='/painel')

from . import routes
