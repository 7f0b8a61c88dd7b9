"""
Módulo de Ferramentas (Blueprint)

Ferramentas de autoria com IA: recursos visuais e gerador de quiz avulso.
"""

from flask import Blueprint

ferramentas_bp = Blueprint('ferramentas_bp', __name__, url_prefix='/ferramentas')

from . import routes
