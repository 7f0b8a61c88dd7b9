"""
Módulo de Aulas (Blueprint)

Biblioteca de planos de aula: publicação, edição, exclusão e o fluxo ao vivo
da biblioteca visível a cada perfil.
"""

from flask import Blueprint

aulas_bp = Blueprint('aulas_bp', __name__, url_prefix='/aulas')

from . import routes
