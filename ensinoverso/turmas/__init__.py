"""
Módulo de Turmas (Blueprint)

Administração das turmas: criação, edição (nome, série, capa), exclusão e
consulta dos estudantes e aulas de cada turma.
"""

from flask import Blueprint

turmas_bp = Blueprint('turmas_bp', __name__, url_prefix='/turmas')

from . import routes
