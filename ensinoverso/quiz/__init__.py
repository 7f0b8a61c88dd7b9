"""
Módulo de Quiz (Blueprint)

Envio e correção do quiz de cada aula pelos estudantes e o relatório de
desempenho por turma para professores e administradores.
"""

from flask import Blueprint

quiz_bp = Blueprint('quiz_bp', __name__, url_prefix='/quiz')

from . import routes
