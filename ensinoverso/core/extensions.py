"""
Módulo Central de Extensões.
Evita importações circulares centralizando as instâncias das extensões.
"""
from flask import current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFProtect
from authlib.integrations.flask_client import OAuth

# 1. Limiter (Rate Limiting) - protege principalmente as rotas de IA
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["500 per day", "100 per hour"]
)

# 2. CSRF Protection
csrf = CSRFProtect()

# 3. OAuth (Authlib) - login opcional com Google
oauth = OAuth()


def limite_geracao() -> str:
    """Limite das rotas que chamam a IA (configurável em LIMITE_GERACAO)."""
    return current_app.config.get('LIMITE_GERACAO', '20 per hour')
