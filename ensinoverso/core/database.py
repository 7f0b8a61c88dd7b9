"""
Módulo de Conexão com o Banco de Dados (Core)

Mantém o cliente do Google Firestore registrado na aplicação Flask.
O SDK busca as credenciais na variável 'GOOGLE_APPLICATION_CREDENTIALS'.
"""

from flask import current_app
from google.cloud import firestore

from ensinoverso.core.logger import get_logger

logger = get_logger(__name__)

EXTENSAO = 'firestore'


def init_app(app, client=None) -> None:
    """
    Registra o cliente do Firestore em app.extensions.

    Um cliente pode ser injetado (testes, emuladores). Sem ele, o cliente real
    é criado; se a conexão falhar a aplicação sobe mesmo assim e cada acesso
    ao banco levanta ConnectionError.
    """
    if client is None:
        try:
            client = firestore.Client(project=app.config.get('GOOGLE_CLOUD_PROJECT'))
            logger.info("Conexão com o Firestore estabelecida com sucesso.")
        except Exception as e:
            logger.critical(f"Erro ao conectar com o Firestore: {e}", exc_info=True)
            client = None

    app.extensions[EXTENSAO] = client


def get_db():
    db = current_app.extensions.get(EXTENSAO)
    if db is None:
        logger.critical("Tentativa de acesso ao Firestore falhou: Cliente DB é None.")
        raise ConnectionError("Não foi possível conectar ao Firestore.")
    return db
