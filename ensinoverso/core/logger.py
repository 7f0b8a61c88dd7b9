"""
Módulo de Logging Centralizado.

Todos os módulos do Ensinoverso registram eventos por aqui, no stdout,
que é o destino lido pelo Cloud Logging em containers.
"""

import logging
import os
import sys

FORMATO = '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'


def get_logger(name: str) -> logging.Logger:
    """
    Retorna o logger do módulo com formatação padronizada.

    Args:
        name (str): O nome do módulo que está chamando o log (geralmente __name__).

    Returns:
        logging.Logger: Instância configurada do logger.
    """
    logger = logging.getLogger(name)

    # Um único handler por logger, mesmo com recarregamentos do módulo
    if not logger.handlers:
        nivel = os.environ.get('LOG_LEVEL', 'INFO').upper()
        logger.setLevel(getattr(logging, nivel, logging.INFO))

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(FORMATO))
        logger.addHandler(handler)

    return logger
