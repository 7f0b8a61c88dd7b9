"""
Configuração Centralizada de IA (GenAI).
Evita re-configuração e importações repetidas.
"""
from typing import Callable, TypeVar
import time

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from flask import current_app

from ensinoverso.core.erros import ServicoIndisponivel
from ensinoverso.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

_configurado: bool = False


def configurar_genai() -> None:
    """
    Configura a API Key do Gemini uma única vez.
    """
    global _configurado
    if _configurado:
        return

    api_key = current_app.config.get('GOOGLE_API_KEY')
    if not api_key:
        raise ServicoIndisponivel("GOOGLE_API_KEY não configurada.")

    genai.configure(api_key=api_key)
    _configurado = True


def get_generative_model(chave_modelo: str = 'MODELO_QUIZ') -> genai.GenerativeModel:
    """Modelo configurado em `Config` pela chave (MODELO_PLANO, MODELO_QUIZ, MODELO_IMAGEM)."""
    configurar_genai()
    return genai.GenerativeModel(current_app.config[chave_modelo])


def erro_de_cota(erro: Exception) -> bool:
    if isinstance(erro, google_exceptions.ResourceExhausted):
        return True
    mensagem = str(erro)
    return '429' in mensagem or 'RESOURCE_EXHAUSTED' in mensagem


def com_retentativa(funcao: Callable[[], T], tentativas: int = None, atraso: float = None) -> T:
    """
    Executa `funcao` repetindo em erros de cota com backoff exponencial.

    Padrão: 3 novas tentativas, começando em 2s e dobrando a cada uma.
    Outros erros propagam imediatamente.
    """
    if tentativas is None:
        tentativas = current_app.config.get('IA_TENTATIVAS', 3)
    if atraso is None:
        atraso = current_app.config.get('IA_ATRASO_INICIAL', 2.0)

    while True:
        try:
            return funcao()
        except Exception as e:
            if not erro_de_cota(e):
                raise
            if tentativas <= 0:
                logger.error(f"Cota da IA esgotada após todas as tentativas: {e}")
                raise ServicoIndisponivel(
                    "O serviço de IA está sobrecarregado. Tente novamente em alguns minutos."
                ) from e
            logger.warning(
                f"Limite de cota atingido. Tentando novamente em {atraso:.1f}s ({tentativas} tentativas restantes)"
            )
            time.sleep(atraso)
            tentativas -= 1
            atraso *= 2
