"""
Módulo de Parsing de Documentos e Respostas da IA

Responsável por:
1. Extrair texto bruto dos PDFs enviados pelos professores.
2. Limpar e decodificar o JSON devolvido pelo Gemini.
"""

import json
from io import BytesIO
from typing import Any

import pdfplumber

from ensinoverso.core.logger import get_logger

logger = get_logger(__name__)

MIME_PDF = 'application/pdf'


def eh_pdf(conteudo: bytes) -> bool:
    """Validação por Magic Number, não pela extensão."""
    return conteudo[:4] == b'%PDF'


def extrair_texto_pdf(conteudo: bytes) -> str:
    """
    Lê o PDF e extrai texto preservando layout de tabelas via pdfplumber.
    PDFs escaneados (sem camada de texto) retornam string vazia.
    """
    try:
        texto_completo = ""

        with pdfplumber.open(BytesIO(conteudo)) as pdf:
            for page in pdf.pages:
                texto_pag = page.extract_text(layout=True)
                if texto_pag:
                    texto_completo += texto_pag + "\n"

        return texto_completo.strip()

    except Exception as e:
        logger.error(f"Erro no pdfplumber: {e}", exc_info=True)
        return ""


def decodificar_json(texto: str) -> Any:
    """
    Decodifica a resposta do modelo. Remove a cerca de código
    (```json ... ```) que às vezes acompanha a resposta.
    """
    bruto = (texto or '').strip()
    if bruto.startswith("```"):
        bruto = bruto.strip("`").strip()
        if bruto.lower().startswith("json"):
            bruto = bruto[4:]
    return json.loads(bruto.strip())
