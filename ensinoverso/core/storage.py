"""
Módulo de Integração com Google Cloud Storage (Service Layer)

Guarda as imagens do Ensinoverso (capas de turma e recursos visuais gerados)
e entrega Signed URLs temporárias para exibição.
"""

from datetime import timedelta
from typing import Optional
import uuid

from google.cloud import storage
from flask import current_app

from ensinoverso.core.erros import ServicoIndisponivel
from ensinoverso.core.logger import get_logger

logger = get_logger(__name__)

EXTENSOES = {
    'image/png': 'png',
    'image/jpeg': 'jpg',
    'image/webp': 'webp',
}


def _get_bucket() -> storage.Bucket:
    bucket_name = current_app.config.get('GCS_BUCKET_NAME')
    if not bucket_name:
        raise ServicoIndisponivel("GCS_BUCKET_NAME não configurado.")
    client = storage.Client(project=current_app.config['GOOGLE_CLOUD_PROJECT'])
    return client.bucket(bucket_name)


def generate_signed_url(blob_name: str, expiration: int = 3600) -> Optional[str]:
    """
    Gera uma Signed URL temporária para acesso seguro ao arquivo.
    Args:
        blob_name: ID interno do arquivo no GCS.
        expiration: Tempo em segundos (padrão 1 hora).
    """
    try:
        blob = _get_bucket().blob(blob_name)
        return blob.generate_signed_url(
            version="v4",
            expiration=timedelta(seconds=expiration),
            method="GET"
        )
    except Exception as e:
        logger.error(f"Erro ao gerar Signed URL para {blob_name}: {e}", exc_info=True)
        return None


def upload_imagem(conteudo: bytes, mime_type: str, prefixo: str) -> str:
    """
    Faz o upload e retorna o NOME DO BLOB (ID interno).
    NÃO torna o arquivo público.
    """
    if mime_type not in EXTENSOES:
        raise ValueError(f"Tipo de imagem não suportado: {mime_type}")

    nome_blob = f"{prefixo}/{uuid.uuid4().hex}.{EXTENSOES[mime_type]}"
    blob = _get_bucket().blob(nome_blob)
    blob.upload_from_string(conteudo, content_type=mime_type)

    logger.info(f"Imagem enviada ao bucket: {nome_blob}")
    return nome_blob


def delete_file(blob_name: Optional[str]) -> None:
    """Remove arquivo do Bucket pelo nome do blob."""
    if not blob_name or blob_name.startswith('http'):
        return

    try:
        _get_bucket().blob(blob_name).delete()
    except Exception as e:
        logger.error(f"Erro ao deletar arquivo {blob_name}: {e}", exc_info=True)
