"""
Módulo de Configuração (Blindado)

Define a classe de configuração principal. Implementa o padrão 'Fail Fast':
se uma variável crítica estiver faltando, a aplicação nem inicia.
"""

import os
from dotenv import load_dotenv

# Carrega variáveis do arquivo .env
load_dotenv()

# O callback do Google OAuth roda em http apenas no ambiente local.
if os.environ.get('FLASK_DEBUG') == '1':
    os.environ['OAUTHLIB_INSECURE_TRANSPORT'] = '1'


def _flag(nome: str, padrao: str = 'False') -> bool:
    return os.environ.get(nome, padrao).lower() in ('true', '1')


class Config:
    """
    Classe de configuração base da aplicação.
    """

    # === SEGURANÇA CRÍTICA (Fail Fast) ===
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        raise ValueError("ERRO CRÍTICO: 'SECRET_KEY' não encontrada no .env. A aplicação não pode iniciar insegura.")

    # === GOOGLE CLOUD (Firestore & Storage) ===
    GOOGLE_CLOUD_PROJECT = os.environ.get('GOOGLE_CLOUD_PROJECT')
    GCS_BUCKET_NAME = os.environ.get('GCS_BUCKET_NAME')

    if not GCS_BUCKET_NAME:
        print("AVISO: 'GCS_BUCKET_NAME' não configurado. Capas de turma e recursos visuais não serão salvos.")

    # === AUTENTICAÇÃO (Firebase Identity Toolkit) ===
    FIREBASE_API_KEY = os.environ.get('FIREBASE_API_KEY')
    if not FIREBASE_API_KEY:
        print("AVISO: 'FIREBASE_API_KEY' ausente. Login por e-mail e senha indisponível.")

    # === IA GENERATIVA (Gemini) ===
    GOOGLE_API_KEY = os.environ.get('GOOGLE_API_KEY')
    if not GOOGLE_API_KEY:
        print("AVISO: 'GOOGLE_API_KEY' ausente. A geração de aulas e quizzes não funcionará.")

    MODELO_PLANO = os.environ.get('MODELO_PLANO', 'gemini-2.5-pro')
    MODELO_QUIZ = os.environ.get('MODELO_QUIZ', 'gemini-2.5-flash')
    MODELO_IMAGEM = os.environ.get('MODELO_IMAGEM', 'gemini-2.5-flash-image')

    # Política de retentativa para erros de cota (429 / RESOURCE_EXHAUSTED)
    IA_TENTATIVAS = int(os.environ.get('IA_TENTATIVAS', '3'))
    IA_ATRASO_INICIAL = float(os.environ.get('IA_ATRASO_INICIAL', '2.0'))

    # === SINCRONIZAÇÃO AULA <-> TURMA ===
    # Quando ativo, a aula e todas as turmas são gravadas num único WriteBatch.
    SINCRONIZACAO_ATOMICA = _flag('SINCRONIZACAO_ATOMICA')

    # === FLASK ===
    DEBUG = _flag('FLASK_DEBUG')
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024

    # === RATE LIMIT ===
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    LIMITE_GERACAO = os.environ.get('LIMITE_GERACAO', '20 per hour')

    # === OAUTH (LOGIN COM GOOGLE, OPCIONAL) ===
    GOOGLE_CLIENT_ID = os.environ.get('GOOGLE_CLIENT_ID')
    GOOGLE_CLIENT_SECRET = os.environ.get('GOOGLE_CLIENT_SECRET')
