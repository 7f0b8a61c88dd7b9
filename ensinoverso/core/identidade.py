"""
Provedor de Identidade (Firebase Authentication)

Cadastro e login por e-mail e senha através da API REST do Identity Toolkit.
O provedor devolve apenas a identidade externa estável (uid); o perfil da
aplicação é resolvido depois pelo portão de sessão (auth/services.py).

Quem precisa reagir a login/logout registra um callback em `ao_mudar_sessao`.
"""

from typing import Callable, List, Optional
import threading

import requests
from flask import current_app

from ensinoverso.core.erros import ErroAutenticacao, ServicoIndisponivel
from ensinoverso.core.logger import get_logger

logger = get_logger(__name__)

URL_BASE = 'https://identitytoolkit.googleapis.com/v1/accounts'
EXTENSAO = 'identidade'

# Códigos do Firebase -> mensagens ao usuário
MENSAGENS_ERRO = {
    'EMAIL_NOT_FOUND': "Credenciais inválidas. Verifique seu e-mail e senha.",
    'INVALID_PASSWORD': "Credenciais inválidas. Verifique seu e-mail e senha.",
    'INVALID_LOGIN_CREDENTIALS': "Credenciais inválidas. Verifique seu e-mail e senha.",
    'USER_DISABLED': "Esta conta foi desativada.",
    'EMAIL_EXISTS': "Este e-mail já está em uso por outro usuário.",
    'WEAK_PASSWORD': "A senha deve ter pelo menos 6 caracteres.",
    'INVALID_EMAIL': "E-mail inválido.",
    'TOO_MANY_ATTEMPTS_TRY_LATER': "Muitas tentativas. Aguarde alguns minutos.",
}

CallbackSessao = Callable[[Optional[str]], None]


class ProvedorIdentidade:
    """Capacidade de autenticação: cadastrar, entrar, sair e observar a sessão."""

    def __init__(self, api_key: Optional[str], timeout: float = 10.0, http=None):
        self.api_key = api_key
        self.timeout = timeout
        self.http = http or requests.Session()
        self._callbacks: List[CallbackSessao] = []
        self._trava = threading.Lock()

    # === OPERAÇÕES ===

    def cadastrar(self, email: str, senha: str) -> str:
        uid = self._autenticar('signUp', email, senha)
        logger.info(f"Conta criada no provedor: {uid}")
        return uid

    def entrar(self, email: str, senha: str) -> str:
        return self._autenticar('signInWithPassword', email, senha)

    def entrar_externo(self, uid: str) -> str:
        """Login concluído por outro provedor (Google OAuth)."""
        self._notificar(uid)
        return uid

    def sair(self) -> None:
        self._notificar(None)

    def ao_mudar_sessao(self, callback: CallbackSessao) -> Callable[[], None]:
        with self._trava:
            self._callbacks.append(callback)

        def cancelar():
            with self._trava:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return cancelar

    # === INTERNOS ===

    def _autenticar(self, operacao: str, email: str, senha: str) -> str:
        """Credenciais recusadas também encerram a sessão anterior."""
        try:
            uid = self._chamar(operacao, email, senha)
        except ErroAutenticacao:
            self._notificar(None)
            raise
        self._notificar(uid)
        return uid

    def _notificar(self, uid: Optional[str]) -> None:
        with self._trava:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback(uid)

    def _chamar(self, operacao: str, email: str, senha: str) -> str:
        if not self.api_key:
            raise ServicoIndisponivel("Login por e-mail indisponível: FIREBASE_API_KEY não configurada.")

        try:
            resposta = self.http.post(
                f"{URL_BASE}:{operacao}",
                params={'key': self.api_key},
                json={'email': email, 'password': senha, 'returnSecureToken': True},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Falha de rede no Identity Toolkit ({operacao}): {e}", exc_info=True)
            raise ServicoIndisponivel("Serviço de autenticação indisponível. Tente novamente.") from e

        if resposta.status_code != 200:
            codigo = _codigo_erro(resposta)
            logger.warning(f"Identity Toolkit recusou {operacao} para {email}: {codigo}")
            raise ErroAutenticacao(
                MENSAGENS_ERRO.get(codigo, "Ocorreu um erro inesperado. Tente novamente mais tarde.")
            )

        return resposta.json()['localId']


def _codigo_erro(resposta) -> str:
    try:
        mensagem = resposta.json()['error']['message']
    except (ValueError, KeyError, TypeError):
        return 'DESCONHECIDO'
    # Ex.: "WEAK_PASSWORD : Password should be at least 6 characters"
    return mensagem.split(':')[0].strip()


def init_app(app, provedor: Optional[ProvedorIdentidade] = None) -> ProvedorIdentidade:
    provedor = provedor or ProvedorIdentidade(app.config.get('FIREBASE_API_KEY'))
    app.extensions[EXTENSAO] = provedor
    return provedor


def get_provedor() -> ProvedorIdentidade:
    return current_app.extensions[EXTENSAO]
