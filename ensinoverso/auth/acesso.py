"""
Controle de Acesso por Requisição.

Cada requisição monta seu próprio EstadoAplicacao a partir da sessão Flask;
nenhum principal sobrevive de uma requisição para outra.
"""

from flask import g, session

from ensinoverso.core.erros import AcessoNegado, ErroAutenticacao, ServicoIndisponivel
from ensinoverso.core.estado import ErroSessao, EstadoAplicacao, PrincipalDefinido, SessaoAlterada
from ensinoverso.core.modelos import Papel, Usuario
from ensinoverso.core.visibilidade import pode_acessar
from . import services as auth_services

CHAVE_SESSAO = 'identidade'


def iniciar_sessao(uid: str, nome: str = None, email: str = None) -> None:
    session[CHAVE_SESSAO] = {'uid': uid, 'nome': nome, 'email': email}
    session.modified = True


def encerrar_sessao() -> None:
    session.pop(CHAVE_SESSAO, None)


def carregar_estado() -> EstadoAplicacao:
    """Resolve o principal da sessão atual e guarda o estado em `g`."""
    identidade = session.get(CHAVE_SESSAO) or {}

    estado = EstadoAplicacao()
    estado.despachar(SessaoAlterada(identidade.get('uid')))

    resultado = auth_services.resolver_principal(
        identidade.get('uid'), identidade.get('nome'), identidade.get('email')
    )
    if resultado.erro:
        estado.despachar(ErroSessao(resultado.erro))
    else:
        estado.despachar(PrincipalDefinido(resultado.usuario))

    g.estado = estado
    g.sessao = resultado
    return estado


def estado_atual() -> EstadoAplicacao:
    if 'estado' not in g:
        carregar_estado()
    return g.estado


def exigir_principal() -> Usuario:
    estado = estado_atual()
    if estado.erro:
        raise ServicoIndisponivel(estado.erro)
    if estado.principal is None:
        raise ErroAutenticacao("Faça login para continuar.")
    if not estado.principal.aprovado:
        raise AcessoNegado("Sua conta está aguardando liberação do administrador.")
    return estado.principal


def exigir_secao(secao: str) -> Usuario:
    principal = exigir_principal()
    if not pode_acessar(principal, secao):
        raise AcessoNegado("Você não tem acesso a esta seção.")
    return principal


def exigir_papel(*papeis: Papel) -> Usuario:
    principal = exigir_principal()
    if principal.papel not in papeis:
        raise AcessoNegado("Seu perfil não permite esta ação.")
    return principal
