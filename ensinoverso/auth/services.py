"""
Camada de Serviço (Service Layer) da Autenticação

Portão de sessão: transforma a identidade externa (uid do provedor) no
usuário da aplicação, com papel e aprovação. Cria o perfil no primeiro acesso.

Política de primeiro acesso: a primeira conta do sistema nasce Administrador
e aprovada; todas as seguintes nascem Professor, aguardando aprovação.
A escolha do primeiro administrador acontece uma única vez, pelo marcador
`meta/primeiro_admin` criado com `create()`. Se a coleção não puder ser lida,
o provisionamento falha em vez de promover alguém.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ensinoverso.core import documentos
from ensinoverso.core.erros import RegistroDuplicado
from ensinoverso.core.logger import get_logger
from ensinoverso.core.modelos import Papel, Usuario

logger = get_logger(__name__)

MARCADOR_ADMIN = ('meta', 'primeiro_admin')

ERRO_PERFIL = "Não foi possível carregar seu perfil. Tente novamente em instantes."


class EstadoSessao(str, Enum):
    NAO_AUTENTICADO = 'nao_autenticado'
    PERFIL_DESCONHECIDO = 'perfil_desconhecido'
    PERFIL_CARREGADO = 'perfil_carregado'
    PERFIL_PROVISIONADO = 'perfil_provisionado'


@dataclass
class ResultadoSessao:
    estado: EstadoSessao
    usuario: Optional[Usuario] = None
    erro: Optional[str] = None

    @property
    def aprovado(self) -> bool:
        return self.usuario is not None and self.usuario.aprovado

    def para_dict(self) -> dict:
        return {
            'estado': self.estado.value,
            'aprovado': self.aprovado,
            'usuario': self.usuario.para_json() if self.usuario else None,
            'erro': self.erro,
        }


def provisionar_usuario(uid: str, nome: Optional[str], email: str) -> Usuario:
    """
    Cria o perfil de um uid que ainda não tem registro.
    Se outra requisição criou o perfil no meio do caminho, devolve o existente.
    """
    primeiro = documentos.usuarios.vazia() and documentos.reservar(*MARCADOR_ADMIN, {'uid': uid})
    usuario = Usuario(
        id=uid,
        nome=(nome or email.split('@')[0]).strip(),
        email=email,
        papel=Papel.ADMINISTRADOR if primeiro else Papel.PROFESSOR,
        aprovado=primeiro,
    )

    try:
        documentos.usuarios.criar(usuario)
    except RegistroDuplicado:
        existente = documentos.usuarios.obter(uid)
        if existente is not None:
            return existente
        raise

    logger.info(f"Criando novo usuário: {email} (Role: {usuario.papel.value}, aprovado={usuario.aprovado})")
    return usuario


def resolver_principal(uid: Optional[str], nome: Optional[str] = None,
                       email: Optional[str] = None) -> ResultadoSessao:
    """
    Resolve o principal da sessão.

    Falhas de leitura não derrubam a requisição: o principal fica vazio e o
    resultado carrega uma mensagem de erro recuperável.
    """
    if not uid:
        return ResultadoSessao(EstadoSessao.NAO_AUTENTICADO)

    try:
        usuario = documentos.usuarios.obter(uid, estrito=True)
    except Exception as e:
        logger.error(f"Erro ao recuperar perfil {uid}: {e}", exc_info=True)
        return ResultadoSessao(EstadoSessao.PERFIL_DESCONHECIDO, erro=ERRO_PERFIL)

    if usuario is not None:
        return ResultadoSessao(EstadoSessao.PERFIL_CARREGADO, usuario)

    if not email:
        logger.warning(f"Perfil inexistente para {uid} e sem e-mail para provisionar.")
        return ResultadoSessao(EstadoSessao.PERFIL_DESCONHECIDO)

    try:
        usuario = provisionar_usuario(uid, nome, email)
    except Exception as e:
        logger.error(f"Erro ao provisionar perfil {uid}: {e}", exc_info=True)
        return ResultadoSessao(EstadoSessao.PERFIL_DESCONHECIDO, erro=ERRO_PERFIL)

    return ResultadoSessao(EstadoSessao.PERFIL_PROVISIONADO, usuario)
