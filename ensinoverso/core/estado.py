"""
Contêiner de Estado da Aplicação.

O estado (sessão, principal, snapshots das coleções) só muda por ações
tipadas despachadas em `despachar`. Assinantes são notificados a cada ação.
O estado derivado (aulas visíveis, seções) é calculado no acesso a partir
do principal e das coleções atuais.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional
import threading

from ensinoverso.core.logger import get_logger
from ensinoverso.core.modelos import PlanoAula, Usuario
from ensinoverso.core.visibilidade import aulas_visiveis, secoes_permitidas

logger = get_logger(__name__)


# === AÇÕES ===

@dataclass(frozen=True)
class SessaoAlterada:
    uid: Optional[str]


@dataclass(frozen=True)
class PrincipalDefinido:
    usuario: Optional[Usuario]


@dataclass(frozen=True)
class ColecaoAtualizada:
    colecao: str
    registros: List = field(default_factory=list)


@dataclass(frozen=True)
class ErroSessao:
    mensagem: str


Acao = object
Ouvinte = Callable[['EstadoAplicacao', Acao], None]


class EstadoAplicacao:
    """Estado de uma sessão: quem está logado e o que ele já carregou."""

    def __init__(self):
        self.uid: Optional[str] = None
        self.principal: Optional[Usuario] = None
        self.erro: Optional[str] = None
        self.colecoes: Dict[str, List] = {}
        self._ouvintes: List[Ouvinte] = []
        self._trava = threading.RLock()

    # === REDUCER ===

    def despachar(self, acao: Acao) -> None:
        with self._trava:
            if isinstance(acao, SessaoAlterada):
                if acao.uid != self.uid:
                    # Troca de sessão invalida o principal anterior
                    self.principal = None
                    logger.debug(f"Sessão alterada: {self.uid} -> {acao.uid}")
                self.uid = acao.uid
                self.erro = None
            elif isinstance(acao, PrincipalDefinido):
                self.principal = acao.usuario
                if acao.usuario is not None:
                    self.erro = None
            elif isinstance(acao, ColecaoAtualizada):
                self.colecoes[acao.colecao] = list(acao.registros)
            elif isinstance(acao, ErroSessao):
                self.principal = None
                self.erro = acao.mensagem
            else:
                raise TypeError(f"Ação desconhecida: {acao!r}")
            ouvintes = list(self._ouvintes)

        for ouvinte in ouvintes:
            ouvinte(self, acao)

    def assinar(self, ouvinte: Ouvinte) -> Callable[[], None]:
        with self._trava:
            self._ouvintes.append(ouvinte)

        def cancelar():
            with self._trava:
                if ouvinte in self._ouvintes:
                    self._ouvintes.remove(ouvinte)

        return cancelar

    # === ESTADO DERIVADO ===

    def colecao(self, nome: str) -> List:
        return list(self.colecoes.get(nome, []))

    @property
    def autenticado(self) -> bool:
        return self.uid is not None

    @property
    def aulas_visiveis(self) -> List[PlanoAula]:
        return aulas_visiveis(self.colecao('lessons'), self.principal)

    @property
    def secoes(self) -> FrozenSet[str]:
        return secoes_permitidas(self.principal)
