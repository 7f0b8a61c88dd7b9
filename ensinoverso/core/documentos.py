"""
Camada de Acesso a Documentos (Document Store)

Coleções tipadas sobre o Firestore: toda leitura é validada pelo modelo
pydantic correspondente e toda escrita parte de um registro já validado.

Erros de permissão ou documento inexistente na leitura são tratados como
resultado vazio e registrados no log; demais falhas do backend propagam.
Decisões de privilégio (perfil do principal, primeira conta) usam leituras
estritas, em que nenhum erro vira "não existe".
"""

from typing import Callable, Generic, List, Optional, Type, TypeVar
import uuid

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from pydantic import ValidationError

from ensinoverso.core.database import get_db
from ensinoverso.core.erros import RegistroDuplicado
from ensinoverso.core.logger import get_logger
from ensinoverso.core.modelos import (
    HabilidadeBNCC,
    PlanoAula,
    Registro,
    SubmissaoQuiz,
    Turma,
    Usuario,
)

logger = get_logger(__name__)

M = TypeVar('M', bound=Registro)

ERROS_RECUPERAVEIS = (google_exceptions.PermissionDenied, google_exceptions.NotFound)


class Colecao(Generic[M]):
    """Coleção do Firestore com registros de um único modelo."""

    def __init__(self, nome: str, modelo: Type[M]):
        self.nome = nome
        self.modelo = modelo

    def _ref(self):
        return get_db().collection(self.nome)

    def _campo(self, atributo: str) -> str:
        """Nome gravado no banco para um atributo do modelo."""
        campo = self.modelo.model_fields[atributo]
        return campo.alias or atributo

    def _converter(self, doc_id: str, dados: Optional[dict]) -> Optional[M]:
        try:
            return self.modelo.model_validate({**(dados or {}), 'id': doc_id})
        except ValidationError as e:
            logger.warning(f"Documento inválido ignorado em '{self.nome}/{doc_id}': {e.error_count()} erro(s)")
            return None

    def _converter_snapshots(self, snapshots) -> List[M]:
        registros = []
        for doc in snapshots:
            registro = self._converter(doc.id, doc.to_dict())
            if registro is not None:
                registros.append(registro)
        return registros

    # === LEITURA ===

    def listar(self) -> List[M]:
        try:
            return self._converter_snapshots(self._ref().stream())
        except ERROS_RECUPERAVEIS as e:
            logger.warning(f"Sem acesso à coleção '{self.nome}': {e}")
            return []

    def filtrar(self, atributo: str, operador: str, valor) -> List[M]:
        try:
            consulta = self._ref().where(self._campo(atributo), operador, valor)
            return self._converter_snapshots(consulta.stream())
        except ERROS_RECUPERAVEIS as e:
            logger.warning(f"Sem acesso à coleção '{self.nome}': {e}")
            return []

    def obter(self, doc_id: str, estrito: bool = False) -> Optional[M]:
        if not doc_id:
            return None
        try:
            doc = self._ref().document(doc_id).get()
        except ERROS_RECUPERAVEIS as e:
            if estrito:
                raise
            logger.warning(f"Sem acesso ao documento '{self.nome}/{doc_id}': {e}")
            return None

        if not doc.exists:
            return None
        return self._converter(doc.id, doc.to_dict())

    def vazia(self) -> bool:
        """Leitura estrita: sem permissão de listagem o erro propaga."""
        return not list(self._ref().limit(1).stream())

    # === ESCRITA ===

    def novo_id(self) -> str:
        return uuid.uuid4().hex

    def salvar(self, registro: M, mesclar: bool = True) -> M:
        self._ref().document(registro.id).set(registro.para_documento(), merge=mesclar)
        return registro

    def salvar_em_lote(self, lote, registro: M) -> None:
        lote.set(self._ref().document(registro.id), registro.para_documento(), merge=True)

    def criar(self, registro: M) -> M:
        """Grava o documento apenas se ele ainda não existir."""
        try:
            self._ref().document(registro.id).create(registro.para_documento())
        except google_exceptions.Conflict:
            raise RegistroDuplicado(f"Registro '{self.nome}/{registro.id}' já existe.")
        return registro

    def excluir(self, doc_id: str) -> None:
        self._ref().document(doc_id).delete()

    def adicionar_item(self, doc_id: str, atributo: str, valor) -> None:
        """União atômica em campo lista (não duplica)."""
        self._ref().document(doc_id).update({self._campo(atributo): firestore.ArrayUnion([valor])})

    def remover_item(self, doc_id: str, atributo: str, valor) -> None:
        self._ref().document(doc_id).update({self._campo(atributo): firestore.ArrayRemove([valor])})

    # === ASSINATURA ===

    def assinar(self, callback: Callable[[List[M]], None]) -> Callable[[], None]:
        """
        Entrega o snapshot completo da coleção a cada alteração.
        Retorna a função que cancela a assinatura.
        """
        def _ao_alterar(snapshots, alteracoes, momento):
            try:
                callback(self._converter_snapshots(snapshots))
            except Exception as e:
                logger.error(f"Erro no callback da coleção '{self.nome}': {e}", exc_info=True)

        watch = self._ref().on_snapshot(_ao_alterar)
        logger.info(f"Assinatura aberta na coleção '{self.nome}'")
        return watch.unsubscribe


def novo_lote():
    """WriteBatch do Firestore: todas as escritas confirmam juntas ou nenhuma."""
    return get_db().batch()


def reservar(colecao: str, doc_id: str, dados: dict) -> bool:
    """
    Cria um documento marcador uma única vez.
    Devolve False se ele já existia (outra requisição chegou antes).
    """
    try:
        get_db().collection(colecao).document(doc_id).create(dados)
    except google_exceptions.Conflict:
        return False
    return True


usuarios: Colecao[Usuario] = Colecao('users', Usuario)
turmas: Colecao[Turma] = Colecao('classes', Turma)
aulas: Colecao[PlanoAula] = Colecao('lessons', PlanoAula)
submissoes: Colecao[SubmissaoQuiz] = Colecao('submissions', SubmissaoQuiz)
habilidades: Colecao[HabilidadeBNCC] = Colecao('bncc', HabilidadeBNCC)
