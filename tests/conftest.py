import os

# Config falha na importação sem SECRET_KEY
os.environ.setdefault('SECRET_KEY', 'chave-de-teste')

import pytest

from config import Config
from ensinoverso import create_app
from ensinoverso.core.erros import ErroAutenticacao
from ensinoverso.core.identidade import ProvedorIdentidade
from tests.dados import aula_doc, turma_doc, usuario_doc
from tests.fakefirestore import FakeFirestore


class ConfigTeste(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    GCS_BUCKET_NAME = 'bucket-de-teste'
    GOOGLE_API_KEY = 'chave-ia-de-teste'
    IA_ATRASO_INICIAL = 0.0
    SINCRONIZACAO_ATOMICA = False


class ProvedorEmMemoria(ProvedorIdentidade):
    """Contas em memória no lugar do Identity Toolkit."""

    def __init__(self):
        super().__init__(api_key='fake')
        self.contas = {}

    def _chamar(self, operacao, email, senha):
        if operacao == 'signUp':
            if email in self.contas:
                raise ErroAutenticacao("Este e-mail já está em uso por outro usuário.")
            self.contas[email] = (f"uid-{len(self.contas) + 1}", senha)
        conta = self.contas.get(email)
        if conta is None or conta[1] != senha:
            raise ErroAutenticacao("Credenciais inválidas. Verifique seu e-mail e senha.")
        return conta[0]


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def provedor():
    return ProvedorEmMemoria()


@pytest.fixture
def app(db, provedor):
    return create_app(ConfigTeste, db=db, provedor=provedor)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def escola(db):
    """Um administrador, três professores (um pendente), três estudantes, duas turmas e uma aula."""
    db.inserir('users', 'admin', usuario_doc('Ana', 'administrador'))
    db.inserir('users', 'prof', usuario_doc('Paulo', 'professor'))
    db.inserir('users', 'prof2', usuario_doc('Rita', 'professor'))
    db.inserir('users', 'pendente', usuario_doc('Novo', 'professor', aprovado=False))
    db.inserir('users', 'aluno1', usuario_doc('Bia', 'estudante', turmas=['t1']))
    db.inserir('users', 'aluno2', usuario_doc('Caio', 'estudante', turmas=['t1']))
    db.inserir('users', 'aluno3', usuario_doc('Davi', 'estudante', turmas=['t2']))
    db.inserir('classes', 't1', turma_doc('6A', [
        {'id': 'aula1', 'title': 'Frações', 'date': '01/03/2025', 'category': 'Matemática'}
    ]))
    db.inserir('classes', 't2', turma_doc('6B'))
    db.inserir('lessons', 'aula1', aula_doc('prof', turmas=['t1']))
    return db
