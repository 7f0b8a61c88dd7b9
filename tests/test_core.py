import unittest
from unittest.mock import MagicMock, patch
import json

import pytest
from google.api_core import exceptions as google_exceptions
import requests

from ensinoverso.core import documentos, geracao, parser
from ensinoverso.core.ai import com_retentativa
from ensinoverso.core.erros import ErroAutenticacao, RegistroDuplicado, ServicoIndisponivel
from ensinoverso.core.identidade import ProvedorIdentidade
from ensinoverso.core.modelos import HabilidadeBNCC, SubmissaoQuiz
from tests.dados import questoes_doc


class TestCoreParser(unittest.TestCase):

    @patch('ensinoverso.core.parser.pdfplumber.open')
    def test_extrair_texto_pdf_sucesso(self, mock_pdf_open):
        # Mock do PDF e Página e texto extraído
        mock_page = MagicMock()
        mock_page.extract_text.return_value = "Texto de Teste Extraído"

        mock_pdf = MagicMock()
        mock_pdf.pages = [mock_page]

        # Context Manager mock
        mock_pdf_open.return_value.__enter__.return_value = mock_pdf

        resultado = parser.extrair_texto_pdf(b"%PDF-1.4 fake content")

        self.assertEqual(resultado, "Texto de Teste Extraído")
        mock_page.extract_text.assert_called_with(layout=True)

    @patch('ensinoverso.core.parser.pdfplumber.open')
    def test_extrair_texto_pdf_falha(self, mock_pdf_open):
        # Simula erro ao abrir PDF
        mock_pdf_open.side_effect = Exception("Arquivo corrompido")

        resultado = parser.extrair_texto_pdf(b"bad content")
        self.assertEqual(resultado, "")

    def test_eh_pdf_por_magic_number(self):
        self.assertTrue(parser.eh_pdf(b"%PDF-1.7 ..."))
        self.assertFalse(parser.eh_pdf(b"\x89PNG"))

    def test_decodificar_json_com_cerca_de_codigo(self):
        dados = {"title": "Frações"}
        self.assertEqual(parser.decodificar_json("```json\n" + json.dumps(dados) + "\n```"), dados)
        self.assertEqual(parser.decodificar_json(json.dumps([1, 2])), [1, 2])
        with self.assertRaises(ValueError):
            parser.decodificar_json("não é json")


# === RETENTATIVA ===

@patch('ensinoverso.core.ai.time.sleep')
def test_retentativa_em_erro_de_cota(mock_sleep, ctx):
    chamadas = MagicMock(side_effect=[google_exceptions.ResourceExhausted("quota"), Exception("429 Too Many"), "ok"])

    assert com_retentativa(chamadas, tentativas=3, atraso=2.0) == "ok"
    assert [c.args[0] for c in mock_sleep.call_args_list] == [2.0, 4.0]


@patch('ensinoverso.core.ai.time.sleep')
def test_retentativa_esgotada(mock_sleep, ctx):
    chamadas = MagicMock(side_effect=google_exceptions.ResourceExhausted("quota"))

    with pytest.raises(ServicoIndisponivel):
        com_retentativa(chamadas, tentativas=3, atraso=2.0)

    assert chamadas.call_count == 4
    assert [c.args[0] for c in mock_sleep.call_args_list] == [2.0, 4.0, 8.0]


def test_outros_erros_nao_repetem(ctx):
    chamadas = MagicMock(side_effect=ValueError("bug"))
    with pytest.raises(ValueError):
        com_retentativa(chamadas)
    assert chamadas.call_count == 1


# === GERAÇÃO ===

def _modelo_respondendo(texto):
    mock_response = MagicMock()
    mock_response.text = texto
    mock_model = MagicMock()
    mock_model.generate_content.return_value = mock_response
    return mock_model


@patch('ensinoverso.core.geracao.get_generative_model')
def test_gerar_questoes_exige_dez(mock_get_model, ctx):
    mock_get_model.return_value = _modelo_respondendo(json.dumps(questoes_doc([0] * 9)))

    with pytest.raises(ServicoIndisponivel):
        geracao.gerar_questoes(b"\x89PNG", 'image/png')


@patch('ensinoverso.core.geracao.extrair_texto_pdf', return_value="Texto do material")
@patch('ensinoverso.core.geracao.get_generative_model')
def test_gerar_questoes_de_pdf_envia_texto(mock_get_model, mock_extrair, ctx):
    mock_get_model.return_value = _modelo_respondendo("```json\n" + json.dumps(questoes_doc([1] * 12)) + "\n```")

    questoes = geracao.gerar_questoes(b"%PDF-1.4", parser.MIME_PDF)

    assert len(questoes) == 10
    partes = mock_get_model.return_value.generate_content.call_args.args[0]
    assert partes[0].startswith("MATERIAL FORNECIDO:")


@patch('ensinoverso.core.geracao.get_generative_model')
def test_gerar_plano_de_imagem_envia_binario(mock_get_model, ctx):
    plano = {"title": "Células", "objectives": ["Conhecer"], "content": "A célula...",
             "activities": ["Desenhar"], "assessment": "Oral"}
    mock_get_model.return_value = _modelo_respondendo(json.dumps(plano))

    resultado = geracao.gerar_plano_de_documento('Ciências', '6º Ano', 'Células', b"\x89PNG", 'image/png')

    assert resultado.titulo == "Células"
    partes = mock_get_model.return_value.generate_content.call_args.args[0]
    assert partes[0] == {'mime_type': 'image/png', 'data': b"\x89PNG"}
    mock_get_model.assert_called_with('MODELO_PLANO')


@patch('ensinoverso.core.geracao.get_generative_model')
def test_gerar_imagem_sem_imagem(mock_get_model, ctx):
    part = MagicMock(inline_data=None)
    resposta = MagicMock(candidates=[MagicMock(content=MagicMock(parts=[part]))])
    mock_get_model.return_value.generate_content.return_value = resposta

    assert geracao.gerar_imagem("sistema solar") is None


# === PROVEDOR DE IDENTIDADE ===

def _resposta_http(status, corpo):
    resposta = MagicMock(status_code=status)
    resposta.json.return_value = corpo
    return resposta


def test_provedor_devolve_uid():
    http = MagicMock()
    http.post.return_value = _resposta_http(200, {'localId': 'abc'})

    assert ProvedorIdentidade('chave', http=http).entrar('a@b.com', '123456') == 'abc'
    assert http.post.call_args.kwargs['params'] == {'key': 'chave'}
    assert http.post.call_args.args[0].endswith('accounts:signInWithPassword')


def test_provedor_traduz_erros():
    http = MagicMock()
    http.post.return_value = _resposta_http(400, {'error': {'message': 'EMAIL_EXISTS'}})

    with pytest.raises(ErroAutenticacao, match="já está em uso"):
        ProvedorIdentidade('chave', http=http).cadastrar('a@b.com', '123456')


def test_provedor_sem_rede():
    http = MagicMock()
    http.post.side_effect = requests.ConnectionError("offline")

    with pytest.raises(ServicoIndisponivel):
        ProvedorIdentidade('chave', http=http).entrar('a@b.com', '123456')


# === DOCUMENTOS ===

def test_documento_invalido_e_ignorado(ctx, db):
    db.inserir('lessons', 'ok', {'ownerId': 'p', 'subject': 'Artes', 'grade': '6º Ano'})
    db.inserir('lessons', 'quebrada', {'title': 'sem dono'})

    assert [a.id for a in documentos.aulas.listar()] == ['ok']


def test_sem_permissao_vira_resultado_vazio(ctx, db):
    with patch.object(documentos.turmas, '_ref', side_effect=google_exceptions.PermissionDenied("negado")):
        assert documentos.turmas.listar() == []
        assert documentos.turmas.obter('t1') is None


def test_criar_duas_vezes(ctx, db):
    submissao = SubmissaoQuiz(id='a_e', estudante_id='e', aula_id='a', respostas={0: 1})
    documentos.submissoes.criar(submissao)

    with pytest.raises(RegistroDuplicado):
        documentos.submissoes.criar(submissao)

    assert documentos.submissoes.obter('a_e').respostas == {0: 1}


def test_codigo_bncc_normalizado():
    assert HabilidadeBNCC(id='h', codigo=' ef06ma01 ').codigo == 'EF06MA01'
    assert HabilidadeBNCC(id='h', codigo='').codigo == 'S/C'
