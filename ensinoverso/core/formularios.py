"""
Utilitários de formulários (Flask-WTF).
"""

from flask import request
from flask_wtf import FlaskForm

from ensinoverso.core.constants import CAMPO_CONFIRMACAO
from ensinoverso.core.erros import ErroValidacao
from ensinoverso.core.parser import MIME_PDF, eh_pdf


def validar(form: FlaskForm) -> FlaskForm:
    """Valida o formulário ou levanta ErroValidacao com os campos recusados."""
    if form.validate_on_submit():
        return form

    campos = list(form.errors.keys())
    primeira = next(iter(form.errors.values()), [None])
    mensagem = primeira[0] if primeira and isinstance(primeira[0], str) else None
    raise ErroValidacao(campos, mensagem)


def exigir_confirmacao() -> None:
    """Ações destrutivas só prosseguem com o campo de confirmação marcado."""
    dados = request.get_json(silent=True) or request.form
    valor = str(dados.get(CAMPO_CONFIRMACAO, '')).strip().lower()
    if valor not in ('1', 'true', 'sim', 'on'):
        raise ErroValidacao([CAMPO_CONFIRMACAO], "Confirme a exclusão para continuar.")


def ler_arquivo(campo: str = 'arquivo', tipos=None) -> tuple:
    """
    Conteúdo e tipo MIME do arquivo enviado em `campo`.
    O tipo de PDFs é decidido pelo magic number, não pelo nome.
    """
    arquivo = request.files.get(campo)
    if arquivo is None or not arquivo.filename:
        raise ErroValidacao([campo], "Nenhum arquivo enviado.")

    conteudo = arquivo.read()
    mime = MIME_PDF if eh_pdf(conteudo) else (arquivo.mimetype or '')
    if tipos is not None and mime not in tipos:
        raise ErroValidacao([campo], "Tipo de arquivo não suportado.")
    return conteudo, mime
