"""
Geração de Conteúdo Pedagógico com IA (Gemini)

Funções de alto nível usadas pelas rotas:
- Plano de aula a partir de um material (PDF ou imagem).
- 10 questões de múltipla escolha a partir do mesmo material.
- Quiz avulso a partir de um tema.
- Ilustração pedagógica a partir de um prompt.

Todas as chamadas repetem em erros de cota (ver `com_retentativa`) e devolvem
dados já validados pelos modelos pydantic.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ensinoverso.core.ai import com_retentativa, get_generative_model
from ensinoverso.core.erros import ServicoIndisponivel
from ensinoverso.core.logger import get_logger
from ensinoverso.core.modelos import QuestaoQuiz
from ensinoverso.core.parser import MIME_PDF, decodificar_json, extrair_texto_pdf

logger = get_logger(__name__)

QUESTOES_POR_MATERIAL = 10
CONFIG_JSON = {'response_mime_type': 'application/json'}

_lista_questoes = TypeAdapter(List[QuestaoQuiz])


class PlanoGerado(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    titulo: str = Field(alias='title')
    objetivos: List[str] = Field(default_factory=list, alias='objectives')
    conteudo: str = Field(alias='content')
    atividades: List[str] = Field(default_factory=list, alias='activities')
    avaliacao: str = Field('', alias='assessment')


FORMATO_QUESTOES = """
Retorne APENAS um JSON válido: uma lista de objetos com as chaves
- "question": enunciado da questão;
- "options": lista com exatamente 4 alternativas;
- "correctAnswer": índice (0 a 3) da alternativa correta.
"""


def _partes_do_material(conteudo: bytes, mime: str) -> list:
    """
    PDFs com camada de texto viram texto (menor e mais barato para o modelo);
    PDFs escaneados e imagens seguem como binário inline.
    """
    if mime == MIME_PDF:
        texto = extrair_texto_pdf(conteudo)
        if texto:
            return [f"MATERIAL FORNECIDO:\n{texto}"]
    return [{'mime_type': mime, 'data': conteudo}]


def _gerar_json(chave_modelo: str, partes: list):
    def _chamada():
        model = get_generative_model(chave_modelo)
        response = model.generate_content(partes, generation_config=CONFIG_JSON)
        return response.text

    texto = com_retentativa(_chamada)
    try:
        return decodificar_json(texto)
    except ValueError as e:
        logger.error(f"Resposta da IA não é JSON válido: {e}")
        raise ServicoIndisponivel("A IA devolveu uma resposta inválida. Tente novamente.") from e


def _validar_questoes(dados) -> List[QuestaoQuiz]:
    try:
        return _lista_questoes.validate_python(dados)
    except ValidationError as e:
        logger.error(f"Questões geradas fora do formato: {e.error_count()} erro(s)")
        raise ServicoIndisponivel("A IA gerou questões fora do formato esperado. Tente novamente.") from e


def gerar_plano_de_documento(disciplina: str, serie: str, tema: str, conteudo: bytes,
                             mime: str = MIME_PDF) -> PlanoGerado:
    prompt = f"""
    Com base no material fornecido, crie um plano de aula para {serie} sobre "{tema}" em {disciplina}.

    REGRA CRÍTICA PARA O CAMPO "content":
    Transcreva o texto teórico do material RIGOROSAMENTE como ele aparece no original,
    mantendo parágrafos, pontuação e ordem das ideias. NÃO resuma.

    Retorne APENAS um JSON válido com as chaves "title", "objectives" (lista),
    "content", "activities" (lista) e "assessment".
    """
    dados = _gerar_json('MODELO_PLANO', _partes_do_material(conteudo, mime) + [prompt])
    try:
        plano = PlanoGerado.model_validate(dados)
    except ValidationError as e:
        logger.error(f"Plano gerado fora do formato: {e.error_count()} erro(s)")
        raise ServicoIndisponivel("A IA gerou um plano incompleto. Tente novamente.") from e

    logger.info(f"Plano gerado: '{plano.titulo}' ({disciplina}, {serie})")
    return plano


def gerar_questoes(conteudo: bytes, mime: str = MIME_PDF) -> List[QuestaoQuiz]:
    prompt = (
        f"Gere exatamente {QUESTOES_POR_MATERIAL} questões de múltipla escolha "
        f"baseadas no material fornecido.\n{FORMATO_QUESTOES}"
    )
    questoes = _validar_questoes(_gerar_json('MODELO_QUIZ', _partes_do_material(conteudo, mime) + [prompt]))

    if len(questoes) < QUESTOES_POR_MATERIAL:
        logger.error(f"IA gerou {len(questoes)} questões, esperado {QUESTOES_POR_MATERIAL}")
        raise ServicoIndisponivel("A IA gerou menos questões que o necessário. Tente novamente.")
    return questoes[:QUESTOES_POR_MATERIAL]


def gerar_quiz(disciplina: str, serie: str, tema: str, quantidade: int = 5) -> List[QuestaoQuiz]:
    prompt = (
        f'Gere {quantidade} questões de múltipla escolha sobre "{tema}" para alunos de '
        f'{serie} em {disciplina}. 4 alternativas por questão.\n{FORMATO_QUESTOES}'
    )
    questoes = _validar_questoes(_gerar_json('MODELO_QUIZ', [prompt]))
    logger.info(f"Quiz gerado: {len(questoes)} questões sobre '{tema}'")
    return questoes[:quantidade]


def gerar_imagem(prompt: str) -> Optional[Tuple[bytes, str]]:
    """
    Gera uma ilustração pedagógica.

    Returns:
        (bytes, mime_type) da primeira imagem da resposta, ou None se o
        modelo não devolveu imagem.
    """
    def _chamada():
        model = get_generative_model('MODELO_IMAGEM')
        return model.generate_content(
            f"Uma ilustração pedagógica: {prompt}. Estilo educativo, limpo, alta qualidade."
        )

    response = com_retentativa(_chamada)

    for candidato in response.candidates or []:
        for part in candidato.content.parts:
            inline = getattr(part, 'inline_data', None)
            if inline is not None and inline.data:
                return inline.data, inline.mime_type or 'image/png'

    logger.warning(f"IA não devolveu imagem para o prompt: '{prompt[:60]}'")
    return None
