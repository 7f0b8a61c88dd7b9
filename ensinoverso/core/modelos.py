"""
Registros Tipados do Ensinoverso.

Todo documento lido ou gravado no Firestore passa por um destes modelos.
Os atributos Python são em português; os nomes gravados no banco seguem o
esquema camelCase já existente nas coleções (via alias).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SEM_BNCC = 'Nenhuma habilidade vinculada'


class Papel(str, Enum):
    ADMINISTRADOR = 'administrador'
    PROFESSOR = 'professor'
    ESTUDANTE = 'estudante'


class Registro(BaseModel):
    """Base dos documentos: o id é o id do documento, não um campo gravado."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str

    def para_documento(self) -> dict:
        return self.model_dump(by_alias=True, exclude={'id'}, mode='json')

    def para_json(self) -> dict:
        return self.model_dump(by_alias=True, mode='json')


class Usuario(Registro):
    nome: str = Field('', alias='name')
    email: str = ''
    papel: Papel = Field(Papel.PROFESSOR, alias='role')
    aprovado: bool = Field(False, alias='approved')
    turmas_vinculadas: List[str] = Field(default_factory=list, alias='linkedClassIds')
    aulas_concluidas: List[str] = Field(default_factory=list, alias='completedLessonIds')

    @property
    def is_admin(self) -> bool:
        return self.papel == Papel.ADMINISTRADOR


class ResumoAulaTurma(BaseModel):
    """Projeção de uma aula embutida na turma. Mantida pelo sincronizador."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str
    titulo: str = Field(alias='title')
    data: str = Field(alias='date')
    categoria: str = Field('', alias='category')


class Turma(Registro):
    nome: str = Field(alias='name')
    serie: str = Field('Geral', alias='grade')
    cor: str = Field('from-indigo-600 to-blue-700', alias='color')
    icone: str = Field('fa-graduation-cap', alias='icon')
    imagem_url: Optional[str] = Field(None, alias='imageUrl')
    aulas: List[ResumoAulaTurma] = Field(default_factory=list, alias='lessons')

    def resumo(self, aula_id: str) -> Optional[ResumoAulaTurma]:
        return next((r for r in self.aulas if r.id == aula_id), None)


class QuestaoQuiz(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    pergunta: str = Field(alias='question')
    opcoes: List[str] = Field(alias='options', min_length=4, max_length=4)
    correta: int = Field(alias='correctAnswer', ge=0, le=3)


class PlanoAula(Registro):
    dono_id: str = Field(alias='ownerId')
    titulo: str = Field('Plano de Aula', alias='title')
    disciplina: str = Field(alias='subject')
    serie: str = Field('', alias='grade')
    escola: str = Field('', alias='schoolName')
    professor: str = Field('', alias='teacherName')
    objetivos: List[str] = Field(default_factory=list, alias='objectives')
    conteudo: str = Field('', alias='content')
    atividades: List[str] = Field(default_factory=list, alias='activities')
    avaliacao: str = Field('', alias='assessment')
    materiais_extras: List[str] = Field(default_factory=list, alias='extraMaterials')
    habilidades_bncc: str = Field(SEM_BNCC, alias='bnccSkills')
    questoes: List[QuestaoQuiz] = Field(default_factory=list, alias='questions')
    turmas_vinculadas: List[str] = Field(default_factory=list, alias='linkedClassIds')

    @property
    def codigos_bncc(self) -> List[str]:
        if not self.habilidades_bncc or SEM_BNCC in self.habilidades_bncc:
            return []
        return [c.strip() for c in self.habilidades_bncc.split(',') if c.strip()]


class SubmissaoQuiz(Registro):
    """Respostas de um estudante a um quiz. Gravada uma única vez."""

    estudante_id: str = Field(alias='studentId')
    aula_id: str = Field(alias='lessonId')
    respostas: Dict[int, int] = Field(alias='answers')
    enviado_em: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias='submittedAt')

    @staticmethod
    def id_para(aula_id: str, estudante_id: str) -> str:
        return f"{aula_id}_{estudante_id}"


class HabilidadeBNCC(Registro):
    codigo: str = Field(alias='code')
    descricao: str = Field('Sem descrição', alias='description')
    serie: str = Field('Geral', alias='grade')
    disciplina: str = Field('Geral', alias='subject')

    @field_validator('codigo')
    @classmethod
    def _codigo_normalizado(cls, valor: str) -> str:
        return valor.strip().upper() or 'S/C'
