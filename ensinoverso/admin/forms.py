from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileRequired
from wtforms import BooleanField, SelectField, SelectMultipleField, StringField
from wtforms.validators import DataRequired, Length, Optional

from ensinoverso.core.modelos import Papel


class UsuarioForm(FlaskForm):
    papel = SelectField('Perfil', choices=[(p.value, p.value) for p in Papel],
                        validators=[DataRequired(message="Perfil é obrigatório")])
    aprovado = BooleanField('Acesso liberado')
    # As opções são as turmas existentes, preenchidas na rota
    turmas = SelectMultipleField('Turmas', choices=[], validate_choice=True)


class HabilidadeForm(FlaskForm):
    codigo = StringField('Código', validators=[
        DataRequired(message="Código é obrigatório"),
        Length(max=20, message="Código muito longo")
    ])
    descricao = StringField('Descrição', validators=[DataRequired(message="Descrição é obrigatória")])
    disciplina = StringField('Disciplina', validators=[Optional(), Length(max=60)])
    serie = StringField('Série', validators=[Optional(), Length(max=40)])


class ImportacaoBNCCForm(FlaskForm):
    arquivo = FileField('Arquivo CSV', validators=[
        FileRequired(message="Envie um arquivo CSV"),
        FileAllowed(['csv', 'txt'], "Apenas arquivos .csv ou .txt")
    ])
