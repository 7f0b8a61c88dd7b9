from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField
from wtforms import StringField
from wtforms.validators import DataRequired, Length, Optional

TIPOS_CAPA = ['png', 'jpg', 'jpeg', 'webp']


class NovaTurmaForm(FlaskForm):
    """Campos em branco recebem os valores padrão de uma turma nova."""
    nome = StringField('Nome', validators=[Optional(), Length(max=80, message="Nome muito longo")])
    serie = StringField('Série', validators=[Optional(), Length(max=40)])


class TurmaForm(FlaskForm):
    nome = StringField('Nome', validators=[
        DataRequired(message="Nome da turma é obrigatório"),
        Length(max=80, message="Nome muito longo")
    ])
    serie = StringField('Série', validators=[DataRequired(message="Série é obrigatória"), Length(max=40)])
    cor = StringField('Cor', validators=[Optional(), Length(max=80)])
    icone = StringField('Ícone', validators=[Optional(), Length(max=40)])
    capa = FileField('Capa', validators=[FileAllowed(TIPOS_CAPA, "A capa deve ser uma imagem")])
