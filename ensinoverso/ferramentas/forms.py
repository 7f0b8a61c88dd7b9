from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import DataRequired, Length, NumberRange


class VisualForm(FlaskForm):
    prompt = StringField('Descrição', validators=[
        DataRequired(message="Descreva a imagem desejada"),
        Length(min=5, max=500, message="A descrição deve ter entre 5 e 500 caracteres")
    ])


class QuizForm(FlaskForm):
    disciplina = StringField('Disciplina', validators=[DataRequired(message="Disciplina é obrigatória")])
    serie = StringField('Série', validators=[DataRequired(message="Série é obrigatória")])
    tema = StringField('Tema', validators=[
        DataRequired(message="Tema é obrigatório"),
        Length(max=200, message="Tema muito longo")
    ])
    quantidade = IntegerField('Quantidade', default=5, validators=[
        NumberRange(min=1, max=20, message="Entre 1 e 20 questões")
    ])
