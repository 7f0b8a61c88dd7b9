from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Length, Regexp

REGEX_EMAIL = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


class LoginForm(FlaskForm):
    email = StringField('E-mail', validators=[
        DataRequired(message="E-mail é obrigatório"),
        Regexp(REGEX_EMAIL, message="E-mail inválido")
    ])
    senha = PasswordField('Senha', validators=[DataRequired(message="Senha é obrigatória")])


class CadastroForm(FlaskForm):
    nome = StringField('Nome', validators=[
        DataRequired(message="Nome é obrigatório"),
        Length(min=3, max=100, message="Nome deve ter entre 3 e 100 caracteres"),
        Regexp(r'^[A-Za-zÀ-ÖØ-öø-ÿ\s\.]+$', message="Nome deve conter apenas letras")
    ])
    email = StringField('E-mail', validators=[
        DataRequired(message="E-mail é obrigatório"),
        Regexp(REGEX_EMAIL, message="E-mail inválido")
    ])
    # O provedor também recusa senhas curtas; validamos antes para não gastar a chamada
    senha = PasswordField('Senha', validators=[
        DataRequired(message="Senha é obrigatória"),
        Length(min=6, message="A senha deve ter pelo menos 6 caracteres")
    ])
