"""
Hierarquia de Exceções do Ensinoverso.

Cada exceção carrega o status HTTP com que a Application Factory
responde quando ela escapa de uma rota.
"""

from typing import Dict, List, Optional


class ErroEnsinoverso(Exception):
    """Base de todos os erros de domínio."""

    status = 400

    def __init__(self, mensagem: str):
        super().__init__(mensagem)
        self.mensagem = mensagem

    def para_dict(self) -> dict:
        return {'erro': self.mensagem}


class ErroValidacao(ErroEnsinoverso):
    """Dados obrigatórios ausentes ou inválidos. Nenhuma gravação ocorre."""

    status = 400

    def __init__(self, campos: List[str], mensagem: Optional[str] = None):
        self.campos = list(campos)
        super().__init__(mensagem or f"Preencha os campos obrigatórios: {', '.join(self.campos)}.")

    def para_dict(self) -> dict:
        return {'erro': self.mensagem, 'campos': self.campos}


class AcessoNegado(ErroEnsinoverso):
    status = 403


class NaoEncontrado(ErroEnsinoverso):
    status = 404


class QuizIncompleto(ErroEnsinoverso):
    """Envio de quiz sem resposta para todas as questões."""

    status = 422

    def __init__(self, faltando: List[int]):
        self.faltando = sorted(faltando)
        numeros = ', '.join(str(i + 1) for i in self.faltando)
        super().__init__(f"Responda todas as questões antes de enviar (faltando: {numeros}).")

    def para_dict(self) -> dict:
        return {'erro': self.mensagem, 'faltando': self.faltando}


class RegistroDuplicado(ErroEnsinoverso):
    """Documento já existe onde se esperava criá-lo pela primeira vez."""

    status = 409


class SincronizacaoParcial(ErroEnsinoverso):
    """
    Nem todas as turmas receberam a alteração da aula.
    A sincronização é idempotente: repetir a operação completa o vínculo.

    Na exclusão (`exclusao=True`) a aula continua existindo até que todas as
    turmas tenham sido limpas, então repetir a exclusão termina o serviço.
    """

    status = 502

    def __init__(self, aula_id: str, aplicadas: int, total: int, falhas: Dict[str, str],
                 exclusao: bool = False):
        self.aula_id = aula_id
        self.aplicadas = aplicadas
        self.total = total
        self.falhas = dict(falhas)
        self.exclusao = exclusao
        if exclusao:
            mensagem = (f"Aula não excluída: apenas {aplicadas}/{total} turmas foram atualizadas. "
                        "Tente excluir novamente.")
        else:
            mensagem = f"Aula salva, mas apenas {aplicadas}/{total} turmas foram sincronizadas. Tente salvar novamente."
        super().__init__(mensagem)

    def para_dict(self) -> dict:
        return {
            'erro': self.mensagem,
            'aula_id': self.aula_id,
            'aplicadas': self.aplicadas,
            'total': self.total,
            'falhas': self.falhas,
        }


class ServicoIndisponivel(ErroEnsinoverso):
    """Serviço externo (Firestore, Gemini, Identity Toolkit) falhou."""

    status = 503


class ErroAutenticacao(ErroEnsinoverso):
    """Credenciais recusadas pelo provedor de identidade."""

    status = 401
