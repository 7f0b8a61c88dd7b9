"""
Script Utilitário: setup_admin.py
Use este script para promover um usuário a Administrador (aprovado) manualmente.
"""

from ensinoverso import create_app
from ensinoverso.core import documentos
from ensinoverso.core.modelos import Papel

# Inicializa a aplicação para carregar configurações e banco de dados
app = create_app()


def promover_usuario(email):
    print(f"--- Promovendo usuário: {email} ---")

    # Precisamos do contexto da aplicação para acessar o Firestore
    with app.app_context():
        encontrados = documentos.usuarios.filtrar('email', '==', email)

        if not encontrados:
            print(f"❌ ERRO: O usuário '{email}' não foi encontrado no banco de dados.")
            print("DICA: Faça login na aplicação pelo menos uma vez para criar o registro inicial.")
            return False

        for usuario in encontrados:
            promovido = usuario.model_copy(update={'papel': Papel.ADMINISTRADOR, 'aprovado': True})
            documentos.usuarios.salvar(promovido)

        print(f"✅ SUCESSO! O usuário '{email}' agora é ADMINISTRADOR com acesso liberado.")
        print("A mudança vale a partir da próxima requisição; não é preciso sair e entrar de novo.")
        return True


if __name__ == "__main__":
    email_alvo = input("Digite o e-mail do usuário que será Administrador: ").strip().lower()
    promover_usuario(email_alvo)
