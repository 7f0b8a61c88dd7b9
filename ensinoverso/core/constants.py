"""
Constantes Globais do Sistema.
Fonte Única da Verdade (Single Source of Truth) para dados escolares.
"""

DISCIPLINAS = [
    'Português', 'Matemática', 'História', 'Geografia', 'Ciências',
    'Artes', 'Educação Física', 'Ensino Religioso', 'Inglês',
]

SERIES = ['6º Ano', '7º Ano', '8º Ano', '9º Ano']

# Valores de uma turma recém-criada no painel de turmas
TURMA_PADRAO = {
    'nome': 'Nova Turma Ensinoverso',
    'serie': 'Geral',
    'cor': 'from-indigo-600 to-blue-700',
    'icone': 'fa-graduation-cap',
}

# Formato da data de vínculo gravada no resumo da aula dentro da turma
FORMATO_DATA = '%d/%m/%Y'

# Campo de confirmação exigido pelas ações destrutivas
CAMPO_CONFIRMACAO = 'confirmar'

MENSAGENS_BOAS_VINDAS = {
    'administrador': "Gestão estratégica e inovação pedagógica: liderando a transformação no Ensinoverso.",
    'professor': "Ensinar é plantar sementes de futuro; inspire e transforme vidas todos os dias.",
    'estudante': "Não se limite ao que você vê; transforme seu aprendizado em conquistas.",
}
