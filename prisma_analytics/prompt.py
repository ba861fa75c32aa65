"""
Prompt construction for the chart interpretation request.

build_prompt() is pure: the same topic and question always produce the
same text. The character limit is an instruction to the model only;
nothing here truncates the answer.
"""

from prisma_analytics.config import PROMPT_CHAR_LIMIT

PROMPT_TEMPLATE = """
## Especialidade
Você é um analista de dados educacionais no Prisma Analytics, especialista em comportamento humano e estatísticas aplicadas à aprendizagem.

## Contexto
Tema: {topic}
Pergunta: {question}

## Tarefa
Gere uma interpretação breve e clara sobre os padrões ou relações observadas no gráfico, abordando:
- O que os dados sugerem sobre o comportamento estudantil.
- Possíveis causas e impactos educacionais.
- Duas recomendações práticas para melhorar o desempenho ou o bem-estar.

## Regras
- Limite-se a {limit} caracteres.
- Escreva em linguagem acessível, mas mantendo rigor acadêmico.
- Formate em Markdown, sem introduções ou despedidas.

Agora produza a resposta.
"""


def build_prompt(topic: str, question: str) -> str:
    return PROMPT_TEMPLATE.format(topic=topic, question=question, limit=PROMPT_CHAR_LIMIT)
