"""Prompt builders for the minutes conversation.

Pure functions: they receive already-serialized document context and return
prompt text. The generation and adjustment prompts embed FORMAT_CONTRACT so the
reply can be read back by the parser; the question prompt asks for a plain
answer instead.

Prompts are written in Portuguese because the minutes ("atas") are.
"""

from __future__ import annotations

from src.studio.minutes.protocol import Marker
from src.studio.minutes.schemas import (
    DAY_PLACEHOLDER,
    MONTH_NAME_PLACEHOLDER,
    RECORD_NUMBER_PLACEHOLDER,
    YEAR_PLACEHOLDER,
)

# ── Format Contract ──────────────────────────────────────────────────────────

FORMAT_CONTRACT = f"""
## Formato de saída (obrigatório)

- Responda SOMENTE com blocos iniciados pelas marcações abaixo, cada marcação sozinha em sua própria linha.
- Não escreva introdução, conclusão ou qualquer texto fora dos blocos.
- Comece com um bloco de metadados iniciado por {Marker.HEADER.value}, contendo exatamente estes campos, um por linha:
    num_ata: valor ou {RECORD_NUMBER_PLACEHOLDER}
    dia_reuniao: valor ou {DAY_PLACEHOLDER}
    mes_reuniao_por_extenso: valor ou {MONTH_NAME_PLACEHOLDER}
    ano_reuniao: valor ou {YEAR_PLACEHOLDER}
- Cada item da pauta começa com a linha {Marker.ITEM.value}
- Discussões totalmente alheias à pauta vão em uma única seção final iniciada pela linha {Marker.EXTRA.value}
- A seção {Marker.EXTRA.value} é opcional: omita-a quando não houver assunto fora da pauta.
- Nunca repita as marcações dentro do texto de um bloco.

## Exemplo

{Marker.HEADER.value}
num_ata: 42
dia_reuniao: 19
mes_reuniao_por_extenso: fevereiro
ano_reuniao: 2026

{Marker.ITEM.value}
**Nome:** Aprovação da ata anterior
**Status:** abordado
**Resumo:** A ata foi aprovada sem ressalvas. <Pessoa 1> pediu a correção de uma data no item 3, aceita por todos.

{Marker.ITEM.value}
**Nome:** Orçamento do próximo semestre
**Status:** retirado da pauta
**Justificativa:** O responsável pela apresentação não compareceu; o tema volta na próxima reunião.

{Marker.EXTRA.value}
**Assunto:** Evento de integração
**Resumo:** <Pessoa 2> sugeriu organizar um encontro presencial e enviará uma proposta por e-mail.
"""

# ── Fixed Instructions ───────────────────────────────────────────────────────

INITIAL_INSTRUCTIONS = f"""Você é um assistente especializado em redigir atas de reunião. Assista ao vídeo da reunião e produza, em português, as seções estruturadas da ata.

Identifique também, se possível, o número da ata e a data da reunião (dia, mês por extenso e ano). Quando não houver confiança no valor, mantenha o placeholder correspondente ({RECORD_NUMBER_PLACEHOLDER}, {DAY_PLACEHOLDER}, {MONTH_NAME_PLACEHOLDER}, {YEAR_PLACEHOLDER}).

## Classificação das discussões

1. Levante todos os itens previstos na pauta.
2. Uma discussão que aconteceu no contexto de um item da pauta, ainda que de forma tangencial, pertence a esse item e entra no resumo dele.
3. Só é extra-pauta a discussão que surgiu de forma independente e não tem relação com nenhum item pautado.
4. Na dúvida, associe a discussão ao item mais próximo.

## Campos de cada item

- **Nome:** nome do item
- **Status:** abordado | retirado da pauta | não abordado
- **Justificativa:** apenas para itens retirados da pauta; use "não informado" se ninguém justificou
- **Resumo:** o que foi discutido e decidido, com atribuição breve de falas quando relevante

Quando não for possível identificar um participante, use placeholders estáveis em todo o documento (<Pessoa 1>, <Pessoa 2>, ...), sempre o mesmo para a mesma pessoa.

## Campos da seção extra-pauta (se existir)

- **Assunto:** tema da discussão
- **Resumo:** o que foi conversado, com os mesmos placeholders de participantes
"""


def initial_prompt() -> str:
    """Prompt for the first generation round (paired with the video)."""
    return f"{INITIAL_INSTRUCTIONS}\n{FORMAT_CONTRACT}"


def question_prompt(question: str, context: str) -> str:
    """Prompt answering a user question about the current minutes."""
    return f"""Você é um assistente especializado em reuniões. Abaixo estão as seções atuais da ata de uma reunião que você já analisou, seguidas de uma pergunta do usuário.

## Seções atuais da ata

{context}

## Pergunta do usuário

{question}

## Instrução

Responda somente à pergunta. Não reescreva as seções nem produza uma nova ata. Seja direto; se a resposta depender de alguma seção, cite-a brevemente."""


def adjust_without_video_prompt(instruction: str, context: str) -> str:
    """Prompt applying a text-only adjustment to the current minutes."""
    return f"""Você é um assistente especializado em atas de reunião. Abaixo estão as seções da ata que você redigiu, seguidas de um pedido de ajuste do usuário.

## Seções atuais da ata

{context}

## Pedido de ajuste

{instruction}

## Instrução

Aplique o ajuste e devolva a lista completa de seções atualizada, preservando:
- os placeholders de participantes já usados (<Pessoa 1>, <Pessoa 2>, ...)
- o estilo e o nível de detalhe das seções originais
- a primeira seção (cabeçalho da ata) como primeiro item, salvo pedido em contrário

{FORMAT_CONTRACT}"""


def adjust_with_video_prompt(instruction: str, context: str) -> str:
    """Prompt applying an adjustment that re-reads the video."""
    return f"""Você é um assistente especializado em atas de reunião. Você assistiu ao vídeo desta reunião e redigiu as seções abaixo. O usuário pediu um ajuste; use o vídeo como referência principal e as seções como ponto de partida.

## Seções atuais da ata

{context}

## Pedido de ajuste

{instruction}

## Instrução

Revise as seções conferindo o vídeo. O ajuste pode incluir novas seções, mudanças de conteúdo, correção de nomes ou reordenação. Devolva a lista completa e atualizada de seções, mantendo a primeira seção (cabeçalho da ata) como primeiro item.

{FORMAT_CONTRACT}"""
