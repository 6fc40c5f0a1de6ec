"""
Script Splitter Prompts
"""

from typing import List

from ...infrastructure.llm import PromptTemplate


SPLIT_SCRIPT_PROMPT = PromptTemplate(
    template="""Split these VSL script lines into slides grouped by scenes. This is chunk {chunk_number} of {total_chunks}.

RULES:
- Each slide = 1-2 lines (keep short)
- DO NOT repeat the same text across multiple slides. Each unique line from the script should appear exactly once in the entire output.
- Group into scenes (Hook, Problem, Agitation, Solution, Authority, Proof, CTA, Close)
- Mark EVERY slide (100%) as hasImage:true
- IMPORTANT: For EVERY slide, provide an imageKeyword: a descriptive cinematic stock photo search term.
- Return ONLY a valid JSON array of scenes.

Format: [{"sceneNumber":1,"title":"Scene Name","emotion":"hook","slides":[{"fullScriptText":"text here","hasImage":true,"imageKeyword":"visual search term"}]}]

LINES:
{lines}""",
    description="Group a batch of script lines into scenes and slides"
)


def build_split_prompt(lines: List[str], chunk_index: int, total_chunks: int) -> str:
    numbered = "\n".join(f"{i + 1}. {line}" for i, line in enumerate(lines))
    return SPLIT_SCRIPT_PROMPT.format(
        chunk_number=chunk_index + 1,
        total_chunks=total_chunks,
        lines=numbered,
    )
