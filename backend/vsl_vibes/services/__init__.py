"""
Services package - Core business logic and integrations

Organized by domain responsibility:

Pipeline (Script to Deck):
    - pipeline/splitter: Script lines grouped into scenes and slides
    - pipeline/styling: Preset, emphasis and layout decisions
    - pipeline/images: Stock photo resolution behind circuit breakers
    - pipeline/infographic: Visuals and caption bundles
    - pipeline/orchestrator: Runs the stages and checkpoints the deck

Media (Provider Adapters):
    - media: Pexels, Pixabay, OpenAI/Gemini images, ElevenLabs, prompt webhook

Export:
    - export: Slide rendering, ZIP archives, json2video and ffmpeg videos

Infrastructure (Technical Concerns):
    - infrastructure/llm: Prompt templates over the LLM providers
    - infrastructure/storage: Project persistence
    - infrastructure/orchestration: Generation run tracking
    - infrastructure/parsing: JSON repair for LLM output

Use Cases (Application Layer):
    - use_cases: Commands, generation, narration and export
"""
