"""
Infrastructure services - LLM prompting, parsing, storage and run tracking.
"""
