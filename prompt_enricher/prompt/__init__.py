"""Prompt templates, assembly and enrichment."""

from .base import FileTarget, PromptAssembler
from .builder import DefaultPromptAssembler, assemble, estimate_tokens
from .enrichment import FileIntent, PromptEnrichmentEngine, extract_file_intent, strip_enrichment
from .templates import (
    KEYWORD_RULES,
    TemplateSelector,
    format_with_template,
    load_catalog,
    make_selector_vectorizer,
    select_best_template,
)

__all__ = [
    "FileTarget",
    "PromptAssembler",
    "DefaultPromptAssembler",
    "assemble",
    "estimate_tokens",
    "FileIntent",
    "PromptEnrichmentEngine",
    "extract_file_intent",
    "strip_enrichment",
    "KEYWORD_RULES",
    "TemplateSelector",
    "format_with_template",
    "load_catalog",
    "make_selector_vectorizer",
    "select_best_template",
]
