"""Prompt template catalog and selection."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..core import HashVectorizer, PromptTemplate, TextVectorizer, cosine_similarity, make_vectorizer

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
CATALOG_PATH = DATA_DIR / "catalog.json"

# Checked in order; the first keyword found anywhere in the text wins.
KEYWORD_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("gherkin", ".feature", "feature file", "scenario"), "bdd-feature"),
    (("unit test", "test case", "tests for", "test file", ".test.", ".spec."), "test-generation"),
    (("root cause",), "root-cause-analysis"),
    (("bug", "error", "exception", "crash", "broken", "not working"), "debugging"),
    (("security", "vulnerab", "injection"), "security-audit"),
    (("refactor", "clean up", "restructure"), "refactoring"),
    (("optimize", "optimise", "performance", "too slow", "faster"), "optimization"),
    (("code review", "review"), "code-review"),
    (("migrate", "migration", "upgrade"), "migration"),
    (("endpoint", "rest api", "api design"), "api-design"),
    (("architecture", "system design"), "architecture-design"),
    (("docstring", "document", "readme"), "documentation"),
    (("pros and cons", "trade-off", "tradeoff", "advantages"), "pros-cons"),
    (("compare", " versus ", " vs ", "difference between"), "comparison"),
    (("brainstorm", "ideas for"), "brainstorming"),
    (("summarize", "summarise", "summary", "tl;dr"), "summarization"),
    (("step by step", "step-by-step", "how to", "how do i"), "step-by-step"),
    (("explain", "what is", "what does", "how does"), "explanation"),
    (("think through", "reason about", "analyze", "analyse"), "chain-of-thought"),
    (("implement", "create", "build", "add a"), "implementation"),
]

# Words that suggest which templates might fit, used for suggestions.
SUGGESTION_KEYWORDS = [
    "explain", "compare", "analyze", "design", "implement", "optimize",
    "debug", "refactor", "test", "review", "architecture", "pattern",
    "example", "steps", "how", "what", "why", "alternatives",
]


def load_catalog(path: Path = CATALOG_PATH) -> List[PromptTemplate]:
    """Load templates from a JSON catalog, preserving file order.

    Raises:
        OSError: If the catalog cannot be read
        ValueError: If the catalog is not valid JSON or misses fields
    """
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    templates: List[PromptTemplate] = []
    for entry in raw:
        try:
            templates.append(
                PromptTemplate(
                    id=entry["id"],
                    name=entry["name"],
                    description=entry["description"],
                    category=entry["category"],
                    fields=tuple((str(k), str(v)) for k, v in entry["structure"].items()),
                    example=entry.get("example", ""),
                )
            )
        except (KeyError, AttributeError) as e:
            raise ValueError(f"Invalid template entry in {path}: {e}") from e

    logger.info(f"Loaded {len(templates)} prompt templates")
    return templates


def format_with_template(
    text: str,
    template: PromptTemplate,
    context: Optional[Dict[str, str]] = None,
) -> str:
    """Fill every field of ``template`` and join them with blank lines.

    Context tokens are substituted before ``{task}``, ``{question}`` and
    ``{problem}``. Each token is replaced at its first occurrence only.
    """
    lines: List[str] = []
    for _, value in template.fields:
        line = value
        if context:
            for key, ctx_value in context.items():
                line = line.replace(f"{{{key}}}", ctx_value, 1)
        line = line.replace("{task}", text, 1)
        line = line.replace("{question}", text, 1)
        line = line.replace("{problem}", text, 1)
        lines.append(line)
    return "\n\n".join(lines).strip()


def make_selector_vectorizer(cfg: Dict) -> TextVectorizer:
    """Hash vectors for template similarity; BM25 only when search uses it."""
    search_cfg = cfg.get("search", {})
    if str(search_cfg.get("backend", "hash")).strip().lower() == "bm25":
        return make_vectorizer(cfg)
    dim = search_cfg.get("embedding_dim")
    return HashVectorizer(int(dim)) if dim else HashVectorizer()


class TemplateSelector:
    """Keyword rules first, then cosine similarity against the catalog."""

    def __init__(
        self,
        templates: Optional[Sequence[PromptTemplate]] = None,
        vectorizer: Optional[TextVectorizer] = None,
        rules: Optional[List[Tuple[Tuple[str, ...], str]]] = None,
    ):
        self.templates: List[PromptTemplate] = list(templates) if templates is not None else load_catalog()
        self.vectorizer = vectorizer or HashVectorizer()
        self.rules = rules if rules is not None else KEYWORD_RULES
        self._by_id: Dict[str, PromptTemplate] = {t.id: t for t in self.templates}

        texts = [t.embedding_text() for t in self.templates]
        if self.vectorizer.requires_fit:
            self.vectorizer.fit(texts)
        self._vectors: Dict[str, List[float]] = dict(
            zip((t.id for t in self.templates), self.vectorizer.embed(texts))
        )

    def get_template(self, template_id: str) -> Optional[PromptTemplate]:
        return self._by_id.get(template_id)

    def all_templates(self) -> List[PromptTemplate]:
        return list(self.templates)

    def templates_by_category(self, category: str) -> List[PromptTemplate]:
        return [t for t in self.templates if t.category == category]

    def _match_rule(self, text: str) -> Optional[Tuple[str, PromptTemplate]]:
        lowered = text.lower()
        for keywords, template_id in self.rules:
            template = self._by_id.get(template_id)
            if template is None:
                continue
            for keyword in keywords:
                if keyword in lowered:
                    return keyword, template
        return None

    def _similarity(self, text: str, template: PromptTemplate) -> float:
        return cosine_similarity(self.vectorizer.embed_one(text), self._vectors[template.id])

    def select_best_template(self, text: str) -> Optional[PromptTemplate]:
        if not self.templates:
            return None

        rule = self._match_rule(text)
        if rule is not None:
            return rule[1]

        query_vector = self.vectorizer.embed_one(text)
        best: Optional[PromptTemplate] = None
        best_score = float("-inf")
        for template in self.templates:
            score = cosine_similarity(query_vector, self._vectors[template.id])
            # strict comparison keeps the earliest template on ties
            if score > best_score:
                best_score = score
                best = template
        return best

    def get_selection_reason(self, text: str, template: Optional[PromptTemplate]) -> str:
        if template is None:
            return "No template selected; request sent as-is"

        rule = self._match_rule(text)
        if rule is not None and rule[1].id == template.id:
            return f"Matched keyword '{rule[0]}' for {template.name}"
        score = self._similarity(text, template)
        return f"Closest template by similarity ({score:.2f}): {template.name}"

    def suggest_templates(self, keywords: Sequence[str]) -> List[PromptTemplate]:
        """Templates whose name, description or category mention any keyword."""
        suggestions: Dict[str, PromptTemplate] = {}
        for keyword in keywords:
            needle = keyword.lower()
            for template in self.templates:
                haystack = f"{template.name} {template.description} {template.category}".lower()
                if needle in haystack:
                    suggestions.setdefault(template.id, template)
        return list(suggestions.values())

    def recommend(self, text: str) -> Dict:
        """Best template plus up to three keyword-based alternatives."""
        lowered = text.lower()
        keywords = [k for k in SUGGESTION_KEYWORDS if k in lowered]
        best = self.select_best_template(text)
        alternatives = [t for t in self.suggest_templates(keywords) if best is None or t.id != best.id]
        return {
            "template": best,
            "reason": self.get_selection_reason(text, best),
            "alternatives": alternatives[:3],
        }


def select_best_template(text: str) -> Optional[PromptTemplate]:
    """Select a template from the bundled catalog (Functional Wrapper)."""
    return TemplateSelector().select_best_template(text)
