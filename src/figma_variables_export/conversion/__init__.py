"""
Variable conversion pipeline.

    classifier: name -> Category
    values / color: literal value -> CSS text
    resolver: alias-following resolution within one ConversionSession
    scheduler: chunked cooperative driver over every collection
    source: snapshot-backed VariableSource
"""

from .classifier import TypeClassifier, classify
from .naming import css_variable_name, theme_slug, to_kebab_case
from .resolver import ConversionSession, VariableGraphResolver
from .scheduler import BatchScheduler, ThemeEntries, annotate_code_syntax
from .source import InMemoryVariableSource
from .values import convert_color, convert_number, convert_text, px_to_rem

__all__ = [
    "BatchScheduler",
    "ConversionSession",
    "InMemoryVariableSource",
    "ThemeEntries",
    "TypeClassifier",
    "VariableGraphResolver",
    "annotate_code_syntax",
    "classify",
    "convert_color",
    "convert_number",
    "convert_text",
    "css_variable_name",
    "px_to_rem",
    "theme_slug",
    "to_kebab_case",
]
