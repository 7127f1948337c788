"""Header template compilation and caching."""

from credential_injection.core.template.cache import TemplateCache
from credential_injection.core.template.compiler import (
    FORMULA_CLOSE,
    FORMULA_OPEN,
    CompiledTemplate,
    FormulaSegment,
    LiteralSegment,
    compile_template,
)

__all__ = [
    "FORMULA_CLOSE",
    "FORMULA_OPEN",
    "CompiledTemplate",
    "FormulaSegment",
    "LiteralSegment",
    "TemplateCache",
    "compile_template",
]
