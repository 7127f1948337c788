"""Formula expression language: parsing, builtins, and evaluation."""

from credential_injection.core.formula.evaluator import FormulaEvaluator, evaluate
from credential_injection.core.formula.functions import (
    FormulaFunction,
    FunctionRegistry,
    Number,
    default_functions,
)
from credential_injection.core.formula.nodes import (
    Concat,
    FunctionCall,
    MergeField,
    Node,
    NumberLiteral,
    StringLiteral,
    iter_merge_fields,
)
from credential_injection.core.formula.parser import parse_formula

__all__ = [
    "Concat",
    "FormulaEvaluator",
    "FormulaFunction",
    "FunctionCall",
    "FunctionRegistry",
    "MergeField",
    "Node",
    "Number",
    "NumberLiteral",
    "StringLiteral",
    "default_functions",
    "evaluate",
    "iter_merge_fields",
    "parse_formula",
]
