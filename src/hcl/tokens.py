"""
Source positions, operator tags and reserved names for the HCL runtime.

The parser lives outside this package; whatever produces the AST tags every
node with a SourceSpan and every operator with a TokenType from here.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional


class TokenType(Enum):
    """Operator tags carried by unary, binary and logical expression nodes."""

    # --- Arithmetic operators ---
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *
    SLASH = auto()              # /
    CARET = auto()              # ^ (power)

    # --- Comparison operators ---
    LT = auto()                 # <
    GT = auto()                 # >
    LE = auto()                 # <=
    GE = auto()                 # >=
    EQ = auto()                 # ==
    NE = auto()                 # !=

    # --- Logical operators ---
    AND = auto()                # and
    OR = auto()                 # or
    BANG = auto()               # !


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


def span_at(line: int, column: int = 1, filename: Optional[str] = None) -> SourceSpan:
    """Build a zero-width span at a line/column (handy for synthesized nodes)."""
    loc = SourceLocation(line=line, column=column, offset=0, filename=filename)
    return SourceSpan(loc, loc)


# Span used by nodes built without source text (tests, host-generated code)
UNKNOWN_SPAN = span_at(0, 0)


# Reserved identifiers bound by the runtime
SELF_NAME = "self"
SUPER_NAME = "super"
INITIALIZER_NAME = "_init"

# File extension of HCL source modules
SOURCE_SUFFIX = ".hcl"


OPERATOR_SYMBOLS: dict[TokenType, str] = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.STAR: "*",
    TokenType.SLASH: "/",
    TokenType.CARET: "^",
    TokenType.LT: "<",
    TokenType.GT: ">",
    TokenType.LE: "<=",
    TokenType.GE: ">=",
    TokenType.EQ: "==",
    TokenType.NE: "!=",
    TokenType.AND: "and",
    TokenType.OR: "or",
    TokenType.BANG: "!",
}


def operator_symbol(token_type: TokenType) -> str:
    """Source spelling of an operator, for error messages."""
    return OPERATOR_SYMBOLS.get(token_type, token_type.name)
