"""HCL parsing into a plain structural tree of blocks and attributes.

Covers the native-syntax subset Terraform connector files use: attributes,
labelled blocks, objects, tuples, function calls, traversals, operators and
comments. Literal values come back as Python values; every other expression
comes back as a Reference holding its source text.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import LarkError, UnexpectedEOF, UnexpectedInput, VisitError
from pydantic import BaseModel, ConfigDict

from .._logging import get_logger
from ..errors import DocumentParseError

LOGGER = get_logger("terraform.parser")

_GRAMMAR = r"""
start: body

body: (attribute | block)*

attribute: IDENTIFIER "=" expression
block: IDENTIFIER (STRING | IDENTIFIER)* "{" body "}"

?expression: or_expr
           | or_expr "?" expression ":" expression     -> operation

?or_expr: and_expr
        | or_expr "||" and_expr                        -> operation
?and_expr: eq_expr
         | and_expr "&&" eq_expr                       -> operation
?eq_expr: cmp_expr
        | eq_expr ("==" | "!=") cmp_expr               -> operation
?cmp_expr: add_expr
         | cmp_expr ("<" | ">" | "<=" | ">=") add_expr -> operation
?add_expr: mul_expr
         | add_expr ("+" | "-") mul_expr               -> operation
?mul_expr: unary
         | mul_expr ("*" | "/" | "%") unary            -> operation
?unary: postfix
      | ("-" | "!") unary                              -> operation

?postfix: primary
        | postfix "." IDENTIFIER                       -> operation
        | postfix "[" expression "]"                   -> operation
        | postfix "[" "*" "]"                          -> operation
        | postfix ".*"                                 -> operation

?primary: NUMBER                                       -> number
        | STRING                                       -> string
        | IDENTIFIER                                   -> variable
        | IDENTIFIER "(" _arguments? ")"               -> operation
        | "[" _items? "]"                              -> tuple
        | "{" (object_elem ","?)* "}"                  -> object
        | "(" expression ")"                           -> operation

_arguments: expression ("," expression)* (","|"...")?
_items: expression ("," expression)* ","?
object_elem: (IDENTIFIER | STRING) ("=" | ":") expression

IDENTIFIER: /[A-Za-z_][A-Za-z0-9_-]*/
NUMBER: /[0-9]+(\.[0-9]+)?([eE][+-]?[0-9]+)?/
STRING: /"(?:[^"\\\n$]|\\.|\$\$\{|\$\{[^}\n]*\}|\$(?!\{))*"/

LINE_COMMENT: /(#|\/\/)[^\n]*/
BLOCK_COMMENT: /\/\*(.|\n)*?\*\//

%import common.WS
%ignore WS
%ignore LINE_COMMENT
%ignore BLOCK_COMMENT
"""

_ESCAPES = re.compile(r'\\(["\\nrt])|\\u([0-9a-fA-F]{4})|\$\$\{|%%\{')
_SIMPLE_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "r": "\r", "t": "\t"}
_KEYWORDS = {"true": True, "false": False, "null": None}


class Reference(BaseModel):
    """A non-literal expression (variable, traversal, function call, ...)."""

    model_config = ConfigDict(frozen=True)

    expression: str

    def __str__(self) -> str:
        return self.expression


class Block(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    labels: tuple[str, ...] = ()
    attributes: dict[str, Any] = {}
    blocks: tuple[Block, ...] = ()
    line: int | None = None

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def attribute(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def find_blocks(self, block_type: str) -> tuple[Block, ...]:
        return tuple(block for block in self.blocks if block.type == block_type)

    def first_block(self, block_type: str) -> Block | None:
        found = self.find_blocks(block_type)
        return found[0] if found else None


class ParsedDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    attributes: dict[str, Any] = {}
    blocks: tuple[Block, ...] = ()

    def find_blocks(self, block_type: str) -> tuple[Block, ...]:
        return tuple(block for block in self.blocks if block.type == block_type)


def unescape(literal: str) -> str:
    """Strip quotes from an HCL string token and resolve its escape sequences."""

    def _replace(match: re.Match[str]) -> str:
        if match.group(1):
            return _SIMPLE_ESCAPES[match.group(1)]
        if match.group(2):
            return chr(int(match.group(2), 16))
        return match.group(0)[1:]

    return _ESCAPES.sub(_replace, literal[1:-1])


class _Body:
    def __init__(self, attributes: dict[str, Any], blocks: tuple[Block, ...]):
        self.attributes = attributes
        self.blocks = blocks


class _TreeBuilder(Transformer):
    def __init__(self, text: str):
        super().__init__()
        self._text = text

    def start(self, children: list[Any]) -> ParsedDocument:
        body = children[0]
        return ParsedDocument(attributes=body.attributes, blocks=body.blocks)

    def body(self, children: list[Any]) -> _Body:
        attributes: dict[str, Any] = {}
        blocks: list[Block] = []
        for child in children:
            if isinstance(child, Block):
                blocks.append(child)
                continue
            name, value, line = child
            if name in attributes:
                raise DocumentParseError(f"attribute '{name}' is defined more than once", line=line)
            attributes[name] = value
        return _Body(attributes, tuple(blocks))

    def attribute(self, children: list[Any]) -> tuple[str, Any, int]:
        name, value = children
        return str(name), value, name.line

    def block(self, children: list[Any]) -> Block:
        block_type, *labels, body = children
        return Block(
            type=str(block_type),
            labels=tuple(unescape(label) if label.type == "STRING" else str(label) for label in labels),
            attributes=body.attributes,
            blocks=body.blocks,
            line=block_type.line,
        )

    def object_elem(self, children: list[Any]) -> tuple[str, Any, int]:
        key, value = children
        name = unescape(key) if key.type == "STRING" else str(key)
        return name, value, key.line

    def object(self, children: list[Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name, value, line in children:
            if name in result:
                raise DocumentParseError(f"object key '{name}' is defined more than once", line=line)
            result[name] = value
        return result

    def tuple(self, children: list[Any]) -> list[Any]:
        return list(children)

    def number(self, children: list[Token]) -> int | float:
        token = str(children[0])
        if any(marker in token for marker in ".eE"):
            return float(token)
        return int(token)

    def string(self, children: list[Token]) -> str:
        return unescape(str(children[0]))

    def variable(self, children: list[Token]) -> Any:
        name = str(children[0])
        if name in _KEYWORDS:
            return _KEYWORDS[name]
        return Reference(expression=name)

    @v_args(meta=True)
    def operation(self, meta: Any, children: list[Any]) -> Reference:
        return Reference(expression=self._text[meta.start_pos : meta.end_pos])


@lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark(_GRAMMAR, parser="lalr", propagate_positions=True, maybe_placeholders=False)


def _location(exc: UnexpectedInput) -> tuple[int | None, int | None]:
    if isinstance(exc, UnexpectedEOF):
        return None, None
    line = getattr(exc, "line", None)
    column = getattr(exc, "column", None)
    if not isinstance(line, int) or line < 1:
        return None, None
    return line, column


def parse_document(text: str) -> ParsedDocument:
    """Parse HCL text; malformed input raises DocumentParseError with its location."""
    try:
        tree = _parser().parse(text)
    except UnexpectedInput as exc:
        line, column = _location(exc)
        token = getattr(exc, "token", None)
        if isinstance(exc, UnexpectedEOF) or getattr(token, "type", None) == "$END":
            message = "unexpected end of document"
        else:
            message = str(exc).strip().splitlines()[0]
        raise DocumentParseError(message, line=line, column=column) from exc
    except LarkError as exc:
        raise DocumentParseError(str(exc)) from exc

    try:
        document = _TreeBuilder(text).transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, DocumentParseError):
            raise exc.orig_exc from None
        raise

    LOGGER.debug("Parsed document with %s top-level blocks", len(document.blocks))
    return document


__all__ = ["Block", "ParsedDocument", "Reference", "parse_document", "unescape"]
