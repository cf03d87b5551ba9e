"""
Parser for the entity query language.

Grammar (keywords are case-insensitive)::

    SELECT <alias> FROM <EntityName> <alias>
        [WHERE <alias>.<attribute> <op> <param> [AND ...]]

``<op>`` is one of ``= <> != > >= < <=``; ``<param>`` is ``:name`` or ``?N``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple, Union

from .errors import QuerySyntaxError

OPERATORS = ("=", "<>", "!=", ">", ">=", "<", "<=")

_TOKEN_RE = re.compile(
    r"""
    \s*(?:
        (?P<op><>|!=|>=|<=|=|>|<)
      | (?P<named>:[A-Za-z_][A-Za-z0-9_]*)
      | (?P<positional>\?[0-9]+)
      | (?P<word>[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)?)
    )
    """,
    re.VERBOSE,
)

Parameter = Union[str, int]


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    position: int


@dataclass(frozen=True)
class Condition:
    attribute: str
    operator: str
    parameter: Parameter


@dataclass(frozen=True)
class SelectStatement:
    alias: str
    entity_name: str
    conditions: Tuple[Condition, ...] = ()


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    position = 0
    length = len(text.rstrip())
    while position < length:
        match = _TOKEN_RE.match(text, position)
        if match is None or match.end() == position:
            raise QuerySyntaxError(f"Unexpected character {text[position]!r} at offset {position}")
        kind = match.lastgroup or "word"
        tokens.append(Token(kind, match.group(kind), match.start(kind)))
        position = match.end()
    return tokens


class QueryParser:
    def __init__(self, text: str) -> None:
        if not text or not text.strip():
            raise QuerySyntaxError("Query text must not be blank")
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0

    def parse(self) -> SelectStatement:
        self._keyword("SELECT")
        selected = self._word("alias")
        self._keyword("FROM")
        entity_name = self._word("entity name")
        alias = self._word("alias")
        if "." in entity_name or "." in alias:
            raise QuerySyntaxError(f"Invalid entity declaration '{entity_name} {alias}'")
        if selected != alias:
            raise QuerySyntaxError(f"Selected alias '{selected}' does not match '{alias}'")

        conditions: List[Condition] = []
        if self._peek_keyword("WHERE"):
            self.index += 1
            conditions.append(self._condition(alias))
            while self._peek_keyword("AND"):
                self.index += 1
                conditions.append(self._condition(alias))

        if self.index < len(self.tokens):
            token = self.tokens[self.index]
            raise QuerySyntaxError(f"Unexpected token '{token.value}' at offset {token.position}")
        return SelectStatement(alias=alias, entity_name=entity_name, conditions=tuple(conditions))

    # ------------------------------------------------------------------ #
    def _condition(self, alias: str) -> Condition:
        path = self._word("attribute path")
        prefix, _, attribute = path.partition(".")
        if not attribute or prefix != alias:
            raise QuerySyntaxError(f"Expected '{alias}.<attribute>', got '{path}'")
        operator = self._next("operator")
        if operator.kind != "op":
            raise QuerySyntaxError(f"Expected operator, got '{operator.value}'")
        parameter = self._next("parameter")
        if parameter.kind == "named":
            return Condition(attribute, operator.value, parameter.value[1:])
        if parameter.kind == "positional":
            return Condition(attribute, operator.value, int(parameter.value[1:]))
        raise QuerySyntaxError(f"Expected parameter, got '{parameter.value}'")

    def _next(self, expected: str) -> Token:
        if self.index >= len(self.tokens):
            raise QuerySyntaxError(f"Unexpected end of query, expected {expected}")
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _word(self, expected: str) -> str:
        token = self._next(expected)
        if token.kind != "word":
            raise QuerySyntaxError(f"Expected {expected}, got '{token.value}'")
        return token.value

    def _keyword(self, keyword: str) -> None:
        token = self._next(keyword)
        if token.kind != "word" or token.value.upper() != keyword:
            raise QuerySyntaxError(f"Expected {keyword}, got '{token.value}'")

    def _peek_keyword(self, keyword: str) -> bool:
        if self.index >= len(self.tokens):
            return False
        token = self.tokens[self.index]
        return token.kind == "word" and token.value.upper() == keyword


def parse_query(text: str) -> SelectStatement:
    return QueryParser(text).parse()
