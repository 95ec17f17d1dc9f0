"""
Recursive descent parser for the mmpp metric language.

Produces a ParseNode tree tagged with grammar rules (see grammar.py). The
tree keeps literal arguments as source text; turning it into typed Metric
values is the builder's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from mmpp.core.errors import (
    MetricSyntaxError,
    NestingDepthError,
    context_for,
    make_syntax_error,
)
from mmpp.core.metric_lang.grammar import (
    SIGNATURES,
    ArgKind,
    FunctionSignature,
    Rule,
    function_names,
)
from mmpp.core.metric_lang.tokenizer import BARE_RE, Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 128

# Parser, builder and printer each recurse once per nesting level
MAX_DEPTH_LIMIT = 300


@dataclass
class ParseNode:
    """
    A node of the parse tree.

    Function nodes carry the function name in `text` and their arguments
    in `children`. Argument nodes carry their (unquoted) source text.
    """

    rule: Rule
    pos: int
    text: str = ""
    children: list[ParseNode] = field(default_factory=list)


class _Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, tokens: list[Token], text: str, source: str, max_depth: int) -> None:
        self.tokens = tokens
        self.text = text
        self.source = source
        self.max_depth = max_depth
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    def error(self, message: str, tok: Token | None = None) -> MetricSyntaxError:
        tok = tok or self.current
        return make_syntax_error(message, self.text, tok.pos, self.source)

    def expect(self, kind: TokenKind, what: str) -> Token:
        tok = self.current
        if tok.kind != kind:
            raise self.error(f"Expected {what}, got {tok.describe()}")
        return self.advance()

    # -- Grammar rules --

    def parse_metric(self, depth: int = 1, where: str = "a metric expression") -> ParseNode:
        """FUNC '(' args ')'"""
        tok = self.current
        if tok.kind != TokenKind.WORD:
            raise self.error(f"Expected {where}, got {tok.describe()}")

        sig = SIGNATURES.get(tok.value)
        if sig is None:
            names = ", ".join(function_names())
            raise self.error(f"Unknown function {tok.value!r}; expected one of: {names}")

        if depth > self.max_depth:
            raise NestingDepthError(
                f"Expression nests deeper than the maximum depth of {self.max_depth}",
                tok.pos,
                context_for(self.text, tok.pos, self.source),
            )

        self.advance()
        self.expect(TokenKind.LPAREN, f"'(' after {sig.name!r}")

        node = ParseNode(rule=sig.rule, pos=tok.pos, text=sig.name)
        index = 0
        while True:
            kind = sig.args[0] if sig.variadic else sig.args[index]
            index += 1
            node.children.append(self._parse_argument(kind, sig, index, depth))
            if sig.variadic:
                if self.match(TokenKind.COMMA):
                    continue
                break
            if index == len(sig.args):
                break
            if self.current.kind != TokenKind.COMMA:
                raise self.error(
                    f"{sig.name} takes {len(sig.args)} arguments, {sig.describe()}; "
                    f"expected ',' after argument {index}, got {self.current.describe()}"
                )
            self.advance()

        self.expect(TokenKind.RPAREN, f"')' to close {sig.describe()}")
        return node

    def _parse_argument(
        self, kind: ArgKind, sig: FunctionSignature, index: int, depth: int
    ) -> ParseNode:
        where = f"{kind.value} as argument {index} of {sig.describe()}"
        if kind == ArgKind.METRIC:
            return self.parse_metric(depth + 1, where)
        if kind == ArgKind.IDENTIFIER:
            return self._parse_identifier(where)
        if kind == ArgKind.ROLE_IDENTIFIER:
            return self._parse_role_identifier(where)
        if kind == ArgKind.FACTOR:
            return self._parse_factor(where)
        return self._parse_literal(where)

    def _parse_identifier(self, where: str, rule: Rule = Rule.IDENTIFIER) -> ParseNode:
        """WORD | NUMBER | STRING"""
        tok = self.current
        if tok.kind == TokenKind.STRING:
            if not tok.value:
                raise self.error(f"Expected {where}, got an empty quoted identifier")
            self.advance()
            return ParseNode(rule=rule, pos=tok.pos, text=tok.value)
        if tok.kind == TokenKind.WORD or (
            tok.kind == TokenKind.NUMBER and BARE_RE.fullmatch(tok.value)
        ):
            self.advance()
            return ParseNode(rule=rule, pos=tok.pos, text=tok.value)
        raise self.error(f"Expected {where}, got {tok.describe()}")

    def _parse_role_identifier(self, where: str) -> ParseNode:
        """STRING with exactly one ':' | identifier ':' identifier"""
        tok = self.current
        if tok.kind == TokenKind.STRING:
            if tok.value.count(":") != 1:
                raise self.error(
                    f"Expected {where} of the form service:role, got {tok.describe()}"
                )
            service, role = (part.strip() for part in tok.value.split(":"))
            if not service or not role:
                raise self.error(f"Expected {where} with non-empty service and role names")
            self.advance()
            return ParseNode(
                rule=Rule.ROLE_IDENTIFIER,
                pos=tok.pos,
                text=tok.value,
                children=[
                    ParseNode(rule=Rule.SERVICE_NAME, pos=tok.pos, text=service),
                    ParseNode(rule=Rule.ROLE_NAME, pos=tok.pos, text=role),
                ],
            )

        if self.peek(1).kind != TokenKind.COLON:
            raise self.error(f"Expected {where} of the form service:role, got {tok.describe()}")
        service_node = self._parse_identifier(where, Rule.SERVICE_NAME)
        self.advance()  # ':'
        if self.current.kind == TokenKind.STRING:
            raise self.error(
                f"Expected {where} of the form service:role, got {self.current.describe()}"
            )
        role_node = self._parse_identifier(where, Rule.ROLE_NAME)
        return ParseNode(
            rule=Rule.ROLE_IDENTIFIER,
            pos=tok.pos,
            text=f"{service_node.text}:{role_node.text}",
            children=[service_node, role_node],
        )

    def _parse_factor(self, where: str) -> ParseNode:
        """literal ('/' literal)?"""
        numerator = self._parse_literal(where)
        if self.match(TokenKind.SLASH) is None:
            return numerator
        denominator = self._parse_literal(f"denominator of {where}")
        return ParseNode(
            rule=Rule.FRACTION,
            pos=numerator.pos,
            text=f"{numerator.text}/{denominator.text}",
            children=[numerator, denominator],
        )

    def _parse_literal(self, where: str) -> ParseNode:
        """WORD | NUMBER"""
        tok = self.current
        if tok.kind not in (TokenKind.WORD, TokenKind.NUMBER):
            raise self.error(f"Expected {where}, got {tok.describe()}")
        self.advance()
        return ParseNode(rule=Rule.LITERAL, pos=tok.pos, text=tok.value)


def parse_text(
    text: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    source: str = "<input>",
) -> ParseNode:
    """Parse metric expression text into a parse tree.

    Args:
        text: The whole expression (surrounding whitespace allowed).
        max_depth: Maximum nesting depth of function forms. Values above
            MAX_DEPTH_LIMIT are lowered to it.
        source: Input name used in error locations.

    Returns:
        The root function node.

    Raises:
        MetricSyntaxError: If the text does not match the grammar.
        NestingDepthError: If nesting exceeds `max_depth`.
    """
    try:
        tokens = tokenize(text)
    except MetricSyntaxError as e:
        raise make_syntax_error(e.message, text, e.pos, source) from e
    logger.debug("Tokenized %s into %d tokens", source, len(tokens))

    if max_depth > MAX_DEPTH_LIMIT:
        logger.debug("Lowering max_depth %d to %d", max_depth, MAX_DEPTH_LIMIT)
        max_depth = MAX_DEPTH_LIMIT
    parser = _Parser(tokens, text, source, max_depth)
    root = parser.parse_metric()

    # Ensure all tokens consumed
    if parser.current.kind != TokenKind.EOF:
        raise parser.error(f"Unexpected content after expression: {parser.current.describe()}")

    return root
