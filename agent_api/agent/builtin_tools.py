"""
Built-in tools: calculator, getCurrentWeather, web-browser, summarizeTool, queryDatabase.

Handlers raise on bad input; the registry turns the exception into an observation
for the engine. Tools that need the engine (web-browser, summarizeTool) are built
by factories that close over it.
"""

import ast
import html
import logging
import operator
import re
import time
from typing import Protocol

import httpx

from agent_api.agent.tools import ToolDescriptor
from agent_api.core.config import TOOLS_HTTP_TIMEOUT, WEB_PAGE_MAX_CHARS

logger = logging.getLogger(__name__)

SUMMARIZE_TEMPLATE = "Summarize the following content in 1-2 sentences:\n\n{input}"

WEB_ANSWER_TEMPLATE = (
    "Using only the web page text below, answer the question. If the page does not "
    "contain the answer, say so.\n\nQuestion: {question}\n\nPage text:\n{text}"
)

_EXPRESSION_RE = re.compile(r"^[\d\s+\-*/%().]+$")
_SCRIPT_STYLE_RE = re.compile(r"<(script|style|noscript)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


class Completer(Protocol):
    def complete(self, prompt: str, timeout: float | None = None) -> str: ...


class ArithmeticEvaluator(ast.NodeVisitor):
    """
    Evaluates a plain arithmetic expression by walking its AST.
    Only numeric constants, + - * / // % ** and unary +/- are accepted.
    """

    ALLOWED_BINOPS = {
        ast.Add: operator.add,
        ast.Sub: operator.sub,
        ast.Mult: operator.mul,
        ast.Div: operator.truediv,
        ast.FloorDiv: operator.floordiv,
        ast.Mod: operator.mod,
        ast.Pow: operator.pow,
    }

    ALLOWED_UNARYOPS = {
        ast.UAdd: operator.pos,
        ast.USub: operator.neg,
    }

    MAX_DEPTH = 25
    MAX_EXPONENT = 1000
    # Integer results are capped so a single operation stays cheap.
    MAX_INT_BITS = 4096

    def evaluate(self, expression: str):
        try:
            tree = ast.parse(expression, mode="eval")
        except SyntaxError as e:
            raise ValueError(f"invalid expression: {expression}") from e
        self._check_depth(tree)
        return self.visit(tree.body)

    def _check_depth(self, node, depth=0):
        if depth > self.MAX_DEPTH:
            raise ValueError("expression too complex")
        for child in ast.iter_child_nodes(node):
            self._check_depth(child, depth + 1)

    def _check_result(self, value):
        if isinstance(value, complex):
            raise ValueError("result is not a real number")
        if isinstance(value, int) and value.bit_length() > self.MAX_INT_BITS:
            raise ValueError("result too large")
        return value

    def visit_BinOp(self, node):
        op_type = type(node.op)
        if op_type not in self.ALLOWED_BINOPS:
            raise ValueError("operator not allowed")
        left = self.visit(node.left)
        right = self.visit(node.right)
        if op_type is ast.Pow:
            if abs(right) > self.MAX_EXPONENT:
                raise ValueError(f"exponent larger than {self.MAX_EXPONENT}")
            if isinstance(left, int) and isinstance(right, int) and right > 0:
                if max(left.bit_length(), 1) * right > self.MAX_INT_BITS:
                    raise ValueError("result too large")
        return self._check_result(self.ALLOWED_BINOPS[op_type](left, right))

    def visit_UnaryOp(self, node):
        op_type = type(node.op)
        if op_type not in self.ALLOWED_UNARYOPS:
            raise ValueError("unary operator not allowed")
        return self.ALLOWED_UNARYOPS[op_type](self.visit(node.operand))

    def visit_Constant(self, node):
        if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
            return node.value
        raise ValueError("only numeric constants allowed")

    def generic_visit(self, node):
        raise ValueError(f"unsupported expression: {type(node).__name__}")


def calculate(expression: str) -> str:
    """Evaluate an arithmetic expression (numbers and + - * / // % ** ( ) only)."""
    expr = (expression or "").strip()
    if not expr:
        raise ValueError("empty expression")
    if not _EXPRESSION_RE.match(expr):
        raise ValueError("only numbers and + - * / % ( ) . allowed")
    try:
        result = ArithmeticEvaluator().evaluate(expr)
    except OverflowError as e:
        raise ValueError("result too large") from e
    if isinstance(result, float) and result.is_integer():
        result = int(result)
    return str(result)


def get_current_weather(location: str) -> str:
    # Fixed reading; swap for a weather API client when one is configured.
    location = (location or "").strip()
    if not location:
        raise ValueError("location is required")
    return f"The current weather in {location} is 72°F and sunny."


def query_database(query: str) -> str:
    query = (query or "").strip()
    if not query:
        raise ValueError("query is required")
    logger.info("[tools:query_database] simulating database query: %s", query)
    return f'Results for query "{query}": Sample data for demonstration purposes.'


def html_to_text(markup: str) -> str:
    """Strip scripts, styles and tags; unescape entities; collapse whitespace."""
    text = _SCRIPT_STYLE_RE.sub(" ", markup or "")
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    return _WS_RE.sub(" ", text).strip()


def parse_browser_input(tool_input: str) -> tuple[str, str]:
    """
    Split web-browser input into (url, question). Accepts `url` or `url,question`,
    optionally with each part quoted: "https://example.com","what is this page about".
    """
    raw = (tool_input or "").strip()
    url, _, question = raw.partition(",")
    url = url.strip().strip("\"'")
    question = question.strip().strip("\"'")
    if not url:
        raise ValueError("url is required")
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url, question


def fetch_page_text(url: str, timeout: float = TOOLS_HTTP_TIMEOUT) -> str:
    with httpx.Client(timeout=timeout, follow_redirects=True) as client:
        response = client.get(url, headers={"User-Agent": "agent-api/0.1"})
        response.raise_for_status()
    content_type = response.headers.get("content-type", "")
    body = response.text
    text = html_to_text(body) if "html" in content_type or "<" in body[:200] else body.strip()
    logger.info("[tools:fetch_page_text] url=%s status=%d text_len=%d", url, response.status_code, len(text))
    return text


def make_web_browser_tool(engine: Completer, max_chars: int = WEB_PAGE_MAX_CHARS) -> ToolDescriptor:
    def browse(tool_input: str, timeout: float | None = None) -> str:
        url, question = parse_browser_input(tool_input)
        started = time.monotonic()
        fetch_timeout = TOOLS_HTTP_TIMEOUT if timeout is None else min(TOOLS_HTTP_TIMEOUT, timeout)
        text = fetch_page_text(url, timeout=fetch_timeout)
        if not text:
            return f"The page at {url} has no readable text."
        text = text[:max_chars]
        if timeout is not None:
            timeout = max(timeout - (time.monotonic() - started), 0.001)
        if question:
            return engine.complete(WEB_ANSWER_TEMPLATE.format(question=question, text=text), timeout=timeout)
        return engine.complete(SUMMARIZE_TEMPLATE.format(input=text), timeout=timeout)

    return ToolDescriptor(
        name="web-browser",
        description=(
            "useful for when you need to find something on or summarize a webpage. "
            "input should be a comma separated list of \"ONE valid http URL including protocol\","
            "\"what you want to find on the page or empty string for a summary\"."
        ),
        handler=browse,
        accepts_timeout=True,
    )


def make_summarize_tool(engine: Completer) -> ToolDescriptor:
    def summarize(text: str, timeout: float | None = None) -> str:
        if not (text or "").strip():
            raise ValueError("nothing to summarize")
        return engine.complete(SUMMARIZE_TEMPLATE.format(input=text), timeout=timeout)

    return ToolDescriptor(
        name="summarizeTool",
        description="Summarizes a long piece of text into a shorter summary.",
        handler=summarize,
        accepts_timeout=True,
    )


CALCULATOR_TOOL = ToolDescriptor(
    name="calculator",
    description="Useful for getting the result of a math expression. The input to this tool should be a valid mathematical expression that could be executed by a simple calculator.",
    handler=calculate,
)

WEATHER_TOOL = ToolDescriptor(
    name="getCurrentWeather",
    description="Get the current weather in a given location",
    handler=get_current_weather,
)

DATABASE_TOOL = ToolDescriptor(
    name="queryDatabase",
    description="Query a database for information. Input should be a SQL-like query description.",
    handler=query_database,
)
