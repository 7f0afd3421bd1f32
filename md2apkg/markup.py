from __future__ import annotations

from html import escape
from typing import Sequence

from markdown_it import MarkdownIt
from markdown_it.rules_inline.state_inline import StateInline
from markdown_it.token import Token
from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound

_FORMATTER = HtmlFormatter(nowrap=True)


def highlight_code(code: str, lang: str, attrs: str = "") -> str:
    """Pygments highlighting for fenced code; unknown languages are guessed."""
    try:
        lexer = get_lexer_by_name(lang) if lang else guess_lexer(code)
    except ClassNotFound:
        try:
            lexer = guess_lexer(code)
        except ClassNotFound:
            lexer = None

    if lexer is None:
        body = escape(code)
    else:
        body = pygments_highlight(code, lexer, _FORMATTER)
    return f'<pre class="highlight"><code>{body}</code></pre>'


COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"


def _comment_rule(state: StateInline, silent: bool) -> bool:
    start = state.pos
    if not state.src.startswith(COMMENT_OPEN, start):
        return False
    end = state.src.find(COMMENT_CLOSE, start + len(COMMENT_OPEN))
    if end < 0 or end + len(COMMENT_CLOSE) > state.posMax:
        return False
    if not silent:
        token = state.push("html_comment", "", 0)
        token.content = state.src[start : end + len(COMMENT_CLOSE)]
    state.pos = end + len(COMMENT_CLOSE)
    return True


def _render_comment(self, tokens: Sequence[Token], idx: int, options, env) -> str:
    return ""


def inline_comments_plugin(md: MarkdownIt) -> None:
    """Hide <!-- ... --> inside paragraphs; the inline token's content keeps them."""
    md.inline.ruler.before("text", "html_comment", _comment_rule)
    md.add_render_rule("html_comment", _render_comment)


def create_parser() -> MarkdownIt:
    # raw html off: marker comments arrive as inline text tokens
    md = MarkdownIt("default", {"html": False, "highlight": highlight_code})
    return md.use(inline_comments_plugin)


_MD = create_parser()


def tokens_from_markdown(text: str) -> list[Token]:
    return _MD.parse(text, {})


def render_tokens(tokens: Sequence[Token]) -> str:
    return _MD.renderer.render(list(tokens), _MD.options, {})
