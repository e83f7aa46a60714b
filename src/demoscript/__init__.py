"""
DemoScript - the scene description language of a real-time demo renderer.

Scripts declare render targets and functions that drive the frame loop. This
package turns script text into a typed syntax tree with source spans, ready
for the renderer's bytecode compiler.
"""

from demoscript.compiler import collect_sync_tracks, parse_file, parse_source
from demoscript.compiler.lexer import Lexer
from demoscript.compiler.parser import Parser
from demoscript.utils.errors import DemoScriptError, LexerError, LiteralError, ParserError

__version__ = "0.1.0"
__all__ = [
    "parse_source",
    "parse_file",
    "collect_sync_tracks",
    "Lexer",
    "Parser",
    "DemoScriptError",
    "LexerError",
    "ParserError",
    "LiteralError",
]
