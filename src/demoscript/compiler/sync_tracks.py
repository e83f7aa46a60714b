"""
Sync track discovery for DemoScript.

Scripts read animated values from the demo timeline through property chains
rooted at the ``sync`` variable: ``sync.camera.x`` reads the track named
``camera:x``. Collecting the names up front lets the timeline register every
track a script uses before the first frame is rendered.
"""

from __future__ import annotations

from typing import Any

from demoscript.compiler.ast_nodes import BaseASTVisitor, Program, PropertyOf, Var

SYNC_ROOT = "sync"
TRACK_SEPARATOR = ":"


class SyncTrackCollector(BaseASTVisitor):
    """
    Collects the sync track names referenced by a program.

    Render target sizes are visited before function bodies. Track names are
    reported once, in the order they first appear.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._seen: set[str] = set()
        self.tracks: list[str] = []

    def collect(self, program: Program) -> list[str]:
        self._seen.clear()
        self.tracks = []
        self.visit(program)
        return self.tracks

    def visit_property_of(self, node: PropertyOf) -> Any:
        owner = node.owner
        if isinstance(owner, Var) and owner.span.text(self._source) == SYNC_ROOT:
            name = TRACK_SEPARATOR.join(a.text(self._source) for a in node.accessors)
            if name not in self._seen:
                self._seen.add(name)
                self.tracks.append(name)
            return
        self.visit(owner)


def collect_sync_tracks(program: Program, source: str) -> list[str]:
    """
    List the sync tracks a program reads.

    Args:
        program: Parsed program
        source: The source text the program was parsed from

    Returns:
        Track names such as ``"camera:x"``, deduplicated, in order of first use.
    """
    return SyncTrackCollector(source).collect(program)
