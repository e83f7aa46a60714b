"""
Unit tests for sync track discovery.
"""

from demoscript.compiler.sync_tracks import SyncTrackCollector, collect_sync_tracks


class TestSyncTracks:
    """Tests for collect_sync_tracks."""

    def test_no_tracks(self, parse):
        source = "fn main() { draw(time); }"
        assert collect_sync_tracks(parse(source), source) == []

    def test_accessors_joined_with_colon(self, parse):
        source = "fn main() { camera(sync.camera.x, sync.fade); }"
        assert collect_sync_tracks(parse(source), source) == ["camera:x", "fade"]

    def test_duplicates_reported_once(self, parse):
        source = """
fn main() {
    a(sync.fade);
    if sync.fade > 0.5 { b(sync.fade * 2); }
}
"""
        assert collect_sync_tracks(parse(source), source) == ["fade"]

    def test_render_targets_visited_first(self, parse):
        source = """
fn main() { draw(sync.late); }
define_rt("rt", sync.size.w, sync.size.h, {"color": RGBA8});
"""
        tracks = collect_sync_tracks(parse(source), source)
        assert tracks == ["size:w", "size:h", "late"]

    def test_nested_expressions(self, parse):
        source = """
fn f() -> f32 {
    if a < 1 {
        return -(sync.x) + {"k": sync.y}.k;
    } else {
        return sync.z;
    }
}
"""
        tracks = collect_sync_tracks(parse(source), source)
        assert tracks == ["x", "y", "z"]

    def test_other_owners_ignored(self, parse):
        source = "fn main() { a(scene.camera.x, synced.y); }"
        assert collect_sync_tracks(parse(source), source) == []

    def test_collector_is_reusable(self, parse):
        first = "fn a() { f(sync.one); }"
        collector = SyncTrackCollector(first)
        assert collector.collect(parse(first)) == ["one"]
        assert collector.collect(parse(first)) == ["one"]
