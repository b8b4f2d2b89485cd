"""Tests for the polling manifest watcher."""

import os

from package_versions.watcher import ManifestWatcher


def bump_mtime(path):
    st = path.stat()
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 1_000_000_000))


class TestManifestWatcher:

    def test_prime_then_no_events(self, ctx, write_manifest):
        write_manifest()
        events = []
        watcher = ManifestWatcher(ctx, events.append)
        watcher.prime()
        assert not watcher.poll().has_events()
        assert events == []

    def test_changed_and_created(self, ctx, write_manifest):
        root = write_manifest()
        events = []
        watcher = ManifestWatcher(ctx, events.append)
        watcher.prime()

        bump_mtime(root)
        nested = write_manifest("packages/app/package.json")
        result = watcher.poll()

        assert result.changed == [str(root)]
        assert result.created == [str(nested)]
        assert sorted(events) == sorted([str(root), str(nested)])

    def test_excluded_dirs_not_watched(self, ctx, write_manifest):
        events = []
        watcher = ManifestWatcher(ctx, events.append)
        watcher.prime()
        write_manifest("node_modules/dep/package.json")
        watcher.poll()
        assert events == []
