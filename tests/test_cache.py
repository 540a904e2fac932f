import pytest

from garfield.cache import (
    CacheEntry,
    CachedExtraction,
    FileCache,
    cache_stats,
    check_cache,
    check_semantic_cache,
    clear_all_cache,
    clear_cache,
    compute_hash,
    get_cache_dir,
    load_cached,
    save_cached,
    save_semantic_cache,
    update_cache,
)
from garfield.graph import Confidence, Edge, Hyperedge, Node


def test_compute_hash(tmp_path):
    file_path = tmp_path / "test.txt"
    file_path.write_bytes(b"hello world")
    digest = compute_hash(file_path)
    assert len(digest) == 64
    assert all(c in "0123456789abcdef" for c in digest)


def test_compute_hash_depends_on_path(tmp_path):
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_text("same")
    b.write_text("same")
    assert compute_hash(a) != compute_hash(b)


def test_md_body_only_hash(tmp_path):
    md_path = tmp_path / "test.md"
    md_path.write_text(
        "---\ntitle: My Document\ntags: [foo, bar]\n---\n# Actual content\n\nThis is the body.\n"
    )
    hash1 = compute_hash(md_path)

    md_path.write_text(
        "---\ntitle: Changed Title\ntags: [different]\n---\n# Actual content\n\nThis is the body.\n"
    )
    hash2 = compute_hash(md_path)
    assert hash1 == hash2

    md_path.write_text(
        "---\ntitle: My Document\ntags: [foo, bar]\n---\n# Actual content\n\nThis is the body - MODIFIED.\n"
    )
    hash3 = compute_hash(md_path)
    assert hash1 != hash3


def test_non_md_frontmatter_is_hashed(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("---\na: 1\n---\nbody\n")
    first = compute_hash(path)
    path.write_text("---\na: 2\n---\nbody\n")
    assert compute_hash(path) != first


def test_compute_hash_missing_file(tmp_path):
    with pytest.raises(OSError):
        compute_hash(tmp_path / "missing.txt")


def test_cache_roundtrip(tmp_path):
    cache = FileCache()
    file_path = tmp_path / "test.txt"
    file_path.write_bytes(b"hello")
    update_cache(cache, [file_path], "test.txt")
    changed, unchanged = check_cache([file_path], cache)
    assert changed == []
    assert unchanged == [file_path]


def test_check_cache_detects_change(tmp_path):
    cache = FileCache()
    file_path = tmp_path / "test.txt"
    file_path.write_text("hello")
    update_cache(cache, [file_path], None)
    file_path.write_text("hello again")
    changed, unchanged = check_cache([file_path], cache)
    assert changed == [file_path]
    assert unchanged == []


def test_check_cache_uncached_and_missing(tmp_path):
    cache = FileCache()
    present = tmp_path / "x.py"
    present.write_text("x = 1")
    missing = tmp_path / "gone.py"
    changed, unchanged = check_cache([present, missing], cache)
    assert changed == [present, missing]
    assert unchanged == []


def test_group_by_source_file(tmp_path):
    cache = FileCache()
    file1 = tmp_path / "module1" / "a.py"
    file2 = tmp_path / "module1" / "b.py"
    file3 = tmp_path / "module2" / "c.py"
    file1.parent.mkdir()
    file3.parent.mkdir()
    file1.write_text("def foo(): pass")
    file2.write_text("def bar(): pass")
    file3.write_text("def baz(): pass")

    update_cache(cache, [file1, file2, file3], "module1")
    update_cache(cache, [file3], "module2")

    assert len(cache.by_source_file["module1"]) == 3
    assert len(cache.by_source_file["module2"]) == 1


def test_update_cache_records_size_and_skips_missing(tmp_path):
    cache = FileCache()
    path = tmp_path / "data.txt"
    path.write_bytes(b"hello world")
    update_cache(cache, [path, tmp_path / "nope.txt"], None)
    assert list(cache.entries) == [str(path)]
    entry = cache.entries[str(path)]
    assert entry.size == len(b"hello world")
    assert entry.hash == compute_hash(path)
    assert entry.source_file is None
    assert cache.by_source_file == {}


def test_remove_entries_prunes_index():
    cache = FileCache()
    cache.add_entry(CacheEntry("a.py", "h1", 1, 0, "mod"))
    cache.add_entry(CacheEntry("b.py", "h2", 2, 0, "mod"))
    cache.remove_entries(["a.py"])
    assert set(cache.entries) == {"b.py"}
    assert cache.by_source_file == {"mod": ["b.py"]}
    cache.remove_entries(["b.py", "unknown.py"])
    assert cache.entries == {}
    assert cache.by_source_file == {}


def test_clear_cache(tmp_path):
    cache = FileCache()
    path = tmp_path / "a.py"
    path.write_text("pass")
    update_cache(cache, [path], "group")
    clear_cache(cache, [path])
    assert cache.entries == {}
    assert "group" not in cache.by_source_file


def test_cache_stats():
    cache = FileCache()
    cache.add_entry(CacheEntry("a.py", "h1", 1, 0, "m1"))
    cache.add_entry(CacheEntry("b.py", "h2", 1, 0, "m2"))
    cache.add_entry(CacheEntry("c.py", "h3", 1, 0, None))
    stats = cache_stats(cache)
    assert stats.total_entries == 3
    assert stats.files_by_source == 2
    assert sorted(stats.file_paths) == ["a.py", "b.py", "c.py"]


def test_file_cache_save_load_roundtrip(tmp_path):
    cache = FileCache()
    cache.add_entry(CacheEntry("a.py", "abc", 10, 1234, "mod"))
    target = tmp_path / "nested" / "cache.json"
    cache.save(target)
    loaded = FileCache.load(target)
    assert loaded == cache
    assert loaded.version == "2.0"


def test_file_cache_load_missing_gives_empty(tmp_path):
    loaded = FileCache.load(tmp_path / "absent.json")
    assert loaded.entries == {}
    assert loaded.version == "2.0"


def test_file_cache_load_invalid(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(ValueError):
        FileCache.load(bad)
    incomplete = tmp_path / "incomplete.json"
    incomplete.write_text('{"entries": {}}')
    with pytest.raises(ValueError):
        FileCache.load(incomplete)


def test_get_cache_dir_created(tmp_path):
    cache_dir = get_cache_dir(tmp_path)
    assert cache_dir == tmp_path / "graphify-out" / "cache"
    assert cache_dir.is_dir()


def _extraction(source_file):
    return CachedExtraction(
        nodes=[Node("a:foo", "foo", source_file, "L1")],
        edges=[Edge("a:foo", "a:bar", "calls", Confidence.INFERRED, source_file)],
        hyperedges=[Hyperedge("h1", "group", ["a:foo", "a:bar"], "uses", source_file)],
    )


def test_save_and_load_cached(tmp_path):
    src = tmp_path / "a.py"
    src.write_text("def foo(): pass")
    result = _extraction(str(src))
    save_cached(src, result, tmp_path)
    assert load_cached(src, tmp_path) == result
    assert not list(get_cache_dir(tmp_path).glob("*.tmp"))


def test_load_cached_invalidated_by_change(tmp_path):
    src = tmp_path / "a.py"
    src.write_text("def foo(): pass")
    save_cached(src, _extraction(str(src)), tmp_path)
    src.write_text("def foo(): return 1")
    assert load_cached(src, tmp_path) is None
    assert load_cached(tmp_path / "missing.py", tmp_path) is None


def test_check_semantic_cache(tmp_path):
    cached_src = tmp_path / "a.py"
    cached_src.write_text("def foo(): pass")
    other = tmp_path / "b.py"
    other.write_text("def bar(): pass")
    result = _extraction(str(cached_src))
    save_cached(cached_src, result, tmp_path)

    nodes, edges, hyperedges, uncached = check_semantic_cache(
        [str(cached_src), str(other)], tmp_path
    )
    assert nodes == result.nodes
    assert edges == result.edges
    assert hyperedges == result.hyperedges
    assert uncached == [str(other)]


def test_save_semantic_cache_groups_by_file(tmp_path):
    a = tmp_path / "a.py"
    b = tmp_path / "b.py"
    a.write_text("a")
    b.write_text("b")
    nodes = [
        Node("a:x", "x", str(a)),
        Node("b:y", "y", str(b)),
        Node("ghost:z", "z", str(tmp_path / "ghost.py")),
        Node("nofile", "nofile", ""),
    ]
    edges = [Edge("a:x", "b:y", "calls", Confidence.EXTRACTED, str(a))]
    saved = save_semantic_cache(nodes, edges, [], tmp_path)
    assert saved == 2

    cached_a = load_cached(a, tmp_path)
    assert [n.id for n in cached_a.nodes] == ["a:x"]
    assert cached_a.edges == edges
    cached_b = load_cached(b, tmp_path)
    assert [n.id for n in cached_b.nodes] == ["b:y"]
    assert cached_b.edges == []


def test_clear_all_cache(tmp_path):
    a = tmp_path / "a.py"
    b = tmp_path / "b.py"
    a.write_text("a")
    b.write_text("b")
    save_cached(a, CachedExtraction(), tmp_path)
    save_cached(b, CachedExtraction(), tmp_path)
    assert clear_all_cache(tmp_path) == 2
    assert load_cached(a, tmp_path) is None
    assert clear_all_cache(tmp_path) == 0