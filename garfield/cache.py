"""Content-hash file cache and per-file extraction cache."""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from garfield.graph import Edge, Hyperedge, Node

CACHE_VERSION = "2.0"


@dataclass
class CacheEntry:
    """Hash and file facts recorded for one path."""

    path: str
    hash: str
    size: int
    modified: int
    source_file: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "hash": self.hash,
            "size": self.size,
            "modified": self.modified,
            "source_file": self.source_file,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheEntry":
        return cls(
            path=data["path"],
            hash=data["hash"],
            size=int(data["size"]),
            modified=int(data["modified"]),
            source_file=data.get("source_file"),
        )


@dataclass
class FileCache:
    """Cache entries keyed by path, with an index grouping paths by source file."""

    entries: dict[str, CacheEntry] = field(default_factory=dict)
    by_source_file: dict[str, list[str]] = field(default_factory=dict)
    version: str = CACHE_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": {k: v.to_dict() for k, v in self.entries.items()},
            "by_source_file": {k: list(v) for k, v in self.by_source_file.items()},
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileCache":
        if not isinstance(data, dict):
            raise ValueError("cache data must be a JSON object")
        try:
            entries = {k: CacheEntry.from_dict(v) for k, v in data["entries"].items()}
            version = data["version"]
        except KeyError as exc:
            raise ValueError(f"cache data is missing field {exc}") from exc
        by_source = {k: list(v) for k, v in data.get("by_source_file", {}).items()}
        return cls(entries=entries, by_source_file=by_source, version=version)

    @classmethod
    def load(cls, path: str | Path) -> "FileCache":
        """Load a cache from disk; a missing file gives an empty cache."""
        path = Path(path)
        if not path.exists():
            return cls()
        return cls.from_dict(json.loads(path.read_text(encoding="utf-8")))

    def save(self, path: str | Path) -> None:
        """Write the cache as pretty-printed JSON, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    def add_entry(self, entry: CacheEntry) -> None:
        """Store an entry and record its path under its source file."""
        self.entries[entry.path] = entry
        if entry.source_file is not None:
            self.by_source_file.setdefault(entry.source_file, []).append(entry.path)

    def remove_entries(self, paths: Iterable[str]) -> None:
        """Drop entries for the given paths and prune the source-file index."""
        for path in paths:
            entry = self.entries.pop(path, None)
            if entry is None or entry.source_file is None:
                continue
            grouped = self.by_source_file.get(entry.source_file)
            if grouped is None:
                continue
            grouped[:] = [p for p in grouped if p != path]
            if not grouped:
                del self.by_source_file[entry.source_file]


@dataclass
class CacheStats:
    total_entries: int
    files_by_source: int
    file_paths: list[str]


@dataclass
class CachedExtraction:
    """Nodes, edges and hyperedges cached for one source file."""

    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    hyperedges: list[Hyperedge] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "hyperedges": [h.to_dict() for h in self.hyperedges],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CachedExtraction":
        if not isinstance(data, dict):
            raise ValueError("cached extraction must be a JSON object")
        try:
            nodes = [Node.from_dict(n) for n in data["nodes"]]
            edges = [Edge.from_dict(e) for e in data["edges"]]
        except KeyError as exc:
            raise ValueError(f"cached extraction is missing field {exc}") from exc
        hyperedges = [Hyperedge.from_dict(h) for h in data.get("hyperedges", [])]
        return cls(nodes=nodes, edges=edges, hyperedges=hyperedges)


def _md_body(content: str) -> str:
    """Strip YAML frontmatter so metadata edits do not change the hash."""
    if content.startswith("---"):
        idx = content.find("\n---", 3)
        if idx != -1:
            return content[idx + 1:]
    return content


def compute_hash(path: str | Path) -> str:
    """SHA-256 hex digest of a file's content and path (body only for .md files)."""
    path = Path(path)
    text = path.read_bytes().decode("utf-8", errors="replace")
    if path.suffix[1:].lower() == "md":
        text = _md_body(text)
    hash_input = f"{text}\n\x00{path}"
    return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()


def check_cache(
    files: Iterable[str | Path], cache: FileCache
) -> tuple[list[Path], list[Path]]:
    """Split files into (changed, unchanged) against the cached hashes."""
    changed: list[Path] = []
    unchanged: list[Path] = []
    for file in files:
        file = Path(file)
        entry = cache.entries.get(str(file))
        try:
            digest = compute_hash(file)
        except OSError:
            digest = None
        if entry is not None and digest is not None and digest == entry.hash:
            unchanged.append(file)
        else:
            changed.append(file)
    return changed, unchanged


def update_cache(
    cache: FileCache, files: Iterable[str | Path], source_file: str | None = None
) -> None:
    """Record current hashes of readable files, grouped under source_file."""
    for file in files:
        file = Path(file)
        try:
            digest = compute_hash(file)
        except OSError:
            continue
        st = file.stat()
        cache.add_entry(
            CacheEntry(
                path=str(file),
                hash=digest,
                size=st.st_size,
                modified=max(int(st.st_mtime), 0),
                source_file=source_file,
            )
        )


def clear_cache(cache: FileCache, files: Iterable[str | Path]) -> None:
    """Remove the given files from the cache."""
    cache.remove_entries([str(Path(f)) for f in files])


def cache_stats(cache: FileCache) -> CacheStats:
    return CacheStats(
        total_entries=len(cache.entries),
        files_by_source=len(cache.by_source_file),
        file_paths=list(cache.entries),
    )


def get_cache_dir(root: str | Path) -> Path:
    """Directory for per-file extraction caches under root, created if missing."""
    cache_dir = Path(root) / "graphify-out" / "cache"
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass
    return cache_dir


def _cache_file(path: Path, root: str | Path) -> Path:
    return get_cache_dir(root) / f"{compute_hash(path)}.json"


def load_cached(path: str | Path, root: str | Path) -> CachedExtraction | None:
    """Cached extraction for a file whose content is unchanged, else None."""
    try:
        cache_file = _cache_file(Path(path), root)
        if not cache_file.exists():
            return None
        return CachedExtraction.from_dict(
            json.loads(cache_file.read_text(encoding="utf-8"))
        )
    except (OSError, ValueError, TypeError, KeyError):
        return None


def save_cached(path: str | Path, result: CachedExtraction, root: str | Path) -> None:
    """Store an extraction for a file, keyed by its content hash, atomically."""
    cache_file = _cache_file(Path(path), root)
    tmp_file = cache_file.with_suffix(".tmp")
    tmp_file.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
    os.replace(tmp_file, cache_file)


def check_semantic_cache(
    files: Iterable[str], root: str | Path
) -> tuple[list[Node], list[Edge], list[Hyperedge], list[str]]:
    """Gather cached results; return (nodes, edges, hyperedges, uncached files)."""
    nodes: list[Node] = []
    edges: list[Edge] = []
    hyperedges: list[Hyperedge] = []
    uncached: list[str] = []
    for fpath in files:
        cached = load_cached(Path(fpath), root)
        if cached is None:
            uncached.append(fpath)
            continue
        nodes.extend(cached.nodes)
        edges.extend(cached.edges)
        hyperedges.extend(cached.hyperedges)
    return nodes, edges, hyperedges, uncached


def save_semantic_cache(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    hyperedges: Iterable[Hyperedge],
    root: str | Path,
) -> int:
    """Cache results grouped by source file; return how many files were saved."""
    by_file: dict[str, CachedExtraction] = {}
    for node in nodes:
        if node.source_file:
            by_file.setdefault(node.source_file, CachedExtraction()).nodes.append(node)
    for edge in edges:
        if edge.source_file:
            by_file.setdefault(edge.source_file, CachedExtraction()).edges.append(edge)
    for hyperedge in hyperedges:
        if hyperedge.source_file:
            by_file.setdefault(
                hyperedge.source_file, CachedExtraction()
            ).hyperedges.append(hyperedge)

    saved = 0
    for fpath, result in by_file.items():
        path = Path(fpath)
        if path.exists():
            save_cached(path, result, root)
            saved += 1
    return saved


def clear_all_cache(root: str | Path) -> int:
    """Delete every cached extraction under root; return how many were removed."""
    removed = 0
    try:
        candidates = list(get_cache_dir(root).iterdir())
    except OSError:
        return 0
    for entry in candidates:
        if entry.suffix == ".json":
            try:
                entry.unlink()
            except OSError:
                continue
            removed += 1
    return removed