# garfield

Building blocks for a knowledge graph of a source tree. The package provides
a graph data model with JSON import and export. It can find and classify the
files in a directory, cache content hashes and per-file extraction results,
and compare two graph snapshots.

It has no dependencies outside the standard library.

## Installation

    pip install garfield

## Modules

### `garfield.graph`: data model and JSON

- `Confidence`: `EXTRACTED`, `INFERRED` or `AMBIGUOUS`.
- `Node`, `Edge`, `Hyperedge`, `GraphMetadata`, `GraphData` and
  `ExtractionResult` are dataclasses. Every model class except
  `ExtractionResult` has `to_dict()` and `from_dict()`.
- `ExtractionResult.add_node(node)` and `ExtractionResult.add_edge(edge)` add
  items to an extraction.
- `to_json(graph, path)` writes pretty-printed JSON. It creates any missing
  parent directories and prints the output path.
- `from_json(path)` loads a graph from a JSON file.
- `export_stats(graph, path)` writes a JSON file holding node and edge totals,
  the community count, edge counts per confidence level, and the creation time.

### `garfield.detect`: file discovery

`detect(root)` walks a directory tree and returns a `DetectResult`. The result
holds the usable `DetectedFile`s, `DetectStats`, a word count estimate,
warnings, and the list of sensitive files that were skipped. The walk skips:

- hidden files;
- files inside noise directories such as `node_modules`, `.venv`,
  `__pycache__`, `target` and `*.egg-info`;
- files matched by `.graphifyignore` patterns, read from the root and from its
  parent directories up to the nearest one that contains `.git`;
- files whose path looks sensitive, for example `.env`, `*.pem`, or names
  containing `secret`, `token` or `password`.

`detect` prints a summary to standard error. A missing root raises
`FileNotFoundError`.

Other helpers in the module:

- `classify_extension`, `filter_code_files`, `get_stats` and
  `estimate_word_count` classify files, filter them and count them.
- `print_summary` prints file counts and the word estimate to standard output.
- `glob_to_regex` turns an ignore pattern into a regular expression.
- `is_sensitive` returns the reason a path looks sensitive, or `None`.
- `DetectResult.corpus_verdict()` judges whether the corpus is too small, too
  large or of a suitable size.

### `garfield.cache`: hashing and caches

- `compute_hash(path)` returns the SHA-256 hex digest of a file's content
  together with its path. For `.md` files only the body below the YAML front
  matter is hashed, so edits to the metadata alone keep the same hash.
- `FileCache` maps each path to a `CacheEntry` and groups paths by source
  file. It provides `load`, `save`, `add_entry` and `remove_entries`.
- `check_cache`, `update_cache`, `clear_cache` and `cache_stats` work on a
  `FileCache`.
- The per-file extraction cache is stored in `<root>/graphify-out/cache/` as
  `<hash>.json`. It is used through:
  - `load_cached` and `save_cached`, which read and write the entry for one
    file; writes are atomic;
  - `check_semantic_cache` and `save_semantic_cache`, which handle many
    files, grouped by their source file;
  - `clear_all_cache`, which removes every entry.

### `garfield.diff`: snapshot comparison

`graph_diff(old, new)` returns a `GraphDiff`. It lists the added and removed
nodes (`NodeChange`) and edges (`EdgeChange`, keyed by source, target and
relation), with a summary such as `"1 new node, 1 new edge"` or
`"no changes"`.

## Example

```python
from garfield.graph import Confidence, Edge, GraphData, Node, from_json, to_json
from garfield.diff import graph_diff

old = GraphData(
    nodes=[Node("a.py:foo", "foo", "a.py", "L1"), Node("a.py:bar", "bar", "a.py", "L1")],
    links=[Edge("a.py:foo", "a.py:bar", "calls", Confidence.EXTRACTED)],
)
to_json(old, "out/graph.json")

new = from_json("out/graph.json")
new.nodes.append(Node("b.py:baz", "baz", "b.py", "L1"))
new.links.append(Edge("a.py:foo", "b.py:baz", "calls", Confidence.INFERRED))

print(graph_diff(old, new).summary)  # 1 new node, 1 new edge
```

## What it does not do

The package does not extract entities from source code. It does not merge
extractions into a graph, detect communities, or rank or analyse nodes. It has
no command-line tool. Graphs have to be produced elsewhere, or built by hand
with the `garfield.graph` classes, before they can be saved, cached or
compared.

## Running the tests

    pip install "garfield[test]"
    pytest