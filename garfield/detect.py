"""Discovery and classification of source files in a directory tree."""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

SKIP_DIRS = frozenset(
    {
        "venv", ".venv", "env", ".env", "node_modules", "__pycache__", ".git",
        "dist", "build", "target", "out", "site-packages", "lib64",
        ".pytest_cache", ".mypy_cache", ".ruff_cache", ".tox", ".eggs",
        "*.egg-info", ".hg", ".svn", ".bzr", "vendor", ".cargo",
    }
)

SENSITIVE_PATTERNS = (
    r"\.env$", r"\.envrc$", r"\.pem$", r"\.key$", r"\.p12$", r"\.pfx$",
    r"\.cert$", r"\.crt$", r"\.der$", r"\.p8$", r"credential", r"secret",
    r"passwd", r"password", r"token", r"private_key", r"id_rsa", r"id_dsa",
    r"id_ecdsa", r"id_ed25519", r"\.netrc$", r"\.pgpass$", r"\.htpasswd$",
    r"aws_credentials", r"gcloud_credentials", r"service\.account",
)

_SENSITIVE_REGEXES = tuple((p, re.compile(p)) for p in SENSITIVE_PATTERNS)

CODE_EXTENSIONS = frozenset(
    {
        "py", "pyi", "pyw",
        "js", "mjs", "cjs", "jsx", "ts", "tsx",
        "go", "rs", "java",
        "c", "h", "cpp", "hpp", "cc", "cxx", "hxx",
        "rb", "cs", "kt", "kts", "scala", "php", "swift", "lua", "zig",
        "ps1", "psm1", "ex", "exs", "m", "mm", "jl",
        "toml", "yaml", "yml", "json",
    }
)

MARKDOWN_EXTENSIONS = frozenset({"md", "mdx", "markdown", "txt"})

_PROSE_EXTENSIONS = frozenset({"md", "markdown", "txt", "rst"})
_WORD_RE = re.compile(r"\w+")


class FileType(Enum):
    CODE = "code"
    MARKDOWN = "markdown"
    BINARY = "binary"


@dataclass
class DetectedFile:
    path: Path
    file_type: FileType
    extension: str
    size_bytes: int = 0


@dataclass
class DetectStats:
    total: int = 0
    code: int = 0
    markdown: int = 0
    binary: int = 0


@dataclass
class DetectResult:
    files: list[DetectedFile] = field(default_factory=list)
    stats: DetectStats = field(default_factory=DetectStats)
    word_count: int = 0
    warnings: list[str] = field(default_factory=list)
    sensitive_files_skipped: list[str] = field(default_factory=list)

    def corpus_verdict(self) -> str:
        """Judge whether the corpus size suits graph building."""
        if self.word_count < 50_000:
            return "⚠️ Corpus may be too small (<50K words) - graph may not add much value"
        if self.word_count > 500_000:
            return f"⚠️ Large corpus ({self.word_count} words) - may have high token cost"
        return "✓ Corpus size is appropriate"


def glob_to_regex(pattern: str) -> str:
    """Translate an ignore-file glob into an anchored regular expression."""
    parts = ["^"]
    for c in pattern.rstrip("/"):
        if c == "*":
            parts.append(".*")
        elif c == "?":
            parts.append(".")
        elif c == ".":
            parts.append("\\.")
        elif c == "/":
            parts.append("[/\\\\]")
        elif c in "[]":
            parts.append(c)
        elif c.isalnum() or c in "_-":
            parts.append(c)
        else:
            parts.append(re.escape(c))
    parts.append("$")
    return "".join(parts)


def _load_graphifyignore(root: Path) -> list[re.Pattern[str]]:
    """Collect patterns from .graphifyignore files in root and its ancestors."""
    patterns: list[re.Pattern[str]] = []
    current = root.absolute()
    while True:
        ignore_file = current / ".graphifyignore"
        if ignore_file.is_file():
            try:
                content = ignore_file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                content = None
            if content is not None:
                lines = content.splitlines()
                valid = 0
                for raw in lines:
                    line = raw.strip()
                    if not line or line.startswith("#"):
                        continue
                    try:
                        patterns.append(re.compile(glob_to_regex(line)))
                    except re.error:
                        continue
                    valid += 1
                if valid:
                    print(
                        f"  Loaded {valid} patterns from {ignore_file} ({len(lines)} lines)",
                        file=sys.stderr,
                    )
        if (current / ".git").exists():
            break
        parent = current.parent
        if parent == current:
            break
        current = parent
    return patterns


def _is_ignored(path: Path, root: Path, patterns: list[re.Pattern[str]]) -> bool:
    if not patterns:
        return False
    try:
        rel = path.relative_to(root)
    except ValueError:
        rel = path
    rel_str = str(rel).replace("\\", "/")
    name = path.name
    return any(p.search(rel_str) or p.search(name) for p in patterns)


def _is_noise_dir(name: str) -> bool:
    return (
        name in SKIP_DIRS
        or name.endswith("_venv")
        or name.endswith("_env")
        or name.endswith(".egg-info")
    )


def is_sensitive(path: str | Path) -> str | None:
    """Return the reason a path may hold secrets, or None if it looks safe."""
    path = Path(path)
    path_str = str(path)
    name = path.name
    for pattern, regex in _SENSITIVE_REGEXES:
        if regex.search(path_str) or regex.search(name):
            return f"matches pattern '{pattern}'"
    return None


def classify_extension(ext: str) -> FileType:
    """Map a lower-case extension (without dot) to its file type."""
    if ext in CODE_EXTENSIONS:
        return FileType.CODE
    if ext in MARKDOWN_EXTENSIONS:
        return FileType.MARKDOWN
    return FileType.BINARY


def filter_code_files(files: list[DetectedFile]) -> list[DetectedFile]:
    return [f for f in files if f.file_type is FileType.CODE]


def get_stats(files: list[DetectedFile]) -> DetectStats:
    return DetectStats(
        total=len(files),
        code=sum(f.file_type is FileType.CODE for f in files),
        markdown=sum(f.file_type is FileType.MARKDOWN for f in files),
        binary=sum(f.file_type is FileType.BINARY for f in files),
    )


def _count_words(content: str, ext: str) -> int:
    if ext in _PROSE_EXTENSIONS:
        return len(content.split())
    return len(_WORD_RE.findall(content))


def estimate_word_count(files: list[DetectedFile]) -> int:
    """Count words in the files, estimating from size where a file is unreadable."""
    total = 0
    for f in files:
        try:
            content = Path(f.path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            total += f.size_bytes // 5
        else:
            total += _count_words(content, f.extension)
    return total


def _walk(root: Path):
    """Yield every entry under root (root included), in sorted order."""
    yield root
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames.sort()
        base = Path(dirpath)
        for name in sorted(dirnames + filenames):
            yield base / name


def _extension(path: Path) -> str:
    suffix = path.suffix
    return suffix[1:].lower() if suffix else ""


def detect(root: str | Path) -> DetectResult:
    """Walk a directory tree and classify the usable files in it."""
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"no such directory: {root}")
    ignore_patterns = _load_graphifyignore(root)
    files: list[DetectedFile] = []
    sensitive_skipped: list[str] = []
    total = noise = ignored = hidden = 0

    for path in _walk(root):
        total += 1
        if not path.is_file():
            continue
        if path.name.startswith("."):
            hidden += 1
            continue
        try:
            parent_parts = path.parent.relative_to(root).parts
        except ValueError:
            parent_parts = path.parent.parts
        if any(_is_noise_dir(part) for part in parent_parts):
            noise += 1
            continue
        if _is_ignored(path, root, ignore_patterns):
            ignored += 1
            continue
        reason = is_sensitive(path)
        if reason is not None:
            sensitive_skipped.append(f"  - {path} ({reason})")
            continue
        ext = _extension(path)
        if not ext:
            continue
        try:
            size = path.lstat().st_size
        except OSError:
            size = 0
        files.append(DetectedFile(path, classify_extension(ext), ext, size))

    def log(msg: str = "") -> None:
        print(msg, file=sys.stderr)

    log("\n📁 Detection Summary:")
    log(f"  Total entries scanned: {total}")
    log(f"  Hidden files skipped: {hidden}")
    log(f"  Noise directories skipped: {noise}")
    log(f"  .graphifyignore patterns skipped: {ignored}")
    if sensitive_skipped:
        log(f"  🔒 Sensitive files skipped: {len(sensitive_skipped)}")
        for entry in sensitive_skipped[:5]:
            log(f"    {entry}")
        if len(sensitive_skipped) > 5:
            log(f"    ... and {len(sensitive_skipped) - 5} more")

    stats = get_stats(files)
    word_count = estimate_word_count(files)

    warnings: list[str] = []
    if stats.code < 5:
        warnings.append("⚠️ Very few code files found - graph may be too sparse")
    if stats.code > 200:
        warnings.append(
            f"⚠️ Many code files ({stats.code} > 200) - extraction may take longer"
        )
    if word_count < 50_000 and stats.code > 0:
        warnings.append("⚠️ Corpus may be too small for meaningful graph (<50K words)")
    if word_count > 500_000:
        warnings.append(
            "⚠️ Large corpus (>500K words) - consider splitting into smaller projects"
        )

    if warnings:
        log("\n⚠️  Warnings:")
        for warning in warnings:
            log(f"  {warning}")

    log("\n📊 File Classification:")
    log(f"  Code files: {stats.code} ({word_count} words)")
    log(f"  Markdown: {stats.markdown}")
    log(f"  Other: {stats.binary}")
    log(f"  Total usable: {len(files)}")

    return DetectResult(files, stats, word_count, warnings, sensitive_skipped)


def print_summary(files: list[DetectedFile]) -> None:
    """Print file counts and word estimate to standard output."""
    stats = get_stats(files)
    words = estimate_word_count(files)
    print("Detection Summary:")
    print(f"  Total: {stats.total} files")
    print(f"  Code: {stats.code} files ({words} words)")
    print(f"  Markdown: {stats.markdown} files")
    print(f"  Other: {stats.binary} files")