from __future__ import annotations

from pathlib import Path, PurePosixPath

from aireview_core.models import FilePayload, SkippedFile

BINARY_EXTENSIONS = (
    ".png",
    ".jpg",
    ".jpeg",
    ".pdf",
    ".zip",
    ".exe",
    ".bin",
    ".mp4",
)

FILE_SIZE_LIMIT_BYTES = 200_000

LANGUAGES = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "jsx",
    ".go": "go",
    ".java": "java",
    ".rb": "ruby",
    ".rs": "rust",
    ".cpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".json": "json",
    ".md": "markdown",
    ".cue": "cue",
}
FALLBACK_LANGUAGE = "text"


def is_binary_file(file_name: str) -> bool:
    return file_name.lower().endswith(BINARY_EXTENSIONS)


def detect_language(file_name: str) -> str:
    return LANGUAGES.get(PurePosixPath(file_name).suffix.lower(), FALLBACK_LANGUAGE)


def load_file(repo_root: Path, rel_path: str, reject_binaries: bool = True) -> FilePayload | SkippedFile:
    """Read one changed file from the working tree.

    Returns a SkippedFile instead of raising for anything that keeps the
    file out of the review: a binary extension, a path that is gone or is
    not a regular file, a file over FILE_SIZE_LIMIT_BYTES, or a read error.
    """
    if reject_binaries and is_binary_file(rel_path):
        return SkippedFile(rel_path, "binary file")

    full = Path(repo_root) / rel_path
    try:
        if not full.is_file():
            return SkippedFile(rel_path, "not a regular file")
        size = full.stat().st_size
    except OSError as e:
        return SkippedFile(rel_path, f"cannot stat: {e}")

    if size > FILE_SIZE_LIMIT_BYTES:
        return SkippedFile(rel_path, f"file too large ({size} bytes)")

    try:
        content = full.read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        return SkippedFile(rel_path, f"read failed: {e}")

    return FilePayload(path=rel_path, language=detect_language(rel_path), content=content)
