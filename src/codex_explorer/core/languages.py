from pathlib import Path


class UnsupportedExtensionError(ValueError):
    """Raised when a file extension has no grammar mapping."""


_EXTENSION_LANGUAGE_MAP = {
    ".c": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".css": "css",
    ".cxx": "cpp",
    ".h": "c",
    ".hh": "cpp",
    ".hpp": "cpp",
    ".htm": "html",
    ".html": "html",
    ".hxx": "cpp",
    ".java": "java",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
}

INDEXED_EXTENSIONS: frozenset[str] = frozenset(_EXTENSION_LANGUAGE_MAP)


def detect_language_from_path(file_path: Path, c_header_as_cpp: bool = False) -> str:
    suffix = file_path.suffix.lower()
    if suffix == ".h" and c_header_as_cpp:
        return "cpp"
    if suffix in _EXTENSION_LANGUAGE_MAP:
        return _EXTENSION_LANGUAGE_MAP[suffix]
    raise UnsupportedExtensionError(f"Unsupported extension: {suffix or '(none)'} ({file_path})")


def is_supported_file(file_path: Path) -> bool:
    return file_path.suffix.lower() in INDEXED_EXTENSIONS
