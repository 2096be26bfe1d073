"""Prompt file helpers."""
from __future__ import annotations
from pathlib import Path

from completion_runner.common.errors import ConfigurationError

DEFAULT_PROMPT_FILE = "configs/prompts/hello.txt"

def load_prompt(path: str | Path = DEFAULT_PROMPT_FILE) -> str:
    """
    Load a prompt file, stripping surrounding whitespace.

    Args:
        path: Path to the prompt file.

    Raises:
        ConfigurationError: If the file is missing or holds only whitespace.
    """
    prompt_path = Path(path)
    if not prompt_path.is_file():
        raise ConfigurationError(f"Prompt file not found at {prompt_path}")
    text = prompt_path.read_text(encoding="utf-8").strip()
    if not text:
        raise ConfigurationError(f"Prompt file {prompt_path} is empty")
    return text

def load_documents(path: str | Path) -> list[str]:
    """
    Load documents for summarization.

    Documents are separated by a line holding only ``---``.

    Args:
        path: Path to the document file.

    Returns:
        Non-empty documents in file order.
    """
    doc_path = Path(path)
    if not doc_path.is_file():
        raise ConfigurationError(f"Document file not found at {doc_path}")
    chunks: list[list[str]] = [[]]
    for line in doc_path.read_text(encoding="utf-8").splitlines():
        if line.strip() == "---":
            chunks.append([])
        else:
            chunks[-1].append(line)
    docs = [" ".join(part.strip() for part in chunk if part.strip()) for chunk in chunks]
    docs = [d for d in docs if d]
    if not docs:
        raise ConfigurationError(f"Document file {doc_path} holds no documents")
    return docs
