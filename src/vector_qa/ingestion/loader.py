"""Document loaders — thin wrappers around LangChain document loaders."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from langchain_community.document_loaders import DirectoryLoader, TextLoader

if TYPE_CHECKING:
    from langchain_core.documents import Document


def load_directory(path: str | Path, glob: str = "**/*.txt") -> list[Document]:
    """Load every text file under *path* matching *glob*.

    Parameters
    ----------
    path:
        Root directory containing source documents.
    glob:
        File-matching pattern forwarded to ``DirectoryLoader``.

    Returns
    -------
    list[Document]
        One ``Document`` per file, sorted by path, with ``metadata["source"]``
        set to the file path.
    """
    root = Path(path)
    if not root.is_dir():
        raise FileNotFoundError(f"Document directory not found: {root}")

    loader = DirectoryLoader(
        str(root),
        glob=glob,
        loader_cls=TextLoader,  # type: ignore[arg-type]
        loader_kwargs={"autodetect_encoding": True},
    )
    return sorted(loader.load(), key=lambda doc: doc.metadata.get("source", ""))
