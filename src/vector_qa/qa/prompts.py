"""Prompt templates for question answering over retrieved context.

Keeping prompts in one place makes them easy to audit and version.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.documents import Document
    from langchain_core.messages import BaseMessage

# ── "Stuff" QA prompt ─────────────────────────────────────────────────

QA_SYSTEM = """\
Use the following pieces of context to answer the user's question.
If you don't know the answer, just say that you don't know, don't try to
make up an answer.
"""

DOCUMENT_SEPARATOR = "\n\n"


def format_context(documents: list[Document]) -> str:
    """Join the page content of *documents* into one context block."""
    return DOCUMENT_SEPARATOR.join(doc.page_content for doc in documents)


def build_qa_prompt(question: str, documents: list[Document]) -> list[BaseMessage]:
    """Stuff every document into a single prompt together with *question*.

    Parameters
    ----------
    question:
        The user question.
    documents:
        Context documents; all of them are included verbatim.

    Returns
    -------
    list[BaseMessage]
        Messages ready for ``.ainvoke()``.
    """
    context = format_context(documents)
    return [
        SystemMessage(content=QA_SYSTEM),
        HumanMessage(content=f"Context:\n{context}\n\nQuestion: {question}\nHelpful Answer:"),
    ]
