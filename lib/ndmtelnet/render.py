"""Indented text rendering of response documents."""

from collections.abc import Iterable

from lib.ndmtelnet.response import Element, ResponseDocument

INDENT = "    "

_ENTITIES = {
    "<": "&lt;",
    ">": "&gt;",
    "'": "&apos;",
    '"': "&quot;",
    "&": "&amp;",
}


def escape(text: str) -> str:
    """Replace markup characters with entity references in a single pass."""
    return "".join(_ENTITIES.get(ch, ch) for ch in text)


def render(elements: Iterable[Element], depth: int = 0) -> str:
    """Render sibling elements at the given nesting depth.

    Parameters
    ----------
    elements : Iterable[Element]
        Sibling elements in document order
    depth : int, optional
        Nesting depth, by default 0

    Returns
    -------
    str
        Rendered text, one closing tag per line
    """
    indent = INDENT * depth
    parts: list[str] = []

    for element in elements:
        attributes = "".join(
            f' {name}="{escape(value)}"' for name, value in element.attributes
        )
        parts.append(f"{indent}<{element.name}{attributes}>")

        if element.children:
            parts.append("\n")
            parts.append(render(element.children, depth + 1))
            parts.append(indent)
        else:
            parts.append(escape(element.value))

        parts.append(f"</{element.name}>\n")

    return "".join(parts)


def render_document(document: ResponseDocument) -> str:
    """Render a whole response document, or nothing if it has no root."""
    root = document.root
    if root is None:
        return ""
    return render([root])
