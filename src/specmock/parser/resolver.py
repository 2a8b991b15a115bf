"""Resolve ``$ref`` JSON Reference pointers inside an OpenAPI document.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition.  Unlike a
whole-document inliner, this module resolves pointers lazily, one node at a
time, as the generator walks the spec.  The document itself is never copied
or mutated.

Only **internal** references (those starting with ``#``) are supported.
A pointer whose path does not exist raises
:class:`~specmock.exceptions.ReferenceNotFound`.

A resolved target may itself be a reference, so resolution follows the chain
and counts every hop.  When the chain is longer than ``max_depth`` hops,
:class:`~specmock.exceptions.ReferenceDepthExceeded` is raised.  There is no
cycle detection: a cycle simply runs into the bound like any other
overly long chain.
"""

from __future__ import annotations

from typing import Any

from specmock.exceptions import ReferenceDepthExceeded, ReferenceNotFound

DEFAULT_MAX_DEPTH = 10


def is_reference(node: Any) -> bool:
    """Return ``True`` if *node* is a ``{"$ref": ...}`` mapping."""
    return isinstance(node, dict) and "$ref" in node


def resolve(
    pointer: str,
    document: dict[str, Any],
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Any:
    """Resolve *pointer* against *document*, following chained references.

    Args:
        pointer: The ``$ref`` string (e.g., ``"#/components/schemas/Pet"``).
        document: The root spec dictionary.
        depth: Number of hops already taken in this chain.
        max_depth: Maximum number of hops allowed in one chain.

    Returns:
        The first non-reference node at the end of the chain.

    Raises:
        ReferenceDepthExceeded: If following the chain takes more than
            *max_depth* hops.
        ReferenceNotFound: If the pointer is external or any segment does not
            exist in the document.

    Example::

        schema = resolve("#/components/schemas/Pet", spec)
    """
    if depth >= max_depth:
        raise ReferenceDepthExceeded(pointer, max_depth)

    target = _lookup(pointer, document)
    if is_reference(target):
        return resolve(target["$ref"], document, depth + 1, max_depth)
    return target


def resolve_node(
    node: Any,
    document: dict[str, Any],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Any:
    """Return *node* itself, or its target when it is a reference.

    Resolving an already-resolved node is a no-op, so callers can pass
    anything that might be either an inline object or a ``$ref``.
    """
    if is_reference(node):
        return resolve(node["$ref"], document, max_depth=max_depth)
    return node


def extend_pointer(pointer: str, *segments: Any) -> str:
    """Append *segments* to *pointer*, escaping ``~`` and ``/`` in each.

    ``extend_pointer("#", "paths", "/pets/{id}", "get")`` gives
    ``"#/paths/~1pets~1{id}/get"``.
    """
    escaped = (str(s).replace("~", "~0").replace("/", "~1") for s in segments)
    return pointer + "".join("/" + s for s in escaped)


def _lookup(pointer: str, document: dict[str, Any]) -> Any:
    """Walk *document* along the segments of *pointer*.

    Handles RFC 6901 JSON Pointer escaping (``~1`` for ``/``, ``~0`` for
    ``~``) and integer indexes into lists.
    """
    if not isinstance(pointer, str) or not pointer.startswith("#"):
        raise ReferenceNotFound(str(pointer))

    path_str = pointer[1:].lstrip("/")
    if not path_str:
        return document

    current: Any = document
    for raw_segment in path_str.split("/"):
        segment = raw_segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise ReferenceNotFound(pointer, segment)
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise ReferenceNotFound(pointer, segment) from exc
        else:
            raise ReferenceNotFound(pointer, segment)

    return current
