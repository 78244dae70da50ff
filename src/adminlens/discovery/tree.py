"""Assemble the resource forest from a flat operation list.

Each operation carries a dotted resource key (``users.credits``).  This
module turns those keys into a tree of :class:`~adminlens.models.Resource`
nodes the console can navigate.

**Algorithm summary**

1. Collect every operation's key plus each of its dotted ancestors, so
   ``users.credits.history`` also yields ``users.credits`` and ``users``
   even when those have no operations of their own.
2. For each key, decide ``requires_parent_id``: does any contributing path
   (one whose key equals or extends this key) put a ``{param}`` before this
   resource's own segment?
3. Attach the operations whose key matches exactly and link each node to
   the node named by its key minus the last component.  Nodes with no parent
   become roots.
4. Order siblings by full key at every level.

Nodes are frozen models, so the tree is built bottom-up: children are
materialised before the parent that holds them.
"""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Iterable, Iterator, Sequence

from adminlens.discovery.paths import is_path_param, split_segments
from adminlens.exceptions import ContractError
from adminlens.models import Operation, Resource

_WORD_SEPARATORS_RE = re.compile(r"[-_]")
_CAMEL_BOUNDARY_RE = re.compile(r"([A-Z])")
_WORD_START_RE = re.compile(r"\b\w")
_SPACES_RE = re.compile(r"\s+")


def build_resource_tree(operations: Sequence[Operation]) -> list[Resource]:
    """Build the resource forest for *operations*.

    Args:
        operations: Every discovered operation, in document order.

    Returns:
        Top-level resources sorted by key, each with its children sorted
        recursively.

    Raises:
        ContractError: If *operations* is not a sequence of
            :class:`~adminlens.models.Operation`.

    Example::

        roots = build_resource_tree(parsed.all_operations)
        [r.key for r in roots]          # ['stats', 'users']
        roots[1].children[0].key        # 'users.credits'
    """
    if operations is None or isinstance(operations, (str, bytes)):
        raise ContractError(
            f"build_resource_tree() needs a sequence of operations, got {type(operations).__name__}"
        )
    for op in operations:
        if not isinstance(op, Operation):
            raise ContractError(f"Expected Operation, got {type(op).__name__}")

    keys = _collect_keys(operations)

    ops_by_key: dict[str, list[Operation]] = defaultdict(list)
    for op in operations:
        ops_by_key[op.resource_key].append(op)

    child_keys: dict[str, list[str]] = defaultdict(list)
    root_keys: list[str] = []
    for key in keys:
        parent = parent_key(key)
        if parent is not None and parent in keys:
            child_keys[parent].append(key)
        else:
            root_keys.append(key)

    def build(key: str) -> Resource:
        segment = key.rsplit(".", 1)[-1]
        return Resource(
            key=key,
            name=to_title_case(segment),
            parent_key=parent_key(key),
            path_segment=segment,
            requires_parent_id=requires_parent_id(key, operations),
            operations=ops_by_key.get(key, []),
            children=[build(child) for child in sorted(child_keys[key])],
        )

    return [build(key) for key in sorted(root_keys)]


def _collect_keys(operations: Iterable[Operation]) -> set[str]:
    keys: set[str] = set()
    for op in operations:
        parts = op.resource_key.split(".")
        for end in range(1, len(parts) + 1):
            keys.add(".".join(parts[:end]))
    return keys


def parent_key(key: str) -> str | None:
    """Return *key* without its last dotted component, or ``None`` at the top."""
    if "." not in key:
        return None
    return key.rsplit(".", 1)[0]


def requires_parent_id(key: str, operations: Iterable[Operation]) -> bool:
    """Return ``True`` if reaching *key* needs a parent record's identifier.

    Every operation whose resource key equals or extends *key* contributes
    its path.  The resource's own segment is the n-th literal segment of
    that path, where n is the depth of *key*; the resource needs a parent id
    when any segment before it is a parameter.

    Example::

        # /users/{userId}/credits    -> users.credits needs a parent id
        # /credits/config/tiers      -> credits.config does not
    """
    depth = key.count(".") + 1
    prefix = key + "."
    for op in operations:
        if op.resource_key != key and not op.resource_key.startswith(prefix):
            continue
        seen_param = False
        literals = 0
        for segment in split_segments(op.path_template):
            if is_path_param(segment):
                seen_param = True
                continue
            literals += 1
            if literals == depth:
                if seen_param:
                    return True
                break
    return False


def find_resource(resources: Iterable[Resource], key: str) -> Resource | None:
    """Find the resource with *key* anywhere in the forest (depth-first)."""
    for resource in resources:
        if resource.key == key:
            return resource
        found = find_resource(resource.children, key)
        if found is not None:
            return found
    return None


def iter_resources(resources: Iterable[Resource]) -> Iterator[Resource]:
    """Yield every resource of the forest, parents before their children."""
    for resource in resources:
        yield resource
        yield from iter_resources(resource.children)


def to_title_case(text: str) -> str:
    """Turn a camelCase, snake_case or kebab-case name into Title Case.

    Example::

        >>> to_title_case("credit_history")
        'Credit History'
        >>> to_title_case("lastActiveAt")
        'Last Active At'
    """
    spaced = _WORD_SEPARATORS_RE.sub(" ", text)
    spaced = _CAMEL_BOUNDARY_RE.sub(r" \1", spaced)
    titled = _WORD_START_RE.sub(lambda m: m.group(0).upper(), spaced)
    return _SPACES_RE.sub(" ", titled).strip()
