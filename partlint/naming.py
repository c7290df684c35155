"""
Asset naming convention checks.
"""

import re
from typing import List, Optional

from partlint.profile import NamingConvention

# Names modeling applications give new objects
DEFAULT_NAMES = {
    "cube", "sphere", "cylinder", "cone", "plane", "torus", "circle",
    "icosphere", "monkey", "suzanne", "mesh", "object", "untitled",
    "empty", "meshpart", "part", "model", "node", "geometry",
}

DOTTED_SUFFIX = re.compile(r"\.\d+$")


def check_name(name: str, convention: NamingConvention) -> List[str]:
    """
    Check a MeshPart name against the naming convention.

    Returns:
        List of problems (empty if the name is acceptable)
    """
    if not name or not name.strip():
        return ["Name is empty"]

    problems = []

    if len(name) > convention.max_length:
        problems.append(f"Name is {len(name)} characters, limit is {convention.max_length}")

    if any(c.isspace() for c in name):
        problems.append("Name contains whitespace")

    if DOTTED_SUFFIX.search(name):
        problems.append("Name has a duplicate suffix like '.001'")

    base = DOTTED_SUFFIX.sub("", name).strip().lower()
    if base in DEFAULT_NAMES:
        problems.append(f"'{name}' is a default object name")

    if convention.prefixes and convention.category_for(name) is None:
        prefixes = ", ".join(sorted(convention.prefixes.values()))
        problems.append(f"Name has no category prefix ({prefixes})")

    if not re.match(convention.pattern, name):
        problems.append(f"Name does not match pattern {convention.pattern}")

    return problems


def suggest_name(
    name: str,
    category: Optional[str],
    convention: NamingConvention,
) -> str:
    """
    Suggest a conforming name: category prefix plus a PascalCase body.

    Existing known prefixes are replaced, dotted suffixes dropped.
    """
    body = DOTTED_SUFFIX.sub("", name).strip()

    current = convention.category_for(body)
    if current is not None:
        body = body[len(convention.prefixes[current]):]

    words = [w for w in re.split(r"[^A-Za-z0-9]+", body) if w]
    body = "".join(w[0].upper() + w[1:] for w in words) or "Unnamed"

    prefix = ""
    if category is not None:
        if category not in convention.prefixes:
            raise KeyError(f"Unknown category {category!r} (available: {', '.join(sorted(convention.prefixes))})")
        prefix = convention.prefixes[category]
    elif current is not None:
        prefix = convention.prefixes[current]

    return (prefix + body)[:convention.max_length]
