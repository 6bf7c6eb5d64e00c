from __future__ import annotations

import logging
import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ..errors import RecipeParseWarning

logger = logging.getLogger(__name__)

DECLARATION_FILE = "PKGBUILD"
PREBUILT_GLOB = "{name}-*.pkg.tar.*"

PREBUILT_SKIP_SUFFIXES = (".sig",)

_ASSIGN_RE = re.compile(r"^[ \t]*(?P<key>[A-Za-z_][A-Za-z0-9_]*)(?P<op>\+?=)(?P<rest>.*)$", re.MULTILINE)
_CONSTRAINT_RE = re.compile(r"[<>=]")


@dataclass(frozen=True)
class PackageSet:
    """Ordered, duplicate-free package names (first-seen order wins)."""

    names: Tuple[str, ...] = ()

    @classmethod
    def from_iterables(cls, *sources: Iterable[str]) -> "PackageSet":
        seen: set[str] = set()
        out: List[str] = []
        for source in sources:
            for name in source:
                name = name.strip()
                if name and name not in seen:
                    seen.add(name)
                    out.append(name)
        return cls(names=tuple(out))

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.names


@dataclass(frozen=True)
class BuildRecipe:
    name: str
    path: Path
    depends: Tuple[str, ...] = ()
    makedepends: Tuple[str, ...] = ()
    prebuilt: Optional[Path] = field(default=None, compare=False)

    @property
    def all_dependencies(self) -> Tuple[str, ...]:
        return self.depends + self.makedepends


class RecipeParseError(ValueError):
    pass


def package_name(dep: str) -> str:
    """Strip a version constraint: 'qt6-base>=6.5' -> 'qt6-base'."""
    return _CONSTRAINT_RE.split(dep, maxsplit=1)[0].strip()


def _read_array(rest: str) -> List[str]:
    lexer = shlex.shlex(rest, posix=True, punctuation_chars="()")
    lexer.whitespace_split = True
    lexer.commenters = "#"

    def next_token() -> Optional[str]:
        try:
            return lexer.get_token()
        except ValueError as e:
            # unbalanced quotes
            raise RecipeParseError(str(e)) from e

    first = next_token()
    # Runs of punctuation come back as one token, so "()" is an empty array.
    if first == "()":
        return []
    if first != "(":
        raise RecipeParseError("expected '('")
    items: List[str] = []
    while True:
        token = next_token()
        if token is None:
            raise RecipeParseError("unterminated array")
        if token.startswith(")"):
            return items
        items.append(token)


def _read_scalar(rest: str) -> str:
    try:
        parts = shlex.split(rest, comments=True)
    except ValueError as e:
        raise RecipeParseError(str(e)) from e
    return parts[0] if parts else ""


def parse_declaration(text: str) -> dict[str, object]:
    """Read the fixed PKGBUILD schema the installer cares about.

    Only ``pkgname``, ``depends`` and ``makedepends`` are interpreted; the rest
    of the file (functions, other variables) is ignored. ``depends+=(...)``
    appends to an earlier array.
    """

    fields: dict[str, object] = {}
    for m in _ASSIGN_RE.finditer(text):
        key = m.group("key")
        if key not in {"pkgname", "depends", "makedepends"}:
            continue
        rest = text[m.start("rest") :]
        if rest.lstrip().startswith("("):
            value: object = _read_array(rest)
        else:
            value = _read_scalar(m.group("rest"))

        previous = fields.get(key)
        if m.group("op") == "+=" and previous:
            if not isinstance(previous, list):
                previous = [previous]
            fields[key] = previous + (value if isinstance(value, list) else [value])
        else:
            fields[key] = value
    return fields


def find_prebuilt(name: str, search_dirs: Sequence[Path]) -> Optional[Path]:
    """First package archive for name, searching dirs in order.

    Detached signatures match the same glob and are never returned.
    """

    for d in search_dirs:
        if not d.is_dir():
            continue
        matches = sorted(
            p
            for p in d.glob(PREBUILT_GLOB.format(name=name))
            if p.is_file() and p.suffix not in PREBUILT_SKIP_SUFFIXES
        )
        if matches:
            return matches[0]
    return None


def load_recipe(recipe_dir: Path, warnings: Optional[List[RecipeParseWarning]] = None) -> Optional[BuildRecipe]:
    """Parse one recipe directory; None when it has no usable declaration."""

    decl = recipe_dir / DECLARATION_FILE
    prebuilt = find_prebuilt(recipe_dir.name, [recipe_dir, recipe_dir.parent])
    if not decl.is_file():
        if prebuilt is None:
            return None
        return BuildRecipe(name=recipe_dir.name, path=recipe_dir, prebuilt=prebuilt)

    try:
        fields = parse_declaration(decl.read_text(encoding="utf-8", errors="replace"))
    except RecipeParseError as e:
        w = RecipeParseWarning(f"Malformed {DECLARATION_FILE} in {recipe_dir}: {e}")
        if warnings is None:
            logger.warning("%s", w)
        else:
            warnings.append(w)
        return None

    def names(key: str) -> Tuple[str, ...]:
        value = fields.get(key) or []
        if isinstance(value, str):
            value = [value]
        return tuple(n for n in (package_name(str(v)) for v in value) if n)

    pkgname = fields.get("pkgname")
    if isinstance(pkgname, list):
        pkgname = pkgname[0] if pkgname else None
    name = str(pkgname) if pkgname and "$" not in str(pkgname) else recipe_dir.name

    return BuildRecipe(
        name=name,
        path=recipe_dir,
        depends=names("depends"),
        makedepends=names("makedepends"),
        prebuilt=prebuilt,
    )


def discover_recipes(
    recipes_root: Optional[Path], warnings: Optional[List[RecipeParseWarning]] = None
) -> List[BuildRecipe]:
    if recipes_root is None or not recipes_root.is_dir():
        return []
    out: List[BuildRecipe] = []
    for d in sorted(p for p in recipes_root.iterdir() if p.is_dir()):
        recipe = load_recipe(d, warnings)
        if recipe is not None:
            out.append(recipe)
    return out


def aggregate_packages(base_packages: Iterable[str], recipes: Iterable[BuildRecipe]) -> PackageSet:
    """Base packages first, then every recipe's runtime and build-time deps."""

    base = list(base_packages)
    return PackageSet.from_iterables(base, *(r.all_dependencies for r in recipes))


def partition_packages(packages: PackageSet, primary: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Split into (primary package manager, secondary source), keeping order."""

    primary_set = set(primary)
    first = [p for p in packages if p in primary_set]
    second = [p for p in packages if p not in primary_set]
    return first, second
