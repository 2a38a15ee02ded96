# tests/test_architecture_contracts.py
"""
Architecture contract tests for EquiRoute.

These tests enforce structural invariants that unit tests don't catch:
- Tier violations (importing from higher tiers)
- Version consistency (__init__.py vs pyproject.toml)
- Entity reference fields are CharField (UUID support)
- AUTH_USER_MODEL usage (not direct User imports)
- Lazy imports in __init__.py (prevent AppRegistryNotReady)
- Concrete models inherit BaseModel and ship a migration
"""
from __future__ import annotations

import ast
import re
from pathlib import Path
from typing import List, Set

# Package tier classification
TIER_MAP = {
    # Tier 0: Foundation
    "equiroute-core": 0,
    # Tier 1: Identity and context
    "equiroute-orgs": 1,
    # Tier 2: Owned entities
    "equiroute-fleet": 2,
    # Tier 3: Content and planning
    "equiroute-certificates": 3,
    "equiroute-transports": 3,
    # Tier 4: Rules
    "equiroute-compliance": 4,
    # Tier 5: External registration
    "equiroute-traces": 5,
}

ROOT_DIR = Path(__file__).parent.parent
PACKAGES_DIR = ROOT_DIR / "packages"


def get_package_dirs() -> List[Path]:
    """Get all equiroute-* package directories."""
    return sorted([p for p in PACKAGES_DIR.iterdir() if p.is_dir() and p.name.startswith("equiroute-")])


def src_dir_for(pkg_dir: Path) -> Path:
    return pkg_dir / "src" / pkg_dir.name.replace("-", "_")


def get_imports_from_file(path: Path) -> Set[str]:
    """Extract all top-level imported module names from a Python file."""
    if not path.exists():
        return set()

    try:
        tree = ast.parse(path.read_text())
    except (SyntaxError, UnicodeDecodeError):
        return set()

    imports = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.add(alias.name.split('.')[0])
        elif isinstance(node, ast.ImportFrom):
            if node.module and node.level == 0:
                imports.add(node.module.split('.')[0])
    return imports


def test_every_package_has_a_tier():
    """New packages must be placed in TIER_MAP."""
    unknown = [p.name for p in get_package_dirs() if p.name not in TIER_MAP]
    assert not unknown, f"Packages without a tier: {', '.join(unknown)}"


def test_no_tier_violations():
    """
    Lower-tier packages cannot import from higher-tier packages.

    Packages on the same tier may not import each other either.
    """
    violations = []

    for pkg_dir in get_package_dirs():
        pkg_name = pkg_dir.name
        pkg_tier = TIER_MAP[pkg_name]

        for py_file in src_dir_for(pkg_dir).rglob("*.py"):
            for imp in get_imports_from_file(py_file):
                if not imp.startswith("equiroute_"):
                    continue
                dep_pkg = imp.replace("_", "-")
                if dep_pkg == pkg_name or dep_pkg not in TIER_MAP:
                    continue
                if TIER_MAP[dep_pkg] >= pkg_tier:
                    violations.append(
                        f"{pkg_name} (tier {pkg_tier}) imports {dep_pkg} (tier {TIER_MAP[dep_pkg]}) "
                        f"in {py_file.relative_to(PACKAGES_DIR)}"
                    )

    assert not violations, (
        "Tier violations detected (lower tiers cannot import higher tiers):\n"
        + "\n".join(violations)
    )


def test_version_consistency():
    """Each __init__.py __version__ must match the project version."""
    match = re.search(r'^version\s*=\s*["\']([^"\']+)["\']', (ROOT_DIR / "pyproject.toml").read_text(), re.MULTILINE)
    assert match, "pyproject.toml has no version"
    project_version = match.group(1)

    mismatches = []
    for pkg_dir in get_package_dirs():
        init_text = (src_dir_for(pkg_dir) / "__init__.py").read_text()
        found = re.search(r'__version__\s*=\s*["\']([^"\']+)["\']', init_text)
        if not found:
            mismatches.append(f"{pkg_dir.name}: __init__.py missing __version__")
        elif found.group(1) != project_version:
            mismatches.append(f"{pkg_dir.name}: pyproject.toml={project_version}, __init__.py={found.group(1)}")

    assert not mismatches, "Version mismatches detected:\n" + "\n".join(mismatches)


def test_entity_id_uses_charfield():
    """
    Entity references keyed by (entity_type, entity_id) must store the
    id in a CharField so UUID and integer keys both fit.
    """
    violations = []

    for pkg_dir in get_package_dirs():
        models_py = src_dir_for(pkg_dir) / "models.py"
        if not models_py.exists():
            continue

        for i, line in enumerate(models_py.read_text().split('\n'), 1):
            if re.match(r'\s*entity_id\s*=\s*models\.', line) and 'CharField' not in line:
                violations.append(f"{pkg_dir.name}/models.py:{i}: entity_id must be a CharField")

    assert not violations, "\n".join(violations)


def test_uses_auth_user_model_not_direct_import():
    """Packages should use settings.AUTH_USER_MODEL, not direct User imports."""
    violations = []

    for pkg_dir in get_package_dirs():
        for py_file in src_dir_for(pkg_dir).rglob("*.py"):
            source = py_file.read_text()
            if re.search(r'from django\.contrib\.auth\.models import.*\bUser\b', source):
                violations.append(
                    f"{pkg_dir.name}/{py_file.name}: imports User directly. "
                    "Use settings.AUTH_USER_MODEL instead."
                )

    assert not violations, (
        "Direct User imports detected (breaks swappable user model):\n"
        + "\n".join(violations)
    )


def test_init_uses_lazy_imports():
    """__init__.py must not import models eagerly."""
    warnings = []

    for pkg_dir in get_package_dirs():
        source = (src_dir_for(pkg_dir) / "__init__.py").read_text()
        if re.search(r'^from \.(models|services)\b', source, re.MULTILINE):
            warnings.append(f"{pkg_dir.name}/__init__.py: eager import; use __getattr__")

    assert not warnings, (
        "Eager model imports in __init__.py (use lazy imports):\n"
        + "\n".join(warnings)
    )


def test_packages_have_tests():
    """All packages should have test files."""
    missing = []

    for pkg_dir in get_package_dirs():
        tests_dir = pkg_dir / "tests"
        if not list(tests_dir.glob("test_*.py")):
            missing.append(pkg_dir.name)

    assert not missing, "Packages missing tests:\n" + "\n".join(missing)


def _concrete_model_classes(models_py: Path):
    tree = ast.parse(models_py.read_text())
    for node in tree.body:
        if not isinstance(node, ast.ClassDef):
            continue
        base_names = [
            b.id if isinstance(b, ast.Name) else getattr(b, "attr", "")
            for b in node.bases
        ]
        if not any(name.endswith("Model") for name in base_names):
            continue

        is_abstract = False
        for stmt in node.body:
            if isinstance(stmt, ast.ClassDef) and stmt.name == "Meta":
                for meta_stmt in stmt.body:
                    if isinstance(meta_stmt, ast.Assign):
                        for target in meta_stmt.targets:
                            if isinstance(target, ast.Name) and target.id == "abstract":
                                is_abstract = True
        if not is_abstract:
            yield node, base_names


def test_domain_models_inherit_basemodel():
    """Concrete models outside core inherit BaseModel (or an abstract subclass of it)."""
    allowed_bases = {"BaseModel", "ContextOwnedModel"}
    violations = []

    for pkg_dir in get_package_dirs():
        if pkg_dir.name == "equiroute-core":
            continue
        models_py = src_dir_for(pkg_dir) / "models.py"
        if not models_py.exists():
            continue

        for node, base_names in _concrete_model_classes(models_py):
            if not allowed_bases.intersection(base_names):
                violations.append(f"{pkg_dir.name}/{node.name}: inherits {', '.join(base_names)}")

    assert not violations, "Domain models should inherit BaseModel:\n" + "\n".join(violations)


def test_packages_with_models_have_initial_migration():
    missing = []

    for pkg_dir in get_package_dirs():
        models_py = src_dir_for(pkg_dir) / "models.py"
        if not models_py.exists() or not list(_concrete_model_classes(models_py)):
            continue
        if not (src_dir_for(pkg_dir) / "migrations" / "0001_initial.py").exists():
            missing.append(pkg_dir.name)

    assert not missing, "Packages without 0001_initial migration: " + ", ".join(missing)
