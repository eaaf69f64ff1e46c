"""Boundary tests for key_material internal dependencies."""

from __future__ import annotations

from pathlib import Path


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def test_key_material_does_not_import_configuration_or_cli() -> None:
    key_material_dir = _project_root() / "src" / "lldap_config" / "key_material"
    forbidden_import_fragments = (
        "lldap_config.configuration",
        "lldap_config.cli",
        "import click",
    )

    for module_path in sorted(key_material_dir.glob("*.py")):
        text = module_path.read_text(encoding="utf-8")
        for fragment in forbidden_import_fragments:
            assert fragment not in text, f"Forbidden core dependency in {module_path}: {fragment}"


def test_secret_values_are_never_revealed_outside_key_derivation() -> None:
    source_dir = _project_root() / "src" / "lldap_config"
    allowed = {source_dir / "key_material" / "key_store.py"}

    for module_path in sorted(source_dir.rglob("*.py")):
        if module_path in allowed or module_path.parent.name == "secret_handling":
            continue
        text = module_path.read_text(encoding="utf-8")
        for accessor in (".reveal()", ".get_secret_value()"):
            assert accessor not in text, f"Secret plaintext accessed in {module_path}"
