from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - py310 fallback
    import tomli as tomllib


def _pyproject() -> dict:
    pyproject_path = Path(__file__).resolve().parents[1] / "pyproject.toml"
    return tomllib.loads(pyproject_path.read_text(encoding="utf-8"))


def test_pyproject_setuptools_src_layout():
    setuptools = _pyproject().get("tool", {}).get("setuptools", {})
    assert setuptools.get("package-dir") == {"": "src"}

    find = setuptools.get("packages", {}).get("find", {})
    assert find.get("where") == ["src"]


def test_pyproject_declares_solver_stack_and_cli():
    project = _pyproject()["project"]
    names = {dep.split(">")[0].split("=")[0].strip() for dep in project["dependencies"]}
    assert {"numpy", "scipy", "networkx"} <= names
    assert project["scripts"]["gridcircuit"] == "gridcircuit.cli:main"
