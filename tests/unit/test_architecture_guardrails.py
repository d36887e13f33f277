from __future__ import annotations

import ast
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

ROOT = Path(__file__).resolve().parents[2]
SRC_ROOT = ROOT / "src" / "heromom"

# Each layer may only import the layers listed for it.
ALLOWED_LAYERS = {
    "domain": {"domain"},
    "application": {"domain", "application"},
    "infrastructure": {"domain", "infrastructure"},
    "presentation": {"domain", "application", "presentation"},
}


def _module_name(path: Path) -> str:
    return ".".join(path.relative_to(ROOT / "src").with_suffix("").parts)


def _layer(module: str) -> str | None:
    parts = module.split(".")
    if len(parts) > 1 and parts[0] == "heromom" and parts[1] in ALLOWED_LAYERS:
        return parts[1]
    return None


def _heromom_imports(tree: ast.AST) -> set[str]:
    targets: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            targets.update(alias.name for alias in node.names if alias.name.startswith("heromom"))
        elif isinstance(node, ast.ImportFrom) and node.level == 0 and (node.module or "").startswith("heromom"):
            targets.add(node.module)
    return targets


def _import_graph() -> dict[str, set[str]]:
    graph: dict[str, set[str]] = {}
    for path in SRC_ROOT.rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"))
        graph[_module_name(path)] = _heromom_imports(tree)
    return graph


class ArchitectureGuardrailTests(unittest.TestCase):
    def test_layers_only_import_downstream(self) -> None:
        violations = []
        for module, targets in _import_graph().items():
            layer = _layer(module)
            if layer is None:
                continue
            for target in targets:
                target_layer = _layer(target)
                if target_layer is not None and target_layer not in ALLOWED_LAYERS[layer]:
                    violations.append(f"{module} -> {target}")

        self.assertEqual([], sorted(violations))

    def test_import_graph_has_no_cycles(self) -> None:
        graph = _import_graph()
        visiting: set[str] = set()
        done: set[str] = set()
        cycles = []

        def visit(module: str, trail: list[str]) -> None:
            if module in done:
                return
            if module in visiting:
                cycles.append(" -> ".join(trail[trail.index(module):] + [module]))
                return
            visiting.add(module)
            for target in graph.get(module, ()):
                if target in graph:
                    visit(target, trail + [module])
            visiting.discard(module)
            done.add(module)

        for module in sorted(graph):
            visit(module, [])

        self.assertEqual([], cycles)


if __name__ == "__main__":
    unittest.main()
