"""Shared fixtures and helpers for tests."""

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest
from tree_sitter import Parser
from tree_sitter_language_pack import get_parser

_REPO_ROOT = Path(__file__).parent.parent

WriteFiles = Callable[[dict[str, str]], Path]


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        if rel.parts and rel.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def typescript_parser() -> Parser:
    """Return a tree-sitter parser for TypeScript."""
    return get_parser("typescript")


@pytest.fixture
def write_files(tmp_path: Path) -> WriteFiles:
    """Write ``{relative path: content}`` under tmp_path and return the root."""

    def _write(files: dict[str, str]) -> Path:
        for rel_path, content in files.items():
            target = tmp_path / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return tmp_path

    return _write


WRONG_ROUTE = """
import { NextRequest } from "next/server";

export async function GET(
  request: NextRequest,
  { params }: { params: { id: string } },
) {
  return Response.json({ id: params.id });
}

export async function POST(
  request: NextRequest,
  { params }: { params: { id: string } },
) {
  return Response.json({ id: params.id });
}
"""

CORRECT_ROUTE = """
import { NextRequest } from "next/server";

export async function GET(
  request: NextRequest,
  { params }: { params: Promise<{ id: string }> },
) {
  const resolvedParams = await params;
  return Response.json({ id: resolvedParams.id });
}
"""


@pytest.fixture
def wrong_route() -> str:
    return WRONG_ROUTE


@pytest.fixture
def correct_route() -> str:
    return CORRECT_ROUTE
