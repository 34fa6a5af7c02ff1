"""Unit tests for the route handler params checker."""

from collections.abc import Callable
from pathlib import Path

from biome_rules.core.checker import check_nextjs_params

WriteFiles = Callable[[dict[str, str]], Path]

ROUTE = "app/api/items/[id]/route.ts"


class TestScenarios:
    def test_unwrapped_params_yield_one_violation_per_handler(self, write_files: WriteFiles, wrong_route: str) -> None:
        root = write_files({ROUTE: wrong_route})

        result = check_nextjs_params(root)

        assert result.success is False
        assert len(result.violations) == 2
        get, post = result.violations
        assert '"GET"' in get.message
        assert '"POST"' in post.message
        assert "Found: { id: string }" in get.message
        assert get.fixable is True
        assert get.severity == "error"
        assert get.suggested_fix == "Wrap params type with Promise<...>"
        assert get.file_path == str((root / ROUTE).resolve())
        assert result.message == "Found 2 violation(s) in 1 file(s)"

    def test_violation_points_at_second_parameter(self, write_files: WriteFiles, wrong_route: str) -> None:
        root = write_files({ROUTE: wrong_route})

        result = check_nextjs_params(root)

        assert (result.violations[0].line, result.violations[0].column) == (5, 3)
        assert (result.violations[1].line, result.violations[1].column) == (12, 3)

    def test_wrapped_params_pass(self, write_files: WriteFiles, correct_route: str) -> None:
        root = write_files({ROUTE: correct_route})

        result = check_nextjs_params(root)

        assert result.success is True
        assert result.violations == []
        assert result.message == "All 1 route handler file(s) passed validation"

    def test_fix_wraps_inline_params_and_recheck_passes(self, write_files: WriteFiles, wrong_route: str) -> None:
        root = write_files({ROUTE: wrong_route})

        fixed = check_nextjs_params(root, fix=True)

        assert fixed.success is True
        assert fixed.violations == []
        assert fixed.message == "Fixed 1 file(s). All violations fixed!"
        content = (root / ROUTE).read_text(encoding="utf-8")
        assert content.count("{ params }: { params: Promise<{ id: string }> }") == 2

        rerun = check_nextjs_params(root)
        assert rerun.success is True
        assert rerun.violations == []

    def test_arrow_function_exports_are_skipped(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                ROUTE: """
                export const GET = async (request: Request, { params }: { params: { id: string } }) => {
                  return Response.json(params);
                };
                """
            }
        )

        result = check_nextjs_params(root)

        assert result.success is True
        assert result.violations == []


class TestHandlerSelection:
    def test_non_http_method_exports_are_ignored(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                ROUTE: """
                export async function handler(request: Request, { params }: { params: { id: string } }) {}
                """
            }
        )

        assert check_nextjs_params(root).violations == []

    def test_handlers_with_one_parameter_are_skipped(self, write_files: WriteFiles) -> None:
        root = write_files({ROUTE: "export async function GET(request: Request) {}\n"})

        assert check_nextjs_params(root).violations == []

    def test_context_without_params_is_skipped(self, write_files: WriteFiles) -> None:
        root = write_files(
            {ROUTE: "export async function GET(request: Request, ctx: { searchParams: URLSearchParams }) {}\n"}
        )

        assert check_nextjs_params(root).violations == []

    def test_export_clause_alias_is_checked_under_exported_name(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                ROUTE: """
                async function handler(request: Request, { params }: { params: { id: string } }) {}

                export { handler as DELETE };
                """
            }
        )

        result = check_nextjs_params(root)

        assert len(result.violations) == 1
        assert '"DELETE"' in result.violations[0].message

    def test_declaration_exported_under_two_methods(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                ROUTE: """
                async function handler(request: Request, { params }: { params: { id: string } }) {}

                export { handler as GET, handler as POST };
                """
            }
        )

        plain = check_nextjs_params(root)
        assert len(plain.violations) == 2

        fixed = check_nextjs_params(root, fix=True)

        assert fixed.success is True
        assert fixed.message == "Fixed 1 file(s). All violations fixed!"
        content = (root / ROUTE).read_text(encoding="utf-8")
        assert content.count("Promise<") == 1
        assert "{ params }: { params: Promise<{ id: string }> }" in content
        assert check_nextjs_params(root).success is True


class TestTypeResolution:
    def test_unannotated_params_member_is_any(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                ROUTE: """
                export async function GET(request: Request, ctx: { params; }) {}
                export async function POST(request: Request, ctx: { params?; }) {}
                """
            }
        )

        result = check_nextjs_params(root, fix=True)

        assert result.success is False
        assert len(result.violations) == 2
        assert all(v.message.endswith("Found: any") for v in result.violations)

    def test_local_alias_is_reported_but_not_fixed(self, write_files: WriteFiles) -> None:
        source = """
        type RouteContext = { params: { slug: string } };

        export async function GET(request: Request, context: RouteContext) {}
        """
        root = write_files({ROUTE: source})
        before = (root / ROUTE).read_text(encoding="utf-8")

        result = check_nextjs_params(root, fix=True)

        assert result.success is False
        assert len(result.violations) == 1
        assert "Found: { slug: string }" in result.violations[0].message
        assert (root / ROUTE).read_text(encoding="utf-8") == before

        again = check_nextjs_params(root, fix=True)
        assert len(again.violations) == 1

    def test_alias_to_promise_counts_as_wrapped(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                ROUTE: """
                type Params = Promise<{ id: string }>;

                export async function GET(request: Request, { params }: { params: Params }) {}
                """
            }
        )

        assert check_nextjs_params(root).success is True

    def test_inline_member_alias_is_fixed_in_place(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                ROUTE: """
                type Params = { slug: string };

                export async function PATCH(request: Request, { params }: { params: Params }) {}
                """
            }
        )

        first = check_nextjs_params(root)
        assert "Found: { slug: string }" in first.violations[0].message

        fixed = check_nextjs_params(root, fix=True)

        assert fixed.success is True
        assert "{ params: Promise<Params> }" in (root / ROUTE).read_text(encoding="utf-8")

    def test_imported_interface_is_resolved(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                "types/route.ts": """
                export interface RouteContext {
                  params: { id: string };
                }
                """,
                ROUTE: """
                import type { RouteContext } from "../../../../types/route";

                export async function PUT(request: Request, context: RouteContext) {}
                """,
            }
        )

        result = check_nextjs_params(root)

        assert len(result.violations) == 1
        assert "Found: { id: string }" in result.violations[0].message

    def test_tsconfig_path_alias_is_resolved(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                "tsconfig.json": """
                {
                  // Next.js default alias
                  "compilerOptions": {
                    "baseUrl": ".",
                    "paths": { "@/*": ["./src/*"] }
                  }
                }
                """,
                "src/lib/context.ts": """
                export type Ctx = { params: Promise<{ id: string }> };
                """,
                ROUTE: """
                import { Ctx } from "@/lib/context";

                export async function GET(request: Request, context: Ctx) {}
                """,
            }
        )

        assert check_nextjs_params(root).success is True

    def test_generic_alias_binds_type_arguments(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                ROUTE: """
                type Ctx<T> = { params: T };

                export async function GET(request: Request, context: Ctx<{ id: string }>) {}
                export async function POST(request: Request, context: Ctx<Promise<{ id: string }>>) {}
                """
            }
        )

        result = check_nextjs_params(root)

        assert len(result.violations) == 1
        assert '"GET"' in result.violations[0].message
        assert "Found: { id: string }" in result.violations[0].message

    def test_record_member_is_resolved_without_declaration(self, write_files: WriteFiles) -> None:
        root = write_files(
            {ROUTE: 'export async function GET(request: Request, context: Record<"params", { id: string }>) {}\n'}
        )

        result = check_nextjs_params(root)

        assert len(result.violations) == 1
        assert "Found: { id: string }" in result.violations[0].message

    def test_intersection_is_reported_and_not_fixed(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                ROUTE: """
                export async function GET(
                  request: Request,
                  context: { params: { id: string } } & { searchParams: URLSearchParams },
                ) {}
                """
            }
        )

        result = check_nextjs_params(root, fix=True)

        assert len(result.violations) == 1
        assert result.violations[0].line == 3

    def test_default_value_is_inferred(self, write_files: WriteFiles) -> None:
        root = write_files(
            {
                ROUTE: """
                export async function GET(request: Request, { params } = { params: { id: "1" } }) {}
                export async function POST(request: Request, { params } = { params: Promise.resolve({ id: "1" }) }) {}
                """
            }
        )

        result = check_nextjs_params(root)

        assert len(result.violations) == 1
        assert "Found: { id: string; }" in result.violations[0].message


class TestRunOutcomes:
    def test_no_matching_files_is_success(self, tmp_path: Path) -> None:
        result = check_nextjs_params(tmp_path)

        assert result.success is True
        assert result.violations == []
        assert result.message == "No files found matching pattern: **/app/api/**/route.ts"

    def test_custom_pattern(self, write_files: WriteFiles, wrong_route: str) -> None:
        root = write_files({"routes/users.ts": wrong_route})

        assert check_nextjs_params(root).violations == []
        assert len(check_nextjs_params(root, pattern="routes/*.ts").violations) == 2

    def test_missing_tsconfig_is_a_failed_result(self, write_files: WriteFiles, wrong_route: str) -> None:
        root = write_files({ROUTE: wrong_route})

        result = check_nextjs_params(root, ts_config_path="missing/tsconfig.json")

        assert result.success is False
        assert result.violations == []
        assert result.message.startswith("Error: ")
        assert "tsconfig.json" in result.message

    def test_undecodable_source_is_a_failed_result(self, tmp_path: Path) -> None:
        target = tmp_path / ROUTE
        target.parent.mkdir(parents=True)
        target.write_bytes(b"\xff\xfe\x00export function GET() {}")

        result = check_nextjs_params(tmp_path)

        assert result.success is False
        assert result.message.startswith("Error: ")

    def test_partial_fix_reports_remaining_violations(self, write_files: WriteFiles, wrong_route: str) -> None:
        root = write_files(
            {
                ROUTE: wrong_route,
                "app/api/other/route.ts": """
                type Ctx = { params: { id: string } };
                export async function GET(request: Request, context: Ctx) {}
                """,
            }
        )

        result = check_nextjs_params(root, fix=True)

        assert result.success is False
        assert len(result.violations) == 1
        assert result.message == "Fixed 1 file(s). Found 1 remaining violation(s)."
