"""Command-line dispatcher for the project registry.

    reactify list [--format table|csv|json|yaml]
    reactify upload <file> --slug S [--shortcode C] [--name N] [--version V] [--force]
    reactify delete <slug> [--yes]
    reactify info <slug> [--format table|json|yaml]
    reactify assets <slug> [--format table|json]
    reactify migrate

Failures print "Error: ..." on stderr and exit non-zero.
"""

import argparse
import asyncio
import csv
import io
import json
import sys
from collections.abc import Sequence
from typing import Any

import yaml

from src.reactify.core.config import Settings, get_settings
from src.reactify.core.db import dispose_engine, get_session
from src.reactify.core.exceptions import ReactifyError
from src.reactify.core.logging import clear_project_context, get_logger, setup_logging
from src.reactify.core.migrations import run_migrations_async, run_migrations_sync
from src.reactify.dependencies import get_project_service
from src.reactify.schemas.archive import ArchiveSource
from src.reactify.schemas.project import CleanupWarning
from src.reactify.services import ProjectService

logger = get_logger(__name__)

LIST_FIELDS = ["slug", "project_name", "shortcode", "version", "created_at"]
INFO_FIELDS = [
    "slug",
    "project_name",
    "shortcode",
    "version",
    "file_path",
    "size",
    "asset_count",
    "created_at",
    "updated_at",
]


def format_size(num_bytes: int) -> str:
    """Render a byte count as a short human string ("1.5 KB")."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            if unit == "B":
                return f"{int(size)} B"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def dump_yaml(data: Any) -> str:
    return yaml.safe_dump(
        data, default_flow_style=False, allow_unicode=True, sort_keys=False
    ).rstrip("\n")


def render(rows: list[dict[str, Any]], fields: list[str], fmt: str) -> str:
    """Render rows as a text table, CSV, JSON or YAML."""
    rows = [{f: row.get(f) for f in fields} for row in rows]
    if fmt == "json":
        return json.dumps(rows, indent=2, default=str)
    if fmt == "yaml":
        return dump_yaml(rows)
    if fmt == "csv":
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=fields, lineterminator="\n")
        writer.writeheader()
        writer.writerows(rows)
        return buffer.getvalue().rstrip("\n")

    cells = [[str(row[f]) if row[f] is not None else "" for f in fields] for row in rows]
    widths = [max([len(f)] + [len(c[i]) for c in cells]) for i, f in enumerate(fields)]
    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(values: Sequence[str]) -> str:
        return "| " + " | ".join(v.ljust(w) for v, w in zip(values, widths)) + " |"

    out = [border, line(fields), border]
    out.extend(line(c) for c in cells)
    out.append(border)
    return "\n".join(out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reactify", description="Manage ReactifyWP projects")
    parser.add_argument("--tenant", help="Tenant to operate on (default: DEFAULT_TENANT)")
    parser.add_argument("--debug", action="store_true", help="Human-readable debug logging")
    sub = parser.add_subparsers(dest="cmd")

    list_p = sub.add_parser("list", help="List all projects")
    list_p.add_argument("--format", choices=["table", "csv", "json", "yaml"], default="table")

    upload_p = sub.add_parser("upload", help="Upload a project archive")
    upload_p.add_argument("file", help="Path to the ZIP file to upload")
    upload_p.add_argument("--slug", required=True, help="Project slug (unique identifier)")
    upload_p.add_argument("--shortcode", help="Shortcode name (defaults to slug)")
    upload_p.add_argument("--name", help="Project display name (defaults to slug)")
    upload_p.add_argument("--version", help="Version label (defaults to a content hash)")
    upload_p.add_argument(
        "--force", action="store_true", help="Overwrite existing project with same slug"
    )

    delete_p = sub.add_parser("delete", help="Delete a project")
    delete_p.add_argument("slug", help="Project slug to delete")
    delete_p.add_argument("--yes", action="store_true", help="Skip confirmation prompt")

    info_p = sub.add_parser("info", help="Show information about a project")
    info_p.add_argument("slug", help="Project slug")
    info_p.add_argument("--format", choices=["table", "json", "yaml"], default="table")

    assets_p = sub.add_parser("assets", help="List a project's JS and CSS assets")
    assets_p.add_argument("slug", help="Project slug")
    assets_p.add_argument("--format", choices=["table", "json"], default="table")

    sub.add_parser("migrate", help="Apply database migrations")
    return parser


def _confirm(question: str) -> bool:
    answer = input(f"{question} [y/n] ")
    return answer.strip().lower() in ("y", "yes")


def _print_warnings(warnings: list[CleanupWarning]) -> None:
    for warning in warnings:
        detail = f" ({warning.cause})" if warning.cause else ""
        print(f"Warning: {warning.message} {warning.path}{detail}", file=sys.stderr)


async def cmd_list(service: ProjectService, args: argparse.Namespace) -> int:
    projects = await service.list_projects()
    if not projects:
        print("No projects found.")
        return 0
    rows = [p.model_dump(mode="json") for p in projects]
    print(render(rows, LIST_FIELDS, args.format))
    return 0


async def cmd_upload(service: ProjectService, args: argparse.Namespace) -> int:
    result = await service.upload(
        args.slug,
        ArchiveSource.from_path(args.file),
        shortcode=args.shortcode,
        name=args.name,
        version=args.version,
        force=args.force,
    )
    _print_warnings(result.warnings)
    action = "replaced" if result.replaced else "uploaded"
    print(f"Success: Project '{result.project.slug}' {action} successfully!")
    return 0


async def cmd_delete(service: ProjectService, args: argparse.Namespace) -> int:
    await service.get(args.slug)
    if not args.yes and not _confirm(f"Are you sure you want to delete project '{args.slug}'?"):
        print("Aborted.")
        return 0
    result = await service.delete(args.slug)
    _print_warnings(result.warnings)
    print(f"Success: Project '{args.slug}' deleted successfully!")
    return 0


async def cmd_info(service: ProjectService, args: argparse.Namespace) -> int:
    info = await service.info(args.slug)
    data = info.model_dump(mode="json")
    data["size"] = format_size(info.total_size)
    if args.format == "table":
        rows = [{"field": f, "value": data[f]} for f in INFO_FIELDS]
        print(render(rows, ["field", "value"], "table"))
    elif args.format == "yaml":
        print(dump_yaml({f: data[f] for f in INFO_FIELDS}))
    else:
        print(json.dumps({f: data[f] for f in INFO_FIELDS}, indent=2, default=str))
    return 0


async def cmd_assets(service: ProjectService, args: argparse.Namespace) -> int:
    assets = await service.assets(args.slug)
    if args.format == "json":
        print(json.dumps(assets.model_dump(mode="json"), indent=2))
        return 0
    rows = [{"type": "js", "file": f} for f in assets.js]
    rows += [{"type": "css", "file": f} for f in assets.css]
    print(render(rows, ["type", "file"], "table"))
    return 0


COMMANDS = {
    "list": cmd_list,
    "upload": cmd_upload,
    "delete": cmd_delete,
    "info": cmd_info,
    "assets": cmd_assets,
}


async def _dispatch(args: argparse.Namespace, settings: Settings) -> int:
    if settings.auto_migrate:
        await run_migrations_async()

    tenant_id = args.tenant or settings.default_tenant
    try:
        async with get_session() as session:
            service = get_project_service(session, tenant_id, settings)
            return await COMMANDS[args.cmd](service, args)
    finally:
        clear_project_context()
        await dispose_engine()


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cmd is None:
        parser.print_help()
        return 0

    settings = get_settings()
    setup_logging(args.debug or settings.debug)

    try:
        if args.cmd == "migrate":
            run_migrations_sync()
            print("Success: Database is up to date.")
            return 0
        return asyncio.run(_dispatch(args, settings))
    except ReactifyError as e:
        logger.debug("Command failed", command=args.cmd, **e.context())
        print(f"Error: {e.message}", file=sys.stderr)
        return e.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
