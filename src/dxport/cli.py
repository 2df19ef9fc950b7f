"""
dxport CLI.

Usage:
    dxport upload reads.fq --path project-xxxx:/data
    dxport upload -r samples/
    dxport download /data/reads.fq --dir ./local
    dxport find-data --name "*.bam"
    dxport cd /data && dxport ls
    dxport download-inputs --parallel
    dxport upload-outputs --app-json dxapp.json
"""

from __future__ import annotations

import asyncio
import functools
import json
import posixpath
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterator

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TimeRemainingColumn,
    TransferSpeedColumn,
)
from rich.table import Table

from dxport.api.client import AsyncPlatformClient
from dxport.config import Settings, get_settings, save_context
from dxport.exceptions import DxError
from dxport.logging import setup_logging
from dxport.models.data import (
    FindDataOptions,
    FindDataScope,
    ListFolderOptions,
    NameFilter,
    ObjectClass,
)
from dxport.paths import ROOT, is_file_id, parse_project_path, resolve_path, split_path
from dxport.services.download import DownloadService
from dxport.services.jobs import INPUT_DIR, JOB_INPUT_FILE, OUTPUT_DIR, JobTransferService
from dxport.services.search import SearchService
from dxport.services.upload import UploadService

if TYPE_CHECKING:
    import httpx

    from dxport.models.data import FindDataResult, ListFolderResult
    from dxport.models.location import RemoteLocation
    from dxport.services.download import DownloadResult
    from dxport.services.download._aio import ProgressFactory
    from dxport.services.upload import UploadResult

console = Console()
err_console = Console(stderr=True)


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _transport(ctx: click.Context) -> httpx.AsyncBaseTransport | None:
    return ctx.obj.get("transport")


def _fail(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    raise SystemExit(1)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report DxError as ``Error: ...`` on stderr and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except DxError as e:
            _fail(str(e))

    return wrapper


def _require_project(location: RemoteLocation) -> None:
    if not location.container_id:
        raise DxError("No project selected. Use: dxport cd project-xxxx:/")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="dxport")
@click.pass_context
def main(ctx: click.Context, debug: bool) -> None:
    """Move files between local disk and platform projects."""
    ctx.ensure_object(dict)
    if "settings" not in ctx.obj:
        ctx.obj["settings"] = get_settings()
    settings = ctx.obj["settings"]
    setup_logging("DEBUG" if debug else settings.log_level, json_format=settings.log_json)


# =============================================================================
# Upload
# =============================================================================


@main.command()
@click.argument("files", nargs=-1, required=True)
@click.option("--path", "-p", "destination", help="Destination project:folder")
@click.option("--recursive", "-r", is_flag=True, help="Upload directories recursively")
@click.option("--parents", is_flag=True, help="Create missing destination folders (always on)")
@click.pass_context
@handle_errors
def upload(
    ctx: click.Context,
    files: tuple[str, ...],
    destination: str | None,
    recursive: bool,
    parents: bool,
) -> None:
    """Upload local files.

    Examples:

        dxport upload reads.fq

        dxport upload reads.fq --path project-xxxx:/data

        dxport upload -r samples/ --path /incoming
    """
    settings = _settings(ctx)
    target = parse_project_path(settings.project_context_id, settings.cli_wd, destination)
    _require_project(target)

    def report(result: UploadResult) -> None:
        if result.success:
            console.print(f"{escape(result.source)} => {result.object_id}", highlight=False)
        else:
            err_console.print(f"[red]Error:[/red] {escape(str(result))}")

    service = UploadService(settings, transport=_transport(ctx))
    results = service.upload_files(list(files), target, recursive, on_complete=report)
    if not all(r.success for r in results):
        raise SystemExit(1)


# =============================================================================
# Download
# =============================================================================


@main.command()
@click.argument("paths", nargs=-1, required=True)
@click.option(
    "--dir", "-d", "out_dir", default=".", type=click.Path(file_okay=False), help="Local directory"
)
@click.option("--output", "-o", help="Local file name, '-' for stdout (single file only)")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing local files")
@click.option("--recursive", "-r", is_flag=True, help="Download folders recursively")
@click.option("--quiet", "-q", is_flag=True, help="No progress display")
@click.pass_context
@handle_errors
def download(
    ctx: click.Context,
    paths: tuple[str, ...],
    out_dir: str,
    output: str | None,
    force: bool,
    recursive: bool,
    quiet: bool,
) -> None:
    """Download files by path or identifier.

    Examples:

        dxport download reads.fq

        dxport download file-xxxx --output - | head

        dxport download -r project-xxxx:/results --dir ./results
    """
    settings = _settings(ctx)
    service = DownloadService(settings, transport=_transport(ctx))

    with _download_progress(quiet) as progress_factory:
        results = service.download(
            list(paths), Path(out_dir), output, force, recursive, progress_factory
        )

    _report_downloads(results)


@contextmanager
def _download_progress(quiet: bool) -> Iterator[ProgressFactory | None]:
    """Yield a per-file progress factory drawing on stderr, or None when quiet."""
    if quiet:
        yield None
        return

    with Progress(
        "[progress.description]{task.description}",
        BarColumn(),
        "[progress.percentage]{task.percentage:>3.0f}%",
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeRemainingColumn(),
        console=err_console,
    ) as progress:

        def progress_factory(label: str) -> Callable[[int, int], None]:
            task_id = progress.add_task(f"[cyan]{escape(label)}", total=None)

            def update(written: int, total: int) -> None:
                progress.update(task_id, completed=written, total=total)

            return update

        yield progress_factory


def _report_downloads(results: list[DownloadResult]) -> None:
    failed = [r for r in results if not r.success]
    for result in failed:
        err_console.print(f"[red]Error:[/red] {escape(str(result))}")
    if failed:
        raise SystemExit(1)


# =============================================================================
# Job inputs / outputs
# =============================================================================


def _home_path(value: str | None, default: str) -> Path:
    return Path(value) if value else Path.home() / default


@main.command("download-inputs")
@click.option(
    "--input-json",
    "-i",
    type=click.Path(dir_okay=False),
    help="Job input file (default: ~/job_input.json)",
)
@click.option(
    "--out-dir", "-o", type=click.Path(file_okay=False), help="Local directory (default: ~/in)"
)
@click.option("--except", "-e", "skip", multiple=True, help="Input name to skip (repeatable)")
@click.option("--parallel", "-p", is_flag=True, help="Download files concurrently")
@click.option(
    "--threads", "-t", type=click.IntRange(1, 32), help="Concurrent downloads (default: settings)"
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing local files")
@click.option("--quiet", "-q", is_flag=True, help="No progress display")
@click.pass_context
@handle_errors
def download_inputs(
    ctx: click.Context,
    input_json: str | None,
    out_dir: str | None,
    skip: tuple[str, ...],
    parallel: bool,
    threads: int | None,
    force: bool,
    quiet: bool,
) -> None:
    """Download every file input of a job.

    A file input NAME lands in OUT_DIR/NAME/, the files of a list input in
    OUT_DIR/NAME/0/, OUT_DIR/NAME/1/ and so on.

    Examples:

        dxport download-inputs --parallel

        dxport download-inputs -i job_input.json -o inputs --except reference
    """
    settings = _settings(ctx)
    service = JobTransferService(settings, transport=_transport(ctx))

    with _download_progress(quiet) as progress_factory:
        results = service.download_inputs(
            _home_path(input_json, JOB_INPUT_FILE),
            _home_path(out_dir, INPUT_DIR),
            skip=skip,
            parallel=parallel,
            threads=threads,
            force=force,
            progress_factory=progress_factory,
        )

    _report_downloads(results)


@main.command("upload-outputs")
@click.option(
    "--app-json",
    "-a",
    required=True,
    envvar="DX_TEST_DXAPP_JSON",
    type=click.Path(exists=True, dir_okay=False),
    help="dxapp.json declaring the outputSpec",
)
@click.option(
    "--out-dir",
    "-o",
    type=click.Path(file_okay=False),
    help="Directory of <output>/ folders (default: ~/out)",
)
@click.option("--path", "destination", help="Destination project:folder (default: project root)")
@click.option(
    "--output-json", type=click.Path(dir_okay=False), help="Also write the job output JSON here"
)
@click.option("--except", "-e", "skip", multiple=True, help="Output name to skip (repeatable)")
@click.option("--parallel", "-p", is_flag=True, help="Upload files concurrently")
@click.option(
    "--threads", "-t", type=click.IntRange(1, 32), help="Concurrent uploads (default: max_workers)"
)
@click.pass_context
@handle_errors
def upload_outputs(
    ctx: click.Context,
    app_json: str,
    out_dir: str | None,
    destination: str | None,
    output_json: str | None,
    skip: tuple[str, ...],
    parallel: bool,
    threads: int | None,
) -> None:
    """Upload the files of every file output an app declares.

    Files for output NAME are read from OUT_DIR/NAME/. The job output JSON,
    one file link per output, is printed on stdout.

    Examples:

        dxport upload-outputs --app-json dxapp.json --parallel

        dxport upload-outputs -a dxapp.json --path project-xxxx:/results
    """
    settings = _settings(ctx)
    target = parse_project_path(settings.project_context_id, ROOT, destination)
    _require_project(target)

    def report(result: UploadResult) -> None:
        if not result.success:
            err_console.print(f"[red]Error:[/red] {escape(str(result))}")

    service = JobTransferService(settings, transport=_transport(ctx))
    uploaded = service.upload_outputs(
        Path(app_json),
        _home_path(out_dir, OUTPUT_DIR),
        target,
        skip=skip,
        parallel=parallel,
        threads=threads,
        on_complete=report,
    )

    console.print_json(data=uploaded.outputs)
    if output_json:
        Path(output_json).write_text(json.dumps(uploaded.outputs, indent=2) + "\n")
    if not uploaded.success:
        raise SystemExit(1)


# =============================================================================
# Search / navigation
# =============================================================================


@main.command("find-data")
@click.option("--path", "folder", help="Folder to search (default: working folder)")
@click.option("--name", "-n", help="Glob on object names")
@click.option("--norecurse", is_flag=True, help="Do not search subfolders")
@click.pass_context
@handle_errors
def find_data(ctx: click.Context, folder: str | None, name: str | None, norecurse: bool) -> None:
    """Find files in the current project."""
    settings = _settings(ctx)
    location = resolve_path(settings.project_context_id, settings.cli_wd, folder or "")
    _require_project(location)

    options = FindDataOptions(
        object_class=ObjectClass.FILE,
        name=NameFilter(glob=name) if name else None,
        scope=FindDataScope(
            project=location.container_id,
            folder=location.path,
            recurse=not norecurse,
        ),
        describe=True,
    )
    results = asyncio.run(_find_data_async(settings, _transport(ctx), options))

    if not results:
        console.print("[yellow]No matching files[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", width=29)
    table.add_column("Folder")
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("State", width=8)

    for result in results:
        d = result.describe
        table.add_row(
            result.id,
            escape(d.folder or "") if d else "",
            escape(d.name or "") if d else "",
            f"{d.size:,}" if d and d.size is not None else "",
            d.state.value if d and d.state else "",
        )
    console.print(table)


async def _find_data_async(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None,
    options: FindDataOptions,
) -> list[FindDataResult]:
    async with AsyncPlatformClient.from_settings(settings, transport) as client:
        return await SearchService(client, retries=settings.search_retries).find_data(options)


@main.command()
@click.argument("path", required=False)
@click.pass_context
@handle_errors
def ls(ctx: click.Context, path: str | None) -> None:
    """List folders and objects in a folder."""
    settings = _settings(ctx)
    location = resolve_path(settings.project_context_id, settings.cli_wd, path or "")
    _require_project(location)
    if is_file_id(location.path):
        raise DxError(f'"{path}" is not a folder')

    listing = asyncio.run(_ls_async(settings, _transport(ctx), location))
    for folder in sorted(listing.folder_names):
        console.print(f"[blue]{escape(split_path(folder)[1])}/[/blue]")
    for obj in listing.objects:
        name = obj.describe.name if obj.describe and obj.describe.name else obj.id
        console.print(escape(name), highlight=False)


async def _ls_async(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None,
    location: RemoteLocation,
) -> ListFolderResult:
    async with AsyncPlatformClient.from_settings(settings, transport) as client:
        return await client.list_folder(
            location.container_id,
            ListFolderOptions(folder=location.path, describe=True),
        )


@main.command()
@click.pass_context
@handle_errors
def pwd(ctx: click.Context) -> None:
    """Print the current project and working folder."""
    settings = _settings(ctx)
    if not settings.project_context_id:
        raise DxError("No project selected")
    project = settings.project_context_name or settings.project_context_id
    console.print(f"{escape(project)}:{escape(settings.cli_wd)}", highlight=False)


@main.command()
@click.argument("path", required=False)
@click.pass_context
@handle_errors
def cd(ctx: click.Context, path: str | None) -> None:
    """Change the working folder (and project, with a project prefix)."""
    settings = _settings(ctx)
    location = resolve_path(settings.project_context_id, settings.cli_wd, path or ROOT)
    _require_project(location)
    if is_file_id(location.path):
        raise DxError(f'"{path}" is not a folder')

    location = location.model_copy(update={"path": posixpath.normpath(location.path)})
    if location.path.startswith("//"):
        location = location.model_copy(update={"path": ROOT + location.path.lstrip(ROOT)})

    if not asyncio.run(_is_folder_async(settings, _transport(ctx), location)):
        raise DxError(f'No such folder "{location.path}"')

    update: dict[str, str] = {"cli_wd": location.path}
    if location.container_id != settings.project_context_id:
        update["project_context_id"] = location.container_id
        update["project_context_name"] = location.container_id
    save_context(settings.model_copy(update=update))


async def _is_folder_async(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None,
    location: RemoteLocation,
) -> bool:
    async with AsyncPlatformClient.from_settings(settings, transport) as client:
        return await SearchService(client).is_folder(location)


if __name__ == "__main__":
    main()
