"""tablesync CLI - Command-line interface for bulk table sync."""

from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from tablesync import __version__
from tablesync.exceptions import TableSyncError, ValidationError
from tablesync.models.table import TableSyncRequest, order_row
from tablesync.operators.registry import get_dialect, get_executor
from tablesync.utils.logging import configure_logging
from tablesync.utils.yaml_parser import load_request

app = typer.Typer(
    name="tablesync",
    help="tablesync - Bulk insert, update and delete through staging tables",
    add_completion=True,
)

RequestPath = Annotated[
    Path,
    typer.Argument(
        help="Path to the YAML request file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"tablesync version {__version__}")
        raise typer.Exit()


def _check_rows(request: TableSyncRequest) -> int:
    """Run every row through the row contract and count them.

    Materialized rows were checked by validate_request(); a rows file is
    streamed here so that bad rows are reported without a database.
    """
    if request.rows_materialized:
        return len(request.rows)
    count = 0
    for index, row in enumerate(request.rows):
        order_row(request.columns, row, index)
        count += 1
    return count


def _describe_request(request: TableSyncRequest, row_count: int) -> None:
    typer.echo(f"\nTable: {request.qualified_name}")
    typer.echo(f"Operation: {request.operation.value}")
    typer.echo("Columns:")
    for column in request.columns:
        flags = []
        if column.primary_key:
            flags.append("key")
        if column.dtype is not None:
            flags.append(column.dtype.value)
        suffix = f" ({', '.join(flags)})" if flags else ""
        typer.echo(f"  - {column.name}{suffix}")
    typer.echo(f"Rows: {row_count:,} (checked)")


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """tablesync - Stage rows in a temp table and merge them in one statement."""
    pass


@app.command()
def validate(request_path: RequestPath) -> None:
    """Validate a request YAML file without connecting to a database."""
    try:
        typer.echo(f"Validating request: {request_path}")
        request = load_request(request_path)
        request.validate_request()
        row_count = _check_rows(request)

        typer.secho("✓ Request is valid!", fg=typer.colors.GREEN, bold=True)
        _describe_request(request, row_count)

    except ValidationError as e:
        typer.secho(f"✗ Validation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command()
def sql(
    request_path: RequestPath,
    backend: Annotated[
        str,
        typer.Option("--backend", "-b", help="Backend: postgres or sqlserver"),
    ] = "postgres",
) -> None:
    """Print the statements a request would run, without connecting."""
    try:
        request = load_request(request_path)
        request.validate_request()

        dialect = get_dialect(backend)
        target = dialect.table_ref(request.table_name, request.schema_name)
        staging = dialect.staging_table_name(request.table_name)

        typer.echo(f"-- {dialect.name}: {request.operation.value} {request.qualified_name}")
        typer.echo(dialect.build_staging_ddl(target, staging) + ";")
        typer.echo(f"-- bulk load {len(request.columns)} columns into {staging}")
        typer.echo(
            dialect.build_merge_sql(request.operation, target, staging, request.columns) + ";"
        )
        drop_sql = dialect.build_drop_staging_sql(staging)
        if drop_sql is not None:
            typer.echo(drop_sql + ";")

    except TableSyncError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command()
def apply(
    request_path: RequestPath,
    backend: Annotated[
        Optional[str],
        typer.Option(
            "--backend",
            "-b",
            help="Backend: postgres or sqlserver (inferred from --connection if omitted)",
        ),
    ] = None,
    connection: Annotated[
        Optional[str],
        typer.Option(
            "--connection",
            "-c",
            help="SQLAlchemy connection URL (default: TABLESYNC_<BACKEND>_URL)",
            envvar="TABLESYNC_CONNECTION",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose output"),
    ] = False,
) -> None:
    """Apply a request to the target table in one transaction."""
    configure_logging(level="DEBUG" if verbose else None)
    try:
        typer.echo(f"Loading request: {request_path}")
        request = load_request(request_path)

        config = {"connection_string": connection} if connection else {}
        executor = get_executor(backend, config)

        typer.echo(f"Applying {request.operation.value} to {request.qualified_name}...")
        result = executor.run(request)

        typer.echo("\n" + "=" * 60)
        typer.secho("Sync succeeded!", fg=typer.colors.GREEN, bold=True)
        typer.echo(f"Rows staged: {result.rows_staged:,}")
        typer.echo(f"Rows affected: {result.rows_affected:,}")
        typer.echo(f"Duration: {result.duration_seconds:.2f}s")
        if verbose:
            typer.echo(f"Staging table: {result.staging_table}")

    except ValidationError as e:
        typer.secho(f"Validation error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except TableSyncError as e:
        typer.secho(f"{type(e).__name__}: {e}", fg=typer.colors.RED, err=True)
        if verbose and e.__cause__ is not None:
            typer.echo(f"Caused by: {e.__cause__!r}", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
