"""Command-line interface for prefix-walk.

Commands:
    - list: List objects under an S3 prefix, a bounded number of levels deep
"""

from typing import Annotated, Optional

import typer

from . import __version__
from .core import settings
from .listing import list_with_depth
from .store import S3ClientConfig, S3Store

app = typer.Typer(
    name="prefix-walk",
    help="Depth-bounded recursive listing for S3-compatible object storage.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"prefix-walk {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    Prefix-Walk: list object storage a bounded number of levels deep.
    """
    pass


@app.command("list")
def list_cmd(
    path: Annotated[str, typer.Argument(help="S3 path to list (s3://bucket/prefix)")],
    depth: Annotated[
        int, typer.Option("--depth", "-d", help="Levels to recurse past the prefix")
    ] = 0,
    max_concurrency: Annotated[
        Optional[int],
        typer.Option(
            "--max-concurrency",
            help="Maximum listing requests in flight (default: unbounded)",
        ),
    ] = None,
    # S3 options
    access_key_id: Annotated[
        Optional[str],
        typer.Option("--access-key-id", help="AWS access key ID"),
    ] = None,
    secret_access_key: Annotated[
        Optional[str],
        typer.Option("--secret-access-key", help="AWS secret access key"),
    ] = None,
    session_token: Annotated[
        Optional[str],
        typer.Option("--session-token", help="AWS session token"),
    ] = None,
    region_name: Annotated[
        Optional[str], typer.Option("--region", help="AWS region name")
    ] = None,
    endpoint_url: Annotated[
        Optional[str], typer.Option("--endpoint-url", help="Custom S3 endpoint URL")
    ] = None,
    aws_profile: Annotated[
        Optional[str],
        typer.Option("--aws-profile", help="AWS CLI profile name"),
    ] = None,
) -> None:
    """
    List objects under a prefix, DEPTH levels deep.

    Objects from every level visited are printed first, followed by the
    prefixes found one level past DEPTH.

    Examples:
        prefix-walk list s3://bucket/data --depth 2 --aws-profile myprofile
        prefix-walk list s3://bucket --endpoint-url http://localhost:9000 \
            --access-key-id minioadmin --secret-access-key minioadmin
    """
    try:
        config = S3ClientConfig(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name or settings.default_region,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
        )
        if max_concurrency:
            # One pooled connection per in-flight listing
            config.max_pool_connections = max(
                config.max_pool_connections, max_concurrency
            )
        store, prefix = S3Store.from_url(path, config=config)

        result = list_with_depth(
            store, prefix, depth=depth, max_concurrency=max_concurrency
        )

        if result.objects:
            typer.echo(f"Found {len(result.objects)} objects:")
            for obj in result.objects:
                typer.echo(f"  {obj.location}  {obj.size:,} bytes")
        else:
            typer.echo("No objects found.")

        if result.common_prefixes:
            typer.echo(f"Prefixes {depth + 1} levels down:")
            for common_prefix in result.common_prefixes:
                typer.echo(f"  {common_prefix}/")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
