"""chunkpy CLI - Main commands."""
import asyncio
import logging
from pathlib import Path
from typing import List, Dict

import typer
from rich.console import Console
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    DownloadColumn,
    TransferSpeedColumn,
)

app = typer.Typer(
    name="chunkpy",
    help="Chunked, checksum-verified uploads",
    add_completion=False
)
console = Console()


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def parse_headers(values: List[str]) -> Dict[str, str]:
    """Parse 'Name: value' options into a header dict."""
    headers = {}
    for value in values:
        name, sep, content = value.partition(':')
        if not sep or not name.strip():
            raise typer.BadParameter(f"Invalid header '{value}', expected 'Name: value'")
        headers[name.strip()] = content.strip()
    return headers


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    upload_url: str = typer.Option(..., "--upload-url", "-u", help="Upload endpoint template with {upload_id}"),
    finish_url: str = typer.Option(..., "--finish-url", "-f", help="Finish endpoint template with {upload_id}"),
    chunk_size: int = typer.Option(-1, "--chunk-size", "-c", help="Chunk size in bytes (-1 sends the whole file)"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace existing content at the upload id"),
    header: List[str] = typer.Option([], "--header", "-H", help="Extra header 'Name: value' (repeatable)"),
    algorithm: str = typer.Option("sha-256", "--algorithm", "-a", help="Digest algorithm"),
    encoding: str = typer.Option("base64", "--encoding", help="Hash encoding used by the server (base64 or hex)"),
    finish_method: str = typer.Option("GET", "--finish-method", help="HTTP method of the finish request"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Upload a file in chunks and verify it on the server."""
    from chunkpy import (
        ChunkedUploaderClient,
        ConfigurationError,
        ProgressState,
        UploadError,
        WireContract,
        setup_logging,
    )
    
    if verbose:
        logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s %(message)s")
        setup_logging(logging.DEBUG)
    
    try:
        client = ChunkedUploaderClient.from_endpoints(
            upload=upload_url,
            finish=finish_url,
            headers=parse_headers(header),
            algorithm=algorithm,
            wire=WireContract(hash_encoding=encoding, finish_method=finish_method),
        )
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    
    async def do_upload():
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            console=console
        ) as progress:
            task = progress.add_task(f"Preparing {file_path.name}", total=None)
            
            def on_progress(p: ProgressState):
                progress.update(
                    task,
                    description=f"{p.state.value.capitalize()} {file_path.name}",
                    completed=p.uploaded,
                    total=p.total or None
                )
            
            client.on_progress(on_progress)
            return await client.upload_with_result(file_path, chunk_size, overwrite)
    
    try:
        result = run_async(do_upload())
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    except UploadError as e:
        console.print(f"[red]Upload failed: {e}[/red]")
        raise typer.Exit(1)
    
    console.print(f"[green]Uploaded:[/green] {file_path.name}")
    console.print(f"Upload id: {result.upload_id}")
    console.print(f"Size: {result.file_size:,} bytes in {result.chunks} chunk(s)")


@app.command()
def checksum(
    file_path: Path = typer.Argument(..., help="Local file", exists=True, dir_okay=False),
    algorithm: str = typer.Option("sha-256", "--algorithm", "-a", help="Digest algorithm"),
    encoding: str = typer.Option("base64", "--encoding", help="Output encoding (base64 or hex)"),
):
    """Print the checksum (and upload id) a file would be uploaded under."""
    from chunkpy import ConfigurationError, ChecksumError
    from chunkpy.core.upload.strategies import ChecksumEngine
    
    try:
        engine = ChecksumEngine(algorithm, encoding)
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    
    try:
        console.print(run_async(engine.compute(file_path)))
    except ChecksumError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def main():
    app()


if __name__ == "__main__":
    main()
