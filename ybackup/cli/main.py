# ybackup CLI: main entry point
"""ybackup CLI — trigger and inspect database backups from the terminal."""

from __future__ import annotations

import asyncio
import sys

import click

from ..config import settings


@click.group()
@click.version_option(version=settings.app_version, prog_name="ybackup")
def cli():
    """ybackup — full and incremental backups through YugabyteDB Anywhere."""
    pass


@cli.command()
def status():
    """Show engine status and configured backup categories."""
    from rich.console import Console
    from rich.table import Table

    from ..db import init_db
    from ..services.resolver import ConfigResolver

    init_db()
    console = Console()
    console.print(f"[bold blue]ybackup[/] v{settings.app_version}")
    console.print(f"Database: {settings.effective_database_url}")
    console.print(f"Environment: {settings.environment}")

    resolver = ConfigResolver.from_settings(settings)
    if not len(resolver):
        console.print("[dim]No backup categories configured. Set YBACKUP_DATABASES or YBACKUP_DATABASES_FILE.[/dim]")
        return

    table = Table(title="Backup Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Type")
    table.add_column("Keyspace")
    table.add_column("Backup Type")
    table.add_column("Parent")
    for code in resolver.categories():
        cfg = resolver.resolve(code)
        table.add_row(code, cfg.category_type, cfg.database_name, cfg.backup_type, cfg.parent_category or "")
    console.print(table)


@cli.command()
def serve():
    """Start the ybackup API server."""
    import uvicorn
    uvicorn.run(
        "ybackup.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


@cli.command()
@click.option("--batch-id", required=True, help="Batch execution ID")
@click.option("--category-code", required=True, help="Backup category code")
@click.option("--business-date", default=None, help="YYYYMMDD; defaults to the batch execution date")
def run(batch_id: str, category_code: str, business_date: str | None):
    """Run one backup workflow and print its acknowledgment."""
    from ..common import init_logging, print_detail, print_error, print_success
    from ..db import init_db
    from ..errors import BackupError
    from ..services.orchestrator import BackupOrchestrator

    init_db()
    log_file = init_logging("run")
    orchestrator = BackupOrchestrator.from_settings(settings)
    params = {"batch_id": batch_id, "category_code": category_code}
    if business_date:
        params["business_date"] = business_date

    async def _run():
        try:
            return await orchestrator.run(params)
        finally:
            await orchestrator.gateway.aclose()

    try:
        ack = asyncio.run(_run())
    except BackupError as e:
        print_error(str(e))
        sys.exit(1)

    if ack.execution_status == "COMPLETED":
        print_success(f"Backup submitted for batch {batch_id}")
    else:
        print_error(f"Backup failed for batch {batch_id}")
    for key, value in ack.extension_fields.items():
        print_detail(f"{key}: {value}")
    print_detail(f"Log: {log_file}")
    if ack.execution_status != "COMPLETED":
        sys.exit(1)


@cli.command()
@click.option("--batch-id", default=None, help="Filter by batch ID")
@click.option("--limit", default=20, show_default=True)
def attempts(batch_id: str | None, limit: int):
    """List recent backup attempts."""
    from rich.console import Console
    from rich.table import Table

    from ..db import SessionLocal, init_db
    from ..models.backup_attempt import BackupAttempt

    init_db()
    console = Console()
    db = SessionLocal()
    try:
        q = db.query(BackupAttempt)
        if batch_id:
            q = q.filter(BackupAttempt.batch_id == batch_id)
        rows = q.order_by(BackupAttempt.start_time.desc()).limit(limit).all()
        if not rows:
            console.print("[dim]No backup attempts recorded.[/dim]")
            return
        table = Table(title="Backup Attempts")
        table.add_column("Batch", style="cyan")
        table.add_column("Category")
        table.add_column("Type")
        table.add_column("Status")
        table.add_column("Business Date")
        table.add_column("Started")
        for a in rows:
            style = {"SUCCESS": "green", "FAILED": "red"}.get(a.status, "yellow")
            table.add_row(
                a.batch_id, a.category_code, a.backup_type,
                f"[{style}]{a.status}[/{style}]", a.business_date,
                a.start_time.strftime("%Y-%m-%d %H:%M:%S") if a.start_time else "",
            )
        console.print(table)
    finally:
        db.close()


if __name__ == "__main__":
    cli()
