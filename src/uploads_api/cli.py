# cli.py
import logging

import click

from database.local import init_db
from uploads_api.config.settings import get_settings

# Configure logging
logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for running and inspecting the Uploads API"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    print(f"  Deployment Mode: {settings.deployment_mode}")
    print(f"  Blob Backend: {settings.blob_backend}")
    print(f"  Metadata Backend: {settings.metadata_backend}")
    print(f"  AWS Region: {settings.aws_region}")
    print(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    print(f"  S3 Bucket: {settings.s3_bucket_name}")
    print(f"  Storage Dir: {settings.storage_dir}")
    print(f"  Database Path: {settings.database_path}")
    print(f"  Fetch Timeout: {settings.fetch_timeout_seconds}s")


@cli.command("init-db")
def init_database():
    """Create the metadata collections and indexes"""
    settings = get_settings()
    adapter = init_db(
        mongodb_uri=settings.mongodb_uri,
        mongodb_database=settings.mongodb_database,
        db_path=settings.database_path,
    )
    adapter.close()
    print(f"✅ {settings.metadata_backend} metadata store initialized")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    uvicorn.run("uploads_api.main:create_app", factory=True, host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
