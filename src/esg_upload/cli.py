"""Operator command for checking the storage credential end to end."""
from datetime import datetime, timezone

import click
from flask import current_app
from flask.cli import with_appcontext

TEST_BLOB_NAME = "test-connection.txt"


@click.command("check-storage")
@with_appcontext
def check_storage_command():
    """List containers, ensure the upload container, write and delete a test blob."""
    settings = current_app.config["SETTINGS"]
    store = current_app.extensions.get("blob_store")
    if store is None:
        raise click.ClickException(
            "AzureWebJobsStorage not found in environment or " + settings.local_settings_path
        )

    try:
        click.echo("Available containers: " + ", ".join(store.list_containers()))

        store.ensure_container()
        click.echo(f'Container "{settings.container_name}" ready')

        payload = f"Connection test successful at {datetime.now(timezone.utc).isoformat()}"
        url = store.store(TEST_BLOB_NAME, payload.encode("utf-8"), "text/plain", {})
        click.echo(f"Test blob uploaded: {url}")

        store.delete(TEST_BLOB_NAME)
        click.echo("Test blob cleaned up")
    except click.ClickException:
        raise
    except Exception as e:
        raise click.ClickException(f"Connection test failed: {e}") from e

    click.echo("Storage connection OK")
