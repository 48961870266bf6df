"""Command-line interface (typer) for appian-deploy."""
