"""Shared CLI helpers.

Provides ``get_config()``, ``get_service()`` and error reporting so that
``cli.py`` and the ``cli_commands/*.py`` modules can share them without
circular imports.
"""

from __future__ import annotations

import json as json_mod
import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, NoReturn

import click

from docpm.config import Config, load_config
from docpm.errors import DocpmError
from docpm.logging import setup_logging
from docpm.service import WorkItemService
from docpm.vcs import GitCLIClient

logger = logging.getLogger(__name__)


def get_config(ctx: click.Context) -> Config:
    """Resolve the Config once per invocation, applying the group's flag overrides."""
    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        obj["config"] = load_config(overrides=obj.get("overrides"))
    config: Config = obj["config"]
    return config


def get_service(ctx: click.Context) -> WorkItemService:
    """Build the WorkItemService for this invocation and start file logging."""
    obj = ctx.ensure_object(dict)
    if "service" in obj:
        service: WorkItemService = obj["service"]
        return service
    config = get_config(ctx)
    try:
        setup_logging(config.log_dir)
    except OSError as exc:
        logger.warning("File logging disabled: %s", exc)
    service = WorkItemService(config, git=GitCLIClient(config.base_dir))
    obj["service"] = service
    return service


def echo_json(data: Any) -> None:
    click.echo(json_mod.dumps(data, indent=2, default=str))


def fail(message: str, *, as_json: bool = False) -> NoReturn:
    """Report *message* and exit 1. JSON mode prints ``{"error": ...}`` to stdout."""
    if as_json:
        click.echo(json_mod.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@contextmanager
def reporting_errors(*, as_json: bool = False) -> Generator[None, None, None]:
    """Turn DocpmError into a reported failure with exit code 1."""
    try:
        yield
    except DocpmError as e:
        fail(str(e), as_json=as_json)
