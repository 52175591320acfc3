"""Template rendering for work items, postmortems and instructions."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING

from docpm.errors import ValidationError
from docpm.templates_data import INSTRUCTIONS_TEMPLATE, POSTMORTEM_TEMPLATE, WORK_ITEM_TEMPLATES

if TYPE_CHECKING:
    from docpm.config import Config

logger = logging.getLogger(__name__)

NAME_PLACEHOLDER = "{{name}}"


def work_item_template(item_type: str) -> str:
    """Raw template text for *item_type*, placeholder intact."""
    try:
        return WORK_ITEM_TEMPLATES[item_type]
    except KeyError:
        raise ValidationError("type", item_type, "unsupported item type") from None


def render_work_item(item_type: str, name: str) -> str:
    """Template for *item_type* with every ``{{name}}`` replaced by *name*."""
    return work_item_template(item_type).replace(NAME_PLACEHOLDER, name)


def render_postmortem(name: str, completed_on: date | datetime) -> str:
    return POSTMORTEM_TEMPLATE.format(name=name, date=completed_on.strftime("%Y-%m-%d"))


def render_instructions(config: Config) -> str:
    """Contributor instructions with the configured store locations filled in."""
    text = INSTRUCTIONS_TEMPLATE.replace("{{backlog_dir}}", str(config.backlog_dir))
    return text.replace("{{completed_dir}}", str(config.completed_dir))
