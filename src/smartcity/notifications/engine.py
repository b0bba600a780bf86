"""Notification engine with template rendering."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from smartcity.notifications.models import (
    Notification,
    NotificationChannel,
    NotificationTemplate,
)
from smartcity.notifications.service import NotificationService
from smartcity.repositories import resolve

logger = logging.getLogger(__name__)

_DEFAULT_TEMPLATES_PATH = Path(__file__).resolve().parents[3] / "config" / "notification_templates.yml"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class NotificationEngine:
    """Builds notifications (optionally from YAML templates) and hands them to a service.

    Implements the ``notify(target_user_id, message, related_complaint_id)``
    contract the complaint lifecycle depends on.
    """

    def __init__(
        self,
        service: NotificationService,
        templates_path: str | Path | None = None,
        default_channel: NotificationChannel = NotificationChannel.IN_APP,
    ) -> None:
        self._service = service
        self._default_channel = default_channel
        self._templates: dict[str, NotificationTemplate] = {}
        self._load_templates(Path(templates_path) if templates_path else _DEFAULT_TEMPLATES_PATH)

    def _load_templates(self, path: Path) -> None:
        if not path.exists():
            logger.info("No notification templates at %s", path)
            return
        with open(path) as fh:
            data = yaml.safe_load(fh) or {}
        for tmpl_id, tmpl_data in data.get("templates", {}).items():
            self._templates[tmpl_id] = NotificationTemplate(
                id=tmpl_id,
                subject=tmpl_data.get("subject", ""),
                body=tmpl_data.get("body", ""),
                channel=NotificationChannel(tmpl_data.get("channel", self._default_channel.value)),
            )

    @property
    def templates(self) -> dict[str, NotificationTemplate]:
        return dict(self._templates)

    async def notify(
        self,
        target_user_id: str,
        message: str,
        related_complaint_id: str | None = None,
        template_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> Notification:
        """Send a notification to a user.

        When ``template_id`` names a loaded template its subject and body are
        rendered from ``context``; ``message`` is used as the body otherwise.
        """
        context = context or {}
        template = self._templates.get(template_id) if template_id else None

        if template:
            subject = self._render(template.subject, context)
            body = self._render(template.body, context)
            channel = template.channel
        else:
            subject = (template_id or "notification").replace("_", " ").capitalize()
            body = message
            channel = self._default_channel

        notification = Notification(
            recipient=target_user_id,
            channel=channel,
            subject=subject,
            body=body,
            complaint_id=related_complaint_id,
            template_id=template_id,
            metadata={k: str(v) for k, v in context.items()},
        )
        return await resolve(self._service.send(notification))

    def _render(self, template_str: str, context: dict[str, Any]) -> str:
        """Single-pass ``{key}`` substitution; unknown placeholders are kept."""
        str_context = {k: str(v) for k, v in context.items()}

        def _replace(m: re.Match) -> str:
            return str_context.get(m.group(1), m.group(0))

        return _PLACEHOLDER.sub(_replace, template_str)
