"""Welcome emails for new users and new coaches."""

from __future__ import annotations

import html
import logging
from typing import Any, Dict, Optional

from fitai.config import APP_URL, EMAIL_FROM, EMAIL_FROM_PARTNER
from fitai.mailer.resend_client import ResendClient
from fitai.notifications.sender import PushSender

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Bienvenido a la Élite: Tu Evolución IA comienza hoy 🦾"
COACH_WELCOME_SUBJECT = "🧔‍♂️ Bienvenido Partner: Tu Torre de Control FitAI está lista"


def _page(heading: str, paragraphs: list, button_label: str, button_url: str, footer: str) -> str:
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    return (
        "<!DOCTYPE html><html><body>"
        f"<h2>{heading}</h2>{body}"
        f'<a href="{button_url}">{button_label}</a>'
        f"<footer>{footer}</footer>"
        "</body></html>"
    )


def render_welcome_html(display_name: str) -> str:
    name = html.escape(display_name or "Atleta")
    return _page(
        f"Hola, {name} 👋",
        [
            "Bienvenido a FitAI. Has dado el primer paso para llevar tu rendimiento al siguiente nivel.",
            "Completa tu perfil metabólico y genera tu primera rutina IA.",
        ],
        "ENTRAR A MI PANEL",
        APP_URL,
        "FitAI - Este es un correo automático, no es necesario responder.",
    )


def render_coach_welcome_html(display_name: str) -> str:
    name = html.escape(display_name or "Coach")
    return _page(
        f"Hola, {name} 👋",
        [
            "Tu torre de control FitAI Partners está lista.",
            "Comparte tu código de coach con tus alumnos para vincularlos a tu equipo.",
        ],
        "IR AL PANEL DE CONTROL",
        f"{APP_URL}/coach-dashboard",
        "FitAI Partners | The Future of Coaching",
    )


def send_welcome_email(
    user: Dict[str, Any],
    client: Optional[ResendClient] = None,
) -> Dict[str, Any]:
    """Send the welcome email to a newly created Auth user."""
    client = client or ResendClient()
    return client.send_email(
        to=user.get("email") or "",
        subject=WELCOME_SUBJECT,
        html=render_welcome_html(user.get("displayName") or user.get("display_name") or ""),
        sender=EMAIL_FROM,
    )


def send_coach_welcome_email(
    trainer: Dict[str, Any],
    trainer_id: str,
    client: Optional[ResendClient] = None,
    sender: Optional[PushSender] = None,
) -> Dict[str, Any]:
    """Send the partner welcome email and the coach_welcome push."""
    client = client or ResendClient()
    result = client.send_email(
        to=trainer.get("email") or "",
        subject=COACH_WELCOME_SUBJECT,
        html=render_coach_welcome_html(trainer.get("displayName") or ""),
        sender=EMAIL_FROM_PARTNER,
    )
    if result["success"]:
        logger.info("[CoachOnboarding] Welcome email sent to coach %s", trainer_id)

    push = (sender or PushSender()).send_notification_to_user(trainer_id, "coach_welcome")
    return {"success": result["success"], "email": result, "push": push}


__all__ = [
    "send_welcome_email",
    "send_coach_welcome_email",
    "render_welcome_html",
    "render_coach_welcome_html",
]
