"""Predefined push notification templates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from fitai.config import NOTIFICATION_ICON


@dataclass(frozen=True)
class NotificationTemplate:
    title: str
    body: str
    click_action: str
    icon: str = NOTIFICATION_ICON

    def render_body(self, values: Optional[Mapping[str, Any]] = None) -> str:
        """Replace {key} placeholders with values; unknown keys stay as-is."""
        body = self.body
        for key, value in (values or {}).items():
            body = body.replace("{" + str(key) + "}", str(value), 1)
        return body


NOTIFICATION_TEMPLATES: Dict[str, NotificationTemplate] = {
    "workout_reminder": NotificationTemplate(
        title="💪 ¡Es hora de entrenar!",
        body="Tu rutina de hoy te espera. ¡Vamos a darle!",
        click_action="/dashboard",
    ),
    "nutrition_reminder": NotificationTemplate(
        title="🍽️ No olvides registrar tu comida",
        body="Mantené tu registro de nutrición al día para mejores resultados.",
        click_action="/nutrition",
    ),
    "new_pr": NotificationTemplate(
        title="🏆 ¡Nuevo Récord Personal!",
        body="Superaste tu marca anterior. ¡Excelente trabajo!",
        click_action="/progress",
    ),
    "streak_reminder": NotificationTemplate(
        title="🔥 No pierdas tu racha",
        body="Llevas {days} días seguidos. ¡No pares ahora!",
        click_action="/dashboard",
    ),
    "premium_expiring": NotificationTemplate(
        title="⭐ Tu Premium está por vencer",
        body="Renueva para no perder tus beneficios exclusivos.",
        click_action="/upgrade",
    ),
    "weekly_summary": NotificationTemplate(
        title="📊 Resumen de la semana",
        body="Entrenaste {workouts} veces y quemaste {calories} kcal. ¡Gran trabajo!",
        click_action="/progress",
    ),
    "weekly_weight_reminder": NotificationTemplate(
        title="⚖️ ¡Control de peso semanal!",
        body="Es domingo: registra tu peso para ver tu progreso esta semana.",
        click_action="/profile",
    ),
    "assigned_routine": NotificationTemplate(
        title="🏋️ Nueva Rutina Asignada",
        body="Tu coach te ha asignado un nuevo plan de entrenamiento. ¡A darle con todo!",
        click_action="/dashboard",
    ),
    "coach_welcome": NotificationTemplate(
        title="🧔‍♂️ ¡Bienvenido a FitAI Partners!",
        body="Tu torre de control está lista. Descubre cómo escalar tu negocio con IA.",
        click_action="/coach-dashboard",
    ),
}


def get_template(template_id: str) -> Optional[NotificationTemplate]:
    return NOTIFICATION_TEMPLATES.get(template_id)
