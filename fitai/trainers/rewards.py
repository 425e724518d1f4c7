"""
Trainer rewards and coach/student linking.

Collections:
- trainers/{trainerId}: coachCode, rewardPoints, rewardLevel, studentCount
- users/{uid}: coachId, joinedCoachAt, role
"""

from __future__ import annotations

import logging
import random
import re
import string
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from google.cloud import firestore

from fitai.config import TRAINERS_COLLECTION, USERS_COLLECTION
from fitai.firestore_client import get_db
from fitai.mailer.welcome import send_coach_welcome_email

logger = logging.getLogger(__name__)

REWARD_POINTS = {
    "STUDENT_REGISTERED": 5,
    "STUDENT_COMPLETED_ONBOARDING": 10,
    "STUDENT_TRAINED_10_TIMES": 15,
    "STUDENT_PREMIUM_MONTHLY": 50,
    "STUDENT_PREMIUM_ANNUAL": 150,
    "STUDENT_RENEWED_PREMIUM": 30,
}

# ARS revenue estimate per conversion
PREMIUM_REVENUE = {"annual": 150000, "monthly": 15000}

MAX_COACH_CODE_ATTEMPTS = 10


@dataclass(frozen=True)
class TrainerLevel:
    name: str
    min_points: int
    discount: float
    free_shipping: bool


TRAINER_LEVELS = [
    TrainerLevel("diamond", 2500, 0.15, True),
    TrainerLevel("gold", 1000, 0.10, False),
    TrainerLevel("silver", 300, 0.05, False),
    TrainerLevel("bronze", 0, 0.0, False),
]


class InvalidCoachCodeError(Exception):
    """Raised when no trainer owns the given coach code."""
    pass


class TrainerAlreadyExistsError(Exception):
    """Raised when registering a user who is already a trainer."""
    pass


def calculate_level(points: int) -> TrainerLevel:
    for level in TRAINER_LEVELS:
        if points >= level.min_points:
            return level
    return TRAINER_LEVELS[-1]


def generate_coach_code(display_name: str, rng: Optional[random.Random] = None) -> str:
    """FITAI-XXXX-YYYY: four letters from the name (X-padded) and four random chars."""
    rng = rng or random.Random()
    name_part = re.sub(r"[^A-Z]", "", (display_name or "").upper())[:4].ljust(4, "X")
    alphabet = string.ascii_uppercase + string.digits
    random_part = "".join(rng.choice(alphabet) for _ in range(4))
    return f"FITAI-{name_part}-{random_part}"


class TrainerService:

    def __init__(
        self,
        db: Optional[firestore.Client] = None,
        send_welcome: Optional[Callable[[Dict[str, Any], str], Dict[str, Any]]] = None,
    ):
        self._db = db
        self.send_welcome = send_welcome or send_coach_welcome_email

    @property
    def db(self) -> firestore.Client:
        if self._db is None:
            self._db = get_db()
        return self._db

    def _trainer_ref(self, trainer_id: str):
        return self.db.collection(TRAINERS_COLLECTION).document(trainer_id)

    def get_trainer_by_code(self, coach_code: str) -> Optional[Dict[str, Any]]:
        docs = (
            self.db.collection(TRAINERS_COLLECTION)
            .where("coachCode", "==", (coach_code or "").upper())
            .limit(1)
            .get()
        )
        for doc in docs:
            return {"id": doc.id, **(doc.to_dict() or {})}
        return None

    def recalculate_trainer_level(self, trainer_id: str) -> Optional[TrainerLevel]:
        snap = self._trainer_ref(trainer_id).get()
        if not snap.exists:
            return None

        level = calculate_level((snap.to_dict() or {}).get("rewardPoints") or 0)
        self._trainer_ref(trainer_id).update({
            "rewardLevel": level.name,
            "shopDiscount": level.discount,
            "freeShipping": level.free_shipping,
        })
        logger.info("[TrainerRewards] Trainer %s recalculated to level %s", trainer_id, level.name)
        return level

    def _unique_coach_code(self, display_name: str, rng: Optional[random.Random] = None) -> str:
        code = generate_coach_code(display_name, rng)
        for _ in range(MAX_COACH_CODE_ATTEMPTS):
            if self.get_trainer_by_code(code) is None:
                return code
            logger.info("[Trainers] Coach code %s taken, regenerating", code)
            code = generate_coach_code(display_name, rng)
        # Out of attempts; keep the last candidate
        return code

    def register_as_trainer(
        self,
        user_id: str,
        profile: Dict[str, Any],
        rng: Optional[random.Random] = None,
    ) -> Dict[str, Any]:
        """
        Create trainers/{uid} for a user and mark the user as a trainer.

        Args:
            user_id: User becoming a trainer (also the trainer document id)
            profile: displayName, email, bio, specialties, certifications, photoURL
            rng: Random source for the coach code

        Returns:
            {success, coachCode, trainerData}

        Raises:
            TrainerAlreadyExistsError: If trainers/{uid} already exists
        """
        if self._trainer_ref(user_id).get().exists:
            raise TrainerAlreadyExistsError("Usuario ya es un Trainer")

        display_name = profile.get("displayName") or ""
        coach_code = self._unique_coach_code(display_name or "COACH", rng)
        trainer_data = {
            "userId": user_id,
            "displayName": display_name,
            "coachCode": coach_code,
            "bio": profile.get("bio") or "",
            "specialties": list(profile.get("specialties") or []),
            "certifications": list(profile.get("certifications") or []),
            "photoURL": profile.get("photoURL") or "",
            "studentCount": 0,
            "plan": "free",
            "rewardPoints": 0,
            "rewardLevel": TRAINER_LEVELS[-1].name,
            "shopDiscount": TRAINER_LEVELS[-1].discount,
            "freeShipping": TRAINER_LEVELS[-1].free_shipping,
            "studentReferrals": 0,
            "totalRevenue": 0,
            "rating": 0,
            "isVerified": False,
            "isFeatured": False,
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
        self._trainer_ref(user_id).set(trainer_data)
        self.db.collection(USERS_COLLECTION).document(user_id).set({"role": "trainer"}, merge=True)
        logger.info("[Trainers] Registered trainer %s with code %s", user_id, coach_code)

        email = profile.get("email")
        if not email:
            user_snap = self.db.collection(USERS_COLLECTION).document(user_id).get()
            email = (user_snap.to_dict() or {}).get("email") if user_snap.exists else None

        try:
            self.send_welcome({"email": email, "displayName": display_name}, user_id)
        except Exception as e:
            logger.error("[CoachOnboarding] Error sending welcome to %s: %s", user_id, e)

        return {"success": True, "coachCode": coach_code, "trainerData": trainer_data}

    def link_student_to_coach(self, student_id: str, coach_code: str) -> Dict[str, Any]:
        trainer = self.get_trainer_by_code(coach_code)
        if not trainer:
            raise InvalidCoachCodeError("Código de coach inválido")

        batch = self.db.batch()
        batch.update(self.db.collection(USERS_COLLECTION).document(student_id), {
            "coachId": trainer["id"],
            "joinedCoachAt": firestore.SERVER_TIMESTAMP,
        })
        batch.update(self._trainer_ref(trainer["id"]), {
            "studentCount": firestore.Increment(1),
            "rewardPoints": firestore.Increment(REWARD_POINTS["STUDENT_REGISTERED"]),
        })
        batch.commit()

        self.recalculate_trainer_level(trainer["id"])
        logger.info("Linked student %s to coach %s", student_id, trainer["id"])
        return {
            "success": True,
            "trainerId": trainer["id"],
            "trainerName": trainer.get("displayName"),
        }

    def unlink_student(self, student_id: str, trainer_id: str) -> Dict[str, Any]:
        batch = self.db.batch()
        batch.update(self.db.collection(USERS_COLLECTION).document(student_id), {
            "coachId": None,
            "joinedCoachAt": None,
        })
        batch.update(self._trainer_ref(trainer_id), {
            "studentCount": firestore.Increment(-1),
        })
        batch.commit()
        logger.info("Unlinked student %s from coach %s", student_id, trainer_id)
        return {"success": True}

    def on_user_premium_conversion(
        self,
        before: Dict[str, Any],
        after: Dict[str, Any],
        user_id: str,
    ) -> Optional[Dict[str, Any]]:
        """Reward the coach when a linked student becomes premium."""
        became_premium = not before.get("isPremium") and after.get("isPremium")
        trainer_id = after.get("coachId")
        if not became_premium or not trainer_id:
            return None

        is_annual = after.get("subscriptionPlan") == "annual"
        points = REWARD_POINTS["STUDENT_PREMIUM_ANNUAL" if is_annual else "STUDENT_PREMIUM_MONTHLY"]
        logger.info("[TrainerRewards] User %s became Premium. Coach: %s, Points: %d",
                    user_id, trainer_id, points)

        try:
            self._trainer_ref(trainer_id).update({
                "rewardPoints": firestore.Increment(points),
                "studentReferrals": firestore.Increment(1),
                "totalRevenue": firestore.Increment(
                    PREMIUM_REVENUE["annual" if is_annual else "monthly"]
                ),
            })
            self.recalculate_trainer_level(trainer_id)
        except Exception as e:
            logger.error("[TrainerRewards] Error updating trainer %s: %s", trainer_id, e)
            return {"error": str(e)}
        return {"success": True, "trainerId": trainer_id, "pointsAdded": points}

    def on_student_onboarding_complete(
        self,
        before: Dict[str, Any],
        after: Dict[str, Any],
        user_id: str,
    ) -> Optional[Dict[str, Any]]:
        """Reward the coach when a linked student finishes onboarding."""
        completed = not before.get("onboardingCompleted") and after.get("onboardingCompleted")
        trainer_id = after.get("coachId")
        if not completed or not trainer_id:
            return None

        points = REWARD_POINTS["STUDENT_REGISTERED"] + REWARD_POINTS["STUDENT_COMPLETED_ONBOARDING"]
        logger.info("[TrainerRewards] User %s completed onboarding. Coach: %s", user_id, trainer_id)
        try:
            self._trainer_ref(trainer_id).update({
                "rewardPoints": firestore.Increment(points),
                "studentCount": firestore.Increment(1),
            })
            self.recalculate_trainer_level(trainer_id)
        except Exception as e:
            logger.error("[TrainerRewards] Error updating trainer %s on onboarding: %s", trainer_id, e)
            return {"error": str(e)}
        return {"success": True, "trainerId": trainer_id, "pointsAdded": points}


__all__ = [
    "REWARD_POINTS",
    "TRAINER_LEVELS",
    "TrainerLevel",
    "TrainerService",
    "InvalidCoachCodeError",
    "TrainerAlreadyExistsError",
    "calculate_level",
    "generate_coach_code",
]
