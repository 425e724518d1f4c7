"""Configuration for the FitAI backend."""

import os

# GCP / Firebase project
PROJECT_ID = os.getenv("GCP_PROJECT_ID", "fitai-personal")
REGION = os.getenv("GCP_REGION", "us-central1")

# Firestore collections
USERS_COLLECTION = "users"
FCM_TOKENS_SUBCOLLECTION = "fcmTokens"
TRAINERS_COLLECTION = "trainers"
ROUTINES_COLLECTION = "routines"
WORKOUTS_COLLECTION = "workouts"
NUTRITION_LOGS_COLLECTION = "nutritionLogs"
GDPR_REQUESTS_COLLECTION = "gdprRequests"
EXERCISES_COLLECTION = "exercises"

# Web push
VAPID_KEY = os.getenv("FIREBASE_VAPID_KEY", "")
SERVICE_WORKER_URL = os.getenv("SERVICE_WORKER_URL", "/firebase-messaging-sw.js")
NOTIFICATION_ICON = "/logo192.png"
NOTIFICATION_BADGE = "/badge.png"
NOTIFICATION_VIBRATE = [100, 50, 100]

# Email (Resend)
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
RESEND_BASE_URL = os.getenv("RESEND_BASE_URL", "https://api.resend.com")
EMAIL_FROM = os.getenv("EMAIL_FROM", "FitAI <onboarding@resend.dev>")
EMAIL_FROM_PARTNER = os.getenv("EMAIL_FROM_PARTNER", "FitAI Partner <onboarding@resend.dev>")
APP_URL = os.getenv("APP_URL", "https://fitai-personal.web.app")

# GDPR
DELETE_CONFIRMATION_PHRASE = "ELIMINAR MI CUENTA"
