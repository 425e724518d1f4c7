"""
FitAI Backend
=============

Server-side services for the FitAI coaching app.

Components:
- notifications: permission/token lifecycle, FCM sends, scheduled reminders
- users: settings and notification preferences
- trainers: coach/student linking and reward levels
- gdpr: data export and account deletion
- mailer: transactional email via Resend
- exercises: exercise name to video matching
- admin: manual subscription overrides
- api: Flask HTTP endpoints
"""
