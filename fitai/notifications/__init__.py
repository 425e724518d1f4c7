"""
Push notifications.

- lifecycle: permission/token lifecycle behind capability interfaces
- session: per-user push state built on the lifecycle manager
- token_store: Firestore persistence of FCM tokens
- sender / templates: server-side FCM sends
- reminders: scheduled workout reminders
"""
