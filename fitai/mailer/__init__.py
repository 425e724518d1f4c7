"""Transactional email via Resend."""
