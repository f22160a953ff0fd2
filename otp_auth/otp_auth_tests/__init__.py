"""
user_service tests

Covers the OTP-gated sign-up flow, sign-in, session tokens and the auth gate
guarding ``/user/detail``. Run with ``pytest`` from the repository root.
"""
