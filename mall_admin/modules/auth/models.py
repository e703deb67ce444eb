# Session authentication against admin_users
# No tables of its own. Login reads admin_users (email, password_hash, is_active)
# and stamps admin_users.last_login_at; identities resolve roles and permissions
# through admin_user_roles, admin_roles, admin_role_permissions and admin_permissions.

"""
Session cookie (see core/session.py):
- name: settings.session_cookie_name (default "admin_session")
- value: HS256-signed {userId, email, fullName, expiresAt}; expiresAt is epoch milliseconds
- httponly, samesite=lax, secure in production, path "/", max-age 7 days

A cookie that is missing, tampered with, or past expiresAt is treated as no session.
"""
