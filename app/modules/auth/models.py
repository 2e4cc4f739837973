# Supabase Auth
# This module uses Supabase's built-in authentication system
# Signup creates the auth.users row; a database trigger then inserts the
# matching profiles, user_status and Free subscription rows.

"""
Supabase Auth provides:
- auth.sign_up() - Register new users (used by the debug_register script)
- auth.sign_in_with_password() - Authenticate admins
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout

Admin rights are not stored in auth metadata: a user is a superadmin when
their profiles.role equals settings.admin_role.
"""
