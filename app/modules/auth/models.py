# Supabase Auth
# Credentials never touch this service's tables - Supabase Auth handles:
# - User registration (auth.users table)
# - Password hashing (bcrypt) and verification
# - JWT token generation and validation

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users

Each auth user gets a row in user_profiles (see app/modules/users/models.py)
holding the display name and the application role (admin | user). The
on_auth_user_created trigger writes it in the sign-up transaction.
"""
