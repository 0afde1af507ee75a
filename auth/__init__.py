"""
auth — User authentication module.

Provides:
  • JWT token creation & verification
  • Password hashing (bcrypt, offloaded to a worker thread)
  • Server-side sessions referenced by cookie
  • Register / Login API routes
  • ``get_current_user`` / ``get_session_principal`` FastAPI dependencies
"""
