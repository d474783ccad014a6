"""auth/ -- GitHub OAuth flow and cookie-session access.

Layer rule: auth/ may import from core/ (settings) and third-party libraries.
It does NOT import from api/ or web/. api/ and web/ import from auth/, not the
other way around.
"""
