"""Interactive Azure AD sign-in followed by a single authenticated API call."""

__version__ = "0.1.0"
