"""Admin backend for the Youkhana rental storefront.

Role-based user management, invitation onboarding, audit logging and the
rental catalog, all persisted in a shared key-value store.
"""

__version__ = "0.1.0"
