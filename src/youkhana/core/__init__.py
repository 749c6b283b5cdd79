"""Core domain: errors, RBAC, auth types and input schemas."""
