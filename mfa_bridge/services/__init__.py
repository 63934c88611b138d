"""Business logic services for the homegrown login with Descope MFA."""

from mfa_bridge.services.credential_service import CredentialGate, IdentityStore, InMemoryIdentityStore
from mfa_bridge.services.descope_service import DescopeMFAProvider, MFAProvider, ProviderIdentity
from mfa_bridge.services.login_service import LoginOrchestrator, LoginState
from mfa_bridge.services.token_service import SessionClaims, TokenCodec

__all__ = [
    "CredentialGate",
    "IdentityStore",
    "InMemoryIdentityStore",
    "DescopeMFAProvider",
    "MFAProvider",
    "ProviderIdentity",
    "LoginOrchestrator",
    "LoginState",
    "SessionClaims",
    "TokenCodec",
]
