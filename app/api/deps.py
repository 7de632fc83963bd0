"""
API Dependencies
Provides authentication and authorization dependencies using ATAMS factory pattern
"""
import hmac
from typing import Optional
from fastapi import Header

from atams.sso import create_atlas_client, create_auth_dependencies
from atams.exceptions import UnauthorizedException
from app.core.config import settings

# Initialize Atlas SSO client using factory
atlas_client = create_atlas_client(settings)

# Create auth dependencies using factory
get_current_user, require_auth, require_min_role_level, require_role_level = create_auth_dependencies(atlas_client)


def require_scanner_key(x_scanner_key: Optional[str] = Header(None)) -> None:
    """Authenticate the card-scanner bridge by its shared key"""
    if not x_scanner_key or not hmac.compare_digest(x_scanner_key, settings.SCANNER_API_KEY):
        raise UnauthorizedException("Invalid scanner key")


# Export for use in endpoints
__all__ = [
    "atlas_client",
    "get_current_user",
    "require_auth",
    "require_min_role_level",
    "require_role_level",
    "require_scanner_key",
]
