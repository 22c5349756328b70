"""
posbot Constants

Shared constants for ESI access and starbase fuel accounting.
"""

# =============================================================================
# ESI Configuration
# =============================================================================

ESI_BASE_URL = "https://esi.evetech.net/latest"
ESI_DATASOURCE = "tranquility"

# =============================================================================
# EVE SSO
# =============================================================================

SSO_TOKEN_URL = "https://login.eveonline.com/v2/oauth/token"
SSO_VERIFY_URL = "https://login.eveonline.com/oauth/verify"

# Scope required to read corporation starbases (Director role also required)
STARBASE_SCOPE = "esi-corporations.read_starbases.v1"

# =============================================================================
# Starbase Fuel
# =============================================================================

# Strontium Clathrates share the fuel bay but are reinforcement reagent, not fuel
TYPE_ID_STRONTIUM = 16_275

# Fuel blocks per hour for a small control tower
SMALL_TOWER_FUEL_PER_HOUR = 10

# Classification breakpoints in days
DEFAULT_DANGER_DAYS = 3
DEFAULT_WARNING_DAYS = 7

# =============================================================================
# Presentation
# =============================================================================

# EVE time is UTC
EVE_TIME_FORMAT = "%A, %Y-%m-%d %H:%M:%S EVE time"

# Image server render for control tower types
TYPE_RENDER_URL = "https://images.evetech.net/types/{type_id}/render?size=128"
