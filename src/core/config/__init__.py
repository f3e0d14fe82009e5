"""
Configuration subsystem.

Static vs Dynamic Configuration
-------------------------------
**Static (Config):**
- Loaded from environment variables at startup (python-dotenv)
- Database URL and pool settings, environment, logging flags

**Balance (ConfigManager):**
- Loaded from YAML files under ``config/``
- Experience and item rates, success curve, offline accrual model
- In-memory overrides via ``ConfigManager.set()``

Usage
-----
```python
from src.core.config import Config, ConfigManager

db_url = Config.DATABASE_URL

ConfigManager.initialize()
mining_rate = ConfigManager.get("skills.live_rates.mining", 30)
```
"""

from src.core.config.config import Config, Environment
from src.core.config.manager import (
    ConfigInitializationError,
    ConfigManager,
    ConfigManagerError,
)

__all__ = [
    "Config",
    "Environment",
    "ConfigManager",
    "ConfigManagerError",
    "ConfigInitializationError",
]
