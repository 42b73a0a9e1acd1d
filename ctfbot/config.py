import os
from dotenv import load_dotenv

load_dotenv()


def _env_int(*names, default=0):
    for name in names:
        value = os.getenv(name)
        if value:
            return int(value)
    return default


class Config:
    """Bot configuration settings"""

    # Discord settings
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN') or os.getenv('TOKEN')
    DISCORD_GUILD_ID = _env_int('DISCORD_GUILD_ID', 'GUILD_ID')

    # Channels (0 = feature disabled)
    RANKINGS_CHANNEL_ID = _env_int('RANKINGS_CHANNEL')
    GAME_STATS_CHANNEL_ID = _env_int('GAME_STATS_CHANNEL')

    # Redis settings
    REDIS_HOST = os.getenv('REDIS_HOST', '127.0.0.1')
    REDIS_URL = os.getenv('REDIS_URL', f'redis://{REDIS_HOST}:6379')
    USE_REDIS = os.getenv('USE_REDIS') is None  # Any value disables the stats engine

    # Staff message relay endpoint
    RELAY_HOST = os.getenv('HOST', '127.0.0.1')
    RELAY_PORT = _env_int('RELAY_PORT', default=31337)

    # Live game status
    GAME_API_URL = os.getenv('GAME_API_URL', 'http://ctf.rubenwardy.com/api')

    # Stats settings
    STATS_MODES = os.getenv('STATS_MODES', 'ctf_mode_classes,ctf_mode_classic,ctf_mode_nade_fight')
    RANKINGS_UPDATE_MINUTES = _env_int('RANKINGS_UPDATE_MINUTES', default=5)
    GAME_STATS_UPDATE_SECONDS = _env_int('GAME_STATS_UPDATE_SECONDS', default=30)

    # Moderation
    MUTE_ROLE_NAME = os.getenv('MUTE_ROLE_NAME', 'Muterated')

    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'

    @classmethod
    def get_mode_ids(cls):
        """Get configured technical mode ids (empty list = discover from the store)"""
        return [mode.strip() for mode in cls.STATS_MODES.split(',') if mode.strip()]

    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if cls.RELAY_PORT <= 0 or cls.RELAY_PORT > 65535:
            raise ValueError("RELAY_PORT must be between 1 and 65535")
