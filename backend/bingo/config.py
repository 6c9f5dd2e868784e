import os

_DEFAULT_ORIGINS = ','.join([
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
    "https://discord.com",
    "https://ptb.discord.com",
    "https://canary.discord.com",
])


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    PORT = int(os.environ.get('PORT', '8080'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    ALLOWED_ORIGINS = [o.strip() for o in os.environ.get('ALLOWED_ORIGINS', _DEFAULT_ORIGINS).split(',') if o.strip()]
    # Discord Activity OAuth2 (token exchange only)
    DISCORD_CLIENT_ID = os.environ.get('VITE_DISCORD_CLIENT_ID') or os.environ.get('DISCORD_CLIENT_ID', '')
    DISCORD_CLIENT_SECRET = os.environ.get('DISCORD_CLIENT_SECRET', '')
    DISCORD_API_BASE = os.environ.get('DISCORD_API_BASE', 'https://discord.com/api')
    TOKEN_EXCHANGE_TIMEOUT_SEC = int(os.environ.get('TOKEN_EXCHANGE_TIMEOUT_SEC', '10'))
    # Built browser client, served as static files when present
    PUBLIC_DIR = os.environ.get('PUBLIC_DIR') or os.path.abspath(
        os.path.join(os.path.dirname(__file__), '..', 'public')
    )
    # Defaults applied to probe/join envelopes that omit them
    DEFAULT_GAME_ID = os.environ.get('DEFAULT_GAME_ID', 'default')
    DEFAULT_PLAYER_NAME = os.environ.get('DEFAULT_PLAYER_NAME', 'Anonymous')
