import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '8080'))
    # Comma separated, or '*' for any origin
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Round timer (milliseconds); also shown to clients as the nominal round length
    ROUND_DURATION_MS = int(os.environ.get('ROUND_DURATION_MS', '30000'))
    CHALLENGE_WORD_COUNT = int(os.environ.get('CHALLENGE_WORD_COUNT', '12'))
    CHALLENGE_LOCALE = os.environ.get('CHALLENGE_LOCALE', 'en_US')
    # When false, start-game is only honoured while the party is ready
    ALLOW_FORCED_START = os.environ.get('ALLOW_FORCED_START', 'true').lower() == 'true'
