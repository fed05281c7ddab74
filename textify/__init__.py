# Textify backend: phone verification and profile API
__version__ = "1.0.0"
